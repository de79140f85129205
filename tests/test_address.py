"""Tests for TRON addresses and proxy address derivation."""

import pytest

from gasfree_sdk.config import NETWORKS, NILE, TRON_MAINNET, get_network_config
from gasfree_sdk.errors import InvalidAddress
from gasfree_sdk.permit import (
    derive_proxy_address,
    derive_proxy_address_for_network,
    is_tron_address,
    to_address_bytes,
    to_base58_address,
    to_hex_address,
)
from gasfree_sdk.permit.address import proxy_init_code_hash


TEST_ADDRESS = "TWbNxh3feKxRTFEDVk3fn9z3EznSuWvWMu"
TEST_ACCOUNT_ID = "e239cdc5fbe977a8a141b72194d3cf8c41bc5bc6"


class TestAddressConversion:
    """Tests for address parsing and formatting."""

    @pytest.mark.parametrize(
        "address",
        [
            TEST_ADDRESS,
            "41" + TEST_ACCOUNT_ID,
            "0x" + TEST_ACCOUNT_ID,
            "0x" + TEST_ACCOUNT_ID.upper(),
            TEST_ACCOUNT_ID,
            bytes.fromhex(TEST_ACCOUNT_ID),
            bytes.fromhex("41" + TEST_ACCOUNT_ID),
        ],
    )
    def test_accepted_forms(self, address):
        """Test that every accepted form parses to the same account id."""
        assert to_address_bytes(address).hex() == TEST_ACCOUNT_ID
        assert to_base58_address(address) == TEST_ADDRESS

    @pytest.mark.parametrize(
        "base58,account_id",
        [
            (NILE.usdt_address, "eca9bc828a3005b9a3b909f2cc5c2a54794de05f"),
            (NILE.controller_address, "518688fbb39ccf1253f2b1217679fbe316329288"),
            (TRON_MAINNET.usdt_address, "a614f803b6fd780986a42c78ec9c7f77e6ded13c"),
            ("TMDKznuDWaZwfZHcM61FVFstyYNmK6Njk1", "7b550beadccf4c92b8b4772a993e34f5afaa6eb6"),
        ],
    )
    def test_known_addresses(self, base58, account_id):
        """Test conversion of well-known addresses."""
        assert to_address_bytes(base58).hex() == account_id
        assert to_base58_address("41" + account_id) == base58

    def test_to_hex_address_is_checksummed(self):
        """Test the 0x form used for ABI encoding."""
        hex_address = to_hex_address(TEST_ADDRESS)

        assert hex_address.lower() == "0x" + TEST_ACCOUNT_ID
        assert hex_address != hex_address.lower()

    @pytest.mark.parametrize(
        "address",
        [
            "",
            "invalid",
            "TWbNxh3feKxRTFEDVk3fn9z3EznSuWvWMv",  # bad checksum
            "0x1234",
            "42" + TEST_ACCOUNT_ID,  # wrong prefix byte
            b"\x00" * 19,
            None,
        ],
    )
    def test_invalid_addresses(self, address):
        """Test that unparseable addresses raise InvalidAddress."""
        with pytest.raises(InvalidAddress):
            to_address_bytes(address)

    def test_invalid_address_is_value_error(self):
        """Test that InvalidAddress can be caught as ValueError."""
        with pytest.raises(ValueError):
            to_base58_address("invalid")

    def test_is_tron_address(self):
        """Test base58 address detection."""
        assert is_tron_address(TEST_ADDRESS) is True
        assert is_tron_address("TWbNxh3feKxRTFEDVk3fn9z3EznSuWvWMv") is False
        assert is_tron_address("0x" + TEST_ACCOUNT_ID) is False
        assert is_tron_address("") is False


class TestProxyAddress:
    """Tests for GasFree proxy address derivation."""

    def test_nile_proxy_address(self):
        """Test the proxy address of the test account on Nile."""
        proxy = derive_proxy_address_for_network(TEST_ADDRESS, NILE)

        assert proxy == "TSuuhxsJom3QFr983tfH5PucfgQ4unLfKM"
        assert to_address_bytes(proxy).hex() == "b9da7419a7d0c3537cca93f1b93efbc7d8042ffc"

    def test_mainnet_proxy_address(self):
        """Test the proxy address of the test account on mainnet."""
        proxy = derive_proxy_address_for_network(TEST_ADDRESS, TRON_MAINNET)

        assert proxy == "TKnhFmJ2vLnse6oobW75dY78JRfoRSRkqe"
        assert to_address_bytes(proxy).hex() == "6bb444628301bcc463e315a5c7c3a58cd0ceaf18"

    @pytest.mark.parametrize(
        "network,expected",
        [
            (NILE, "7f5e5bea993c9b32b770a0fbec150077ec91aea47b11e48168c40c5d8469e18c"),
            (TRON_MAINNET, "da4fc42905821ca088322fa62d47aa1c3688cf36a62780e391f40b6a6418f3df"),
        ],
        ids=["nile", "tron"],
    )
    def test_init_code_hash(self, network, expected):
        """Test the hash of creation code plus constructor arguments."""
        init_code_hash = proxy_init_code_hash(
            TEST_ADDRESS, network.beacon_address, network.creation_code
        )

        assert init_code_hash.hex() == expected

    def test_deterministic(self):
        """Test that derivation is a pure function of its inputs."""
        first = derive_proxy_address_for_network(TEST_ADDRESS, NILE)
        second = derive_proxy_address_for_network("0x" + TEST_ACCOUNT_ID, NILE)

        assert first == second

    def test_explicit_constants_match_network(self):
        """Test the explicit form against the network shortcut."""
        proxy = derive_proxy_address(
            TEST_ADDRESS,
            NILE.controller_address,
            NILE.beacon_address,
            bytes.fromhex(NILE.creation_code[2:]),
        )

        assert proxy == derive_proxy_address_for_network(TEST_ADDRESS, NILE)

    def test_different_users_different_proxies(self):
        """Test that a one-bit change in the user gives an unrelated proxy."""
        flipped = bytearray.fromhex(TEST_ACCOUNT_ID)
        flipped[-1] ^= 0x01

        original = to_address_bytes(derive_proxy_address_for_network(TEST_ADDRESS, NILE))
        changed = to_address_bytes(derive_proxy_address_for_network(bytes(flipped), NILE))

        assert original != changed
        differing_bits = sum(bin(a ^ b).count("1") for a, b in zip(original, changed))
        assert differing_bits > 40

    def test_each_constant_changes_the_proxy(self):
        """Test that controller, beacon and creation code all feed the address."""
        base = derive_proxy_address(
            TEST_ADDRESS, NILE.controller_address, NILE.beacon_address, NILE.creation_code
        )

        assert base != derive_proxy_address(
            TEST_ADDRESS, TRON_MAINNET.controller_address, NILE.beacon_address, NILE.creation_code
        )
        assert base != derive_proxy_address(
            TEST_ADDRESS, NILE.controller_address, TRON_MAINNET.beacon_address, NILE.creation_code
        )
        assert base != derive_proxy_address(
            TEST_ADDRESS, NILE.controller_address, NILE.beacon_address, TRON_MAINNET.creation_code
        )

    def test_invalid_user(self):
        """Test that a bad user address raises InvalidAddress."""
        with pytest.raises(InvalidAddress):
            derive_proxy_address_for_network("invalid", NILE)


class TestNetworkConfig:
    """Tests for network records."""

    def test_lookup(self):
        """Test looking up networks by name."""
        assert get_network_config("nile") is NILE
        assert get_network_config("tron") is TRON_MAINNET
        assert set(NETWORKS) == {"nile", "tron"}

    def test_unknown_network(self):
        """Test that an unknown name raises ValueError."""
        with pytest.raises(ValueError, match="Unknown network"):
            get_network_config("shasta")

    def test_records_are_immutable(self):
        """Test that network records cannot be modified."""
        with pytest.raises(AttributeError):
            NILE.chain_id = 1

    def test_creation_codes_differ_only_in_metadata(self):
        """Test that both deployments share the proxy code up to its metadata hash."""
        nile_code = NILE.creation_code
        mainnet_code = TRON_MAINNET.creation_code

        assert len(nile_code) == len(mainnet_code)
        differing = [i for i, (a, b) in enumerate(zip(nile_code, mainnet_code)) if a != b]
        assert differing
        assert differing[-1] - differing[0] < 64

    def test_chain_ids(self):
        """Test the chain ids used in the signing domain."""
        assert NILE.chain_id == 3448148188
        assert TRON_MAINNET.chain_id == 728126428
        assert NILE.verifying_contract == NILE.controller_address
