"""TRON addresses and deterministic GasFree proxy addresses.

A TRON address is ``0x41 || account_id`` (21 bytes) shown as base58check
("T..."). The 20-byte account id is what goes into ABI words and hashes.

The GasFree proxy account of a user is deployed by the controller with
CREATE2, so its address is known before deployment:

    salt         = pad32(user)
    initData     = selector("initialize(address)") || pad32(user)
    initCodeHash = keccak(creationCode || abi.encode(beacon, initData))
    address      = keccak(0x41 || controller || salt || initCodeHash)[12:]
"""

from typing import TYPE_CHECKING, Union

import base58
from eth_abi import encode
from eth_utils import to_checksum_address

from ..errors import InvalidAddress
from .hashing import function_selector, keccak256, pad32

if TYPE_CHECKING:
    from ..config import NetworkConfig


TRON_ADDRESS_PREFIX = b"\x41"

# CREATE2 on TRON hashes 0x41 where the EVM uses 0xff
CREATE2_PREFIX = TRON_ADDRESS_PREFIX

PROXY_INITIALIZER = "initialize(address)"


def to_address_bytes(address: Union[str, bytes]) -> bytes:
    """Parse an address into its 20-byte account id.

    Accepts base58check ("T..."), 41-prefixed hex (42 hex chars),
    0x-prefixed or bare 20-byte hex, and raw 20- or 21-byte values.

    Raises:
        InvalidAddress: If the address cannot be parsed
    """
    if isinstance(address, (bytes, bytearray)):
        raw = bytes(address)
        if len(raw) == 21 and raw[:1] == TRON_ADDRESS_PREFIX:
            return raw[1:]
        if len(raw) == 20:
            return raw
        raise InvalidAddress(f"Invalid address bytes of length {len(raw)}")

    if not isinstance(address, str) or not address:
        raise InvalidAddress(f"Invalid address: {address!r}")

    if address.startswith("T") and len(address) == 34:
        try:
            decoded = base58.b58decode_check(address)
        except ValueError as exc:
            raise InvalidAddress(f"Invalid base58 address: {address}") from exc
        if len(decoded) != 21 or decoded[:1] != TRON_ADDRESS_PREFIX:
            raise InvalidAddress(f"Not a TRON address: {address}")
        return decoded[1:]

    hex_part = address[2:] if address.lower().startswith("0x") else address
    try:
        raw = bytes.fromhex(hex_part)
    except ValueError as exc:
        raise InvalidAddress(f"Invalid address: {address}") from exc
    if len(raw) == 21 and raw[:1] == TRON_ADDRESS_PREFIX:
        return raw[1:]
    if len(raw) == 20:
        return raw
    raise InvalidAddress(f"Invalid address: {address}")


def to_base58_address(address: Union[str, bytes]) -> str:
    """Convert any accepted address form to base58check ("T...")."""
    account_id = to_address_bytes(address)
    return base58.b58encode_check(TRON_ADDRESS_PREFIX + account_id).decode("ascii")


def to_hex_address(address: Union[str, bytes]) -> str:
    """Convert any accepted address form to a checksummed 0x address."""
    return to_checksum_address("0x" + to_address_bytes(address).hex())


def is_tron_address(value: str) -> bool:
    """Check whether a string is a valid base58check TRON address."""
    if not isinstance(value, str) or not value.startswith("T"):
        return False
    try:
        to_address_bytes(value)
    except InvalidAddress:
        return False
    return True


def _code_bytes(creation_bytecode: Union[str, bytes]) -> bytes:
    if isinstance(creation_bytecode, (bytes, bytearray)):
        return bytes(creation_bytecode)
    code = creation_bytecode[2:] if creation_bytecode.startswith("0x") else creation_bytecode
    return bytes.fromhex(code)


def proxy_init_code_hash(
    user_address: Union[str, bytes],
    beacon_address: Union[str, bytes],
    creation_bytecode: Union[str, bytes],
) -> bytes:
    """Hash of the proxy's creation code plus its constructor arguments."""
    init_data = function_selector(PROXY_INITIALIZER) + pad32(to_address_bytes(user_address))
    encoded_args = encode(["address", "bytes"], [to_hex_address(beacon_address), init_data])
    return keccak256(_code_bytes(creation_bytecode) + encoded_args)


def derive_proxy_address(
    user_address: Union[str, bytes],
    controller_address: Union[str, bytes],
    beacon_address: Union[str, bytes],
    creation_bytecode: Union[str, bytes],
) -> str:
    """Compute the GasFree proxy account address of a user.

    Pure function of its inputs; no network access and no deployment needed.

    Args:
        user_address: The user's externally-owned address
        controller_address: GasFree controller (the CREATE2 deployer)
        beacon_address: Beacon passed to the proxy constructor
        creation_bytecode: Proxy creation code (hex string or bytes)

    Returns:
        Proxy account address in base58check form

    Raises:
        InvalidAddress: If one of the addresses cannot be parsed
    """
    salt = pad32(to_address_bytes(user_address))
    init_code_hash = proxy_init_code_hash(user_address, beacon_address, creation_bytecode)
    raw = keccak256(
        CREATE2_PREFIX + to_address_bytes(controller_address) + salt + init_code_hash
    )
    return to_base58_address(raw[12:])


def derive_proxy_address_for_network(
    user_address: Union[str, bytes], network: "NetworkConfig"
) -> str:
    """Compute a user's proxy account address with a network's constants."""
    return derive_proxy_address(
        user_address,
        network.controller_address,
        network.beacon_address,
        network.creation_code,
    )
