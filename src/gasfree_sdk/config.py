"""Network configuration records for GasFree deployments.

Each supported TRON network is described by an immutable
:class:`NetworkConfig`. Signers, the proxy-address deriver and the API
clients take one of these records explicitly.
"""

from dataclasses import dataclass
from typing import Dict


# EIP-712 domain identity of the GasFree controller contract
GASFREE_DOMAIN_NAME = "GasFreeController"
GASFREE_DOMAIN_VERSION = "V1.0.0"

# Beacon proxy creation code, up to the compiler metadata hash. The
# metadata hash differs between deployments, the rest is identical.
_BEACON_PROXY_CODE_PREFIX = (
    "60a06040908082526103e5803803809161001982856101d6565b83398101908281830312"
    "6101d2576100308161020d565b91602091828101519060018060401b0382116101d25701"
    "81601f820112156101d25780519061005e8261022a565b9261006b875194856101d6565b"
    "8284528483830101116101d25783905f5b8381106101be5750505f9183010152823b1561"
    "017a5780516100b3575b50506080525161013c90816102a982396080518160180152f35b"
    "8351635c60da1b60e01b81529082826004816001600160a01b0388165afa918215610170"
    "575f9261012d575b50905f80838561011c9695519101845af4903d15610124573d610101"
    "8161022a565b9061010e885192836101d6565b81525f81943d92013e610245565b505f80"
    "610099565b60609250610245565b90918382813d8311610169575b61014481836101d656"
    "5b810103126101665750905f8061015d61011c959461020d565b939450506100df565b80"
    "fd5b503d61013a565b85513d5f823e3d90fd5b835162461bcd60e51b8152600481018390"
    "52601b60248201527f626561636f6e2073686f756c64206265206120636f6e7472616374"
    "00000000006044820152606490fd5b81810183015185820184015285920161007c565b5f"
    "80fd5b601f909101601f19168101906001600160401b038211908210176101f957604052"
    "565b634e487b7160e01b5f52604160045260245ffd5b516001600160a81b038116810361"
    "01d2576001600160a01b031690565b6001600160401b0381116101f957601f01601f1916"
    "60200190565b9061026c575080511561025a57805190602001fd5b604051630a12f52160"
    "e11b8152600490fd5b8151158061029f575b61027d575090565b604051639996b31560e0"
    "1b81526001600160a01b039091166004820152602490fd5b50803b1561027556fe608060"
    "40819052635c60da1b60e01b81526020816004817f000000000000000000000000000000"
    "00000000000000000000000000000000006001600160a01b03165afa9081156100ae575f"
    "91610056575f6100e8565b6020903d82116100a6575b601f8201601f1916810167ffffff"
    "ffffffffff8111828210176100925761008c9350604052016100b9565b5f610050565b63"
    "4e487b7160e01b84526041600452602484fd5b3d9150610061565b6040513d5f823e3d90"
    "fd5b602090607f1901126100e4576080516001600160a81b03811681036100e457600160"
    "0160a01b031690565b5f80fd5b5f808092368280378136915af43d82803e15610102573d"
    "90f35b3d90fdfea26474726f6e58221220"
)
_BEACON_PROXY_CODE_SUFFIX = "64736f6c63430008140033"


def _beacon_proxy_creation_code(metadata_hash: str) -> str:
    return "0x" + _BEACON_PROXY_CODE_PREFIX + metadata_hash + _BEACON_PROXY_CODE_SUFFIX


@dataclass(frozen=True)
class NetworkConfig:
    """Constants of one GasFree deployment."""

    name: str
    """Network segment used in relay API paths ("nile", "tron")."""

    chain_id: int
    """Chain ID bound into every signature."""

    controller_address: str
    """GasFree controller; verifies permits and deploys proxy accounts."""

    beacon_address: str
    """Beacon the proxy accounts delegate to."""

    creation_code: str
    """Hex creation bytecode of the proxy account."""

    api_base_url: str
    """Relay API origin."""

    tron_api_url: str
    """TronGrid origin for ledger calls."""

    usdt_address: str
    """USDT (TRC-20) contract on this network."""

    domain_name: str = GASFREE_DOMAIN_NAME
    domain_version: str = GASFREE_DOMAIN_VERSION

    @property
    def verifying_contract(self) -> str:
        """Contract that validates permit signatures."""
        return self.controller_address


NILE = NetworkConfig(
    name="nile",
    chain_id=3448148188,  # 0xcd8690dc
    controller_address="THQGuFzL87ZqhxkgqYEryRAd7gqFqL5rdc",
    beacon_address="TLtCGmaxH3PbuaF6kbybwteZcHptEdgQGC",
    creation_code=_beacon_proxy_creation_code(
        "19fba3a984dfef08920adc4d0e531dbd369df1dec237bfb02ce668f5d8e27040"
    ),
    api_base_url="https://open-test.gasfree.io",
    tron_api_url="https://nile.trongrid.io",
    usdt_address="TXYZopYRdj2D9XRtbG411XZZ3kM5VkAeBf",
)

TRON_MAINNET = NetworkConfig(
    name="tron",
    chain_id=728126428,  # 0x2b6653dc
    controller_address="TFFAMQLZybALaLb4uxHA9RBE7pxhUAjF3U",
    beacon_address="TSP9UW6FQhT76XD2jWA6ipGMx3yGbjDffP",
    creation_code=_beacon_proxy_creation_code(
        "309a2919b7a1b203f1a7a1c544a7d671bb94b0adf8a39e4c9b6eeb6d03939ffe"
    ),
    api_base_url="https://open.gasfree.io",
    tron_api_url="https://api.trongrid.io",
    usdt_address="TR7NHqjeKQxGTCi8q8ZY4pL8otSzgjLj6t",
)

NETWORKS: Dict[str, NetworkConfig] = {
    NILE.name: NILE,
    TRON_MAINNET.name: TRON_MAINNET,
}


def get_network_config(name: str) -> NetworkConfig:
    """Look up a network by its relay path segment.

    Args:
        name: "nile" or "tron"

    Returns:
        The matching NetworkConfig

    Raises:
        ValueError: If the network is unknown
    """
    try:
        return NETWORKS[name]
    except KeyError:
        raise ValueError(
            f"Unknown network: {name}. Expected one of: {', '.join(sorted(NETWORKS))}"
        ) from None
