"""Permit types for GasFree transfers.

User-facing types for transfer authorization signing, plus the wire
format the relay API expects on submit.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping

from ..config import NetworkConfig
from ..errors import InvalidAmount


# Only supported permit version
PERMIT_VERSION = 1


@dataclass(frozen=True)
class SigningDomain:
    """EIP-712 domain that binds a signature to one deployment."""

    name: str
    version: str
    chain_id: int
    verifying_contract: str
    """Controller contract address (base58 or hex)."""

    @classmethod
    def for_network(cls, network: NetworkConfig) -> "SigningDomain":
        """Domain of the GasFree controller on a network."""
        return cls(
            name=network.domain_name,
            version=network.domain_version,
            chain_id=network.chain_id,
            verifying_contract=network.verifying_contract,
        )

    def to_message(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "chainId": self.chain_id,
            "verifyingContract": self.verifying_contract,
        }


@dataclass(frozen=True)
class TransferAuthorization:
    """Transfer intent to be signed by the user."""

    token: str
    """TRC-20 contract being moved."""

    service_provider: str
    """Relayer allowed to execute the transfer."""

    user: str
    """Authorizing account (owner of the proxy account)."""

    receiver: str
    """Destination address."""

    value: int
    """Amount in the token's smallest unit."""

    max_fee: int
    """Upper bound on the fee the relayer may deduct."""

    deadline: int
    """Unix timestamp (seconds) after which the authorization is void."""

    version: int
    """Permit version, currently always 1."""

    nonce: int
    """Current nonce of the user's proxy account."""

    def to_message(self) -> Dict[str, Any]:
        """Field values keyed by their EIP-712 names, in declaration order."""
        return {
            "token": self.token,
            "serviceProvider": self.service_provider,
            "user": self.user,
            "receiver": self.receiver,
            "value": self.value,
            "maxFee": self.max_fee,
            "deadline": self.deadline,
            "version": self.version,
            "nonce": self.nonce,
        }

    @classmethod
    def from_message(cls, message: Mapping[str, Any]) -> "TransferAuthorization":
        """Build an authorization from camelCase fields (wire or EIP-712 message).

        Integer fields may be JSON numbers or decimal strings.
        """
        return cls(
            token=message["token"],
            service_provider=message["serviceProvider"],
            user=message["user"],
            receiver=message["receiver"],
            value=_as_int(message["value"], "value"),
            max_fee=_as_int(message["maxFee"], "maxFee"),
            deadline=_as_int(message["deadline"], "deadline"),
            version=_as_int(message["version"], "version"),
            nonce=_as_int(message["nonce"], "nonce"),
        )


@dataclass(frozen=True)
class SignedTransferAuthorization(TransferAuthorization):
    """Transfer authorization with signature."""

    signature: str
    """65-byte r || s || v signature as hex, without 0x prefix."""

    @property
    def authorization(self) -> TransferAuthorization:
        fields = asdict(self)
        fields.pop("signature")
        return TransferAuthorization(**fields)

    def to_submit_payload(self, request_id: str) -> Dict[str, Any]:
        """Body for ``POST /api/v1/gasfree/submit``."""
        return {
            "requestId": request_id,
            **self.to_message(),
            "sig": self.signature,
        }

    @classmethod
    def from_submit_payload(cls, payload: Mapping[str, Any]) -> "SignedTransferAuthorization":
        """Parse a submit body back into a signed authorization."""
        auth = TransferAuthorization.from_message(payload)
        return cls(**asdict(auth), signature=payload["sig"])


@dataclass(frozen=True)
class ExternalSignerHashes:
    """Intermediate hashes for signers that sign a digest directly."""

    domain_separator: str
    struct_hash: str
    final_digest: str
    """keccak256(0x1901 || domain_separator || struct_hash), 0x-prefixed hex."""


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise InvalidAmount(f"Invalid {field}: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isascii() and value.isdigit():
        return int(value, 10)
    raise InvalidAmount(f"Invalid {field}: {value!r}")


# EIP-712 types, in the shape eth_account and wallet SDKs expect
EIP712_DOMAIN_TYPES = {
    "EIP712Domain": [
        {"name": "name", "type": "string"},
        {"name": "version", "type": "string"},
        {"name": "chainId", "type": "uint256"},
        {"name": "verifyingContract", "type": "address"},
    ],
}

PERMIT_TRANSFER_TYPES = {
    "PermitTransfer": [
        {"name": "token", "type": "address"},
        {"name": "serviceProvider", "type": "address"},
        {"name": "user", "type": "address"},
        {"name": "receiver", "type": "address"},
        {"name": "value", "type": "uint256"},
        {"name": "maxFee", "type": "uint256"},
        {"name": "deadline", "type": "uint256"},
        {"name": "version", "type": "uint256"},
        {"name": "nonce", "type": "uint256"},
    ],
}
