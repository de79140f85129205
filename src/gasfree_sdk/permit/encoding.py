"""EIP-712 struct encoding for GasFree permits.

Field types form a closed set (:class:`FieldType`). Each value is encoded
into exactly one 32-byte word, in the order the schema declares:

- ``address``: 20-byte account id, left-padded with zeros
- ``uint256``: big-endian integer
- ``string``: keccak256 of the UTF-8 bytes
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Tuple

from ..errors import EncodingMismatch
from .address import to_address_bytes
from .hashing import WORD_SIZE, hash_text, keccak256, pad32, uint256_word
from .types import (
    EIP712_DOMAIN_TYPES,
    PERMIT_TRANSFER_TYPES,
    SigningDomain,
    TransferAuthorization,
)


# Marks a structured-data digest (EIP-191 version 0x01)
STRUCTURED_DATA_PREFIX = b"\x19\x01"


class FieldType(Enum):
    """Field types used by GasFree structs."""

    ADDRESS = "address"
    UINT256 = "uint256"
    STRING = "string"


@dataclass(frozen=True)
class StructField:
    name: str
    type: FieldType


@dataclass(frozen=True)
class StructSchema:
    """A named struct with ordered, typed fields."""

    name: str
    fields: Tuple[StructField, ...]

    @classmethod
    def from_types(cls, types: Mapping[str, List[Dict[str, str]]]) -> "StructSchema":
        """Build a schema from a single-entry EIP-712 ``types`` mapping.

        Raises:
            EncodingMismatch: If the mapping holds more than one struct or
                a field type outside :class:`FieldType`
        """
        if len(types) != 1:
            raise EncodingMismatch(f"Expected exactly one struct, got {list(types)}")
        name, fields = next(iter(types.items()))
        try:
            parsed = tuple(StructField(f["name"], FieldType(f["type"])) for f in fields)
        except ValueError as exc:
            raise EncodingMismatch(f"Unsupported field type in {name}: {exc}") from exc
        return cls(name=name, fields=parsed)

    def encode_type(self) -> str:
        """Canonical type string, e.g. ``PermitTransfer(address token,...)``."""
        members = ",".join(f"{f.type.value} {f.name}" for f in self.fields)
        return f"{self.name}({members})"

    def type_hash(self) -> bytes:
        return hash_text(self.encode_type())


EIP712_DOMAIN_SCHEMA = StructSchema.from_types(EIP712_DOMAIN_TYPES)
PERMIT_TRANSFER_SCHEMA = StructSchema.from_types(PERMIT_TRANSFER_TYPES)


def encode_value(field_type: FieldType, value: Any) -> bytes:
    """Encode one field value into a 32-byte word.

    Raises:
        InvalidAmount: For a uint256 that is negative or too large
        InvalidAddress: For an address that cannot be parsed
        EncodingMismatch: For a value of the wrong kind
    """
    if field_type is FieldType.ADDRESS:
        return pad32(to_address_bytes(value))
    if field_type is FieldType.UINT256:
        return uint256_word(value)
    if field_type is FieldType.STRING:
        if not isinstance(value, str):
            raise EncodingMismatch(f"Expected a string, got {type(value).__name__}")
        return hash_text(value)
    raise EncodingMismatch(f"Unhandled field type: {field_type}")


def encode_data(schema: StructSchema, values: Mapping[str, Any]) -> bytes:
    """Encode ``typeHash || word(field_1) || ... || word(field_n)``.

    Raises:
        EncodingMismatch: If values are missing or unexpected
    """
    expected = [f.name for f in schema.fields]
    missing = [name for name in expected if name not in values]
    extra = [name for name in values if name not in expected]
    if missing or extra:
        raise EncodingMismatch(
            f"{schema.name} values do not match schema (missing={missing}, extra={extra})"
        )

    words = [schema.type_hash()]
    for field in schema.fields:
        words.append(encode_value(field.type, values[field.name]))

    encoded = b"".join(words)
    assert len(encoded) == WORD_SIZE * (len(schema.fields) + 1)
    return encoded


def hash_struct(schema: StructSchema, values: Mapping[str, Any]) -> bytes:
    return keccak256(encode_data(schema, values))


def domain_separator(domain: SigningDomain) -> bytes:
    """EIP-712 domain separator of a signing domain."""
    return hash_struct(EIP712_DOMAIN_SCHEMA, domain.to_message())


def permit_struct_hash(authorization: TransferAuthorization) -> bytes:
    """EIP-712 struct hash of a ``PermitTransfer``."""
    return hash_struct(PERMIT_TRANSFER_SCHEMA, authorization.to_message())


def typed_data_digest(separator: bytes, struct_hash: bytes) -> bytes:
    """Final digest to sign: keccak256(0x1901 || separator || struct_hash)."""
    if len(separator) != WORD_SIZE or len(struct_hash) != WORD_SIZE:
        raise EncodingMismatch("Domain separator and struct hash must be 32 bytes each")
    return keccak256(STRUCTURED_DATA_PREFIX + separator + struct_hash)
