"""Keccak-256 hashing and 32-byte word helpers.

All structural hashes in the SDK are built from 32-byte words:
- addresses are right-aligned and zero-padded on the left
- integers are big-endian
- strings are hashed first and the hash is used as the word
"""

from eth_utils import keccak

from ..errors import EncodingMismatch, InvalidAmount


WORD_SIZE = 32
UINT256_MAX = 2**256 - 1


def keccak256(data: bytes) -> bytes:
    """Hash a byte string with Keccak-256.

    Args:
        data: Bytes to hash

    Returns:
        32-byte digest
    """
    return keccak(primitive=bytes(data))


def hash_text(text: str) -> bytes:
    """Hash the UTF-8 encoding of a string."""
    return keccak256(text.encode("utf-8"))


def pad32(data: bytes) -> bytes:
    """Left-pad a byte string with zero bytes to one 32-byte word.

    Raises:
        EncodingMismatch: If the input is longer than 32 bytes
    """
    if len(data) > WORD_SIZE:
        raise EncodingMismatch(
            f"Cannot pad {len(data)} bytes into a {WORD_SIZE}-byte word"
        )
    return bytes(data).rjust(WORD_SIZE, b"\x00")


def uint256_word(value: int) -> bytes:
    """Encode an integer as a 32-byte big-endian word.

    Raises:
        InvalidAmount: If the value is not an int, is negative or exceeds 2**256 - 1
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidAmount(f"Expected an integer, got {type(value).__name__}: {value!r}")
    if value < 0:
        raise InvalidAmount(f"Negative value: {value}")
    if value > UINT256_MAX:
        raise InvalidAmount(f"Value does not fit in uint256: {value}")
    return value.to_bytes(WORD_SIZE, "big")


def function_selector(signature: str) -> bytes:
    """First 4 bytes of the hash of a function signature, e.g. ``initialize(address)``."""
    return hash_text(signature)[:4]
