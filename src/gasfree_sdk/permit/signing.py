"""Transfer Authorization Signing for GasFree.

Provides EIP-712 signing functions that work with various signer types:
- a raw private key (signed locally with eth_account)
- any DigestSigner (hardware wallets that sign a pre-computed digest)

Both paths sign the digest produced by :func:`hash_transfer_authorization`,
so a locally signed permit and an externally signed one can never diverge.
"""

import time
from dataclasses import dataclass
from typing import Optional, Protocol, Tuple, Union

from eth_account import Account
from eth_keys import keys
from eth_keys.exceptions import BadSignature
from eth_keys.exceptions import ValidationError as KeyValidationError

from ..errors import EncodingMismatch, InvalidKey
from .address import to_address_bytes, to_base58_address, to_hex_address
from .encoding import domain_separator, permit_struct_hash, typed_data_digest
from .hashing import uint256_word
from .types import (
    PERMIT_VERSION,
    ExternalSignerHashes,
    SignedTransferAuthorization,
    SigningDomain,
    TransferAuthorization,
)


# Relay default when the provider does not say otherwise
DEFAULT_DEADLINE_SECONDS = 180

SIGNATURE_LENGTH = 65


@dataclass(frozen=True)
class TronAccount:
    """Externally-owned TRON account."""

    address: str
    """Base58check address ("T...")."""

    hex_address: str
    """41-prefixed hex address."""

    private_key: str
    """0x-prefixed hex private key."""


def _load_account(private_key: Union[str, bytes]):
    try:
        return Account.from_key(private_key)
    except (ValueError, TypeError, KeyValidationError) as exc:
        raise InvalidKey(f"Invalid private key: {exc}") from exc


def _tron_account(local_account) -> TronAccount:
    account_id = to_address_bytes(local_account.address)
    return TronAccount(
        address=to_base58_address(account_id),
        hex_address="41" + account_id.hex(),
        private_key="0x" + bytes(local_account.key).hex(),
    )


def create_account() -> TronAccount:
    """Generate a new random TRON account."""
    return _tron_account(Account.create())


def account_from_private_key(private_key: Union[str, bytes]) -> TronAccount:
    """Restore a TRON account from its private key.

    Raises:
        InvalidKey: If the key is malformed
    """
    return _tron_account(_load_account(private_key))


def create_transfer_authorization(
    token: str,
    service_provider: str,
    user: str,
    receiver: str,
    value: int,
    max_fee: int,
    nonce: int,
    deadline_seconds: int = DEFAULT_DEADLINE_SECONDS,
    now: Optional[int] = None,
) -> TransferAuthorization:
    """Create a transfer authorization object.

    Addresses are normalized to base58check. The deadline is
    ``now + deadline_seconds``; it is not checked against the clock, the
    relay decides whether it is still acceptable.

    Args:
        token: TRC-20 contract address
        service_provider: Relayer address
        user: Authorizing account address
        receiver: Destination address
        value: Amount in the token's smallest unit
        max_fee: Maximum fee the relayer may deduct
        nonce: Current nonce of the user's proxy account
        deadline_seconds: Seconds from now until the authorization expires
        now: Override for the current Unix time

    Returns:
        TransferAuthorization object

    Raises:
        InvalidAddress: If an address cannot be parsed
        InvalidAmount: If value, max_fee, nonce or the deadline is not a valid uint256
    """
    deadline = (int(time.time()) if now is None else now) + deadline_seconds
    for amount in (value, max_fee, nonce, deadline):
        uint256_word(amount)

    return TransferAuthorization(
        token=to_base58_address(token),
        service_provider=to_base58_address(service_provider),
        user=to_base58_address(user),
        receiver=to_base58_address(receiver),
        value=value,
        max_fee=max_fee,
        deadline=deadline,
        version=PERMIT_VERSION,
        nonce=nonce,
    )


def _digest_parts(
    authorization: TransferAuthorization, domain: SigningDomain
) -> Tuple[bytes, bytes, bytes]:
    separator = domain_separator(domain)
    struct_hash = permit_struct_hash(authorization)
    return separator, struct_hash, typed_data_digest(separator, struct_hash)


def hash_transfer_authorization(
    authorization: TransferAuthorization, domain: SigningDomain
) -> ExternalSignerHashes:
    """Compute the hashes a digest-signing wallet needs, without signing.

    Args:
        authorization: Authorization to hash
        domain: Signing domain of the target deployment

    Returns:
        Domain separator, struct hash and final digest as 0x-prefixed hex
    """
    separator, struct_hash, digest = _digest_parts(authorization, domain)
    return ExternalSignerHashes(
        domain_separator="0x" + separator.hex(),
        struct_hash="0x" + struct_hash.hex(),
        final_digest="0x" + digest.hex(),
    )


def normalize_signature(signature: Union[str, bytes]) -> str:
    """Normalize a recoverable signature to 130 hex chars with v in {27, 28}.

    Raises:
        EncodingMismatch: If the signature is not 65 bytes or v is invalid
    """
    if isinstance(signature, str):
        text = signature[2:] if signature.startswith("0x") else signature
        try:
            raw = bytes.fromhex(text)
        except ValueError as exc:
            raise EncodingMismatch(f"Signature is not hex: {signature!r}") from exc
    else:
        raw = bytes(signature)

    if len(raw) != SIGNATURE_LENGTH:
        raise EncodingMismatch(
            f"Signature must be {SIGNATURE_LENGTH} bytes, got {len(raw)}"
        )
    v = raw[64]
    if v in (0, 1):
        v += 27
    if v not in (27, 28):
        raise EncodingMismatch(f"Invalid recovery id: {raw[64]}")
    return (raw[:64] + bytes([v])).hex()


def _signed(authorization: TransferAuthorization, signature: str) -> SignedTransferAuthorization:
    return SignedTransferAuthorization(
        token=authorization.token,
        service_provider=authorization.service_provider,
        user=authorization.user,
        receiver=authorization.receiver,
        value=authorization.value,
        max_fee=authorization.max_fee,
        deadline=authorization.deadline,
        version=authorization.version,
        nonce=authorization.nonce,
        signature=signature,
    )


def sign_digest(private_key: Union[str, bytes], digest: bytes) -> str:
    """Sign a 32-byte digest directly, without any message prefix.

    Returns:
        65-byte r || s || v signature as hex (v in {27, 28}), without 0x

    Raises:
        InvalidKey: If the private key is malformed
    """
    account = _load_account(private_key)
    signed_message = account.unsafe_sign_hash(digest)
    return normalize_signature(bytes(signed_message.signature))


def sign_transfer_authorization(
    private_key: Union[str, bytes],
    authorization: TransferAuthorization,
    domain: SigningDomain,
) -> SignedTransferAuthorization:
    """Sign a transfer authorization with EIP-712 using a private key.

    Use this when you have direct access to a private key.

    Args:
        private_key: Private key (hex string with or without 0x prefix, or bytes)
        authorization: Authorization to sign
        domain: Signing domain of the target deployment

    Returns:
        SignedTransferAuthorization with a 65-byte r || s || v signature

    Raises:
        InvalidKey: If the private key is malformed
    """
    _, _, digest = _digest_parts(authorization, domain)
    return _signed(authorization, sign_digest(private_key, digest))


class DigestSigner(Protocol):
    """Protocol for signers that sign a pre-computed 32-byte digest."""

    async def get_address(self) -> str:
        """Get the signer's address."""
        ...

    async def sign_digest(self, digest: bytes) -> Union[str, bytes]:
        """Sign a 32-byte digest without any message prefix.

        Returns:
            65-byte r || s || v signature, as bytes or hex
        """
        ...


async def sign_transfer_authorization_with_signer(
    signer: DigestSigner,
    authorization: TransferAuthorization,
    domain: SigningDomain,
) -> SignedTransferAuthorization:
    """Sign a transfer authorization using any compatible digest signer.

    Use this with hardware wallets or remote signers that implement the
    DigestSigner protocol.

    Args:
        signer: Signer that implements DigestSigner
        authorization: Authorization to sign
        domain: Signing domain of the target deployment

    Returns:
        SignedTransferAuthorization with signature
    """
    hashes = hash_transfer_authorization(authorization, domain)
    signature = await signer.sign_digest(bytes.fromhex(hashes.final_digest[2:]))
    return _signed(authorization, normalize_signature(signature))


def recover_digest_signer(digest: bytes, signature: Union[str, bytes]) -> str:
    """Recover the base58 address that produced a signature over a digest.

    Raises:
        EncodingMismatch: If the signature is malformed
    """
    raw = bytes.fromhex(normalize_signature(signature))
    try:
        sig = keys.Signature(signature_bytes=raw[:64] + bytes([raw[64] - 27]))
        public_key = sig.recover_public_key_from_msg_hash(digest)
    except (BadSignature, KeyValidationError) as exc:
        raise EncodingMismatch(f"Signature cannot be recovered: {exc}") from exc
    return to_base58_address(public_key.to_canonical_address())


def recover_authorization_signer(
    signed_auth: SignedTransferAuthorization, domain: SigningDomain
) -> str:
    """Recover the address that signed an authorization."""
    _, _, digest = _digest_parts(signed_auth.authorization, domain)
    return recover_digest_signer(digest, signed_auth.signature)


def verify_transfer_authorization_signature(
    signed_auth: SignedTransferAuthorization,
    domain: SigningDomain,
    expected_signer: str,
) -> bool:
    """Verify locally that an authorization was signed by ``expected_signer``.

    Args:
        signed_auth: Signed transfer authorization
        domain: Signing domain of the target deployment
        expected_signer: Expected signer address (base58 or hex)

    Returns:
        True if the signature is valid and from the expected signer
    """
    try:
        recovered = recover_authorization_signer(signed_auth, domain)
    except EncodingMismatch:
        return False
    return to_hex_address(recovered) == to_hex_address(expected_signer)
