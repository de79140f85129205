"""GasFree Permit Module.

This module provides the signing side of GasFree transfers on TRON.

Key components:
- Transfer authorization creation and signing (EIP-712 ``PermitTransfer``)
- Raw hashes for wallets that sign a pre-computed digest
- Deterministic proxy account (GasFree address) derivation
- Utility functions for token amounts and fees

Example usage:
    ```python
    from gasfree_sdk.config import NILE
    from gasfree_sdk.permit import (
        SigningDomain,
        create_transfer_authorization,
        derive_proxy_address_for_network,
        sign_transfer_authorization,
    )

    # Where the user must deposit tokens
    proxy = derive_proxy_address_for_network("T...", NILE)

    auth = create_transfer_authorization(
        token=NILE.usdt_address,
        service_provider="T...",
        user="T...",
        receiver="T...",
        value=1_000_000,  # 1 USDT
        max_fee=2_050_000,  # activation + transfer fee
        nonce=0,
    )

    signed = sign_transfer_authorization(
        private_key="0x...",
        authorization=auth,
        domain=SigningDomain.for_network(NILE),
    )
    ```
"""

from .types import (
    PERMIT_VERSION,
    SigningDomain,
    TransferAuthorization,
    SignedTransferAuthorization,
    ExternalSignerHashes,
    EIP712_DOMAIN_TYPES,
    PERMIT_TRANSFER_TYPES,
)
from .hashing import keccak256, hash_text, pad32, uint256_word, function_selector
from .encoding import (
    FieldType,
    StructField,
    StructSchema,
    EIP712_DOMAIN_SCHEMA,
    PERMIT_TRANSFER_SCHEMA,
    domain_separator,
    permit_struct_hash,
    typed_data_digest,
)
from .address import (
    to_address_bytes,
    to_base58_address,
    to_hex_address,
    is_tron_address,
    derive_proxy_address,
    derive_proxy_address_for_network,
)
from .signing import (
    DEFAULT_DEADLINE_SECONDS,
    TronAccount,
    DigestSigner,
    create_account,
    account_from_private_key,
    create_transfer_authorization,
    hash_transfer_authorization,
    normalize_signature,
    sign_digest,
    sign_transfer_authorization,
    sign_transfer_authorization_with_signer,
    recover_digest_signer,
    recover_authorization_signer,
    verify_transfer_authorization_signature,
)
from .utils import (
    USDT_DECIMALS,
    format_token_amount,
    parse_token_amount,
    calculate_max_fee,
    calculate_required_balance,
)

__all__ = [
    # Types
    "PERMIT_VERSION",
    "SigningDomain",
    "TransferAuthorization",
    "SignedTransferAuthorization",
    "ExternalSignerHashes",
    "EIP712_DOMAIN_TYPES",
    "PERMIT_TRANSFER_TYPES",
    "TronAccount",
    "DigestSigner",
    # Hashing and encoding
    "keccak256",
    "hash_text",
    "pad32",
    "uint256_word",
    "function_selector",
    "FieldType",
    "StructField",
    "StructSchema",
    "EIP712_DOMAIN_SCHEMA",
    "PERMIT_TRANSFER_SCHEMA",
    "domain_separator",
    "permit_struct_hash",
    "typed_data_digest",
    # Addresses
    "to_address_bytes",
    "to_base58_address",
    "to_hex_address",
    "is_tron_address",
    "derive_proxy_address",
    "derive_proxy_address_for_network",
    # Signing
    "DEFAULT_DEADLINE_SECONDS",
    "create_account",
    "account_from_private_key",
    "create_transfer_authorization",
    "hash_transfer_authorization",
    "normalize_signature",
    "sign_digest",
    "sign_transfer_authorization",
    "sign_transfer_authorization_with_signer",
    "recover_digest_signer",
    "recover_authorization_signer",
    "verify_transfer_authorization_signature",
    # Utils
    "USDT_DECIMALS",
    "format_token_amount",
    "parse_token_amount",
    "calculate_max_fee",
    "calculate_required_balance",
]
