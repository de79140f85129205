"""GasFree SDK for TRON.

Sign TRC-20 transfers off-chain and let a GasFree service provider submit
them, paying the fee in the transferred token instead of TRX.

Subpackages:
- ``permit``: EIP-712 authorizations, signing and proxy address derivation
- ``relay``: GasFree relay API client, transfer router and status tracking
- ``ledger``: TronGrid client for balances and plain TRC-20 transfers
"""

from .config import NETWORKS, NILE, TRON_MAINNET, NetworkConfig, get_network_config
from .errors import (
    GasFreeError,
    InvalidAmount,
    InvalidKey,
    InvalidAddress,
    EncodingMismatch,
    RelayRejected,
    StaleNonce,
    PollTimeout,
    LedgerError,
)
from .permit import (
    SigningDomain,
    TransferAuthorization,
    SignedTransferAuthorization,
    ExternalSignerHashes,
    DigestSigner,
    create_transfer_authorization,
    hash_transfer_authorization,
    sign_transfer_authorization,
    sign_transfer_authorization_with_signer,
    verify_transfer_authorization_signature,
    derive_proxy_address,
    derive_proxy_address_for_network,
)
from .relay import (
    GasFreeClient,
    GasFreeClientConfig,
    GasFreeTransferRouter,
    TransferParams,
    TransferPhase,
    TransferTracker,
    RelayStateMapping,
    wait_for_transfer,
)
from .ledger import LedgerClient, TronGridLedger

__version__ = "0.1.0"

__all__ = [
    # Networks
    "NETWORKS",
    "NILE",
    "TRON_MAINNET",
    "NetworkConfig",
    "get_network_config",
    # Errors
    "GasFreeError",
    "InvalidAmount",
    "InvalidKey",
    "InvalidAddress",
    "EncodingMismatch",
    "RelayRejected",
    "StaleNonce",
    "PollTimeout",
    "LedgerError",
    # Permit
    "SigningDomain",
    "TransferAuthorization",
    "SignedTransferAuthorization",
    "ExternalSignerHashes",
    "DigestSigner",
    "create_transfer_authorization",
    "hash_transfer_authorization",
    "sign_transfer_authorization",
    "sign_transfer_authorization_with_signer",
    "verify_transfer_authorization_signature",
    "derive_proxy_address",
    "derive_proxy_address_for_network",
    # Relay
    "GasFreeClient",
    "GasFreeClientConfig",
    "GasFreeTransferRouter",
    "TransferParams",
    "TransferPhase",
    "TransferTracker",
    "RelayStateMapping",
    "wait_for_transfer",
    # Ledger
    "LedgerClient",
    "TronGridLedger",
]
