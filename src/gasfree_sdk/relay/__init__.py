"""Relay API client and transfer flows for the GasFree SDK."""

from .auth import generate_api_signature, build_auth_headers
from .client import GasFreeClient, GasFreeClientConfig, ResolvedClientConfig
from .types import (
    TokenConfig,
    ProviderConfig,
    AssetBalance,
    AccountSnapshot,
    TransferStatus,
)
from .tracking import (
    TransferPhase,
    RelayStateMapping,
    DEFAULT_STATE_MAPPING,
    TransferTracker,
    wait_for_transfer,
)
from .transfer import GasFreeTransferRouter, TransferParams

__all__ = [
    "generate_api_signature",
    "build_auth_headers",
    "GasFreeClient",
    "GasFreeClientConfig",
    "ResolvedClientConfig",
    "TokenConfig",
    "ProviderConfig",
    "AssetBalance",
    "AccountSnapshot",
    "TransferStatus",
    "TransferPhase",
    "RelayStateMapping",
    "DEFAULT_STATE_MAPPING",
    "TransferTracker",
    "wait_for_transfer",
    "GasFreeTransferRouter",
    "TransferParams",
]
