"""Relay API response types.

The relay answers in camelCase JSON; these dataclasses hold the parsed
values with snake_case names. Unknown fields are ignored.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Union


@dataclass(frozen=True)
class TokenConfig:
    """Token supported by the relay, with its fee schedule."""

    symbol: str
    token_address: str
    decimal: int
    activate_fee: int
    transfer_fee: int
    min_transfer: Optional[int] = None
    max_transfer: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TokenConfig":
        return cls(
            symbol=data["symbol"],
            token_address=data["tokenAddress"],
            decimal=int(data["decimal"]),
            activate_fee=int(data["activateFee"]),
            transfer_fee=int(data["transferFee"]),
            min_transfer=_optional_int(data.get("minTransfer")),
            max_transfer=_optional_int(data.get("maxTransfer")),
        )


@dataclass(frozen=True)
class ProviderConfig:
    """Service provider (relayer) and its deadline policy."""

    name: str
    address: str
    min_deadline_duration: int
    max_deadline_duration: int
    default_deadline_duration: int
    max_pending_transfer: int
    website: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ProviderConfig":
        config = data.get("config", {})
        return cls(
            name=data["name"],
            address=data["address"],
            min_deadline_duration=int(config.get("minDeadlineDuration", 0)),
            max_deadline_duration=int(config.get("maxDeadlineDuration", 0)),
            default_deadline_duration=int(config.get("defaultDeadlineDuration", 0)),
            max_pending_transfer=int(config.get("maxPendingTransfer", 0)),
            website=data.get("website"),
        )

    def accepts_deadline(self, seconds: int) -> bool:
        """Whether a deadline this many seconds ahead is within the provider's bounds.

        A bound of zero means the provider did not publish one.
        """
        if self.min_deadline_duration and seconds < self.min_deadline_duration:
            return False
        if self.max_deadline_duration and seconds > self.max_deadline_duration:
            return False
        return True


@dataclass(frozen=True)
class AssetBalance:
    """Token balance of a proxy account as seen by the relay."""

    token_symbol: str
    available: int
    frozen: int
    activate_fee: int
    transfer_fee: int
    token_address: Optional[str] = None
    decimal: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AssetBalance":
        return cls(
            token_symbol=data["tokenSymbol"],
            available=int(data.get("available") or 0),
            frozen=int(data.get("frozen") or 0),
            activate_fee=int(data.get("activateFee") or 0),
            transfer_fee=int(data.get("transferFee") or 0),
            token_address=data.get("tokenAddress"),
            decimal=_optional_int(data.get("decimal")),
        )


@dataclass(frozen=True)
class AccountSnapshot:
    """State of a user's GasFree account."""

    account_address: str
    gas_free_address: str
    active: bool
    nonce: int
    allow_submit: bool
    assets: List[AssetBalance] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AccountSnapshot":
        return cls(
            account_address=data["accountAddress"],
            gas_free_address=data["gasFreeAddress"],
            active=bool(data.get("active")),
            nonce=int(data.get("nonce") or 0),
            allow_submit=bool(data.get("allowSubmit")),
            assets=[AssetBalance.from_dict(a) for a in data.get("assets") or []],
        )

    def asset(self, token: str) -> Optional[AssetBalance]:
        """Find an asset by symbol or token address."""
        for asset in self.assets:
            if token in (asset.token_symbol, asset.token_address):
                return asset
        return None


@dataclass(frozen=True)
class TransferStatus:
    """Execution status of a submitted authorization."""

    id: str
    state: Union[str, int, None]
    """Relay state, kept as reported (string or numeric code)."""

    account_address: Optional[str] = None
    target_address: Optional[str] = None
    amount: Optional[int] = None
    nonce: Optional[int] = None
    created_at: Optional[Union[int, str]] = None
    activate_fee: Optional[int] = None
    transfer_fee: Optional[int] = None
    total_fee: Optional[int] = None
    txn_hash: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TransferStatus":
        amount = data.get("txnAmount")
        if amount is None:
            amount = data.get("amount")
        return cls(
            id=data["id"],
            state=data.get("state"),
            account_address=data.get("accountAddress"),
            target_address=data.get("targetAddress"),
            amount=_optional_int(amount),
            nonce=_optional_int(data.get("nonce")),
            created_at=data.get("createdAt"),
            activate_fee=_optional_int(data.get("txnActivateFee")),
            transfer_fee=_optional_int(data.get("txnTransferFee")),
            total_fee=_optional_int(data.get("txnTotalFee")),
            txn_hash=data.get("txnHash"),
            raw=dict(data),
        )


def _optional_int(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return int(value)
