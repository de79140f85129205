"""Ledger (chain) clients for the GasFree SDK."""

from typing import Optional, Protocol, Union

from .trongrid import TronGridLedger


class LedgerClient(Protocol):
    """Protocol for clients that read and move tokens on chain."""

    async def get_token_balance(self, token: str, owner: str) -> int:
        ...

    async def transfer_token(
        self, private_key: Union[str, bytes], token: str, to: str, amount: int
    ) -> str:
        ...

    async def get_transaction_result(self, txid: str) -> Optional[str]:
        ...

    async def wait_for_transaction(self, txid: str) -> bool:
        ...


__all__ = [
    "LedgerClient",
    "TronGridLedger",
]
