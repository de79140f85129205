"""TronGrid ledger client.

Reads TRC-20 balances, sends plain TRC-20 transfers (used to fund a
GasFree proxy account) and waits for their confirmation, through the
TronGrid HTTP API. Transactions are built by the node, checked and signed
locally, then broadcast.
"""

import asyncio
import hashlib
from typing import Any, Awaitable, Callable, Dict, Optional, Union

import httpx
import structlog
from eth_abi import encode

from ..config import NILE, NetworkConfig
from ..errors import LedgerError, PollTimeout
from ..permit.address import to_address_bytes, to_base58_address, to_hex_address
from ..permit.hashing import pad32
from ..permit.signing import account_from_private_key, sign_digest

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 30.0

# 100 TRX, in sun
DEFAULT_FEE_LIMIT = 100_000_000

RECEIPT_SUCCESS = "SUCCESS"


def _decode_message(message: Any) -> str:
    """TronGrid hex-encodes error messages; fall back to the raw text."""
    if not isinstance(message, str):
        return str(message)
    try:
        return bytes.fromhex(message).decode("utf-8")
    except ValueError:
        return message


class TronGridLedger:
    """Ledger client backed by a TronGrid full node.

    Example:
        ```python
        async with TronGridLedger(NILE) as ledger:
            balance = await ledger.get_token_balance(NILE.usdt_address, "T...")
            txid = await ledger.transfer_token("0x...", NILE.usdt_address, proxy, 5_000_000)
            confirmed = await ledger.wait_for_transaction(txid)
        ```
    """

    def __init__(
        self,
        network: NetworkConfig = NILE,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the ledger client.

        Args:
            network: Network whose TronGrid endpoint to use
            api_key: Optional TronGrid API key (TRON-PRO-API-KEY header)
            base_url: Override for the TronGrid origin
            timeout: HTTP timeout in seconds
            http_client: Optional pre-built httpx client (closed by the caller)
        """
        self._base_url = (base_url or network.tron_api_url).rstrip("/")
        self._headers: Dict[str, str] = {"Content-Type": "application/json"}
        if api_key:
            self._headers["TRON-PRO-API-KEY"] = api_key
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> "TronGridLedger":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        response = await self._http_client.post(
            f"{self._base_url}{path}", headers=self._headers, json=body
        )
        if not response.is_success:
            raise LedgerError(f"TronGrid request failed: {response.status_code} {response.text}")
        try:
            payload = response.json()
        except ValueError:
            raise LedgerError(f"TronGrid returned invalid JSON: {response.text}") from None
        if not isinstance(payload, dict):
            raise LedgerError(f"Unexpected TronGrid response: {payload!r}")
        return payload

    @staticmethod
    def _check_call_result(payload: Dict[str, Any], action: str) -> None:
        result = payload.get("result") or {}
        if not result.get("result"):
            reason = _decode_message(result.get("message") or result.get("code") or payload)
            raise LedgerError(f"{action} failed: {reason}")

    async def get_token_balance(self, token: str, owner: str) -> int:
        """Read ``balanceOf(owner)`` of a TRC-20 token.

        Returns:
            Balance in the token's smallest unit
        """
        payload = await self._post(
            "/wallet/triggerconstantcontract",
            {
                "owner_address": to_base58_address(owner),
                "contract_address": to_base58_address(token),
                "function_selector": "balanceOf(address)",
                "parameter": pad32(to_address_bytes(owner)).hex(),
                "visible": True,
            },
        )
        self._check_call_result(payload, "balanceOf")
        constant_result = payload.get("constant_result") or []
        if not constant_result:
            raise LedgerError(f"balanceOf returned no result: {payload}")
        return int(constant_result[0] or "0", 16)

    async def transfer_token(
        self,
        private_key: Union[str, bytes],
        token: str,
        to: str,
        amount: int,
        fee_limit: int = DEFAULT_FEE_LIMIT,
    ) -> str:
        """Send a plain TRC-20 ``transfer(to, amount)`` paid with the sender's TRX.

        Args:
            private_key: Sender's private key
            token: TRC-20 contract address
            to: Recipient address
            amount: Amount in the token's smallest unit
            fee_limit: Max energy fee in sun

        Returns:
            Transaction id

        Raises:
            LedgerError: If the node refuses to build or broadcast the transaction
        """
        sender = account_from_private_key(private_key).address
        parameter = encode(["address", "uint256"], [to_hex_address(to), amount]).hex()
        payload = await self._post(
            "/wallet/triggersmartcontract",
            {
                "owner_address": sender,
                "contract_address": to_base58_address(token),
                "function_selector": "transfer(address,uint256)",
                "parameter": parameter,
                "fee_limit": fee_limit,
                "call_value": 0,
                "visible": True,
            },
        )
        self._check_call_result(payload, "transfer")

        transaction = payload.get("transaction")
        if not transaction or "txID" not in transaction:
            raise LedgerError(f"Node returned no transaction: {payload}")

        txid = transaction["txID"]
        raw_data_hex = transaction.get("raw_data_hex", "")
        if hashlib.sha256(bytes.fromhex(raw_data_hex)).hexdigest() != txid:
            raise LedgerError(f"Transaction id does not match raw data: {txid}")

        signed = dict(transaction)
        signed["signature"] = [sign_digest(private_key, bytes.fromhex(txid))]
        result = await self._post("/wallet/broadcasttransaction", signed)
        if not result.get("result"):
            reason = _decode_message(result.get("message") or result.get("code"))
            raise LedgerError(f"Broadcast of {txid} failed: {reason}")

        logger.info("ledger.transfer_sent", txid=txid, token=token, to=to, amount=amount)
        return txid

    async def get_transaction_result(self, txid: str) -> Optional[str]:
        """Receipt result of a transaction, or None while it is unconfirmed."""
        info = await self._post("/wallet/gettransactioninfobyid", {"value": txid})
        receipt = info.get("receipt")
        if receipt is None:
            return None
        return receipt.get("result", "UNKNOWN")

    async def wait_for_transaction(
        self,
        txid: str,
        max_attempts: int = 30,
        interval: float = 3.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> bool:
        """Poll until a transaction has a receipt.

        Returns:
            True if the receipt result is SUCCESS, False otherwise

        Raises:
            PollTimeout: If no receipt appeared within the budget
        """
        for _ in range(max_attempts):
            await sleep(interval)
            result = await self.get_transaction_result(txid)
            if result is not None:
                logger.info("ledger.transaction_confirmed", txid=txid, result=result)
                return result == RECEIPT_SUCCESS
        raise PollTimeout(txid, max_attempts)
