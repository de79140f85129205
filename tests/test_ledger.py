"""Tests for the TronGrid ledger client."""

import hashlib
import json

import httpx
import pytest

from gasfree_sdk.config import NILE
from gasfree_sdk.errors import LedgerError, PollTimeout
from gasfree_sdk.ledger import TronGridLedger
from gasfree_sdk.permit import recover_digest_signer


TEST_PRIVATE_KEY = "0x" + "ab" * 32
TEST_ADDRESS = "TWbNxh3feKxRTFEDVk3fn9z3EznSuWvWMu"
TEST_PROXY = "TSuuhxsJom3QFr983tfH5PucfgQ4unLfKM"

RAW_DATA_HEX = "0a02a1b22208c1d2e3f4a5b6c7d840e0d5b1e1c7315a8e01081f"
TXID = hashlib.sha256(bytes.fromhex(RAW_DATA_HEX)).hexdigest()


class FakeTronGrid:
    """Minimal TronGrid node behind an httpx MockTransport."""

    def __init__(self, balance=0, txid=TXID, broadcast_ok=True, receipts=None):
        self.balance = balance
        self.txid = txid
        self.broadcast_ok = broadcast_ok
        self.receipts = list(receipts or [None])
        self.requests = []

    def __call__(self, request):
        body = json.loads(request.content) if request.content else {}
        self.requests.append((request.url.path, body, request.headers))
        path = request.url.path

        if path == "/wallet/triggerconstantcontract":
            return httpx.Response(
                200,
                json={
                    "result": {"result": True},
                    "constant_result": [format(self.balance, "064x")],
                },
            )
        if path == "/wallet/triggersmartcontract":
            return httpx.Response(
                200,
                json={
                    "result": {"result": True},
                    "transaction": {
                        "visible": True,
                        "txID": self.txid,
                        "raw_data": {"contract": []},
                        "raw_data_hex": RAW_DATA_HEX,
                    },
                },
            )
        if path == "/wallet/broadcasttransaction":
            if self.broadcast_ok:
                return httpx.Response(200, json={"result": True, "txid": body["txID"]})
            return httpx.Response(
                200,
                json={
                    "code": "SIGERROR",
                    "message": "76616c6964617465207369676e6174757265206572726f72",
                },
            )
        if path == "/wallet/gettransactioninfobyid":
            receipt = self.receipts.pop(0) if len(self.receipts) > 1 else self.receipts[0]
            if receipt is None:
                return httpx.Response(200, json={})
            return httpx.Response(200, json={"id": body["value"], "receipt": {"result": receipt}})
        return httpx.Response(404, text="not found")


def make_ledger(node, **kwargs):
    return TronGridLedger(
        NILE, http_client=httpx.AsyncClient(transport=httpx.MockTransport(node)), **kwargs
    )


async def no_sleep(seconds):
    return None


class TestBalance:
    """Tests for token balance reads."""

    @pytest.mark.asyncio
    async def test_get_token_balance(self):
        """Test reading balanceOf through a constant call."""
        node = FakeTronGrid(balance=7_000_000)

        async with make_ledger(node) as ledger:
            balance = await ledger.get_token_balance(NILE.usdt_address, TEST_PROXY)

        assert balance == 7_000_000
        path, body, _ = node.requests[0]
        assert path == "/wallet/triggerconstantcontract"
        assert body["contract_address"] == NILE.usdt_address
        assert body["function_selector"] == "balanceOf(address)"
        assert body["parameter"] == "0" * 24 + "b9da7419a7d0c3537cca93f1b93efbc7d8042ffc"

    @pytest.mark.asyncio
    async def test_api_key_header(self):
        """Test that the TronGrid API key is sent when configured."""
        node = FakeTronGrid()

        async with make_ledger(node, api_key="grid-key") as ledger:
            await ledger.get_token_balance(NILE.usdt_address, TEST_ADDRESS)

        assert node.requests[0][2]["TRON-PRO-API-KEY"] == "grid-key"

    @pytest.mark.asyncio
    async def test_failed_call(self):
        """Test that a refused constant call raises LedgerError."""
        def handler(request):
            return httpx.Response(
                200, json={"result": {"code": "CONTRACT_VALIDATE_ERROR", "message": "6e6f20636f6e7472616374"}}
            )

        ledger = TronGridLedger(NILE, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

        with pytest.raises(LedgerError, match="no contract"):
            await ledger.get_token_balance(NILE.usdt_address, TEST_ADDRESS)

    @pytest.mark.asyncio
    async def test_http_error(self):
        """Test that an HTTP error status raises LedgerError."""
        def handler(request):
            return httpx.Response(503, text="unavailable")

        ledger = TronGridLedger(NILE, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))

        with pytest.raises(LedgerError, match="503"):
            await ledger.get_token_balance(NILE.usdt_address, TEST_ADDRESS)


class TestTransferToken:
    """Tests for plain TRC-20 transfers."""

    @pytest.mark.asyncio
    async def test_transfer_token(self):
        """Test build, local signing and broadcast of a transfer."""
        node = FakeTronGrid()

        async with make_ledger(node) as ledger:
            txid = await ledger.transfer_token(
                TEST_PRIVATE_KEY, NILE.usdt_address, TEST_PROXY, 5_000_000
            )

        assert txid == TXID
        (build_path, build, _), (broadcast_path, broadcast, _) = node.requests
        assert build_path == "/wallet/triggersmartcontract"
        assert build["owner_address"] == TEST_ADDRESS
        assert build["function_selector"] == "transfer(address,uint256)"
        assert build["parameter"] == (
            "0" * 24 + "b9da7419a7d0c3537cca93f1b93efbc7d8042ffc" + format(5_000_000, "064x")
        )
        assert build["fee_limit"] == 100_000_000

        assert broadcast_path == "/wallet/broadcasttransaction"
        assert broadcast["txID"] == TXID
        assert len(broadcast["signature"]) == 1
        assert recover_digest_signer(bytes.fromhex(TXID), broadcast["signature"][0]) == TEST_ADDRESS

    @pytest.mark.asyncio
    async def test_txid_mismatch(self):
        """Test that a transaction whose id does not match its raw data is not signed."""
        node = FakeTronGrid(txid="00" * 32)

        async with make_ledger(node) as ledger:
            with pytest.raises(LedgerError, match="does not match"):
                await ledger.transfer_token(TEST_PRIVATE_KEY, NILE.usdt_address, TEST_PROXY, 1)

        assert [path for path, _, _ in node.requests] == ["/wallet/triggersmartcontract"]

    @pytest.mark.asyncio
    async def test_broadcast_rejected(self):
        """Test that a refused broadcast raises LedgerError with the decoded message."""
        node = FakeTronGrid(broadcast_ok=False)

        async with make_ledger(node) as ledger:
            with pytest.raises(LedgerError, match="validate signature error"):
                await ledger.transfer_token(TEST_PRIVATE_KEY, NILE.usdt_address, TEST_PROXY, 1)


class TestWaitForTransaction:
    """Tests for confirmation polling."""

    @pytest.mark.asyncio
    async def test_unconfirmed(self):
        """Test that a transaction without receipt has no result yet."""
        async with make_ledger(FakeTronGrid()) as ledger:
            assert await ledger.get_transaction_result(TXID) is None

    @pytest.mark.asyncio
    async def test_confirmed_success(self):
        """Test waiting for a successful receipt."""
        node = FakeTronGrid(receipts=[None, None, "SUCCESS"])

        async with make_ledger(node) as ledger:
            assert await ledger.wait_for_transaction(TXID, sleep=no_sleep) is True

        assert len(node.requests) == 3

    @pytest.mark.asyncio
    async def test_confirmed_failure(self):
        """Test that a reverted transaction confirms as False."""
        node = FakeTronGrid(receipts=["REVERT"])

        async with make_ledger(node) as ledger:
            assert await ledger.wait_for_transaction(TXID, sleep=no_sleep) is False

    @pytest.mark.asyncio
    async def test_timeout(self):
        """Test that a missing receipt raises PollTimeout after the budget."""
        node = FakeTronGrid(receipts=[None])

        async with make_ledger(node) as ledger:
            with pytest.raises(PollTimeout):
                await ledger.wait_for_transaction(TXID, max_attempts=3, sleep=no_sleep)

        assert len(node.requests) == 3
