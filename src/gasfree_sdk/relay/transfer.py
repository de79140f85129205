"""GasFree Transfer Router.

Runs the full flow of a gas-free transfer on top of the relay client:

1. Pick a service provider and check the deadline against its policy
2. Fetch the account state right before signing (fresh nonce)
3. Choose the max fee (activation fee + transfer fee for a new account)
4. Create and sign the transfer authorization (EIP-712)
5. Submit it and, optionally, poll until the relay reports a result

The first transfer of a user activates (deploys) the proxy account. Use
:meth:`GasFreeTransferRouter.activate` to trigger that with a small
transfer back to the user.
"""

from typing import Awaitable, Callable, List, Optional, TypedDict

import structlog

from ..errors import RelayRejected
from ..permit import (
    DEFAULT_DEADLINE_SECONDS,
    DigestSigner,
    SignedTransferAuthorization,
    SigningDomain,
    TransferAuthorization,
    account_from_private_key,
    calculate_max_fee,
    create_transfer_authorization,
    derive_proxy_address_for_network,
    sign_transfer_authorization,
    sign_transfer_authorization_with_signer,
    to_base58_address,
)
from .client import GasFreeClient
from .tracking import (
    DEFAULT_MAX_ATTEMPTS,
    DEFAULT_POLL_INTERVAL,
    DEFAULT_STATE_MAPPING,
    RelayStateMapping,
    TransferTracker,
    wait_for_transfer,
)
from .types import ProviderConfig

logger = structlog.get_logger(__name__)


class TransferParams(TypedDict, total=False):
    """Parameters of one gas-free transfer."""

    receiver: str
    """Destination address (required)."""

    value: int
    """Amount in the token's smallest unit (required)."""

    token: str
    """Token contract. Default: the network's USDT."""

    service_provider: str
    """Provider address. Default: the first provider the relay lists."""

    max_fee: int
    """Override for the fee bound. Default: from the relay's fee schedule."""

    deadline_seconds: int
    """Seconds until expiry. Default: the provider's default duration."""


class GasFreeTransferRouter:
    """Builds, signs and submits GasFree transfers.

    Example:
        ```python
        async with GasFreeClient({"api_key": ..., "api_secret": ...}) as client:
            router = GasFreeTransferRouter(client)

            # Where to deposit the tokens to be moved
            print(router.proxy_address("T..."))

            trace_id = await router.transfer("0x<private key>", {
                "receiver": "T...",
                "value": 1_000_000,  # 1 USDT
            })
            tracker = await router.wait(trace_id)
        ```
    """

    def __init__(self, client: GasFreeClient):
        self._client = client
        self._network = client.network
        self._domain = SigningDomain.for_network(self._network)

    @property
    def domain(self) -> SigningDomain:
        return self._domain

    def proxy_address(self, user: str) -> str:
        """Derive the user's GasFree proxy address locally."""
        return derive_proxy_address_for_network(user, self._network)

    async def check_proxy_address(self, user: str) -> bool:
        """Compare the locally derived proxy address with the one the relay reports."""
        account = await self._client.get_account(user)
        return account.gas_free_address == self.proxy_address(user)

    async def select_provider(self, address: Optional[str] = None) -> ProviderConfig:
        """Pick a service provider.

        Args:
            address: Provider to use. Default: the first one listed

        Raises:
            RelayRejected: If the relay lists no providers
            ValueError: If ``address`` is not a listed provider
        """
        providers: List[ProviderConfig] = await self._client.get_providers()
        if not providers:
            raise RelayRejected("Relay returned no service providers")
        if address is None:
            return providers[0]

        wanted = to_base58_address(address)
        for provider in providers:
            if provider.address == wanted:
                return provider
        raise ValueError(f"Unknown service provider: {address}")

    async def prepare_transfer(self, user: str, params: TransferParams) -> TransferAuthorization:
        """Build an unsigned authorization from live relay state.

        Args:
            user: Authorizing account
            params: Transfer parameters

        Returns:
            Authorization carrying the account's current nonce

        Raises:
            ValueError: If the deadline is outside the provider's bounds or
                the token is not supported
            RelayRejected: If the relay does not allow the account to submit
        """
        token = params.get("token", self._network.usdt_address)
        provider = await self.select_provider(params.get("service_provider"))

        deadline_seconds = params.get("deadline_seconds")
        if deadline_seconds is None:
            deadline_seconds = provider.default_deadline_duration or DEFAULT_DEADLINE_SECONDS
        if not provider.accepts_deadline(deadline_seconds):
            raise ValueError(
                f"Deadline of {deadline_seconds}s outside provider bounds "
                f"[{provider.min_deadline_duration}, {provider.max_deadline_duration}]"
            )

        account = await self._client.get_account(user)
        if not account.allow_submit:
            raise RelayRejected(
                f"Account {account.account_address} cannot submit: "
                "insufficient balance or a pending transfer"
            )

        max_fee = params.get("max_fee")
        if max_fee is None:
            token_config = await self._client.get_token(token)
            if token_config is None:
                raise ValueError(f"Token not supported by the relay: {token}")
            max_fee = calculate_max_fee(
                token_config.transfer_fee, token_config.activate_fee, account.active
            )

        return create_transfer_authorization(
            token=token,
            service_provider=provider.address,
            user=user,
            receiver=params["receiver"],
            value=params["value"],
            max_fee=max_fee,
            nonce=account.nonce,
            deadline_seconds=deadline_seconds,
        )

    async def _submit(
        self,
        user: str,
        params: TransferParams,
        sign: Callable[[TransferAuthorization], Awaitable[SignedTransferAuthorization]],
    ) -> str:
        authorization = await self.prepare_transfer(user, params)
        signed = await sign(authorization)
        logger.info(
            "transfer.signed",
            user=signed.user,
            receiver=signed.receiver,
            value=signed.value,
            max_fee=signed.max_fee,
            nonce=signed.nonce,
        )
        return await self._client.submit_transfer(signed)

    async def transfer(self, private_key: str, params: TransferParams) -> str:
        """Sign with a private key and submit a transfer.

        Returns:
            Trace id of the submitted transfer
        """
        user = account_from_private_key(private_key).address

        async def sign(authorization: TransferAuthorization) -> SignedTransferAuthorization:
            return sign_transfer_authorization(private_key, authorization, self._domain)

        return await self._submit(user, params, sign)

    async def transfer_with_signer(self, signer: DigestSigner, params: TransferParams) -> str:
        """Sign with an external digest signer and submit a transfer.

        Returns:
            Trace id of the submitted transfer
        """
        user = await signer.get_address()

        async def sign(authorization: TransferAuthorization) -> SignedTransferAuthorization:
            return await sign_transfer_authorization_with_signer(
                signer, authorization, self._domain
            )

        return await self._submit(user, params, sign)

    async def activate(
        self, private_key: str, value: int, token: Optional[str] = None
    ) -> Optional[str]:
        """Activate the user's proxy account with a transfer back to the user.

        Args:
            private_key: The user's private key
            value: Amount to move (must be covered by the deposited balance)
            token: Token contract. Default: the network's USDT

        Returns:
            Trace id, or None if the account is already active
        """
        user = account_from_private_key(private_key).address
        account = await self._client.get_account(user)
        if account.active:
            logger.info("transfer.already_active", user=user)
            return None

        params: TransferParams = {"receiver": user, "value": value}
        if token is not None:
            params["token"] = token
        return await self.transfer(private_key, params)

    async def wait(
        self,
        trace_id: str,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        interval: float = DEFAULT_POLL_INTERVAL,
        mapping: RelayStateMapping = DEFAULT_STATE_MAPPING,
    ) -> TransferTracker:
        """Poll a submitted transfer until it succeeds or fails."""
        return await wait_for_transfer(
            self._client, trace_id, max_attempts=max_attempts, interval=interval, mapping=mapping
        )
