"""Async client for the GasFree relay API.

Wraps the five relay endpoints used to move tokens without gas:
token and provider configuration, account state, submit, and status.
Every request is signed with the API key and secret (see ``auth``).
"""

import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, TypedDict

import httpx
import structlog

from ..config import NILE, NetworkConfig, get_network_config
from ..errors import RelayRejected, StaleNonce
from ..permit.address import to_base58_address
from ..permit.types import SignedTransferAuthorization
from .auth import build_auth_headers
from .types import AccountSnapshot, ProviderConfig, TokenConfig, TransferStatus

logger = structlog.get_logger(__name__)

DEFAULT_TIMEOUT = 30.0

# Success value of the ``code`` field in relay responses
RELAY_OK = 200


class GasFreeClientConfig(TypedDict, total=False):
    """Configuration for the relay client."""

    api_key: str
    """Relay API key."""

    api_secret: str
    """Relay API secret used for request signing."""

    network: str
    """Network name ("nile" or "tron"). Default: "nile"."""

    base_url: str
    """Override for the relay origin. Default: the network's API URL."""

    timeout: float
    """HTTP timeout in seconds. Default: 30."""


@dataclass
class ResolvedClientConfig:
    """Resolved client configuration with all defaults applied."""

    api_key: str
    api_secret: str
    network: NetworkConfig
    base_url: str
    timeout: float


class GasFreeClient:
    """Relay API client.

    Example:
        ```python
        async with GasFreeClient({
            "api_key": "...",
            "api_secret": "...",
            "network": "nile",
        }) as client:
            account = await client.get_account("T...")
            print(account.gas_free_address, account.nonce)
        ```
    """

    def __init__(
        self,
        config: Optional[GasFreeClientConfig] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the relay client.

        Args:
            config: Optional configuration for the client
            http_client: Optional pre-built httpx client (closed by the caller)
        """
        config = config or {}
        network = get_network_config(config.get("network", NILE.name))
        self._config = ResolvedClientConfig(
            api_key=config.get("api_key", ""),
            api_secret=config.get("api_secret", ""),
            network=network,
            base_url=config.get("base_url", network.api_base_url).rstrip("/"),
            timeout=config.get("timeout", DEFAULT_TIMEOUT),
        )
        self._owns_http_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=self._config.timeout)

    @property
    def network(self) -> NetworkConfig:
        return self._config.network

    def get_config(self) -> ResolvedClientConfig:
        """Get the client configuration."""
        return self._config

    async def close(self) -> None:
        if self._owns_http_client:
            await self._http_client.aclose()

    async def __aenter__(self) -> "GasFreeClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(
        self, method: str, api_path: str, body: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        if not self._config.api_key or not self._config.api_secret:
            raise ValueError(
                "Relay API key and secret not set. Pass api_key and api_secret to the client."
            )

        path = f"/{self.network.name}{api_path}"
        headers = build_auth_headers(
            self._config.api_key, self._config.api_secret, method, path
        )
        logger.debug("relay.request", method=method, path=path)

        response = await self._http_client.request(
            method, f"{self._config.base_url}{path}", headers=headers, json=body
        )

        try:
            payload = response.json()
        except ValueError:
            raise RelayRejected(
                f"Relay request failed: {response.status_code} {response.text}",
                status_code=response.status_code,
            ) from None

        if not isinstance(payload, dict):
            raise RelayRejected(
                f"Unexpected relay response: {payload!r}", status_code=response.status_code
            )

        code = payload.get("code")
        if code != RELAY_OK:
            message = (
                payload.get("message")
                or payload.get("reason")
                or f"Relay returned code {code} (HTTP {response.status_code})"
            )
            error_cls = StaleNonce if "nonce" in str(message).lower() else RelayRejected
            logger.warning("relay.rejected", path=path, code=code, message=message)
            raise error_cls(
                str(message), code=code, status_code=response.status_code, payload=payload
            )

        data = payload.get("data")
        if not isinstance(data, dict):
            raise RelayRejected(
                f"Relay returned no data for {path}",
                code=code,
                status_code=response.status_code,
                payload=payload,
            )
        return data

    async def get_tokens(self) -> List[TokenConfig]:
        """List tokens the relay supports, with their fee schedule."""
        data = await self._request("GET", "/api/v1/config/token/all")
        return [TokenConfig.from_dict(t) for t in data.get("tokens", [])]

    async def get_token(self, token_address: str) -> Optional[TokenConfig]:
        """Find a supported token by contract address.

        Returns:
            The token, or None if the relay does not support it
        """
        wanted = to_base58_address(token_address)
        for token in await self.get_tokens():
            if token.token_address == wanted:
                return token
        return None

    async def get_providers(self) -> List[ProviderConfig]:
        """List service providers and their deadline policies."""
        data = await self._request("GET", "/api/v1/config/provider/all")
        return [ProviderConfig.from_dict(p) for p in data.get("providers", [])]

    async def get_account(self, address: str) -> AccountSnapshot:
        """Fetch the GasFree account state of a user.

        Args:
            address: The user's address (not the proxy address)

        Returns:
            Account snapshot including the current nonce
        """
        data = await self._request("GET", f"/api/v1/address/{to_base58_address(address)}")
        return AccountSnapshot.from_dict(data)

    async def submit_transfer(
        self,
        signed_auth: SignedTransferAuthorization,
        request_id: Optional[str] = None,
    ) -> str:
        """Submit a signed transfer authorization.

        Args:
            signed_auth: Signed authorization
            request_id: Client-side unique id (default: random uuid4)

        Returns:
            Trace id assigned by the relay

        Raises:
            StaleNonce: If the relay rejects the nonce
            RelayRejected: For any other rejection
        """
        body = signed_auth.to_submit_payload(request_id or str(uuid.uuid4()))
        data = await self._request("POST", "/api/v1/gasfree/submit", body)
        trace_id = data["id"]
        logger.info(
            "transfer.submitted",
            trace_id=trace_id,
            user=signed_auth.user,
            nonce=signed_auth.nonce,
        )
        return trace_id

    async def get_transfer_status(self, trace_id: str) -> TransferStatus:
        """Query the execution status of a submitted authorization.

        Raises:
            RelayRejected: If the relay has no record of the trace id
        """
        data = await self._request("GET", f"/api/v1/gasfree/{trace_id}")
        if not data:
            raise RelayRejected(f"Transfer not found: {trace_id}", code=RELAY_OK)
        return TransferStatus.from_dict(data)
