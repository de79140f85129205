"""Error types for the GasFree SDK.

Every failure raised by the SDK derives from :class:`GasFreeError`.
Validation errors also derive from :class:`ValueError` so callers that
already guard input with ``except ValueError`` keep working.
"""

from typing import Any, Dict, Optional


class GasFreeError(Exception):
    """Base class for all GasFree SDK errors."""


class InvalidAmount(GasFreeError, ValueError):
    """An amount, fee, deadline or nonce is negative or does not fit in uint256."""


class InvalidKey(GasFreeError, ValueError):
    """A private key is malformed or is not a valid secp256k1 scalar."""


class InvalidAddress(GasFreeError, ValueError):
    """An address is neither a valid base58check nor a 20-byte hex address."""


class EncodingMismatch(GasFreeError):
    """Struct values do not line up with the schema being encoded."""


class RelayRejected(GasFreeError):
    """The relay API answered with ``code != 200``.

    Attributes:
        message: The relay's ``message`` or ``reason`` text, verbatim
        code: The ``code`` field of the response body, if any
        status_code: HTTP status code of the response
        payload: Decoded response body
    """

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        status_code: Optional[int] = None,
        payload: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.payload = payload or {}


class StaleNonce(RelayRejected):
    """The relay refused the authorization because of its nonce.

    Re-fetch the account state and rebuild the authorization.
    """


class PollTimeout(GasFreeError):
    """Polling ran out of attempts before a terminal state was observed.

    This says nothing about the outcome of the transfer itself.
    """

    def __init__(self, trace_id: str, attempts: int, last_state: Any = None):
        super().__init__(
            f"No terminal state for {trace_id} after {attempts} attempts "
            f"(last state: {last_state})"
        )
        self.trace_id = trace_id
        self.attempts = attempts
        self.last_state = last_state


class LedgerError(GasFreeError):
    """A ledger (TronGrid) call failed or returned an unusable payload."""
