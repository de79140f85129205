"""Tracking of submitted transfers.

A submitted authorization moves through an explicit state machine:

    SUBMITTED -> PENDING -> SUCCEEDED | FAILED
         \\          \\
          +----------+--> TIMED_OUT   (attempt budget spent)

Transitions are driven only by the ``state`` the relay reports. The relay
uses strings ("SUCCEED") in some places and numeric codes in others, so
the terminal tags are configured explicitly in a :class:`RelayStateMapping`
instead of being guessed.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, FrozenSet, Iterable, Optional

import structlog

from ..errors import PollTimeout
from .client import GasFreeClient
from .types import TransferStatus

logger = structlog.get_logger(__name__)

DEFAULT_MAX_ATTEMPTS = 20
DEFAULT_POLL_INTERVAL = 5.0


class TransferPhase(Enum):
    SUBMITTED = "submitted"
    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"

    @property
    def is_terminal(self) -> bool:
        return self in (TransferPhase.SUCCEEDED, TransferPhase.FAILED, TransferPhase.TIMED_OUT)


def _normalize_state(state: Any) -> str:
    return str(state).strip().upper()


@dataclass(frozen=True)
class RelayStateMapping:
    """Relay states that end a transfer.

    Any state not listed here (including unknown ones) counts as pending.
    Comparison is case-insensitive on the string form, so a numeric code
    must be listed as e.g. ``"3"``.
    """

    success_states: FrozenSet[str]
    failure_states: FrozenSet[str]

    @classmethod
    def of(cls, success: Iterable[Any], failure: Iterable[Any]) -> "RelayStateMapping":
        success_states = frozenset(_normalize_state(s) for s in success)
        failure_states = frozenset(_normalize_state(s) for s in failure)
        overlap = success_states & failure_states
        if overlap:
            raise ValueError(f"States cannot be both success and failure: {sorted(overlap)}")
        return cls(success_states=success_states, failure_states=failure_states)

    def classify(self, state: Any) -> TransferPhase:
        """Map a relay state to SUCCEEDED, FAILED or PENDING."""
        if state is None:
            return TransferPhase.PENDING
        normalized = _normalize_state(state)
        if normalized in self.success_states:
            return TransferPhase.SUCCEEDED
        if normalized in self.failure_states:
            return TransferPhase.FAILED
        return TransferPhase.PENDING


DEFAULT_STATE_MAPPING = RelayStateMapping.of(
    success=("SUCCEED", "SUCCESS"),
    failure=("FAILED", "EXPIRED", "CANCELED"),
)


class TransferTracker:
    """State machine for one submitted authorization.

    Each call to :meth:`observe` consumes one attempt from the budget. When
    the budget is spent without a terminal relay state the tracker moves to
    TIMED_OUT.
    """

    def __init__(
        self,
        trace_id: str,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        mapping: RelayStateMapping = DEFAULT_STATE_MAPPING,
    ):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {max_attempts}")
        self.trace_id = trace_id
        self.max_attempts = max_attempts
        self.mapping = mapping
        self.phase = TransferPhase.SUBMITTED
        self.attempts = 0
        self.last_status: Optional[TransferStatus] = None

    @property
    def is_terminal(self) -> bool:
        return self.phase.is_terminal

    @property
    def last_state(self) -> Any:
        return self.last_status.state if self.last_status else None

    def observe(self, status: TransferStatus) -> TransferPhase:
        """Apply one status report from the relay.

        Raises:
            RuntimeError: If the tracker is already in a terminal phase
        """
        if self.is_terminal:
            raise RuntimeError(f"Transfer {self.trace_id} already {self.phase.value}")

        self.attempts += 1
        self.last_status = status
        phase = self.mapping.classify(status.state)
        if phase is TransferPhase.PENDING and self.attempts >= self.max_attempts:
            phase = TransferPhase.TIMED_OUT

        if phase is not self.phase:
            logger.info(
                "transfer.phase",
                trace_id=self.trace_id,
                phase=phase.value,
                state=status.state,
                attempt=self.attempts,
            )
        self.phase = phase
        return phase


async def wait_for_transfer(
    client: GasFreeClient,
    trace_id: str,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    interval: float = DEFAULT_POLL_INTERVAL,
    mapping: RelayStateMapping = DEFAULT_STATE_MAPPING,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> TransferTracker:
    """Poll the relay until the transfer succeeds or fails.

    Waits ``interval`` seconds before each query, for at most
    ``max_attempts`` queries. Relay errors propagate unchanged.

    Args:
        client: Relay client
        trace_id: Trace id returned by submit
        max_attempts: Query budget
        interval: Seconds between queries
        mapping: Terminal relay states
        sleep: Awaitable sleep function

    Returns:
        The tracker in phase SUCCEEDED or FAILED

    Raises:
        PollTimeout: If no terminal state was reported within the budget
    """
    tracker = TransferTracker(trace_id, max_attempts=max_attempts, mapping=mapping)
    while not tracker.is_terminal:
        await sleep(interval)
        tracker.observe(await client.get_transfer_status(trace_id))

    if tracker.phase is TransferPhase.TIMED_OUT:
        raise PollTimeout(trace_id, tracker.attempts, tracker.last_state)
    return tracker
