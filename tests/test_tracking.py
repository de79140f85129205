"""Tests for transfer status tracking."""

import pytest

from gasfree_sdk.errors import PollTimeout, RelayRejected
from gasfree_sdk.relay import (
    DEFAULT_STATE_MAPPING,
    RelayStateMapping,
    TransferPhase,
    TransferStatus,
    TransferTracker,
    wait_for_transfer,
)


TRACE_ID = "6c3ff67e-0bf4-4c09-91ca-0c7c254b01a0"


def status(state):
    return TransferStatus(id=TRACE_ID, state=state)


class FakeStatusClient:
    """Relay client stand-in that replays a list of states."""

    def __init__(self, states):
        self._states = list(states)
        self.queries = 0

    async def get_transfer_status(self, trace_id):
        assert trace_id == TRACE_ID
        self.queries += 1
        state = self._states.pop(0) if len(self._states) > 1 else self._states[0]
        if isinstance(state, Exception):
            raise state
        return status(state)


class FakeSleep:
    def __init__(self):
        self.calls = []

    async def __call__(self, seconds):
        self.calls.append(seconds)


class TestStateMapping:
    """Tests for relay state classification."""

    @pytest.mark.parametrize("state", ["SUCCEED", "SUCCESS", "succeed", " Success "])
    def test_success_states(self, state):
        """Test recognized success states, case-insensitively."""
        assert DEFAULT_STATE_MAPPING.classify(state) is TransferPhase.SUCCEEDED

    @pytest.mark.parametrize("state", ["FAILED", "EXPIRED", "CANCELED", "failed"])
    def test_failure_states(self, state):
        """Test recognized failure states."""
        assert DEFAULT_STATE_MAPPING.classify(state) is TransferPhase.FAILED

    @pytest.mark.parametrize("state", ["WAITING", "INPROGRESS", "CONFIRMING", "SOMETHING_NEW", None, 3])
    def test_other_states_are_pending(self, state):
        """Test that unknown and intermediate states count as pending."""
        assert DEFAULT_STATE_MAPPING.classify(state) is TransferPhase.PENDING

    def test_numeric_codes(self):
        """Test a mapping for a relay that reports numeric states."""
        mapping = RelayStateMapping.of(success=[3], failure=[4, "5"])

        assert mapping.classify(3) is TransferPhase.SUCCEEDED
        assert mapping.classify("3") is TransferPhase.SUCCEEDED
        assert mapping.classify(5) is TransferPhase.FAILED
        assert mapping.classify(1) is TransferPhase.PENDING

    def test_overlap_rejected(self):
        """Test that a state cannot be both success and failure."""
        with pytest.raises(ValueError, match="both success and failure"):
            RelayStateMapping.of(success=["DONE"], failure=["done"])


class TestTransferTracker:
    """Tests for the tracking state machine."""

    def test_initial_phase(self):
        """Test a fresh tracker."""
        tracker = TransferTracker(TRACE_ID)

        assert tracker.phase is TransferPhase.SUBMITTED
        assert tracker.attempts == 0
        assert tracker.last_state is None
        assert tracker.is_terminal is False

    def test_pending_then_success(self):
        """Test the normal path."""
        tracker = TransferTracker(TRACE_ID, max_attempts=5)

        assert tracker.observe(status("WAITING")) is TransferPhase.PENDING
        assert tracker.observe(status("INPROGRESS")) is TransferPhase.PENDING
        assert tracker.observe(status("SUCCEED")) is TransferPhase.SUCCEEDED
        assert tracker.attempts == 3
        assert tracker.last_state == "SUCCEED"
        assert tracker.is_terminal is True

    def test_failure(self):
        """Test a failed transfer."""
        tracker = TransferTracker(TRACE_ID)

        assert tracker.observe(status("FAILED")) is TransferPhase.FAILED
        assert tracker.is_terminal is True

    def test_budget_exhausted(self):
        """Test that the tracker times out after max_attempts pending reports."""
        tracker = TransferTracker(TRACE_ID, max_attempts=2)

        assert tracker.observe(status("WAITING")) is TransferPhase.PENDING
        assert tracker.observe(status("WAITING")) is TransferPhase.TIMED_OUT
        assert tracker.is_terminal is True

    def test_success_on_last_attempt(self):
        """Test that a terminal state on the last attempt wins over the timeout."""
        tracker = TransferTracker(TRACE_ID, max_attempts=1)

        assert tracker.observe(status("SUCCEED")) is TransferPhase.SUCCEEDED

    def test_terminal_is_final(self):
        """Test that a terminal tracker accepts no more reports."""
        tracker = TransferTracker(TRACE_ID)
        tracker.observe(status("SUCCEED"))

        with pytest.raises(RuntimeError, match="already succeeded"):
            tracker.observe(status("FAILED"))

    def test_invalid_budget(self):
        """Test that the budget must be positive."""
        with pytest.raises(ValueError):
            TransferTracker(TRACE_ID, max_attempts=0)


class TestWaitForTransfer:
    """Tests for polling the relay."""

    @pytest.mark.asyncio
    async def test_waits_until_success(self):
        """Test polling until a success state."""
        client = FakeStatusClient(["WAITING", "INPROGRESS", "SUCCEED"])
        sleep = FakeSleep()

        tracker = await wait_for_transfer(client, TRACE_ID, interval=2.0, sleep=sleep)

        assert tracker.phase is TransferPhase.SUCCEEDED
        assert client.queries == 3
        assert sleep.calls == [2.0, 2.0, 2.0]

    @pytest.mark.asyncio
    async def test_failure_is_returned(self):
        """Test that a failed transfer is a result, not an error."""
        client = FakeStatusClient(["WAITING", "FAILED"])

        tracker = await wait_for_transfer(client, TRACE_ID, sleep=FakeSleep())

        assert tracker.phase is TransferPhase.FAILED
        assert tracker.last_state == "FAILED"

    @pytest.mark.asyncio
    async def test_timeout(self):
        """Test that an exhausted budget raises PollTimeout."""
        client = FakeStatusClient(["WAITING"])

        with pytest.raises(PollTimeout) as exc_info:
            await wait_for_transfer(client, TRACE_ID, max_attempts=4, sleep=FakeSleep())

        assert client.queries == 4
        assert exc_info.value.trace_id == TRACE_ID
        assert exc_info.value.attempts == 4
        assert exc_info.value.last_state == "WAITING"

    @pytest.mark.asyncio
    async def test_custom_mapping(self):
        """Test polling with numeric relay states."""
        client = FakeStatusClient([1, 2, 3])
        mapping = RelayStateMapping.of(success=[3], failure=[4])

        tracker = await wait_for_transfer(client, TRACE_ID, mapping=mapping, sleep=FakeSleep())

        assert tracker.phase is TransferPhase.SUCCEEDED
        assert tracker.attempts == 3

    @pytest.mark.asyncio
    async def test_relay_errors_propagate(self):
        """Test that relay errors are not swallowed by the poller."""
        client = FakeStatusClient(["WAITING", RelayRejected("Transfer not found: x")])

        with pytest.raises(RelayRejected, match="not found"):
            await wait_for_transfer(client, TRACE_ID, sleep=FakeSleep())
