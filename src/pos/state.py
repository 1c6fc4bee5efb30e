"""Per-terminal scan state machine.

Each authenticated operator drives one terminal through::

    IDLE -> SCANNING -> RESOLVING -> REDEEMING -> RESULT

Only SCANNING can be cancelled. RESOLVING and REDEEMING run to completion and
hold a busy lock, so one terminal never processes two scans at once. The state
lives in the Django cache and the POS front-end only observes it.
"""

import typing as t
from datetime import datetime
from enum import StrEnum
from uuid import UUID, uuid4

import structlog
from django.conf import settings
from django.core.cache import cache
from django.utils import timezone
from ninja import Schema

from entitlements.models import RedemptionKind

from .exceptions import InvalidTransitionError, TerminalBusyError

logger = structlog.get_logger(__name__)

STATE_TTL = 60 * 60 * 24


class ScanState(StrEnum):
    IDLE = "IDLE"
    SCANNING = "SCANNING"
    RESOLVING = "RESOLVING"
    REDEEMING = "REDEEMING"
    RESULT = "RESULT"


class TerminalEvent(StrEnum):
    START = "start"
    CANCEL = "cancel"
    SUBMIT = "submit"
    RESOLVED = "resolved"
    FINISH = "finish"
    RESET = "reset"


BUSY_STATES = frozenset({ScanState.RESOLVING, ScanState.REDEEMING})

TRANSITIONS: dict[tuple[ScanState, TerminalEvent], ScanState] = {
    (ScanState.IDLE, TerminalEvent.START): ScanState.SCANNING,
    (ScanState.RESULT, TerminalEvent.START): ScanState.SCANNING,
    (ScanState.SCANNING, TerminalEvent.CANCEL): ScanState.IDLE,
    (ScanState.SCANNING, TerminalEvent.SUBMIT): ScanState.RESOLVING,
    (ScanState.RESOLVING, TerminalEvent.RESOLVED): ScanState.REDEEMING,
    (ScanState.RESOLVING, TerminalEvent.FINISH): ScanState.RESULT,
    (ScanState.REDEEMING, TerminalEvent.FINISH): ScanState.RESULT,
    (ScanState.RESULT, TerminalEvent.RESET): ScanState.IDLE,
}


def next_state(state: ScanState, event: TerminalEvent) -> ScanState:
    """Return the state reached from ``state`` on ``event``.

    Raises:
        InvalidTransitionError: If the event is not allowed in ``state``.
    """
    try:
        return TRANSITIONS[(state, event)]
    except KeyError:
        raise InvalidTransitionError(event.value, state.value) from None


class ScanResult(Schema):
    accepted: bool
    code: str
    detail: str
    kind: RedemptionKind | None = None
    public_key: str | None = None
    record_id: UUID | None = None
    finished_at: datetime


class TerminalSnapshot(Schema):
    state: ScanState = ScanState.IDLE
    updated_at: datetime | None = None
    last_result: ScanResult | None = None


def get_terminal_cache_key(terminal_id: t.Any) -> str:
    return f"pos_terminal:{terminal_id}"


def get_terminal_lock_key(terminal_id: t.Any) -> str:
    return f"pos_terminal_lock:{terminal_id}"


class ScanTerminal:
    """State machine of one POS terminal, persisted in the cache."""

    def __init__(self, terminal_id: t.Any, processing_timeout: int | None = None) -> None:
        self.terminal_id = terminal_id
        self.processing_timeout = processing_timeout or settings.POS_PROCESSING_TIMEOUT
        self._key = get_terminal_cache_key(terminal_id)
        self._lock_key = get_terminal_lock_key(terminal_id)
        self._lock_token: str | None = None

    def _stored(self) -> TerminalSnapshot:
        raw = cache.get(self._key)
        if raw is None:
            return TerminalSnapshot()
        return TerminalSnapshot.model_validate(raw)

    def snapshot(self) -> TerminalSnapshot:
        """Current state of the terminal.

        A busy state whose lock has expired (the worker died mid-scan) is reported
        as IDLE so the terminal can scan again.
        """
        snapshot = self._stored()
        if snapshot.state in BUSY_STATES and cache.get(self._lock_key) is None:
            logger.warning("pos_terminal_lock_expired", terminal_id=str(self.terminal_id), state=snapshot.state)
            return TerminalSnapshot(
                state=ScanState.IDLE, updated_at=snapshot.updated_at, last_result=snapshot.last_result
            )
        return snapshot

    def _save(self, state: ScanState, last_result: ScanResult | None) -> TerminalSnapshot:
        snapshot = TerminalSnapshot(state=state, updated_at=timezone.now(), last_result=last_result)
        cache.set(self._key, snapshot.model_dump(mode="json"), timeout=STATE_TTL)
        return snapshot

    def _apply(self, event: TerminalEvent) -> TerminalSnapshot:
        current = self.snapshot()
        return self._save(next_state(current.state, event), current.last_result)

    def start(self) -> TerminalSnapshot:
        """Open the scanner."""
        return self._apply(TerminalEvent.START)

    def cancel(self) -> TerminalSnapshot:
        """Close the scanner without scanning."""
        return self._apply(TerminalEvent.CANCEL)

    def reset(self) -> TerminalSnapshot:
        """Dismiss the last result."""
        return self._apply(TerminalEvent.RESET)

    def submit(self) -> TerminalSnapshot:
        """Hand a scan over for processing and take the busy lock.

        From IDLE or RESULT the scanner is opened implicitly first. The lock holds a
        token unique to this submit, so only this scan can later release it.

        Raises:
            TerminalBusyError: If another scan is still being processed.
        """
        current = self.snapshot()
        if current.state in BUSY_STATES:
            raise TerminalBusyError(current.state.value)
        state = current.state
        if state != ScanState.SCANNING:
            state = next_state(state, TerminalEvent.START)
        state = next_state(state, TerminalEvent.SUBMIT)
        token = uuid4().hex
        if not cache.add(self._lock_key, token, timeout=self.processing_timeout):
            raise TerminalBusyError(ScanState.RESOLVING.value)
        self._lock_token = token
        return self._save(state, current.last_result)

    def _superseded(self) -> bool:
        """Whether a later scan holds the lock this scan's lock expired into."""
        holder = cache.get(self._lock_key)
        return holder is not None and holder != self._lock_token

    def resolved(self) -> TerminalSnapshot:
        """Guest identity is known; move on to the ledger."""
        current = self._stored()
        if self._superseded():
            logger.warning("pos_terminal_scan_superseded", terminal_id=str(self.terminal_id), step="resolved")
            return current
        return self._save(next_state(current.state, TerminalEvent.RESOLVED), current.last_result)

    def finish(self, result: ScanResult) -> TerminalSnapshot:
        """Record the outcome of the scan and release the busy lock.

        A scan that outlived its lock leaves a newer scan's state and lock alone.
        """
        current = self._stored()
        if self._superseded():
            logger.warning("pos_terminal_scan_superseded", terminal_id=str(self.terminal_id), step="finish")
            return current
        try:
            if current.state not in BUSY_STATES:
                logger.warning("pos_terminal_finish_not_busy", terminal_id=str(self.terminal_id), state=current.state)
                return current
            return self._save(next_state(current.state, TerminalEvent.FINISH), result)
        finally:
            cache.delete(self._lock_key)
