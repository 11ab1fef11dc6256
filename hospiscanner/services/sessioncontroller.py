"""
Scan Session Controller - Owns the state of one scan session and applies
operator and code-reader commands to it.
"""

import logging
import threading
from collections import deque
from datetime import datetime, timezone
from typing import Callable, Deque, List, Optional
from uuid import uuid4

from ..schemas.scan import InterpretationResult
from ..schemas.session import (
    IdleState,
    PendingVerificationState,
    ScanningState,
    SessionSnapshot,
    SessionState,
    ShowingResultState,
)
from . import interpreter

logger = logging.getLogger(__name__)

SessionListener = Callable[[SessionSnapshot], None]


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ScanSessionController:
    """
    State machine for a single scan session.

    Starts in Scanning. Every command takes the session lock, applies its
    transition, then notifies listeners before releasing the lock, so
    observers see transitions one at a time and in order.
    """

    def __init__(
        self,
        session_id: Optional[str] = None,
        history_size: int = 50,
        parse: Callable[[str], InterpretationResult] = interpreter.parse,
    ):
        self.session_id = session_id or uuid4().hex
        self.started_at = utc_now_iso()
        self._parse = parse
        self._lock = threading.RLock()
        self._state: SessionState = ScanningState()
        self._last_error: Optional[str] = None
        self._version = 0
        self._updated_at = self.started_at
        self._listeners: List[SessionListener] = []
        self._history: Deque[SessionSnapshot] = deque(maxlen=max(1, history_size))
        self._history.append(
            self._build_snapshot(self._state, None, self._version, self._updated_at)
        )

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------

    @property
    def lock(self) -> threading.RLock:
        """Re-entrant lock guarding transitions; hold it to group reads with a command."""
        return self._lock

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    @property
    def last_error(self) -> Optional[str]:
        with self._lock:
            return self._last_error

    @property
    def is_scanning_active(self) -> bool:
        with self._lock:
            return isinstance(self._state, ScanningState)

    def snapshot(self) -> SessionSnapshot:
        with self._lock:
            return self._history[-1]

    def history(self, after_version: int = -1) -> List[SessionSnapshot]:
        """Snapshots newer than after_version still held in the history buffer."""
        with self._lock:
            return [snap for snap in self._history if snap.version > after_version]

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """
        Register a listener called with a snapshot after every change.

        Returns:
            Callable that removes the listener
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _build_snapshot(
        self,
        state: SessionState,
        last_error: Optional[str],
        version: int,
        updated_at: str,
    ) -> SessionSnapshot:
        return SessionSnapshot(
            session_id=self.session_id,
            version=version,
            phase=state.phase,
            is_scanning_active=isinstance(state, ScanningState),
            pending_verification=isinstance(state, PendingVerificationState),
            result=state.result if isinstance(state, ShowingResultState) else None,
            last_error=last_error,
            updated_at=updated_at,
        )

    def _commit(
        self,
        state: SessionState,
        last_error: Optional[str],
        discard_history: bool = False,
    ) -> None:
        # Caller holds the lock. Nothing is mutated until the snapshot is built.
        previous = self._state.phase
        version = self._version + 1
        updated_at = utc_now_iso()
        snap = self._build_snapshot(state, last_error, version, updated_at)
        self._state = state
        self._last_error = last_error
        self._version = version
        self._updated_at = updated_at
        if discard_history:
            # Older snapshots may still carry an interpreted payload.
            self._history.clear()
        self._history.append(snap)
        logger.info(
            "session_transition session_id=%s from=%s to=%s version=%s error=%s",
            self.session_id,
            previous.value,
            state.phase.value,
            self._version,
            last_error is not None,
        )
        for listener in list(self._listeners):
            try:
                listener(snap)
            except Exception:
                logger.exception(f"Session listener failed for session {self.session_id}")

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def submit_scanned_text(self, raw: str) -> Optional[InterpretationResult]:
        """
        Handle one decoded text from the code reader.

        Args:
            raw: Text decoded from the QR code

        Returns:
            The interpretation, or None when the detection was ignored
            (not scanning) or failed internally
        """
        with self._lock:
            if not isinstance(self._state, ScanningState):
                logger.info(
                    f"Ignoring detection for session {self.session_id} in phase {self._state.phase.value}"
                )
                return None
            try:
                result = self._parse(raw)
                if not result.is_structured:
                    self._commit(self._state, result.error_message)
                elif result.requires_verification:
                    self._commit(PendingVerificationState(pending=result), None)
                else:
                    self._commit(ShowingResultState(result=result), None)
                return result
            except Exception as e:
                logger.error(f"Error processing QR code for session {self.session_id}: {e}")
                self._commit(self._state, f"Error processing QR code: {e}")
                return None

    on_code_detected = submit_scanned_text

    def verify_pin(self, code: str) -> bool:
        """Unlock the pending result if code matches its verification code."""
        with self._lock:
            state = self._state
            if not isinstance(state, PendingVerificationState):
                return False
            identifier = state.pending.identifier_value
            if identifier is None:
                return False
            if code != interpreter.derive_verification_code(identifier):
                logger.info(f"PIN mismatch for session {self.session_id}")
                return False
            self._commit(ShowingResultState(result=state.pending), self._last_error)
            return True

    def cancel_verification(self) -> None:
        with self._lock:
            if isinstance(self._state, PendingVerificationState):
                self._commit(ScanningState(), self._last_error)

    def reset(self) -> None:
        """Drop any result, pending result and error, and resume scanning."""
        with self._lock:
            self._commit(ScanningState(), None, discard_history=True)

    def clear_error(self) -> None:
        with self._lock:
            if self._last_error is not None:
                self._commit(self._state, None)

    def report_scan_error(self, message: str) -> None:
        """Record a failure reported by the code reader; no transition."""
        with self._lock:
            self._commit(self._state, message)

    def close(self) -> None:
        """End the session: clear everything held in memory and go Idle."""
        with self._lock:
            self._commit(IdleState(), None, discard_history=True)
