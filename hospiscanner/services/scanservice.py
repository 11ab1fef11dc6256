import logging
import threading
from typing import Dict

from fastapi import HTTPException

from ..core.config import get_max_active_sessions, get_session_event_history
from ..schemas.scan import InterpretationResult
from ..schemas.session import (
    IdleState,
    SessionEventsResponse,
    SessionSnapshot,
    SessionStartResponse,
    SubmitScanResponse,
    VerifyPinResponse,
)
from . import interpreter
from .sessioncontroller import ScanSessionController

logger = logging.getLogger(__name__)

sessions: Dict[str, ScanSessionController] = {}
_registry_lock = threading.Lock()


def _get_controller(session_id: str) -> ScanSessionController:
    controller = sessions.get(session_id)
    if controller is None:
        raise HTTPException(status_code=404, detail="Scan session not found")
    return controller


def _require_utf8(field: str, value: str) -> None:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError:
        raise HTTPException(status_code=422, detail=f"{field} is not valid UTF-8 text")


def _evict_closed_sessions() -> None:
    # Caller holds _registry_lock.
    closed = [sid for sid, controller in sessions.items() if isinstance(controller.state, IdleState)]
    for sid in closed:
        del sessions[sid]
    if closed:
        logger.info(f"Evicted {len(closed)} closed scan sessions")


def interpret(raw_text: str) -> InterpretationResult:
    _require_utf8("raw_text", raw_text)
    return interpreter.parse(raw_text)


def start_session() -> SessionStartResponse:
    with _registry_lock:
        if len(sessions) >= get_max_active_sessions():
            _evict_closed_sessions()
        if len(sessions) >= get_max_active_sessions():
            logger.warning(f"Refusing new scan session, {len(sessions)} already active")
            raise HTTPException(status_code=429, detail="Too many active scan sessions")
        controller = ScanSessionController(history_size=get_session_event_history())
        sessions[controller.session_id] = controller

    logger.info(f"Started scan session {controller.session_id}")
    return SessionStartResponse(
        session_id=controller.session_id,
        started_at=controller.started_at,
        session=controller.snapshot(),
    )


def get_session(session_id: str) -> SessionSnapshot:
    return _get_controller(session_id).snapshot()


def get_session_events(session_id: str, after: int = -1) -> SessionEventsResponse:
    controller = _get_controller(session_id)
    return SessionEventsResponse(session_id=session_id, events=controller.history(after))


def submit_scanned_text(session_id: str, raw_text: str) -> SubmitScanResponse:
    controller = _get_controller(session_id)
    _require_utf8("raw_text", raw_text)
    with controller.lock:
        accepted = controller.is_scanning_active
        interpretation = controller.submit_scanned_text(raw_text)
        snapshot = controller.snapshot()
    if snapshot.pending_verification:
        # Gated payload stays hidden until the PIN is verified.
        interpretation = None
    return SubmitScanResponse(
        accepted=accepted,
        interpretation=interpretation,
        session=snapshot,
    )


def verify_pin(session_id: str, pin: str) -> VerifyPinResponse:
    controller = _get_controller(session_id)
    with controller.lock:
        verified = controller.verify_pin(pin)
        snapshot = controller.snapshot()
    return VerifyPinResponse(verified=verified, session=snapshot)


def cancel_verification(session_id: str) -> SessionSnapshot:
    controller = _get_controller(session_id)
    controller.cancel_verification()
    return controller.snapshot()


def reset_session(session_id: str) -> SessionSnapshot:
    controller = _get_controller(session_id)
    controller.reset()
    return controller.snapshot()


def clear_error(session_id: str) -> SessionSnapshot:
    controller = _get_controller(session_id)
    controller.clear_error()
    return controller.snapshot()


def report_scan_error(session_id: str, message: str) -> SessionSnapshot:
    controller = _get_controller(session_id)
    _require_utf8("message", message)
    controller.report_scan_error(message)
    return controller.snapshot()


def close_session(session_id: str) -> SessionSnapshot:
    controller = _get_controller(session_id)
    controller.close()
    return controller.snapshot()


def discard_session(session_id: str) -> Dict[str, object]:
    with _registry_lock:
        controller = sessions.pop(session_id, None)
    if controller is None:
        raise HTTPException(status_code=404, detail="Scan session not found")
    controller.close()
    logger.info(f"Discarded scan session {session_id}")
    return {"session_id": session_id, "discarded": True}
