"""
Scan Session API endpoints
"""

import logging
from typing import Dict

from fastapi import APIRouter, HTTPException, Query

from ...schemas.scan import (
    InterpretationResult,
    InterpretRequest,
    ScanErrorRequest,
    ScanTextRequest,
    VerifyPinRequest,
)
from ...schemas.session import (
    SessionEventsResponse,
    SessionSnapshot,
    SessionStartResponse,
    SubmitScanResponse,
    VerifyPinResponse,
)
from ...services import scanservice

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/scan", tags=["scan"])


@router.post("/interpret", response_model=InterpretationResult)
def interpret(payload: InterpretRequest) -> InterpretationResult:
    return scanservice.interpret(payload.raw_text)


@router.post("/session/start", response_model=SessionStartResponse)
def session_start() -> SessionStartResponse:
    return scanservice.start_session()


@router.get("/session/{session_id}", response_model=SessionSnapshot)
def session_get(session_id: str) -> SessionSnapshot:
    return scanservice.get_session(session_id)


@router.get("/session/{session_id}/events", response_model=SessionEventsResponse)
def session_events(session_id: str, after: int = Query(-1)) -> SessionEventsResponse:
    """
    Snapshots newer than `after`, oldest first.

    Example:
        GET /api/v1/scan/session/3f1c.../events?after=2
    """
    return scanservice.get_session_events(session_id, after)


@router.post("/session/{session_id}/detect", response_model=SubmitScanResponse)
def session_detect(session_id: str, payload: ScanTextRequest) -> SubmitScanResponse:
    """
    Deliver one decoded QR text to the session

    Example:
        POST /api/v1/scan/session/3f1c.../detect
        {
            "raw_text": "{\"name\":\"John\",\"dni\":\"12345678A\"}"
        }
    """
    try:
        return scanservice.submit_scanned_text(session_id, payload.raw_text)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error handling detection: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/session/{session_id}/verify-pin", response_model=VerifyPinResponse)
def session_verify_pin(session_id: str, payload: VerifyPinRequest) -> VerifyPinResponse:
    """
    Check the operator PIN against the pending result

    A wrong PIN is not an error: the response has verified=false and the
    session stays pending.
    """
    try:
        return scanservice.verify_pin(session_id, payload.pin)
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error verifying PIN: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.post("/session/{session_id}/cancel", response_model=SessionSnapshot)
def session_cancel(session_id: str) -> SessionSnapshot:
    return scanservice.cancel_verification(session_id)


@router.post("/session/{session_id}/reset", response_model=SessionSnapshot)
def session_reset(session_id: str) -> SessionSnapshot:
    return scanservice.reset_session(session_id)


@router.post("/session/{session_id}/clear-error", response_model=SessionSnapshot)
def session_clear_error(session_id: str) -> SessionSnapshot:
    return scanservice.clear_error(session_id)


@router.post("/session/{session_id}/scan-error", response_model=SessionSnapshot)
def session_scan_error(session_id: str, payload: ScanErrorRequest) -> SessionSnapshot:
    return scanservice.report_scan_error(session_id, payload.message)


@router.post("/session/{session_id}/close", response_model=SessionSnapshot)
def session_close(session_id: str) -> SessionSnapshot:
    return scanservice.close_session(session_id)


@router.delete("/session/{session_id}")
def session_discard(session_id: str) -> Dict[str, object]:
    return scanservice.discard_session(session_id)
