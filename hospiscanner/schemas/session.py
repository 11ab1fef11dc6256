"""
Scan Session Schema - State variants of one scan-to-result lifecycle
"""

from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, Field

from .scan import InterpretationResult


class SessionPhase(str, Enum):
    SCANNING = "scanning"
    PENDING_VERIFICATION = "pending_verification"
    SHOWING_RESULT = "showing_result"
    IDLE = "idle"


class ScanningState(BaseModel):
    """Code reader may deliver detections"""
    phase: Literal[SessionPhase.SCANNING] = SessionPhase.SCANNING


class PendingVerificationState(BaseModel):
    """Result is held back until the operator enters the PIN"""
    phase: Literal[SessionPhase.PENDING_VERIFICATION] = SessionPhase.PENDING_VERIFICATION
    pending: InterpretationResult


class ShowingResultState(BaseModel):
    """Result is unlocked for display"""
    phase: Literal[SessionPhase.SHOWING_RESULT] = SessionPhase.SHOWING_RESULT
    result: InterpretationResult


class IdleState(BaseModel):
    """Session torn down, nothing held in memory"""
    phase: Literal[SessionPhase.IDLE] = SessionPhase.IDLE


SessionState = Union[ScanningState, PendingVerificationState, ShowingResultState, IdleState]


class SessionSnapshot(BaseModel):
    """Observable view of a session for the presentation layer"""
    session_id: str
    version: int
    phase: SessionPhase
    is_scanning_active: bool
    pending_verification: bool = False
    result: Optional[InterpretationResult] = None
    last_error: Optional[str] = None
    updated_at: str

    class Config:
        json_schema_extra = {
            "example": {
                "session_id": "3f1c2b7e9a0d4c4f8e2a6b1d5c9e7f30",
                "version": 2,
                "phase": "pending_verification",
                "is_scanning_active": False,
                "pending_verification": True,
                "result": None,
                "last_error": None,
                "updated_at": "2026-10-17T10:30:00+00:00"
            }
        }


class SessionStartResponse(BaseModel):
    session_id: str
    started_at: str
    session: SessionSnapshot


class SubmitScanResponse(BaseModel):
    accepted: bool
    interpretation: Optional[InterpretationResult] = None
    session: SessionSnapshot


class VerifyPinResponse(BaseModel):
    verified: bool
    session: SessionSnapshot


class SessionEventsResponse(BaseModel):
    session_id: str
    events: List[SessionSnapshot] = Field(default_factory=list)
