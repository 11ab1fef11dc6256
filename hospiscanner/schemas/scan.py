from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel


class ParseErrorKind(str, Enum):
    NOT_STRUCTURED = "not_structured"
    MALFORMED_SYNTAX = "malformed_syntax"
    UNEXPECTED_FAILURE = "unexpected_failure"


class InterpretationResult(BaseModel):
    """Outcome of interpreting one scanned payload"""
    raw_text: str
    is_structured: bool
    structured_data: Optional[Dict[str, Any]] = None
    display_text: Optional[str] = None
    error_message: Optional[str] = None
    error_kind: Optional[ParseErrorKind] = None
    identifier_value: Optional[str] = None
    requires_verification: bool = False

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "raw_text": "{\"name\":\"John\",\"dni\":\"12345678A\"}",
                "is_structured": True,
                "structured_data": {"name": "John", "dni": "12345678A"},
                "display_text": "{\n  \"name\":\"John\",\n\"dni\":\"12345678A\"\n}",
                "error_message": None,
                "error_kind": None,
                "identifier_value": "12345678A",
                "requires_verification": True
            }
        }


class InterpretRequest(BaseModel):
    raw_text: str


class ScanTextRequest(BaseModel):
    """Decoded text delivered by the code reader"""
    raw_text: str

    class Config:
        json_schema_extra = {
            "example": {
                "raw_text": "{\"name\":\"John\",\"age\":30}"
            }
        }


class VerifyPinRequest(BaseModel):
    pin: str


class ScanErrorRequest(BaseModel):
    message: str
