"""
Payload interpreter - turns raw scanned text into an InterpretationResult.
Stateless; safe to call from any thread.
"""

import json
import logging
from typing import Any, Dict, Optional

from ..schemas.scan import InterpretationResult, ParseErrorKind
from .display import format_for_display

logger = logging.getLogger(__name__)

# Checked in order, first non-null value wins.
IDENTIFIER_KEYS = ("DNI", "dni", "Dni", "document_id", "documentId")

MIN_IDENTIFIER_LENGTH = 6
VERIFICATION_CODE_LENGTH = 6

NOT_AN_OBJECT_MESSAGE = "Could not parse as JSON object"


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, ensure_ascii=False, separators=(",", ":"))


def extract_identifier(structured_data: Dict[str, Any]) -> Optional[str]:
    """
    Find the document identifier in a parsed payload.

    Args:
        structured_data: Parsed key-value object

    Returns:
        The first non-null candidate value as text, or None
    """
    for key in IDENTIFIER_KEYS:
        value = structured_data.get(key)
        if value is not None:
            return _stringify(value)
    return None


def derive_verification_code(identifier_value: str) -> str:
    """Expected PIN: the first six decimal digits of the identifier."""
    digits = "".join(ch for ch in identifier_value if ch.isdecimal())
    return digits[:VERIFICATION_CODE_LENGTH]


def requires_verification(identifier_value: Optional[str]) -> bool:
    return identifier_value is not None and len(identifier_value) >= MIN_IDENTIFIER_LENGTH


def _not_structured(raw: str, message: str, kind: ParseErrorKind) -> InterpretationResult:
    logger.info(
        "parse_payload structured=False error_kind=%s length=%s",
        kind.value,
        len(raw),
    )
    return InterpretationResult(
        raw_text=raw,
        is_structured=False,
        error_message=message,
        error_kind=kind,
    )


def parse(raw: str) -> InterpretationResult:
    """
    Interpret scanned text as a JSON object.

    Never raises: every failure is reported through error_message and
    error_kind on a result with is_structured=False.
    """
    try:
        if not raw.strip():
            return _not_structured(raw, NOT_AN_OBJECT_MESSAGE, ParseErrorKind.NOT_STRUCTURED)

        data = json.loads(raw)
        if not isinstance(data, dict):
            return _not_structured(raw, NOT_AN_OBJECT_MESSAGE, ParseErrorKind.NOT_STRUCTURED)

        display_text = format_for_display(data)
        # Lone surrogates from \uXXXX escapes cannot be sent back as UTF-8.
        display_text.encode("utf-8")
        identifier_value = extract_identifier(data)
        gated = requires_verification(identifier_value)

        logger.info(
            "parse_payload structured=True fields=%s identifier_present=%s requires_verification=%s",
            len(data),
            identifier_value is not None,
            gated,
        )
        return InterpretationResult(
            raw_text=raw,
            is_structured=True,
            structured_data=data,
            display_text=display_text,
            identifier_value=identifier_value,
            requires_verification=gated,
        )
    except json.JSONDecodeError as e:
        return _not_structured(raw, f"Invalid JSON format: {e}", ParseErrorKind.MALFORMED_SYNTAX)
    except Exception as e:
        logger.warning(f"Unexpected failure while parsing payload: {e!r}")
        if not isinstance(raw, str):
            raw = repr(raw)
        return _not_structured(raw, f"Error parsing data: {e}", ParseErrorKind.UNEXPECTED_FAILURE)
