import json
from typing import Any, Dict


def format_for_display(structured_data: Dict[str, Any]) -> str:
    """
    Render structured data for on-screen reading.

    Breaks the line after every comma and puts braces on their own lines.
    Cosmetic only: commas and braces inside string values are split too,
    so the output is not guaranteed to parse back.
    """
    compact = json.dumps(structured_data, ensure_ascii=False, separators=(",", ":"))
    return (
        compact
        .replace(",", ",\n")
        .replace("{", "{\n  ")
        .replace("}", "\n}")
    )
