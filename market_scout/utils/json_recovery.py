"""JSON extraction helpers for model output."""

import json
import re
from typing import Any

import structlog

logger = structlog.get_logger()


def extract_json_object(text: str) -> dict[str, Any] | None:
    """Extract the first balanced JSON object from *text*.

    Unlike a greedy regex ``\\{[\\s\\S]*\\}``, this uses depth / string
    tracking so that braces inside strings or in prose *after* the JSON
    block are ignored. Falls back to :func:`safe_json_loads` for escape
    repair.

    Returns ``None`` when no complete, valid object can be found. A truncated
    object is never repaired: partial model output must not be merged.
    """
    start = text.find("{")
    if start < 0:
        return None

    depth = 0
    in_string = False
    length = len(text)
    i = start

    while i < length:
        ch = text[i]

        if in_string:
            if ch == "\\":
                i += 2
                continue
            if ch == '"':
                in_string = False
        else:
            if ch == '"':
                in_string = True
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    snippet = text[start : i + 1]
                    try:
                        obj = safe_json_loads(snippet)
                    except (json.JSONDecodeError, ValueError):
                        logger.debug("Balanced JSON object failed to parse", size=len(snippet))
                        return None
                    return obj if isinstance(obj, dict) else None

        i += 1

    return None


def safe_json_loads(json_str: str) -> Any:
    """Parse JSON string with fallback for common escape issues.

    Models sometimes generate invalid escape sequences in JSON.
    This function tries normal parsing first, then attempts to fix
    common issues if that fails.

    Raises:
        json.JSONDecodeError: If parsing fails even after fixes.
    """
    try:
        return json.loads(json_str)
    except json.JSONDecodeError:
        pass

    # Escape lone backslashes not followed by a valid JSON escape char
    fixed_str = re.sub(r'\\(?!["\\/bfnrtu])', r"\\\\", json_str)

    try:
        return json.loads(fixed_str)
    except json.JSONDecodeError:
        pass

    fixed_str = re.sub(r"[\x00-\x1f\x7f-\x9f]", "", fixed_str)

    return json.loads(fixed_str)
