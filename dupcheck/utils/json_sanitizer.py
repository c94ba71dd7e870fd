"""Sanitize and parse JSON from LLM responses.

Even in JSON mode, chat models occasionally wrap the object in a fenced
```json block or emit literal newlines/tabs inside string values (the
``Reason`` field is free text).  This module handles those cases before the
payload reaches schema validation.
"""

import json
import re

_FENCE_RE = re.compile(r"```(?:json)?\s*(\{.*\})\s*```", re.DOTALL)

_ESCAPES = {
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\b": "\\b",
    "\f": "\\f",
}


class EmptyResponseError(ValueError):
    """Raised when the model returns no content at all."""


def strip_code_fence(raw: str) -> str:
    """Return the JSON object inside a fenced code block, or ``raw`` unchanged."""
    match = _FENCE_RE.search(raw)
    return match.group(1) if match else raw


def parse_llm_json(raw: str) -> dict:
    """Parse a JSON object from an LLM response.

    Args:
        raw: Raw message content from the chat model

    Returns:
        Parsed dictionary

    Raises:
        EmptyResponseError: If the content is empty or whitespace
        json.JSONDecodeError: If JSON is still invalid after sanitization
        ValueError: If parsed result is not a dict
    """
    if raw is None or not raw.strip():
        raise EmptyResponseError("LLM returned empty response")

    text = strip_code_fence(raw.strip())
    try:
        result = json.loads(text)
    except json.JSONDecodeError:
        result = json.loads(_sanitize_json_string(text))

    if not isinstance(result, dict):
        raise ValueError(f"Expected JSON object, got {type(result).__name__}")
    return result


def _sanitize_json_string(raw: str) -> str:
    """Escape control characters that appear inside JSON string values."""
    out = []
    in_string = False
    escaped = False

    for char in raw:
        if in_string:
            if escaped:
                escaped = False
                out.append(char)
            elif char == "\\":
                escaped = True
                out.append(char)
            elif char == '"':
                in_string = False
                out.append(char)
            elif ord(char) < 0x20:
                out.append(_ESCAPES.get(char, f"\\u{ord(char):04x}"))
            else:
                out.append(char)
        else:
            if char == '"':
                in_string = True
            out.append(char)

    return "".join(out)
