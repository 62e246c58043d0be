from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict

from landing.errors import GenerationFormatError

log = logging.getLogger(__name__)


_LEADING_FENCE_RE = re.compile(r"^\s*```(?:json)?\s*", re.IGNORECASE)
_TRAILING_FENCE_RE = re.compile(r"\s*```\s*$")
# C0 controls (newlines and tabs included) plus DEL and the C1 range
_CONTROL_CHARS_RE = re.compile(r"[\u0000-\u001f\u007f-\u009f]")
_BLANK_LINES_RE = re.compile(r"\n\s*\n")
# Greedy: first "{" through last "}"
_OBJECT_SPAN_RE = re.compile(r"\{[\s\S]*\}")


def _sanitize_pass(text: str) -> str:
    t = _LEADING_FENCE_RE.sub("", text, count=1)
    t = _TRAILING_FENCE_RE.sub("", t, count=1)
    t = _CONTROL_CHARS_RE.sub("", t)
    t = t.strip()
    return _BLANK_LINES_RE.sub("\n", t)


def sanitize_model_text(text: str) -> str:
    """Strip code fences, control characters and blank-line runs from model output.

    Each step only removes characters, so the pass is repeated until the text
    stops changing. That makes the result idempotent even for inputs such as
    nested fences or a fence hidden behind a control character.
    Never raises; may return an empty string.
    """
    current = text if isinstance(text, str) else ""
    while True:
        cleaned = _sanitize_pass(current)
        if cleaned == current:
            return cleaned
        current = cleaned


def _decode_sections_object(text: str) -> Dict[str, Any]:
    try:
        value = json.loads(text)
    except RecursionError as e:
        raise ValueError("JSON nesting too deep") from e
    if not isinstance(value, dict):
        raise ValueError(f"expected a JSON object, got {type(value).__name__}")
    if "sections" not in value:
        raise ValueError("decoded object has no 'sections' field")
    return value


def recover_sections_doc(text: str) -> Dict[str, Any]:
    """Decode sanitized model output into an object that has a ``sections`` key.

    Tries the whole text first, then the span from the first ``{`` to the last
    ``}``. Raises GenerationFormatError when both fail.
    """
    try:
        doc = _decode_sections_object(text)
    except ValueError as e:
        original_error = e
    else:
        log.debug("parse.direct: decoded sanitized text (%d chars)", len(text))
        return doc

    log.info("parse.direct: failed (%s); trying object span", original_error)
    match = _OBJECT_SPAN_RE.search(text)
    if not match:
        raise GenerationFormatError(
            f"Invalid JSON from model. Original error: {original_error}",
            decode_error=original_error,
            text=text,
        )

    try:
        doc = _decode_sections_object(match.group(0))
    except ValueError as e:
        log.warning("parse.span: object span also failed: %s", e)
        raise GenerationFormatError(
            f"Invalid JSON from model. Original error: {original_error}",
            decode_error=original_error,
            text=text,
        ) from e

    log.info("parse.span: recovered object from %d-char span", len(match.group(0)))
    return doc
