from __future__ import annotations

from typing import Any, Dict, List

from jsonschema.validators import Draft202012Validator

from landing.errors import ShapeValidationError

# Top-level contract only. Per-section fields are left to the renderer.
SECTIONS_DOC_SCHEMA: Dict[str, Any] = {
    "$schema": "https://json-schema.org/draft/2020-12/schema",
    "type": "object",
    "required": ["sections"],
    "properties": {
        "sections": {
            "type": "array",
            "items": {"type": "object"},
        },
    },
}

_validator = Draft202012Validator(SECTIONS_DOC_SCHEMA)


def _error_path(err: Any) -> str:
    path = ""
    for part in err.absolute_path:
        path += f"[{part}]" if isinstance(part, int) else (f".{part}" if path else str(part))
    return path or "(root)"


def collect_errors(doc: Any) -> List[Dict[str, str]]:
    """
    Return a list of {"path": "...", "message": "..."} error dicts,
    sorted by path. Empty when the document has the expected shape.
    """
    errors = [
        {"path": _error_path(err), "message": err.message}
        for err in _validator.iter_errors(doc)
    ]
    return sorted(errors, key=lambda e: e["path"])


def validate_sections_doc(doc: Any) -> List[Dict[str, Any]]:
    """Return the ``sections`` array of a decoded document or raise ShapeValidationError."""
    errs = collect_errors(doc)
    if errs:
        summary = "; ".join(f"{e['path']}: {e['message']}" for e in errs[:3])
        raise ShapeValidationError(f"Model output has the wrong shape: {summary}", errs)
    return doc["sections"]
