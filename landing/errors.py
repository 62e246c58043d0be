from __future__ import annotations

from typing import Dict, List, Optional


class LandingPageError(Exception):
    """Base class for failures scoped to a single generation or lookup request."""


class GenerationTransportError(LandingPageError):
    """The model call failed or returned nothing usable."""


class GenerationFormatError(LandingPageError):
    """Sanitized model output could not be decoded by either recovery tier.

    Carries the underlying decode error and a copy of the text that was
    attempted. Both are for diagnostics only.
    """

    def __init__(self, message: str, decode_error: Optional[Exception] = None, text: str = "") -> None:
        super().__init__(message)
        self.decode_error = decode_error
        self.text = text


class ShapeValidationError(LandingPageError):
    """Decoded output is valid JSON with the wrong top-level shape."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, str]]] = None) -> None:
        super().__init__(message)
        self.errors: List[Dict[str, str]] = list(errors or [])


class NotFoundError(LandingPageError):
    def __init__(self, record_id: str) -> None:
        super().__init__(f"Landing page not found: {record_id}")
        self.record_id = record_id
