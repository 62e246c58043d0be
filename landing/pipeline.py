from __future__ import annotations

import logging
from typing import Callable, Optional

from landing import llm_client
from landing.config import env_flag
from landing.errors import GenerationFormatError, GenerationTransportError, NotFoundError
from landing.llm_parsing import recover_sections_doc, sanitize_model_text
from landing.llm_prompts import build_landing_page_prompt
from landing.models import LandingPageRecord, Section
from landing.store import ContentStore, get_store
from landing.validators import validate_sections_doc

log = logging.getLogger(__name__)

LOG_GENERATION_TEXT = env_flag("LOG_GENERATION_TEXT")

Generate = Callable[[str], str]

_default_store: Optional[ContentStore] = None


def default_store() -> ContentStore:
    global _default_store
    if _default_store is None:
        _default_store = get_store()
    return _default_store


def generate_and_store(
    idea: str,
    generate: Optional[Generate] = None,
    store: Optional[ContentStore] = None,
) -> LandingPageRecord:
    """Generate sections for ``idea``, validate them and persist one record.

    Raises GenerationTransportError, GenerationFormatError or
    ShapeValidationError; nothing is written to the store on failure.
    """
    if generate is None:
        generate = llm_client.generate
    if store is None:
        store = default_store()

    prompt = build_landing_page_prompt(idea)
    try:
        raw = generate(prompt)
    except GenerationTransportError:
        raise
    except Exception as e:
        raise GenerationTransportError(f"Model call failed: {e}") from e
    if not isinstance(raw, str) or not raw.strip():
        raise GenerationTransportError("Model returned no text")

    cleaned = sanitize_model_text(raw)
    log.info("pipeline.generate: raw_len=%d sanitized_len=%d", len(raw), len(cleaned))
    if LOG_GENERATION_TEXT:
        log.debug("pipeline.generate: sanitized text=%r", cleaned)

    try:
        doc = recover_sections_doc(cleaned)
    except GenerationFormatError:
        if LOG_GENERATION_TEXT:
            log.warning("pipeline.generate: unparseable text=%r", cleaned[:2000])
        raise
    raw_sections = validate_sections_doc(doc)
    sections = [Section.from_raw(s) for s in raw_sections]

    record = store.create(idea, sections)
    log.info("pipeline.generate: stored id=%s sections=%d", record.id, len(sections))
    return record


def fetch_record(record_id: str, store: Optional[ContentStore] = None) -> LandingPageRecord:
    if store is None:
        store = default_store()
    record = store.get(record_id)
    if record is None:
        raise NotFoundError(record_id)
    return record
