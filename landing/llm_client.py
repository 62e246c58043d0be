"""
This module only calls the model. It performs no retries and no parsing:
the caller gets the raw text or a GenerationTransportError.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import requests

from landing.config import env_float, env_int, env_str
from landing.errors import GenerationTransportError

log = logging.getLogger(__name__)

GEMINI_API_KEY = env_str("GEMINI_API_KEY")
GEMINI_MODEL = env_str("GEMINI_MODEL", "gemini-1.5-flash")
GEMINI_API_BASE = env_str("GEMINI_API_BASE", "https://generativelanguage.googleapis.com/v1beta")
LLM_TIMEOUT_SECS = env_int("LLM_TIMEOUT_SECS", 60)
LLM_MAX_TOKENS = env_int("LLM_MAX_TOKENS", 8192)
TEMPERATURE = env_float("TEMPERATURE", 0.7)


def _endpoint() -> str:
    return f"{GEMINI_API_BASE}/models/{GEMINI_MODEL}:generateContent"


def status() -> Dict[str, Any]:
    return {
        "provider": "gemini" if GEMINI_API_KEY else None,
        "model": GEMINI_MODEL if GEMINI_API_KEY else None,
        "has_token": bool(GEMINI_API_KEY),
        "using": "gemini" if GEMINI_API_KEY else "none",
    }


def probe() -> Dict[str, Any]:
    if GEMINI_API_KEY:
        return {"ok": True, "using": "gemini"}
    return {"ok": False, "using": "none", "error": "Model or token not configured"}


def generate(prompt: str) -> str:
    """Send one prompt to Gemini and return the first non-empty text part."""
    if not GEMINI_API_KEY:
        raise GenerationTransportError("Missing LLM credentials")

    body = {
        "contents": [{"parts": [{"text": prompt}]}],
        "generationConfig": {
            "temperature": TEMPERATURE,
            "maxOutputTokens": LLM_MAX_TOKENS,
        },
    }

    try:
        resp = requests.post(
            _endpoint(),
            params={"key": GEMINI_API_KEY},
            json=body,
            timeout=LLM_TIMEOUT_SECS,
        )
    except requests.RequestException as e:
        log.warning("Gemini generation request error: %r", e)
        raise GenerationTransportError(f"Model request failed: {e}") from e

    if resp.status_code != 200:
        msg = (resp.text or "")[:400]
        log.warning("Gemini generation HTTP %s: %s", resp.status_code, msg)
        raise GenerationTransportError(f"Model returned HTTP {resp.status_code}")

    try:
        data = resp.json()
    except ValueError as e:
        log.warning("Gemini generation: non-JSON body")
        raise GenerationTransportError("Model returned a non-JSON body") from e

    text = _extract_gemini_text(data)
    if not text:
        log.warning("Gemini generation: empty response text")
        raise GenerationTransportError("Model returned no text")
    return text


def _extract_gemini_text(payload: Any) -> Optional[str]:
    if not isinstance(payload, dict):
        return None
    candidates = payload.get("candidates") or []
    if not isinstance(candidates, list):
        return None
    for cand in candidates:
        if not isinstance(cand, dict):
            continue
        content = cand.get("content")
        if not isinstance(content, dict):
            continue
        for part in content.get("parts") or []:
            if not isinstance(part, dict):
                continue
            txt = part.get("text")
            if isinstance(txt, str) and txt.strip():
                return txt
            data_blob = part.get("json") or part.get("structValue")
            if data_blob:
                return json.dumps(data_blob, ensure_ascii=False)
    return None
