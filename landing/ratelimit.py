from __future__ import annotations

import threading
import time
from typing import Dict, Tuple

from landing.config import env_int

WINDOW_SECONDS: int = env_int("RATE_WINDOW_SECONDS", 3600)
MAX_REQUESTS: int = env_int("RATE_MAX_REQUESTS", 30)

_lock = threading.Lock()
_store: Dict[Tuple[str, str], Dict[str, int]] = {}


def _now() -> int:
    return int(time.time())


def _prune_expired(now: int) -> None:
    # caller holds _lock
    for stale in [k for k, v in _store.items() if now >= v["reset_ts"]]:
        del _store[stale]


def check_and_increment(bucket: str, key: str) -> Tuple[bool, int, int]:
    """
    Fixed-window counter per (bucket, client key).
    Returns (allowed, remaining, reset_ts).
    """
    k = (bucket or "default", key or "anon")
    now = _now()
    with _lock:
        _prune_expired(now)
        entry = _store.get(k)
        if entry is None or now >= entry["reset_ts"]:
            entry = {"count": 0, "reset_ts": now + WINDOW_SECONDS}
            _store[k] = entry
        if entry["count"] >= MAX_REQUESTS:
            return False, 0, entry["reset_ts"]
        entry["count"] += 1
        return True, max(0, MAX_REQUESTS - entry["count"]), entry["reset_ts"]


def rate_limit_headers(remaining: int, reset_ts: int, *, limited: bool = False) -> Dict[str, str]:
    headers = {
        "X-RateLimit-Remaining": str(remaining),
        "X-RateLimit-Reset": str(reset_ts),
    }
    if limited:
        headers["Retry-After"] = str(max(0, reset_ts - _now()))
    return headers


def _reset() -> None:
    """Used by tests to clear state."""
    with _lock:
        _store.clear()
