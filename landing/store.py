from __future__ import annotations

import json
import logging
import re
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import redis

from landing.config import env_str
from landing.models import LandingPageRecord, Section

log = logging.getLogger(__name__)

STORE_BACKEND = env_str("STORE_BACKEND", "file").lower()
STORE_DIR = Path(env_str("STORE_DIR", "data/landing_pages"))
REDIS_URL = env_str("REDIS_URL", "redis://localhost:6379/0")
REDIS_KEY_PREFIX = env_str("REDIS_KEY_PREFIX", "landing:page:")

_ID_RE = re.compile(r"^[0-9a-f]{32}$")


def _new_id() -> str:
    return uuid.uuid4().hex


def _is_valid_id(record_id: str) -> bool:
    return isinstance(record_id, str) and bool(_ID_RE.match(record_id))


def _new_record(idea: str, sections: List[Section]) -> LandingPageRecord:
    now = datetime.now(timezone.utc)
    return LandingPageRecord(
        id=_new_id(),
        idea=idea,
        sections=list(sections),
        created_at=now,
        updated_at=now,
    )


class ContentStore:
    """Persistence seam: ``create`` is the only place a record becomes visible."""

    def create(self, idea: str, sections: List[Section]) -> LandingPageRecord:
        raise NotImplementedError

    def get(self, record_id: str) -> Optional[LandingPageRecord]:
        raise NotImplementedError


class MemoryContentStore(ContentStore):
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: Dict[str, Dict[str, Any]] = {}

    def create(self, idea: str, sections: List[Section]) -> LandingPageRecord:
        record = _new_record(idea, sections)
        with self._lock:
            self._records[record.id] = record.to_json_dict()
        return record

    def get(self, record_id: str) -> Optional[LandingPageRecord]:
        with self._lock:
            data = self._records.get(record_id)
        return LandingPageRecord.model_validate(data) if data is not None else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


class FileContentStore(ContentStore):
    """One JSON file per record, written atomically via a temp file."""

    def __init__(self, directory: Optional[Path] = None) -> None:
        self.directory = Path(directory) if directory is not None else STORE_DIR

    def _path(self, record_id: str) -> Path:
        return self.directory / f"{record_id}.json"

    def create(self, idea: str, sections: List[Section]) -> LandingPageRecord:
        record = _new_record(idea, sections)
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(record.id)
        tmp = path.with_suffix(".json.tmp")
        try:
            with tmp.open("w", encoding="utf-8") as f:
                json.dump(record.to_json_dict(), f, ensure_ascii=False, separators=(",", ":"))
            tmp.replace(path)
        finally:
            tmp.unlink(missing_ok=True)
        log.info("store.create: stored record id=%s file=%s", record.id, path.name)
        return record

    def get(self, record_id: str) -> Optional[LandingPageRecord]:
        if not _is_valid_id(record_id):
            return None
        path = self._path(record_id)
        if not path.exists():
            return None
        # unreadable or corrupt files count as misses
        try:
            with path.open("r", encoding="utf-8") as f:
                return LandingPageRecord.model_validate(json.load(f))
        except (ValueError, OSError) as e:
            log.warning("store.get: unreadable record id=%s: %r", record_id, e)
            return None


class RedisContentStore(ContentStore):
    def __init__(self, redis_url: Optional[str] = None, client: Any = None) -> None:
        self.redis_url = (redis_url or REDIS_URL).strip() or REDIS_URL
        # Connection is lazy; nothing hits the network until the first command.
        self._client = client if client is not None else redis.from_url(self.redis_url, decode_responses=True)

    def _key(self, record_id: str) -> str:
        return f"{REDIS_KEY_PREFIX}{record_id}"

    def create(self, idea: str, sections: List[Section]) -> LandingPageRecord:
        record = _new_record(idea, sections)
        raw = json.dumps(record.to_json_dict(), separators=(",", ":"), ensure_ascii=False)
        if not self._client.set(self._key(record.id), raw, nx=True):
            raise RuntimeError(f"record id collision: {record.id}")
        log.info("store.create: stored record id=%s backend=redis", record.id)
        return record

    def get(self, record_id: str) -> Optional[LandingPageRecord]:
        if not _is_valid_id(record_id):
            return None
        raw = self._client.get(self._key(record_id))
        return LandingPageRecord.model_validate(json.loads(raw)) if raw else None


def get_store(backend: Optional[str] = None) -> ContentStore:
    kind = (backend or STORE_BACKEND or "file").lower()
    if kind == "memory":
        return MemoryContentStore()
    if kind == "redis":
        return RedisContentStore()
    if kind != "file":
        log.warning("store: unknown STORE_BACKEND=%r; using file backend", kind)
    return FileContentStore()
