import json

import pytest

from landing.models import Section
from landing.store import (
    FileContentStore,
    MemoryContentStore,
    RedisContentStore,
    get_store,
)


class FakeRedis:
    def __init__(self):
        self.data = {}

    def set(self, key, value, nx=False):
        if nx and key in self.data:
            return None
        self.data[key] = value
        return True

    def get(self, key):
        return self.data.get(key)


SECTIONS = [
    Section(type="hero", props={"heading": "Get Fit", "subheading": "Join today"}),
    Section(type="unknown_widget", props={"nested": {"list": [1, 2]}}),
]


@pytest.fixture(params=["memory", "file", "redis"])
def store(request, tmp_path):
    if request.param == "memory":
        return MemoryContentStore()
    if request.param == "file":
        return FileContentStore(tmp_path / "pages")
    return RedisContentStore(client=FakeRedis())


def test_create_assigns_id_and_timestamps(store):
    record = store.create("A bakery", SECTIONS)
    assert len(record.id) == 32
    assert record.idea == "A bakery"
    assert record.created_at == record.updated_at
    assert record.created_at.tzinfo is not None


def test_get_returns_what_was_stored(store):
    record = store.create("A bakery", SECTIONS)
    fetched = store.get(record.id)
    assert fetched is not None
    assert fetched.to_json_dict() == record.to_json_dict()
    assert [s.model_dump() for s in fetched.sections] == [s.model_dump() for s in SECTIONS]


def test_ids_are_unique(store):
    ids = {store.create("x", []).id for _ in range(5)}
    assert len(ids) == 5


def test_unknown_id_is_absent(store):
    assert store.get("0" * 32) is None


def test_file_store_writes_one_json_document(tmp_path):
    fs = FileContentStore(tmp_path)
    record = fs.create("Idea", SECTIONS)
    data = json.loads((tmp_path / f"{record.id}.json").read_text(encoding="utf-8"))
    assert set(data) == {"id", "idea", "sections", "createdAt", "updatedAt"}
    assert not list(tmp_path.glob("*.tmp"))


def test_file_store_rejects_path_like_ids(tmp_path):
    fs = FileContentStore(tmp_path / "pages")
    (tmp_path / "secret.json").write_text("{}", encoding="utf-8")
    assert fs.get("../secret") is None


def test_redis_store_uses_prefixed_keys():
    fake = FakeRedis()
    record = RedisContentStore(client=fake).create("Idea", [])
    assert list(fake.data) == [f"landing:page:{record.id}"]


def test_get_store_selects_backend(tmp_path):
    assert isinstance(get_store("memory"), MemoryContentStore)
    assert isinstance(get_store("file"), FileContentStore)
    assert isinstance(get_store("nonsense"), FileContentStore)


@pytest.mark.parametrize("content", ['{"id": "trunc', "{}", '{"id": 1, "sections": "nope"}', ""])
def test_file_store_treats_unreadable_record_as_missing(tmp_path, content):
    fs = FileContentStore(tmp_path)
    record_id = "a" * 32
    (tmp_path / f"{record_id}.json").write_text(content, encoding="utf-8")
    assert fs.get(record_id) is None


def test_file_store_failed_write_leaves_no_temp_file(tmp_path, monkeypatch):
    import landing.store as store_mod

    def broken_dump(*args, **kwargs):
        raise OSError("disk full")

    monkeypatch.setattr(store_mod.json, "dump", broken_dump)
    fs = FileContentStore(tmp_path)
    with pytest.raises(OSError):
        fs.create("Idea", SECTIONS)
    assert list(tmp_path.iterdir()) == []
