import pytest
from fastapi.testclient import TestClient

from landing import main as main_mod
from landing import ratelimit
from landing.errors import GenerationTransportError
from landing.main import app
from landing.store import MemoryContentStore

client = TestClient(app)

FITNESS_REPLY = (
    '```json\n{"sections":[{"type":"hero","props":{"heading":"Get Fit","subheading":"Join today"}}]}\n```'
)


@pytest.fixture()
def memory_store(monkeypatch):
    store = MemoryContentStore()
    monkeypatch.setattr(main_mod, "store", store)
    monkeypatch.setattr(main_mod, "llm_status", lambda: {"provider": "gemini", "has_token": True})
    ratelimit._reset()
    yield store
    ratelimit._reset()


def _reply_with(monkeypatch, text):
    monkeypatch.setattr(main_mod, "llm_generate", lambda prompt: text)


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok"}


def test_llm_status_shape():
    body = client.get("/llm/status").json()
    assert body.get("provider") in ("gemini", None)
    assert "has_token" in body and "using" in body


def test_index_serves_form():
    r = client.get("/")
    assert r.status_code == 200
    assert "Landing Page Generator" in r.text


def test_create_then_fetch(monkeypatch, memory_store):
    _reply_with(monkeypatch, FITNESS_REPLY)
    r = client.post("/landing-page", json={"idea": "  A modern fitness app  "})
    assert r.status_code == 201
    body = r.json()
    assert set(body) == {"id", "idea", "sections", "createdAt", "updatedAt"}
    assert body["idea"] == "A modern fitness app"
    assert body["sections"] == [
        {"type": "hero", "props": {"heading": "Get Fit", "subheading": "Join today"}}
    ]
    assert "X-RateLimit-Remaining" in r.headers

    fetched = client.get(f"/landing-page/{body['id']}")
    assert fetched.status_code == 200
    assert fetched.json() == body

    page = client.get(f"/landing-page/{body['id']}/html")
    assert page.status_code == 200
    assert "Get Fit" in page.text
    assert "A modern fitness app" in page.text


def test_blank_idea_is_rejected_without_calling_model(monkeypatch, memory_store):
    def never(prompt):
        raise AssertionError("model should not be called")

    monkeypatch.setattr(main_mod, "llm_generate", never)
    assert client.post("/landing-page", json={"idea": "   "}).status_code == 422
    assert client.post("/landing-page", json={}).status_code == 422
    assert len(memory_store) == 0


def test_missing_credentials_returns_503(monkeypatch, memory_store):
    monkeypatch.setattr(main_mod, "llm_status", lambda: {"provider": None, "has_token": False})
    r = client.post("/landing-page", json={"idea": "Gym"})
    assert r.status_code == 503
    assert r.json() == {"error": "Missing LLM credentials"}


def test_unparseable_output_returns_502_and_stores_nothing(monkeypatch, memory_store):
    _reply_with(monkeypatch, "No JSON for you.")
    r = client.post("/landing-page", json={"idea": "Gym"})
    assert r.status_code == 502
    assert r.json()["kind"] == "generation_format"
    assert len(memory_store) == 0


def test_wrong_shape_returns_502_with_errors(monkeypatch, memory_store):
    _reply_with(monkeypatch, '{"sections": "hero"}')
    r = client.post("/landing-page", json={"idea": "Gym"})
    assert r.status_code == 502
    body = r.json()
    assert body["kind"] == "shape_validation"
    assert body["errors"][0]["path"] == "sections"
    assert len(memory_store) == 0


def test_transport_failure_returns_502(monkeypatch, memory_store):
    def failing(prompt):
        raise GenerationTransportError("Model returned HTTP 500")

    monkeypatch.setattr(main_mod, "llm_generate", failing)
    r = client.post("/landing-page", json={"idea": "Gym"})
    assert r.status_code == 502
    assert r.json() == {"error": "Model returned HTTP 500", "kind": "generation_transport"}


def test_unknown_id_returns_404(memory_store):
    for path in ("/landing-page/" + "0" * 32, "/landing-page/" + "0" * 32 + "/html"):
        r = client.get(path)
        assert r.status_code == 404
        assert r.json() == {"detail": "Landing page not found"}


def test_rate_limit(monkeypatch, memory_store):
    _reply_with(monkeypatch, '{"sections": []}')
    monkeypatch.setattr(ratelimit, "MAX_REQUESTS", 2)
    assert client.post("/landing-page", json={"idea": "A"}).status_code == 201
    assert client.post("/landing-page", json={"idea": "B"}).status_code == 201
    r = client.post("/landing-page", json={"idea": "C"})
    assert r.status_code == 429
    assert "Retry-After" in r.headers
    assert "retry_after_seconds" in r.json()
    assert len(memory_store) == 2
