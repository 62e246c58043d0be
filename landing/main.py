import logging
import time
import uuid
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel, Field, field_validator

from landing import pipeline, ratelimit
from landing.config import env_list, env_str
from landing.errors import (
    GenerationFormatError,
    GenerationTransportError,
    NotFoundError,
    ShapeValidationError,
)
from landing.llm_client import generate as llm_generate
from landing.llm_client import probe as llm_probe
from landing.llm_client import status as llm_status
from landing.render import render_index_html, render_page_html
from landing.store import ContentStore


if not logging.getLogger().handlers:
    logging.basicConfig(
        level=env_str("LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

log = logging.getLogger(__name__)

app = FastAPI(title="Landing Page Generator")

allow_origins = env_list("ALLOW_ORIGINS", "http://localhost:3000,http://localhost:3001")
app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type", "Authorization"],
)

# None means the configured backend (see landing.store.get_store)
store: Optional[ContentStore] = None


def _content_store() -> ContentStore:
    return store if store is not None else pipeline.default_store()


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    rid = str(uuid.uuid4())
    start = time.time()
    request.state.request_id = rid
    response = None
    try:
        response = await call_next(request)
        return response
    finally:
        dur_ms = int((time.time() - start) * 1000)
        log.info(
            "rid=%s method=%s path=%s status=%s dur_ms=%d",
            rid,
            request.method,
            request.url.path,
            getattr(response, "status_code", "?"),
            dur_ms,
        )


class CreateLandingPageRequest(BaseModel):
    idea: str = Field(..., max_length=2000, description="Free-text business idea")

    @field_validator("idea")
    @classmethod
    def _idea_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("idea must not be empty")
        return value


def _rate_limit_payload(reset_ts: int) -> Dict[str, Any]:
    wait_seconds = max(0, reset_ts - int(time.time()))
    return {
        "error": "rate limit exceeded",
        "reset": reset_ts,
        "retry_after_seconds": wait_seconds,
        "message": f"Rate limit exceeded. Try again in {wait_seconds} seconds.",
    }


@app.get("/", response_class=HTMLResponse)
def root() -> str:
    return render_index_html()


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get("/llm/status")
def llm_status_endpoint() -> Dict[str, Any]:
    return llm_status()


@app.get("/llm/probe")
def llm_probe_endpoint() -> Dict[str, Any]:
    return llm_probe()


@app.post("/landing-page", status_code=201)
def create_landing_page(req: CreateLandingPageRequest, request: Request):
    if not llm_status().get("has_token"):
        return JSONResponse(status_code=503, content={"error": "Missing LLM credentials"})

    client_key = request.client.host if request.client else "anon"
    allowed, remaining, reset_ts = ratelimit.check_and_increment("gen", client_key)
    if not allowed:
        log.info("rate_limit: denied client=%s", client_key)
        return JSONResponse(
            status_code=429,
            content=_rate_limit_payload(reset_ts),
            headers=ratelimit.rate_limit_headers(remaining, reset_ts, limited=True),
        )
    headers = ratelimit.rate_limit_headers(remaining, reset_ts)

    try:
        record = pipeline.generate_and_store(req.idea, generate=llm_generate, store=_content_store())
    except GenerationTransportError as e:
        log.warning("landing_page.create: generation failed: %s", e)
        return JSONResponse(
            status_code=502,
            content={"error": str(e), "kind": "generation_transport"},
            headers=headers,
        )
    except GenerationFormatError as e:
        log.warning("landing_page.create: unparseable model output (%d chars): %s", len(e.text), e)
        return JSONResponse(
            status_code=502,
            content={"error": str(e), "kind": "generation_format", "detail": str(e.decode_error)},
            headers=headers,
        )
    except ShapeValidationError as e:
        log.warning("landing_page.create: wrong output shape: %s", e)
        return JSONResponse(
            status_code=502,
            content={"error": str(e), "kind": "shape_validation", "errors": e.errors},
            headers=headers,
        )

    return JSONResponse(status_code=201, content=record.to_json_dict(), headers=headers)


@app.get("/landing-page/{record_id}")
def get_landing_page(record_id: str):
    try:
        record = pipeline.fetch_record(record_id, store=_content_store())
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Landing page not found")
    return JSONResponse(record.to_json_dict())


@app.get("/landing-page/{record_id}/html", response_class=HTMLResponse)
def get_landing_page_html(record_id: str) -> HTMLResponse:
    try:
        record = pipeline.fetch_record(record_id, store=_content_store())
    except NotFoundError:
        raise HTTPException(status_code=404, detail="Landing page not found")
    return HTMLResponse(render_page_html(record))
