"""FastAPI application exposing the note store over HTTP.

Endpoints:
  GET    /                          — Web page (static/index.html or fallback)
  GET    /api/notes                 — List all notes
  GET    /api/notes/{id}            — Fetch one note
  POST   /api/notes                 — Create a note
  PUT    /api/notes/{id}            — Update a note
  DELETE /api/notes/{id}            — Delete a note
  GET    /api/notes/search/{query}  — Substring search over title/content/tags
  GET    /api/stats                 — Note and tag counts
  GET    /health                    — Liveness check
  GET    /metrics                   — Prometheus metrics

Every JSON response uses the ``{success, message, data}`` envelope.
"""

from __future__ import annotations

import logging
import time
from typing import Generic, TypeVar

from fastapi import APIRouter, Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from .config import Settings, get_settings
from .exceptions import NoteNotFoundError, NoteValidationError, StorageError
from .metrics import HTTP_DURATION, HTTP_REQUESTS
from .models import Note, NoteCreate, NotesStats, NoteUpdate
from .store import NoteStore

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Endpoints excluded from HTTP metrics
_METRICS_EXCLUDE = {"/metrics", "/openapi.json", "/docs", "/redoc"}

_FAILED_VERBS = {"POST": "create", "PUT": "update", "DELETE": "delete"}

FALLBACK_HTML = """<!DOCTYPE html>
<html>
<head>
    <title>Notes App</title>
    <style>
        body { font-family: Arial; padding: 20px; }
        .container { max-width: 800px; margin: 0 auto; }
    </style>
</head>
<body>
    <div class="container">
        <h1>Notes App</h1>
        <p>Note: Could not load static/index.html file</p>
        <p>API is running. Try these endpoints:</p>
        <ul>
            <li><a href="/api/notes">/api/notes</a> - List all notes</li>
            <li><a href="/api/stats">/api/stats</a> - Collection stats</li>
            <li><a href="/health">/health</a> - Health check</li>
        </ul>
    </div>
</body>
</html>"""


class ApiResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    success: bool = True
    message: str
    data: T | None = None


class MetricsMiddleware(BaseHTTPMiddleware):
    """Record HTTP request count and duration for Prometheus."""

    async def dispatch(self, request: Request, call_next):
        """Wrap each request with timing and counting."""
        if request.url.path in _METRICS_EXCLUDE:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start

        # Label by route template so note ids don't become label values
        route = request.scope.get("route")
        endpoint = getattr(route, "path", "unmatched")
        HTTP_REQUESTS.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=response.status_code,
        ).inc()
        HTTP_DURATION.labels(endpoint=endpoint).observe(elapsed)
        return response


def get_store(request: Request) -> NoteStore:
    return request.app.state.store


router = APIRouter()


# --- Notes ---


@router.get("/api/notes", response_model=ApiResponse[list[Note]])
def list_notes(store: NoteStore = Depends(get_store)):
    """List all notes in insertion order."""
    return ApiResponse(message="Notes retrieved successfully", data=store.list_notes())


@router.get("/api/notes/search/{query}", response_model=ApiResponse[list[Note]])
def search_notes(query: str, store: NoteStore = Depends(get_store)):
    """Case-insensitive substring search over title, content and tags."""
    return ApiResponse(message="Search results", data=store.search(query))


@router.get("/api/notes/{note_id}", response_model=ApiResponse[Note])
def get_note(note_id: str, store: NoteStore = Depends(get_store)):
    return ApiResponse(
        message="Note retrieved successfully", data=store.get_by_id(note_id)
    )


@router.post("/api/notes", response_model=ApiResponse[Note], status_code=201)
def create_note(body: NoteCreate, store: NoteStore = Depends(get_store)):
    """Create a note and return it with its generated id."""
    note = store.create(body.title, body.content, body.tags)
    return ApiResponse(message="Note created successfully", data=note)


@router.put("/api/notes/{note_id}", response_model=ApiResponse[Note])
def update_note(note_id: str, body: NoteUpdate, store: NoteStore = Depends(get_store)):
    """Update the fields present in the body; omitted fields are kept."""
    note = store.update(note_id, title=body.title, content=body.content, tags=body.tags)
    return ApiResponse(message="Note updated successfully", data=note)


@router.delete("/api/notes/{note_id}", response_model=ApiResponse[None])
def delete_note(note_id: str, store: NoteStore = Depends(get_store)):
    if not store.delete_by_id(note_id):
        raise NoteNotFoundError(note_id)
    return ApiResponse(message="Note deleted successfully")


# --- Misc ---


@router.get("/api/stats", response_model=ApiResponse[NotesStats])
def get_stats(store: NoteStore = Depends(get_store)):
    """Total notes, distinct tags and the time of the snapshot."""
    return ApiResponse(message="Stats retrieved", data=store.stats())


@router.get("/health", response_model=ApiResponse[str])
def health_check():
    return ApiResponse(message="Server is running", data="OK")


@router.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    """Prometheus metrics endpoint."""
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
def index(request: Request) -> HTMLResponse:
    page = request.app.state.settings.static_dir / "index.html"
    try:
        html = page.read_text(encoding="utf-8")
    except OSError as exc:
        logger.warning("Could not load %s: %s", page, exc)
        html = FALLBACK_HTML
    return HTMLResponse(html)


# --- Error mapping ---


def _error(
    status_code: int, message: str, headers: dict[str, str] | None = None
) -> JSONResponse:
    body = ApiResponse[None](success=False, message=message)
    return JSONResponse(
        status_code=status_code, content=body.model_dump(), headers=headers
    )


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Unmatched routes and wrong methods; keeps the Allow header on 405
    return _error(exc.status_code, str(exc.detail), getattr(exc, "headers", None))


async def _not_found(request: Request, exc: NoteNotFoundError) -> JSONResponse:
    return _error(404, "Note not found")


async def _invalid(request: Request, exc: NoteValidationError) -> JSONResponse:
    return _error(422, exc.message)


async def _invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(p) for p in err['loc'] if p != 'body')}: {err['msg']}"
        for err in exc.errors()
    )
    return _error(422, f"Invalid request: {problems}")


async def _storage_failed(request: Request, exc: StorageError) -> JSONResponse:
    verb = _FAILED_VERBS.get(request.method, "read")
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    return _error(500, f"Failed to {verb} note: {exc.message}")


def create_app(store: NoteStore, settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI app serving ``store``."""
    settings = settings or get_settings()

    app = FastAPI(title="Notes App", version="1.0.0")
    app.state.store = store
    app.state.settings = settings

    app.add_middleware(MetricsMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        max_age=3600,
    )

    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(NoteNotFoundError, _not_found)
    app.add_exception_handler(NoteValidationError, _invalid)
    app.add_exception_handler(RequestValidationError, _invalid_body)
    app.add_exception_handler(StorageError, _storage_failed)

    app.include_router(router)
    return app
