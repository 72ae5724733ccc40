"""HTTP routes for the word drill server.

Endpoints
---------
POST /start     Start a capture for the current target (or trigger
                recognizer initialization on first use).
POST /stop      Abort the capture in progress.
POST /next      Advance to the next target (wraps around).
POST /reload    Re-read the target file and rebuild the grammar.

GET  /state     Snapshot of the session for a freshly loaded page.
GET  /health    Server health, version, and collaborator availability.
GET  /display   Streams DisplayEvents as Server-Sent Events (SSE).
GET  /images/…  Serves drill pictures relative to the target file.
GET  /          The drill page.
"""

import asyncio
import logging
from pathlib import Path

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse
from sse_starlette.sse import EventSourceResponse

from drill import __version__
from drill.events.event_bus import EventBus
from drill.session.drill_engine import DrillEngine

logger = logging.getLogger(__name__)

router = APIRouter()

_STATIC_DIR = Path(__file__).parent / "static"
_PING_INTERVAL = 15.0


def _get_engine(request: Request) -> DrillEngine:
    return request.app.state.drill_engine


def _get_display_bus(request: Request) -> EventBus:
    return request.app.state.display_bus


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@router.post("/start")
async def start_capture(request: Request) -> dict:
    engine = _get_engine(request)
    decision = await engine.request_start()
    return {"status": decision.value, "state": engine.state.value}


@router.post("/stop")
async def stop_capture(request: Request) -> dict:
    engine = _get_engine(request)
    await engine.request_stop()
    return {"status": "ok", "state": engine.state.value}


@router.post("/next")
async def next_target(request: Request) -> dict:
    """Advance to the next target.  Refused while a capture is running."""
    engine = _get_engine(request)
    advanced = await engine.request_advance()
    return {
        "status": "ok" if advanced else "ignored",
        "state": engine.state.value,
        "index": engine.controller.current_index,
    }


@router.post("/reload")
async def reload_targets(request: Request) -> dict:
    engine = _get_engine(request)
    loaded = await engine.reload()
    result = {
        "status": "ok" if loaded else "error",
        "state": engine.state.value,
        "targets": engine.target_count,
    }
    if not loaded:
        result["reason"] = engine.load_error
    return result


# ---------------------------------------------------------------------------
# GET /state, GET /health
# ---------------------------------------------------------------------------


@router.get("/state")
async def session_state(request: Request) -> dict:
    return _get_engine(request).snapshot().model_dump(mode="json")


@router.get("/health")
async def health(request: Request) -> dict:
    """Return server health information.  Used by ``word-drill status``."""
    engine = _get_engine(request)
    display_bus = _get_display_bus(request)
    return {
        "status": "ok",
        "version": __version__,
        "state": engine.state.value,
        "targets": engine.target_count,
        "load_error": engine.load_error,
        "mic_available": engine.mic_available,
        "model_available": engine.model_available,
        "recognizer_ready": engine.recognizer_ready,
        "subscribers": display_bus.subscriber_count,
    }


# ---------------------------------------------------------------------------
# GET /display  (Server-Sent Events)
# ---------------------------------------------------------------------------


@router.get("/display")
async def display_stream(request: Request) -> EventSourceResponse:
    """Stream display updates as Server-Sent Events.

    Each SSE message has:
    * ``event`` — the display event type (e.g. ``verdict``)
    * ``data``  — the full DisplayEvent serialised as JSON
    """
    display_bus = _get_display_bus(request)

    async def _generate():
        queue = await display_bus.subscribe()
        try:
            while True:
                if await request.is_disconnected():
                    logger.debug("Display SSE client disconnected")
                    break
                try:
                    event = await asyncio.wait_for(
                        queue.get(), timeout=_PING_INTERVAL
                    )
                except asyncio.TimeoutError:
                    yield {"comment": "ping"}
                    continue
                yield {
                    "event": event.type.value,
                    "data": event.model_dump_json(),
                }
        except asyncio.CancelledError:
            logger.debug("Display SSE stream cancelled")
        finally:
            await display_bus.unsubscribe(queue)

    return EventSourceResponse(_generate())


# ---------------------------------------------------------------------------
# Images and page
# ---------------------------------------------------------------------------


@router.get("/images/{image_path:path}")
async def drill_image(image_path: str, request: Request) -> FileResponse:
    """Serve a drill picture relative to the target file's directory."""
    base = _get_engine(request).target_file.resolve().parent
    candidate = (base / image_path).resolve()
    if not candidate.is_relative_to(base) or not candidate.is_file():
        raise HTTPException(status_code=404, detail="image not found")
    return FileResponse(candidate)


@router.get("/")
async def index() -> FileResponse:
    return FileResponse(_STATIC_DIR / "index.html")
