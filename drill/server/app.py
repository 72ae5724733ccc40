"""FastAPI application factory for the word drill.

``create_app()`` builds the app around one DrillEngine and one display
bus.  Both are process-wide: the recognizer and its grammar are shared
by every browser tab looking at the drill.
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator

from fastapi import FastAPI

from drill import __version__
from drill.events.event_bus import EventBus
from drill.events.types import DisplayEvent
from drill.server.routes import router
from drill.session.drill_engine import DrillEngine

logger = logging.getLogger(__name__)


def create_app(
    *,
    target_file: Path | None = None,
    model_path: str | None = None,
    threshold: float | None = None,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    The returned app has:
    * ``app.state.display_bus`` — the shared :class:`EventBus` of DisplayEvents
    * ``app.state.drill_engine`` — the :class:`DrillEngine` instance
    * the command, state, display-stream, image and page routes
    * lifespan hooks that start and stop the engine
    """
    display_bus: EventBus[DisplayEvent] = EventBus()
    drill_engine = DrillEngine(
        display_bus,
        target_file=target_file,
        model_path=model_path,
        threshold=threshold,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("Word drill server starting up")
        await drill_engine.start()
        try:
            yield
        finally:
            logger.info("Word drill server shutting down")
            await drill_engine.stop()

    app = FastAPI(title="Word Drill", version=__version__, lifespan=lifespan)
    app.state.display_bus = display_bus
    app.state.drill_engine = drill_engine
    app.include_router(router)

    logger.info("FastAPI app created (targets: %s)", drill_engine.target_file)
    return app
