"""Shared fixtures for word drill tests."""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from drill.events.event_bus import EventBus
from drill.session.controller import SessionController
from drill.session.display import DisplayFeed
from drill.session.drill_engine import DrillEngine
from drill.targets.types import DrillItem

_TARGET_TEXT = (
    "touch_nose,Touch your nose,img/nose.png,body\n"
    "apple,Apple,img/apple.png,food\n"
    "red_ball,Red ball,img/ball.png,toys\n"
)

_PCM_CHUNK = b"\x00\x01" * 200


@pytest.fixture
def display_bus() -> EventBus:
    """Return a fresh EventBus with a small queue for testing."""
    return EventBus(maxsize=64)


@pytest.fixture
def display(display_bus: EventBus) -> DisplayFeed:
    return DisplayFeed(display_bus)


@pytest.fixture
def targets() -> list[DrillItem]:
    return [
        DrillItem(key="touch_nose", display="Touch your nose", image_path="img/nose.png", category="body"),
        DrillItem(key="apple", display="Apple", image_path="img/apple.png", category="food"),
        DrillItem(key="red_ball", display="Red ball", image_path="img/ball.png", category="toys"),
    ]


@pytest.fixture
def recognizer() -> MagicMock:
    """A recognizer stand-in that is already initialized."""
    mock = MagicMock()
    mock.is_ready = True
    return mock


@pytest.fixture
def microphone() -> MagicMock:
    return MagicMock()


@pytest.fixture
def controller(recognizer, microphone, display, targets) -> SessionController:
    """A SessionController loaded with three targets, idle at index 0."""
    c = SessionController(recognizer=recognizer, microphone=microphone, display=display)
    c.load(targets)
    return c


@pytest.fixture
def target_file(tmp_path: Path) -> Path:
    path = tmp_path / "target.txt"
    path.write_text(_TARGET_TEXT, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Engine with mocked hardware
# ---------------------------------------------------------------------------


@pytest.fixture
def mock_microphone(monkeypatch) -> MagicMock:
    """Mock MicrophoneCapture, patched into the drill_engine module."""
    mock = MagicMock()
    mock.start = AsyncMock()
    mock.stop = AsyncMock()
    mock.is_available = True
    mock.read_chunk = MagicMock(return_value=_PCM_CHUNK)
    monkeypatch.setattr(
        "drill.session.drill_engine.MicrophoneCapture", lambda **kwargs: mock
    )
    return mock


@pytest.fixture
def mock_recognizer(monkeypatch) -> MagicMock:
    """Mock VoskRecognizer, patched into the drill_engine module."""
    mock = MagicMock()
    mock.is_ready = True
    mock.model_available = False
    mock.initialize = MagicMock(return_value=True)
    mock.accept = MagicMock(return_value=None)
    monkeypatch.setattr(
        "drill.session.drill_engine.VoskRecognizer", lambda **kwargs: mock
    )
    return mock


@pytest.fixture
def engine(mock_microphone, mock_recognizer, display_bus, target_file) -> DrillEngine:
    """A DrillEngine wired to mocked hardware (not yet started)."""
    return DrillEngine(display_bus, target_file=target_file)


@pytest.fixture
async def app(engine: DrillEngine, display_bus: EventBus):
    """Return a FastAPI test app around a started engine.

    ASGITransport does not run lifespan hooks, so the engine is started
    here and stopped on teardown.
    """
    from fastapi import FastAPI
    from drill.server.routes import router

    await engine.start()
    test_app = FastAPI()
    test_app.state.display_bus = display_bus
    test_app.state.drill_engine = engine
    test_app.include_router(router)
    yield test_app
    await engine.stop()


@pytest.fixture
async def async_client(app):
    """Return an httpx AsyncClient configured with the test FastAPI app."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(
        transport=transport, base_url="http://testserver"
    ) as client:
        yield client
