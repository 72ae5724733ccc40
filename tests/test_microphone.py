"""Tests for drill.audio.microphone — chunked microphone capture."""

import numpy as np
import pytest

from drill.audio.microphone import MicrophoneCapture
from drill.errors import MicrophoneAccessError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _frame(n_samples: int = 4000, amplitude: int = 1000) -> np.ndarray:
    return np.full((n_samples, 1), amplitude, dtype=np.int16)


class MockInputStream:
    """Mock sounddevice.InputStream with explicit start/stop/close."""

    instances: list["MockInputStream"] = []

    def __init__(self, **kwargs):
        self.kwargs = kwargs
        self.started = False
        self.stopped = False
        self.closed = False
        self.overflow_next = False
        MockInputStream.instances.append(self)

    def start(self):
        self.started = True

    def stop(self):
        self.stopped = True

    def close(self):
        self.closed = True

    def read(self, frames):
        overflowed, self.overflow_next = self.overflow_next, False
        return _frame(frames), overflowed


def _mock_query_devices_success(*args, **kwargs):
    return {"name": "test-mic", "max_input_channels": 1}


def _mock_query_devices_fail(*args, **kwargs):
    raise OSError("No input device")


@pytest.fixture(autouse=True)
def _reset_instances():
    MockInputStream.instances = []


@pytest.fixture
def mock_stream(monkeypatch):
    monkeypatch.setattr(
        "drill.audio.microphone.sd.InputStream",
        lambda **kwargs: MockInputStream(**kwargs),
    )


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:

    async def test_initial_state(self):
        mic = MicrophoneCapture()
        assert mic.is_available is False
        assert mic.read_chunk() is None

    async def test_start_detects_input_device(self, monkeypatch):
        monkeypatch.setattr(
            "drill.audio.microphone.sd.query_devices", _mock_query_devices_success
        )
        mic = MicrophoneCapture()
        await mic.start()
        assert mic.is_available is True

    async def test_start_no_device(self, monkeypatch):
        monkeypatch.setattr(
            "drill.audio.microphone.sd.query_devices", _mock_query_devices_fail
        )
        mic = MicrophoneCapture()
        await mic.start()
        assert mic.is_available is False

    async def test_stop_releases_open_stream(self, monkeypatch, mock_stream):
        monkeypatch.setattr(
            "drill.audio.microphone.sd.query_devices", _mock_query_devices_success
        )
        mic = MicrophoneCapture()
        await mic.start()
        mic.acquire()
        await mic.stop()
        assert mic.read_chunk() is None
        assert mic.is_available is False
        assert MockInputStream.instances[0].closed is True


# ---------------------------------------------------------------------------
# acquire / read_chunk / release
# ---------------------------------------------------------------------------


class TestAcquire:

    def test_opens_int16_mono_stream(self, mock_stream):
        mic = MicrophoneCapture(sample_rate=16000, chunk_samples=4000)
        mic.acquire()
        stream = MockInputStream.instances[0]
        assert stream.started is True
        assert stream.kwargs == {
            "samplerate": 16000,
            "channels": 1,
            "dtype": "int16",
            "blocksize": 4000,
        }
        assert mic.read_chunk() is not None

    def test_open_failure_raises_access_error(self, monkeypatch):
        def _raise(**kwargs):
            raise PermissionError("denied")

        monkeypatch.setattr("drill.audio.microphone.sd.InputStream", _raise)
        mic = MicrophoneCapture()
        with pytest.raises(MicrophoneAccessError, match="PermissionError"):
            mic.acquire()
        assert mic.read_chunk() is None

    def test_start_failure_closes_stream(self, monkeypatch):
        class _FailingStart(MockInputStream):
            def start(self):
                raise RuntimeError("busy")

        monkeypatch.setattr(
            "drill.audio.microphone.sd.InputStream",
            lambda **kwargs: _FailingStart(**kwargs),
        )
        mic = MicrophoneCapture()
        with pytest.raises(MicrophoneAccessError):
            mic.acquire()
        assert MockInputStream.instances[0].closed is True

    def test_double_acquire_raises(self, mock_stream):
        mic = MicrophoneCapture()
        mic.acquire()
        with pytest.raises(MicrophoneAccessError):
            mic.acquire()


class TestReadChunk:

    def test_returns_pcm_bytes(self, mock_stream):
        mic = MicrophoneCapture(chunk_samples=1600)
        mic.acquire()
        chunk = mic.read_chunk()
        assert isinstance(chunk, bytes)
        assert len(chunk) == 1600 * 2

    def test_returns_none_when_not_acquired(self):
        assert MicrophoneCapture().read_chunk() is None

    def test_returns_none_after_release(self, mock_stream):
        mic = MicrophoneCapture()
        mic.acquire()
        mic.release()
        assert mic.read_chunk() is None

    def test_overflow_does_not_fail(self, mock_stream):
        mic = MicrophoneCapture(chunk_samples=160)
        mic.acquire()
        MockInputStream.instances[0].overflow_next = True
        assert mic.read_chunk() is not None


class TestRelease:

    def test_stops_and_closes(self, mock_stream):
        mic = MicrophoneCapture()
        mic.acquire()
        mic.release()
        stream = MockInputStream.instances[0]
        assert stream.stopped is True
        assert stream.closed is True
        assert mic.read_chunk() is None

    def test_close_runs_even_if_stop_fails(self, monkeypatch):
        class _FailingStop(MockInputStream):
            def stop(self):
                raise RuntimeError("already stopped")

        monkeypatch.setattr(
            "drill.audio.microphone.sd.InputStream",
            lambda **kwargs: _FailingStop(**kwargs),
        )
        mic = MicrophoneCapture()
        mic.acquire()
        mic.release()
        assert MockInputStream.instances[0].closed is True
        assert mic.read_chunk() is None

    def test_release_without_acquire_is_noop(self):
        MicrophoneCapture().release()

    def test_reacquire_after_release(self, mock_stream):
        mic = MicrophoneCapture()
        mic.acquire()
        mic.release()
        mic.acquire()
        assert len(MockInputStream.instances) == 2
