"""Microphone capture feeding the recognizer in fixed-size chunks."""

import logging

import numpy as np
import sounddevice as sd

from drill.config import CHUNK_SAMPLES, SAMPLE_RATE
from drill.errors import MicrophoneAccessError

logger = logging.getLogger(__name__)


class MicrophoneCapture:
    """Captures int16 mono audio from the default input device.

    Lifecycle: ``start()`` probes for a device once; each drill attempt
    then calls ``acquire()``, reads chunks with ``read_chunk()`` and ends
    with ``release()``.  ``acquire`` and ``read_chunk`` block, so callers
    run them via ``asyncio.to_thread``.
    """

    def __init__(
        self, sample_rate: int | None = None, chunk_samples: int | None = None
    ) -> None:
        self._sample_rate = sample_rate or SAMPLE_RATE
        self._chunk_samples = chunk_samples or CHUNK_SAMPLES
        self._available: bool = False
        self._stream: sd.InputStream | None = None
        self._overflows: int = 0

    async def start(self) -> None:
        """Probe for an input device.  No-op if unavailable."""
        try:
            sd.query_devices(kind="input")
            self._available = True
            logger.info("Microphone input device detected")
        except Exception:
            self._available = False
            logger.warning("No microphone input device found")

    async def stop(self) -> None:
        self.release()
        self._available = False

    @property
    def is_available(self) -> bool:
        return self._available

    def acquire(self) -> None:
        """Open and start the input stream.

        Raises MicrophoneAccessError if the device is missing, busy, or
        access is denied.
        """
        if self._stream is not None:
            raise MicrophoneAccessError("Microphone is already in use")

        stream = None
        try:
            stream = sd.InputStream(
                samplerate=self._sample_rate,
                channels=1,
                dtype="int16",
                blocksize=self._chunk_samples,
            )
            stream.start()
        except Exception as exc:
            if stream is not None:
                try:
                    stream.close()
                except Exception:
                    logger.debug("Closing half-opened stream failed", exc_info=True)
            raise MicrophoneAccessError(type(exc).__name__) from exc

        self._stream = stream
        self._overflows = 0
        logger.info("Microphone acquired (rate=%d)", self._sample_rate)

    def read_chunk(self) -> bytes | None:
        """Read one chunk of PCM bytes.  Returns None once released."""
        stream = self._stream
        if stream is None:
            return None

        try:
            data, overflowed = stream.read(self._chunk_samples)
        except Exception:
            if self._stream is None:
                # Released from another thread mid-read.
                return None
            raise

        if overflowed:
            self._overflows += 1
        return np.ascontiguousarray(data, dtype=np.int16).tobytes()

    def release(self) -> None:
        """Stop and close the stream.

        Each teardown step runs even if an earlier one fails; failures
        are logged and never raised.
        """
        stream = self._stream
        self._stream = None
        if stream is None:
            return

        for step_name, step in (("stop", stream.stop), ("close", stream.close)):
            try:
                step()
            except Exception:
                logger.warning("Microphone %s failed", step_name, exc_info=True)

        if self._overflows:
            logger.debug("Input overflowed %d times during capture", self._overflows)
        self._overflows = 0
        logger.info("Microphone released")
