"""Audio capture for the drill."""

from drill.audio.microphone import MicrophoneCapture

__all__ = ["MicrophoneCapture"]
