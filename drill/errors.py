"""Exception types raised by the drill subsystems.

Every error here is terminal to the current attempt only.  The engine
catches them at its boundaries and turns them into display messages.
"""


class DrillError(Exception):
    """Base class for all drill errors."""


class ConfigLoadError(DrillError):
    """The target file is missing or could not be read."""


class ConfigFormatError(DrillError):
    """The target file was read but holds no usable drill items."""


class EmptyTargetList(ConfigFormatError):
    """Parsing produced zero valid lines."""


class MicrophoneAccessError(DrillError):
    """Permission denied, no input device, or the stream failed to open."""


class RecognizerInitError(DrillError):
    """The speech model or recognizer could not be created."""
