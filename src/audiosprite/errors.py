"""Error taxonomy for sprite runs.

Every error is fatal to the run. Library code raises these; only the CLI
turns them into an exit status.
"""

from enum import Enum
from pathlib import Path


class DecodeErrorKind(str, Enum):
    NOT_FOUND = "NotFound"
    INVALID_CONTAINER = "InvalidContainer"
    UNSUPPORTED_ENCODING = "UnsupportedEncoding"


class ReconcileErrorKind(str, Enum):
    RESAMPLE_UNAVAILABLE = "ResampleUnavailable"
    RESAMPLE_FAILED = "ResampleFailed"


class AssemblyErrorKind(str, Enum):
    RATE_MISMATCH = "RateMismatch"
    CHANNEL_MISMATCH = "ChannelMismatch"
    MALFORMED_BUFFER = "MalformedBuffer"
    DUPLICATE_KEY = "DuplicateKey"
    NO_CLIPS = "NoClips"


class EncodeErrorKind(str, Enum):
    WRITE_FAILED = "WriteFailed"
    TRANSCODE_FAILED = "TranscodeFailed"


class InputErrorKind(str, Enum):
    NO_MATCH = "NoMatch"
    DUPLICATE = "Duplicate"
    EMPTY = "Empty"


class SpriteError(Exception):
    """Base class for all sprite errors.

    Carries the error ``kind`` and, when one is involved, the ``path`` of
    the failing input so the message can name it.
    """

    def __init__(self, kind: Enum, detail: str = "", path: str | Path | None = None) -> None:
        self.kind = kind
        self.detail = detail
        self.path = Path(path) if path is not None else None
        super().__init__(self._format())

    def _format(self) -> str:
        label = f"{type(self).__name__}[{self.kind.value}]"
        if self.path is not None:
            label = f"{self.path}: {label}"
        if self.detail:
            return f"{label}: {self.detail}"
        return label


class DecodeError(SpriteError):
    """An input could not be opened or read as PCM audio."""


class ReconcileError(SpriteError):
    """A clip could not be brought to the reference sample rate."""


class AssemblyError(SpriteError):
    """A clip violates the sprite buffer layout or timeline keys."""


class EncodeError(SpriteError):
    """The sprite could not be written or transcoded."""


class InputError(SpriteError):
    """Input patterns did not resolve to a usable, unique file list."""
