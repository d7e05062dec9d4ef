"""WAV I/O: decode inputs to integer PCM clips and write the lossless sprite.

Uses scipy.io.wavfile so plain PCM WAVs are read and written without ffmpeg.
Samples stay in the integer dtype the file was stored with, flattened to a
1-D interleaved array.
"""

import logging
import struct
import warnings
from pathlib import Path

import numpy as np
import scipy.io.wavfile as wavfile

from audiosprite.errors import (
    DecodeError,
    DecodeErrorKind,
    EncodeError,
    EncodeErrorKind,
)
from audiosprite.types import AudioFormat, Clip

logger = logging.getLogger(__name__)

# scipy's messages for encodings it recognises but cannot read
_UNSUPPORTED_MARKERS = ("Unknown wave file format", "Unsupported")
# scipy warns instead of raising when the data chunk is shorter than declared
_TRUNCATED_MARKER = "Reached EOF prematurely"


def logical_name(path: str | Path) -> str:
    """Timeline key for an input: base filename without its last extension."""
    return Path(path).stem


def decode(path: str | Path, name: str | None = None) -> Clip:
    """Read a PCM WAV file fully into a Clip.

    Args:
        path: Input file.
        name: Logical name override (defaults to the file stem).

    Raises:
        DecodeError: NotFound if the file cannot be opened, InvalidContainer
            if it is not a well-formed WAV, UnsupportedEncoding for
            non-integer or unknown sample encodings.
    """
    path = Path(path)
    if not path.is_file():
        raise DecodeError(DecodeErrorKind.NOT_FOUND, "file not found", path=path)

    try:
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", wavfile.WavFileWarning)
            sr, data = wavfile.read(str(path))
    except OSError as e:
        raise DecodeError(DecodeErrorKind.NOT_FOUND, str(e), path=path) from e
    except ValueError as e:
        message = str(e)
        if any(marker in message for marker in _UNSUPPORTED_MARKERS):
            kind = DecodeErrorKind.UNSUPPORTED_ENCODING
        else:
            kind = DecodeErrorKind.INVALID_CONTAINER
        raise DecodeError(kind, message, path=path) from e
    except EOFError as e:
        raise DecodeError(DecodeErrorKind.INVALID_CONTAINER, "truncated file", path=path) from e
    except (struct.error, ZeroDivisionError) as e:
        # header cut short, or a zero channel/block-align field
        raise DecodeError(
            DecodeErrorKind.INVALID_CONTAINER, f"malformed header: {e}", path=path,
        ) from e

    for w in caught:
        message = str(w.message)
        if message.startswith(_TRUNCATED_MARKER):
            raise DecodeError(DecodeErrorKind.INVALID_CONTAINER, message, path=path)
        if not issubclass(w.category, wavfile.WavFileWarning):
            warnings.warn(w.message, w.category)
        # unknown chunks (LIST, bext, ...) are skipped, not fatal

    if not np.issubdtype(data.dtype, np.integer):
        raise DecodeError(
            DecodeErrorKind.UNSUPPORTED_ENCODING,
            f"{data.dtype} samples, only integer PCM is supported",
            path=path,
        )

    channels = 1 if data.ndim == 1 else data.shape[1]
    if channels < 1:
        raise DecodeError(DecodeErrorKind.INVALID_CONTAINER, "header declares no channels", path=path)
    fmt = AudioFormat(
        sample_rate=int(sr),
        channel_count=channels,
        bit_depth=data.dtype.itemsize * 8,
    )
    # (frames, channels) row-major flattens to interleaved order
    samples = np.ascontiguousarray(data).reshape(-1)

    return Clip(
        logical_name=name if name is not None else logical_name(path),
        samples=samples,
        format=fmt,
        source=path,
    )


def encode(samples: np.ndarray, fmt: AudioFormat, destination: str | Path) -> Path:
    """Write interleaved samples as a PCM WAV.

    Creates parent directories if needed.

    Raises:
        EncodeError: WriteFailed if the buffer does not fit the format or the
            file cannot be written.
    """
    destination = Path(destination)
    if fmt.channel_count < 1 or len(samples) % fmt.channel_count:
        raise EncodeError(
            EncodeErrorKind.WRITE_FAILED,
            f"{len(samples)} samples do not fill {fmt.channel_count}-channel frames",
            path=destination,
        )

    data = np.asarray(samples)
    if fmt.channel_count > 1:
        data = data.reshape(-1, fmt.channel_count)

    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        wavfile.write(str(destination), fmt.sample_rate, data)
    except (OSError, ValueError) as e:
        raise EncodeError(EncodeErrorKind.WRITE_FAILED, str(e), path=destination) from e

    logger.debug(f"Wrote {len(data)} frames to {destination}")
    return destination
