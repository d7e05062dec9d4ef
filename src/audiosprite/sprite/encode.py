"""Materialize the sprite: transcoder interface and backends."""

import logging
import subprocess
from abc import ABC, abstractmethod
from pathlib import Path

from audiosprite import audio
from audiosprite.errors import EncodeError, EncodeErrorKind

logger = logging.getLogger(__name__)

LOSSLESS_FORMAT = "wav"
OUTPUT_FORMATS = [LOSSLESS_FORMAT, *audio.CODEC_ARGS]


class Transcoder(ABC):
    """Abstract base for backends that compress the lossless sprite."""

    name: str = "base"

    @abstractmethod
    def transcode(self, wav_path: Path, output_path: Path, target_format: str) -> Path:
        """Encode wav_path into target_format at output_path."""


class FfmpegTranscoder(Transcoder):
    """Transcode with ffmpeg."""

    name = "ffmpeg"

    def __init__(self, bitrate: str = "128k"):
        self.bitrate = bitrate

    def transcode(self, wav_path: Path, output_path: Path, target_format: str) -> Path:
        if target_format not in audio.CODEC_ARGS:
            raise EncodeError(
                EncodeErrorKind.TRANSCODE_FAILED,
                f"unsupported target format {target_format!r}",
                path=output_path,
            )
        try:
            return audio.transcode_audio(
                wav_path, output_path, target_format, bitrate=self.bitrate,
            )
        except subprocess.CalledProcessError as e:
            detail = (e.stderr or "").strip() or f"ffmpeg exited with status {e.returncode}"
            raise EncodeError(
                EncodeErrorKind.TRANSCODE_FAILED, detail, path=output_path,
            ) from e
        except (subprocess.TimeoutExpired, OSError, ValueError) as e:
            raise EncodeError(
                EncodeErrorKind.TRANSCODE_FAILED, str(e), path=output_path,
            ) from e


_TRANSCODERS = {
    "ffmpeg": FfmpegTranscoder,
}


def get_transcoder(name: str, **kwargs) -> Transcoder | None:
    """Get a transcoding backend by name ("ffmpeg", or "none" for WAV-only runs)."""
    if name == "none":
        return None
    if name not in _TRANSCODERS:
        raise ValueError(
            f"Unknown transcoder: {name!r}. Available: {list(_TRANSCODERS) + ['none']}"
        )
    return _TRANSCODERS[name](**kwargs)


def transcode(
    wav_path: Path,
    output_path: Path,
    target_format: str,
    transcoder: Transcoder | None,
) -> Path:
    """Produce one compressed resource from the lossless sprite.

    Raises:
        EncodeError: TranscodeFailed if no transcoder is configured or the
            backend fails.
    """
    if transcoder is None:
        raise EncodeError(
            EncodeErrorKind.TRANSCODE_FAILED,
            f"no transcoder configured for {target_format!r} output",
            path=output_path,
        )
    logger.info(f"Transcoding {wav_path.name} -> {output_path.name} ({transcoder.name})")
    return transcoder.transcode(wav_path, output_path, target_format)
