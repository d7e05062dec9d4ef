"""Sample-rate reconciliation: resampler interface and backends."""

import logging
import subprocess
import tempfile
from abc import ABC, abstractmethod
from math import gcd
from pathlib import Path

import numpy as np

from audiosprite import audio
from audiosprite.errors import (
    DecodeError,
    EncodeError,
    ReconcileError,
    ReconcileErrorKind,
)
from audiosprite.types import AudioFormat, Clip
from audiosprite.wav import decode, encode

logger = logging.getLogger(__name__)


class Resampler(ABC):
    """Abstract base for resampling backends."""

    name: str = "base"

    @abstractmethod
    def resample(self, clip: Clip, output_path: Path, target_rate: int) -> Path:
        """Write clip, resampled to target_rate, as a PCM WAV at output_path.

        Channel count and sample width must be preserved.
        """


class FfmpegResampler(Resampler):
    """Resample by running ffmpeg on the clip's source file."""

    name = "ffmpeg"

    def resample(self, clip: Clip, output_path: Path, target_rate: int) -> Path:
        return audio.resample_audio(
            clip.source, output_path, target_rate, bit_depth=clip.format.bit_depth,
        )


class ScipyResampler(Resampler):
    """In-process polyphase resampling with scipy.signal.resample_poly."""

    name = "scipy"

    def resample(self, clip: Clip, output_path: Path, target_rate: int) -> Path:
        from scipy.signal import resample_poly

        fmt = clip.format
        divisor = gcd(target_rate, fmt.sample_rate)
        up, down = target_rate // divisor, fmt.sample_rate // divisor

        info = np.iinfo(clip.samples.dtype)
        # unsigned PCM (8-bit WAV) is centred on its midpoint, not on 0
        midpoint = info.min + (info.max - info.min + 1) // 2 if info.min == 0 else 0

        frames = clip.samples.reshape(-1, fmt.channel_count).astype(np.float64) - midpoint
        resampled = resample_poly(frames, up, down, axis=0) + midpoint

        out = np.clip(np.rint(resampled), info.min, info.max).astype(clip.samples.dtype)
        target = AudioFormat(
            sample_rate=target_rate,
            channel_count=fmt.channel_count,
            bit_depth=fmt.bit_depth,
        )
        return encode(out.reshape(-1), target, output_path)


def _failure_detail(e: Exception) -> str:
    """Prefer the tool's stderr over the generic exception text."""
    stderr = getattr(e, "stderr", None)
    if isinstance(stderr, str) and stderr.strip():
        return stderr.strip()
    return str(e)


_RESAMPLERS = {
    "ffmpeg": FfmpegResampler,
    "scipy": ScipyResampler,
}


def get_resampler(name: str) -> Resampler | None:
    """Get a resampling backend by name.

    Modes:
        "ffmpeg": shell out to ffmpeg (reads the clip's source file).
        "scipy": polyphase filter in-process.
        "none": no backend; rate mismatches fail the run.
        "auto": ffmpeg when on PATH, otherwise scipy.
    """
    if name == "none":
        return None
    if name == "auto":
        if audio.ffmpeg_available():
            logger.info("Auto-detected ffmpeg, using ffmpeg resampler")
            return FfmpegResampler()
        logger.info("ffmpeg not available, falling back to scipy resampler")
        return ScipyResampler()

    if name not in _RESAMPLERS:
        raise ValueError(
            f"Unknown resampler: {name!r}. Available: {list(_RESAMPLERS) + ['auto', 'none']}"
        )
    return _RESAMPLERS[name]()


def reconcile(
    clip: Clip,
    reference_rate: int | None,
    resampler: Resampler | None = None,
) -> tuple[Clip, int]:
    """Bring clip to the reference sample rate.

    The first clip of a run (reference_rate None) fixes the reference.
    Clips already at the reference rate pass through unchanged. Others are
    resampled into a temporary WAV, re-decoded, and the temporary file is
    removed before returning, on success or failure.

    Returns:
        (clip at the reference rate, reference rate)

    Raises:
        ReconcileError: ResampleUnavailable if a resample is needed and no
            backend is configured, ResampleFailed if the backend fails or
            yields the wrong rate.
    """
    rate = clip.format.sample_rate
    if reference_rate is None:
        return clip, rate
    if rate == reference_rate:
        return clip, reference_rate

    if resampler is None:
        raise ReconcileError(
            ReconcileErrorKind.RESAMPLE_UNAVAILABLE,
            f"sample rate {rate} Hz differs from {reference_rate} Hz and no resampler is configured",
            path=clip.source,
        )

    logger.info(
        f"Resampling {clip.logical_name}: {rate} Hz -> {reference_rate} Hz ({resampler.name})"
    )
    with tempfile.TemporaryDirectory(prefix="audiosprite-") as tmpdir:
        out_path = Path(tmpdir) / f"{clip.logical_name}_{reference_rate}.wav"
        try:
            resampler.resample(clip, out_path, reference_rate)
            resampled = decode(out_path, name=clip.logical_name)
        except (
            subprocess.CalledProcessError,
            subprocess.TimeoutExpired,
            OSError,
            ValueError,
            DecodeError,
            EncodeError,
        ) as e:
            raise ReconcileError(
                ReconcileErrorKind.RESAMPLE_FAILED, _failure_detail(e), path=clip.source,
            ) from e

    if resampled.format.sample_rate != reference_rate:
        raise ReconcileError(
            ReconcileErrorKind.RESAMPLE_FAILED,
            f"resampler produced {resampled.format.sample_rate} Hz, expected {reference_rate} Hz",
            path=clip.source,
        )

    resampled.source = clip.source
    return resampled, reference_rate
