"""Audio processing via ffmpeg."""

import os
import shutil
import subprocess
from pathlib import Path

FFMPEG = os.environ.get("AUDIOSPRITE_FFMPEG", "ffmpeg")
TIMEOUT_S = float(os.environ.get("AUDIOSPRITE_TIMEOUT", "120"))

# PCM codec names keyed by sample width in bits
PCM_CODECS = {
    8: "pcm_u8",
    16: "pcm_s16le",
    32: "pcm_s32le",
}

# (encoder, muxer) per target; muxer None = inferred from the extension
CODEC_ARGS = {
    "mp3": ("libmp3lame", "mp3"),
    "ogg": ("libvorbis", "ogg"),
    "m4a": ("aac", "ipod"),
    "opus": ("libopus", "opus"),
    "flac": ("flac", None),
}

LOSSLESS_CODECS = {"flac"}


def ffmpeg_available() -> bool:
    """Check if the configured ffmpeg binary is on PATH."""
    return shutil.which(FFMPEG) is not None


def _run_ffmpeg(args: list[str]) -> None:
    """Run ffmpeg with the given arguments, raising on failure."""
    cmd = [FFMPEG, "-y", "-hide_banner", "-loglevel", "error", *args]
    subprocess.run(
        cmd, capture_output=True, text=True, timeout=TIMEOUT_S,
    ).check_returncode()


def resample_audio(
    input_path: Path,
    output_path: Path,
    sample_rate: int,
    bit_depth: int = 16,
) -> Path:
    """Resample a WAV to sample_rate, keeping channel layout and sample width."""
    codec = PCM_CODECS.get(bit_depth)
    if codec is None:
        raise ValueError(f"No PCM codec for {bit_depth}-bit samples")
    if not input_path.exists():
        raise FileNotFoundError(f"File not found: {input_path}")
    _run_ffmpeg([
        "-i", str(input_path),
        "-vn", "-ar", str(sample_rate),
        "-c:a", codec, "-f", "wav",
        str(output_path),
    ])
    return output_path


def transcode_audio(
    input_path: Path,
    output_path: Path,
    target_format: str,
    bitrate: str = "128k",
) -> Path:
    """Encode a lossless WAV into a compressed container.

    Supported targets: mp3, ogg (vorbis), m4a (aac), opus, flac.
    """
    if target_format not in CODEC_ARGS:
        raise ValueError(
            f"Unsupported target format: {target_format!r}. "
            f"Available: {sorted(CODEC_ARGS)}"
        )
    if not input_path.exists():
        raise FileNotFoundError(f"File not found: {input_path}")

    codec, container = CODEC_ARGS[target_format]
    args = ["-i", str(input_path), "-vn", "-c:a", codec]
    if target_format not in LOSSLESS_CODECS:
        args.extend(["-b:a", bitrate])
    if container:
        args.extend(["-f", container])
    args.append(str(output_path))

    _run_ffmpeg(args)
    return output_path
