"""Audio sprite pipeline: decode, reconcile, assemble, encode, map."""

import logging
import tempfile
from collections.abc import Collection, Sequence
from pathlib import Path

from audiosprite.errors import (
    AssemblyError,
    AssemblyErrorKind,
    EncodeError,
    EncodeErrorKind,
    SpriteError,
)
from audiosprite.sprite.assembler import AssemblyState, append_clip
from audiosprite.sprite.encode import (
    LOSSLESS_FORMAT,
    OUTPUT_FORMATS,
    Transcoder,
    transcode,
)
from audiosprite.sprite.reconcile import Resampler, reconcile
from audiosprite.sprite.timeline import build_manifest, write_manifest
from audiosprite.types import Result
from audiosprite.wav import decode, encode

logger = logging.getLogger(__name__)


def _output_path(base: Path, ext: str) -> Path:
    """'out/sfx' + 'mp3' -> 'out/sfx.mp3' (keeps dots already in the base name)."""
    return base.parent / f"{base.name}.{ext}"


def _normalize_formats(formats: Sequence[str]) -> list[str]:
    """Validate requested formats, dropping repeats but keeping order."""
    normalized: list[str] = []
    for fmt in formats:
        fmt = fmt.lower().lstrip(".")
        if fmt not in OUTPUT_FORMATS:
            raise ValueError(f"Unknown output format: {fmt!r}. Available: {OUTPUT_FORMATS}")
        if fmt not in normalized:
            normalized.append(fmt)
    if not normalized:
        raise ValueError("At least one output format is required")
    return normalized


def build_sprite(
    input_paths: Sequence[Path],
    loops: Collection[str] = (),
    resampler: Resampler | None = None,
) -> AssemblyState:
    """Decode, reconcile and append each input in order.

    The first input fixes the reference format. Processing stops at the
    first failure.
    """
    if not input_paths:
        raise AssemblyError(AssemblyErrorKind.NO_CLIPS, "no input files")

    state = AssemblyState()
    reference_rate: int | None = None

    for path in input_paths:
        clip = decode(path)
        logger.info(
            f"Decoded {path}: {clip.format.sample_rate} Hz, "
            f"{clip.format.channel_count} ch, {clip.format.bit_depth}-bit, "
            f"{clip.frame_count} frames"
        )
        clip, reference_rate = reconcile(clip, reference_rate, resampler)
        append_clip(state, clip, loops)

    return state


def process(
    input_paths: Sequence[Path],
    output_base: str | Path = "sprite",
    loops: Collection[str] = (),
    formats: Sequence[str] = (LOSSLESS_FORMAT,),
    resampler: Resampler | None = None,
    transcoder: Transcoder | None = None,
) -> Result:
    """Run the sprite pipeline.

    Args:
        input_paths: Input WAV files, in sprite order.
        output_base: Output path without extension; resources are written
            to '<base>.<format>' and the manifest to '<base>.json'.
        loops: Base filenames (or logical names) of clips to mark as looping.
        formats: Output formats in resource order. The lossless WAV is
            always produced first; when 'wav' is not requested it is kept
            in a temporary directory and removed after transcoding.
        resampler: Backend for sample-rate mismatches (None = mismatches fail).
        transcoder: Backend for compressed formats (None = WAV only).

    Returns:
        Result with the manifest and the written resource paths.
    """
    output_base = Path(output_base)
    formats = _normalize_formats(formats)
    compressed = [f for f in formats if f != LOSSLESS_FORMAT]
    if compressed and transcoder is None:
        raise EncodeError(
            EncodeErrorKind.TRANSCODE_FAILED,
            f"no transcoder configured for {', '.join(compressed)} output",
        )

    state = build_sprite(input_paths, loops=loops, resampler=resampler)
    samples = state.output_samples()
    fmt = state.reference_format
    logger.info(
        f"Assembled {len(state.timeline)} clips: {state.cursor} frames "
        f"({state.seconds(state.cursor):.3f}s)"
    )

    try:
        output_base.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise EncodeError(EncodeErrorKind.WRITE_FAILED, str(e), path=output_base.parent) from e

    manifest_path = _output_path(output_base, "json")
    written: list[Path] = []
    try:
        with tempfile.TemporaryDirectory(prefix="audiosprite-") as tmpdir:
            if LOSSLESS_FORMAT in formats:
                wav_path = _output_path(output_base, LOSSLESS_FORMAT)
            else:
                wav_path = Path(tmpdir) / f"{output_base.name}.{LOSSLESS_FORMAT}"
            encode(samples, fmt, wav_path)
            if LOSSLESS_FORMAT in formats:
                written.append(wav_path)

            resources: list[Path] = []
            for target in formats:
                if target == LOSSLESS_FORMAT:
                    resources.append(wav_path)
                    continue
                out = _output_path(output_base, target)
                written.append(out)
                resources.append(transcode(wav_path, out, target, transcoder))

        manifest = build_manifest(state.timeline, resources)
        manifest_path = write_manifest(manifest, manifest_path)
    except SpriteError:
        for path in written:
            path.unlink(missing_ok=True)
        # a manifest left by an earlier run would point at the removed files
        manifest_path.unlink(missing_ok=True)
        raise

    for path in resources:
        logger.info(f"Wrote {path}")
    logger.info(f"Wrote {manifest_path}")

    return Result(
        manifest=manifest,
        manifest_path=manifest_path,
        resources=resources,
        frame_count=state.cursor,
        format=fmt,
    )
