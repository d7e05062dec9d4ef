"""Assemble decoded clips into one sprite buffer and its timeline."""

import logging
from collections.abc import Collection, Iterable
from dataclasses import dataclass, field

import numpy as np

from audiosprite.errors import AssemblyError, AssemblyErrorKind
from audiosprite.types import AudioFormat, Clip, TimelineEntry

logger = logging.getLogger(__name__)


@dataclass
class AssemblyState:
    """Growing sprite buffer for one run.

    Append-only: chunks are never reordered or removed, and cursor (frames
    appended so far) only increases. reference_format is fixed by the first
    clip.
    """
    reference_format: AudioFormat | None = None
    chunks: list[np.ndarray] = field(default_factory=list)
    cursor: int = 0
    timeline: dict[str, TimelineEntry] = field(default_factory=dict)

    def seconds(self, frame: int) -> float:
        return frame / self.reference_format.sample_rate

    def output_samples(self) -> np.ndarray:
        """The interleaved sprite buffer."""
        if not self.chunks:
            raise AssemblyError(AssemblyErrorKind.NO_CLIPS, "no clips were appended")
        if len(self.chunks) > 1:
            # Collapse so repeated calls don't re-copy every chunk
            self.chunks = [np.concatenate(self.chunks)]
        return self.chunks[0]


def is_looped(clip: Clip, loops: Collection[str]) -> bool:
    """Loop entries match the base filename ('attack.wav') or the logical name."""
    return clip.source.name in loops or clip.logical_name in loops


def _check_layout(state: AssemblyState, clip: Clip) -> None:
    ref = state.reference_format
    fmt = clip.format
    if fmt.sample_rate != ref.sample_rate:
        raise AssemblyError(
            AssemblyErrorKind.RATE_MISMATCH,
            f"{fmt.sample_rate} Hz, expected {ref.sample_rate} Hz",
            path=clip.source,
        )
    if fmt.channel_count != ref.channel_count:
        raise AssemblyError(
            AssemblyErrorKind.CHANNEL_MISMATCH,
            f"{fmt.channel_count} channel(s), expected {ref.channel_count}",
            path=clip.source,
        )
    if clip.samples.dtype != state.chunks[0].dtype:
        raise AssemblyError(
            AssemblyErrorKind.MALFORMED_BUFFER,
            f"{fmt.bit_depth}-bit samples, expected {ref.bit_depth}-bit",
            path=clip.source,
        )


def append_clip(
    state: AssemblyState,
    clip: Clip,
    loops: Collection[str] = (),
) -> TimelineEntry:
    """Append one clip to the sprite and record its timeline entry.

    Offsets come from the absolute frame cursor, never from summed
    durations, so consecutive entries share exact boundaries.

    Raises:
        AssemblyError: RateMismatch / ChannelMismatch if the clip's layout
            differs from the first clip, MalformedBuffer if its samples do
            not fill whole frames, DuplicateKey if its name is taken.
    """
    fmt = clip.format
    if state.reference_format is not None:
        _check_layout(state, clip)
    if fmt.channel_count < 1 or len(clip.samples) % fmt.channel_count:
        raise AssemblyError(
            AssemblyErrorKind.MALFORMED_BUFFER,
            f"{len(clip.samples)} samples is not a multiple of {fmt.channel_count} channel(s)",
            path=clip.source,
        )
    if clip.logical_name in state.timeline:
        raise AssemblyError(
            AssemblyErrorKind.DUPLICATE_KEY,
            f"timeline key {clip.logical_name!r} is already used",
            path=clip.source,
        )

    if state.reference_format is None:
        state.reference_format = fmt

    start = state.seconds(state.cursor)
    state.chunks.append(clip.samples)
    state.cursor += len(clip.samples) // fmt.channel_count
    end = state.seconds(state.cursor)

    entry = TimelineEntry(
        start_seconds=start,
        end_seconds=end,
        loop=is_looped(clip, loops),
    )
    state.timeline[clip.logical_name] = entry
    logger.debug(
        f"{clip.logical_name}: {start:.6f}s - {end:.6f}s"
        + (" (loop)" if entry.loop else "")
    )
    return entry


def assemble(
    clips: Iterable[Clip],
    loops: Collection[str] = (),
) -> tuple[np.ndarray, dict[str, TimelineEntry]]:
    """Concatenate clips in the given order into one sprite buffer.

    Clips are consumed strictly in iteration order; nothing is re-sorted.

    Args:
        clips: Decoded clips, all at one sample rate and channel layout.
        loops: Base filenames or logical names to mark as looping.

    Returns:
        (interleaved output samples, timeline keyed by logical name)

    Raises:
        AssemblyError: NoClips if clips is empty, plus any append_clip failure.
    """
    state = AssemblyState()
    for clip in clips:
        append_clip(state, clip, loops)

    if state.reference_format is None:
        raise AssemblyError(AssemblyErrorKind.NO_CLIPS, "no clips to assemble")

    return state.output_samples(), state.timeline
