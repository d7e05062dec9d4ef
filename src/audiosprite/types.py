"""Core data types for audiosprite."""

from dataclasses import dataclass, field
from pathlib import Path

import numpy as np


@dataclass(frozen=True)
class AudioFormat:
    """Sample layout of a decoded clip."""
    sample_rate: int     # Hz
    channel_count: int
    bit_depth: int       # bits per sample as decoded (8, 16, 32)


@dataclass
class Clip:
    """One decoded input file: interleaved integer samples plus format."""
    logical_name: str
    samples: np.ndarray  # 1-D, interleaved frame-major
    format: AudioFormat
    source: Path = field(default_factory=lambda: Path())

    @property
    def frame_count(self) -> int:
        return len(self.samples) // self.format.channel_count


@dataclass(frozen=True)
class TimelineEntry:
    """A clip's [start, end) region in the sprite, in seconds."""
    start_seconds: float
    end_seconds: float
    loop: bool = False

    def to_dict(self) -> dict:
        return {
            "start": self.start_seconds,
            "end": self.end_seconds,
            "loop": self.loop,
        }


@dataclass
class SpriteManifest:
    """Output resources plus the timeline keyed by logical clip name."""
    resource_paths: list[str]
    timeline: dict[str, TimelineEntry]

    def to_dict(self) -> dict:
        """Export shape: ``resources`` list and ``spritemap`` mapping."""
        return {
            "resources": list(self.resource_paths),
            "spritemap": {
                name: self.timeline[name].to_dict()
                for name in sorted(self.timeline)
            },
        }


@dataclass
class Result:
    """Output of the audiosprite pipeline."""
    manifest: SpriteManifest
    manifest_path: Path
    resources: list[Path]
    frame_count: int
    format: AudioFormat
