"""Tests for core data types."""

from pathlib import Path

import numpy as np

from audiosprite.types import AudioFormat, Clip, SpriteManifest, TimelineEntry


def test_audio_format_is_hashable():
    fmt = AudioFormat(sample_rate=44100, channel_count=2, bit_depth=16)
    assert fmt == AudioFormat(44100, 2, 16)
    assert len({fmt, AudioFormat(44100, 2, 16)}) == 1


def test_clip_frame_count():
    clip = Clip(
        logical_name="step",
        samples=np.zeros(10, dtype=np.int16),
        format=AudioFormat(22050, 2, 16),
        source=Path("sfx/step.wav"),
    )
    assert clip.frame_count == 5
    assert clip.source.name == "step.wav"


def test_timeline_entry_defaults():
    entry = TimelineEntry(start_seconds=0.5, end_seconds=1.0)
    assert entry.loop is False
    assert entry.to_dict() == {"start": 0.5, "end": 1.0, "loop": False}


def test_manifest_to_dict_sorts_names():
    manifest = SpriteManifest(
        resource_paths=["sprite.wav"],
        timeline={
            "zap": TimelineEntry(0.0, 0.2),
            "boom": TimelineEntry(0.2, 1.0, True),
        },
    )
    data = manifest.to_dict()
    assert data["resources"] == ["sprite.wav"]
    assert list(data["spritemap"]) == ["boom", "zap"]
    assert data["spritemap"]["boom"]["loop"] is True
