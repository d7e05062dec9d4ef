"""Build and serialize the sprite manifest."""

import json
from collections.abc import Mapping, Sequence
from pathlib import Path

from audiosprite.errors import (
    AssemblyError,
    AssemblyErrorKind,
    EncodeError,
    EncodeErrorKind,
)
from audiosprite.types import SpriteManifest, TimelineEntry


def build_manifest(
    timeline: Mapping[str, TimelineEntry],
    resources: Sequence[str | Path],
) -> SpriteManifest:
    """Pair the assembled timeline with the sprite's output resources."""
    if not timeline:
        raise AssemblyError(AssemblyErrorKind.NO_CLIPS, "timeline is empty")
    return SpriteManifest(
        resource_paths=[str(r) for r in resources],
        timeline=dict(timeline),
    )


def write_manifest(manifest: SpriteManifest, path: Path) -> Path:
    """Write the manifest as indented JSON (resources + spritemap)."""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(manifest.to_dict(), indent=2) + "\n")
    except OSError as e:
        raise EncodeError(EncodeErrorKind.WRITE_FAILED, str(e), path=path) from e
    return path
