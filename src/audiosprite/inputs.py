"""Input enumeration: glob expansion and loop-list parsing."""

import glob
from pathlib import Path

from audiosprite.errors import InputError, InputErrorKind


def expand_inputs(patterns: list[str]) -> list[Path]:
    """Expand glob patterns into an ordered, duplicate-free file list.

    Each pattern's matches are sorted; pattern order is preserved. A plain
    path matches itself if it exists.

    Raises:
        InputError: NoMatch if a pattern matches nothing, Duplicate if a
            file is produced twice, Empty if no patterns were given.
    """
    inputs: list[Path] = []
    seen: set[Path] = set()

    for pattern in patterns:
        matched = sorted(glob.glob(pattern))
        if not matched:
            raise InputError(
                InputErrorKind.NO_MATCH, f"no files matched pattern: {pattern}",
            )
        for m in matched:
            path = Path(m)
            key = path.resolve()
            if key in seen:
                raise InputError(
                    InputErrorKind.DUPLICATE, "input listed more than once", path=path,
                )
            seen.add(key)
            inputs.append(path)

    if not inputs:
        raise InputError(InputErrorKind.EMPTY, "at least one input file is required")
    return inputs


def parse_loop_list(s: str | None) -> frozenset[str]:
    """Parse 'a.wav, b.wav' into a set of base filenames. Blank entries are ignored."""
    if not s:
        return frozenset()
    return frozenset(name.strip() for name in s.split(",") if name.strip())
