"""CLI entrypoint for audiosprite."""

import argparse
import logging
import sys
from pathlib import Path

from audiosprite.errors import SpriteError
from audiosprite.sprite.encode import LOSSLESS_FORMAT, OUTPUT_FORMATS


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments."""
    parser = argparse.ArgumentParser(
        prog="audiosprite",
        description="Combine WAV files into one audio sprite and export a JSON timeline map",
        epilog="Example: audiosprite -o sfx-sprite --loops ambience.wav 'sfx/*.wav'",
    )
    parser.add_argument(
        "inputs", nargs="*", default=[],
        help="Input WAV files or glob patterns, in sprite order.",
    )
    parser.add_argument("-o", "--output", default="sprite",
                        help="Output base name without extension (default: sprite)")
    parser.add_argument("--loops", default="",
                        help="Comma-separated filenames to mark as looping (e.g. 'rain.wav,engine.wav')")
    parser.add_argument("--format", dest="formats", action="append",
                        choices=OUTPUT_FORMATS, default=None,
                        help="Output format, repeatable; listed in resource order (default: wav)")
    parser.add_argument("--resampler", default="auto",
                        choices=["auto", "ffmpeg", "scipy", "none"],
                        help="Backend for inputs at a different sample rate than the first (default: auto)")
    parser.add_argument("--bitrate", default="128k",
                        help="Bitrate for lossy formats (default: 128k)")
    parser.add_argument("-v", "--verbose", action="store_true", default=False,
                        help="Log every clip's timeline interval")

    args = parser.parse_args(argv)

    if not args.inputs:
        parser.print_usage(sys.stderr)
        print("Error: at least one input file is required", file=sys.stderr)
        sys.exit(1)

    if args.formats is None:
        args.formats = [LOSSLESS_FORMAT]

    return args


def _run(args: argparse.Namespace) -> None:
    """Run the sprite pipeline."""
    from audiosprite.inputs import expand_inputs, parse_loop_list
    from audiosprite.sprite import process
    from audiosprite.sprite.encode import get_transcoder
    from audiosprite.sprite.reconcile import get_resampler

    input_paths = expand_inputs(args.inputs)
    loops = parse_loop_list(args.loops)

    transcoder = None
    if any(f != LOSSLESS_FORMAT for f in args.formats):
        transcoder = get_transcoder("ffmpeg", bitrate=args.bitrate)

    result = process(
        input_paths=input_paths,
        output_base=Path(args.output),
        loops=loops,
        formats=args.formats,
        resampler=get_resampler(args.resampler),
        transcoder=transcoder,
    )

    names = ", ".join(str(p) for p in result.resources)
    print(f"Generated {names} and {result.manifest_path}")


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(name)s %(levelname)s: %(message)s",
    )

    try:
        _run(args)
    except SpriteError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
