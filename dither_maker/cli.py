"""Command-line interface for dither_maker.

Supports human-readable and JSON output for scripting.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from dither_maker.core.algorithms import AlgorithmName
from dither_maker.core.palette import PALETTES, PaletteName

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dither-maker",
        description="Reduce images, GIFs and videos to a fixed palette with dithering.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # --- convert subcommand ---
    convert = subparsers.add_parser(
        "convert",
        help="Dither a media file.",
    )
    convert.add_argument("input", help="Input image, GIF or video file path.")
    convert.add_argument(
        "-o", "--output",
        help="Output file path. Defaults to <input>_dithered.<ext>.",
    )
    convert.add_argument(
        "-a", "--algorithm",
        choices=[a.value for a in AlgorithmName],
        default=AlgorithmName.FLOYD_STEINBERG.value,
        help="Dithering algorithm (default: floyd-steinberg).",
    )
    convert.add_argument(
        "-p", "--palette",
        default=PaletteName.MONO.value,
        help=(
            "Palette preset or comma separated hex colors, "
            f"presets: {', '.join(p.value for p in PaletteName)} (default: mono)."
        ),
    )
    convert.add_argument(
        "--matrix-size",
        type=int,
        default=4,
        help="Bayer matrix size, a power of two (default: 4).",
    )
    convert.add_argument(
        "--amplitude",
        type=float,
        default=None,
        help="Bayer threshold strength as a fraction of channel range (default: 1/3, 1 with --mono).",
    )
    convert.add_argument(
        "--mono",
        action="store_true",
        help="Convert to gray and dither to black and white.",
    )
    convert.add_argument(
        "--width",
        type=int,
        help="Resize to this width before dithering.",
    )
    convert.add_argument(
        "--height",
        type=int,
        help="Resize to this height before dithering.",
    )
    convert.add_argument(
        "--json",
        action="store_true",
        help="Output structured JSON (pipe-friendly).",
    )
    convert.add_argument(
        "--debug",
        action="store_true",
        help="Show stack traces on error (with --json).",
    )

    # --- list subcommand ---
    listing = subparsers.add_parser(
        "list",
        help="List algorithms and palette presets.",
    )
    listing.add_argument(
        "--json",
        action="store_true",
        help="Output structured JSON.",
    )

    return parser


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _auto_output_path(input_path: Path) -> Path:
    """Generate default output path from input."""
    return input_path.parent / f"{input_path.stem}_dithered{input_path.suffix}"


def _fail(message: str, code: str, is_json: bool) -> None:
    """Report an error on stderr and exit with code 1."""
    if is_json:
        err = {"status": "error", "error": message, "code": code}
        print(json.dumps(err), file=sys.stderr)
    else:
        print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def _run_list(args: argparse.Namespace) -> None:
    palettes = {name.value: len(PALETTES[name]) for name in PaletteName}
    algorithms = [a.value for a in AlgorithmName]
    if args.json:
        print(json.dumps({"algorithms": algorithms, "palettes": palettes}, indent=2))
        return
    print("Algorithms:")
    for name in algorithms:
        print(f"  {name}")
    print("Palettes:")
    for name, size in palettes.items():
        print(f"  {name} ({size} colors)")


def _run_convert(args: argparse.Namespace) -> None:
    """Run the convert pipeline."""
    from dither_maker.core.errors import DitherError
    from dither_maker.core.processor import Settings, process_frame
    from dither_maker.core.reader import open_media
    from dither_maker.core.writer import save_output

    is_json = args.json
    input_path = Path(args.input).resolve()
    if not input_path.exists():
        _fail(f"File not found: {input_path}", "FILE_NOT_FOUND", is_json)

    settings = Settings(
        algorithm=AlgorithmName(args.algorithm),
        palette=args.palette,
        matrix_size=args.matrix_size,
        amplitude=args.amplitude,
        mono=args.mono,
        width=args.width,
        height=args.height,
    )

    # Validate configuration before any frame is decoded
    try:
        palette = settings.resolve_palette()
        if settings.algorithm == AlgorithmName.BAYER:
            from dither_maker.core.bayer import build_bayer_matrix

            build_bayer_matrix(settings.matrix_size)
    except (DitherError, ValueError) as e:
        _fail(str(e), "INVALID_SETTINGS", is_json)

    try:
        reader = open_media(input_path)
    except (ValueError, IOError, FileNotFoundError) as e:
        _fail(str(e), "INVALID_INPUT", is_json)

    info = reader.info
    output_path = Path(args.output).resolve() if args.output else _auto_output_path(input_path)

    frame_count = 0

    def processed_frames():
        nonlocal frame_count
        for raw_frame in reader.frames():
            yield process_frame(raw_frame, settings, palette)
            frame_count += 1
            if not is_json:
                print(
                    f"\rProcessing frame {frame_count}/{info.frame_count}...",
                    end="",
                    file=sys.stderr,
                )

    try:
        save_output(
            processed_frames(),
            output_path,
            fps=info.fps or 24.0,
            total_frames=info.frame_count,
        )
    except Exception as e:
        logger.debug("Processing failed", exc_info=True)
        if is_json and args.debug:
            import traceback
            traceback.print_exc(file=sys.stderr)
        if not is_json:
            print(file=sys.stderr)
        _fail(f"Processing failed: {e}", "PROCESSING_ERROR", is_json)

    if not is_json:
        print(f"\nSaved to {output_path}", file=sys.stderr)
        return

    result = {
        "status": "success",
        "input": str(input_path),
        "output": str(output_path),
        "settings": {
            "algorithm": settings.algorithm.value,
            "palette": settings.palette if not settings.mono else PaletteName.MONO.value,
            "palette_size": len(palette),
            "matrix_size": settings.matrix_size,
            "amplitude": settings.resolve_amplitude(),
            "mono": settings.mono,
            "hash": settings.hash(),
        },
        "metadata": {
            "input_frames": info.frame_count,
            "output_frames": frame_count,
            "fps": info.fps,
            "input_format": info.format,
            "output_format": output_path.suffix.lstrip("."),
        },
    }
    print(json.dumps(result, indent=2))


def main(argv: list[str] | None = None) -> None:
    """Main entry point.

    Routing:
      dither-maker convert <file> [opts]  → dither a file
      dither-maker list                   → show algorithms and palettes
    """
    parser = _build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if args.command == "convert":
        _run_convert(args)
    elif args.command == "list":
        _run_list(args)
    else:
        parser.print_help()
        sys.exit(2)


if __name__ == "__main__":
    main()
