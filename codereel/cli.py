"""CLI entry point for codereel."""

import argparse
import sys

import anyio

from codereel.config import DEFAULT_FPS, FIT_MAX_FONT_SIZE, FIT_MIN_FONT_SIZE
from codereel.render import create_console, print_error
from codereel.runner import RunConfig, run
from codereel.theme import THEMES


def _parse_args(argv: list[str] | None = None) -> RunConfig:
    """Parse command line arguments and return a RunConfig.

    Args:
        argv: Arguments to parse; defaults to ``sys.argv[1:]``.

    Returns:
        RunConfig: Configuration object populated from command line arguments.

    """
    parser = argparse.ArgumentParser(
        prog="codereel",
        description="Tokenize, fit, and animate code blocks",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Save debug log",
    )
    parser.add_argument(
        "--theme",
        choices=sorted(THEMES),
        default="intellij-dark",
        help="Syntax theme (default: intellij-dark)",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    tokenize_parser = subparsers.add_parser("tokenize", help="Print each line's tokens")
    tokenize_parser.add_argument("files", nargs="+", metavar="FILE")
    tokenize_parser.add_argument(
        "--types",
        nargs="*",
        default=[],
        metavar="NAME",
        help="Extra identifiers to highlight as types",
    )

    fit_parser = subparsers.add_parser("fit", help="Find the largest font size that fits a grid")
    fit_parser.add_argument("files", nargs="+", metavar="FILE")
    fit_parser.add_argument("--rows", type=int, default=1, metavar="N")
    fit_parser.add_argument("--cols", type=int, default=None, metavar="N", help="Default: one column per file")
    fit_parser.add_argument("--min", type=int, default=FIT_MIN_FONT_SIZE, dest="min_font_size", metavar="N")
    fit_parser.add_argument("--max", type=int, default=FIT_MAX_FONT_SIZE, dest="max_font_size", metavar="N")

    demo_parser = subparsers.add_parser("demo", help="Play the deduplicate-via-helper demo")
    demo_parser.add_argument("--fps", type=int, default=DEFAULT_FPS, metavar="N")
    demo_parser.add_argument("--speed", type=float, default=1.0, metavar="X", help="Playback speed (default: 1.0)")
    demo_parser.add_argument(
        "--no-live",
        action="store_false",
        dest="live",
        help="Print the final frame instead of animating",
    )

    args = parser.parse_args(argv)
    command = args.command or "demo"

    if command == "fit":
        if args.rows <= 0:
            parser.error("--rows must be a positive integer")
        if args.cols is not None and args.cols <= 0:
            parser.error("--cols must be a positive integer")
        if args.min_font_size > args.max_font_size:
            parser.error("--min must not exceed --max")
    if command == "demo":
        if getattr(args, "fps", DEFAULT_FPS) <= 0:
            parser.error("--fps must be a positive integer")
        if getattr(args, "speed", 1.0) <= 0:
            parser.error("--speed must be positive")

    files = getattr(args, "files", [])
    cols = getattr(args, "cols", None)
    return RunConfig(
        command=command,
        files=files,
        types=getattr(args, "types", []),
        theme=args.theme,
        rows=getattr(args, "rows", 1),
        cols=cols if cols is not None else max(1, len(files)),
        min_font_size=getattr(args, "min_font_size", FIT_MIN_FONT_SIZE),
        max_font_size=getattr(args, "max_font_size", FIT_MAX_FONT_SIZE),
        fps=getattr(args, "fps", DEFAULT_FPS),
        speed=getattr(args, "speed", 1.0),
        live=getattr(args, "live", True),
        debug=args.debug,
    )


def main() -> None:
    """Run the CLI entry point.

    Raises:
        SystemExit: Always raised with exit code 0 on success, 130 on keyboard
            interrupt, or 1 on fatal error.

    """
    config = _parse_args()
    console = create_console()
    try:
        exit_code = anyio.run(run, config, console)
        sys.exit(exit_code)
    except KeyboardInterrupt:
        console.print()
        console.print("[neon.dim]Aborted by user[/]")
        sys.exit(130)
    except Exception as e:
        console.print()
        print_error(console, "Fatal Error", str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
