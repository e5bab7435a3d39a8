"""Command-line interface for richfigure."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .version import __version__

EXIT_UNKNOWN_ARGS = 2
EXIT_INVALID_ARGS = 6
EXIT_OUTPUT_PATH = 7


def _get_usage() -> str:
    return (
        f"richfigure {__version__}\n"
        "Usage:\n"
        "  richfigure [--help] [--version|--ver]\n"
        "  richfigure --input PATH [options]\n\n"
        "Options:\n"
        "  --input PATH                 HTML file to rewrite ('-' reads stdin)\n"
        "  --output PATH                Write the result to PATH instead of stdout\n"
        "  --loading eager|lazy         Set the loading attribute on captioned images\n"
        "  --figure-class NAMES         Space separated classes for <figure>\n"
        "  --wrap                       Wrap each <figure> in a <div>\n"
        "  --wrap-class NAMES           Space separated classes for the wrapping <div>\n"
        "  --verbose                    Verbose progress logs\n"
        "  --debug                      Debug logs"
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--help", action="store_true")
    parser.add_argument("--version", action="store_true")
    parser.add_argument("--ver", action="store_true")
    parser.add_argument("--input", help="HTML file to rewrite, '-' for stdin")
    parser.add_argument("--output", help="Output file (default: stdout)")
    parser.add_argument("--loading", help="Value for the loading attribute of captioned images")
    parser.add_argument("--figure-class", help="Space separated class names for generated <figure> elements")
    parser.add_argument("--wrap", action="store_true", help="Wrap generated <figure> elements in a <div>")
    parser.add_argument("--wrap-class", help="Space separated class names for the wrapping <div>")
    parser.add_argument("--verbose", action="store_true", help="Verbose progress logs")
    parser.add_argument("--debug", action="store_true", help="Debug logs")
    return parser


def _read_input(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).expanduser().resolve().read_text(encoding="utf-8")


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    parser = _build_parser()
    args, unknown = parser.parse_known_args(argv)
    if unknown:
        print(_get_usage())
        return EXIT_UNKNOWN_ARGS

    if not argv or args.help:
        print(_get_usage())
        return 0

    if args.version or args.ver:
        print(__version__)
        return 0

    if not args.input:
        print(_get_usage())
        print("Option --input is required unless --help or --version/--ver is used", file=sys.stderr)
        return EXIT_INVALID_ARGS

    if args.wrap_class and not args.wrap:
        print("Option --wrap-class requires --wrap", file=sys.stderr)
        return EXIT_INVALID_ARGS

    try:
        from richfigure import core
    except Exception as exc:
        print(f"Unable to import richfigure core: {exc}", file=sys.stderr)
        return EXIT_INVALID_ARGS

    core.setup_logging(args.verbose, args.debug)

    try:
        config = core.FigureConfig.from_mapping(
            {
                "loading": args.loading,
                "figureClass": args.figure_class,
                "wrap": bool(args.wrap),
                "wrapClass": args.wrap_class,
            }
        )
    except ValueError as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_INVALID_ARGS

    output_path = None
    if args.output:
        output_path = Path(args.output).expanduser().resolve()
        if output_path.exists() and output_path.is_dir():
            print(f"Output path is a directory: {output_path}", file=sys.stderr)
            return EXIT_OUTPUT_PATH
        if not output_path.parent.is_dir():
            print(f"Output directory not found: {output_path.parent}", file=sys.stderr)
            return EXIT_OUTPUT_PATH

    try:
        markup = _read_input(args.input)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Unable to read input {args.input}: {exc}", file=sys.stderr)
        return EXIT_INVALID_ARGS

    result = core.process_html(markup, config)

    if output_path is None:
        sys.stdout.write(result)
        return 0

    try:
        output_path.write_text(result, encoding="utf-8")
    except OSError as exc:
        print(f"Unable to write output {output_path}: {exc}", file=sys.stderr)
        return EXIT_OUTPUT_PATH
    core.LOG.info("Output written to %s", output_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
