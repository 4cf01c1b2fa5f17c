"""Command line entry point: ``python -m tersehtml`` / ``tersehtml``."""

import argparse
import logging
import sys

from .minifier import minify_to
from .settings import DEFAULT_SETTINGS


def _keep_script(stream):
    return stream.read()


def build_parser():
    parser = argparse.ArgumentParser(prog="tersehtml", description="Minify an HTML document")
    parser.add_argument(
        "input",
        nargs="?",
        default="-",
        help="HTML file to minify (default: stdin)",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Where to write the result (default: stdout)",
    )
    parser.add_argument(
        "--encoding",
        default="utf-8",
        help="Encoding of the input and output files (default: utf-8)",
    )
    parser.add_argument(
        "--preserve-tag",
        action="append",
        default=[],
        metavar="TAG",
        help="Also keep the inner whitespace of TAG verbatim (repeatable)",
    )
    parser.add_argument(
        "--no-script-minify",
        action="store_true",
        help="Leave <script> bodies untouched",
    )
    parser.add_argument(
        "--unquoted-attributes",
        action="store_true",
        help="Drop attribute quotes where HTML allows it",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Log minifier decisions to stderr",
    )
    return parser


def _read_input(path, encoding):
    if path == "-":
        return sys.stdin.read()
    with open(path, encoding=encoding) as f:
        return f.read()


def main(argv=None):
    args = build_parser().parse_args(argv)

    if args.debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s", stream=sys.stderr)

    settings = DEFAULT_SETTINGS
    if args.preserve_tag:
        settings = settings.with_preserved_tags(*args.preserve_tag)
    options = {
        "quote_attr_values": not args.unquoted_attributes,
        "debug": args.debug,
    }
    if args.no_script_minify:
        options["script_minifier"] = _keep_script

    try:
        html = _read_input(args.input, args.encoding)
        if args.output is None:
            minify_to(html, sys.stdout, settings, **options)
        else:
            with open(args.output, "w", encoding=args.encoding) as f:
                minify_to(html, f, settings, **options)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"tersehtml: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
