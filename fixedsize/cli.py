"""Command line entry point: rewrite annotated classes in Python source files."""

from __future__ import annotations

import argparse
import dataclasses
import json
import logging
import sys
from typing import List, Optional

from strong_typing.serialization import object_to_json

from .core import ArgumentError, TransformError, UnmatchedFieldError
from .options import TransformOptions
from .transform import collect_configurations, read_source, transform_file, transform_source

STDIN = "-"


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="fixedsize",
        description="Replace variable-length string fields with fixed-capacity string types in annotated classes.",
    )
    ap.add_argument(
        "files",
        nargs="*",
        metavar="FILE",
        help="Python source file to transform (default: read standard input)",
    )
    ap.add_argument(
        "-i",
        "--in-place",
        action="store_true",
        help="Write results back to the source files instead of standard output",
    )
    ap.add_argument(
        "--annotation",
        metavar="NAME",
        help="Name of the class decorator that carries field sizes (default: fixed)",
    )
    ap.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Fail if a size is given for a name that is not a string field",
    )
    ap.add_argument(
        "--keep-annotation",
        action="store_true",
        default=None,
        help="Leave the annotation decorator in place",
    )
    ap.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the parsed annotation arguments as JSON instead of transforming",
    )
    ap.add_argument(
        "-v", "--verbose", action="store_true", help="Print debug messages"
    )
    return ap


def _options(args: argparse.Namespace) -> TransformOptions:
    "Settings from the environment, overridden by command line flags."

    overrides = {}
    if args.annotation is not None:
        overrides["annotation"] = args.annotation
    if args.strict is not None:
        overrides["strict"] = args.strict
    if args.keep_annotation is not None:
        overrides["keep_annotation"] = args.keep_annotation
    return dataclasses.replace(TransformOptions(), **overrides)


def _dump_config(source: str, options: TransformOptions, filename: str) -> None:
    configurations = {
        name: object_to_json(configuration)
        for name, configuration in collect_configurations(source, options, filename)
    }
    print(json.dumps({filename: configurations}, indent=4))


def _process(name: str, options: TransformOptions, args: argparse.Namespace) -> None:
    if name == STDIN:
        source = sys.stdin.read()
        filename = "<stdin>"
    else:
        source = None
        filename = name

    if args.dump_config:
        if source is None:
            source, _ = read_source(name)
        _dump_config(source, options, filename)
    elif source is not None:
        sys.stdout.write(transform_source(source, options, filename))
    elif args.in_place:
        transform_file(name, options, in_place=True)
    else:
        sys.stdout.write(transform_file(name, options))


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Returns:
        0 on success, 1 if any input could not be transformed.
    """

    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    options = _options(args)
    status = 0
    for name in args.files or [STDIN]:
        try:
            _process(name, options, args)
        except (TransformError, ArgumentError, UnmatchedFieldError, UnicodeDecodeError) as e:
            print(f"{name}: error: {e}", file=sys.stderr)
            status = 1
        except SyntaxError as e:
            print(f"{name}:{e.lineno}: error: {e.msg}", file=sys.stderr)
            status = 1
        except OSError as e:
            print(f"{name}: error: {e.strerror}", file=sys.stderr)
            status = 1

    return status
