# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Sequence

from colors import cyan, green, red

from zile.base.exceptions import ZileException
from zile.core.packages import build_packages
from zile.core.publish import post_publish, prepare_publish
from zile.core.session import BuildOptions, build
from zile.javascript.checks import check_output
from zile.typescript.tsconfig import DEFAULT_PROJECT
from zile.util.logging import LogLevel
from zile.version import VERSION


def _add_cwd_option(parser: argparse.ArgumentParser, default: str | None) -> None:
    parser.add_argument(
        "--cwd",
        default=default,
        help="The package directory. Defaults to the current directory.",
    )


def _add_build_options(parser: argparse.ArgumentParser, *, suppress: bool = False) -> None:
    """Adds the build options.

    Subcommands repeat the top-level options with suppressed defaults, so that
    `zile --cwd pkg build` and `zile build --cwd pkg` mean the same thing.
    """

    def default(value):
        return argparse.SUPPRESS if suppress else value

    _add_cwd_option(parser, default(None))
    parser.add_argument(
        "--includes",
        action="append",
        default=default(None),
        metavar="PATTERN",
        help=(
            "Build every package whose package.json matches this gitignore-style pattern, "
            "relative to --cwd. Repeat to add patterns; prefix a pattern with ! to exclude."
        ),
    )
    parser.add_argument(
        "--project",
        default=default(DEFAULT_PROJECT),
        help="Path to the tsconfig.json file, relative to the package directory.",
    )
    parser.add_argument(
        "--tsgo",
        action="store_true",
        default=default(False),
        help="Compile with tsgo instead of tsc.",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=default(None),
        help="Seconds to wait for the compiler before failing the build.",
    )


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="zile",
        description="Build TypeScript packages for publishing, or link them for development.",
    )
    parser.add_argument("--version", action="version", version=VERSION)
    parser.add_argument(
        "--level",
        type=LogLevel,
        choices=list(LogLevel),
        default=LogLevel.INFO,
        help="The log level.",
    )
    _add_build_options(parser)

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    _add_build_options(
        subparsers.add_parser("build", help="Build a package (the default)."), suppress=True
    )
    _add_build_options(
        subparsers.add_parser("dev", help="Link output paths to the sources for development."),
        suppress=True,
    )
    _add_cwd_option(
        subparsers.add_parser("check", help="Check a built package with attw and publint."),
        argparse.SUPPRESS,
    )
    _add_build_options(
        subparsers.add_parser(
            "prepare-publish",
            help="Build, then strip development fields from the package.json before publishing.",
        ),
        suppress=True,
    )
    _add_cwd_option(
        subparsers.add_parser(
            "post-publish", help="Restore the package.json saved by prepare-publish."
        ),
        argparse.SUPPRESS,
    )
    return parser


def _build_options(args: argparse.Namespace, *, link: bool = False) -> BuildOptions:
    return BuildOptions(
        cwd=os.path.abspath(args.cwd or os.getcwd()),
        project=args.project,
        link=link,
        use_alternate_compiler=args.tsgo,
        timeout=args.timeout,
    )


def run_build(args: argparse.Namespace, *, link: bool) -> None:
    options = _build_options(args, link=link)
    action = "Linking" if link else "Building"
    print(cyan(f"→ {action} package(s) in {options.cwd}"))
    if args.includes:
        build_packages(options, args.includes)
    else:
        result = build(options)
        for failure in (r for r in result.symlinks if not r.created):
            print(red(f"  could not link {failure.link_path}: {failure.reason}"), file=sys.stderr)
    print(green(f"✔ {action} completed successfully"))


def run_check(args: argparse.Namespace) -> None:
    cwd = os.path.abspath(args.cwd or os.getcwd())
    print(cyan(f"→ Checking package in {cwd}"))
    output = check_output(cwd)
    print(output.attw)
    print(output.publint)
    print(green("✔ Check completed successfully"))


def main(argv: Sequence[str] | None = None) -> int:
    args = create_parser().parse_args(argv)
    logging.basicConfig(level=args.level.level, format="%(levelname)s %(name)s: %(message)s")
    command = args.command or "build"
    try:
        if command in ("build", "dev"):
            run_build(args, link=command == "dev")
        elif command == "check":
            run_check(args)
        elif command == "prepare-publish":
            options = _build_options(args)
            print(cyan(f"→ Preparing package at {options.cwd}"))
            prepare_publish(options)
            print(green(f"✔ Package at {options.cwd} prepared successfully"))
        elif command == "post-publish":
            cwd = os.path.abspath(args.cwd or os.getcwd())
            if post_publish(cwd):
                print(green(f"✔ Restored package.json at {cwd}"))
    except ZileException as e:
        print(red(f"✘ {e}"), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
