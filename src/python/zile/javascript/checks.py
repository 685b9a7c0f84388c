# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

import logging
import os.path
from dataclasses import dataclass
from typing import Iterator

from zile.base.exceptions import CheckerError, ValidationError
from zile.javascript.node_tool import find_node_binary, run_node_tool
from zile.javascript.package_json import ObjectExport, PackageJson, export_key_description
from zile.util.dirutil import is_within
from zile.util.strutil import softwrap

logger = logging.getLogger(__name__)

# `attw` is the CLI of @arethetypeswrong/cli, which checks that each export resolves to types.
ATTW = "attw"
ATTW_ARGS = ("--pack", ".", "--format", "table-flipped", "--profile", "esm-only")
PUBLINT = "publint"
PUBLINT_ARGS = ("--strict",)


def declared_paths(package_json: PackageJson) -> Iterator[tuple[str, str]]:
    """Yields (manifest key, path) for every file the package.json declares."""
    for command, path in package_json.bin_entries().items():
        yield f"bin.{command}", path
    if package_json.main:
        yield "main", package_json.main
    if package_json.exports is not None:
        for key, entry in package_json.export_entries().items():
            path = entry.src if isinstance(entry, ObjectExport) else entry.path
            yield export_key_description(key), path


def check_package_json(package_json: PackageJson, out_dir: str) -> None:
    """Checks that every declared file exists, before anything is built.

    Paths inside the output directory are exempt: they are only created by the build.
    """
    package_json.ensure_entry_fields()
    cwd = package_json.root_dir
    for key, path in declared_paths(package_json):
        absolute = os.path.join(cwd, path)
        if is_within(absolute, out_dir):
            continue
        if not os.path.isfile(absolute):
            raise ValidationError(
                softwrap(
                    f"""
                    The `{key}` field of {package_json.file} points to {path}, which does not
                    exist.
                    """
                )
            )


@dataclass(frozen=True)
class CheckOutput:
    attw: str
    publint: str


def _run_checker(name: str, args: tuple[str, ...], cwd: str) -> str:
    binary = find_node_binary(name, cwd)
    if not binary:
        raise CheckerError(name, None, f"Could not find the `{name}` executable.")
    logger.info(f"Running {name} in {cwd}")
    result = run_node_tool([binary, *args], cwd=cwd, env={"NO_COLOR": "1"})
    if result.exit_code != 0:
        raise CheckerError(name, result.exit_code, result.output)
    return result.output


def check_output(cwd: str) -> CheckOutput:
    """Runs the export-correctness and package-lint checkers against the built package."""
    return CheckOutput(
        attw=_run_checker(ATTW, ATTW_ARGS, cwd),
        publint=_run_checker(PUBLINT, PUBLINT_ARGS, cwd),
    )
