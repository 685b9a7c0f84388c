# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

import logging
import os
from dataclasses import replace
from typing import Sequence

from pathspec import PathSpec
from pathspec.patterns.gitwildmatch import GitWildMatchPattern

from zile.core.session import BuildOptions, BuildResult, BuildSession
from zile.javascript.package_json import PACKAGE_JSON
from zile.util.strutil import pluralize

logger = logging.getLogger(__name__)

DEFAULT_INCLUDES = ("**", "!**/node_modules/**")


def _split_patterns(patterns: Sequence[str]) -> tuple[list[str], list[str]]:
    includes: list[str] = []
    excludes: list[str] = []
    for pattern in patterns:
        if pattern.startswith("!"):
            excludes.append(pattern[1:])
        elif os.path.basename(pattern) == PACKAGE_JSON:
            includes.append(pattern)
        else:
            includes.append(f"{pattern.rstrip('/')}/{PACKAGE_JSON}")
    return includes, excludes


def find_packages(cwd: str, includes: Sequence[str] = DEFAULT_INCLUDES) -> list[str]:
    """Finds the directories beneath `cwd` that hold a package.json matching the patterns.

    Patterns use gitignore syntax relative to `cwd`; a leading `!` excludes. A pattern naming a
    directory matches the package.json inside it.
    """
    cwd = os.path.abspath(cwd)
    include_patterns, exclude_patterns = _split_patterns(includes)
    include_spec = PathSpec.from_lines(GitWildMatchPattern, include_patterns)
    exclude_spec = PathSpec.from_lines(GitWildMatchPattern, exclude_patterns)

    packages = set()
    for root, dirs, files in os.walk(cwd):
        relative_root = os.path.relpath(root, cwd)
        dirs[:] = sorted(
            d
            for d in dirs
            if not exclude_spec.match_file(os.path.normpath(os.path.join(relative_root, d)) + "/")
        )
        if PACKAGE_JSON not in files:
            continue
        relative_file = os.path.normpath(os.path.join(relative_root, PACKAGE_JSON))
        if include_spec.match_file(relative_file) and not exclude_spec.match_file(relative_file):
            packages.add(root)
    return sorted(packages)


def build_packages(
    options: BuildOptions, includes: Sequence[str] = DEFAULT_INCLUDES
) -> list[BuildResult]:
    """Builds every package found beneath `options.cwd`, one after another."""
    packages = find_packages(options.cwd, includes)
    logger.info(f"Found {pluralize(len(packages), 'package')} in {options.cwd}")
    with BuildSession() as session:
        return [session.build(replace(options, cwd=package)) for package in packages]
