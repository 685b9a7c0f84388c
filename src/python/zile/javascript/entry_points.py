# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

import logging
import os.path
import re
from dataclasses import dataclass
from typing import Iterable, Sequence

from zile.javascript.assets import asset_source_path
from zile.javascript.package_json import ObjectExport, PackageJson, iter_bin_sources
from zile.util.dirutil import is_within

logger = logging.getLogger(__name__)

_SOURCE_FILE_RE = re.compile(r"\.(m|c)?[jt]sx?$")
_DECLARATION_FILE_RE = re.compile(r"\.d\.(m|c)?ts$")


def is_declaration_file(path: str) -> bool:
    return _DECLARATION_FILE_RE.search(path) is not None


def is_source_file(path: str) -> bool:
    """True for files the compiler emits output for.

    Declaration files match the code-file pattern, but the compiler never emits them, so they are
    treated like any other asset.
    """
    return _SOURCE_FILE_RE.search(path) is not None and not is_declaration_file(path)


@dataclass(frozen=True)
class EntryPoints:
    """Absolute paths of the files a package.json declares, split by how they are built."""

    sources: tuple[str, ...]
    assets: tuple[str, ...]

    @classmethod
    def classify(cls, paths: Iterable[str]) -> EntryPoints:
        unique = tuple(dict.fromkeys(paths))
        return cls(
            sources=tuple(path for path in unique if is_source_file(path)),
            assets=tuple(path for path in unique if not is_source_file(path)),
        )


def declared_entry_paths(package_json: PackageJson) -> list[str]:
    """The manifest-relative paths named by `bin`, then `exports` (or `main`), in manifest order."""
    package_json.ensure_entry_fields()
    paths = [path for _, path in iter_bin_sources(package_json.bin_entries())]
    for entry in package_json.export_entries().values():
        paths.append(entry.src if isinstance(entry, ObjectExport) else entry.path)
    return paths


def get_entry_points(package_json: PackageJson, out_dir: str | None = None) -> EntryPoints:
    """Resolves the package's entry points to absolute paths and classifies them.

    Paths inside `out_dir` are output of a previous decoration rather than inputs. Compiled output
    is skipped; a copied asset is traced back to the file it was copied from, so that it is copied
    again after the output directory is cleared.
    """
    cwd = package_json.root_dir
    resolved = []
    for path in declared_entry_paths(package_json):
        absolute = os.path.normpath(os.path.join(cwd, path))
        if out_dir and is_within(absolute, out_dir):
            source = asset_source_path(absolute, cwd, out_dir)
            if not is_source_file(absolute) and os.path.isfile(source):
                logger.debug(f"{path} is a copy of the asset {source}")
                resolved.append(source)
            else:
                logger.debug(f"Skipping {path}, which is inside the output directory {out_dir}")
            continue
        resolved.append(absolute)
    entry_points = EntryPoints.classify(resolved)
    logger.debug(f"Resolved entry points for {cwd}: {entry_points}")
    return entry_points


def infer_source_root(sources: Sequence[str], cwd: str) -> str:
    """Returns the deepest directory containing every source, defaulting to `<cwd>/src`.

    The result is only used to strip a common prefix from output paths; it is not required to
    exist.
    """
    if not sources:
        return os.path.join(cwd, "src")

    split_dirs = [os.path.dirname(source).split(os.sep) for source in sources]
    common: list[str] = []
    for segments in zip(*split_dirs):
        if any(segment != segments[0] for segment in segments[1:]):
            break
        common.append(segments[0])
    return os.sep.join(common) or os.sep
