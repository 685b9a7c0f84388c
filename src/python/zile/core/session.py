# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Mapping

from zile.base.exceptions import ConfigurationError
from zile.javascript.assets import copy_assets
from zile.javascript.checks import check_package_json
from zile.javascript.decorate import SymlinkResult, decorate_package_json
from zile.javascript.entry_points import EntryPoints, get_entry_points, infer_source_root
from zile.javascript.package_json import (
    ManifestCache,
    PackageJson,
    read_package_json,
    write_package_json,
)
from zile.typescript.compiler import transpile
from zile.typescript.tsconfig import DEFAULT_PROJECT, TSConfig, read_tsconfig
from zile.util.dirutil import is_within, safe_mkdir
from zile.util.strutil import softwrap

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BuildOptions:
    """Options for building (or linking) a single package.

    :param cwd: The package directory, holding its package.json.
    :param project: Path of the TypeScript project file, relative to `cwd`.
    :param link: Symlink output paths to the sources instead of compiling.
    :param use_alternate_compiler: Compile with `tsgo` rather than `tsc`.
    :param timeout: Seconds to wait for the compiler before giving up. Unbounded by default.
    """

    cwd: str = field(default_factory=os.getcwd)
    project: str = DEFAULT_PROJECT
    link: bool = False
    use_alternate_compiler: bool = False
    timeout: float | None = None


@dataclass(frozen=True)
class BuildResult:
    package_json: dict[str, Any]
    package_json_path: str
    compiler_options: Mapping[str, Any]
    out_dir: str
    source_root: str
    entry_points: EntryPoints
    symlinks: tuple[SymlinkResult, ...] = ()


class BuildSession:
    """Builds packages, sharing one manifest cache for the lifetime of the session.

    Use as a context manager to scope the cache to a block:

        with BuildSession() as session:
            session.build(BuildOptions(cwd="packages/foo"))
    """

    def __init__(self, cache: ManifestCache | None = None) -> None:
        self.cache = cache if cache is not None else ManifestCache()

    def __enter__(self) -> BuildSession:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.cache.clear()

    def read(self, cwd: str, project: str = DEFAULT_PROJECT) -> tuple[PackageJson, TSConfig]:
        return read_package_json(cwd, self.cache), read_tsconfig(cwd, self.cache, project)

    def build(self, options: BuildOptions) -> BuildResult:
        cwd = os.path.abspath(options.cwd)
        package_json, tsconfig = self.read(cwd, options.project)

        out_dir = tsconfig.out_dir(cwd)
        if is_within(cwd, out_dir):
            raise ConfigurationError(
                softwrap(
                    f"""
                    The output directory {out_dir} of {tsconfig.path} contains the package at
                    {cwd}. It is cleared on every build, so it must be a subdirectory such as
                    `./dist`.
                    """
                )
            )

        entry_points = get_entry_points(package_json, out_dir)
        check_package_json(package_json, out_dir)
        source_root = infer_source_root(entry_points.sources, cwd)
        logger.debug(f"Source root of {cwd} is {source_root}")

        if options.link:
            compiler_options = tsconfig.derive_compiler_options(cwd, source_root)
            logger.info(f"Linking {package_json.name or cwd} into {out_dir}")
            safe_mkdir(out_dir, clean=True)
        else:
            compiler_options = transpile(
                tsconfig,
                cwd=cwd,
                sources=entry_points.sources,
                source_root=source_root,
                use_alternate_compiler=options.use_alternate_compiler,
                timeout=options.timeout,
            ).compiler_options
            safe_mkdir(out_dir)

        copy_assets(entry_points.assets, cwd=cwd, out_dir=out_dir)
        decorated = decorate_package_json(
            package_json, out_dir=out_dir, source_root=source_root, link=options.link
        )
        path = write_package_json(cwd, decorated.content, self.cache)
        logger.info(f"Wrote {path}")

        return BuildResult(
            package_json=decorated.content,
            package_json_path=path,
            compiler_options=compiler_options,
            out_dir=out_dir,
            source_root=source_root,
            entry_points=entry_points,
            symlinks=decorated.symlinks,
        )


def build(options: BuildOptions) -> BuildResult:
    """Builds a single package in a fresh session."""
    with BuildSession() as session:
        return session.build(options)
