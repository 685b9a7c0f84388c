# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).
"""Rewrites a source-oriented package.json into its published shape.

Entry points authored against sources

    "exports": {"./utils": "./src/utils.ts"}

become objects that keep the source and point consumers at the build output

    "exports": {
      "./utils": {
        "src": "./src/utils.ts",
        "types": "./dist/utils.d.ts",
        "default": "./dist/utils.js"
      }
    }

In link mode the output paths are symlinks back to the sources instead of compiled files, so a
package can be consumed from its sources during development.
"""

from __future__ import annotations

import logging
import os.path
import re
from dataclasses import dataclass
from typing import Any, Mapping

from zile.javascript.assets import asset_output_path
from zile.javascript.entry_points import is_source_file
from zile.javascript.package_json import (
    ROOT_EXPORT,
    ExportEntry,
    ObjectExport,
    PackageJson,
    PathExport,
    iter_bin_sources,
)
from zile.util.dirutil import fast_relpath_optional, is_within, relative_symlink
from zile.util.logging import LogLevel

logger = logging.getLogger(__name__)

_SOURCE_EXTENSION_RE = re.compile(r"\.(m|c)?[jt]sx?$")
# Also strips a `.d` declaration infix.
_STRIPPED_EXTENSION_RE = re.compile(r"(\.d)?\.(m|c)?[jt]sx?$")


@dataclass(frozen=True)
class SymlinkResult:
    link_path: str
    source_path: str
    created: bool
    reason: str | None = None


@dataclass(frozen=True)
class DecoratedPackageJson:
    content: dict[str, Any]
    symlinks: tuple[SymlinkResult, ...] = ()

    @property
    def failed_symlinks(self) -> tuple[SymlinkResult, ...]:
        return tuple(result for result in self.symlinks if not result.created)


def output_extensions(source: str) -> tuple[str, str]:
    """The (JavaScript, declaration) extensions the compiler emits for a source file.

    `.mts`/`.mjs` sources emit `.mjs` and `.d.mts`; `.cts`/`.cjs` sources emit `.cjs` and `.d.cts`.
    """
    match = _SOURCE_EXTENSION_RE.search(source)
    infix = match.group(1) if match and match.group(1) else ""
    return f".{infix}js", f".d.{infix}ts"


class PackageJsonDecorator:
    def __init__(
        self, package_json: PackageJson, *, out_dir: str, source_root: str, link: bool = False
    ) -> None:
        self.package_json = package_json
        self.cwd = package_json.root_dir
        self.out_dir = out_dir
        self.link = link
        self.relative_out_dir = os.path.relpath(out_dir, self.cwd)
        self.relative_source_dir = os.path.relpath(source_root, self.cwd)
        self._symlinks: list[SymlinkResult] = []

    def out_file(self, name: str, ext: str) -> str:
        """Maps a source path to its output path: the source root prefix and the extension are
        replaced by the output directory and `ext`."""
        relative = os.path.normpath(name)
        if self.relative_source_dir != os.curdir:
            stripped = fast_relpath_optional(relative, self.relative_source_dir)
            if stripped is not None:
                relative = stripped
        stem = _STRIPPED_EXTENSION_RE.sub("", relative)
        return f"./{os.path.join(self.relative_out_dir, stem + ext)}"

    def is_output(self, path: str) -> bool:
        return is_within(os.path.join(self.cwd, path), self.out_dir)

    def asset_out_file(self, path: str) -> str:
        copied = asset_output_path(os.path.join(self.cwd, path), self.cwd, self.out_dir)
        return f"./{os.path.relpath(copied, self.cwd)}"

    def _symlink(self, source: str, output: str) -> None:
        source_path = os.path.normpath(os.path.join(self.cwd, source))
        link_path = os.path.normpath(os.path.join(self.cwd, output))
        try:
            relative_symlink(source_path, link_path)
        except (OSError, ValueError) as e:
            logger.warning(f"Could not link {output} to {source}: {e}")
            self._symlinks.append(
                SymlinkResult(link_path, source_path, created=False, reason=str(e))
            )
            return
        LogLevel.TRACE.log(logger, f"Linked {output} to {source}")
        self._symlinks.append(SymlinkResult(link_path, source_path, created=True))

    def decorate_bin(self) -> dict[str, str]:
        decorated: dict[str, str] = {}
        for command, src in iter_bin_sources(self.package_json.bin_entries()):
            if self.is_output(src):
                decorated[command] = src
                continue
            if is_source_file(src):
                out = self.out_file(src, output_extensions(src)[0])
                if self.link:
                    self._symlink(src, out)
            else:
                out = src if self.link else self.asset_out_file(src)
            LogLevel.TRACE.log(logger, f"bin.{command}: {src} -> {out}")
            decorated[command] = out
            decorated[f"{command}.src"] = src
        return decorated

    def decorate_export(self, key: str, entry: ExportEntry) -> Any:
        original = entry.path if isinstance(entry, PathExport) else entry.to_json()
        src = entry.path if isinstance(entry, PathExport) else entry.src
        if self.is_output(src):
            return original

        if not is_source_file(src):
            if self.link:
                return original
            out = self.asset_out_file(src)
            LogLevel.TRACE.log(logger, f'exports["{key}"]: asset {src} -> {out}')
            if isinstance(entry, PathExport):
                return out
            return {**entry.to_json(), "default": out}

        js_ext, types_ext = output_extensions(src)
        types, default = self.out_file(src, types_ext), self.out_file(src, js_ext)
        if self.link:
            self._symlink(src, default)
            self._symlink(src, types)
        LogLevel.TRACE.log(logger, f'exports["{key}"]: {src} -> {default}, {types}')
        extra: Mapping[str, Any] = (
            {k: v for k, v in entry.extra.items() if k not in ("types", "default")}
            if isinstance(entry, ObjectExport)
            else {}
        )
        return {"src": src, **extra, "types": types, "default": default}

    def decorate(self) -> DecoratedPackageJson:
        self.package_json.ensure_entry_fields()
        content = dict(self.package_json.content)

        binaries = self.package_json.bin
        if isinstance(binaries, str) and self.is_output(binaries):
            LogLevel.TRACE.log(logger, f"bin: {binaries} is already build output")
        elif binaries is not None:
            content["bin"] = self.decorate_bin()

        exports = {
            key: self.decorate_export(key, entry)
            for key, entry in self.package_json.export_entries().items()
        }
        if exports:
            content["exports"] = exports

        content.setdefault("type", "module")
        content.setdefault("sideEffects", False)

        # The top-level fields always mirror the root export, so that tools which predate
        # `exports` resolve the same files.
        root = exports.get(ROOT_EXPORT)
        if isinstance(root, Mapping):
            if "default" in root:
                content["main"] = root["default"]
                content["module"] = root["default"]
            if "types" in root:
                content["types"] = root["types"]
        elif isinstance(root, str) and is_source_file(root):
            content["main"] = root
            content["module"] = root

        return DecoratedPackageJson(content=content, symlinks=tuple(self._symlinks))


def decorate_package_json(
    package_json: PackageJson, *, out_dir: str, source_root: str, link: bool = False
) -> DecoratedPackageJson:
    return PackageJsonDecorator(
        package_json, out_dir=out_dir, source_root=source_root, link=link
    ).decorate()
