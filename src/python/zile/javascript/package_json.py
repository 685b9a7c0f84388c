# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).
"""Reading, modelling and format-preserving writing of package.json files.

See https://nodejs.org/api/packages.html#package-entry-points and
https://docs.npmjs.com/cli/v9/configuring-npm/package-json#bin.
"""

from __future__ import annotations

import json
import logging
import os.path
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Iterator, Mapping, Union

from zile.base.exceptions import ConfigurationError
from zile.util.dirutil import read_file, safe_file_dump
from zile.util.strutil import softwrap

if TYPE_CHECKING:
    from zile.typescript.tsconfig import TSConfig

logger = logging.getLogger(__name__)

PACKAGE_JSON = "package.json"
DEFAULT_INDENT = "  "

# The root subpath, which a lone `main` field is folded into.
ROOT_EXPORT = "."


@dataclass(frozen=True)
class PathExport:
    """An `exports` value given as a bare path, e.g. `"./utils": "./src/utils.ts"`."""

    path: str


@dataclass(frozen=True)
class ObjectExport:
    """An `exports` value given as an object with a required `src` field.

    All other fields are kept in `extra`, in their original order.
    """

    src: str
    extra: Mapping[str, Any] = field(default_factory=dict)

    def to_json(self) -> dict[str, Any]:
        return {"src": self.src, **self.extra}


ExportEntry = Union[PathExport, ObjectExport]


def export_key_description(key: str) -> str:
    return f'exports["{key}"]'


def parse_export_entry(key: str, value: Any) -> ExportEntry:
    if isinstance(value, str):
        return PathExport(value)
    if isinstance(value, Mapping):
        src = value.get("src")
        if not isinstance(src, str):
            raise ConfigurationError(
                softwrap(
                    f"""
                    The `{export_key_description(key)}` field of package.json must have a `src`
                    field pointing to the source file, but got {json.dumps(value)}.
                    """
                )
            )
        return ObjectExport(src, {k: v for k, v in value.items() if k != "src"})
    raise ConfigurationError(
        softwrap(
            f"""
            The `{export_key_description(key)}` field of package.json must be a path or an
            object with a `src` field, but got {json.dumps(value)}.
            """
        )
    )


@dataclass(frozen=True)
class PackageJson:
    content: Mapping[str, Any]
    root_dir: str

    def __post_init__(self) -> None:
        if self.module not in (None, "commonjs", "module"):
            raise ConfigurationError(
                f'package.json "type" can only be one of "commonjs", "module", but was "{self.module}".'
            )

    @property
    def file(self) -> str:
        return os.path.join(self.root_dir, PACKAGE_JSON)

    @property
    def name(self) -> str | None:
        return self.content.get("name")

    @property
    def module(self) -> str | None:
        return self.content.get("type")

    @property
    def main(self) -> str | None:
        return self.content.get("main")

    @property
    def bin(self) -> str | Mapping[str, str] | None:
        return self.content.get("bin")

    @property
    def exports(self) -> Any:
        return self.content.get("exports")

    def ensure_entry_fields(self) -> None:
        if not any(self.content.get(key) for key in ("exports", "main", "bin")):
            raise ConfigurationError(
                f"{self.file} must declare at least one of the `exports`, `main` or `bin` fields."
            )

    def bin_name(self) -> str:
        """The command name used for a string-valued `bin`: the package name without its scope."""
        if not self.name:
            raise ConfigurationError(
                f"{self.file} has a string `bin` field, which requires a `name` field."
            )
        return self.name.rsplit("/", 1)[-1]

    def bin_entries(self) -> dict[str, str]:
        """The `bin` field as a command name -> path mapping, including `<name>.src` keys."""
        binaries = self.bin
        if binaries is None:
            return {}
        if isinstance(binaries, str):
            if not binaries:
                raise ConfigurationError(f"The `bin` field of {self.file} must not be empty.")
            return {self.bin_name(): binaries}
        if not isinstance(binaries, Mapping):
            raise ConfigurationError(
                f"The `bin` field of {self.file} must be a path or a mapping of command names to paths."
            )
        for key, value in binaries.items():
            if not isinstance(value, str) or not value:
                raise ConfigurationError(
                    f"The `bin.{key}` field of {self.file} must be a non-empty path."
                )
        return dict(binaries)

    def export_entries(self) -> dict[str, ExportEntry]:
        """The `exports` field as subpath -> entry, with a lone `main` folded into `"."`."""
        exports = self.exports
        if exports is None:
            if not self.main:
                return {}
            return {ROOT_EXPORT: PathExport(self.main)}
        if isinstance(exports, str):
            return {ROOT_EXPORT: PathExport(exports)}
        if not isinstance(exports, Mapping):
            raise ConfigurationError(
                f"The `exports` field of {self.file} must be a path or a mapping of subpaths."
            )
        return {key: parse_export_entry(key, value) for key, value in exports.items()}


def iter_bin_sources(entries: Mapping[str, str]) -> Iterator[tuple[str, str]]:
    """Yields (command, source path) for each command of a `bin` mapping.

    A decorated mapping carries both `<name>` (the build output) and `<name>.src` (the source);
    for those pairs only the source is yielded, keyed by the plain command name.
    """
    for key, value in entries.items():
        if key.endswith(".src"):
            yield key[: -len(".src")], value
        elif f"{key}.src" not in entries:
            yield key, value


_indent_re = re.compile(r"^([ \t]+)\S")


def detect_indent(text: str) -> str:
    """Returns the indentation of the first indented line, defaulting to two spaces.

    A line whose indentation begins with a tab is treated as tab-indented.
    """
    for line in text.splitlines():
        match = _indent_re.match(line)
        if match:
            indent = match.group(1)
            return "\t" if indent.startswith("\t") else indent
    return DEFAULT_INDENT


def serialize_package_json(content: Mapping[str, Any], original_text: str | None = None) -> str:
    if original_text is None:
        indent, trailing_newline = DEFAULT_INDENT, True
    else:
        indent, trailing_newline = detect_indent(original_text), original_text.endswith("\n")
    serialized = json.dumps(content, indent=indent, ensure_ascii=False)
    return f"{serialized}\n" if trailing_newline else serialized


@dataclass
class CachedManifest:
    raw_text: str
    package_json: PackageJson


@dataclass
class ManifestCache:
    """Per-session cache of package.json and tsconfig.json contents, keyed by directory.

    Entries are populated on first read and are never invalidated while a build runs; the raw
    manifest text is kept so that writes can reproduce the original formatting.
    """

    manifests: dict[str, CachedManifest] = field(default_factory=dict)
    tsconfigs: dict[str, TSConfig] = field(default_factory=dict)

    def raw_text(self, cwd: str) -> str | None:
        cached = self.manifests.get(os.path.abspath(cwd))
        return cached.raw_text if cached else None

    def clear(self) -> None:
        self.manifests.clear()
        self.tsconfigs.clear()


def parse_package_json(text: str, root_dir: str) -> PackageJson:
    try:
        content = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigurationError(
            f"{os.path.join(root_dir, PACKAGE_JSON)} is not valid JSON: {e}"
        ) from e
    if not isinstance(content, dict):
        raise ConfigurationError(f"{os.path.join(root_dir, PACKAGE_JSON)} must hold a JSON object.")
    return PackageJson(content=content, root_dir=root_dir)


def read_package_json(cwd: str, cache: ManifestCache) -> PackageJson:
    cwd = os.path.abspath(cwd)
    cached = cache.manifests.get(cwd)
    if cached:
        return cached.package_json
    path = os.path.join(cwd, PACKAGE_JSON)
    try:
        text = read_file(path)
    except FileNotFoundError as e:
        raise ConfigurationError(f"No {PACKAGE_JSON} found in {cwd}.") from e
    logger.debug(f"Read {path}")
    package_json = parse_package_json(text, cwd)
    cache.manifests[cwd] = CachedManifest(raw_text=text, package_json=package_json)
    return package_json


def write_package_json(
    cwd: str, content: Mapping[str, Any], cache: ManifestCache | None = None
) -> str:
    """Writes the package.json, reproducing the indentation and trailing newline of the file as it
    was first read in this session."""
    path = os.path.join(os.path.abspath(cwd), PACKAGE_JSON)
    original_text = cache.raw_text(cwd) if cache else None
    safe_file_dump(path, serialize_package_json(content, original_text))
    logger.debug(f"Wrote {path}")
    return path
