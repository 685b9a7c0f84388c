# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).
"""tsconfig.json is the project configuration of the TypeScript compiler.

zile never rewrites it; it reads the effective compiler options (with `extends` applied), checks
that the project uses `nodenext` module resolution, and derives a stricter project for the
compiler run that emits the published output.

See https://www.typescriptlang.org/tsconfig
"""

from __future__ import annotations

import json
import logging
import os
import re
from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from zile.base.exceptions import ConfigurationError
from zile.javascript.package_json import ManifestCache
from zile.util.dirutil import ancestor_dirs, read_file
from zile.util.strutil import bullet_list, softwrap

logger = logging.getLogger(__name__)

DEFAULT_PROJECT = "./tsconfig.json"
DEFAULT_OUT_DIR = "dist"
DEFAULT_TARGET = "es2021"

# Options holding paths, which are resolved relative to the file that declares them.
_PATH_OPTIONS = ("outDir", "rootDir", "declarationDir", "baseUrl")

_FORCED_COMPILER_OPTIONS: Mapping[str, Any] = {
    "composite": False,
    "declaration": True,
    "declarationMap": True,
    "emitDeclarationOnly": False,
    "esModuleInterop": True,
    "noEmit": False,
    "skipLibCheck": True,
    "sourceMap": True,
}


@dataclass(frozen=True)
class TSConfig:
    """Parsed tsconfig.json fields with `extends` substitution applied.

    Path-valued compiler options are absolute.
    """

    path: str
    compiler_options: Mapping[str, Any] = field(default_factory=dict)
    include: tuple[str, ...] | None = None
    exclude: tuple[str, ...] | None = None
    exists: bool = True

    @property
    def module(self) -> str | None:
        return self.compiler_options.get("module")

    @property
    def module_resolution(self) -> str | None:
        return self.compiler_options.get("moduleResolution")

    def out_dir(self, cwd: str) -> str:
        return self.compiler_options.get("outDir") or os.path.join(cwd, DEFAULT_OUT_DIR)

    def validate_module_resolution(self) -> None:
        """Both `module` and `moduleResolution` must be `nodenext`, so that emitted imports resolve
        the same way for the published package as they did for the compiler."""

        if not self.exists:
            raise ConfigurationError(
                softwrap(
                    f"""
                    No TypeScript project configuration was found at {self.path}. Building
                    requires one with `"module": "nodenext"` and `"moduleResolution": "nodenext"`
                    in its compilerOptions.
                    """
                )
            )

        def is_node_next(value: Any) -> bool:
            return isinstance(value, str) and value.lower() == "nodenext"

        def found(value: Any) -> str:
            return json.dumps(value) if value is not None else "undefined"

        errors = []
        if not is_node_next(self.module):
            errors.append(f'"module" must be "nodenext". Found: {found(self.module)}')
        if not is_node_next(self.module_resolution):
            errors.append(
                f'"moduleResolution" must be "nodenext". Found: {found(self.module_resolution)}'
            )
        if errors:
            raise ConfigurationError(
                f"{self.path} has invalid configuration:\n{bullet_list(errors)}"
            )

    def compiler_option_overrides(
        self, cwd: str, source_root: str | None = None
    ) -> dict[str, Any]:
        """The options a derived project sets on top of this one."""
        overrides = dict(_FORCED_COMPILER_OPTIONS)
        overrides["outDir"] = self.out_dir(cwd)
        if "target" not in self.compiler_options:
            overrides["target"] = DEFAULT_TARGET
        if source_root and "rootDir" not in self.compiler_options:
            overrides["rootDir"] = source_root
        return overrides

    def derive_compiler_options(self, cwd: str, source_root: str | None = None) -> dict[str, Any]:
        """A strict superset of the project's options that emits JS, declarations and maps."""
        return {**self.compiler_options, **self.compiler_option_overrides(cwd, source_root)}

    def derive_project(
        self, cwd: str, sources: Sequence[str], source_root: str | None = None
    ) -> dict[str, Any]:
        """A project that extends this one, compiling exactly `sources`.

        Extending (rather than copying) the on-disk project keeps its relative settings resolving
        from where they are declared.
        """
        project: dict[str, Any] = {}
        if self.exists:
            project["extends"] = self.path
        project["compilerOptions"] = self.compiler_option_overrides(cwd, source_root)
        project["include"] = list(sources)
        return project


def _clean_tsconfig_contents(content: str) -> str:
    """The tsconfig.json uses a format similar to JSON ("JSON with comments"), but there are some
    important differences:

    * tsconfig.json allows both single-line (`// comment`) and multi-line comments (`/* comment */`) to be added
    anywhere in the file.
    * Trailing commas in arrays and objects are permitted.

    TypeScript uses its own parser to read the file; in standard JSON, trailing commas or comments are not allowed.
    """
    # Alternatives, in order: double-quoted string, single-quoted string, line comment, block
    # comment, trailing comma before a closing bracket.
    pattern = r'("(?:\\.|[^"\\])*")|(\'(?:\\.|[^\'\\])*\')|(//.*?$)|(/\*.*?\*/)|,(\s*[\]}])'

    def replace(match: re.Match) -> str:
        if match.group(1) or match.group(2):
            return match.group(0)
        elif match.group(3) or match.group(4):
            return ""
        elif match.group(5):
            return match.group(5)
        return match.group(0)

    return re.sub(pattern, replace, content, flags=re.DOTALL | re.MULTILINE)


def _resolve_extends(config_path: str, extends: str) -> str | None:
    config_dir = os.path.dirname(config_path)
    if extends.startswith(".") or os.path.isabs(extends):
        candidates = [os.path.normpath(os.path.join(config_dir, extends))]
    else:
        # A package specifier, e.g. `@tsconfig/node20/tsconfig.json`.
        candidates = [
            os.path.join(directory, "node_modules", extends)
            for directory in ancestor_dirs(config_dir)
        ]
    for candidate in candidates:
        if os.path.isdir(candidate):
            candidate = os.path.join(candidate, "tsconfig.json")
        elif not os.path.exists(candidate) and not candidate.endswith(".json"):
            candidate = f"{candidate}.json"
        if os.path.isfile(candidate):
            return candidate
    return None


def _resolve_patterns(config_dir: str, patterns: Any) -> tuple[str, ...] | None:
    if patterns is None:
        return None
    return tuple(os.path.normpath(os.path.join(config_dir, pattern)) for pattern in patterns)


def parse_tsconfig(path: str, _seen: frozenset[str] = frozenset()) -> TSConfig:
    path = os.path.abspath(path)
    if path in _seen:
        raise ConfigurationError(f"{path} has a circular `extends` chain.")
    try:
        parsed = json.loads(_clean_tsconfig_contents(read_file(path)))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"{path} is not valid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise ConfigurationError(f"{path} must hold a JSON object.")

    config_dir = os.path.dirname(path)
    compiler_options = dict(parsed.get("compilerOptions") or {})
    for option in _PATH_OPTIONS:
        if isinstance(compiler_options.get(option), str):
            compiler_options[option] = os.path.normpath(
                os.path.join(config_dir, compiler_options[option])
            )
    include = _resolve_patterns(config_dir, parsed.get("include"))
    exclude = _resolve_patterns(config_dir, parsed.get("exclude"))

    extends = parsed.get("extends") or ()
    parents = []
    for extends_path in [extends] if isinstance(extends, str) else extends:
        parent_path = _resolve_extends(path, extends_path)
        if not parent_path:
            logger.warning(f"Could not locate {path}'s 'extends' at {extends_path}.")
            continue
        parents.append(parse_tsconfig(parent_path, _seen | {path}))

    merged_options: dict[str, Any] = {}
    for parent in parents:
        merged_options.update(parent.compiler_options)
        include = include if include is not None else parent.include
        exclude = exclude if exclude is not None else parent.exclude
    merged_options.update(compiler_options)
    return TSConfig(path, compiler_options=merged_options, include=include, exclude=exclude)


def read_tsconfig(cwd: str, cache: ManifestCache, project: str = DEFAULT_PROJECT) -> TSConfig:
    """Reads the project configuration for the package at `cwd`, once per session.

    A missing project file yields an empty configuration, which is enough to resolve the default
    output directory.
    """
    path = os.path.normpath(os.path.join(os.path.abspath(cwd), project))
    cached = cache.tsconfigs.get(path)
    if cached:
        return cached
    if os.path.isfile(path):
        tsconfig = parse_tsconfig(path)
        logger.debug(f"Read {path}: {tsconfig.compiler_options}")
    else:
        logger.debug(f"No project configuration at {path}")
        tsconfig = TSConfig(path, exists=False)
    cache.tsconfigs[path] = tsconfig
    return tsconfig
