# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass
from typing import Any, Mapping, Sequence

from zile.base.exceptions import CompilerError
from zile.javascript.node_tool import find_node_binary, run_node_tool
from zile.typescript.tsconfig import TSConfig
from zile.util.contextutil import temporary_file_path
from zile.util.dirutil import safe_file_dump, safe_rmtree
from zile.util.strutil import pluralize, softwrap

logger = logging.getLogger(__name__)

TSC = "tsc"
# The native TypeScript compiler preview, from `@typescript/native-preview`.
TSGO = "tsgo"

DERIVED_PROJECT_PREFIX = ".zile-tsconfig."


@dataclass(frozen=True)
class TranspileResult:
    compiler_options: Mapping[str, Any]
    out_dir: str


def compiler_name(use_alternate_compiler: bool) -> str:
    return TSGO if use_alternate_compiler else TSC


def transpile(
    tsconfig: TSConfig,
    *,
    cwd: str,
    sources: Sequence[str],
    source_root: str | None = None,
    use_alternate_compiler: bool = False,
    timeout: float | None = None,
) -> TranspileResult:
    """Compiles `sources` into the project's output directory, which is cleared first.

    The on-disk project configuration is left untouched: the compiler runs against a temporary
    project that extends it, and that file is removed however the run ends.
    """
    tsconfig.validate_module_resolution()

    name = compiler_name(use_alternate_compiler)
    compiler = find_node_binary(name, cwd)
    if not compiler:
        raise CompilerError(
            softwrap(
                f"""
                Could not find the `{name}` executable in any `node_modules/.bin` above {cwd}
                or on the PATH. Install it as a devDependency of the package.
                """
            )
        )

    compiler_options = tsconfig.derive_compiler_options(cwd, source_root)
    out_dir = compiler_options["outDir"]
    logger.debug(f"Clearing output directory {out_dir}")
    safe_rmtree(out_dir)

    if not sources:
        logger.info(f"No sources to compile in {cwd}")
        return TranspileResult(compiler_options=compiler_options, out_dir=out_dir)

    project = tsconfig.derive_project(cwd, sources, source_root)
    # The compiler resolves `typeRoots` and automatic `types` from the directory of the project
    # file, so it must live in the package for `node_modules/@types` to be found.
    with temporary_file_path(
        root_dir=cwd, prefix=DERIVED_PROJECT_PREFIX, suffix=".json"
    ) as project_path:
        safe_file_dump(project_path, json.dumps(project, indent=2))
        logger.info(f"Compiling {pluralize(len(sources), 'source')} with {name}")
        try:
            result = run_node_tool([compiler, "--project", project_path], cwd=cwd, timeout=timeout)
        except subprocess.TimeoutExpired as e:
            raise CompilerError(f"{name} did not finish within {timeout} seconds.") from e

    if result.exit_code != 0:
        raise CompilerError(
            f"{name} exited with code {result.exit_code}\n{result.output}".rstrip(),
            exit_code=result.exit_code,
            output=result.output,
        )
    if result.output.strip():
        logger.debug(result.output)
    return TranspileResult(compiler_options=compiler_options, out_dir=out_dir)
