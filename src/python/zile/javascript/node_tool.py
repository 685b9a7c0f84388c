# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from typing import Mapping, Sequence

from zile.util.dirutil import ancestor_dirs
from zile.util.strutil import safe_shlex_join

logger = logging.getLogger(__name__)


def find_node_binary(name: str, cwd: str) -> str | None:
    """Locates an executable installed by a node package manager.

    Looks in `node_modules/.bin` of `cwd` and each of its ancestors (so that workspace packages
    find tools hoisted to the workspace root), then falls back to the `PATH`.
    """
    for directory in ancestor_dirs(cwd):
        candidate = os.path.join(directory, "node_modules", ".bin", name)
        if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
            return candidate
    return shutil.which(name)


@dataclass(frozen=True)
class ProcessResult:
    exit_code: int
    output: str


def run_node_tool(
    argv: Sequence[str],
    *,
    cwd: str,
    env: Mapping[str, str] | None = None,
    timeout: float | None = None,
) -> ProcessResult:
    """Runs a tool to completion, capturing its stdout and stderr interleaved.

    :raises subprocess.TimeoutExpired if `timeout` elapses first; the process is killed.
    """
    logger.debug(f"Running `{safe_shlex_join(argv)}` in {cwd}")
    process = subprocess.run(
        list(argv),
        cwd=cwd,
        env={**os.environ, **env} if env else None,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        encoding="utf-8",
        errors="replace",
        timeout=timeout,
    )
    return ProcessResult(exit_code=process.returncode, output=process.stdout or "")
