# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations


class ZileException(Exception):
    """Base exception type for zile."""


class ConfigurationError(ZileException):
    """Indicates a malformed or missing field in a package.json or tsconfig.json.

    :API: public
    """


class ValidationError(ZileException):
    """Indicates that a file declared by the package.json does not exist."""


class CompilerError(ZileException):
    """Indicates that the TypeScript compiler could not be run, or exited unsuccessfully."""

    def __init__(self, msg: str, *, exit_code: int | None = None, output: str = "") -> None:
        super().__init__(msg)
        self.exit_code = exit_code
        self.output = output


class CheckerError(ZileException):
    """Indicates that an external package checker exited unsuccessfully."""

    def __init__(self, tool: str, exit_code: int | None, output: str) -> None:
        # An exit code of None means the tool could not be started, and `output` says why.
        msg = output if exit_code is None else f"{tool} exited with code {exit_code}\n{output}"
        super().__init__(msg.rstrip())
        self.tool = tool
        self.exit_code = exit_code
        self.output = output


class AssetCopyError(ZileException):
    """Indicates a failure copying an asset file into the output directory."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Failed to copy asset {path}: {reason}")
        self.path = path
