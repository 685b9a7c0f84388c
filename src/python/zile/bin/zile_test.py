# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

import os

import pytest

from zile.bin.zile import create_parser, main
from zile.core.publish import BACKUP_PACKAGE_JSON
from zile.testutil.package_runner import PackageRunner
from zile.typescript.tsconfig import DEFAULT_PROJECT
from zile.util.logging import LogLevel


@pytest.fixture
def package(package_runner: PackageRunner) -> PackageRunner:
    package_runner.write_package({"name": "pkg", "main": "./index.ts"}, {"index.ts": "export {}"})
    package_runner.install_fake_compiler()
    return package_runner


def test_parser_defaults() -> None:
    args = create_parser().parse_args([])
    assert args.command is None
    assert args.cwd is None
    assert args.project == DEFAULT_PROJECT
    assert args.tsgo is False
    assert args.timeout is None
    assert args.includes is None
    assert args.level == LogLevel.INFO


def test_parser_options_before_and_after_subcommand() -> None:
    parser = create_parser()
    args = parser.parse_args(["--cwd", "pkg", "--level", "debug", "dev", "--tsgo"])
    assert args.command == "dev"
    assert args.cwd == "pkg"
    assert args.tsgo is True
    assert args.level == LogLevel.DEBUG

    args = parser.parse_args(
        ["build", "--includes", "packages/*", "--includes", "!packages/b", "--timeout", "30"]
    )
    assert args.includes == ["packages/*", "!packages/b"]
    assert args.timeout == 30.0


def test_build(package: PackageRunner, capsys: pytest.CaptureFixture) -> None:
    assert main(["--cwd", package.root_dir]) == 0
    assert package.read_json("package.json")["main"] == "./dist/index.js"
    assert os.path.isfile(package.path("dist/index.js"))
    out = capsys.readouterr().out
    assert f"Building package(s) in {package.root_dir}" in out
    assert "Building completed successfully" in out


def test_dev(package: PackageRunner) -> None:
    assert main(["dev", "--cwd", package.root_dir]) == 0
    assert os.path.islink(package.path("dist/index.js"))
    assert package.calls("tsc") == []


def test_build_with_includes(package_runner: PackageRunner) -> None:
    package_runner.install_fake_compiler()
    package_runner.write_package(
        {"exports": "./index.ts"}, {"index.ts": ""}, directory="packages/a"
    )
    assert main(["build", "--cwd", package_runner.root_dir, "--includes", "packages/*"]) == 0
    assert package_runner.read_json("packages/a/package.json")["main"] == "./dist/index.js"


def test_error(package_runner: PackageRunner, capsys: pytest.CaptureFixture) -> None:
    assert main(["--cwd", package_runner.root_dir]) == 1
    assert "No package.json found" in capsys.readouterr().err


def test_compiler_error(package: PackageRunner, capsys: pytest.CaptureFixture) -> None:
    package.install_fake_compiler(exit_code=2, output="index.ts(1,1): error TS1005\n")
    assert main(["--cwd", package.root_dir]) == 1
    err = capsys.readouterr().err
    assert "tsc exited with code 2" in err
    assert "error TS1005" in err


def test_check(package: PackageRunner, capsys: pytest.CaptureFixture) -> None:
    package.install_fake_checker("attw", output="No problems found")
    package.install_fake_checker("publint", output="All good!")
    assert main(["check", "--cwd", package.root_dir]) == 0
    out = capsys.readouterr().out
    assert "No problems found" in out
    assert "All good!" in out


def test_prepare_and_post_publish(package: PackageRunner) -> None:
    assert main(["prepare-publish", "--cwd", package.root_dir]) == 0
    assert os.path.isfile(package.path(BACKUP_PACKAGE_JSON))
    assert main(["post-publish", "--cwd", package.root_dir]) == 0
    assert not os.path.exists(package.path(BACKUP_PACKAGE_JSON))
    assert package.read_json("package.json")["main"] == "./dist/index.js"


def test_includes_before_subcommand() -> None:
    args = create_parser().parse_args(["--includes", "packages/*", "dev"])
    assert args.command == "dev"
    assert args.includes == ["packages/*"]


def test_dev_with_includes(package_runner: PackageRunner) -> None:
    package_runner.install_fake_compiler()
    package_runner.write_package(
        {"exports": "./index.ts"}, {"index.ts": ""}, directory="packages/a"
    )
    cwd = package_runner.root_dir
    assert main(["--cwd", cwd, "--includes", "packages/*", "dev"]) == 0
    assert os.path.islink(package_runner.path("packages/a/dist/index.js"))
    assert package_runner.calls("tsc") == []
