# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).
from __future__ import annotations

import json
import os

import pytest

from zile.base.exceptions import ConfigurationError
from zile.javascript.package_json import ManifestCache
from zile.testutil.package_runner import PackageRunner
from zile.typescript.tsconfig import (
    TSConfig,
    _clean_tsconfig_contents,
    parse_tsconfig,
    read_tsconfig,
)


def test_clean_tsconfig_contents() -> None:
    content = """{
    // comment
    "compilerOptions": {
        "baseUrl": "./src/*", /* inline comment */
        "paths": {"@/*": ["./src/*"],},
        "outDir": "http://not-a-comment",
    },
    /*
     * multi-line comment
     */
    "include": ["src/**/*",],
}"""
    assert json.loads(_clean_tsconfig_contents(content)) == {
        "compilerOptions": {
            "baseUrl": "./src/*",
            "paths": {"@/*": ["./src/*"]},
            "outDir": "http://not-a-comment",
        },
        "include": ["src/**/*"],
    }


def test_parses_tsconfig(package_runner: PackageRunner) -> None:
    package_runner.write_json(
        "tsconfig.json",
        {"compilerOptions": {"module": "NodeNext", "outDir": "./build"}, "include": ["src"]},
    )
    tsconfig = parse_tsconfig(package_runner.path("tsconfig.json"))
    assert tsconfig == TSConfig(
        package_runner.path("tsconfig.json"),
        compiler_options={"module": "NodeNext", "outDir": package_runner.path("build")},
        include=(package_runner.path("src"),),
    )


def test_parses_extended_tsconfig_with_overrides(package_runner: PackageRunner) -> None:
    package_runner.write_json(
        "tsconfig.base.json",
        {"compilerOptions": {"module": "nodenext", "outDir": "./out", "strict": True}},
    )
    package_runner.write_json(
        "lib/tsconfig.json",
        {"extends": "../tsconfig.base.json", "compilerOptions": {"strict": False}},
    )
    tsconfig = parse_tsconfig(package_runner.path("lib/tsconfig.json"))
    assert tsconfig.compiler_options == {
        "module": "nodenext",
        "outDir": package_runner.path("out"),
        "strict": False,
    }


def test_parses_extended_tsconfig_from_directory_and_package(package_runner: PackageRunner) -> None:
    package_runner.write_json(
        "node_modules/@tsconfig/node20/tsconfig.json", {"compilerOptions": {"target": "es2022"}}
    )
    package_runner.write_json("tsconfig.json", {"compilerOptions": {"module": "nodenext"}})
    package_runner.write_json(
        "lib/tsconfig.json", {"extends": ["..", "@tsconfig/node20/tsconfig.json"]}
    )
    tsconfig = parse_tsconfig(package_runner.path("lib/tsconfig.json"))
    assert tsconfig.compiler_options == {"module": "nodenext", "target": "es2022"}


def test_parses_tsconfig_with_missing_extends_parent(package_runner: PackageRunner) -> None:
    package_runner.write_json("tsconfig.json", {"extends": "./missing.json"})
    assert parse_tsconfig(package_runner.path("tsconfig.json")).compiler_options == {}


def test_circular_extends(package_runner: PackageRunner) -> None:
    package_runner.write_json("a.json", {"extends": "./b.json"})
    package_runner.write_json("b.json", {"extends": "./a.json"})
    with pytest.raises(ConfigurationError, match="circular"):
        parse_tsconfig(package_runner.path("a.json"))


def test_read_missing_tsconfig(package_runner: PackageRunner) -> None:
    tsconfig = read_tsconfig(package_runner.root_dir, ManifestCache())
    assert not tsconfig.exists
    assert tsconfig.out_dir(package_runner.root_dir) == package_runner.path("dist")
    with pytest.raises(ConfigurationError, match="No TypeScript project configuration"):
        tsconfig.validate_module_resolution()


def test_read_custom_project(package_runner: PackageRunner) -> None:
    package_runner.write_json("config/tsconfig.build.json", {"compilerOptions": {"outDir": "../lib"}})
    tsconfig = read_tsconfig(package_runner.root_dir, ManifestCache(), "config/tsconfig.build.json")
    assert tsconfig.out_dir(package_runner.root_dir) == package_runner.path("lib")


@pytest.mark.parametrize(
    "options",
    [
        {"module": "nodenext", "moduleResolution": "nodenext"},
        {"module": "NodeNext", "moduleResolution": "NODENEXT"},
    ],
)
def test_validate_module_resolution(options: dict) -> None:
    TSConfig("/pkg/tsconfig.json", compiler_options=options).validate_module_resolution()


def test_validate_module_resolution_reports_each_violation() -> None:
    tsconfig = TSConfig("/pkg/tsconfig.json", compiler_options={"module": "esnext"})
    with pytest.raises(ConfigurationError) as e:
        tsconfig.validate_module_resolution()
    assert str(e.value) == (
        "/pkg/tsconfig.json has invalid configuration:\n"
        '  * "module" must be "nodenext". Found: "esnext"\n'
        '  * "moduleResolution" must be "nodenext". Found: undefined'
    )


def test_derive_compiler_options() -> None:
    tsconfig = TSConfig(
        "/pkg/tsconfig.json",
        compiler_options={"module": "nodenext", "declaration": False, "target": "es2017"},
    )
    assert tsconfig.derive_compiler_options("/pkg", "/pkg/src") == {
        "module": "nodenext",
        "target": "es2017",
        "composite": False,
        "declaration": True,
        "declarationMap": True,
        "emitDeclarationOnly": False,
        "esModuleInterop": True,
        "noEmit": False,
        "skipLibCheck": True,
        "sourceMap": True,
        "outDir": "/pkg/dist",
        "rootDir": "/pkg/src",
    }


def test_derive_compiler_options_keeps_explicit_root_dir() -> None:
    tsconfig = TSConfig("/pkg/tsconfig.json", compiler_options={"rootDir": "/pkg", "outDir": "/pkg/out"})
    options = tsconfig.derive_compiler_options("/pkg", "/pkg/src")
    assert options["rootDir"] == "/pkg"
    assert options["outDir"] == "/pkg/out"
    assert options["target"] == "es2021"


def test_derive_project() -> None:
    tsconfig = TSConfig("/pkg/tsconfig.json", compiler_options={"module": "nodenext"})
    project = tsconfig.derive_project("/pkg", ["/pkg/src/index.ts"], "/pkg/src")
    assert project["extends"] == "/pkg/tsconfig.json"
    assert project["include"] == ["/pkg/src/index.ts"]
    assert "module" not in project["compilerOptions"]
    assert project["compilerOptions"]["outDir"] == "/pkg/dist"
    assert "extends" not in TSConfig("/pkg/tsconfig.json", exists=False).derive_project("/pkg", [])


def test_tsconfig_on_disk_is_not_mutated(package_runner: PackageRunner) -> None:
    path = package_runner.write_json("tsconfig.json", {"compilerOptions": {"module": "nodenext"}})
    before = package_runner.read_file("tsconfig.json")
    read_tsconfig(package_runner.root_dir, ManifestCache()).derive_compiler_options(
        package_runner.root_dir
    )
    assert os.path.isfile(path)
    assert package_runner.read_file("tsconfig.json") == before
