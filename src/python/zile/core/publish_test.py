# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

import os

from zile.core.publish import BACKUP_PACKAGE_JSON, post_publish, prepare_publish
from zile.core.session import BuildOptions
from zile.testutil.package_runner import PackageRunner


def test_prepare_and_post_publish(package_runner: PackageRunner) -> None:
    package_runner.install_fake_compiler()
    package_runner.write_package(
        {
            "scripts": {"build": "zile"},
            "devDependencies": {"typescript": "^5.0.0"},
            "[!start-pkg]": "",
            "name": "pkg",
            "version": "1.0.0",
            "main": "./index.ts",
        },
        {"index.ts": "export {}"},
    )
    prepare_publish(BuildOptions(cwd=package_runner.root_dir))

    published = package_runner.read_json("package.json")
    assert list(published)[:3] == ["name", "version", "main"]
    assert "scripts" not in published
    assert "[!start-pkg]" not in published
    assert published["main"] == "./dist/index.js"

    backup = package_runner.read_json(BACKUP_PACKAGE_JSON)
    assert backup["scripts"] == {"build": "zile"}
    assert backup["main"] == "./dist/index.js"

    assert post_publish(package_runner.root_dir)
    assert package_runner.read_json("package.json") == backup
    assert not os.path.exists(package_runner.path(BACKUP_PACKAGE_JSON))
    assert not post_publish(package_runner.root_dir)


def test_prepare_publish_without_marker(package_runner: PackageRunner) -> None:
    package_runner.install_fake_compiler()
    package_runner.write_package({"name": "pkg", "main": "./index.ts"}, {"index.ts": ""})
    prepare_publish(BuildOptions(cwd=package_runner.root_dir))
    assert package_runner.read_json("package.json") == package_runner.read_json(
        BACKUP_PACKAGE_JSON
    )
    assert package_runner.read_json("package.json")["name"] == "pkg"
