# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

import pytest

from zile.testutil.package_runner import PackageRunner


@pytest.fixture
def package_runner(tmp_path) -> PackageRunner:
    return PackageRunner(str(tmp_path))
