# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

import os

import pytest

from zile.util.contextutil import temporary_dir
from zile.util.dirutil import (
    ancestor_dirs,
    fast_relpath_optional,
    is_within,
    read_file,
    relative_symlink,
    safe_file_dump,
    safe_mkdir,
    safe_rmtree,
)


def test_fast_relpath_optional() -> None:
    assert fast_relpath_optional("a/b/c", "a/b") == "c"
    assert fast_relpath_optional("a/b/c", "a/b/") == "c"
    assert fast_relpath_optional("a/b/c", "") == "a/b/c"
    assert fast_relpath_optional("a/bc", "a/b") is None
    assert fast_relpath_optional("a", "a/b") is None


def test_is_within() -> None:
    assert is_within("/pkg/dist/index.js", "/pkg/dist")
    assert is_within("/pkg/dist", "/pkg/dist/")
    assert is_within("/pkg/./dist/../dist/a.js", "/pkg/dist")
    assert not is_within("/pkg/distribution/a.js", "/pkg/dist")
    assert not is_within("/pkg", "/pkg/dist")


def test_ancestor_dirs() -> None:
    assert list(ancestor_dirs("/a/b/c")) == ["/a/b/c", "/a/b", "/a", "/"]


class TestDirutilTest:
    def test_safe_mkdir_clean(self) -> None:
        with temporary_dir() as tmpdir:
            safe_file_dump(os.path.join(tmpdir, "out", "stale.js"), "")
            safe_mkdir(os.path.join(tmpdir, "out"), clean=True)
            assert os.listdir(os.path.join(tmpdir, "out")) == []

    def test_safe_rmtree_missing(self) -> None:
        with temporary_dir() as tmpdir:
            safe_rmtree(os.path.join(tmpdir, "missing"))

    def test_safe_rmtree_symlink_keeps_target(self) -> None:
        with temporary_dir() as tmpdir:
            target = os.path.join(tmpdir, "target")
            safe_file_dump(os.path.join(target, "keep"), "")
            link = os.path.join(tmpdir, "link")
            os.symlink(target, link)
            safe_rmtree(link)
            assert not os.path.lexists(link)
            assert os.path.exists(os.path.join(target, "keep"))

    def test_safe_file_dump_preserves_newlines(self) -> None:
        with temporary_dir() as tmpdir:
            path = os.path.join(tmpdir, "nested", "file.txt")
            safe_file_dump(path, "a\r\nb")
            with open(path, "rb") as f:
                assert f.read() == b"a\r\nb"

    def test_relative_symlink(self) -> None:
        with temporary_dir() as tmpdir_1:
            source = os.path.join(tmpdir_1, "src", "index.ts")
            safe_file_dump(source, "export {}")
            link = os.path.join(tmpdir_1, "dist", "index.js")
            relative_symlink(source, link)
            assert os.path.islink(link)
            assert os.readlink(link) == os.path.join("..", "src", "index.ts")
            assert read_file(link) == "export {}"

    def test_relative_symlink_replaces_existing_link(self) -> None:
        with temporary_dir() as tmpdir_1:
            first = os.path.join(tmpdir_1, "first.ts")
            second = os.path.join(tmpdir_1, "second.ts")
            safe_file_dump(first, "first")
            safe_file_dump(second, "second")
            link = os.path.join(tmpdir_1, "dist", "index.js")
            relative_symlink(first, link)
            relative_symlink(second, link)
            assert read_file(link) == "second"

    def test_relative_symlink_bad_input(self) -> None:
        with temporary_dir() as tmpdir_1:
            source = os.path.join(tmpdir_1, "source")
            with pytest.raises(ValueError, match=r"must be absolute"):
                relative_symlink("source", os.path.join(tmpdir_1, "link"))
            with pytest.raises(ValueError, match=r"must be absolute"):
                relative_symlink(source, "link")
            with pytest.raises(ValueError, match=r"identical to source"):
                relative_symlink(source, source)
            with pytest.raises(ValueError, match=r"existing directory"):
                relative_symlink(source, tmpdir_1)
