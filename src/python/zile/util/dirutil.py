# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

import errno
import os
import shutil
from pathlib import Path
from typing import Iterator


def fast_relpath_optional(path: str, start: str) -> str | None:
    """A prefix-based relpath, with no normalization or support for returning `..`.

    Returns None if `start` is not a directory-aware prefix of `path`.
    """
    if len(start) == 0:
        return path

    pref_end = len(start) - 1 if start[-1] == "/" else len(start)
    if pref_end > len(path):
        return None
    elif path[:pref_end] == start[:pref_end] and (len(path) == pref_end or path[pref_end] == "/"):
        return path[pref_end + 1 :]
    return None


def is_within(path: str, directory: str) -> bool:
    """True if the normalized `path` is `directory` or lies beneath it."""
    return (
        fast_relpath_optional(os.path.normpath(path), os.path.normpath(directory)) is not None
    )


def safe_mkdir(directory: str | Path, clean: bool = False) -> None:
    """Ensure a directory is present.

    If it's not there, create it.  If it is, no-op. If clean is True, ensure the dir is empty.
    """
    if clean:
        safe_rmtree(directory)
    os.makedirs(directory, exist_ok=True)


def safe_mkdir_for(path: str | Path) -> None:
    """Ensure that the parent directory for a file is present."""
    dirname = os.path.dirname(path)
    if dirname:
        safe_mkdir(dirname)


def safe_rmtree(directory: str | Path) -> None:
    """Delete a directory if it's present. If it's not present, no-op.

    Note that if the directory argument is a symlink, only the symlink will
    be deleted.
    """
    if os.path.islink(directory):
        safe_delete(directory)
    else:
        shutil.rmtree(directory, ignore_errors=True)


def safe_delete(filename: str | Path) -> None:
    """Delete a file safely.

    If it's not present, no-op.
    """
    try:
        os.unlink(filename)
    except OSError as e:
        if e.errno != errno.ENOENT:
            raise


def read_file(filename: str | Path) -> str:
    with open(filename, encoding="utf-8") as f:
        return f.read()


def safe_file_dump(filename: str | Path, payload: str) -> None:
    """Write a string to a file, creating its parent directories first."""
    safe_mkdir_for(filename)
    with open(filename, "w", encoding="utf-8", newline="") as f:
        f.write(payload)


def relative_symlink(source_path: str, link_path: str) -> None:
    """Create a symlink at link_path pointing to relative source.

    An existing file or symlink at `link_path` is replaced.

    :param source_path: Absolute path to source file
    :param link_path: Absolute path to intended symlink
    :raises ValueError if source_path or link_path are not unique, absolute paths, or if
        link_path is an existing directory
    :raises OSError on failure to create the link
    """
    if not os.path.isabs(source_path):
        raise ValueError(f"Path for source:{source_path} must be absolute")
    if not os.path.isabs(link_path):
        raise ValueError(f"Path for link:{link_path} must be absolute")
    if source_path == link_path:
        raise ValueError(f"Path for link is identical to source:{source_path}")
    if os.path.isdir(link_path) and not os.path.islink(link_path):
        raise ValueError(f"Path for link would overwrite an existing directory: {link_path}")
    if os.path.lexists(link_path):
        os.unlink(link_path)
    safe_mkdir_for(link_path)
    os.symlink(os.path.relpath(source_path, os.path.dirname(link_path)), link_path)


def ancestor_dirs(directory: str) -> Iterator[str]:
    """Given an absolute directory like '/a/b/c', yield '/a/b/c', '/a/b', '/a' and '/'."""
    prev = None
    directory = os.path.abspath(directory)
    while directory != prev:
        yield directory
        prev = directory
        directory = os.path.dirname(directory)
