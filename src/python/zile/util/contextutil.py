# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

import os
import shutil
import tempfile
from contextlib import contextmanager
from typing import Iterator

from zile.util.dirutil import safe_delete


@contextmanager
def temporary_dir(
    root_dir: str | None = None,
    cleanup: bool = True,
    suffix: str | None = None,
    prefix: str | None = tempfile.template,
) -> Iterator[str]:
    """A with-context that creates a temporary directory.

    :param root_dir: The parent directory to create the temporary directory.
    :param cleanup: Whether or not to clean up the temporary directory.
    """
    path = tempfile.mkdtemp(dir=root_dir, suffix=suffix, prefix=prefix)
    try:
        yield os.path.realpath(path)
    finally:
        if cleanup:
            shutil.rmtree(path, ignore_errors=True)


@contextmanager
def temporary_file_path(
    root_dir: str | None = None,
    cleanup: bool = True,
    prefix: str | None = None,
    suffix: str | None = None,
) -> Iterator[str]:
    """A with-context that creates an empty temporary file and returns its path.

    The file is deleted on exit from the context, whether or not the body raised.

    :param root_dir: The parent directory to create the temporary file.
    :param cleanup: Whether or not to clean up the temporary file.
    :param suffix: If specified, the file name will end with that suffix.
    """
    fd, path = tempfile.mkstemp(suffix=suffix, prefix=prefix, dir=root_dir)
    os.close(fd)
    try:
        yield path
    finally:
        if cleanup:
            safe_delete(path)

