# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

import logging
import os.path
import shutil
from typing import Iterable

from zile.base.exceptions import AssetCopyError
from zile.util.dirutil import safe_mkdir_for
from zile.util.strutil import pluralize

logger = logging.getLogger(__name__)


def asset_output_path(asset: str, cwd: str, out_dir: str) -> str:
    """Assets keep their path relative to the package directory, beneath the output directory."""
    return os.path.join(out_dir, os.path.relpath(asset, cwd))


def asset_source_path(output: str, cwd: str, out_dir: str) -> str:
    """The inverse of `asset_output_path`: where a copied asset was copied from."""
    return os.path.join(cwd, os.path.relpath(output, out_dir))


def copy_assets(assets: Iterable[str], *, cwd: str, out_dir: str) -> tuple[str, ...]:
    """Copies each asset byte-for-byte into the output directory.

    :returns: the paths of the copies.
    :raises AssetCopyError naming the first asset that could not be copied.
    """
    copied = []
    for asset in assets:
        destination = asset_output_path(asset, cwd, out_dir)
        try:
            safe_mkdir_for(destination)
            shutil.copyfile(asset, destination)
        except OSError as e:
            raise AssetCopyError(asset, e.strerror or str(e)) from e
        logger.debug(f"Copied {asset} to {destination}")
        copied.append(destination)
    if copied:
        logger.info(f"Copied {pluralize(len(copied), 'asset')} to {out_dir}")
    return tuple(copied)
