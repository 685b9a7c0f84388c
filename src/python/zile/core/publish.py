# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).
"""Swapping the package.json around `npm publish`.

A package.json may hold development-only fields (scripts, devDependencies, workspace settings)
ahead of a `"[!start-pkg]"` marker key. `prepare_publish` builds the package, keeps a copy of the
full manifest in `package.tmp.json` and strips everything up to and including the marker;
`post_publish` puts the full manifest back.
"""

from __future__ import annotations

import logging
import os
import shutil

from zile.core.session import BuildOptions, BuildResult, BuildSession
from zile.javascript.package_json import PACKAGE_JSON, parse_package_json, write_package_json
from zile.util.dirutil import read_file

logger = logging.getLogger(__name__)

START_PKG_MARKER = "[!start-pkg]"
BACKUP_PACKAGE_JSON = "package.tmp.json"


def prepare_publish(options: BuildOptions) -> BuildResult:
    cwd = os.path.abspath(options.cwd)
    with BuildSession() as session:
        result = session.build(options)

        package_json_path = os.path.join(cwd, PACKAGE_JSON)
        shutil.copyfile(package_json_path, os.path.join(cwd, BACKUP_PACKAGE_JSON))

        content = dict(parse_package_json(read_file(package_json_path), cwd).content)
        keys = list(content)
        if START_PKG_MARKER in keys:
            for key in keys[: keys.index(START_PKG_MARKER) + 1]:
                del content[key]
        else:
            logger.debug(f"No {START_PKG_MARKER!r} marker in {package_json_path}")
        write_package_json(cwd, content, session.cache)
    logger.info(f"Prepared {package_json_path} for publishing")
    return result


def post_publish(cwd: str) -> bool:
    """Restores the package.json saved by `prepare_publish`.

    :returns: whether a saved package.json was found.
    """
    backup = os.path.join(cwd, BACKUP_PACKAGE_JSON)
    if not os.path.exists(backup):
        return False
    os.replace(backup, os.path.join(cwd, PACKAGE_JSON))
    logger.info(f"Restored {os.path.join(cwd, PACKAGE_JSON)}")
    return True
