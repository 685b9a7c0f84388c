# Copyright 2026 Pants project contributors (see CONTRIBUTORS.md).
# Licensed under the Apache License, Version 2.0 (see LICENSE).

from __future__ import annotations

import json
import os
import stat
import sys
from typing import Any, Mapping

from zile.javascript.package_json import PACKAGE_JSON
from zile.util.dirutil import read_file, safe_file_dump, safe_mkdir_for

NODE_NEXT_TSCONFIG = {"compilerOptions": {"module": "nodenext", "moduleResolution": "nodenext"}}

# Stands in for `tsc`/`tsgo`: reads the derived project passed with `--project` and emits a `.js`
# and a `.d.ts` file per included source, mirroring the layout below `rootDir`.
_FAKE_COMPILER = """\
#!{python}
import json, os, sys

project_path = sys.argv[sys.argv.index("--project") + 1]
with open(project_path) as f:
    project = json.load(f)
with open({calls!r}, "a") as f:
    f.write(json.dumps(dict(argv=sys.argv[1:], cwd=os.getcwd(), project=project)) + "\\n")

sys.stdout.write({output!r})
if {exit_code!r}:
    sys.exit({exit_code!r})

options = project["compilerOptions"]
root_dir = options.get("rootDir", os.getcwd())
for source in project["include"]:
    stem = os.path.splitext(os.path.relpath(source, root_dir))[0]
    for ext in (".js", ".d.ts"):
        out = os.path.join(options["outDir"], stem + ext)
        os.makedirs(os.path.dirname(out), exist_ok=True)
        with open(out, "w") as f:
            f.write("// compiled from " + source + "\\n")
"""

# Stands in for `attw`/`publint`.
_FAKE_CHECKER = """\
#!{python}
import json, os, sys

with open({calls!r}, "a") as f:
    record = dict(argv=sys.argv[1:], cwd=os.getcwd(), no_color=os.environ.get("NO_COLOR"))
    f.write(json.dumps(record) + "\\n")
sys.stdout.write({output!r})
sys.exit({exit_code!r})
"""


class PackageRunner:
    """Lays out a node package in a scratch directory, with fake node tools on hand."""

    def __init__(self, root_dir: str) -> None:
        self.root_dir = os.path.realpath(root_dir)

    def path(self, *relpath: str) -> str:
        return os.path.join(self.root_dir, *relpath)

    def write_files(self, files: Mapping[str, str | bytes]) -> tuple[str, ...]:
        """Write the files beneath the root dir.

        returns: A tuple of absolute file paths created.
        """
        paths = []
        for relpath, content in files.items():
            path = self.path(relpath)
            if isinstance(content, bytes):
                safe_mkdir_for(path)
                with open(path, "wb") as f:
                    f.write(content)
            else:
                safe_file_dump(path, content)
            paths.append(path)
        return tuple(paths)

    def write_json(self, relpath: str, content: Any, indent: str | int = 2) -> str:
        (path,) = self.write_files({relpath: json.dumps(content, indent=indent) + "\n"})
        return path

    def write_package(
        self,
        package_json: Mapping[str, Any],
        files: Mapping[str, str | bytes] | None = None,
        *,
        directory: str = "",
        tsconfig: Mapping[str, Any] | None = NODE_NEXT_TSCONFIG,
    ) -> str:
        """Writes a package.json (and by default a nodenext tsconfig.json) plus `files`.

        returns: The absolute package directory.
        """
        self.write_json(os.path.join(directory, PACKAGE_JSON), package_json)
        if tsconfig is not None:
            self.write_json(os.path.join(directory, "tsconfig.json"), tsconfig)
        self.write_files({os.path.join(directory, k): v for k, v in (files or {}).items()})
        return self.path(directory) if directory else self.root_dir

    def read_file(self, relpath: str) -> str:
        return read_file(self.path(relpath))

    def read_json(self, relpath: str) -> Any:
        return json.loads(self.read_file(relpath))

    def _install(self, name: str, script: str) -> str:
        path = self.path("node_modules", ".bin", name)
        safe_file_dump(path, script)
        os.chmod(path, os.stat(path).st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    def _calls_file(self, name: str) -> str:
        return self.path("node_modules", ".bin", f"{name}.calls")

    def install_fake_compiler(
        self, name: str = "tsc", *, exit_code: int = 0, output: str = ""
    ) -> str:
        return self._install(
            name,
            _FAKE_COMPILER.format(
                python=sys.executable,
                calls=self._calls_file(name),
                output=output,
                exit_code=exit_code,
            ),
        )

    def install_fake_checker(self, name: str, *, exit_code: int = 0, output: str = "") -> str:
        return self._install(
            name,
            _FAKE_CHECKER.format(
                python=sys.executable,
                calls=self._calls_file(name),
                output=output,
                exit_code=exit_code,
            ),
        )

    def calls(self, name: str) -> list[dict[str, Any]]:
        """The recorded invocations of a fake tool, oldest first."""
        path = self._calls_file(name)
        if not os.path.exists(path):
            return []
        return [json.loads(line) for line in read_file(path).splitlines()]
