"""
venvkeeper: keep a Python 3 venv and its packages in the state a host
application asks for, by driving pip through subprocesses.

Copyright (c) 2025  The venvkeeper authors

This file is part of `venvkeeper`.

venvkeeper is free software: you can redistribute it and/or modify
it under the terms of the GNU Affero General Public License as published by
the Free Software Foundation, version 3 of the License.

venvkeeper is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the License for more details.

You should have received a copy of the GNU Affero General Public License
along with venvkeeper. If not, see <https://www.gnu.org/licenses/>.
"""
from __future__ import annotations  # Python 3.6+ compatibility

from importlib.metadata import PackageNotFoundError, metadata, version
from pathlib import Path

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib

from .core import (
    VenvKeeper,
    assert_package,
    default_keeper,
    ensure_interpreter,
    install_package,
    install_pip,
    list_packages,
    run_command,
    run_module,
    run_shell,
    uninstall_package,
    uninstall_pip,
)
from .errors import VenvKeeperError
from .execution import ExecutionContext, process_context
from .packages import PackageState, PackageStatus
from .versions import PackageSpec

__version__ = "0.0.0"  # fallback default
__dependencies__ = {}

_pkg_name = "venvkeeper"

try:
    __version__ = version(_pkg_name)
    requires = metadata(_pkg_name).get_all("Requires-Dist") or []
    __dependencies__ = {dep.split()[0]: dep for dep in requires}
except PackageNotFoundError:
    # Likely running from source → try pyproject.toml
    pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject_path.exists():
        with pyproject_path.open("rb") as f:
            pyproject_data = tomllib.load(f)
        __version__ = pyproject_data["project"]["version"]
        __dependencies__ = {
            dep.split()[0]: dep for dep in pyproject_data["project"].get("dependencies", [])
        }

__all__ = [
    "VenvKeeper",
    "VenvKeeperError",
    "ExecutionContext",
    "PackageSpec",
    "PackageState",
    "PackageStatus",
    "assert_package",
    "default_keeper",
    "ensure_interpreter",
    "install_package",
    "install_pip",
    "list_packages",
    "process_context",
    "run_command",
    "run_module",
    "run_shell",
    "uninstall_package",
    "uninstall_pip",
]
