from __future__ import annotations  # Python 3.6+ compatibility

import os
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence, Union

from .config import Settings
from .errors import (
    CommandError,
    InterpreterValidationError,
    ResolutionError,
    VenvKeeperError,
)
from .execution import CommandRunner, ExecutionContext
from .i18n import _
from .lockmanager import VenvLockManager
from .log import get_logger
from .packages import PackageManager
from .versions import PackageSpec, is_python3_banner

logger = get_logger(__name__)

# (venv_path, packages) -> interpreter path
Provisioner = Callable[[Path, Sequence[str]], str]


def venv_python_path(venv_path: Path) -> Path:
    """Where a venv keeps its interpreter on this platform."""
    venv_path = Path(venv_path)
    if os.name == "nt":
        return venv_path / "Scripts" / "python.exe"
    bin_dir = venv_path / "bin"
    for name in ("python3", "python"):
        candidate = bin_dir / name
        if candidate.exists():
            return candidate
    return bin_dir / "python3"


def python_banner(runner: CommandRunner, python: str) -> str:
    """Captured ``python --version`` output, or "" when it cannot be run."""
    outcome = runner.output(python, "--version")
    if not outcome.ok:
        return ""
    # very old interpreters print the banner on stderr
    return (outcome.stdout or outcome.stderr).strip()


def is_python3(runner: CommandRunner, python: str) -> bool:
    return is_python3_banner(python_banner(runner, python))


def unique_specs(packages: Iterable[str]) -> List[str]:
    """Drop repeated packages (by canonical name), keeping the first spelling."""
    seen = set()
    specs = []
    for spec in packages:
        key = PackageSpec.parse(spec).key
        if key in seen:
            continue
        seen.add(key)
        specs.append(spec)
    return specs


class VenvProvisioner:
    """
    Default venv provisioning: reuse a venv whose interpreter is Python 3,
    otherwise run ``<base python> -m venv <dir>``; then install the requested
    packages into it.
    """

    def __init__(self, runner: CommandRunner, package_manager: PackageManager, settings: Settings):
        self.runner = runner
        self.package_manager = package_manager
        self.settings = settings

    def __call__(self, venv_path: Path, packages: Sequence[str]) -> str:
        python = venv_python_path(venv_path)
        if python.exists() and is_python3(self.runner, str(python)):
            logger.info("python3 venv already exists", venv=str(venv_path))
        else:
            base_python = self.settings.base_python
            logger.info("creating python3 venv", venv=str(venv_path), base=base_python)
            try:
                self.runner.run(base_python, "-m", "venv", str(venv_path))
            except CommandError as e:
                raise ResolutionError(_("create python3 venv failed: {}").format(e)) from e
            python = venv_python_path(venv_path)
            if not python.exists():
                raise ResolutionError(
                    _("python3 not found in created venv: {}").format(venv_path)
                )

        for spec in unique_specs(packages):
            self.package_manager.install(str(python), spec)
        return str(python)


class InterpreterResolver:
    """
    Makes sure a Python 3 interpreter exists inside a venv and records it as
    the context's active interpreter. Nothing is recorded on failure.
    """

    def __init__(
        self,
        context: ExecutionContext,
        runner: CommandRunner,
        settings: Settings,
        provisioner: Provisioner,
    ):
        self.context = context
        self.runner = runner
        self.settings = settings
        self.provisioner = provisioner

    def ensure(
        self,
        venv_path: Optional[Union[str, Path]] = None,
        packages: Sequence[str] = (),
    ) -> str:
        # priority: specified > configured > ~/.venvkeeper/venv
        if not venv_path:
            venv_path = self.settings.default_venv_path()
        venv_path = Path(venv_path).expanduser()

        locks = VenvLockManager.for_venv(venv_path)
        try:
            with locks.acquire_lock(venv_path.name or "venv", timeout=self.settings.lock_timeout):
                python = self.provisioner(venv_path, list(packages))
        except ResolutionError:
            raise
        except (VenvKeeperError, TimeoutError, OSError) as e:
            raise ResolutionError(_("prepare python3 venv failed: {}").format(e)) from e

        banner = python_banner(self.runner, python)
        if not is_python3_banner(banner):
            raise InterpreterValidationError(python, banner)

        self.context.interpreter = python
        logger.info("set python3 executable path", Python3Executable=python)
        return python
