"""
venvkeeper
Bootstraps a Python 3 virtual environment for a host application and keeps
its packages (and pip itself) in the requested state.

VenvKeeper wires the pieces together around one ExecutionContext. The
module-level functions below operate on a shared instance built on the
process-wide context, so a resolved interpreter is visible to every later
call in the process.
"""
from __future__ import annotations  # Python 3.6+ compatibility

import threading
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import requests

from .config import Settings
from .errors import CommandError
from .execution import CommandRunner, ExecutionContext, process_context, run_shell as _run_shell
from .interpreter import InterpreterResolver, Provisioner, VenvProvisioner
from .packages import PackageManager, PackageStatus
from .pip_bootstrap import PipBootstrapManager


class VenvKeeper:
    def __init__(
        self,
        context: Optional[ExecutionContext] = None,
        settings: Optional[Settings] = None,
        provisioner: Optional[Provisioner] = None,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        self.context = context or ExecutionContext()
        self.settings = settings or Settings()
        self.runner = CommandRunner(self.context, timeout=timeout)
        self.packages = PackageManager(self.runner, self.settings)
        self.pip = PipBootstrapManager(self.runner, self.settings, session=session)
        self.resolver = InterpreterResolver(
            self.context,
            self.runner,
            self.settings,
            provisioner or VenvProvisioner(self.runner, self.packages, self.settings),
        )

    @property
    def interpreter(self) -> str:
        return self.context.interpreter

    def _python(self, python: Optional[str]) -> str:
        return str(python) if python else self.context.interpreter

    def ensure_interpreter(
        self, venv_path: Optional[Union[str, Path]] = None, packages: Sequence[str] = ()
    ) -> str:
        return self.resolver.ensure(venv_path, packages)

    def run_module(self, module_name: str, *args) -> None:
        self.runner.run_module(module_name, *args)

    def run_command(self, program, *args) -> None:
        self.runner.run(program, *args)

    def run_shell(self, command_line: str) -> Tuple[int, Optional[CommandError]]:
        return _run_shell(command_line, env=self.context.child_env(), timeout=self.runner.timeout)

    def assert_package(
        self, python: Optional[str], name: str, version: Optional[str] = None
    ) -> PackageStatus:
        return self.packages.assert_package(self._python(python), name, version)

    def install_package(self, python: Optional[str], spec: str) -> PackageStatus:
        return self.packages.install(self._python(python), spec)

    def uninstall_package(self, python: Optional[str], spec: str) -> None:
        self.packages.uninstall(self._python(python), spec)

    def list_packages(self, python: Optional[str] = None) -> bool:
        return self.packages.list_packages(self._python(python))

    def install_pip(self, python: Optional[str] = None) -> None:
        self.pip.install_pip(self._python(python))

    def uninstall_pip(self, python: Optional[str] = None) -> None:
        self.pip.uninstall_pip(self._python(python))


_default: Optional[VenvKeeper] = None
_default_lock = threading.Lock()


def default_keeper() -> VenvKeeper:
    global _default
    with _default_lock:
        if _default is None:
            _default = VenvKeeper(context=process_context())
        return _default


def ensure_interpreter(
    venv_path: Optional[Union[str, Path]] = None, packages: Sequence[str] = ()
) -> str:
    return default_keeper().ensure_interpreter(venv_path, packages)


def run_module(module_name: str, *args) -> None:
    default_keeper().run_module(module_name, *args)


def run_command(program, *args) -> None:
    default_keeper().run_command(program, *args)


def run_shell(command_line: str) -> Tuple[int, Optional[CommandError]]:
    return default_keeper().run_shell(command_line)


def assert_package(python: Optional[str], name: str, version: Optional[str] = None) -> PackageStatus:
    return default_keeper().assert_package(python, name, version)


def install_package(python: Optional[str], spec: str) -> PackageStatus:
    return default_keeper().install_package(python, spec)


def uninstall_package(python: Optional[str], spec: str) -> None:
    default_keeper().uninstall_package(python, spec)


def list_packages(python: Optional[str] = None) -> bool:
    return default_keeper().list_packages(python)


def install_pip(python: Optional[str] = None) -> None:
    default_keeper().install_pip(python)


def uninstall_pip(python: Optional[str] = None) -> None:
    default_keeper().uninstall_pip(python)
