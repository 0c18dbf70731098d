"""
Package lifecycle: assert / install / uninstall / list, driven purely by
``python -m pip`` subprocesses and exit codes.

Install and uninstall are idempotent by checking first, and both define
success by re-checking afterwards rather than trusting pip's exit status.
"""
from __future__ import annotations  # Python 3.6+ compatibility

import enum
from dataclasses import dataclass
from typing import Optional

from .config import Settings
from .errors import (
    CommandError,
    PackageNotFoundError,
    PackageStillInstalledError,
    PipCommandError,
    PipUnavailableError,
    VenvKeeperError,
    VersionMismatchError,
)
from .execution import CommandRunner
from .i18n import _
from .log import get_logger
from .versions import VERSION_SEPARATOR, PackageSpec, versions_match

logger = get_logger(__name__)

# the module name is passed as argv[1], never interpolated into code
IMPORT_PROBE = "import importlib, sys; m = importlib.import_module(sys.argv[1]); print(m.__version__)"


class PackageState(enum.Enum):
    ABSENT = "absent"
    PRESENT = "present"  # importable, requested version matches
    PRESENT_UNCHECKED = "present-unchecked"  # importable, no version requested
    VERSION_MISMATCH = "version-mismatch"


@dataclass(frozen=True)
class PackageStatus:
    name: str
    state: PackageState
    installed_version: Optional[str] = None
    requested_version: Optional[str] = None

    @property
    def is_present(self) -> bool:
        return self.state is not PackageState.ABSENT

    @property
    def satisfied(self) -> bool:
        return self.state in (PackageState.PRESENT, PackageState.PRESENT_UNCHECKED)

    def raise_for_state(self) -> "PackageStatus":
        if self.state is PackageState.ABSENT:
            raise PackageNotFoundError(self.name)
        if self.state is PackageState.VERSION_MISMATCH:
            raise VersionMismatchError(self.name, self.installed_version, self.requested_version)
        return self


def _log_ready(status: PackageStatus):
    if status.requested_version:
        logger.info("python package is ready", name=status.name, version=status.requested_version)
    else:
        logger.info("python package is ready", name=status.name)


class PackageManager:
    def __init__(self, runner: CommandRunner, settings: Optional[Settings] = None):
        self.runner = runner
        self.settings = settings or Settings()

    # --- read-only checks -----------------------------------------------------

    def probe(self, python: str, name: str, version: Optional[str] = None) -> PackageStatus:
        """Import ``name`` in ``python`` and classify the result. Never raises for state."""
        outcome = self.runner.output(python, "-c", IMPORT_PROBE, name)
        if not outcome.ok:
            return PackageStatus(name, PackageState.ABSENT, requested_version=version or None)

        installed = outcome.stdout.strip()
        if not version:
            return PackageStatus(name, PackageState.PRESENT_UNCHECKED, installed)
        if versions_match(installed, version):
            return PackageStatus(name, PackageState.PRESENT, installed, version)
        return PackageStatus(name, PackageState.VERSION_MISMATCH, installed, version)

    def assert_package(self, python: str, name: str, version: Optional[str] = None) -> PackageStatus:
        """Raise PackageNotFoundError / VersionMismatchError unless satisfied."""
        status = self.probe(python, name, version).raise_for_state()
        _log_ready(status)
        return status

    def ensure_pip(self, python: str):
        if not self.runner.succeeds(python, "-m", "pip", "--version"):
            logger.warning("pip is not available", python3=python)
            raise PipUnavailableError(python)

    # --- mutations ------------------------------------------------------------

    def install(self, python: str, spec: str) -> PackageStatus:
        """
        Install ``name`` or ``name==version`` and return the verified status.

        Already satisfied -> no pip call at all. Otherwise pip must be usable,
        ``pip install --upgrade`` runs against the configured index, and the
        package must assert cleanly afterwards for the install to count.
        """
        pkg = PackageSpec.parse(spec)

        status = self.probe(python, pkg.name, pkg.version)
        if status.satisfied:
            _log_ready(status)
            return status

        self.ensure_pip(python)

        logger.info("installing python package", pkgName=pkg.name, pkgVersion=pkg.version)
        index_url = self.settings.index_url
        try:
            self.runner.run(
                python,
                "-m",
                "pip",
                "install",
                str(pkg),
                "--upgrade",
                "--index-url",
                index_url,
                "--quiet",
                "--disable-pip-version-check",
            )
        except CommandError as e:
            raise PipCommandError(_("pip install package failed"), e) from e

        return self.assert_package(python, pkg.name, pkg.version)

    def uninstall(self, python: str, spec: str) -> None:
        """Uninstall by name (any ``==version`` suffix is ignored)."""
        pkg = PackageSpec.parse(spec.partition(VERSION_SEPARATOR)[0])

        if not self.probe(python, pkg.name).is_present:
            logger.info("python package is not installed, no need to uninstall", pkgName=pkg.name)
            return

        self.ensure_pip(python)

        logger.info("uninstalling python package", pkgName=pkg.name)
        try:
            self.runner.run(
                python,
                "-m",
                "pip",
                "uninstall",
                pkg.name,
                "-y",
                "--quiet",
                "--disable-pip-version-check",
            )
        except CommandError as e:
            raise PipCommandError(_("pip uninstall package failed"), e) from e

        if self.probe(python, pkg.name).is_present:
            raise PackageStillInstalledError(pkg.name)

        logger.info("python package uninstalled successfully", pkgName=pkg.name)

    def list_packages(self, python: str) -> bool:
        """Stream ``pip list``. Best effort: failures are logged, not raised."""
        try:
            self.runner.run(python, "-m", "pip", "list")
        except VenvKeeperError as e:
            logger.error("failed to list python packages", name=python, error=str(e))
            return False
        return True
