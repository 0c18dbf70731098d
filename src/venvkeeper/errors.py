"""
Exception hierarchy for venvkeeper.

Every error raised by the library derives from VenvKeeperError so callers can
catch one type at the CLI boundary and still branch on the specific failure
(e.g. PackageNotFoundError vs VersionMismatchError when deciding to install).
"""
from __future__ import annotations  # Python 3.6+ compatibility

from typing import Optional


class VenvKeeperError(Exception):
    """Base class for all venvkeeper errors."""


# --- resolution / interpreter -------------------------------------------------


class ResolutionError(VenvKeeperError):
    """The home directory or the virtual environment could not be resolved."""


class InterpreterValidationError(VenvKeeperError):
    """A candidate executable is not a Python 3 interpreter."""

    def __init__(self, python: str, banner: str = ""):
        self.python = python
        self.banner = banner
        message = f"{python} is not a Python 3 interpreter"
        if banner:
            message += f" (reported {banner!r})"
        super().__init__(message)


# --- package assertions -------------------------------------------------------


class PackageAssertionError(VenvKeeperError):
    """Base for the read-only package checks; used as a control-flow signal."""

    def __init__(self, message: str, name: str):
        super().__init__(message)
        self.name = name


class PackageNotFoundError(PackageAssertionError):
    def __init__(self, name: str):
        super().__init__(f"python package {name} not found", name)


class VersionMismatchError(PackageAssertionError):
    def __init__(self, name: str, installed: str, requested: str):
        super().__init__(
            f"python package {name} version {installed} not matched, please upgrade to {requested}",
            name,
        )
        self.installed = installed
        self.requested = requested


class InvalidPackageSpecError(VenvKeeperError, ValueError):
    """A package string is not of the form ``name`` or ``name==version``."""


# --- tools --------------------------------------------------------------------


class PipUnavailableError(VenvKeeperError):
    """``python -m pip --version`` failed for the interpreter."""

    def __init__(self, python: str):
        super().__init__(f"pip is not available for {python}")
        self.python = python


class PipBootstrapError(VenvKeeperError):
    """Downloading or running the pip bootstrap script failed."""


# --- subprocesses -------------------------------------------------------------


class SearchPathError(VenvKeeperError):
    """The updated search path could not be written into the environment."""


class CommandError(VenvKeeperError):
    """Base for failures of a spawned process."""

    def __init__(self, message: str, command: str = "", exit_code: int = 1, stderr: str = ""):
        super().__init__(message)
        self.command = command
        self.exit_code = exit_code
        self.stderr = stderr


class StartFailedError(CommandError):
    def __init__(self, command: str, reason: BaseException):
        super().__init__(f"start running command failed: {reason}", command, 1)


class CommandFailedError(CommandError):
    def __init__(self, command: str, exit_code: int, stderr: str = ""):
        message = f"command exited with status {exit_code}"
        if stderr:
            message = f"{stderr.strip()}: {message}"
        super().__init__(message, command, exit_code, stderr)


class ExitStatusUnknownError(CommandError):
    def __init__(self, command: str, returncode: Optional[int] = None):
        detail = f" (terminated by signal {-returncode})" if returncode else ""
        super().__init__(f"get command exit code failed{detail}", command, 1)


class CommandTimeoutError(CommandError):
    def __init__(self, command: str, timeout: float):
        super().__init__(f"command timed out after {timeout}s", command, 124)
        self.timeout = timeout


class PipCommandError(CommandError):
    """A ``pip install`` / ``pip uninstall`` run exited unsuccessfully."""

    def __init__(self, message: str, cause: CommandError):
        super().__init__(f"{message}: {cause}", cause.command, cause.exit_code, cause.stderr)


# --- post-conditions ----------------------------------------------------------


class PostConditionError(VenvKeeperError):
    """An action reported success but re-verification disagrees."""


class PackageStillInstalledError(PostConditionError):
    def __init__(self, name: str):
        super().__init__(f"package {name} still exists after uninstall")
        self.name = name


class PipVerificationError(PostConditionError):
    def __init__(self, python: str):
        super().__init__(f"pip installed successfully but verification failed for {python}")
        self.python = python


class PipStillInstalledError(PostConditionError):
    def __init__(self, python: str):
        super().__init__(f"pip still exists after uninstallation for {python}")
        self.python = python
