"""
Process execution primitives.

run_shell() hands a finished command line to the platform shell with the
child's stdout/stderr wired straight to ours, so pip progress shows up live.
capture() runs an Invocation directly and keeps its output for inspection.
"""
from __future__ import annotations  # Python 3.6+ compatibility

import os
import subprocess
from dataclasses import dataclass
from typing import List, Mapping, Optional, Tuple

import psutil

from ..errors import (
    CommandError,
    CommandFailedError,
    CommandTimeoutError,
    ExitStatusUnknownError,
    StartFailedError,
)
from ..log import get_logger
from .command import Invocation

logger = get_logger(__name__)

TIMEOUT_EXIT_CODE = 124


@dataclass(frozen=True)
class ExecutionOutcome:
    exit_code: int
    stdout: str = ""
    stderr: str = ""
    error: Optional[CommandError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_status(self):
        if self.error is not None:
            raise self.error
        return self


def shell_argv(command_line: str) -> List[str]:
    if os.name == "nt":
        return [os.environ.get("COMSPEC", "cmd.exe"), "/C", command_line]
    return ["/bin/sh", "-c", command_line]


def kill_process_tree(pid: int):
    """Kill a process and all of its descendants."""
    try:
        parent = psutil.Process(pid)
    except psutil.NoSuchProcess:
        return
    for child in parent.children(recursive=True):
        try:
            child.kill()
        except psutil.NoSuchProcess:
            pass
    try:
        parent.kill()
    except psutil.NoSuchProcess:
        pass


def _classify(command_line: str, returncode: int, stderr: str = "") -> Optional[CommandError]:
    if returncode == 0:
        return None
    if returncode < 0:
        # killed by a signal: not a normal exit
        return ExitStatusUnknownError(command_line, returncode)
    return CommandFailedError(command_line, returncode, stderr)


def _normalized_code(error: Optional[CommandError]) -> int:
    return 0 if error is None else error.exit_code


def run_shell(
    command_line: str,
    env: Optional[Mapping[str, str]] = None,
    timeout: Optional[float] = None,
) -> Tuple[int, Optional[CommandError]]:
    """
    Run ``command_line`` through the platform shell and wait for it.

    Returns ``(exit_code, error)``:

    * ``(0, None)`` on a clean exit;
    * ``(code, CommandFailedError)`` when the child exits non-zero;
    * ``(1, StartFailedError)`` when the shell cannot be started;
    * ``(1, ExitStatusUnknownError)`` when the child did not exit normally;
    * ``(124, CommandTimeoutError)`` when ``timeout`` expires (child tree killed).

    Without a timeout the call blocks for as long as the child runs.
    """
    logger.info("exec shell string", content=command_line)
    try:
        process = subprocess.Popen(shell_argv(command_line), env=env)
    except OSError as e:
        logger.error("start running command failed", content=command_line, error=str(e))
        return 1, StartFailedError(command_line, e)

    try:
        returncode = process.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        kill_process_tree(process.pid)
        process.wait()
        logger.error("command timed out", content=command_line, timeout=timeout)
        return TIMEOUT_EXIT_CODE, CommandTimeoutError(command_line, timeout)

    error = _classify(command_line, returncode)
    if error is not None:
        logger.error("exec command failed", exitCode=error.exit_code, error=str(error))
    return _normalized_code(error), error


def capture(
    invocation: Invocation,
    env: Optional[Mapping[str, str]] = None,
    cwd: Optional[str] = None,
    timeout: Optional[float] = None,
) -> ExecutionOutcome:
    """Run an invocation without a shell, capturing stdout and stderr."""
    rendered = invocation.render()
    logger.debug("capture command", cmd=rendered)
    try:
        proc = subprocess.run(
            invocation.argv(),
            env=env,
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            timeout=timeout,
        )
    except OSError as e:
        return ExecutionOutcome(1, error=StartFailedError(rendered, e))
    except subprocess.TimeoutExpired as e:
        return ExecutionOutcome(
            TIMEOUT_EXIT_CODE,
            stdout=_text(e.stdout),
            stderr=_text(e.stderr),
            error=CommandTimeoutError(rendered, timeout),
        )

    error = _classify(rendered, proc.returncode, proc.stderr)
    return ExecutionOutcome(_normalized_code(error), proc.stdout, proc.stderr, error)


def run_in_dir(
    invocation: Invocation,
    directory: str,
    env: Optional[Mapping[str, str]] = None,
) -> None:
    """
    Run an invocation inside ``directory``. stdout is inherited; stderr is
    captured so a failure can carry it. Raises the CommandError on failure.
    """
    rendered = invocation.render()
    logger.info("exec command", cmd=rendered, dir=str(directory))
    try:
        proc = subprocess.run(
            invocation.argv(),
            cwd=directory,
            env=env,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as e:
        logger.error("exec command failed", error=str(e), stderr="")
        raise StartFailedError(rendered, e) from e

    error = _classify(rendered, proc.returncode, proc.stderr or "")
    if error is not None:
        logger.error("exec command failed", error=str(error), stderr=proc.stderr or "")
        raise error


def _text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", "replace")
    return value
