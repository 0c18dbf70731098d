from __future__ import annotations  # Python 3.6+ compatibility

from typing import Optional

from ..errors import CommandError
from ..log import get_logger
from .command import Invocation, command
from .context import ExecutionContext, process_context
from .shell import ExecutionOutcome, capture, run_in_dir, run_shell

logger = get_logger(__name__)


class CommandRunner:
    """
    Runs programs against an ExecutionContext.

    ``run`` is the directed run: a program given with a directory (e.g. a
    venv's ``bin/python3``) gets that directory prepended to the context's
    search path first, so anything the program spawns finds its siblings.
    """

    def __init__(self, context: Optional[ExecutionContext] = None, timeout: Optional[float] = None):
        self.context = context or process_context()
        self.timeout = timeout

    def run(self, program, *args) -> None:
        """Directed run; raises the CommandError of a failed child."""
        invocation = command(program, *args)
        rendered = invocation.render()
        logger.info("run command", cmd=rendered)

        if invocation.directory:
            # SearchPathError propagates before anything is started
            self.context.prepend_search_path(invocation.directory)

        exit_code, error = run_shell(rendered, env=self.context.child_env(), timeout=self.timeout)
        if error is not None:
            raise error

    def succeeds(self, program, *args) -> bool:
        """Directed run used as a predicate: True on exit 0."""
        try:
            self.run(program, *args)
        except CommandError:
            return False
        return True

    def output(self, program, *args) -> ExecutionOutcome:
        """Run without a shell and capture output; the search path is read, not changed."""
        return capture(command(program, *args), env=self.context.child_env(), timeout=self.timeout)

    def run_module(self, module_name: str, *args) -> None:
        """``<active interpreter> -m <module> args...``"""
        self.run(self.context.interpreter, "-m", module_name, *args)

    def run_in_dir(self, invocation: Invocation, directory: str) -> None:
        run_in_dir(invocation, directory, env=self.context.child_env())
