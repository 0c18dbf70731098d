"""
Process execution layer: build an invocation, run it through the shell,
and keep the search path / interpreter for a run in an ExecutionContext.
"""

from .command import Invocation, command
from .context import ExecutionContext, process_context, reset_process_context
from .runner import CommandRunner
from .shell import ExecutionOutcome, capture, kill_process_tree, run_in_dir, run_shell

__all__ = [
    "Invocation",
    "command",
    "ExecutionContext",
    "process_context",
    "reset_process_context",
    "CommandRunner",
    "ExecutionOutcome",
    "capture",
    "kill_process_tree",
    "run_in_dir",
    "run_shell",
]
