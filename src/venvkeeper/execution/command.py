from __future__ import annotations  # Python 3.6+ compatibility

import os
import shlex
import subprocess
from dataclasses import dataclass
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class Invocation:
    """
    A program plus its ordered arguments, built but not run.

    Nothing here checks that ``program`` exists; a bad program only shows up
    when the rendered command line is executed.
    """

    program: str
    args: Tuple[str, ...] = ()

    def argv(self) -> List[str]:
        return [self.program, *self.args]

    def render(self) -> str:
        """Single command line, quoted for the platform shell."""
        if os.name == "nt":
            return subprocess.list2cmdline(self.argv())
        return " ".join(shlex.quote(part) for part in self.argv())

    @property
    def directory(self) -> Optional[str]:
        """Directory component of ``program``, or None for a bare name."""
        return os.path.dirname(self.program) or None

    def __str__(self) -> str:
        return self.render()


def command(program, *args) -> Invocation:
    return Invocation(str(program), tuple(str(a) for a in args))
