from __future__ import annotations  # Python 3.6+ compatibility

import os
import threading
from typing import Dict, List, Optional

from ..errors import SearchPathError
from ..log import get_logger

logger = get_logger(__name__)

DEFAULT_INTERPRETER = "python3"  # system default until a venv is resolved

_process_context: Optional["ExecutionContext"] = None
_process_context_lock = threading.Lock()


class ExecutionContext:
    """
    The interpreter and search path that commands run against.

    Both values are guarded by one re-entrant lock, so a context can be shared
    between threads. Prepending to the search path is cumulative: directories
    are only ever added in front, never removed or de-duplicated. With
    ``export_search_path`` the path lives in ``os.environ`` and each prepend
    builds on its value at that moment.
    """

    def __init__(
        self,
        interpreter: Optional[str] = None,
        search_path: Optional[str] = None,
        export_search_path: bool = False,
    ):
        self._lock = threading.RLock()
        self._interpreter = interpreter or DEFAULT_INTERPRETER
        self._search_path = os.environ.get("PATH", "") if search_path is None else search_path
        self.export_search_path = export_search_path

    @property
    def interpreter(self) -> str:
        with self._lock:
            return self._interpreter

    @interpreter.setter
    def interpreter(self, python: str):
        with self._lock:
            self._interpreter = str(python)

    def _current_search_path(self) -> str:
        # exported: os.environ["PATH"] is the source of truth, host edits included
        if self.export_search_path:
            return os.environ.get("PATH", "")
        return self._search_path

    @property
    def search_path(self) -> str:
        with self._lock:
            return self._current_search_path()

    def search_path_entries(self) -> List[str]:
        return [entry for entry in self.search_path.split(os.pathsep) if entry]

    def prepend_search_path(self, directory: str) -> str:
        with self._lock:
            current = self._current_search_path()
            updated = f"{directory}{os.pathsep}{current}" if current else str(directory)
            if self.export_search_path:
                try:
                    os.environ["PATH"] = updated
                except (ValueError, OSError) as e:
                    logger.error("set env $PATH failed", error=str(e))
                    raise SearchPathError(f"set env $PATH failed: {e}") from e
            self._search_path = updated
            return updated

    def child_env(self) -> Dict[str, str]:
        """Environment for spawned children: ours, with the search path overlaid."""
        with self._lock:
            env = dict(os.environ)
            env["PATH"] = self._current_search_path()
            return env


def process_context() -> ExecutionContext:
    """The process-wide context used by the module-level API."""
    global _process_context
    with _process_context_lock:
        if _process_context is None:
            _process_context = ExecutionContext(export_search_path=True)
        return _process_context


def reset_process_context():
    """Forget the process-wide context; the next call starts from os.environ."""
    global _process_context
    with _process_context_lock:
        _process_context = None
