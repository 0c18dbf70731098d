from __future__ import annotations  # Python 3.6+ compatibility

import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import ResolutionError
from .i18n import _

DEFAULT_INDEX_URL = "https://pypi.org/simple"
DEFAULT_GET_PIP_URL = "https://bootstrap.pypa.io/get-pip.py"
DEFAULT_GET_PIP_TIMEOUT = 60.0
DEFAULT_LOCK_TIMEOUT = 300.0

ENV_INDEX_URL = "PYPI_INDEX_URL"
ENV_GET_PIP_URL = "GET_PIP_URL"
ENV_GET_PIP_INSECURE = "VENVKEEPER_GET_PIP_INSECURE"
ENV_VENV = "VENVKEEPER_VENV"
ENV_BASE_PYTHON = "VENVKEEPER_BASE_PYTHON"
ENV_CONFIG_PATH = "VENVKEEPER_CONFIG"
ENV_LANG = "VENVKEEPER_LANG"

_TRUTHY = {"1", "true", "yes", "on"}


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUTHY


def user_home() -> Path:
    """Resolve the user's home directory, wrapping lookup failures."""
    try:
        return Path.home()
    except (RuntimeError, KeyError, OSError) as e:
        raise ResolutionError(_("get user home dir failed: {}").format(e)) from e


class ConfigManager:
    """
    Loads the optional JSON config file (``~/.config/venvkeeper/config.json``).

    A missing or unreadable file behaves like an empty config; ``set`` writes
    the file back, creating its directory.
    """

    def __init__(self, config_path: Optional[Path] = None):
        if config_path is None:
            override = os.environ.get(ENV_CONFIG_PATH)
            config_path = Path(override) if override else None
        self._explicit_path = config_path
        self._config: Optional[Dict[str, Any]] = None

    @property
    def config_path(self) -> Path:
        if self._explicit_path is not None:
            return Path(self._explicit_path)
        return user_home() / ".config" / "venvkeeper" / "config.json"

    @property
    def config(self) -> Dict[str, Any]:
        if self._config is None:
            self._config = self._load()
        return self._config

    def _load(self) -> Dict[str, Any]:
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError, ResolutionError):
            return {}
        return data if isinstance(data, dict) else {}

    def get(self, key, default=None):
        """Get a configuration value, with an optional default."""
        return self.config.get(key, default)

    def set(self, key, value):
        """Set a configuration value and save."""
        self.config[key] = value
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            json.dump(self.config, f, indent=4)


class Settings:
    """
    Runtime settings. Each value resolves, in order, from the constructor
    argument, the environment, the config file and finally the built-in
    default. Resolution happens on every read, so an environment change is
    picked up by the next install.
    """

    def __init__(
        self,
        config_manager: Optional[ConfigManager] = None,
        index_url: Optional[str] = None,
        get_pip_url: Optional[str] = None,
        get_pip_insecure: Optional[bool] = None,
        venv_path: Optional[str] = None,
        base_python: Optional[str] = None,
    ):
        self.config_manager = config_manager or ConfigManager()
        self._index_url = index_url
        self._get_pip_url = get_pip_url
        self._get_pip_insecure = get_pip_insecure
        self._venv_path = venv_path
        self._base_python = base_python

    def _resolve(self, explicit, env_var: Optional[str], key: str, default):
        if explicit is not None:
            return explicit
        if env_var:
            value = os.environ.get(env_var)
            if value:
                return value
        value = self.config_manager.get(key)
        if value not in (None, ""):
            return value
        return default

    @property
    def index_url(self) -> str:
        return self._resolve(self._index_url, ENV_INDEX_URL, "index_url", DEFAULT_INDEX_URL)

    @property
    def get_pip_url(self) -> str:
        return self._resolve(self._get_pip_url, ENV_GET_PIP_URL, "get_pip_url", DEFAULT_GET_PIP_URL)

    @property
    def get_pip_insecure(self) -> bool:
        """Skip TLS certificate checks when fetching get-pip.py. Off unless opted in."""
        return _as_bool(
            self._resolve(self._get_pip_insecure, ENV_GET_PIP_INSECURE, "get_pip_insecure", False)
        )

    @property
    def get_pip_timeout(self) -> float:
        return float(self.config_manager.get("get_pip_timeout", DEFAULT_GET_PIP_TIMEOUT))

    @property
    def lock_timeout(self) -> float:
        return float(self.config_manager.get("lock_timeout", DEFAULT_LOCK_TIMEOUT))

    @property
    def base_python(self) -> str:
        return self._resolve(self._base_python, ENV_BASE_PYTHON, "base_python", sys.executable)

    @property
    def language(self) -> Optional[str]:
        return self._resolve(None, ENV_LANG, "language", None)

    def default_venv_path(self) -> Path:
        configured = self._resolve(self._venv_path, ENV_VENV, "venv_path", None)
        if configured:
            return Path(configured).expanduser()
        return user_home() / ".venvkeeper" / "venv"
