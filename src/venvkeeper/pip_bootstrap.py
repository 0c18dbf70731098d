"""
Install or remove pip itself inside an interpreter.

When pip is missing, get-pip.py is downloaded and run with the target
interpreter. Certificate verification for that download stays on unless the
insecure flag is set explicitly (VENVKEEPER_GET_PIP_INSECURE=1 or the
``get_pip_insecure`` config key). Turning it off means running a remote
script fetched over an unauthenticated channel.
"""
from __future__ import annotations  # Python 3.6+ compatibility

import os
import tempfile
from typing import Optional

import requests
import urllib3

from .config import Settings
from .errors import (
    CommandError,
    PipBootstrapError,
    PipCommandError,
    PipStillInstalledError,
    PipVerificationError,
)
from .execution import CommandRunner
from .i18n import _
from .log import get_logger

logger = get_logger(__name__)


class PipBootstrapManager:
    def __init__(
        self,
        runner: CommandRunner,
        settings: Optional[Settings] = None,
        session: Optional[requests.Session] = None,
    ):
        self.runner = runner
        self.settings = settings or Settings()
        self.session = session or requests.Session()

    def has_pip(self, python: str) -> bool:
        return self.runner.succeeds(python, "-m", "pip", "--version")

    def fetch_get_pip(self, url: str) -> str:
        insecure = self.settings.get_pip_insecure
        if insecure:
            logger.warning("fetching get-pip script WITHOUT TLS certificate verification", url=url)
            urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
        try:
            response = self.session.get(
                url, verify=not insecure, timeout=self.settings.get_pip_timeout
            )
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error("download get-pip script failed", url=url, error=str(e))
            raise PipBootstrapError(_("download get-pip script failed: {}").format(e)) from e
        return response.text

    def install_pip(self, python: str) -> None:
        logger.info("checking if pip is installed", python3=python)
        if self.has_pip(python):
            logger.info("pip is already installed", python3=python)
            return

        url = self.settings.get_pip_url
        logger.info("installing pip", url=url, verify_tls=not self.settings.get_pip_insecure)
        script = self.fetch_get_pip(url)

        fd, script_path = tempfile.mkstemp(suffix=".py", prefix="venvkeeper_get_pip_")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(script)
            outcome = self.runner.output(python, script_path)
        finally:
            os.unlink(script_path)

        if not outcome.ok:
            logger.error(
                "pip installation failed",
                stdout=outcome.stdout,
                stderr=outcome.stderr,
                script=script_path,
            )
            raise PipBootstrapError(
                _("pip installation failed: {}").format(outcome.stderr.strip() or outcome.error)
            ) from outcome.error

        logger.info("verifying pip installation")
        if not self.has_pip(python):
            raise PipVerificationError(python)

        logger.info("pip installation complete", python3=python)

    def uninstall_pip(self, python: str) -> None:
        logger.info("checking if pip is installed", python3=python)
        if not self.has_pip(python):
            logger.info("pip is not installed, no need to uninstall", python3=python)
            return

        logger.info("uninstalling pip", python3=python)
        try:
            self.runner.run(
                python, "-m", "pip", "uninstall", "pip", "-y", "--quiet", "--disable-pip-version-check"
            )
        except CommandError as e:
            raise PipCommandError(_("failed to uninstall pip via pip command"), e) from e

        logger.info("verifying pip uninstallation")
        if self.has_pip(python):
            raise PipStillInstalledError(python)

        logger.info("pip uninstalled successfully", python3=python)
