"""
Textual matching rules for interpreters and package versions.

These are deliberately loose: the interpreter check is a prefix match on the
``--version`` banner and version equality ignores leading ``v`` characters.
No structured version parsing happens anywhere in venvkeeper.
"""
from __future__ import annotations  # Python 3.6+ compatibility

from dataclasses import dataclass
from typing import Optional

from packaging.utils import canonicalize_name

from .errors import InvalidPackageSpecError

PYTHON3_BANNER_PREFIX = "Python 3"
VERSION_SEPARATOR = "=="


def is_python3_banner(banner: str) -> bool:
    """True when ``python --version`` output identifies a Python 3 interpreter."""
    return banner.startswith(PYTHON3_BANNER_PREFIX)


def normalize_version(version: str) -> str:
    return version.strip().lstrip("v")


def versions_match(installed: str, requested: str) -> bool:
    """``v1.2.0`` == ``1.2.0`` in either direction; everything else is exact."""
    return normalize_version(installed) == normalize_version(requested)


@dataclass(frozen=True)
class PackageSpec:
    """A package reference: ``name`` or ``name==version``."""

    name: str
    version: Optional[str] = None

    @classmethod
    def parse(cls, spec: str) -> "PackageSpec":
        # split on the first "==" only
        name, sep, version = spec.strip().partition(VERSION_SEPARATOR)
        name = name.strip()
        version = version.strip()
        if not name:
            raise InvalidPackageSpecError(f"invalid package spec {spec!r}: empty name")
        if sep and not version:
            raise InvalidPackageSpecError(f"invalid package spec {spec!r}: empty version")
        return cls(name, version or None)

    @property
    def key(self) -> str:
        """Canonical project name, used to de-duplicate package lists."""
        return canonicalize_name(self.name)

    def __str__(self) -> str:
        if self.version:
            return f"{self.name}{VERSION_SEPARATOR}{self.version}"
        return self.name
