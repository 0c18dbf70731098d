#!/usr/bin/env python
"""
Minimal setup.py bridge for older pip releases.
pip versions without PEP 660 support cannot do editable installs from pyproject.toml alone.
This file bridges to pyproject.toml for metadata while supporting legacy editable installs.
"""

from setuptools import setup

# All configuration is in pyproject.toml
setup()
