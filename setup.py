#!/usr/bin/env python3
# =============================================================================
#  resgen — setup.py
#
#  Installs the `resgen` package and the `resgen` console script.
#
#      pip install -e ".[dev]"
#      python -m pytest
# =============================================================================

from __future__ import annotations

import re
from pathlib import Path

from setuptools import setup, find_packages

# ---------------------------------------------------------------------------
#  Read version from the package so we have a single source of truth.
# ---------------------------------------------------------------------------
_HERE = Path(__file__).resolve().parent


def _read_version() -> str:
    """Extract ``__version__`` from resgen/__init__.py."""
    init = _HERE / "resgen" / "__init__.py"
    text = init.read_text(encoding="utf-8")
    match = re.search(r'^__version__(?:\s*:\s*str)?\s*=\s*"([^"]+)"', text, re.MULTILINE)
    if match:
        return match.group(1)
    return "0.0.0"


def _read_long_description() -> str:
    """Read README.md for the long description."""
    readme = _HERE / "README.md"
    if readme.exists():
        return readme.read_text(encoding="utf-8")
    return ""


def _read_requirements() -> list[str]:
    """Read requirements.txt if it exists."""
    req_file = _HERE / "requirements.txt"
    if req_file.exists():
        lines = req_file.read_text(encoding="utf-8").splitlines()
        return [
            ln.strip()
            for ln in lines
            if ln.strip() and not ln.strip().startswith("#")
        ]
    return []


setup(
    name="resgen",
    version=_read_version(),
    description=(
        "Compiles AppleALC resource property lists and codec bundles "
        "into the kern_resources.cpp C++ source."
    ),
    long_description=_read_long_description(),
    long_description_content_type="text/markdown",
    license="BSD-3-Clause",
    author="resgen contributors",
    python_requires=">=3.10",
    packages=find_packages(
        include=[
            "resgen",
            "resgen.*",
        ],
        exclude=[
            "tests",
            "tests.*",
        ],
    ),
    install_requires=_read_requirements(),
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "ruff>=0.4",
            "mypy>=1.10",
        ],
    },

    # `resgen <ResourceDirectory> <OutputPath>`
    entry_points={
        "console_scripts": [
            "resgen=resgen.main:main",
        ],
    },

    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Software Development :: Code Generators",
        "Topic :: System :: Hardware :: Hardware Drivers",
    ],
    keywords=[
        "AppleALC",
        "code-generation",
        "plist",
        "hda",
    ],
    zip_safe=False,
)
