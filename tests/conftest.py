"""Pytest configuration for taskimport tests.

Ensures the in-repo `src` directory is on `sys.path` so the package can be
imported without an editable install (`pip install -e .`).
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import taskimport.logging as tlog  # noqa: E402


@pytest.fixture(autouse=True)
def _fresh_structured_logger() -> Iterator[None]:
    # The global logger binds its stream at creation; rebuild it per test so capsys sees output.
    tlog._GLOBAL = None
    yield
    tlog._GLOBAL = None
    package_logger = logging.getLogger("taskimport")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)
