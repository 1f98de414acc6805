"""Root conftest.py for casekit.

This provides shared pytest configuration and fixtures for the unit tests.
"""

from __future__ import annotations

import os
import sys
from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from _pytest.config import Config


# Add the package src directory to path for imports
PROJECT_ROOT = Path(__file__).parent
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from casekit.context import ExecutionContext, activated  # noqa: E402
from casekit.testcase import TestCase  # noqa: E402


class FatalAbort(BaseException):
    """Raised in place of os.abort() while testing fatal error paths."""


def pytest_configure(config: Config) -> None:
    """Register custom markers.

    Args:
        config: pytest configuration object.
    """
    config.addinivalue_line(
        "markers",
        "subprocess: Test runs a test program in a child interpreter",
    )


def pytest_report_header(config: Config) -> list[str]:
    """Add package info to pytest header.

    Args:
        config: pytest configuration object.

    Returns:
        List of header lines.
    """
    lines = ["casekit test suite"]

    if getattr(config.option, "cov_source", None):
        lines.append("Coverage: enabled")

    return lines


@pytest.fixture
def fatal_abort(monkeypatch: pytest.MonkeyPatch) -> type[FatalAbort]:
    """Make os.abort() raise FatalAbort instead of killing the test run."""

    def fake_abort() -> None:
        raise FatalAbort()

    monkeypatch.setattr(os, "abort", fake_abort)
    return FatalAbort


@pytest.fixture
def resfile(tmp_path: Path) -> Path:
    """Return the path of a result file that does not exist yet."""
    return tmp_path / "result"


@pytest.fixture
def active_context(resfile: Path) -> Iterator[ExecutionContext]:
    """Install an execution context for a bare test case."""
    ctx = ExecutionContext(tc=TestCase("fixture_case"), resfile=resfile)
    with activated(ctx):
        yield ctx
