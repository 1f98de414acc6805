"""Execution context of the running test case.

The context records where the result goes, how many non-fatal checks have
failed so far, and which outcome has been written. It is installed in a
context variable for the duration of TestCase.run(), so the outcome
primitives can be called from a test body without passing it around.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import TYPE_CHECKING, NoReturn

from casekit.errors import StateError, report_fatal_error
from casekit.resfile import Outcome, ResultDestination, write_resfile

if TYPE_CHECKING:
    from casekit.testcase import TestCase

logger = logging.getLogger(__name__)

EXIT_SUCCESS = 0
EXIT_FAILURE = 1

CHECK_FAILED_PREFIX = "*** Check failed: "

_current: ContextVar[ExecutionContext | None] = ContextVar("casekit_current_context", default=None)


@dataclass
class ExecutionContext:
    """State of a single test case run.

    The record_* methods implement the outcome state machine. A run starts
    with no outcome; record_pass(), record_failure() and record_skip() write
    the single result record and terminate the process, while
    record_check_failure() only bumps fail_count and returns.

    Example:
        ctx = ExecutionContext(tc=tc, resfile="/dev/stdout")
        with activated(ctx):
            ctx.record_check_failure("value out of range")
            ctx.finish()
    """

    tc: TestCase
    resfile: ResultDestination
    fail_count: int = 0
    outcome: Outcome | None = None

    @property
    def is_running(self) -> bool:
        """Return True until an outcome has been recorded."""
        return self.outcome is None

    def _record(self, outcome: Outcome, reason: str | None, status: int) -> NoReturn:
        if self.outcome is not None:
            report_fatal_error(
                "Test case %s already reported a '%s' result; cannot report '%s'",
                self.tc.ident,
                self.outcome.value,
                outcome.value,
            )
        write_resfile(outcome, reason, self.resfile)
        self.outcome = outcome
        logger.info("Test case %s %s", self.tc.ident, outcome.value)
        sys.exit(status)

    def record_pass(self) -> NoReturn:
        """Write a passed record and exit successfully."""
        self._record(Outcome.PASSED, None, EXIT_SUCCESS)

    def record_failure(self, reason: str) -> NoReturn:
        """Write a failed record and exit with a failure status.

        Args:
            reason: Why the test case failed.
        """
        self._record(Outcome.FAILED, reason, EXIT_FAILURE)

    def record_skip(self, reason: str) -> NoReturn:
        """Write a skipped record and exit successfully.

        Args:
            reason: Why the test case was skipped.
        """
        self._record(Outcome.SKIPPED, reason, EXIT_SUCCESS)

    def record_check_failure(self, reason: str) -> None:
        """Report a failed non-fatal check and let the body continue.

        Args:
            reason: Why the check failed.
        """
        sys.stderr.write(f"{CHECK_FAILED_PREFIX}{reason}\n")
        sys.stderr.flush()
        self.fail_count += 1
        logger.debug("Test case %s: %d check(s) failed", self.tc.ident, self.fail_count)

    def finish(self) -> NoReturn:
        """Turn the failed check count into the final outcome."""
        if self.fail_count == 0:
            self.record_pass()
        self.record_failure(f"{self.fail_count} checks failed; see output for more details")


@contextmanager
def activated(ctx: ExecutionContext) -> Iterator[ExecutionContext]:
    """Install a context as the current one for the enclosed block.

    Args:
        ctx: The context to install.

    Yields:
        The installed context.
    """
    token = _current.set(ctx)
    try:
        yield ctx
    finally:
        _current.reset(token)


def get_current() -> ExecutionContext | None:
    """Return the active context, or None outside a run."""
    return _current.get()


def current_context() -> ExecutionContext:
    """Return the active context.

    Returns:
        The context of the running test case.

    Raises:
        StateError: If no test case is running.
    """
    ctx = _current.get()
    if ctx is None:
        raise StateError("No test case is running; outcome primitives are only valid inside a test body")
    return ctx
