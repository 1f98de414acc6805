"""Test case object and run driver."""

from __future__ import annotations

import logging
import sys
import traceback
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Callable, NoReturn

from casekit.context import ExecutionContext, activated
from casekit.errors import MetadataError, StateError, report_fatal_error
from casekit.metadata import ConfigView, MetadataStore
from casekit.reason import format_message, format_reason
from casekit.resfile import ResultDestination

logger = logging.getLogger(__name__)

# Type for setup, body and cleanup callbacks
TestCaseCallback = Callable[["TestCase"], Any]


@dataclass(frozen=True)
class TestCasePack:
    """Static description of a test case.

    Attributes:
        ident: Test case identifier.
        setup: Optional callback declaring metadata.
        body: Test logic.
        cleanup: Optional teardown callback.
    """

    __test__ = False

    ident: str
    body: TestCaseCallback | None = None
    setup: TestCaseCallback | None = None
    cleanup: TestCaseCallback | None = None


class TestCase:
    """A single test case.

    The test case owns its identifier, its metadata and three optional
    callbacks:
    - setup(tc): declares metadata; runs during construction
    - body(tc): the test logic; may call the primitives in casekit.outcome
    - cleanup(tc): teardown run by the harness after run()

    Example:
        def setup(tc):
            tc.set_md_var("descr", "Checks that gzip is usable")

        def body(tc):
            outcome.require_prog("gzip")
            outcome.check(tc.get_config_var_wd("level", "9") == "9")

        tc = TestCase("gzip_usable", setup=setup, body=body)
        tc.run("/dev/stdout")
    """

    __test__ = False

    def __init__(
        self,
        ident: str,
        body: TestCaseCallback | None = None,
        setup: TestCaseCallback | None = None,
        cleanup: TestCaseCallback | None = None,
        config: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the test case and run its setup callback.

        Args:
            ident: Test case identifier; read-only once constructed.
            body: Test logic. A test case without a body passes.
            setup: Optional callback declaring metadata.
            cleanup: Optional teardown callback.
            config: Configuration variables, or None if none were supplied.

        Raises:
            MetadataError: If a metadata value cannot be formatted.
            TypeError: If the identifier is not a string.
        """
        self._ident = ident
        self._setup = setup
        self._body = body
        self._cleanup = cleanup
        self._config = ConfigView(config)
        self._vars = MetadataStore()
        self._finalized = False

        self.set_md_var("ident", ident)
        if cleanup is not None:
            self.set_md_var("has.cleanup", "true")

        if self._setup is not None:
            self._setup(self)

        if self.get_md_var("ident") != ident:
            report_fatal_error("Test case setup modified the read-only 'ident' property")

        logger.debug("Initialized test case %s", ident)

    @classmethod
    def from_pack(cls, pack: TestCasePack, config: Mapping[str, str] | None = None) -> TestCase:
        """Create a test case from a static description.

        Args:
            pack: The test case description.
            config: Configuration variables, or None.

        Returns:
            The initialized test case.
        """
        return cls(pack.ident, body=pack.body, setup=pack.setup, cleanup=pack.cleanup, config=config)

    def fini(self) -> None:
        """Release the metadata; the test case is unusable afterwards."""
        self._vars.clear()
        self._finalized = True

    def __enter__(self) -> TestCase:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.fini()

    def _check_alive(self) -> None:
        if self._finalized:
            raise StateError(f"Test case {self._ident} has been finalized")

    @property
    def ident(self) -> str:
        """Return the test case identifier."""
        return self._ident

    def get_ident(self) -> str:
        """Return the test case identifier."""
        return self._ident

    @property
    def has_cleanup(self) -> bool:
        """Return True if a cleanup callback was given."""
        return self._cleanup is not None

    # Configuration

    def get_config_var(self, name: str) -> str:
        """Get a configuration variable.

        Raises:
            KeyError: If the variable is not configured.
        """
        self._check_alive()
        return self._config.get(name)

    def get_config_var_wd(self, name: str, default: str) -> str:
        """Get a configuration variable, or default if it is not configured."""
        self._check_alive()
        return self._config.get_or(name, default)

    def has_config_var(self, name: str) -> bool:
        """Check if a configuration variable is defined."""
        self._check_alive()
        return self._config.has(name)

    # Metadata

    def get_md_var(self, name: str) -> str:
        """Get a metadata variable.

        Args:
            name: Variable name.

        Returns:
            The variable value.

        Raises:
            KeyError: If the variable is not defined.
            StateError: If the test case has been finalized.
        """
        self._check_alive()
        return self._vars.get(name)

    def get_md_vars(self) -> Mapping[str, str]:
        """Return a read-only snapshot of all metadata variables."""
        self._check_alive()
        return self._vars.as_dict()

    def has_md_var(self, name: str) -> bool:
        """Check if a metadata variable is defined."""
        self._check_alive()
        return self._vars.has(name)

    def set_md_var(self, name: str, fmt: str, *args: Any) -> None:
        """Set a metadata variable from a printf-style format.

        Args:
            name: Variable name.
            fmt: Value, or printf-style format when args are given.
            *args: Format arguments.

        Raises:
            MetadataError: If the value cannot be formatted.
            StateError: If the test case has been finalized.
        """
        self._check_alive()
        try:
            value = format_message(fmt, *args)
        except (TypeError, ValueError, KeyError) as e:
            raise MetadataError(f"Cannot format metadata variable '{name}': {e}") from e
        self._vars.set(name, value)

    # Execution

    def run(self, resfile: ResultDestination) -> NoReturn:
        """Run the body and report its outcome.

        Never returns: the outcome is written to resfile and the process
        exits, either from within the body or once it returns.

        Args:
            resfile: Result destination; "/dev/stdout", "/dev/stderr" or a
                file path.
        """
        self._check_alive()
        ctx = ExecutionContext(tc=self, resfile=resfile)

        with activated(ctx):
            logger.info("Running test case %s", self._ident)
            try:
                if self._body is not None:
                    self._body(self)
            except Exception as e:  # pylint: disable=broad-except
                traceback.print_exc(file=sys.stderr)
                ctx.record_failure(format_reason(None, 0, "Uncaught %s: %s", type(e).__name__, e))
            ctx.finish()

    def cleanup(self) -> None:
        """Run the cleanup callback, if any."""
        self._check_alive()
        if self._cleanup is not None:
            logger.info("Cleaning up test case %s", self._ident)
            self._cleanup(self)

    def __repr__(self) -> str:
        return f"TestCase(ident={self._ident!r})"
