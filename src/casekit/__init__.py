"""Test case lifecycle and outcome reporting.

This package gives a test program a uniform way to declare a test case's
metadata, run its body, signal an outcome (pass, fail, skip), accumulate
non-fatal check failures and persist the outcome as a one-line result record
for a harness to read.

Key components:
    - TestCase: identity, metadata, configuration and the run driver.
    - casekit.outcome: pass/fail/skip/check/require primitives for test bodies.
    - casekit.progs: checks for required external programs.
    - casekit.resfile: result record format and writer.
    - casekit.config: YAML configuration loading.

Example:
    >>> import casekit
    >>> from casekit import outcome
    >>> def body(tc):
    ...     outcome.require_prog("sh")
    ...     outcome.check(1 + 1 == 2, "arithmetic is broken")
    >>> tc = casekit.TestCase("sanity", body=body)
    >>> tc.run("/dev/stdout")  # prints "passed" and exits
"""

from casekit import outcome
from casekit.config import load_config
from casekit.context import ExecutionContext, current_context
from casekit.errors import (
    CasekitError,
    ConfigError,
    MetadataError,
    ResultFileError,
    StateError,
)
from casekit.metadata import ConfigView, MetadataStore
from casekit.outcome import (
    check,
    check_errno,
    check_oserror,
    fail,
    fail_check,
    fail_nonfatal,
    fail_requirement,
    pass_,
    require,
    require_errno,
    require_oserror,
    skip,
)
from casekit.progs import find_program, require_prog
from casekit.reason import format_reason
from casekit.resfile import Outcome, ResultRecord, read_resfile, write_resfile
from casekit.testcase import TestCase, TestCasePack

__version__ = "0.1.0"

__all__ = [
    # Version
    "__version__",
    # Test cases
    "ExecutionContext",
    "TestCase",
    "TestCasePack",
    "current_context",
    # Metadata and configuration
    "ConfigView",
    "MetadataStore",
    "load_config",
    # Outcome primitives
    "check",
    "check_errno",
    "check_oserror",
    "fail",
    "fail_check",
    "fail_nonfatal",
    "fail_requirement",
    "find_program",
    "outcome",
    "pass_",
    "require",
    "require_errno",
    "require_oserror",
    "require_prog",
    "skip",
    # Results
    "Outcome",
    "ResultRecord",
    "format_reason",
    "read_resfile",
    "write_resfile",
    # Errors
    "CasekitError",
    "ConfigError",
    "MetadataError",
    "ResultFileError",
    "StateError",
]
