"""Exception types and fatal-error reporting for casekit.

Test outcomes (passed, failed, skipped) are never reported through exceptions;
they are written to the result file and terminate the process. The exceptions
below cover programming-contract violations and construction-time failures
that the caller is expected to handle.

Exception hierarchy:
    CasekitError (base)
    +-- StateError: Outcome primitive used outside a run, finalized test case
    +-- MetadataError: Metadata value could not be built
    +-- ResultFileError: Result destination could not be opened or written
    +-- ConfigError: Configuration file is malformed

Conditions that would make a reported outcome unreliable go through
report_fatal_error() instead, which aborts the process.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, NoReturn

logger = logging.getLogger(__name__)


class CasekitError(Exception):
    """Base exception for all casekit errors.

    Catch this to handle any framework-specific error.
    """


class StateError(CasekitError):
    """Raised when an operation is invalid in the current lifecycle state.

    This occurs when an outcome primitive is called while no test case is
    running, or when a finalized test case is accessed.
    """


class MetadataError(CasekitError):
    """Raised when a metadata value cannot be formatted or stored."""


class ResultFileError(CasekitError):
    """Raised when the result destination cannot be opened or written.

    The result writer converts this into a fatal error; it only escapes to
    callers using the low-level record writing helpers directly.
    """


class ConfigError(CasekitError):
    """Raised for malformed configuration files."""


def report_fatal_error(msg: str, *args: Any) -> NoReturn:
    """Print a diagnostic on stderr and abort the process.

    Args:
        msg: printf-style message.
        *args: Message arguments.
    """
    text = msg % args if args else msg
    logger.debug("Aborting: %s", text)
    sys.stderr.write(f"FATAL ERROR: {text}\n")
    sys.stderr.flush()
    os.abort()
