"""Checks for external programs required by a test case.

A test case that depends on an external tool declares it with
require_prog(). Absolute paths are checked directly and a missing one skips
the test case. Bare program names are searched for in the directories listed
in the PATH environment variable and a missing one fails the test case.

Example:
    def body(tc):
        require_prog("/usr/sbin/sshd")  # skips if absent
        require_prog("gzip")            # fails if not in PATH
"""

from __future__ import annotations

import logging
import os

from casekit.context import ExecutionContext, current_context
from casekit.errors import report_fatal_error
from casekit.reason import format_reason

logger = logging.getLogger(__name__)

SEARCH_PATH_VAR = "PATH"
SEARCH_PATH_SEPARATOR = ":"


def _is_executable(path: str) -> bool:
    return os.access(path, os.X_OK, effective_ids=os.access in os.supports_effective_ids)


def _check_prog_in_dir(directory: str, prog: str) -> bool:
    """Check a single search directory.

    Errors probing the directory only mean the program is not there.
    """
    candidate = f"{directory}/{prog}"
    try:
        return _is_executable(candidate)
    except (OSError, ValueError) as e:
        logger.debug("Ignoring search directory %s: %s", directory, e)
        return False


def _validate_search_name(prog: str) -> None:
    """Abort on relative names with a directory component."""
    directory = os.path.dirname(prog)
    if directory not in ("", "."):
        report_fatal_error("Relative paths are not allowed when searching for a program (%s)", prog)


def find_program(prog: str, search_path: str | None = None) -> str | None:
    """Locate an executable program.

    Args:
        prog: Absolute path, or a bare program name to search for.
        search_path: Colon-separated directories to search, in order.
            Defaults to the PATH environment variable.

    Returns:
        Path to the first executable match, or None if not found.
    """
    if os.path.isabs(prog):
        return prog if _is_executable(prog) else None

    _validate_search_name(prog)

    if search_path is None:
        search_path = os.environ.get(SEARCH_PATH_VAR, "")

    for directory in search_path.split(SEARCH_PATH_SEPARATOR):
        if not directory:
            continue
        if _check_prog_in_dir(directory, prog):
            found = f"{directory}/{prog}"
            logger.debug("Found required program %s at %s", prog, found)
            return found

    return None


def check_prog(ctx: ExecutionContext, prog: str) -> None:
    """Require a program on behalf of a running test case.

    Returns only if the program is available; otherwise records a skip
    (absolute path) or a failure (searched name) and exits.

    Args:
        ctx: Context of the running test case.
        prog: Absolute path or bare program name.
    """
    if os.path.isabs(prog):
        if not _is_executable(prog):
            ctx.record_skip(format_reason(None, 0, "The required program %s could not be found", prog))
        return

    if find_program(prog) is None:
        ctx.record_failure(format_reason(None, 0, "The required program %s could not be found in the PATH", prog))


def require_prog(prog: str) -> None:
    """Require a program in the running test case.

    Args:
        prog: Absolute path or bare program name.

    Raises:
        StateError: If no test case is running.
    """
    check_prog(current_context(), prog)
