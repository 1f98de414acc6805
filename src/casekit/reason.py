"""Formatting of failure and skip reasons."""

from __future__ import annotations

from typing import Any

from casekit.errors import report_fatal_error


def format_message(fmt: str, *args: Any) -> str:
    """Expand a printf-style message.

    The format is used verbatim when no arguments are given, so messages
    containing a literal '%' need no escaping.

    Raises:
        TypeError, ValueError, KeyError: If the arguments do not match fmt.
    """
    if not args:
        return fmt
    return fmt % args


def format_reason(file: str | None, line: int, fmt: str, *args: Any) -> str:
    """Build a failure or skip reason.

    A reason that cannot be built is a fatal error. This includes arguments
    whose str() or repr() raises.

    Args:
        file: Source file the reason refers to, or None.
        line: Line in file; must be 0 when file is None.
        fmt: printf-style message.
        *args: Message arguments.

    Returns:
        "<message>" or "<file>:<line>: <message>".

    Raises:
        ValueError: If line is non-zero without a file.
    """
    if file is None and line != 0:
        raise ValueError(f"Line {line} given without a source file")

    try:
        message = format_message(fmt, *args)
    except Exception as e:  # pylint: disable=broad-except
        report_fatal_error("Cannot format reason %r: %s", fmt, e)

    if file is None:
        return message
    return f"{file}:{line}: {message}"
