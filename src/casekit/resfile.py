"""Result records and the result file writer.

A result file holds a single newline-terminated line:

    passed
    failed: <reason>
    skipped: <reason>

Two destinations are special-cased: "/dev/stdout" and "/dev/stderr" write to
the process's own streams instead of opening a file. Characters that cannot
be encoded in a result file, such as surrogate-escaped file names, are
written as backslash escapes.
"""

from __future__ import annotations

import logging
import os
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import IO

from casekit.errors import ResultFileError, report_fatal_error

logger = logging.getLogger(__name__)

STDOUT_SENTINEL = "/dev/stdout"
STDERR_SENTINEL = "/dev/stderr"

ResultDestination = str | os.PathLike


class Outcome(Enum):
    """Terminal verdict of a test case."""

    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"

    @property
    def requires_reason(self) -> bool:
        """Return True if records of this outcome must carry a reason."""
        return self is not Outcome.PASSED


@dataclass(frozen=True)
class ResultRecord:
    """A serialized outcome.

    Attributes:
        outcome: The verdict.
        reason: Explanation; None for passed, required otherwise.
    """

    outcome: Outcome
    reason: str | None = None

    def __post_init__(self) -> None:
        """Validate the outcome/reason pairing."""
        if self.outcome.requires_reason and self.reason is None:
            raise ValueError(f"A '{self.outcome.value}' result requires a reason")
        if not self.outcome.requires_reason and self.reason is not None:
            raise ValueError(f"A '{self.outcome.value}' result cannot have a reason")

    def to_line(self) -> str:
        """Return the newline-terminated record line."""
        if self.reason is None:
            return f"{self.outcome.value}\n"
        return f"{self.outcome.value}: {self.reason}\n"

    @classmethod
    def from_line(cls, line: str) -> ResultRecord:
        """Parse a record line.

        Args:
            line: Record line, with or without its trailing newline.

        Returns:
            Parsed ResultRecord.

        Raises:
            ValueError: If the line is not a valid record.
        """
        text = line[:-1] if line.endswith("\n") else line
        word, sep, reason = text.partition(": ")
        try:
            outcome = Outcome(word)
        except ValueError:
            raise ValueError(f"Invalid result record: {line!r}") from None
        return cls(outcome=outcome, reason=reason if sep else None)


def _write_record(stream: IO[str], record: ResultRecord) -> None:
    """Write a record to an already open stream.

    Raises:
        ResultFileError: If writing fails.
    """
    try:
        stream.write(record.to_line())
        stream.flush()
    except (OSError, ValueError, AttributeError) as e:
        raise ResultFileError(
            f"Failed to write results file; result {record.outcome.value}, "
            f"reason {record.reason if record.reason is not None else 'null'}: {e}"
        ) from e


def write_record(record: ResultRecord, destination: ResultDestination) -> None:
    """Write a record to a destination.

    Args:
        record: The record to write.
        destination: Sentinel stream name or path of the file to create.

    Raises:
        ResultFileError: If the destination cannot be opened or written.
    """
    target = os.fspath(destination)

    if target == STDOUT_SENTINEL:
        _write_record(sys.stdout, record)
    elif target == STDERR_SENTINEL:
        _write_record(sys.stderr, record)
    else:
        try:
            f = open(target, "w", encoding="utf-8", errors="backslashreplace")
        except OSError as e:
            raise ResultFileError(f"Cannot create results file '{target}': {e}") from e
        with f:
            _write_record(f, record)

    logger.debug("Wrote %s result to %s", record.outcome.value, target)


def write_resfile(outcome: Outcome, reason: str | None, destination: ResultDestination) -> None:
    """Write an outcome to the result destination.

    Failing to report a result is fatal: the process aborts with a
    diagnostic instead of returning.

    Args:
        outcome: The verdict.
        reason: Explanation; None for passed.
        destination: Sentinel stream name or path of the file to create.

    Raises:
        ValueError: If the reason does not match the outcome.
    """
    record = ResultRecord(outcome=outcome, reason=reason)
    try:
        write_record(record, destination)
    except ResultFileError as e:
        report_fatal_error("%s", e)


def read_resfile(path: str | Path) -> ResultRecord:
    """Read a result record back from a file.

    Args:
        path: Path to the result file.

    Returns:
        Parsed ResultRecord.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file does not hold exactly one valid record.
    """
    with open(path, encoding="utf-8") as f:
        lines = f.readlines()

    if len(lines) != 1:
        raise ValueError(f"Result file {path} must contain exactly one line, got {len(lines)}")

    return ResultRecord.from_line(lines[0])
