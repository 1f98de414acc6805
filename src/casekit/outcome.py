"""Outcome primitives for use inside a test body.

All functions here operate on the test case currently being run and raise
StateError when called outside TestCase.run().

Terminal primitives (pass_, fail, fail_requirement, skip, require*) write the
result record and exit the process; they never return. Non-fatal primitives
(fail_check, fail_nonfatal, check*) report the problem on stderr and return,
and the run fails once the body finishes.

Example:
    from casekit import outcome

    def body(tc):
        outcome.require(os.path.exists("/etc/passwd"), "no passwd file")
        outcome.check(os.getuid() == 0, "not running as root")
        if sys.platform == "win32":
            outcome.skip("Not supported on %s", sys.platform)

Reasons follow the logging convention: the format is expanded with the %
operator only when arguments are given. Without arguments it is recorded
verbatim, so fail("100% done") records "100% done" and fail("100%% done")
records "100%% done". Write "%%" only when passing arguments.
"""

from __future__ import annotations

import errno
import inspect
import logging
from typing import Any, Callable, NoReturn

from casekit.context import ExecutionContext, current_context
from casekit.progs import require_prog
from casekit.reason import format_reason

logger = logging.getLogger(__name__)

FailFunc = Callable[[ExecutionContext, str], None]

__all__ = [
    "check",
    "check_errno",
    "check_oserror",
    "fail",
    "fail_check",
    "fail_nonfatal",
    "fail_requirement",
    "pass_",
    "require",
    "require_errno",
    "require_oserror",
    "require_prog",
    "skip",
]


def _caller_location(depth: int = 2) -> tuple[str, int]:
    """Return file and line of the frame depth levels above this one."""
    frame = inspect.currentframe()
    try:
        for _ in range(depth):
            if frame is None:
                break
            frame = frame.f_back
        if frame is None:
            return "<unknown>", 0
        return frame.f_code.co_filename, frame.f_lineno
    finally:
        del frame


def _record_check_failure(ctx: ExecutionContext, reason: str) -> None:
    ctx.record_check_failure(reason)


def _record_failure(ctx: ExecutionContext, reason: str) -> None:
    ctx.record_failure(reason)


def pass_() -> NoReturn:
    """Record a pass and exit."""
    current_context().record_pass()


def fail(fmt: str, *args: Any) -> NoReturn:
    """Record a failure and exit.

    Args:
        fmt: printf-style reason.
        *args: Reason arguments.
    """
    ctx = current_context()
    ctx.record_failure(format_reason(None, 0, fmt, *args))


def fail_requirement(file: str, line: int, fmt: str, *args: Any) -> NoReturn:
    """Record a failure tagged with a source location and exit."""
    ctx = current_context()
    ctx.record_failure(format_reason(file, line, fmt, *args))


def fail_check(file: str, line: int, fmt: str, *args: Any) -> None:
    """Report a failed check tagged with a source location and continue."""
    ctx = current_context()
    ctx.record_check_failure(format_reason(file, line, fmt, *args))


def fail_nonfatal(fmt: str, *args: Any) -> None:
    """Report a failed check and continue.

    Args:
        fmt: printf-style reason.
        *args: Reason arguments.
    """
    ctx = current_context()
    ctx.record_check_failure(format_reason(None, 0, fmt, *args))


def skip(fmt: str, *args: Any) -> NoReturn:
    """Record a skip and exit.

    Args:
        fmt: printf-style reason.
        *args: Reason arguments.
    """
    ctx = current_context()
    ctx.record_skip(format_reason(None, 0, fmt, *args))


def _errno_test(
    ctx: ExecutionContext,
    file: str,
    line: int,
    exp_errno: int,
    actual_errno: int,
    expr_str: str,
    expr_result: bool,
    fail_func: FailFunc,
) -> None:
    if expr_result:
        if exp_errno != actual_errno:
            fail_func(
                ctx,
                format_reason(
                    file, line, "Expected errno %d, got %d, in %s", exp_errno, actual_errno, expr_str
                ),
            )
    else:
        fail_func(ctx, format_reason(file, line, "Expected true value in %s", expr_str))


def check_errno(
    file: str, line: int, exp_errno: int, actual_errno: int, expr_str: str, expr_result: bool
) -> None:
    """Check that an expression held and left the expected errno behind.

    Args:
        file: Source file of the check.
        line: Source line of the check.
        exp_errno: Expected errno value.
        actual_errno: errno observed after evaluating the expression.
        expr_str: Source text of the expression.
        expr_result: What the expression evaluated to.
    """
    _errno_test(
        current_context(), file, line, exp_errno, actual_errno, expr_str, expr_result, _record_check_failure
    )


def require_errno(
    file: str, line: int, exp_errno: int, actual_errno: int, expr_str: str, expr_result: bool
) -> None:
    """Like check_errno(), but a violation fails the test case immediately."""
    _errno_test(
        current_context(), file, line, exp_errno, actual_errno, expr_str, expr_result, _record_failure
    )


def _describe_call(func: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]) -> str:
    name = getattr(func, "__qualname__", repr(func))
    params = [repr(a) for a in args]
    params.extend(f"{k}={v!r}" for k, v in kwargs.items())
    return f"{name}({', '.join(params)})"


def _oserror_test(
    fail_func: FailFunc, exp_errno: int, func: Callable[..., Any], args: tuple[Any, ...], kwargs: dict[str, Any]
) -> None:
    ctx = current_context()
    file, line = _caller_location(3)
    expr_str = _describe_call(func, args, kwargs)
    try:
        func(*args, **kwargs)
    except OSError as e:
        actual = e.errno if e.errno is not None else 0
        logger.debug("%s raised errno %d (%s)", expr_str, actual, errno.errorcode.get(actual, "?"))
        _errno_test(ctx, file, line, exp_errno, actual, expr_str, True, fail_func)
    else:
        fail_func(ctx, format_reason(file, line, "Expected OSError with errno %d from %s", exp_errno, expr_str))


def check_oserror(exp_errno: int, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
    """Check that a call raises OSError with the given errno.

    Example:
        check_oserror(errno.ENOENT, os.stat, "/nonexistent")
    """
    _oserror_test(_record_check_failure, exp_errno, func, args, kwargs)


def require_oserror(exp_errno: int, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
    """Like check_oserror(), but a violation fails the test case immediately."""
    _oserror_test(_record_failure, exp_errno, func, args, kwargs)


def check(condition: object, fmt: str | None = None, *args: Any) -> bool:
    """Check a condition, reporting a non-fatal failure if it is false.

    The caller's file and line are recorded in the reason.

    Args:
        condition: Value tested for truth.
        fmt: Optional printf-style reason; defaults to a generic message.
        *args: Reason arguments.

    Returns:
        The truth value of condition.
    """
    if condition:
        return True
    ctx = current_context()
    file, line = _caller_location()
    ctx.record_check_failure(format_reason(file, line, fmt or "Check failed", *args))
    return False


def require(condition: object, fmt: str | None = None, *args: Any) -> None:
    """Require a condition, failing the test case immediately if it is false."""
    if condition:
        return
    ctx = current_context()
    file, line = _caller_location()
    ctx.record_failure(format_reason(file, line, fmt or "Requirement failed", *args))
