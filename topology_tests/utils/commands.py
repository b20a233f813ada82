"""Blocking helpers for evaluating deferred executions."""

import logging
import time
import typing as tp

from topology_tests.utils import configuration
from topology_tests.utils import execution

LOGGER = logging.getLogger(__name__)

T = tp.TypeVar("T")


class ExecutionError(RuntimeError):
    pass


class ExecutionTimeoutError(ExecutionError):
    pass


def wait_for(seconds: float) -> None:
    """Block for the given number of seconds."""
    LOGGER.debug(f"Waiting for {seconds}s.")
    time.sleep(seconds)


def exec_execution(to_exec: execution.Execution[T]) -> T:
    """Evaluate the execution once and return its value."""
    result = to_exec.execute()
    if not result.ok:
        msg = f"Execution '{to_exec.label}' failed: {result.error}"
        raise ExecutionError(msg) from result.error
    return result.get()


def wait_until(
    to_exec: execution.Execution[T],
    *,
    timeout: float | None = None,
    interval: float | None = None,
) -> T:
    """Evaluate the execution repeatedly until it succeeds or the timeout expires.

    A `Predicate` that evaluates to `False` counts as not succeeded yet.
    """
    timeout = configuration.WAIT_TIMEOUT if timeout is None else timeout
    interval = configuration.POLL_INTERVAL if interval is None else interval
    end_time = time.monotonic() + timeout
    repeat = 0

    while True:
        if repeat:
            LOGGER.warning(
                f"Execution '{to_exec.label}' not successful yet, "
                f"repeating for the {repeat} time in {interval}s."
            )
            wait_for(interval)

        result = to_exec.execute()
        if result.ok:
            if not isinstance(to_exec, execution.Predicate) or result.value:
                return result.get()
            err_str = "predicate is not satisfied"
        else:
            err_str = str(result.error)

        if time.monotonic() + interval > end_time:
            msg = f"Execution '{to_exec.label}' didn't succeed within {timeout}s: {err_str}"
            raise ExecutionTimeoutError(msg) from result.error

        repeat += 1
