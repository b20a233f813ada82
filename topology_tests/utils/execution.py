"""Deferred executions that can be evaluated any number of times.

An `Execution` wraps a zero-argument operation. Nothing runs when the execution is created or
composed, the operation runs fresh every time the execution is evaluated. This makes it possible
to poll the same execution until it succeeds, e.g. to wait for a cluster node to become ready.
"""

import dataclasses
import logging
import typing as tp

LOGGER = logging.getLogger(__name__)

T = tp.TypeVar("T")
U = tp.TypeVar("U")


@dataclasses.dataclass(frozen=True)
class ExecutionResult(tp.Generic[T]):
    """Outcome of a single evaluation of an `Execution`."""

    label: str
    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def get(self) -> T:
        """Return the value, or re-raise the error captured during the evaluation."""
        if self.error is not None:
            raise self.error
        return tp.cast(T, self.value)


class Execution(tp.Generic[T]):
    """Lazy, re-evaluable operation with a label used in diagnostics."""

    def __init__(self, operation: tp.Callable[[], T], label: str = "") -> None:
        self._operation = operation
        self.label = label

    def execute(self) -> ExecutionResult[T]:
        """Run the operation and capture its value or its failure."""
        try:
            value = self._operation()
        except Exception as exc:
            LOGGER.debug(f"Execution '{self.label}' failed: {exc}")
            return ExecutionResult(label=self.label, error=exc)
        return ExecutionResult(label=self.label, value=value)

    def result(self) -> T:
        """Run the operation and return its value, failures are raised."""
        return self._operation()

    def __call__(self) -> T:
        return self.result()

    def map(self, fn: tp.Callable[[T], U]) -> "Execution[U]":
        """Return new execution that transforms the value of this one."""
        operation = self._operation
        return Execution(lambda: fn(operation()), label=self.label)

    def labeled(self, label: str) -> tp.Self:
        return type(self)(self._operation, label=label)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.label!r})"


class Predicate(Execution[bool]):
    """Boolean execution, re-evaluated every time it is checked."""

    def is_satisfied(self) -> bool:
        return bool(self.result())

    def __and__(self, other: "Predicate") -> "Predicate":
        return Predicate(
            lambda: self.is_satisfied() and other.is_satisfied(),
            label=f"({self.label} and {other.label})",
        )

    def __or__(self, other: "Predicate") -> "Predicate":
        return Predicate(
            lambda: self.is_satisfied() or other.is_satisfied(),
            label=f"({self.label} or {other.label})",
        )

    def __invert__(self) -> "Predicate":
        return Predicate(lambda: not self.is_satisfied(), label=f"not {self.label}")


def predicate(label: str = "") -> tp.Callable[[tp.Callable[[], bool]], Predicate]:
    """Turn a zero-argument function into a `Predicate` - decorator."""

    def decorator(func: tp.Callable[[], bool]) -> Predicate:
        return Predicate(func, label=label or func.__name__)

    return decorator
