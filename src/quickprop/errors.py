"""Exception types raised by quickprop.

Predicate failures are not exceptions: they are recorded on the
TestResult. Only conditions that invalidate a run are raised.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from quickprop.results import TestResult


class QuickpropError(Exception):
    """Base class for quickprop errors."""


class GeneratorExhausted(QuickpropError):
    """A filtering generator rejected every draw within its retry budget."""

    def __init__(self, *, attempts: int, message: str | None = None) -> None:
        super().__init__(
            message or f"Generator exhausted after {attempts} rejected draws"
        )
        self.attempts = attempts


class PropertyFailed(AssertionError):
    """Raised by assert_property when a property does not hold."""

    def __init__(self, result: TestResult) -> None:
        self.result = result
        if result.gave_up:
            message = (
                f"Property '{result.property_name}' gave up after "
                f"{result.num_discarded} discarded trials"
            )
        else:
            message = (
                f"Property '{result.property_name}' failed after "
                f"{result.num_tests} tests: counterexample {result.shrunk_counterexample} "
                f"(raw {result.raw_counterexample}, {result.shrink_steps} shrink steps)"
            )
        super().__init__(message)
