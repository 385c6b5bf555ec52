"""Value objects produced by a property run.

TestResult is consumed opaquely by reporters; to_dict() is the only
rendering the core provides.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class TrialOutcome(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    ERROR = "error"
    DISCARD = "discard"


class FailureKind(str, Enum):
    PREDICATE_FALSE = "predicate_false"
    PREDICATE_EXCEPTION = "predicate_exception"


class ShrinkStopReason(str, Enum):
    MINIMIZED = "minimized"
    STEP_BUDGET_EXHAUSTED = "step_budget_exhausted"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class FailureRecord:
    """The first failing trial of a run."""

    kind: FailureKind
    trial: int  # 1-based trial index
    cause: BaseException | None = None

    @property
    def cause_repr(self) -> str | None:
        return repr(self.cause) if self.cause is not None else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "trial": self.trial,
            "cause": self.cause_repr,
        }


@dataclass(frozen=True)
class ShrinkResult:
    value: Any
    steps: int
    stop_reason: ShrinkStopReason


@dataclass(frozen=True)
class TestResult:
    """Outcome of checking one property."""

    __test__ = False  # not a pytest test class

    passed: bool
    property_name: str
    num_tests: int
    num_passed: int
    num_failed: int
    duration_seconds: float
    num_discarded: int = 0
    raw_counterexample: str | None = None
    shrunk_counterexample: str | None = None
    raw_value: Any = None
    shrunk_value: Any = None
    shrink_steps: int = 0
    shrink_stop_reason: ShrinkStopReason | None = None
    failure: FailureRecord | None = None
    seed: int | None = None
    gave_up: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "passed": self.passed,
            "property_name": self.property_name,
            "num_tests": self.num_tests,
            "num_passed": self.num_passed,
            "num_failed": self.num_failed,
            "num_discarded": self.num_discarded,
            "raw_counterexample": self.raw_counterexample,
            "shrunk_counterexample": self.shrunk_counterexample,
            "shrink_steps": self.shrink_steps,
            "shrink_stop_reason": (
                self.shrink_stop_reason.value if self.shrink_stop_reason else None
            ),
            "failure": self.failure.to_dict() if self.failure else None,
            "duration_ms": round(self.duration_seconds * 1000, 3),
            "seed": self.seed,
            "gave_up": self.gave_up,
        }
