"""Property runner — executes trials, classifies outcomes, shrinks failures.

State machine per check():
    Idle -> Running(trial i) -> AllPassed | FoundFailure
    FoundFailure -> Shrinking(step j) -> Minimized | StepBudgetExhausted | TimedOut

Execution is single-threaded and synchronous. The runner owns the trial
count; the shrinker only borrows the failing value and predicate.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from quickprop.config import RunnerConfig
from quickprop.errors import GeneratorExhausted, PropertyFailed
from quickprop.logging import configure_logging
from quickprop.property import Predicate, Property
from quickprop.results import (
    FailureKind,
    FailureRecord,
    ShrinkResult,
    TestResult,
    TrialOutcome,
)
from quickprop.shrinker import minimize, shrink

logger = logging.getLogger(__name__)


def run_trial(predicate: Predicate, value: Any) -> tuple[TrialOutcome, BaseException | None]:
    """Evaluate the predicate once. Exceptions classify as ERROR with the cause kept."""
    try:
        ok = predicate(value)
    except GeneratorExhausted:
        raise
    except Exception as exc:
        return TrialOutcome.ERROR, exc
    return (TrialOutcome.PASS if ok else TrialOutcome.FAIL), None


def _shrink_predicate(prop: Property) -> Predicate:
    """Predicate the shrinker minimizes against.

    A candidate the precondition rejects (or raises on) would have been
    discarded as a trial, so it counts as passing and is never adopted.
    """
    if prop.precondition is None:
        return prop.predicate
    precondition, predicate = prop.precondition, prop.predicate

    def guarded(value: Any) -> Any:
        try:
            if not precondition(value):
                return True
        except Exception as exc:
            logger.debug("Shrink candidate %r skipped: precondition raised %r", value, exc)
            return True
        return predicate(value)

    return guarded


class Runner:
    def __init__(self, config: RunnerConfig | None = None) -> None:
        self.config = config or RunnerConfig()
        configure_logging(self.config)

    def check(self, prop: Property, num_tests: int | None = None) -> TestResult:
        """Run up to num_tests trials of prop (default: config.num_tests)."""
        config = self.config
        n = config.num_tests if num_tests is None else num_tests
        if n < 0:
            raise ValueError(f"num_tests must be >= 0, got {n}")

        if config.seed is not None:
            prop.generator.reseed(config.seed)

        trial_level = logging.INFO if config.verbose else logging.DEBUG
        max_discards = n * config.max_discard_ratio
        log_extra = {"qp_property": prop.name}

        logger.info("Checking property '%s' (%d tests)", prop.name, n, extra=log_extra)
        started = time.perf_counter()

        num_passed = 0
        num_failed = 0
        num_discarded = 0
        gave_up = False
        failure: FailureRecord | None = None
        raw_value: Any = None

        while num_passed + num_failed < n:
            try:
                value = prop.generator.next()
                if prop.precondition is not None and not prop.precondition(value):
                    outcome, cause = TrialOutcome.DISCARD, None
                else:
                    outcome, cause = run_trial(prop.predicate, value)
            except GeneratorExhausted:
                logger.error(
                    "Generator exhausted while checking '%s' after %d trials",
                    prop.name, num_passed + num_failed,
                    extra=log_extra,
                )
                raise

            if outcome is TrialOutcome.DISCARD:
                num_discarded += 1
                if num_discarded > max_discards:
                    gave_up = True
                    logger.warning(
                        "Gave up on '%s' after %d discarded values",
                        prop.name, num_discarded,
                        extra=log_extra,
                    )
                    break
                continue

            trial = num_passed + num_failed + 1

            if outcome is TrialOutcome.PASS:
                num_passed += 1
                logger.log(trial_level, "Trial %d/%d passed: %r", trial, n, value)
                continue

            num_failed += 1
            logger.log(trial_level, "Trial %d/%d %s: %r", trial, n, outcome.value, value)
            if failure is None:
                kind = (
                    FailureKind.PREDICATE_EXCEPTION
                    if outcome is TrialOutcome.ERROR
                    else FailureKind.PREDICATE_FALSE
                )
                failure = FailureRecord(kind=kind, trial=trial, cause=cause)
                raw_value = value
            if not config.exhaustive:
                break

        shrunk: ShrinkResult | None = None
        if failure is not None:
            logger.info(
                "Property '%s' falsified at trial %d by %r (%s), shrinking",
                prop.name, failure.trial, raw_value, failure.kind.value,
                extra=log_extra,
            )
            shrunk = minimize(
                raw_value,
                _shrink_predicate(prop),
                max_steps=config.max_shrink_steps,
                timeout_seconds=config.shrink_timeout_seconds,
                shrinker=prop.shrinker or shrink,
                verbose=config.verbose,
            )

        duration = time.perf_counter() - started
        result = TestResult(
            passed=failure is None and not gave_up,
            property_name=prop.name,
            num_tests=num_passed + num_failed,
            num_passed=num_passed,
            num_failed=num_failed,
            num_discarded=num_discarded,
            duration_seconds=duration,
            raw_counterexample=repr(raw_value) if failure else None,
            shrunk_counterexample=repr(shrunk.value) if shrunk else None,
            raw_value=raw_value if failure else None,
            shrunk_value=shrunk.value if shrunk else None,
            shrink_steps=shrunk.steps if shrunk else 0,
            shrink_stop_reason=shrunk.stop_reason if shrunk else None,
            failure=failure,
            seed=config.seed,
            gave_up=gave_up,
        )

        if result.passed:
            logger.info(
                "Property '%s' passed %d tests",
                prop.name, result.num_passed,
                extra={**log_extra, "qp_duration_ms": round(duration * 1000, 3)},
            )
        elif shrunk is not None:
            logger.info(
                "Property '%s' failed: shrunk %s -> %s in %d steps (%s)",
                prop.name, result.raw_counterexample, result.shrunk_counterexample,
                shrunk.steps, shrunk.stop_reason.value,
                extra={
                    **log_extra,
                    "qp_duration_ms": round(duration * 1000, 3),
                    "qp_shrink_steps": shrunk.steps,
                },
            )
        return result


def check(
    prop: Property,
    num_tests: int | None = None,
    config: RunnerConfig | None = None,
) -> TestResult:
    return Runner(config).check(prop, num_tests)


def assert_property(
    prop: Property,
    num_tests: int | None = None,
    config: RunnerConfig | None = None,
) -> TestResult:
    """Check prop and raise PropertyFailed unless it passed.

    Intended for use inside pytest test functions.
    """
    result = check(prop, num_tests, config)
    if not result.passed:
        raise PropertyFailed(result)
    return result
