"""Shrinking — minimize a failing value to a small counterexample.

Two layers:
1. Candidate functions: per-type, map a value to a finite ordered list of
   "simpler" values. Each returns [] at its type's minimal element
   (0, 0.0, "", [], False), which is what makes the driver terminate.
2. The driver (minimize): greedy first-improvement local search. It
   adopts the first candidate that still fails and starts over from it,
   stopping at a local minimum, the step budget, or the time budget.

Candidate functions live in a registry keyed by type and are looked up
along the value's MRO, so bool resolves before int.
"""

from __future__ import annotations

import logging
import math
import time
from collections.abc import Callable, Iterable
from typing import Any, TypeVar

from quickprop.results import ShrinkResult, ShrinkStopReason

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Candidate function signature: value -> ordered candidates
ShrinkFn = Callable[[Any], list[Any]]

_shrinkers: dict[type, ShrinkFn] = {}

REAL_HALVING_FLOOR = 0.001
SIMPLEST_CHAR = "a"


def register_shrinker(value_type: type) -> Callable[[ShrinkFn], ShrinkFn]:
    """Register a candidate function for value_type (and its subclasses).

    Usage:
        @register_shrinker(Money)
        def shrink_money(value: Money) -> list[Money]:
            return [Money(c) for c in shrink(value.cents)]
    """

    def decorator(fn: ShrinkFn) -> ShrinkFn:
        if value_type in _shrinkers:
            raise ValueError(f"Duplicate shrinker for type={value_type.__name__!r}")
        _shrinkers[value_type] = fn
        return fn

    return decorator


def get_shrinker(value_type: type) -> ShrinkFn | None:
    for klass in value_type.__mro__:
        fn = _shrinkers.get(klass)
        if fn is not None:
            return fn
    return None


def shrink(value: Any) -> list[Any]:
    """Type-dispatched candidate function; [] for unsupported types."""
    fn = get_shrinker(type(value))
    if fn is None:
        return []
    return fn(value)


def _freeze(value: Any) -> Any:
    """Hashable key for de-duplicating candidates (type-tagged)."""
    if isinstance(value, list):
        return ("list", tuple(_freeze(v) for v in value))
    if isinstance(value, tuple):
        return ("tuple", tuple(_freeze(v) for v in value))
    try:
        hash(value)
    except TypeError:
        return ("id", id(value))
    return (type(value).__name__, value)


def _unique(candidates: Iterable[Any], current: Any) -> list[Any]:
    """Drop duplicates and anything equal to the current value, keeping order."""
    seen = {_freeze(current)}
    result = []
    for candidate in candidates:
        key = _freeze(candidate)
        if key in seen:
            continue
        seen.add(key)
        result.append(candidate)
    return result


# --- Type-specific candidate functions ---


@register_shrinker(bool)
def shrink_bool(value: bool) -> list[bool]:
    return [False] if value else []


@register_shrinker(int)
def shrink_int(value: int) -> list[int]:
    """0, then the binary-search path toward value: v - v//2, v - v//4, ..., v - 1."""
    if abs(value) <= 1:
        return []
    if value < 0:
        return [-c for c in shrink_int(-value)]

    candidates = [0]
    step = value // 2
    while step > 0:
        candidates.append(value - step)
        step //= 2
    return _unique(candidates, value)


@register_shrinker(float)
def shrink_float(value: float) -> list[float]:
    if value == 0.0:
        return []
    if not math.isfinite(value):
        return [0.0]

    candidates = [0.0, float(math.trunc(value)), float(round(value))]
    half = value / 2.0
    while abs(half) >= REAL_HALVING_FLOOR:
        candidates.append(half)
        half /= 2.0
    # round() may move away from zero (1.5 -> 2.0); only strictly closer values qualify
    return [c for c in _unique(candidates, value) if abs(c) < abs(value)]


@register_shrinker(str)
def shrink_str(value: str) -> list[str]:
    if not value:
        return []
    n = len(value)
    candidates = [""]
    candidates.extend(value[:i] for i in range(1, n))
    candidates.extend(value[:i] + value[i + 1:] for i in range(n))
    candidates.extend(
        value[:i] + SIMPLEST_CHAR + value[i + 1:]
        for i in range(n)
        if value[i] != SIMPLEST_CHAR
    )
    return _unique(candidates, value)


@register_shrinker(list)
def shrink_list(value: list) -> list[list]:
    if not value:
        return []
    n = len(value)
    candidates: list[list] = [[]]
    candidates.extend(value[:i] for i in range(1, n))
    candidates.extend(value[:i] + value[i + 1:] for i in range(n))
    # One level of structural recursion: replace a single element
    for i, element in enumerate(value):
        for smaller in shrink(element):
            candidates.append(value[:i] + [smaller] + value[i + 1:])
    return _unique(candidates, value)


def _rebuild_tuple(value: tuple, items: Iterable[Any]) -> tuple:
    """Rebuild with value's own type so NamedTuple counterexamples keep their fields."""
    make = getattr(type(value), "_make", None)
    if make is not None:
        return make(items)
    return tuple(items)


@register_shrinker(tuple)
def shrink_tuple(value: tuple) -> list[tuple]:
    if not value:
        return []
    component_candidates = [shrink(component) for component in value]

    candidates: list[tuple] = []
    for i, options in enumerate(component_candidates):
        for smaller in options:
            candidates.append(_rebuild_tuple(value, value[:i] + (smaller,) + value[i + 1:]))

    if len(value) == 2:
        firsts, seconds = component_candidates
        candidates.extend(_rebuild_tuple(value, (a, b)) for a in firsts for b in seconds)

    return _unique(candidates, value)


# --- Driver ---


def _still_fails(predicate: Callable[[Any], Any], candidate: Any) -> bool:
    """True when the candidate reproduces the failure.

    A predicate that raises while shrinking rejects the candidate.
    """
    try:
        return not predicate(candidate)
    except Exception as exc:
        logger.debug("Shrink candidate %r skipped: predicate raised %r", candidate, exc)
        return False


def minimize(
    value: T,
    predicate: Callable[[T], Any],
    *,
    max_steps: int = 1000,
    timeout_seconds: float | None = None,
    shrinker: Callable[[T], Iterable[T]] = shrink,
    clock: Callable[[], float] = time.monotonic,
    verbose: bool = False,
) -> ShrinkResult:
    """Greedily narrow a failing value until no candidate still fails.

    Args:
        value: A value for which predicate is falsy
        predicate: The property's predicate
        max_steps: Maximum number of adopted candidates
        timeout_seconds: Wall-clock budget, polled before every step
        shrinker: Candidate function (defaults to type dispatch)
        clock: Monotonic time source

    Returns:
        ShrinkResult with the minimized value, adopted steps and why it stopped
    """
    step_level = logging.INFO if verbose else logging.DEBUG
    started = clock()
    current = value
    steps = 0

    while True:
        if steps >= max_steps:
            return ShrinkResult(current, steps, ShrinkStopReason.STEP_BUDGET_EXHAUSTED)
        if timeout_seconds is not None and clock() - started >= timeout_seconds:
            logger.info("Shrinking timed out after %d steps (%.3fs budget)", steps, timeout_seconds)
            return ShrinkResult(current, steps, ShrinkStopReason.TIMED_OUT)

        for candidate in shrinker(current):
            if _still_fails(predicate, candidate):
                current = candidate
                steps += 1
                logger.log(step_level, "Shrink step %d: %r", steps, candidate)
                break
        else:
            return ShrinkResult(current, steps, ShrinkStopReason.MINIMIZED)


def shrink_failure(
    value: T,
    predicate: Callable[[T], Any],
    max_steps: int = 1000,
) -> tuple[T, int]:
    """Minimize a failing value; returns (minimized_value, steps_taken)."""
    result = minimize(value, predicate, max_steps=max_steps)
    return result.value, result.steps
