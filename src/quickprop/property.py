"""Property — an immutable binding of a name, a generator and a predicate."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from quickprop.generators import Generator

Predicate = Callable[[Any], Any]


@dataclass(frozen=True)
class Property:
    """A named invariant over a generator's domain.

    The predicate passes when it returns a truthy value. An optional
    precondition discards values it rejects instead of testing them, and
    an optional shrinker replaces type-dispatched shrinking.
    """

    name: str
    generator: Generator[Any]
    predicate: Predicate
    precondition: Predicate | None = None
    shrinker: Callable[[Any], Iterable[Any]] | None = None

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Property name must be non-empty")
        if not callable(self.predicate):
            raise TypeError(f"predicate must be callable, got {type(self.predicate).__name__}")


def make_property(
    name: str,
    generator: Generator[Any],
    predicate: Predicate,
    *,
    precondition: Predicate | None = None,
    shrinker: Callable[[Any], Iterable[Any]] | None = None,
) -> Property:
    return Property(
        name=name,
        generator=generator,
        predicate=predicate,
        precondition=precondition,
        shrinker=shrinker,
    )
