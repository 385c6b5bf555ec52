"""Combinators — build new generators from existing ones.

Combinators never inspect the internals of the generators they wrap;
they only pull from them. Choice-based combinators (one_of, frequency,
sized) own a stream of their own for the choice itself.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sized
from typing import Any, TypeVar

from quickprop.errors import GeneratorExhausted
from quickprop.generators import Generator, TupleGen

logger = logging.getLogger(__name__)

T = TypeVar("T")
U = TypeVar("U")

DEFAULT_MAX_RETRIES = 100


class MappedGen(Generator[U]):
    def __init__(self, gen: Generator[T], fn: Callable[[T], U]) -> None:
        super().__init__(None)
        self.gen = gen
        self.fn = fn

    def children(self) -> tuple[Generator[Any], ...]:
        return (self.gen,)

    def next(self) -> U:
        return self.fn(self.gen.next())


class FilteredGen(Generator[T]):
    """Draws until the predicate accepts, at most max_retries times."""

    def __init__(self, gen: Generator[T], pred: Callable[[T], bool], max_retries: int) -> None:
        if max_retries < 1:
            raise ValueError(f"max_retries must be >= 1, got {max_retries}")
        super().__init__(None)
        self.gen = gen
        self.pred = pred
        self.max_retries = max_retries

    def children(self) -> tuple[Generator[Any], ...]:
        return (self.gen,)

    def next(self) -> T:
        for _ in range(self.max_retries):
            value = self.gen.next()
            if self.pred(value):
                return value
        logger.warning("Filter rejected %d consecutive draws from %r", self.max_retries, self.gen)
        raise GeneratorExhausted(attempts=self.max_retries)


class OneOfGen(Generator[T]):
    """Weighted choice among generators; weight 0 is never selected."""

    def __init__(self, weighted: list[tuple[float, Generator[T]]], *, seed: int | None = None) -> None:
        if not weighted:
            raise ValueError("at least one generator is required")
        for weight, _ in weighted:
            if weight < 0:
                raise ValueError(f"weights must be >= 0, got {weight}")
        if sum(w for w, _ in weighted) <= 0:
            raise ValueError("total weight must be greater than zero")
        super().__init__(seed)
        self.weights = [w for w, _ in weighted]
        self.gens = [g for _, g in weighted]

    def children(self) -> tuple[Generator[Any], ...]:
        return tuple(self.gens)

    def next(self) -> T:
        chosen = self.rng.choices(self.gens, weights=self.weights)[0]
        return chosen.next()


class SizedGen(Generator[T]):
    """Draws a size, then pulls one value from factory(size)."""

    def __init__(
        self,
        factory: Callable[[int], Generator[T]],
        min_size: int,
        max_size: int,
        *,
        seed: int | None = None,
    ) -> None:
        if min_size < 0 or min_size > max_size:
            raise ValueError(f"invalid size range [{min_size}, {max_size}]")
        super().__init__(seed)
        self.factory = factory
        self.min_size = min_size
        self.max_size = max_size

    def next(self) -> T:
        size = self.rng.randint(self.min_size, self.max_size)
        gen = self.factory(size)
        gen.reseed(self.rng.getrandbits(64))
        return gen.next()


def map_gen(gen: Generator[T], fn: Callable[[T], U]) -> Generator[U]:
    """Output is fn(gen.next()); the output domain is not validated."""
    return MappedGen(gen, fn)


def filter_gen(
    gen: Generator[T],
    pred: Callable[[T], bool],
    max_retries: int = DEFAULT_MAX_RETRIES,
) -> Generator[T]:
    """Keep only values accepted by pred.

    Raises GeneratorExhausted from next() when max_retries consecutive
    draws are rejected.
    """
    return FilteredGen(gen, pred, max_retries)


such_that = filter_gen


def zip_gen(*gens: Generator[Any]) -> Generator[tuple]:
    return TupleGen(*gens)


def one_of(*gens: Generator[T], seed: int | None = None) -> Generator[T]:
    return OneOfGen([(1, g) for g in gens], seed=seed)


def frequency(*weighted: tuple[float, Generator[T]], seed: int | None = None) -> Generator[T]:
    """Choose among generators proportionally to their weights."""
    return OneOfGen(list(weighted), seed=seed)


def non_empty(gen: Generator[T], max_retries: int = DEFAULT_MAX_RETRIES) -> Generator[T]:
    def _is_non_empty(value: Sized) -> bool:
        return len(value) > 0

    return FilteredGen(gen, _is_non_empty, max_retries)


def sized(
    factory: Callable[[int], Generator[T]],
    min_size: int = 0,
    max_size: int = 10,
    *,
    seed: int | None = None,
) -> Generator[T]:
    return SizedGen(factory, min_size, max_size, seed=seed)


def recursive(
    base: Generator[T],
    build_fn: Callable[[Generator[T]], Generator[T]],
    max_depth: int = 3,
    *,
    seed: int | None = None,
) -> Generator[T]:
    """Depth-bounded recursive generator.

    Level 0 is ``base``; level k picks uniformly between ``base`` and
    ``build_fn(level k-1)``. No value nests deeper than max_depth
    applications of build_fn.

    Usage:
        trees = recursive(int_gen(0, 9), lambda child: list_gen(child, 0, 3))
    """
    if max_depth < 0:
        raise ValueError(f"max_depth must be >= 0, got {max_depth}")

    level: Generator[T] = base
    for _ in range(max_depth):
        level = one_of(base, build_fn(level))
    if seed is not None:
        level.reseed(seed)
    return level
