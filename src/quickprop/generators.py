"""Primitive and composite generators.

A generator owns a private random.Random stream and its domain
parameters. Every call to next() draws a fresh value from the declared
domain; consecutive pulls are independent. Composite generators pull
from their components, and reseed() walks the whole tree so a composed
generator replays from one integer seed.
"""

from __future__ import annotations

import math
import random
import string
from collections.abc import Callable, Iterator, Sequence, Set as AbstractSet
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")
U = TypeVar("U")

ALPHA = string.ascii_letters
NUMERIC = string.digits
ALPHANUMERIC = string.ascii_letters + string.digits
LOWERCASE = string.ascii_lowercase


class Distribution(str, Enum):
    UNIFORM = "uniform"
    NORMAL = "normal"
    EXPONENTIAL = "exponential"


class Generator(Generic[T]):
    """Pull-based producer of pseudorandom values."""

    def __init__(self, seed: int | None = None) -> None:
        self.rng = random.Random(seed)

    def next(self) -> T:
        raise NotImplementedError

    def children(self) -> tuple[Generator[Any], ...]:
        """Component generators pulled by this one (empty for primitives)."""
        return ()

    def reseed(self, seed: int | None) -> None:
        """Reseed this stream, then each child from the reseeded stream."""
        self.rng.seed(seed)
        for child in self.children():
            child.reseed(self.rng.getrandbits(64))

    def sample(self, n: int) -> list[T]:
        return [self.next() for _ in range(n)]

    def __iter__(self) -> Iterator[T]:
        while True:
            yield self.next()

    def map(self, fn: Callable[[T], U]) -> Generator[U]:
        from quickprop.combinators import map_gen

        return map_gen(self, fn)

    def filter(self, pred: Callable[[T], bool], max_retries: int = 100) -> Generator[T]:
        from quickprop.combinators import filter_gen

        return filter_gen(self, pred, max_retries=max_retries)


class IntGen(Generator[int]):
    """Uniform integers in [min_value, max_value]."""

    def __init__(self, min_value: int, max_value: int, *, seed: int | None = None) -> None:
        if min_value > max_value:
            raise ValueError(f"min_value {min_value} > max_value {max_value}")
        super().__init__(seed)
        self.min_value = min_value
        self.max_value = max_value

    def next(self) -> int:
        if self.min_value == self.max_value:
            return self.min_value
        return self.rng.randint(self.min_value, self.max_value)

    def __repr__(self) -> str:
        return f"IntGen({self.min_value}, {self.max_value})"


class RealGen(Generator[float]):
    """Reals in [min_value, max_value] under a selectable distribution.

    NORMAL uses the Box-Muller transform centred on the midpoint with a
    standard deviation of range/6, clamped into range. EXPONENTIAL uses
    inverse-CDF sampling from the lower bound with a mean offset of
    range/4, clamped at the upper bound.
    """

    def __init__(
        self,
        min_value: float,
        max_value: float,
        distribution: Distribution = Distribution.UNIFORM,
        *,
        seed: int | None = None,
    ) -> None:
        if not (math.isfinite(min_value) and math.isfinite(max_value)):
            raise ValueError("real bounds must be finite")
        if min_value > max_value:
            raise ValueError(f"min_value {min_value} > max_value {max_value}")
        super().__init__(seed)
        self.min_value = float(min_value)
        self.max_value = float(max_value)
        self.distribution = Distribution(distribution)

    def next(self) -> float:
        lo, hi = self.min_value, self.max_value
        if lo == hi:
            return lo
        span = hi - lo

        if self.distribution is Distribution.NORMAL:
            # 1 - random() keeps u1 in (0, 1] so log() is defined
            u1 = 1.0 - self.rng.random()
            u2 = self.rng.random()
            z = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
            value = (lo + hi) / 2.0 + z * (span / 6.0)
        elif self.distribution is Distribution.EXPONENTIAL:
            u = self.rng.random()
            value = lo - math.log(1.0 - u) * (span / 4.0)
        else:
            value = lo + self.rng.random() * span

        return max(lo, min(hi, value))

    def __repr__(self) -> str:
        return f"RealGen({self.min_value}, {self.max_value}, {self.distribution.value})"


class BoolGen(Generator[bool]):
    def __init__(self, true_probability: float = 0.5, *, seed: int | None = None) -> None:
        if not 0.0 <= true_probability <= 1.0:
            raise ValueError(f"true_probability must be in [0, 1], got {true_probability}")
        super().__init__(seed)
        self.true_probability = true_probability

    def next(self) -> bool:
        return self.rng.random() < self.true_probability


class StringGen(Generator[str]):
    """Strings of uniform length in [min_len, max_len] over an alphabet."""

    def __init__(
        self,
        min_len: int,
        max_len: int,
        alphabet: str = LOWERCASE,
        *,
        seed: int | None = None,
    ) -> None:
        if min_len < 0:
            raise ValueError(f"min_len must be >= 0, got {min_len}")
        if min_len > max_len:
            raise ValueError(f"min_len {min_len} > max_len {max_len}")
        if not alphabet and max_len > 0:
            raise ValueError("alphabet must be non-empty when max_len > 0")
        super().__init__(seed)
        self.min_len = min_len
        self.max_len = max_len
        self.alphabet = alphabet

    def next(self) -> str:
        length = self.rng.randint(self.min_len, self.max_len)
        return "".join(self.rng.choice(self.alphabet) for _ in range(length))

    def __repr__(self) -> str:
        return f"StringGen({self.min_len}, {self.max_len}, alphabet={self.alphabet!r})"


class TupleGen(Generator[tuple]):
    """Fixed-arity tuples; each component is pulled independently."""

    def __init__(self, *gens: Generator[Any], seed: int | None = None) -> None:
        if not gens:
            raise ValueError("tuple_gen requires at least one component generator")
        super().__init__(seed)
        self.gens = gens

    def children(self) -> tuple[Generator[Any], ...]:
        return self.gens

    def next(self) -> tuple:
        return tuple(g.next() for g in self.gens)


class ListGen(Generator[list[T]]):
    """Lists of uniform length in [min_size, max_size] with i.i.d. elements."""

    def __init__(
        self,
        element_gen: Generator[T],
        min_size: int = 0,
        max_size: int = 10,
        *,
        seed: int | None = None,
    ) -> None:
        if min_size < 0:
            raise ValueError(f"min_size must be >= 0, got {min_size}")
        if min_size > max_size:
            raise ValueError(f"min_size {min_size} > max_size {max_size}")
        super().__init__(seed)
        self.element_gen = element_gen
        self.min_size = min_size
        self.max_size = max_size

    def children(self) -> tuple[Generator[Any], ...]:
        return (self.element_gen,)

    def next(self) -> list[T]:
        size = self.rng.randint(self.min_size, self.max_size)
        return [self.element_gen.next() for _ in range(size)]


class ConstantGen(Generator[T]):
    def __init__(self, value: T) -> None:
        super().__init__(None)
        self.value = value

    def next(self) -> T:
        return self.value

    def __repr__(self) -> str:
        return f"ConstantGen({self.value!r})"


class ElementsGen(Generator[T]):
    """Uniform pick from a fixed, finite, non-empty set of choices.

    Sets are sorted by repr so a seeded stream replays across processes
    regardless of hash randomization.
    """

    def __init__(self, choices: Sequence[T] | AbstractSet[T], *, seed: int | None = None) -> None:
        if not choices:
            raise ValueError("elements requires at least one choice")
        super().__init__(seed)
        if isinstance(choices, AbstractSet):
            self.choices = tuple(sorted(choices, key=repr))
        else:
            self.choices = tuple(choices)

    def next(self) -> T:
        return self.rng.choice(self.choices)


# --- Factories ---


def int_gen(min_value: int, max_value: int, *, seed: int | None = None) -> IntGen:
    return IntGen(min_value, max_value, seed=seed)


def nat_gen(max_value: int = 1000, *, seed: int | None = None) -> IntGen:
    return IntGen(0, max_value, seed=seed)


def positive_int_gen(max_value: int = 1000, *, seed: int | None = None) -> IntGen:
    return IntGen(1, max_value, seed=seed)


def real_gen(
    min_value: float = 0.0,
    max_value: float = 1.0,
    distribution: Distribution = Distribution.UNIFORM,
    *,
    seed: int | None = None,
) -> RealGen:
    return RealGen(min_value, max_value, distribution, seed=seed)


def bool_gen(true_probability: float = 0.5, *, seed: int | None = None) -> BoolGen:
    return BoolGen(true_probability, seed=seed)


def string_gen(
    min_len: int = 0,
    max_len: int = 20,
    alphabet: str = LOWERCASE,
    *,
    seed: int | None = None,
) -> StringGen:
    return StringGen(min_len, max_len, alphabet, seed=seed)


def alpha_string_gen(min_len: int = 0, max_len: int = 20, *, seed: int | None = None) -> StringGen:
    return StringGen(min_len, max_len, ALPHA, seed=seed)


def numeric_string_gen(min_len: int = 0, max_len: int = 20, *, seed: int | None = None) -> StringGen:
    return StringGen(min_len, max_len, NUMERIC, seed=seed)


def alphanumeric_string_gen(
    min_len: int = 0, max_len: int = 20, *, seed: int | None = None
) -> StringGen:
    return StringGen(min_len, max_len, ALPHANUMERIC, seed=seed)


def tuple_gen(*gens: Generator[Any], seed: int | None = None) -> TupleGen:
    return TupleGen(*gens, seed=seed)


def list_gen(
    element_gen: Generator[T],
    min_size: int = 0,
    max_size: int = 10,
    *,
    seed: int | None = None,
) -> ListGen[T]:
    return ListGen(element_gen, min_size, max_size, seed=seed)


def constant(value: T) -> ConstantGen[T]:
    return ConstantGen(value)


def elements(choices: Sequence[T] | AbstractSet[T], *, seed: int | None = None) -> ElementsGen[T]:
    return ElementsGen(choices, seed=seed)
