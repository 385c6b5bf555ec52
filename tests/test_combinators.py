"""Tests for generator combinators."""

from collections import Counter

import pytest

from quickprop.combinators import (
    filter_gen,
    frequency,
    map_gen,
    non_empty,
    one_of,
    recursive,
    such_that,
    sized,
    zip_gen,
)
from quickprop.errors import GeneratorExhausted, QuickpropError
from quickprop.generators import constant, int_gen, list_gen, string_gen


def _depth(value) -> int:
    if isinstance(value, list):
        return 1 + max((_depth(v) for v in value), default=0)
    return 0


class TestMap:
    def test_applies_function(self):
        gen = map_gen(int_gen(0, 10, seed=1), lambda x: x * 2)
        assert all(v % 2 == 0 and 0 <= v <= 20 for v in gen.sample(50))

    def test_fluent_map(self):
        gen = int_gen(1, 3, seed=1).map(str)
        assert set(gen.sample(50)) <= {"1", "2", "3"}


class TestFilter:
    def test_only_accepted_values(self):
        gen = filter_gen(int_gen(0, 100, seed=3), lambda x: x % 2 == 0)
        assert all(v % 2 == 0 for v in gen.sample(100))

    def test_exhausted_when_nothing_accepted(self):
        gen = filter_gen(int_gen(0, 100), lambda x: x > 1000, max_retries=25)
        with pytest.raises(GeneratorExhausted) as exc_info:
            gen.next()
        assert exc_info.value.attempts == 25
        assert isinstance(exc_info.value, QuickpropError)

    def test_draws_exactly_max_retries(self):
        calls = []

        def reject(value):
            calls.append(value)
            return False

        gen = filter_gen(int_gen(0, 10), reject, max_retries=7)
        with pytest.raises(GeneratorExhausted):
            gen.next()
        assert len(calls) == 7

    def test_such_that_alias(self):
        assert such_that is filter_gen

    def test_fluent_filter(self):
        gen = int_gen(0, 10, seed=2).filter(lambda x: x > 5)
        assert all(v > 5 for v in gen.sample(30))

    def test_rejects_zero_retries(self):
        with pytest.raises(ValueError):
            filter_gen(int_gen(0, 1), bool, max_retries=0)


class TestChoice:
    def test_one_of_uses_every_generator(self):
        gen = one_of(constant("a"), constant("b"), constant("c"), seed=5)
        assert set(gen.sample(200)) == {"a", "b", "c"}

    def test_frequency_never_selects_zero_weight(self):
        gen = frequency((0, constant("never")), (3, constant("x")), (1, constant("y")), seed=6)
        counts = Counter(gen.sample(2000))
        assert counts["never"] == 0
        assert counts["x"] > counts["y"]

    def test_frequency_proportions(self):
        gen = frequency((9, constant(1)), (1, constant(0)), seed=7)
        ones = sum(gen.sample(2000))
        assert 1650 < ones < 1950

    def test_frequency_rejects_negative_or_all_zero(self):
        with pytest.raises(ValueError):
            frequency((-1, constant(1)), (2, constant(2)))
        with pytest.raises(ValueError):
            frequency((0, constant(1)), (0, constant(2)))

    def test_one_of_requires_generators(self):
        with pytest.raises(ValueError):
            one_of()


class TestZipAndSizing:
    def test_zip_pairs_independent_values(self):
        gen = zip_gen(int_gen(0, 5), string_gen(0, 2))
        for a, b in gen.sample(30):
            assert 0 <= a <= 5
            assert len(b) <= 2

    def test_non_empty_lists(self):
        gen = non_empty(list_gen(int_gen(0, 9), 0, 3, seed=1))
        assert all(len(v) > 0 for v in gen.sample(100))

    def test_non_empty_exhausts_on_always_empty(self):
        gen = non_empty(constant(""), max_retries=5)
        with pytest.raises(GeneratorExhausted):
            gen.next()

    def test_sized_passes_size_to_factory(self):
        gen = sized(lambda n: list_gen(constant(0), n, n), 2, 4, seed=3)
        sizes = {len(v) for v in gen.sample(100)}
        assert sizes == {2, 3, 4}


class TestRecursive:
    def test_depth_is_bounded(self):
        gen = recursive(int_gen(0, 9), lambda child: list_gen(child, 1, 3), max_depth=3, seed=1)
        values = gen.sample(300)
        assert all(_depth(v) <= 3 for v in values)
        assert any(isinstance(v, int) for v in values)
        assert any(isinstance(v, list) for v in values)

    def test_depth_zero_is_base(self):
        gen = recursive(constant(1), lambda child: list_gen(child, 1, 1), max_depth=0)
        assert gen.sample(5) == [1] * 5

    def test_rejects_negative_depth(self):
        with pytest.raises(ValueError):
            recursive(constant(1), lambda child: child, max_depth=-1)

    def test_seeded_recursion_replays(self):
        def build():
            return recursive(
                int_gen(0, 9), lambda child: list_gen(child, 0, 2), max_depth=2, seed=42,
            )

        assert build().sample(20) == build().sample(20)
