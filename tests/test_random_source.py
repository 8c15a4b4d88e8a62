import pytest

from random_source import (
    RandomSource,
    SeededRandomSource,
    SystemRandomSource,
    make_random_source,
)


class FixedSource(RandomSource):
    def __init__(self, value):
        self.value = value

    def next(self):
        return self.value


def test_seeded_source_is_reproducible():
    a, b = SeededRandomSource(42), SeededRandomSource(42)
    assert [a.next() for _ in range(5)] == [b.next() for _ in range(5)]


def test_index_stays_in_range():
    assert FixedSource(0.0).index(4) == 0
    assert FixedSource(0.99).index(4) == 3
    assert FixedSource(1.0).index(4) == 3


def test_index_needs_positive_length():
    with pytest.raises(ValueError):
        FixedSource(0.5).index(0)


def test_make_random_source():
    assert isinstance(make_random_source(), SystemRandomSource)
    seeded = make_random_source(3)
    assert isinstance(seeded, SeededRandomSource)
    assert 0.0 <= seeded.next() < 1.0
