"""Pytest configuration and shared fixtures for genpass tests."""

import random

import pytest
from genpass import getPatternParser
from genpass.random_source import RandomSource


class SeededRandomSource(RandomSource):
    """Deterministic source so tests can repeat draws."""

    def __init__(self, seed=0):
        self._random = random.Random(seed)

    def _below(self, bound):
        return self._random.randrange(bound)


class ScriptedRandomSource(RandomSource):
    """Returns offsets from a fixed script, for exact control over draws."""

    def __init__(self, offsets):
        self.offsets = list(offsets)
        self.calls = []

    def _below(self, bound):
        offset = self.offsets.pop(0)
        self.calls.append(bound)
        assert 0 <= offset < bound
        return offset


@pytest.fixture
def parser():
    """Create a parser instance for testing."""
    return getPatternParser()


@pytest.fixture
def strict_parser():
    """Create a parser that rejects unrecognized characters."""
    return getPatternParser(strict=True)


@pytest.fixture
def rng():
    """A seeded random source."""
    return SeededRandomSource(1234)


@pytest.fixture
def scripted():
    """Factory for scripted random sources."""
    return ScriptedRandomSource
