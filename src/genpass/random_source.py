"""Uniform random draws backed by a cryptographically secure generator."""

from __future__ import annotations

from typing import Sequence, TypeVar

import Crypto.Random.random

T = TypeVar("T")


class RandomSource:
    """Capability object handed to every generation and evaluation call.

    Subclasses may override :meth:`_below` to change the entropy source.
    """

    def _below(self, bound: int) -> int:
        return Crypto.Random.random.randrange(bound)

    def rand_range(self, low: int, high: int) -> int:
        """Return an integer ``i`` with ``low <= i < high``.

        Raises:
            ValueError: If ``high <= low``.
        """
        if high <= low:
            raise ValueError(f"empty range [{low}, {high})")
        return low + self._below(high - low)

    def sample(self, items: Sequence[T]) -> T:
        """Return one element of ``items`` chosen uniformly."""
        return items[self.rand_range(0, len(items))]


_default_source = RandomSource()


def default_source() -> RandomSource:
    """Return the process-wide source."""
    return _default_source
