"""
RNG - Weighted Shuffle-Bag and Threshold Bands
==============================================

Two sampling strategies used by the pinata core:

- ``RewardBag``: weighted shuffle bag. Each entry contributes ``weight``
  copies of its index; the bag is shuffled and drained, then refilled.
  No index can appear more than ``weight`` times per bag cycle.
- ``roll_band``: memoryless percentage roll over cumulative threshold bands.
"""

from __future__ import annotations

import random
from typing import List, Optional, Sequence, TypeVar

from boniata.pinata_core.config_loader import BAND_ROLL_MAX

Band = TypeVar("Band")


def roll_band(bands: Sequence[Band], rng: random.Random) -> Band:
    """
    Pick a cumulative threshold band with a uniform roll in [1, 100].

    Args:
        bands: Bands with an ascending ``upto`` attribute.
        rng: Random source.

    Returns:
        The first band whose ``upto`` covers the roll, or the last band.
    """
    roll = rng.randint(1, BAND_ROLL_MAX)
    for band in bands:
        if roll <= band.upto:
            return band
    return bands[-1]


def roll_range(rng: random.Random, low: int, high: int) -> int:
    """Uniform integer in [low, high]; ``low`` when the range is a single value."""
    if low >= high:
        return low
    return rng.randint(low, high)


class RewardBag:
    """
    Weighted shuffle bag over table entry indices.

    When the bag is exhausted, it refills and reshuffles.

    This reduces variance compared to pure random while maintaining variability.
    """

    def __init__(
        self,
        weights: Sequence[int],
        rng: Optional[random.Random] = None,
        fallback_size: int = 10
    ):
        """
        Initialize the bag.

        Args:
            weights: Weight per entry index. Negative weights count as zero.
            rng: Random source. A fresh unseeded one if None.
            fallback_size: Copies of index 0 used when every weight is zero.
        """
        self._rng = rng if rng is not None else random.Random()
        self._fallback_size = max(1, fallback_size)
        self._template: List[int] = []
        self._bag: List[int] = []
        self.set_weights(weights)

    def set_weights(self, weights: Sequence[int]) -> None:
        """Replace the weights and start a fresh bag."""
        self._template = []
        for index, weight in enumerate(weights):
            self._template.extend([index] * max(0, int(weight)))

        if not self._template:
            self._template = [0] * self._fallback_size

        self.refill()

    def refill(self) -> None:
        """Refill and shuffle the bag."""
        self._bag = self._template.copy()
        self._rng.shuffle(self._bag)

    def draw(self) -> int:
        """Consume and return the next index, refilling first if empty."""
        if not self._bag:
            self.refill()
        return self._bag.pop()

    def peek(self, count: int = 1) -> List[int]:
        """Upcoming indices in the current bag, without consuming."""
        return list(reversed(self._bag[-count:])) if count > 0 else []

    def reseed(self, rng: random.Random) -> None:
        """Swap the random source and reshuffle."""
        self._rng = rng
        self.refill()

    @property
    def remaining(self) -> int:
        """Indices left before the next refill."""
        return len(self._bag)

    @property
    def cycle_size(self) -> int:
        """Number of draws in one full bag."""
        return len(self._template)
