"""
Reward System
=============

Bag-based reward roller for bulk and bonus openings (crates, bundles, spins).

Independent of BoardState: results are informational and must be applied by
the caller, e.g. through ``BoardState.apply_reward``.
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional

from boniata.pinata_core.config_loader import PinataConfig, get_config
from boniata.pinata_core.models import (
    Booster,
    DropTable,
    LootCrate,
    Rarity,
    Reward,
    RewardKind,
    SpinBonus,
)
from boniata.pinata_core.rng import RewardBag, roll_band, roll_range

logger = logging.getLogger(__name__)


class RewardSystem:
    """
    Rolls rewards, boosters, spin bonuses and crates from a drop table.

    Rewards are pulled from a weighted shuffle bag, so no entry can appear
    more than ``weight`` times before the bag is reshuffled. Booster bundles
    and spins use independent draws.

    Running totals:
    - coins_total: coins and tickets
    - candy_total, keys_total
    - boosters and hearts are not totalled
    """

    def __init__(
        self,
        config: Optional[PinataConfig] = None,
        table: Optional[DropTable] = None,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize reward system.

        Args:
            config: Pinata configuration. Uses default if None.
            table: Active drop table. Uses the configured default table if None.
            rng: Random source. Seeded from ``seed`` if None.
            seed: Seed for the default random source.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rng = rng if rng is not None else random.Random(seed)
        self._table = table if table is not None else config.default_drop_table
        self._bag = RewardBag(
            self._reward_weights(),
            rng=self._rng,
            fallback_size=config.reward_system.fallback_bag_size
        )

        self._last_rewards: List[Reward] = []
        self._last_boosters: List[Booster] = []
        self._last_spin: Optional[SpinBonus] = None
        self._coins_total: int = 0
        self._candy_total: int = 0
        self._keys_total: int = 0

    @property
    def table(self) -> DropTable:
        return self._table

    @property
    def bag(self) -> RewardBag:
        """The shuffle bag (for inspection)."""
        return self._bag

    @property
    def last_rewards(self) -> List[Reward]:
        return list(self._last_rewards)

    @property
    def last_boosters(self) -> List[Booster]:
        return list(self._last_boosters)

    @property
    def last_spin(self) -> Optional[SpinBonus]:
        return self._last_spin

    @property
    def coins_total(self) -> int:
        return self._coins_total

    @property
    def candy_total(self) -> int:
        return self._candy_total

    @property
    def keys_total(self) -> int:
        return self._keys_total

    def set_table(self, table: DropTable) -> None:
        """Swap the active table and start a fresh bag."""
        self._table = table
        self._bag.set_weights(self._reward_weights())

    def reset_all(self) -> None:
        """Clear last results and totals, then reshuffle the bag."""
        self._last_rewards = []
        self._last_boosters = []
        self._last_spin = None
        self._coins_total = 0
        self._candy_total = 0
        self._keys_total = 0
        self._bag.refill()

    def reseed(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)
        self._bag.reseed(self._rng)

    def roll_bundle(self, count: int) -> List[Reward]:
        """
        Pull ``count`` rewards (clamped to [1, max_bundle]) from the bag.

        Args:
            count: Requested number of rewards.

        Returns:
            The rolled rewards, in pull order.
        """
        total = min(max(1, count), self._config.reward_system.max_bundle)
        rewards = []
        for _ in range(total):
            reward = self._roll_single_reward()
            rewards.append(reward)
            self._apply_to_totals(reward)

        self._last_rewards = rewards
        return list(rewards)

    def roll_booster_bundle(self, count: int) -> List[Booster]:
        """
        Draw ``count`` boosters (clamped to [1, max_booster_bundle]).

        Draws are independent weighted picks; they do not deplete anything.
        """
        total = min(max(1, count), self._config.reward_system.max_booster_bundle)
        boosters = [self._roll_single_booster() for _ in range(total)]
        self._last_boosters = boosters
        return list(boosters)

    def roll_spin_bonus(self) -> SpinBonus:
        band = roll_band(self._config.spin_bonus, self._rng)
        self._last_spin = SpinBonus(multiplier=band.multiplier, seconds=band.seconds)
        return self._last_spin

    def roll_crate(self, name: str, rarity: Rarity) -> LootCrate:
        """
        Build a crate over the current table.

        Epic and above guarantee keys, rare guarantees candy. Contents are not
        rolled here.
        """
        if rarity >= Rarity.EPIC:
            guaranteed = RewardKind.KEYS
        elif rarity >= Rarity.RARE:
            guaranteed = RewardKind.CANDY
        else:
            guaranteed = None

        crate = LootCrate(name=name, rarity=rarity, guaranteed=guaranteed, table=self._table)
        logger.debug(f"Crate '{crate.name}' ({rarity.label}) guaranteed={guaranteed}")
        return crate

    def _reward_weights(self) -> List[int]:
        return [entry.weight for entry in self._table.rewards]

    def _roll_single_reward(self) -> Reward:
        rewards = self._table.rewards
        if not rewards:
            # nothing to resolve an index against
            return Reward(kind=RewardKind.COINS, amount=0, rarity=Rarity.COMMON)

        index = self._bag.draw()
        info = rewards[min(max(0, index), len(rewards) - 1)]
        amount = roll_range(self._rng, info.min_amount, info.max_amount)
        return Reward(kind=info.kind, amount=amount, rarity=info.rarity)

    def _roll_single_booster(self) -> Booster:
        entries = self._table.boosters
        if not entries:
            rs = self._config.reward_system
            return Booster(
                kind=rs.fallback_booster_kind,
                seconds=rs.fallback_booster_seconds,
                rarity=rs.fallback_booster_rarity
            )

        weighted: List[int] = []
        for index, entry in enumerate(entries):
            weighted.extend([index] * entry.weight)
        if not weighted:
            weighted = list(range(len(entries)))

        info = entries[weighted[self._rng.randrange(len(weighted))]]
        seconds = roll_range(self._rng, info.min_seconds, info.max_seconds)
        return Booster(kind=info.kind, seconds=seconds, rarity=info.rarity)

    def _apply_to_totals(self, reward: Reward) -> None:
        if reward.kind in (RewardKind.COINS, RewardKind.TICKETS):
            self._coins_total += reward.amount
        elif reward.kind == RewardKind.CANDY:
            self._candy_total += reward.amount
        elif reward.kind == RewardKind.KEYS:
            self._keys_total += reward.amount
