"""
Tests for the bag-based reward roller.
"""

from collections import Counter

import pytest

from boniata.pinata_core.config_loader import load_config
from boniata.pinata_core.models import (
    BoosterChance,
    BoosterKind,
    DropTable,
    Rarity,
    RewardChance,
    RewardKind,
)
from boniata.pinata_core.reward_system import RewardSystem


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def system(config):
    return RewardSystem(config=config, seed=7)


class TestBundles:
    """Test reward bundles drawn from the bag."""

    def test_bundle_count_is_clamped(self, system):
        assert len(system.roll_bundle(0)) == 1
        assert len(system.roll_bundle(-3)) == 1
        assert len(system.roll_bundle(50)) == 8

    def test_two_bag_cycles_match_weights(self, system):
        """Kinds over two full bags appear exactly twice their weight."""
        assert system.bag.cycle_size == 100

        counts = Counter()
        for _ in range(25):
            counts.update(r.kind for r in system.roll_bundle(8))

        assert counts == Counter({
            RewardKind.COINS: 104,
            RewardKind.CANDY: 44,
            RewardKind.KEYS: 28,
            RewardKind.HEARTS: 16,
            RewardKind.BOOSTERS: 8,
        })

    def test_amounts_within_table_ranges(self, system):
        ranges = {e.kind: (e.min_amount, e.max_amount) for e in system.table.rewards}

        for _ in range(20):
            for reward in system.roll_bundle(8):
                low, high = ranges[reward.kind]
                assert low <= reward.amount <= high

    def test_totals_track_rewards(self, system):
        coins = candy = keys = 0
        for _ in range(10):
            for reward in system.roll_bundle(8):
                if reward.kind in (RewardKind.COINS, RewardKind.TICKETS):
                    coins += reward.amount
                elif reward.kind == RewardKind.CANDY:
                    candy += reward.amount
                elif reward.kind == RewardKind.KEYS:
                    keys += reward.amount

        assert system.coins_total == coins
        assert system.candy_total == candy
        assert system.keys_total == keys

    def test_last_rewards(self, system):
        rewards = system.roll_bundle(3)
        assert system.last_rewards == rewards

    def test_empty_table_yields_zero_coins(self, config):
        system = RewardSystem(config=config, table=DropTable.of([]), seed=1)

        rewards = system.roll_bundle(2)

        assert [(r.kind, r.amount) for r in rewards] == [(RewardKind.COINS, 0)] * 2

    def test_deterministic_with_seed(self, config):
        s1 = RewardSystem(config=config, seed=99)
        s2 = RewardSystem(config=config, seed=99)

        r1 = [(r.kind, r.amount) for r in s1.roll_bundle(8)]
        r2 = [(r.kind, r.amount) for r in s2.roll_bundle(8)]

        assert r1 == r2

    def test_set_table_starts_fresh_bag(self, system):
        system.roll_bundle(8)
        table = DropTable.of([
            RewardChance(RewardKind.TICKETS, 1, 1, Rarity.RARE, weight=3),
        ])

        system.set_table(table)

        assert system.bag.remaining == 3
        rewards = system.roll_bundle(3)
        assert all(r.kind == RewardKind.TICKETS for r in rewards)
        assert system.table == table

    def test_reset_all(self, system):
        system.roll_bundle(8)
        system.roll_booster_bundle(2)
        system.roll_spin_bonus()

        system.reset_all()

        assert system.last_rewards == []
        assert system.last_boosters == []
        assert system.last_spin is None
        assert system.coins_total == 0
        assert system.candy_total == 0
        assert system.keys_total == 0
        assert system.bag.remaining == system.bag.cycle_size


class TestBoosterBundles:
    """Test independent booster draws."""

    def test_count_is_clamped(self, system):
        assert len(system.roll_booster_bundle(0)) == 1
        assert len(system.roll_booster_bundle(10)) == 4

    def test_seconds_within_ranges(self, system):
        ranges = {e.kind: (e.min_seconds, e.max_seconds) for e in system.table.boosters}

        for _ in range(25):
            for booster in system.roll_booster_bundle(4):
                low, high = ranges[booster.kind]
                assert low <= booster.seconds <= high

    def test_empty_booster_list_uses_fallback(self, config):
        system = RewardSystem(config=config, table=DropTable.of([]), seed=1)

        booster = system.roll_booster_bundle(1)[0]

        assert booster.kind == BoosterKind.BONUS_DROP
        assert booster.seconds == 10
        assert booster.rarity == Rarity.UNCOMMON

    def test_zero_weights_still_draw(self, config):
        table = DropTable.of([], [
            BoosterChance(BoosterKind.MAGNET, 5, 5, Rarity.RARE, weight=0),
        ])
        system = RewardSystem(config=config, table=table, seed=1)

        boosters = system.roll_booster_bundle(4)

        assert all(b.kind == BoosterKind.MAGNET for b in boosters)
        assert system.last_boosters == boosters


class TestSpinAndCrates:
    """Test spin bonuses and crate guarantees."""

    def test_spin_bonus_values(self, system):
        allowed = {(1.25, 10), (1.5, 9), (1.75, 8), (2.0, 7)}

        for _ in range(50):
            spin = system.roll_spin_bonus()
            assert (spin.multiplier, spin.seconds) in allowed

        assert system.last_spin == spin

    @pytest.mark.parametrize("rarity,expected", [
        (Rarity.COMMON, None),
        (Rarity.UNCOMMON, None),
        (Rarity.RARE, RewardKind.CANDY),
        (Rarity.EPIC, RewardKind.KEYS),
        (Rarity.LEGENDARY, RewardKind.KEYS),
    ])
    def test_crate_guarantee(self, system, rarity, expected):
        crate = system.roll_crate("  Gold Crate ", rarity)

        assert crate.guaranteed == expected
        assert crate.name == "Gold Crate"
        assert crate.rarity == rarity
        assert crate.table == system.table

    def test_crates_have_unique_ids(self, system):
        a = system.roll_crate("A", Rarity.RARE)
        b = system.roll_crate("A", Rarity.RARE)
        assert a.id != b.id
