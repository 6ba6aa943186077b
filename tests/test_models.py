"""
Tests for the value types.
"""

from boniata.pinata_core.config_loader import load_config
from boniata.pinata_core.models import (
    Booster,
    BoosterChance,
    BoosterKind,
    DropTable,
    Effect,
    EffectKind,
    Rarity,
    Reward,
    RewardChance,
    RewardKind,
    SessionConfig,
    SpinBonus,
    TapEvent,
)


class TestRarity:
    """Rarity tiers are ordered."""

    def test_ordering(self):
        assert Rarity.COMMON < Rarity.UNCOMMON < Rarity.RARE < Rarity.EPIC < Rarity.LEGENDARY

    def test_label(self):
        assert Rarity.LEGENDARY.label == "Legendary"


class TestValueClamps:
    """Constructors correct out-of-range input."""

    def test_reward_amount_non_negative(self):
        assert Reward(kind=RewardKind.COINS, amount=-5, rarity=Rarity.COMMON).amount == 0

    def test_non_finite_values_are_corrected(self):
        """NaN and infinity fall back to the field minimum instead of raising."""
        assert Reward(kind=RewardKind.COINS, amount=float("nan"), rarity=Rarity.COMMON).amount == 0
        assert Booster(kind=BoosterKind.MAGNET, seconds=float("inf"), rarity=Rarity.RARE).seconds == 1
        assert TapEvent(timestamp=0.0, power=float("nan"), is_critical=True).power == 0.0
        assert SpinBonus(multiplier=float("-inf"), seconds=float("nan")).multiplier == 1.0

    def test_booster_seconds_at_least_one(self):
        assert Booster(kind=BoosterKind.SHIELD, seconds=0, rarity=Rarity.EPIC).seconds == 1

    def test_effect_seconds_at_least_one(self):
        effect = Effect(kind=EffectKind.TAP_POWER_UP, value=2, seconds=-1, rarity=Rarity.RARE)
        assert effect.seconds == 1
        assert effect.value == 2.0

    def test_tap_event_power_non_negative(self):
        assert TapEvent(timestamp=1.0, power=-3.0, is_critical=False).power == 0.0

    def test_chance_ranges(self):
        reward = RewardChance(RewardKind.CANDY, 9, 4, Rarity.UNCOMMON, weight=-2)
        booster = BoosterChance(BoosterKind.MAGNET, 0, 0, Rarity.RARE, weight=3)

        assert (reward.min_amount, reward.max_amount, reward.weight) == (9, 9, 0)
        assert (booster.min_seconds, booster.max_seconds) == (1, 1)

    def test_spin_bonus(self):
        spin = SpinBonus(multiplier=0.5, seconds=0)
        assert (spin.multiplier, spin.seconds) == (1.0, 1)

    def test_session_config(self):
        session = SessionConfig(
            base_tap_power=0.0,
            base_crit_chance=2.0,
            base_crit_multiplier=0.2,
            tap_cooldown_ms=-5,
            streak_window_ms=20,
            max_streak_bonus=-0.3
        )

        assert session.base_tap_power == 0.01
        assert session.base_crit_chance == 1.0
        assert session.base_crit_multiplier == 1.0
        assert session.tap_cooldown_ms == 0
        assert session.streak_window_ms == 100
        assert session.max_streak_bonus == 0.0


class TestIdentity:
    """Generated entities are unique."""

    def test_rewards_get_unique_ids(self):
        a = Reward(kind=RewardKind.KEYS, amount=1, rarity=Rarity.RARE)
        b = Reward(kind=RewardKind.KEYS, amount=1, rarity=Rarity.RARE)

        assert a.id != b.id
        assert a != b

    def test_titles(self):
        assert Reward(kind=RewardKind.COINS, amount=12, rarity=Rarity.COMMON).title == "Coins x12"
        assert Booster(kind=BoosterKind.FRENZY, seconds=8, rarity=Rarity.LEGENDARY).title == "Frenzy (8s)"


class TestDropTable:

    def test_of_stores_tuples(self):
        table = DropTable.of([RewardChance(RewardKind.COINS, 1, 2, Rarity.COMMON, weight=1)])

        assert isinstance(table.rewards, tuple)
        assert table.boosters == ()

    def test_vivid_default(self):
        session = SessionConfig.vivid_default(load_config())

        assert session.base_tap_power == 1.0
        assert session.streak_window_ms == 650
        assert session.tap_cooldown_ms == 30
