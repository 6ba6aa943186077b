"""
Tests for the tap engine: cooldowns, heavy taps, bursts and round control.
"""

import pytest

from boniata.pinata_core.config_loader import load_config
from boniata.pinata_core.level_deck import LevelConfig
from boniata.pinata_core.models import Booster, BoosterKind, Rarity, Reward, RewardKind
from boniata.pinata_core.tap_engine import TapEngine


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def engine(config, clock):
    return TapEngine(level=LevelConfig.warm_up(1, config), config=config, clock=clock, seed=3)


def tiny_level():
    """Level whose pinata pops within a handful of taps."""
    return LevelConfig(
        level_id=9,
        title="Tiny",
        pinata_health=5.0,
        base_tap_power=1.0,
        crit_chance=0.0,
        crit_multiplier=2.0,
        streak_window_ms=600,
        max_streak_bonus=0.5,
        bonus_drops=0,
        booster_slots=0,
        target_coins=0,
        target_candy=0,
        target_keys=0
    )


class TestSetup:
    """Test engine construction and level application."""

    def test_starts_active_on_level(self, engine):
        assert engine.is_active
        assert engine.level.title == "Warm Up"
        assert engine.state.pinata_max_health == 70.0

    def test_default_level_is_fallback(self, config, clock):
        engine = TapEngine(config=config, clock=clock)

        assert engine.level.level_id == 1
        assert engine.level.title == "Warm Up"

    def test_apply_level(self, config, engine):
        engine.tap()
        engine.apply_level(LevelConfig.crimson(5, config))

        assert engine.is_active
        assert engine.level.level_id == 5
        assert engine.state.pinata_max_health == 275.0
        assert engine.state.taps_total == 0

    def test_cooldowns_follow_window(self, engine):
        # warm up window is 720ms
        assert engine.tap_cooldown() == pytest.approx(0.108)
        assert engine.tap_cooldown(0.25) == pytest.approx(0.18)


class TestTap:
    """Test cooldown-gated single taps."""

    def test_first_tap_accepted(self, engine):
        assert engine.tap() == 1
        assert engine.state.taps_total == 1

    def test_tap_within_cooldown_dropped(self, engine, clock):
        engine.tap()
        clock.now += 0.05

        assert engine.tap() == 0
        assert engine.state.taps_total == 1

    def test_tap_after_cooldown_accepted(self, engine, clock):
        engine.tap()
        clock.now += 0.2

        assert engine.tap() == 1
        assert engine.state.taps_total == 2
        assert engine.state.streak_count == 2

    def test_heavy_tap_forwards_two(self, engine):
        assert engine.heavy_tap(2.0) == 2
        assert engine.state.taps_total == 2

    def test_heavy_tap_without_multiplier(self, engine):
        assert engine.heavy_tap(1.0) == 1

    def test_heavy_cooldown_is_longer(self, engine, clock):
        engine.heavy_tap(2.0)
        clock.now += 0.15

        assert engine.heavy_tap(2.0) == 0
        assert engine.tap() == 1


class TestBurst:
    """Test uncooled bursts."""

    def test_burst_is_clamped(self, engine):
        assert engine.burst(100) == 8
        assert engine.burst(0) == 1
        assert engine.state.taps_total == 9

    def test_burst_ignores_cooldown(self, engine):
        engine.tap()
        assert engine.burst(3) == 3

    def test_burst_stops_at_pop(self, config, clock):
        engine = TapEngine(level=tiny_level(), config=config, clock=clock, seed=1)

        forwarded = engine.burst(8)

        # 1.02 + 1.04 + 1.06 + 1.08 + 1.10 crosses 5.0 on the fifth tap
        assert forwarded == 5
        assert engine.state.pinata_health == 0.0
        assert engine.is_active is False

    def test_popped_round_ignores_taps(self, config, clock):
        engine = TapEngine(level=tiny_level(), config=config, clock=clock, seed=1)
        engine.burst(8)
        clock.now += 1.0

        assert engine.tap() == 0
        assert engine.heavy_tap(2.0) == 0
        assert engine.burst(3) == 0


class TestRound:
    """Test drops, injection and round control."""

    def test_drop_bonus(self, engine):
        reward = engine.drop_bonus()

        assert reward is not None
        assert engine.state.last_reward == reward

    def test_inject_reward(self, engine):
        reward = Reward(kind=RewardKind.COINS, amount=12, rarity=Rarity.COMMON)

        assert engine.inject_reward(reward) is True
        assert engine.state.coins == 12

    def test_inject_booster(self, engine):
        booster = Booster(kind=BoosterKind.MAGNET, seconds=12, rarity=Rarity.RARE)

        assert engine.inject_booster(booster) is True
        assert engine.state.active_boosters == (booster,)

    def test_end_round_blocks_verbs(self, engine):
        engine.end_round()

        assert engine.is_active is False
        assert engine.tap() == 0
        assert engine.drop_bonus() is None
        assert engine.inject_reward(Reward(kind=RewardKind.KEYS, amount=1, rarity=Rarity.RARE)) is False
        assert engine.state.keys == 0

    def test_restart(self, engine, clock):
        engine.burst(8)
        engine.inject_reward(Reward(kind=RewardKind.COINS, amount=5, rarity=Rarity.COMMON))
        engine.end_round()

        engine.restart()

        assert engine.is_active
        assert engine.state.taps_total == 0
        assert engine.state.coins == 0
        assert engine.state.pinata_health == 70.0
        # no cooldown carried over from the previous round
        assert engine.tap() == 1
