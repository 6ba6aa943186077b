"""
Tests for level configuration clamping and the level deck cursor.
"""

import pytest

from boniata.pinata_core.config_loader import load_config
from boniata.pinata_core.level_deck import LevelConfig, LevelDeck


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def deck(config):
    deck = LevelDeck(config=config)
    deck.rebuild(7)
    return deck


class TestLevelConfig:
    """Test per-level tuning."""

    def test_out_of_range_values_are_clamped(self):
        """Invalid inputs are corrected, never rejected."""
        level = LevelConfig(
            level_id=-3,
            title="  Odd  ",
            pinata_health=1.0,
            base_tap_power=0.0,
            crit_chance=5.0,
            crit_multiplier=0.5,
            streak_window_ms=10,
            max_streak_bonus=-1.0,
            bonus_drops=-2,
            booster_slots=-1,
            target_coins=-5,
            target_candy=-5,
            target_keys=-5
        )

        assert level.level_id == 1
        assert level.title == "Odd"
        assert level.pinata_health == 5.0
        assert level.base_tap_power == 0.05
        assert level.crit_chance == 1.0
        assert level.crit_multiplier == 1.0
        assert level.streak_window_ms == 150
        assert level.max_streak_bonus == 0.0
        assert level.bonus_drops == 0
        assert level.booster_slots == 0
        assert (level.target_coins, level.target_candy, level.target_keys) == (0, 0, 0)

    def test_presets(self, config):
        warm_up = LevelConfig.warm_up(1, config)
        crimson = LevelConfig.crimson(5, config)

        assert warm_up.title == "Warm Up"
        assert warm_up.pinata_health == 70.0
        assert crimson.title == "Crimson"
        assert crimson.pinata_health == 275.0
        assert crimson.level_id == 5

    def test_unknown_preset_raises(self, config):
        with pytest.raises(ValueError):
            LevelConfig.preset("molten", 1, config)

    def test_sample_set(self, config):
        levels = LevelConfig.sample_set(config)

        assert [lvl.level_id for lvl in levels] == [1, 2, 3, 4, 5]
        assert [lvl.title for lvl in levels] == [
            "Warm Up", "Brisk", "Fierce", "Night Run", "Crimson"
        ]

    def test_session_config(self, config):
        session = LevelConfig.fierce(3, config).to_session_config()

        assert session.base_tap_power == pytest.approx(0.88)
        assert session.base_crit_chance == pytest.approx(0.10)
        assert session.base_crit_multiplier == pytest.approx(2.35)
        assert session.streak_window_ms == 610
        assert session.tap_cooldown_ms == 0


class TestLevelDeck:
    """Test the clamped level cursor."""

    def test_rebuild_order(self, deck):
        """Rotation deals presets by level id modulo five."""
        assert len(deck) == 7
        assert [lvl.level_id for lvl in deck.levels] == [1, 2, 3, 4, 5, 6, 7]
        assert [lvl.title for lvl in deck.levels] == [
            "Warm Up", "Brisk", "Fierce", "Night Run", "Crimson", "Warm Up", "Brisk"
        ]
        assert deck.current_index == 0

    def test_rebuild_minimum_one(self, deck):
        deck.rebuild(0)
        assert len(deck) == 1
        assert deck.current().title == "Warm Up"

    def test_rebuild_resets_cursor(self, deck):
        deck.advance()
        deck.advance()
        deck.rebuild(3)
        assert deck.current_index == 0

    def test_advance_clamps(self, deck):
        for _ in range(10):
            deck.advance()

        assert deck.current_index == 6
        assert deck.current().level_id == 7

    def test_rewind_clamps(self, deck):
        deck.rewind()
        assert deck.current_index == 0

    def test_set_index_clamps(self, deck):
        deck.set_index(99)
        assert deck.current_index == 6

        deck.set_index(-4)
        assert deck.current_index == 0

    def test_empty_deck(self, config):
        deck = LevelDeck(levels=[], config=config)

        deck.advance()
        deck.rewind()
        deck.set_index(3)

        assert len(deck) == 0
        assert deck.current_index == 0
        current = deck.current()
        assert current.title == "Warm Up"
        assert current.level_id == 1

    def test_default_deck_is_sample_set(self, config):
        deck = LevelDeck(config=config)
        assert len(deck) == 5
        assert deck.current().title == "Warm Up"
