"""
Level Configuration & Deck
==========================

Immutable per-level tuning and a clamped cursor over an ordered list of levels.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from boniata.pinata_core.config_loader import LevelPreset, PinataConfig, get_config
from boniata.pinata_core.models import SessionConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LevelConfig:
    """
    Tuning for one level.

    Every field is clamped into its documented range on construction;
    invalid inputs are corrected, never rejected.
    """
    level_id: int
    title: str
    pinata_health: float
    base_tap_power: float
    crit_chance: float
    crit_multiplier: float
    streak_window_ms: int
    max_streak_bonus: float
    bonus_drops: int
    booster_slots: int
    target_coins: int
    target_candy: int
    target_keys: int

    def __post_init__(self):
        clamped = {
            "level_id": max(1, int(self.level_id)),
            "title": str(self.title).strip(),
            "pinata_health": max(5.0, float(self.pinata_health)),
            "base_tap_power": max(0.05, float(self.base_tap_power)),
            "crit_chance": min(max(0.0, float(self.crit_chance)), 1.0),
            "crit_multiplier": max(1.0, float(self.crit_multiplier)),
            "streak_window_ms": max(150, int(self.streak_window_ms)),
            "max_streak_bonus": max(0.0, float(self.max_streak_bonus)),
            "bonus_drops": max(0, int(self.bonus_drops)),
            "booster_slots": max(0, int(self.booster_slots)),
            "target_coins": max(0, int(self.target_coins)),
            "target_candy": max(0, int(self.target_candy)),
            "target_keys": max(0, int(self.target_keys)),
        }
        for name, value in clamped.items():
            object.__setattr__(self, name, value)

    def to_session_config(self) -> SessionConfig:
        """Session tuning a board runs under while playing this level."""
        return SessionConfig(
            base_tap_power=self.base_tap_power,
            base_crit_chance=self.crit_chance,
            base_crit_multiplier=self.crit_multiplier,
            tap_cooldown_ms=0,
            streak_window_ms=self.streak_window_ms,
            max_streak_bonus=self.max_streak_bonus,
        )

    @classmethod
    def from_preset(cls, preset: LevelPreset, level_id: int) -> "LevelConfig":
        return cls(
            level_id=level_id,
            title=preset.title,
            pinata_health=preset.pinata_health,
            base_tap_power=preset.base_tap_power,
            crit_chance=preset.crit_chance,
            crit_multiplier=preset.crit_multiplier,
            streak_window_ms=preset.streak_window_ms,
            max_streak_bonus=preset.max_streak_bonus,
            bonus_drops=preset.bonus_drops,
            booster_slots=preset.booster_slots,
            target_coins=preset.target_coins,
            target_candy=preset.target_candy,
            target_keys=preset.target_keys,
        )

    @classmethod
    def preset(
        cls,
        key: str,
        level_id: int,
        config: Optional[PinataConfig] = None
    ) -> "LevelConfig":
        """
        Build a level from a named preset.

        Args:
            key: Preset key, e.g. "warm_up".
            level_id: Level id to stamp on the result.
            config: Configuration holding the presets. Uses default if None.
        """
        if config is None:
            config = get_config()
        return cls.from_preset(config.levels.get_preset(key), level_id)

    @classmethod
    def warm_up(cls, level_id: int, config: Optional[PinataConfig] = None) -> "LevelConfig":
        return cls.preset("warm_up", level_id, config)

    @classmethod
    def brisk(cls, level_id: int, config: Optional[PinataConfig] = None) -> "LevelConfig":
        return cls.preset("brisk", level_id, config)

    @classmethod
    def fierce(cls, level_id: int, config: Optional[PinataConfig] = None) -> "LevelConfig":
        return cls.preset("fierce", level_id, config)

    @classmethod
    def night_run(cls, level_id: int, config: Optional[PinataConfig] = None) -> "LevelConfig":
        return cls.preset("night_run", level_id, config)

    @classmethod
    def crimson(cls, level_id: int, config: Optional[PinataConfig] = None) -> "LevelConfig":
        return cls.preset("crimson", level_id, config)

    @classmethod
    def sample_set(cls, config: Optional[PinataConfig] = None) -> List["LevelConfig"]:
        """The fixed five-level catalogue, ids 1..5."""
        if config is None:
            config = get_config()
        return [
            cls.preset(key, index, config)
            for index, key in enumerate(config.levels.sample_set, start=1)
        ]


class LevelDeck:
    """
    Ordered levels with a cursor.

    Cursor moves clamp into [0, count - 1]; they never wrap and never raise.
    """

    def __init__(
        self,
        levels: Optional[Sequence[LevelConfig]] = None,
        config: Optional[PinataConfig] = None
    ):
        """
        Initialize deck.

        Args:
            levels: Initial levels. Uses the sample set if None.
            config: Configuration for presets. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        if levels is None:
            levels = LevelConfig.sample_set(config)
        self._levels: Tuple[LevelConfig, ...] = tuple(levels)
        self._index: int = 0

    def __len__(self) -> int:
        return len(self._levels)

    @property
    def levels(self) -> Tuple[LevelConfig, ...]:
        return self._levels

    @property
    def current_index(self) -> int:
        return self._index

    def current(self) -> LevelConfig:
        """Level under the cursor; the fallback preset when the deck is empty."""
        if not self._levels:
            return LevelConfig.preset(self._config.levels.fallback, 1, self._config)
        idx = min(max(0, self._index), len(self._levels) - 1)
        return self._levels[idx]

    def set_index(self, value: int) -> None:
        if not self._levels:
            self._index = 0
            return
        self._index = min(max(0, value), len(self._levels) - 1)

    def advance(self) -> None:
        if not self._levels:
            self._index = 0
            return
        self._index = min(self._index + 1, len(self._levels) - 1)

    def rewind(self) -> None:
        if not self._levels:
            self._index = 0
            return
        self._index = max(self._index - 1, 0)

    def rebuild(self, count: int) -> None:
        """
        Regenerate a cyclic deck of ``count`` levels (at least one).

        Level ``i`` (1-based) uses the rotation preset at ``i % len(rotation)``,
        so with the default rotation ids 1..5 deal Warm Up, Brisk, Fierce,
        Night Run, Crimson and then repeat. The cursor goes back to 0.
        """
        rotation = self._config.levels.rotation
        total = max(1, count)
        self._levels = tuple(
            LevelConfig.preset(rotation[i % len(rotation)], i, self._config)
            for i in range(1, total + 1)
        )
        self._index = 0
        logger.debug(f"Rebuilt level deck with {total} levels")
