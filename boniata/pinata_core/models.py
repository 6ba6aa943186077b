"""
Domain Model
============

Value types shared by every pinata subsystem: rarity tiers, reward and
booster kinds, the records produced by rolls and taps, and drop tables.

All records are immutable and clamp their numeric fields on construction,
so an out-of-range value is corrected once and never checked again.
"""

from __future__ import annotations

import math
import uuid
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Optional, Sequence, Tuple


class Rarity(IntEnum):
    """Ordered rarity tiers. Compare directly: ``rarity >= Rarity.EPIC``."""
    COMMON = 0
    UNCOMMON = 1
    RARE = 2
    EPIC = 3
    LEGENDARY = 4

    @property
    def label(self) -> str:
        return self.name.capitalize()


class RewardKind(str, Enum):
    COINS = "coins"
    CANDY = "candy"
    BOOSTERS = "boosters"
    HEARTS = "hearts"
    KEYS = "keys"
    TICKETS = "tickets"


class BoosterKind(str, Enum):
    DOUBLE_TAP = "doubleTap"
    MAGNET = "magnet"
    SHIELD = "shield"
    FRENZY = "frenzy"
    BONUS_DROP = "bonusDrop"


class EffectKind(str, Enum):
    """Reserved effect kinds. No roller produces these yet."""
    TAP_POWER_UP = "tapPowerUp"
    TAP_SPEED_UP = "tapSpeedUp"
    CRIT_CHANCE_UP = "critChanceUp"
    CRIT_POWER_UP = "critPowerUp"
    BONUS_MULTIPLIER_UP = "bonusMultiplierUp"
    DAMAGE_REDUCTION = "damageReduction"


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(low, value), high)


def _finite(value, fallback: float) -> float:
    """``value`` as a float, or ``fallback`` when it is NaN or infinite."""
    value = float(value)
    return value if math.isfinite(value) else fallback


@dataclass(frozen=True)
class Reward:
    """A concrete reward. Every instance gets its own id."""
    kind: RewardKind
    amount: int
    rarity: Rarity
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self):
        object.__setattr__(self, "amount", max(0, int(_finite(self.amount, 0))))

    @property
    def title(self) -> str:
        return f"{self.kind.value.capitalize()} x{self.amount}"


@dataclass(frozen=True)
class Booster:
    """A timed modifier. Seconds are informational; nothing counts them down."""
    kind: BoosterKind
    seconds: int
    rarity: Rarity
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self):
        object.__setattr__(self, "seconds", max(1, int(_finite(self.seconds, 1))))

    @property
    def title(self) -> str:
        return f"{self.kind.value.capitalize()} ({self.seconds}s)"


@dataclass(frozen=True)
class Effect:
    kind: EffectKind
    value: float
    seconds: int
    rarity: Rarity
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self):
        object.__setattr__(self, "value", _finite(self.value, 0.0))
        object.__setattr__(self, "seconds", max(1, int(_finite(self.seconds, 1))))


@dataclass(frozen=True)
class TapEvent:
    """One accepted tap."""
    timestamp: float
    power: float
    is_critical: bool
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self):
        object.__setattr__(self, "power", max(0.0, _finite(self.power, 0.0)))


@dataclass(frozen=True)
class TapSnapshot:
    """Read-only rollup of a board's tap statistics."""
    taps: int
    total_damage: float
    criticals: int
    streak_best: int
    last_tap_at: float

    def __post_init__(self):
        object.__setattr__(self, "taps", max(0, int(self.taps)))
        object.__setattr__(self, "total_damage", max(0.0, float(self.total_damage)))
        object.__setattr__(self, "criticals", max(0, int(self.criticals)))
        object.__setattr__(self, "streak_best", max(0, int(self.streak_best)))
        object.__setattr__(self, "last_tap_at", max(0.0, float(self.last_tap_at)))


@dataclass(frozen=True)
class SessionConfig:
    """Tap tuning a board runs under."""
    base_tap_power: float
    base_crit_chance: float
    base_crit_multiplier: float
    tap_cooldown_ms: int
    streak_window_ms: int
    max_streak_bonus: float

    def __post_init__(self):
        object.__setattr__(self, "base_tap_power", max(0.01, float(self.base_tap_power)))
        object.__setattr__(self, "base_crit_chance", _clamp(float(self.base_crit_chance), 0.0, 1.0))
        object.__setattr__(self, "base_crit_multiplier", max(1.0, float(self.base_crit_multiplier)))
        object.__setattr__(self, "tap_cooldown_ms", max(0, int(self.tap_cooldown_ms)))
        object.__setattr__(self, "streak_window_ms", max(100, int(self.streak_window_ms)))
        object.__setattr__(self, "max_streak_bonus", max(0.0, float(self.max_streak_bonus)))

    @classmethod
    def vivid_default(cls, config=None) -> "SessionConfig":
        """
        Default session tuning from the ``session`` section of the config.

        Args:
            config: PinataConfig to read. Uses the cached config if None.
        """
        from boniata.pinata_core.config_loader import get_config

        if config is None:
            config = get_config()
        s = config.session
        return cls(
            base_tap_power=s.base_tap_power,
            base_crit_chance=s.base_crit_chance,
            base_crit_multiplier=s.base_crit_multiplier,
            tap_cooldown_ms=s.tap_cooldown_ms,
            streak_window_ms=s.streak_window_ms,
            max_streak_bonus=s.max_streak_bonus,
        )


@dataclass(frozen=True)
class RewardChance:
    """Weighted reward entry of a drop table."""
    kind: RewardKind
    min_amount: int
    max_amount: int
    rarity: Rarity
    weight: int

    def __post_init__(self):
        low = max(0, int(self.min_amount))
        object.__setattr__(self, "min_amount", low)
        object.__setattr__(self, "max_amount", max(low, int(self.max_amount)))
        object.__setattr__(self, "weight", max(0, int(self.weight)))


@dataclass(frozen=True)
class BoosterChance:
    """Weighted booster entry of a drop table."""
    kind: BoosterKind
    min_seconds: int
    max_seconds: int
    rarity: Rarity
    weight: int

    def __post_init__(self):
        low = max(1, int(self.min_seconds))
        object.__setattr__(self, "min_seconds", low)
        object.__setattr__(self, "max_seconds", max(low, int(self.max_seconds)))
        object.__setattr__(self, "weight", max(0, int(self.weight)))


@dataclass(frozen=True)
class DropTable:
    rewards: Tuple[RewardChance, ...]
    boosters: Tuple[BoosterChance, ...]

    def __post_init__(self):
        # accept any sequence, store tuples so the table stays hashable
        object.__setattr__(self, "rewards", tuple(self.rewards))
        object.__setattr__(self, "boosters", tuple(self.boosters))

    @classmethod
    def of(
        cls,
        rewards: Sequence[RewardChance],
        boosters: Sequence[BoosterChance] = ()
    ) -> "DropTable":
        return cls(rewards=tuple(rewards), boosters=tuple(boosters))


@dataclass(frozen=True)
class SpinBonus:
    multiplier: float
    seconds: int

    def __post_init__(self):
        object.__setattr__(self, "multiplier", max(1.0, _finite(self.multiplier, 1.0)))
        object.__setattr__(self, "seconds", max(1, int(_finite(self.seconds, 1))))


@dataclass(frozen=True)
class LootCrate:
    """A named crate. Contents are rolled by the caller from ``table``."""
    name: str
    rarity: Rarity
    guaranteed: Optional[RewardKind]
    table: DropTable
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self):
        object.__setattr__(self, "name", self.name.strip())
