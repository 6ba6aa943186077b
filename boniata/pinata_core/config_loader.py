"""
Configuration Loader
====================

Loads and validates pinata_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import yaml

from boniata.pinata_core.models import (
    BoosterChance,
    BoosterKind,
    DropTable,
    Rarity,
    RewardChance,
    RewardKind,
)

logger = logging.getLogger(__name__)

# Threshold rolls are uniform integers in [1, BAND_ROLL_MAX]
BAND_ROLL_MAX = 100


@dataclass(frozen=True)
class SessionDefaults:
    """Default session tuning and board health limits."""
    base_tap_power: float
    base_crit_chance: float
    base_crit_multiplier: float
    tap_cooldown_ms: int
    streak_window_ms: int
    max_streak_bonus: float
    max_health: float            # Board max health before a level is applied
    min_session_health: float    # Floor applied to max health on session start


@dataclass(frozen=True)
class TappingConfig:
    """Tap power and gating constants."""
    streak_step: float
    power_bonus_cap: float
    crit_bonus_cap: float
    tap_cooldown_factor: float
    heavy_tap_cooldown_factor: float
    max_burst: int


@dataclass(frozen=True)
class BoosterEffect:
    """Live bonus an active booster contributes to each tap."""
    kind: BoosterKind
    power_bonus: float
    crit_bonus: float


@dataclass(frozen=True)
class RewardBand:
    """Cumulative threshold band producing a reward."""
    upto: int
    kind: RewardKind
    min_amount: int
    max_amount: int
    rarity: Rarity


@dataclass(frozen=True)
class BoosterBand:
    """Cumulative threshold band producing a booster."""
    upto: int
    kind: BoosterKind
    min_seconds: int
    max_seconds: int
    rarity: Rarity


@dataclass(frozen=True)
class SpinBand:
    """Cumulative threshold band producing a spin bonus."""
    upto: int
    multiplier: float
    seconds: int


@dataclass(frozen=True)
class BoardDropsConfig:
    """Percentage bands used by live board drops."""
    rewards: Tuple[RewardBand, ...]
    boosters: Tuple[BoosterBand, ...]


@dataclass(frozen=True)
class RewardSystemConfig:
    """Bag roller limits and fallbacks."""
    default_table: str
    max_bundle: int
    max_booster_bundle: int
    fallback_bag_size: int
    fallback_booster_kind: BoosterKind
    fallback_booster_seconds: int
    fallback_booster_rarity: Rarity


@dataclass(frozen=True)
class LevelPreset:
    """Level tuning without a level id."""
    key: str
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


@dataclass(frozen=True)
class LevelsConfig:
    """Level presets and the orders they are dealt in."""
    presets: Tuple[LevelPreset, ...]
    rotation: Tuple[str, ...]
    sample_set: Tuple[str, ...]
    fallback: str

    def get_preset(self, key: str) -> LevelPreset:
        """Get a preset by key."""
        for preset in self.presets:
            if preset.key == key:
                return preset
        raise ValueError(f"Unknown level preset: {key}")


@dataclass(frozen=True)
class EnvironmentConfig:
    """Gymnasium environment parameters."""
    step_seconds: float
    max_steps: int
    heavy_tap_multiplier: float


@dataclass(frozen=True)
class PinataConfig:
    """
    Complete pinata configuration loaded from YAML.

    All values are immutable to prevent accidental modification during runtime.
    """
    session: SessionDefaults
    tapping: TappingConfig
    boosters: Tuple[BoosterEffect, ...]
    board_drops: BoardDropsConfig
    spin_bonus: Tuple[SpinBand, ...]
    reward_system: RewardSystemConfig
    drop_tables: Tuple[Tuple[str, DropTable], ...]
    levels: LevelsConfig
    environment: EnvironmentConfig

    def booster_effect(self, kind: BoosterKind) -> BoosterEffect:
        """Get the live effect of a booster kind."""
        for effect in self.boosters:
            if effect.kind == kind:
                return effect
        raise ValueError(f"No effect configured for booster: {kind}")

    def get_drop_table(self, name: str) -> DropTable:
        """Get a named drop table."""
        for table_name, table in self.drop_tables:
            if table_name == name:
                return table
        raise ValueError(f"Unknown drop table: {name}")

    @property
    def default_drop_table(self) -> DropTable:
        return self.get_drop_table(self.reward_system.default_table)


def _parse_rarity(value: str) -> Rarity:
    try:
        return Rarity[str(value).upper()]
    except KeyError:
        raise ValueError(f"Unknown rarity: {value}") from None


def _parse_reward_kind(value: str) -> RewardKind:
    try:
        return RewardKind(str(value))
    except ValueError:
        raise ValueError(f"Unknown reward kind: {value}") from None


def _parse_booster_kind(value: str) -> BoosterKind:
    try:
        return BoosterKind(str(value))
    except ValueError:
        raise ValueError(f"Unknown booster kind: {value}") from None


def _parse_reward_band(data: dict) -> RewardBand:
    return RewardBand(
        upto=int(data["upto"]),
        kind=_parse_reward_kind(data["kind"]),
        min_amount=int(data["min"]),
        max_amount=int(data["max"]),
        rarity=_parse_rarity(data["rarity"])
    )


def _parse_booster_band(data: dict) -> BoosterBand:
    return BoosterBand(
        upto=int(data["upto"]),
        kind=_parse_booster_kind(data["kind"]),
        min_seconds=int(data["min"]),
        max_seconds=int(data["max"]),
        rarity=_parse_rarity(data["rarity"])
    )


def _parse_drop_table(data: dict) -> DropTable:
    """Parse a weighted drop table from YAML."""
    rewards = [
        RewardChance(
            kind=_parse_reward_kind(r["kind"]),
            min_amount=int(r["min"]),
            max_amount=int(r["max"]),
            rarity=_parse_rarity(r["rarity"]),
            weight=int(r["weight"])
        )
        for r in data.get("rewards", [])
    ]
    boosters = [
        BoosterChance(
            kind=_parse_booster_kind(b["kind"]),
            min_seconds=int(b["min"]),
            max_seconds=int(b["max"]),
            rarity=_parse_rarity(b["rarity"]),
            weight=int(b["weight"])
        )
        for b in data.get("boosters", [])
    ]
    return DropTable.of(rewards, boosters)


def _parse_level_preset(key: str, data: dict) -> LevelPreset:
    return LevelPreset(
        key=key,
        title=str(data["title"]),
        pinata_health=float(data["pinata_health"]),
        base_tap_power=float(data["base_tap_power"]),
        crit_chance=float(data["crit_chance"]),
        crit_multiplier=float(data["crit_multiplier"]),
        streak_window_ms=int(data["streak_window_ms"]),
        max_streak_bonus=float(data["max_streak_bonus"]),
        bonus_drops=int(data.get("bonus_drops", 0)),
        booster_slots=int(data.get("booster_slots", 0)),
        target_coins=int(data.get("target_coins", 0)),
        target_candy=int(data.get("target_candy", 0)),
        target_keys=int(data.get("target_keys", 0))
    )


def _validate_bands(name: str, bands: List) -> None:
    """Bands must be non-empty, strictly ascending, and end at the roll max."""
    if not bands:
        raise ValueError(f"{name} must define at least one band")
    previous = 0
    for band in bands:
        if band.upto <= previous:
            raise ValueError(
                f"{name} bands must be strictly ascending, got {band.upto} after {previous}"
            )
        previous = band.upto
    if previous != BAND_ROLL_MAX:
        raise ValueError(f"{name} last band must end at {BAND_ROLL_MAX}, got {previous}")


def _validate_config(config: PinataConfig) -> None:
    """Validate configuration consistency."""
    _validate_bands("board_drops.rewards", list(config.board_drops.rewards))
    _validate_bands("board_drops.boosters", list(config.board_drops.boosters))
    _validate_bands("spin_bonus", list(config.spin_bonus))

    # Every booster kind needs a live effect
    configured = {effect.kind for effect in config.boosters}
    missing = [kind.value for kind in BoosterKind if kind not in configured]
    if missing:
        raise ValueError(f"boosters section missing kinds: {missing}")

    # Table and preset references must resolve
    config.get_drop_table(config.reward_system.default_table)
    levels = config.levels
    if not levels.rotation:
        raise ValueError("levels.rotation must not be empty")
    for key in (*levels.rotation, *levels.sample_set, levels.fallback):
        levels.get_preset(key)

    if config.tapping.max_burst < 1:
        raise ValueError(f"tapping.max_burst must be >= 1, got {config.tapping.max_burst}")


def load_config(config_path: Optional[str] = None) -> PinataConfig:
    """
    Load and validate pinata configuration from YAML.

    Args:
        config_path: Path to pinata_config.yaml. If None, uses default location.

    Returns:
        Validated PinataConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "pinata_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    session_data = raw["session"]
    session = SessionDefaults(
        base_tap_power=float(session_data["base_tap_power"]),
        base_crit_chance=float(session_data["base_crit_chance"]),
        base_crit_multiplier=float(session_data["base_crit_multiplier"]),
        tap_cooldown_ms=int(session_data["tap_cooldown_ms"]),
        streak_window_ms=int(session_data["streak_window_ms"]),
        max_streak_bonus=float(session_data["max_streak_bonus"]),
        max_health=float(session_data.get("max_health", 100.0)),
        min_session_health=float(session_data.get("min_session_health", 10.0))
    )

    tap_data = raw["tapping"]
    tapping = TappingConfig(
        streak_step=float(tap_data["streak_step"]),
        power_bonus_cap=float(tap_data["power_bonus_cap"]),
        crit_bonus_cap=float(tap_data["crit_bonus_cap"]),
        tap_cooldown_factor=float(tap_data["tap_cooldown_factor"]),
        heavy_tap_cooldown_factor=float(tap_data["heavy_tap_cooldown_factor"]),
        max_burst=int(tap_data.get("max_burst", 8))
    )

    boosters = tuple(
        BoosterEffect(
            kind=_parse_booster_kind(kind),
            power_bonus=float(effect.get("power_bonus", 0.0)),
            crit_bonus=float(effect.get("crit_bonus", 0.0))
        )
        for kind, effect in raw["boosters"].items()
    )

    drops_data = raw["board_drops"]
    board_drops = BoardDropsConfig(
        rewards=tuple(_parse_reward_band(b) for b in drops_data["rewards"]),
        boosters=tuple(_parse_booster_band(b) for b in drops_data["boosters"])
    )

    spin_bonus = tuple(
        SpinBand(
            upto=int(b["upto"]),
            multiplier=float(b["multiplier"]),
            seconds=int(b["seconds"])
        )
        for b in raw["spin_bonus"]
    )

    rs_data = raw["reward_system"]
    fallback_data = rs_data.get("fallback_booster", {})
    reward_system = RewardSystemConfig(
        default_table=str(rs_data["default_table"]),
        max_bundle=int(rs_data.get("max_bundle", 8)),
        max_booster_bundle=int(rs_data.get("max_booster_bundle", 4)),
        fallback_bag_size=int(rs_data.get("fallback_bag_size", 10)),
        fallback_booster_kind=_parse_booster_kind(fallback_data.get("kind", "bonusDrop")),
        fallback_booster_seconds=int(fallback_data.get("seconds", 10)),
        fallback_booster_rarity=_parse_rarity(fallback_data.get("rarity", "uncommon"))
    )

    drop_tables = tuple(
        (str(name), _parse_drop_table(table))
        for name, table in raw["drop_tables"].items()
    )

    levels_data = raw["levels"]
    levels = LevelsConfig(
        presets=tuple(
            _parse_level_preset(key, preset)
            for key, preset in levels_data["presets"].items()
        ),
        rotation=tuple(str(k) for k in levels_data["rotation"]),
        sample_set=tuple(str(k) for k in levels_data["sample_set"]),
        fallback=str(levels_data.get("fallback", "warm_up"))
    )

    env_data = raw.get("environment", {})
    environment = EnvironmentConfig(
        step_seconds=float(env_data.get("step_seconds", 0.12)),
        max_steps=int(env_data.get("max_steps", 2000)),
        heavy_tap_multiplier=float(env_data.get("heavy_tap_multiplier", 2.0))
    )

    config = PinataConfig(
        session=session,
        tapping=tapping,
        boosters=boosters,
        board_drops=board_drops,
        spin_bonus=spin_bonus,
        reward_system=reward_system,
        drop_tables=drop_tables,
        levels=levels,
        environment=environment
    )

    _validate_config(config)
    logger.debug(f"Loaded pinata config from {config_path}")
    return config


# Module-level singleton for convenience
_cached_config: Optional[PinataConfig] = None


def get_config() -> PinataConfig:
    """Get the cached pinata configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> PinataConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
