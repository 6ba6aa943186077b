"""
Board State
===========

Mutable per-session pinata state: health, streak, currency, active boosters,
and the percentage-band reward and critical rolls used during live play.

States are Idle (taps ignored) and Active. No operation raises; a call that is
invalid for the current state is ignored and only shows in ``status_line``.
"""

from __future__ import annotations

import logging
import math
import random
import time
from typing import Callable, List, Optional, Tuple

from boniata.pinata_core.config_loader import PinataConfig, get_config
from boniata.pinata_core.level_deck import LevelConfig
from boniata.pinata_core.models import (
    Booster,
    Reward,
    RewardKind,
    SessionConfig,
    TapEvent,
    TapSnapshot,
)
from boniata.pinata_core.rng import roll_band, roll_range

logger = logging.getLogger(__name__)

STATUS_IDLE = "Idle"
STATUS_POPPED = "Pinata popped!"
STATUS_TAP_IGNORED = "Tap ignored (inactive)"
STATUS_DROP_SKIPPED = "Drop skipped (inactive)"


class BoardState:
    """
    Session state machine for one pinata board.

    Created once per play session and reset, not recreated, between levels.
    Not thread-safe: callers serialize mutating calls.
    """

    def __init__(
        self,
        config: Optional[PinataConfig] = None,
        rng: Optional[random.Random] = None,
        clock: Optional[Callable[[], float]] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize board.

        Args:
            config: Pinata configuration. Uses default if None.
            rng: Random source for crit and drop rolls. Seeded from ``seed`` if None.
            clock: Zero-argument callable returning seconds. ``time.time`` if None.
            seed: Seed for the default random source.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._rng = rng if rng is not None else random.Random(seed)
        self._clock = clock if clock is not None else time.time
        self._session = SessionConfig.vivid_default(config)

        self._active: bool = False
        self._taps_total: int = 0
        self._streak_count: int = 0
        self._streak_best: int = 0
        self._crits_total: int = 0
        self._damage_total: float = 0.0
        self._coins: int = 0
        self._candy: int = 0
        self._keys: int = 0
        self._active_boosters: List[Booster] = []
        self._last_reward: Optional[Reward] = None
        self._last_tap: Optional[TapEvent] = None
        self._last_tap_at: Optional[float] = None
        self._targets: Tuple[int, int, int] = (0, 0, 0)

        self._max_health: float = config.session.max_health
        self._health: float = self._max_health
        self._streak_window_ms: int = self._session.streak_window_ms
        self._status_line: str = STATUS_IDLE
        self._refresh_status_line()

    # ------------------------------------------------------------------
    # Published state
    # ------------------------------------------------------------------

    @property
    def is_active(self) -> bool:
        return self._active

    @property
    def taps_total(self) -> int:
        return self._taps_total

    @property
    def streak_count(self) -> int:
        return self._streak_count

    @property
    def streak_best(self) -> int:
        return self._streak_best

    @property
    def pinata_health(self) -> float:
        return self._health

    @property
    def pinata_max_health(self) -> float:
        return self._max_health

    @property
    def crits_total(self) -> int:
        return self._crits_total

    @property
    def damage_total(self) -> float:
        return self._damage_total

    @property
    def coins(self) -> int:
        return self._coins

    @property
    def candy(self) -> int:
        return self._candy

    @property
    def keys(self) -> int:
        return self._keys

    @property
    def active_boosters(self) -> Tuple[Booster, ...]:
        return tuple(self._active_boosters)

    @property
    def last_reward(self) -> Optional[Reward]:
        return self._last_reward

    @property
    def last_tap(self) -> Optional[TapEvent]:
        return self._last_tap

    @property
    def last_tap_at(self) -> float:
        """Timestamp of the previous tap, 0.0 if there is none."""
        return self._last_tap_at if self._last_tap_at is not None else 0.0

    @property
    def streak_window_ms(self) -> int:
        return self._streak_window_ms

    @property
    def session_config(self) -> SessionConfig:
        return self._session

    @property
    def status_line(self) -> str:
        """Human-readable summary. Advisory only."""
        return self._status_line

    @property
    def is_popped(self) -> bool:
        return self._health <= 0

    @property
    def targets_reached(self) -> bool:
        """True once coins, candy and keys all meet the level targets."""
        coins, candy, keys = self._targets
        return self._coins >= coins and self._candy >= candy and self._keys >= keys

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start_session(self) -> None:
        """Idle -> Active."""
        self._active = True
        self._max_health = max(self._config.session.min_session_health, self._max_health)
        self._health = min(self._health, self._max_health)
        self._streak_count = 0
        self._last_tap_at = None
        logger.info(f"Session started (hp={self._health:.2f}/{self._max_health:.2f})")
        self._refresh_status_line()

    def stop_session(self) -> None:
        """Active -> Idle."""
        self._active = False
        self._streak_count = 0
        self._last_tap_at = None
        logger.info(f"Session stopped after {self._taps_total} taps")
        self._refresh_status_line()

    def reset_all_progress(self) -> None:
        """Zero every counter and currency, clear boosters, restore the default tuning, go Idle."""
        self._active = False
        self._taps_total = 0
        self._streak_count = 0
        self._streak_best = 0
        self._max_health = self._config.session.max_health
        self._health = self._max_health
        self._crits_total = 0
        self._damage_total = 0.0
        self._coins = 0
        self._candy = 0
        self._keys = 0
        self._active_boosters.clear()
        self._last_reward = None
        self._last_tap = None
        self._last_tap_at = None
        self._session = SessionConfig.vivid_default(self._config)
        self._targets = (0, 0, 0)
        self._streak_window_ms = self._session.streak_window_ms
        logger.debug("Board progress reset")
        self._refresh_status_line()

    def apply_default_config(self) -> None:
        """Return to the default session tuning and default max health."""
        self._session = SessionConfig.vivid_default(self._config)
        self._streak_window_ms = self._session.streak_window_ms
        self._max_health = self._config.session.max_health
        self._health = min(self._health, self._max_health)
        self._targets = (0, 0, 0)
        self._refresh_status_line()

    def configure(self, level: LevelConfig) -> None:
        """
        Run the board under a level's tuning.

        Sets the session config, max health and targets from ``level`` and
        fills the pinata to its new max.
        """
        self._session = level.to_session_config()
        self._streak_window_ms = self._session.streak_window_ms
        self._max_health = level.pinata_health
        self._health = self._max_health
        self._targets = (level.target_coins, level.target_candy, level.target_keys)
        logger.debug(f"Board configured for level {level.level_id} ({level.title})")
        self._refresh_status_line()

    def reseed(self, seed: Optional[int] = None) -> None:
        """Replace the random source with ``random.Random(seed)``."""
        self._rng = random.Random(seed)

    # ------------------------------------------------------------------
    # Play
    # ------------------------------------------------------------------

    def simulate_tap(self) -> Optional[TapEvent]:
        """
        Register one tap.

        Returns:
            The recorded TapEvent, or None if the board is idle.
        """
        if not self._active:
            self._status_line = STATUS_TAP_IGNORED
            logger.debug("Tap ignored (inactive)")
            return None

        now = self._clock()
        within_window = (
            self._last_tap_at is not None
            and (now - self._last_tap_at) * 1000.0 <= self._streak_window_ms
        )
        self._last_tap_at = now

        if within_window:
            self._streak_count += 1
        else:
            self._streak_count = 1

        if self._streak_count > self._streak_best:
            self._streak_best = self._streak_count

        self._taps_total += 1

        is_critical = self._roll_critical()
        if is_critical:
            self._crits_total += 1

        power = self._compute_tap_power(is_critical)
        self._apply_damage(power)

        self._last_tap = TapEvent(timestamp=now, power=power, is_critical=is_critical)
        self._refresh_status_line()
        return self._last_tap

    def simulate_drop(self) -> Optional[Reward]:
        """
        Roll one reward from the board's percentage bands and apply it.

        Returns:
            The rolled Reward, or None if the board is idle.
        """
        if not self._active:
            self._status_line = STATUS_DROP_SKIPPED
            logger.debug("Drop skipped (inactive)")
            return None

        reward = self._roll_reward()
        self.apply_reward(reward)
        return reward

    def apply_reward(self, reward: Reward) -> None:
        """
        Credit a reward to the board.

        Coins and tickets share the coin counter. A boosters reward rolls one
        booster from the board bands; hearts heal up to max health.
        """
        self._last_reward = reward

        if reward.kind in (RewardKind.COINS, RewardKind.TICKETS):
            self._coins += reward.amount
        elif reward.kind == RewardKind.CANDY:
            self._candy += reward.amount
        elif reward.kind == RewardKind.KEYS:
            self._keys += reward.amount
        elif reward.kind == RewardKind.BOOSTERS:
            self._active_boosters.append(self._roll_booster())
        elif reward.kind == RewardKind.HEARTS:
            self._heal(float(reward.amount))

        self._refresh_status_line()

    def apply_booster(self, booster: Booster) -> None:
        """Add a booster to the active list."""
        self._active_boosters.append(booster)
        self._refresh_status_line()

    def refill_pinata(self) -> None:
        self._health = self._max_health
        self._streak_count = 0
        self._last_tap_at = None
        self._refresh_status_line()

    def drain_pinata(self) -> None:
        self._health = 0.0
        self._streak_count = 0
        self._refresh_status_line()

    def snapshot(self) -> TapSnapshot:
        """Immutable rollup of the current tap totals."""
        return TapSnapshot(
            taps=self._taps_total,
            total_damage=self._damage_total,
            criticals=self._crits_total,
            streak_best=self._streak_best,
            last_tap_at=self.last_tap_at
        )

    # ------------------------------------------------------------------
    # Bonuses
    # ------------------------------------------------------------------

    def current_power_bonus(self) -> float:
        """Summed power bonus of active boosters, capped."""
        bonus = sum(
            self._config.booster_effect(b.kind).power_bonus
            for b in self._active_boosters
        )
        return min(self._config.tapping.power_bonus_cap, bonus)

    def current_crit_bonus(self) -> float:
        """Summed crit-chance bonus of active boosters, capped."""
        bonus = sum(
            self._config.booster_effect(b.kind).crit_bonus
            for b in self._active_boosters
        )
        return min(self._config.tapping.crit_bonus_cap, bonus)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _roll_critical(self) -> bool:
        chance = self._session.base_crit_chance + self.current_crit_bonus()
        return self._rng.random() < min(max(0.0, chance), 1.0)

    def _compute_tap_power(self, is_critical: bool) -> float:
        streak_bonus = min(
            self._streak_count * self._config.tapping.streak_step,
            self._session.max_streak_bonus
        )
        raw = self._session.base_tap_power * (1.0 + streak_bonus + self.current_power_bonus())
        if is_critical:
            return raw * self._session.base_crit_multiplier
        return raw

    def _apply_damage(self, value: float) -> None:
        damage = max(0.0, value)
        self._damage_total += damage
        self._health = max(0.0, self._health - damage)
        if self._health <= 0:
            logger.info(f"Pinata popped after {self._taps_total} taps")

    def _heal(self, value: float) -> None:
        self._health = min(self._max_health, self._health + max(0.0, value))

    def _roll_reward(self) -> Reward:
        band = roll_band(self._config.board_drops.rewards, self._rng)
        amount = roll_range(self._rng, band.min_amount, band.max_amount)
        return Reward(kind=band.kind, amount=amount, rarity=band.rarity)

    def _roll_booster(self) -> Booster:
        band = roll_band(self._config.board_drops.boosters, self._rng)
        seconds = roll_range(self._rng, band.min_seconds, band.max_seconds)
        return Booster(kind=band.kind, seconds=seconds, rarity=band.rarity)

    def _refresh_status_line(self) -> None:
        if not self._active:
            self._status_line = STATUS_IDLE
            return

        if self._health <= 0:
            self._status_line = STATUS_POPPED
            return

        hp = int(math.floor(self._health + 0.5))
        self._status_line = (
            f"HP {hp} • Streak {self._streak_count} • "
            f"Crit {self._crits_total} • Coins {self._coins}"
        )
