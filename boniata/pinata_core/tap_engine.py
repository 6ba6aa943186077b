"""
Tap Engine
==========

Session controller combining one BoardState with one LevelConfig.

Exposes the player verbs (tap, heavy tap, burst, drop bonus, restart) and
rate-limits taps by a cooldown derived from the level's streak window.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from boniata.pinata_core.board_state import BoardState
from boniata.pinata_core.config_loader import PinataConfig, get_config
from boniata.pinata_core.level_deck import LevelConfig
from boniata.pinata_core.models import Booster, Reward

logger = logging.getLogger(__name__)


class TapEngine:
    """
    Player-facing pinata controller.

    All verbs are no-ops while the board is idle. A tap or burst that empties
    the pinata ends the round (board goes idle).
    """

    def __init__(
        self,
        level: Optional[LevelConfig] = None,
        state: Optional[BoardState] = None,
        config: Optional[PinataConfig] = None,
        clock: Optional[Callable[[], float]] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize engine and start a session under ``level``.

        Args:
            level: Level to play. Uses the fallback preset (Warm Up, id 1) if None.
            state: Board to drive. A new one sharing ``clock`` and ``seed`` if None.
            config: Pinata configuration. Uses default if None.
            clock: Zero-argument callable returning seconds. ``time.time`` if None.
            seed: Seed for a newly created board.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._clock = clock if clock is not None else time.time
        if state is None:
            state = BoardState(config=config, clock=self._clock, seed=seed)
        self._state = state
        if level is None:
            level = LevelConfig.preset(config.levels.fallback, 1, config)
        self._level = level
        self._last_tap_time: Optional[float] = None

        self.apply_level(level)

    @property
    def state(self) -> BoardState:
        return self._state

    @property
    def level(self) -> LevelConfig:
        return self._level

    @property
    def is_active(self) -> bool:
        return self._state.is_active

    def tap_cooldown(self, factor: Optional[float] = None) -> float:
        """Seconds required between accepted taps for a cooldown factor."""
        if factor is None:
            factor = self._config.tapping.tap_cooldown_factor
        return self._level.streak_window_ms / 1000.0 * factor

    def apply_level(self, level: LevelConfig) -> None:
        """Reset the board and start a new session under ``level``."""
        self._level = level
        self._last_tap_time = None
        self._state.reset_all_progress()
        self._state.configure(level)
        self._state.start_session()
        logger.info(f"Applied level {level.level_id} ({level.title})")

    def tap(self) -> int:
        """
        Single tap, gated by the tap cooldown.

        Returns:
            Number of taps forwarded to the board (0 or 1).
        """
        if not self._state.is_active:
            return 0
        if not self._accept(self._config.tapping.tap_cooldown_factor):
            return 0

        self._state.simulate_tap()
        self._check_round_end()
        return 1

    def heavy_tap(self, multiplier: float) -> int:
        """
        Heavy tap, gated by the longer heavy cooldown.

        Forwards a second tap when ``multiplier`` exceeds 1.0. The multiplier
        does not scale damage.

        Returns:
            Number of taps forwarded to the board (0, 1 or 2).
        """
        if not self._state.is_active:
            return 0
        if not self._accept(self._config.tapping.heavy_tap_cooldown_factor):
            return 0

        forwarded = 1
        self._state.simulate_tap()
        if multiplier > 1.0:
            self._state.simulate_tap()
            forwarded += 1

        self._check_round_end()
        return forwarded

    def burst(self, count: int) -> int:
        """
        Up to ``count`` taps (clamped to [1, max_burst]), stopping at zero health.

        Bursts are not cooldown-gated.

        Returns:
            Number of taps forwarded to the board.
        """
        if not self._state.is_active:
            return 0

        total = min(max(1, count), self._config.tapping.max_burst)
        forwarded = 0
        for _ in range(total):
            self._state.simulate_tap()
            forwarded += 1
            if self._state.is_popped:
                break

        self._check_round_end()
        return forwarded

    def drop_bonus(self) -> Optional[Reward]:
        """Roll one board drop."""
        if not self._state.is_active:
            return None
        return self._state.simulate_drop()

    def inject_reward(self, reward: Reward) -> bool:
        """Apply a reward rolled elsewhere (e.g. by RewardSystem)."""
        if not self._state.is_active:
            return False
        self._state.apply_reward(reward)
        return True

    def inject_booster(self, booster: Booster) -> bool:
        """Apply a booster rolled elsewhere (e.g. by RewardSystem)."""
        if not self._state.is_active:
            return False
        self._state.apply_booster(booster)
        return True

    def end_round(self) -> None:
        self._state.stop_session()

    def restart(self) -> None:
        """Full reset and a new session under the current level."""
        self.apply_level(self._level)

    def reseed(self, seed: Optional[int] = None) -> None:
        self._state.reseed(seed)

    def _accept(self, cooldown_factor: float) -> bool:
        """Cooldown gate. Records the accepted time."""
        now = self._clock()
        if self._last_tap_time is not None:
            if now - self._last_tap_time < self.tap_cooldown(cooldown_factor):
                logger.debug("Tap dropped (cooldown)")
                return False
        self._last_tap_time = now
        return True

    def _check_round_end(self) -> None:
        if self._state.pinata_health <= 0:
            self.end_round()
