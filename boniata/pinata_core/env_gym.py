"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the pinata tap engine.
Reward is the damage dealt during the step.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple, Union

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from boniata.pinata_core.config_loader import PinataConfig, load_config
from boniata.pinata_core.level_deck import LevelConfig
from boniata.pinata_core.models import BoosterKind
from boniata.pinata_core.tap_engine import TapEngine

logger = logging.getLogger(__name__)

ACTION_TAP = 0
ACTION_HEAVY_TAP = 1
ACTION_BURST = 2
ACTION_DROP_BONUS = 3
ACTION_WAIT = 4

ACTION_NAMES = ("tap", "heavy_tap", "burst", "drop_bonus", "wait")

BOOSTER_ORDER = tuple(BoosterKind)


class SimulatedClock:
    """Manually advanced clock so cooldowns and streaks are reproducible."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += max(0.0, seconds)


class PinataEnv(gym.Env):
    """
    Pinata tapping as a Gymnasium environment.

    Action Space:
        Discrete(5): tap, heavy tap, burst, drop bonus, wait.

    Observation Space:
        Dict of board counters and per-kind active booster counts.

    Reward:
        Damage dealt this step.

    Episode:
        Terminates when the pinata pops, truncates after ``max_steps``.
    """

    metadata = {
        "render_modes": ["ansi"],
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        level: Optional[LevelConfig] = None,
        render_mode: Optional[str] = None,
        step_seconds: Optional[float] = None,
        max_steps: Optional[int] = None,
    ):
        """
        Initialize pinata environment.

        Args:
            config_path: Path to pinata_config.yaml. Uses default if None.
            level: Level to play. Uses the fallback preset if None.
            render_mode: "ansi" for a status string, None for headless.
            step_seconds: Simulated seconds between steps. From config if None.
            max_steps: Truncation limit. From config if None.
        """
        super().__init__()

        self._config = load_config(config_path)
        env_config = self._config.environment

        self.render_mode = render_mode
        self._step_seconds = step_seconds if step_seconds is not None else env_config.step_seconds
        self._max_steps = max_steps if max_steps is not None else env_config.max_steps
        self._steps = 0

        self._clock = SimulatedClock()
        self._engine = TapEngine(level=level, config=self._config, clock=self._clock)

        self.action_space = spaces.Discrete(len(ACTION_NAMES))
        self.observation_space = self._build_observation_space()

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        counter = spaces.Box(low=0, high=np.iinfo(np.int32).max, shape=(), dtype=np.int32)
        amount = spaces.Box(low=0, high=np.inf, shape=(), dtype=np.float32)

        return spaces.Dict({
            "health": amount,
            "max_health": amount,
            "damage_total": amount,
            "streak": counter,
            "taps_total": counter,
            "crits_total": counter,
            "coins": counter,
            "candy": counter,
            "keys": counter,
            "boosters": spaces.Box(
                low=0,
                high=np.iinfo(np.int32).max,
                shape=(len(BOOSTER_ORDER),),
                dtype=np.int32
            ),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment.

        Args:
            seed: Random seed for reproducibility.
            options: Optional {"level": LevelConfig} to switch levels.

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        self._clock.now = 0.0
        self._steps = 0
        self._engine.reseed(seed)

        level = (options or {}).get("level")
        if level is not None:
            self._engine.apply_level(level)
        else:
            self._engine.restart()

        info = self._get_info()
        info["delta_damage"] = 0.0
        return self._get_obs(), info

    def step(
        self,
        action: Union[int, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one step.

        Args:
            action: One of the ACTION_* constants.

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
        """
        if isinstance(action, np.ndarray):
            action = int(action.item())
        action = int(action)

        state = self._engine.state
        damage_before = state.damage_total
        self._clock.advance(self._step_seconds)

        forwarded = 0
        reward_kind = None
        if action == ACTION_TAP:
            forwarded = self._engine.tap()
        elif action == ACTION_HEAVY_TAP:
            forwarded = self._engine.heavy_tap(self._config.environment.heavy_tap_multiplier)
        elif action == ACTION_BURST:
            forwarded = self._engine.burst(self._config.tapping.max_burst)
        elif action == ACTION_DROP_BONUS:
            dropped = self._engine.drop_bonus()
            reward_kind = dropped.kind.value if dropped is not None else None

        self._steps += 1
        delta = state.damage_total - damage_before
        terminated = state.is_popped
        truncated = not terminated and self._steps >= self._max_steps

        info = self._get_info()
        info["delta_damage"] = delta
        info["taps_forwarded"] = forwarded
        info["reward_kind"] = reward_kind

        logger.debug(
            f"Step {self._steps}: action={ACTION_NAMES[action] if 0 <= action < len(ACTION_NAMES) else action}, "
            f"delta={delta:.2f}, hp={state.pinata_health:.2f}"
        )

        return self._get_obs(), float(delta), bool(terminated), bool(truncated), info

    def _get_obs(self) -> Dict[str, np.ndarray]:
        state = self._engine.state
        counts = {kind: 0 for kind in BOOSTER_ORDER}
        for booster in state.active_boosters:
            counts[booster.kind] += 1

        return {
            "health": np.array(state.pinata_health, dtype=np.float32),
            "max_health": np.array(state.pinata_max_health, dtype=np.float32),
            "damage_total": np.array(state.damage_total, dtype=np.float32),
            "streak": np.array(state.streak_count, dtype=np.int32),
            "taps_total": np.array(state.taps_total, dtype=np.int32),
            "crits_total": np.array(state.crits_total, dtype=np.int32),
            "coins": np.array(state.coins, dtype=np.int32),
            "candy": np.array(state.candy, dtype=np.int32),
            "keys": np.array(state.keys, dtype=np.int32),
            "boosters": np.array([counts[k] for k in BOOSTER_ORDER], dtype=np.int32),
        }

    def _get_info(self) -> Dict[str, Any]:
        state = self._engine.state
        return {
            "level_id": self._engine.level.level_id,
            "steps": self._steps,
            "status_line": state.status_line,
            "is_active": state.is_active,
            "targets_reached": state.targets_reached,
        }

    def render(self) -> Optional[str]:
        """
        Render the current state.

        Returns:
            The board status line if render_mode is "ansi", None otherwise.
        """
        if self.render_mode == "ansi":
            return self._engine.state.status_line
        return None

    @property
    def engine(self) -> TapEngine:
        """Access to underlying engine (for debugging/tools)."""
        return self._engine

    @property
    def config(self) -> PinataConfig:
        """Pinata configuration."""
        return self._config
