"""
Pinata Core - The heart of the tap simulation.

This module provides the board state machine, the tap engine that drives it,
the level deck, both reward rollers, progress persistence and a Gymnasium
environment wrapper.

Main exports:
- TapEngine: Player-facing session controller
- BoardState: Per-session pinata state machine
- RewardSystem: Bag-based reward roller for crates and bundles
- LevelConfig / LevelDeck: Level tuning and level cursor
- ProgressStore: Snapshot persistence over a key-value backend
- PinataEnv: Gymnasium environment
- PinataConfig: Configuration loaded from pinata_config.yaml
"""

from boniata.pinata_core.config_loader import PinataConfig, get_config, load_config, reload_config
from boniata.pinata_core.models import (
    Booster,
    BoosterChance,
    BoosterKind,
    DropTable,
    Effect,
    EffectKind,
    LootCrate,
    Rarity,
    Reward,
    RewardChance,
    RewardKind,
    SessionConfig,
    SpinBonus,
    TapEvent,
    TapSnapshot,
)
from boniata.pinata_core.level_deck import LevelConfig, LevelDeck
from boniata.pinata_core.rng import RewardBag
from boniata.pinata_core.board_state import BoardState
from boniata.pinata_core.reward_system import RewardSystem
from boniata.pinata_core.tap_engine import TapEngine
from boniata.pinata_core.progress_store import (
    JsonFileStore,
    MemoryStore,
    ProgressSnapshot,
    ProgressStore,
)
from boniata.pinata_core.env_gym import PinataEnv

__all__ = [
    "PinataConfig",
    "get_config",
    "load_config",
    "reload_config",
    "Booster",
    "BoosterChance",
    "BoosterKind",
    "DropTable",
    "Effect",
    "EffectKind",
    "LootCrate",
    "Rarity",
    "Reward",
    "RewardChance",
    "RewardKind",
    "SessionConfig",
    "SpinBonus",
    "TapEvent",
    "TapSnapshot",
    "LevelConfig",
    "LevelDeck",
    "RewardBag",
    "BoardState",
    "RewardSystem",
    "TapEngine",
    "JsonFileStore",
    "MemoryStore",
    "ProgressSnapshot",
    "ProgressStore",
    "PinataEnv",
]
