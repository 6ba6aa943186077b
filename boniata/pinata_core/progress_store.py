"""
Progress Store
==============

Cross-session progress snapshots over a small key-value backend.

A missing, undecodable or malformed payload is treated as "no prior
progress" and yields a fresh snapshot; loading never raises.

Usage:
    from boniata.pinata_core import JsonFileStore, ProgressStore

    store = ProgressStore(JsonFileStore("progress.json"))
    store.save(engine.state, level_id=engine.level.level_id)
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

from boniata.pinata_core.board_state import BoardState

logger = logging.getLogger(__name__)

PROGRESS_KEY = "boniata.pinata.progress"


@dataclass(frozen=True)
class ProgressSnapshot:
    """Persisted rollup of a player's progress."""
    coins: int
    candy: int
    keys: int
    best_streak: int
    total_taps: int
    total_damage: float
    last_level_id: int
    last_saved_at: float

    def __post_init__(self):
        object.__setattr__(self, "coins", max(0, int(self.coins)))
        object.__setattr__(self, "candy", max(0, int(self.candy)))
        object.__setattr__(self, "keys", max(0, int(self.keys)))
        object.__setattr__(self, "best_streak", max(0, int(self.best_streak)))
        object.__setattr__(self, "total_taps", max(0, int(self.total_taps)))
        object.__setattr__(self, "total_damage", max(0.0, float(self.total_damage)))
        object.__setattr__(self, "last_level_id", max(1, int(self.last_level_id)))
        object.__setattr__(self, "last_saved_at", max(0.0, float(self.last_saved_at)))

    @classmethod
    def fresh(cls) -> "ProgressSnapshot":
        return cls(
            coins=0,
            candy=0,
            keys=0,
            best_streak=0,
            total_taps=0,
            total_damage=0.0,
            last_level_id=1,
            last_saved_at=0.0
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProgressSnapshot":
        """
        Build a snapshot from decoded JSON.

        Raises:
            KeyError: If a field is missing.
            TypeError, ValueError: If a field has the wrong type.
        """
        if not isinstance(data, dict):
            raise TypeError(f"Snapshot payload must be an object, got {type(data).__name__}")
        return cls(
            coins=data["coins"],
            candy=data["candy"],
            keys=data["keys"],
            best_streak=data["best_streak"],
            total_taps=data["total_taps"],
            total_damage=data["total_damage"],
            last_level_id=data["last_level_id"],
            last_saved_at=data["last_saved_at"]
        )

    def encode(self) -> str:
        return json.dumps(self.to_dict(), sort_keys=True)

    @classmethod
    def decode(cls, payload: str) -> "ProgressSnapshot":
        return cls.from_dict(json.loads(payload))


class MemoryStore:
    """In-process key-value backend."""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """
    Key-value backend persisted as one JSON object on disk.

    An unreadable file is treated as empty.
    """

    def __init__(self, path: Union[str, Path]):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)

    def _read(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            with open(self._path, "r") as f:
                data = json.load(f)
        except (OSError, ValueError) as exc:
            logger.warning(f"Unreadable progress file {self._path}: {exc}")
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, Any]) -> None:
        # Create parent directories if needed
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._path, "w") as f:
            json.dump(data, f, indent=2)


class ProgressStore:
    """
    Loads, saves and merges progress snapshots under ``PROGRESS_KEY``.
    """

    def __init__(
        self,
        backend: Optional[Union[MemoryStore, JsonFileStore]] = None,
        clock: Optional[Callable[[], float]] = None,
        key: str = PROGRESS_KEY
    ):
        """
        Initialize store and load any saved snapshot.

        Args:
            backend: Key-value backend. In-memory if None.
            clock: Zero-argument callable returning seconds. ``time.time`` if None.
            key: Storage key.
        """
        self._backend = backend if backend is not None else MemoryStore()
        self._clock = clock if clock is not None else time.time
        self._key = key
        self._snapshot = ProgressSnapshot.fresh()
        self.load()

    @property
    def snapshot(self) -> ProgressSnapshot:
        return self._snapshot

    @property
    def status_line(self) -> str:
        s = self._snapshot
        if s.last_saved_at <= 0:
            return "Empty"
        return f"Coins {s.coins} • Keys {s.keys} • Best {s.best_streak}"

    def load(self) -> ProgressSnapshot:
        """Load the stored snapshot, or a fresh one if absent or corrupt."""
        payload = self._backend.get(self._key)
        if payload is None:
            self._snapshot = ProgressSnapshot.fresh()
            return self._snapshot

        try:
            self._snapshot = ProgressSnapshot.decode(payload)
        except (KeyError, TypeError, ValueError, OverflowError, RecursionError) as exc:
            logger.warning(f"Discarding corrupt progress payload: {exc!r}")
            self._snapshot = ProgressSnapshot.fresh()
        return self._snapshot

    def save(self, state: BoardState, level_id: int) -> ProgressSnapshot:
        """Persist the board's totals for ``level_id``."""
        snapshot = ProgressSnapshot(
            coins=state.coins,
            candy=state.candy,
            keys=state.keys,
            best_streak=state.streak_best,
            total_taps=state.taps_total,
            total_damage=state.damage_total,
            last_level_id=level_id,
            last_saved_at=self._clock()
        )
        self._persist(snapshot)
        return snapshot

    def merge_coins(self, add: int) -> ProgressSnapshot:
        """Add coins to the stored snapshot. Negative amounts add nothing."""
        s = self._snapshot
        snapshot = ProgressSnapshot(
            coins=s.coins + max(0, add),
            candy=s.candy,
            keys=s.keys,
            best_streak=s.best_streak,
            total_taps=s.total_taps,
            total_damage=s.total_damage,
            last_level_id=s.last_level_id,
            last_saved_at=self._clock()
        )
        self._persist(snapshot)
        return snapshot

    def reset_all(self) -> None:
        self._snapshot = ProgressSnapshot.fresh()
        self._backend.remove(self._key)

    def _persist(self, snapshot: ProgressSnapshot) -> None:
        self._snapshot = snapshot
        self._backend.set(self._key, snapshot.encode())
        logger.debug(f"Progress saved: {self.status_line}")
