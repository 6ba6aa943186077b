"""
Balance Report
==============

Monte Carlo balance statistics for the level deck and the crate roller.

Usage:
    python -m tools.balance_report [--sessions N] [--levels K] [--crates C] [--seed S]
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections import Counter
from typing import Dict, List

import numpy as np

from boniata.pinata_core.config_loader import load_config
from boniata.pinata_core.env_gym import SimulatedClock
from boniata.pinata_core.level_deck import LevelConfig, LevelDeck
from boniata.pinata_core.models import Rarity
from boniata.pinata_core.reward_system import RewardSystem
from boniata.pinata_core.tap_engine import TapEngine


def simulate_level(
    level: LevelConfig,
    sessions: int = 200,
    seed: int = 42,
    step_seconds: float = 0.12,
    max_bursts: int = 10_000
) -> dict:
    """
    Play ``sessions`` rounds of a level with burst input.

    Args:
        level: Level to play.
        sessions: Number of seeded sessions.
        seed: Base seed; session ``i`` uses ``seed + i``.
        step_seconds: Simulated seconds between bursts.
        max_bursts: Safety cap per session.

    Returns:
        Dict with taps/crits statistics.
    """
    config = load_config()
    clock = SimulatedClock()
    engine = TapEngine(level=level, config=config, clock=clock)

    taps = np.zeros(sessions, dtype=np.int64)
    crits = np.zeros(sessions, dtype=np.int64)

    for i in range(sessions):
        engine.reseed(seed + i)
        engine.restart()
        bursts = 0
        while engine.is_active and bursts < max_bursts:
            clock.advance(step_seconds)
            engine.burst(config.tapping.max_burst)
            bursts += 1
        taps[i] = engine.state.taps_total
        crits[i] = engine.state.crits_total

    return {
        "level_id": level.level_id,
        "title": level.title,
        "health": level.pinata_health,
        "taps_mean": float(taps.mean()),
        "taps_std": float(taps.std()),
        "taps_min": int(taps.min()),
        "taps_max": int(taps.max()),
        "crit_rate": float(crits.sum() / max(1, taps.sum())),
    }


def open_crates(crates: int = 100, seed: int = 42, bundle: int = 8) -> Dict[str, int]:
    """
    Open ``crates`` legendary crates, rolling one full bundle each.

    Returns:
        Reward kind -> total amount, plus coin/candy/key totals.
    """
    system = RewardSystem(seed=seed)
    amounts: Counter = Counter()

    for index in range(crates):
        crate = system.roll_crate(f"Crate {index + 1}", Rarity.LEGENDARY)
        for reward in system.roll_bundle(bundle):
            amounts[reward.kind.value] += reward.amount
        if crate.guaranteed is not None:
            amounts[f"guaranteed_{crate.guaranteed.value}"] += 1

    amounts["coins_total"] = system.coins_total
    amounts["candy_total"] = system.candy_total
    amounts["keys_total"] = system.keys_total
    return dict(amounts)


def run_report(sessions: int = 200, levels: int = 5, crates: int = 100, seed: int = 42) -> List[dict]:
    """Run and print the full report."""
    deck = LevelDeck()
    deck.rebuild(levels)

    print("=" * 60)
    print("PINATA BALANCE REPORT")
    print("=" * 60)
    print()
    print(f"{'Level':<6} {'Title':<12} {'HP':>6} {'Taps':>8} {'Std':>7} {'Min':>5} {'Max':>5} {'Crit%':>6}")
    print("-" * 60)

    results = []
    for level in deck.levels:
        r = simulate_level(level, sessions=sessions, seed=seed)
        results.append(r)
        print(
            f"{r['level_id']:<6} {r['title']:<12} {r['health']:>6.0f} {r['taps_mean']:>8.1f} "
            f"{r['taps_std']:>7.2f} {r['taps_min']:>5} {r['taps_max']:>5} {r['crit_rate'] * 100:>6.1f}"
        )

    print()
    print(f"Crate openings ({crates} legendary crates):")
    for kind, amount in sorted(open_crates(crates=crates, seed=seed).items()):
        print(f"  {kind:<22} {amount:>8}")

    return results


def main():
    parser = argparse.ArgumentParser(description="Pinata balance statistics")
    parser.add_argument("--sessions", type=int, default=200, help="Sessions per level")
    parser.add_argument("--levels", type=int, default=5, help="Levels in the rebuilt deck")
    parser.add_argument("--crates", type=int, default=100, help="Crates to open")
    parser.add_argument("--seed", type=int, default=42, help="Base random seed")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    run_report(
        sessions=args.sessions,
        levels=args.levels,
        crates=args.crates,
        seed=args.seed
    )

    return 0


if __name__ == "__main__":
    sys.exit(main())
