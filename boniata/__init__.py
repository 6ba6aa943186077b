"""
Boniata Package
===============

Tap-combat and loot-economy simulation for the Boniata pinata game:

- Tap, streak and critical-hit state machine
- Level tuning and level decks
- Percentage-band board drops and bag-based crate rolls
- Progress snapshots for cross-session persistence

All tunable parameters are in pinata_config.yaml.
"""
