"""
Tests for the balance report tool.
"""

from boniata.pinata_core.level_deck import LevelConfig
from tools.balance_report import open_crates, run_report, simulate_level


class TestBalanceReport:
    """Smoke tests on small runs."""

    def test_simulate_level_pops_every_session(self):
        result = simulate_level(LevelConfig.warm_up(1), sessions=5, seed=1)

        assert result["title"] == "Warm Up"
        assert result["taps_min"] > 0
        assert result["taps_min"] <= result["taps_mean"] <= result["taps_max"]
        assert 0.0 <= result["crit_rate"] <= 1.0

    def test_open_crates_totals(self):
        amounts = open_crates(crates=4, seed=3)

        # legendary crates always guarantee keys
        assert amounts["guaranteed_keys"] == 4
        assert amounts["coins_total"] == amounts.get("coins", 0)
        assert amounts["candy_total"] == amounts.get("candy", 0)

    def test_run_report(self, capsys):
        results = run_report(sessions=2, levels=2, crates=2, seed=0)

        assert [r["level_id"] for r in results] == [1, 2]
        assert "PINATA BALANCE REPORT" in capsys.readouterr().out
