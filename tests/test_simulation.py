"""Tests for the end-to-end bot simulation."""

from __future__ import annotations

import pytest

import simulation
from simulation import SCENARIOS, ScenarioFailed, expect


class TestExpect:
    def test_passing_condition(self) -> None:
        expect(True, "unused")

    def test_failing_condition_raises(self) -> None:
        with pytest.raises(ScenarioFailed, match="title was not delivered"):
            expect(False, "title was not delivered")


class TestScenarios:
    @pytest.mark.parametrize("num", sorted(SCENARIOS))
    def test_scenario_completes(self, num: int, capsys: pytest.CaptureFixture[str]) -> None:
        simulation.run_scenario(num)
        assert "SCENARIO" in capsys.readouterr().out

    def test_wrong_outcome_fails_scenario(self, monkeypatch: pytest.MonkeyPatch) -> None:
        # A seller bot that never settles leaves the title in escrow.
        monkeypatch.setattr(simulation.SellerBot, "finalize", lambda self, system, title_id: None)
        with pytest.raises(ScenarioFailed, match="not delivered to buyer"):
            simulation.scenario_1_happy_path()
