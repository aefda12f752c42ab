from __future__ import annotations

import pytest

from agirace.config import Config
from agirace.factions import create_initial_state
from agirace.scenarios import SCENARIOS, make_scenario, run_scenario_batch


def test_scenarios_leave_the_base_config_alone() -> None:
    base = Config()
    cfg, state = make_scenario("arms_race", base)
    assert cfg.detection.per_exposure == 0.05
    assert base.detection.per_exposure != 0.05
    baseline = create_initial_state()
    assert state.factions["cn_lab"].capability_score == baseline.factions["cn_lab"].capability_score + 10
    assert state.factions["us_gov"].capability_score == 0.0


def test_summit_starts_allied() -> None:
    cfg, state = make_scenario("safety_summit")
    assert cfg.flags.enable_events
    assert "cn_gov" in state.allies_of("us_gov")
    assert "treaty:cn_gov|us_gov" in state.treaties


def test_unknown_scenario() -> None:
    with pytest.raises(KeyError):
        make_scenario("moon_race")


def test_batch_runs_every_pair() -> None:
    df = run_scenario_batch(["baseline", "arms_race"], [1, 2])
    assert len(df) == 4
    assert set(df["scenario"]) == {"baseline", "arms_race"}
    assert (df["turns"] <= Config().max_turn).all()
    assert set(SCENARIOS) == {"baseline", "arms_race", "safety_summit"}
