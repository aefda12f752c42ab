from __future__ import annotations

from agirace.actions import ActionChoice
from agirace.config import Config
from agirace.engine import evaluate_outcomes, resolve_turn
from agirace.factions import create_initial_state
from agirace.stats import refresh_global_safety
from agirace.utils import make_rng
from agirace.victory import closest_victory, most_urgent_threat, victory_distances, victory_progress


def _late_state(turn: int = 24):
    state = create_initial_state()
    state.turn = turn
    return state


def test_control_victory_with_weak_labs() -> None:
    state = _late_state()
    state.factions["us_gov"].resources.influence = 125
    gov = state.factions["us_gov"]
    out = gov.evaluate_victory(state, Config())
    assert out is not None and out.type == "control" and out.victory

    evaluate_outcomes(state, [], Config())
    assert state.game_over
    assert state.winner_id == "us_gov"
    assert state.victory_type == "control"


def test_no_victory_before_minimum_turn() -> None:
    state = _late_state(23)
    state.factions["us_gov"].resources.influence = 125
    assert state.factions["us_gov"].evaluate_victory(state, Config()) is None
    state.factions["us_lab_a"].capability_score = 95
    assert state.factions["us_lab_a"].evaluate_victory(state, Config()) is None


def test_dominant_victory() -> None:
    state = _late_state()
    state.factions["us_lab_a"].capability_score = 95
    state.factions["us_lab_b"].capability_score = 40
    state.factions["cn_lab"].capability_score = 40
    evaluate_outcomes(state, [], Config())
    assert state.winner_id == "us_lab_a" and state.victory_type == "dominant"


def test_safe_agi_deployment_wins() -> None:
    state = _late_state(23)
    for f in state.factions.values():
        f.safety_score = 85
    state.factions["us_lab_a"].can_deploy_agi = True
    refresh_global_safety(state)
    resolve_turn(state, {"us_lab_a": [ActionChoice("deploy_agi", "open")]}, make_rng(0))
    assert state.game_over
    assert state.winner_id == "us_lab_a"
    assert state.victory_type == "safe_agi"


def test_unsafe_deployment_is_catastrophe() -> None:
    state = _late_state(23)
    state.factions["us_lab_b"].can_deploy_agi = True
    resolve_turn(state, {"us_lab_b": [ActionChoice("deploy_agi", "open")]}, make_rng(0))
    assert state.game_over
    assert state.winner_id is None
    assert state.loser_id == "us_lab_b"
    assert state.loss_type == "catastrophe"


def test_non_player_loss_is_only_a_warning() -> None:
    state = _late_state()
    state.factions["cn_lab"].resources.trust = 10
    evaluate_outcomes(state, [], Config())
    assert not state.game_over
    assert any(line.startswith("Warning:") and "collapsed" in line for line in state.log)


def test_player_loss_ends_the_game() -> None:
    state = _late_state()
    state.factions["cn_lab"].resources.trust = 10
    evaluate_outcomes(state, [], Config(player_faction_id="cn_lab"))
    assert state.game_over
    assert state.loser_id == "cn_lab" and state.loss_type == "collapse"


def test_any_loss_flag_makes_losses_terminal() -> None:
    state = _late_state()
    state.factions["us_gov"].resources.influence = 20
    state.factions["us_lab_b"].capability_score = 75
    state.factions["us_lab_a"].capability_score = 30
    state.factions["cn_lab"].capability_score = 30
    cfg = Config()
    cfg.flags.terminal_on_any_loss = True
    evaluate_outcomes(state, [], cfg)
    assert state.game_over and state.loss_type == "coup" and state.loser_id == "us_gov"


def test_obsolescence() -> None:
    state = _late_state()
    state.factions["us_lab_b"].capability_score = 70
    out = state.factions["us_lab_a"].evaluate_victory(state, Config())
    assert out is not None and out.type == "obsolescence" and not out.victory


def test_regulatory_victory_at_turn_limit() -> None:
    state = _late_state(32)
    for f in state.factions.values():
        f.safety_score = 70
    refresh_global_safety(state)
    evaluate_outcomes(state, [], Config())
    assert state.winner_id == "us_gov" and state.victory_type == "regulatory"


def test_fixed_horizon_government_victory() -> None:
    state = _late_state(32)
    for f in state.factions.values():
        f.safety_score = 62
    refresh_global_safety(state)
    evaluate_outcomes(state, [], Config())
    assert state.game_over
    assert state.winner_id == "us_gov"
    assert "regulatory victory" in state.log[-1]


def test_stalemate_at_turn_limit() -> None:
    state = _late_state(32)
    evaluate_outcomes(state, [], Config())
    assert state.game_over
    assert state.winner_id is None and state.loser_id is None
    assert state.victory_type == "stalemate"
    assert "stalemate" in state.log[-1]


def test_progress_reports() -> None:
    state = create_initial_state()
    lab_paths = {p.type for p in victory_progress(state, "us_lab_a")}
    assert {"safe_agi", "dominant", "public_trust"} <= lab_paths
    gov_paths = {p.type for p in victory_progress(state, "us_gov")}
    assert {"regulatory", "alliance", "control"} <= gov_paths
    assert all(0 <= p.progress <= 100 for p in victory_progress(state, "cn_gov"))
    assert victory_progress(state, "nobody") == []
    assert closest_victory(state, "us_lab_a").type in lab_paths


def test_obsolescence_warning_and_distances() -> None:
    state = create_initial_state()
    state.factions["us_lab_b"].capability_score = 60
    threat = most_urgent_threat(state, "us_lab_a")
    assert threat is not None and threat.type == "obsolescence"
    d = victory_distances(state, "us_lab_a")
    assert d["obsolescence"]["capability_gap"] == 50
    assert d["safe_agi"]["needs_agi"] == 1.0


def test_deploying_lab_loss_is_reported_once() -> None:
    state = _late_state()
    lab = state.factions["cn_lab"]
    lab.can_deploy_agi = True
    lab.safety_score = 75
    lab.resources.trust = 10
    state.global_safety = 65
    evaluate_outcomes(state, ["cn_lab"], Config())
    assert not state.game_over
    warnings = [line for line in state.log if line.startswith("Warning:")]
    assert len(warnings) == 1 and "collapsed" in warnings[0]
