from __future__ import annotations

from dataclasses import replace

import pytest

from agirace.actions import ActionChoice
from agirace.config import Config
from agirace.errors import MissingStrategyError
from agirace.factions import create_initial_state
from agirace.policies import POLICIES, decide_actions_heuristic, policy_random
from agirace.utils import make_rng, sequence_rng


def test_government_regulates_leader_and_backs_weakest_home_lab() -> None:
    state = create_initial_state()
    choices = decide_actions_heuristic(state, "us_gov", sequence_rng([0.5]))
    assert choices == [ActionChoice("regulate", "open", "us_lab_b"), ActionChoice("subsidize", "open", "us_lab_a")]


def test_unsafe_lab_researches_safety() -> None:
    state = create_initial_state()
    choices = decide_actions_heuristic(state, "us_lab_a", sequence_rng([0.1, 0.0]))
    assert choices == [ActionChoice("research_safety", "open"), ActionChoice("policy", "open")]


def test_ready_lab_deploys() -> None:
    state = create_initial_state()
    lab = state.factions["us_lab_a"]
    lab.can_deploy_agi, lab.safety_score = True, 75.0
    state.global_safety = 65.0
    assert decide_actions_heuristic(state, "us_lab_a", sequence_rng([0.5])) == [ActionChoice("deploy_agi", "open")]


def test_faction_without_profile_raises() -> None:
    state = create_initial_state()
    state.factions["rogue"] = replace(state.factions["cn_lab"], id="rogue")
    with pytest.raises(MissingStrategyError):
        decide_actions_heuristic(state, "rogue", sequence_rng([0.5]))


def test_policies_respect_action_points() -> None:
    cfg = Config(action_points=1)
    rng = make_rng(9)
    state = create_initial_state(cfg)
    for name, policy in POLICIES.items():
        for fid in state.factions:
            assert len(policy(state, fid, rng, cfg)) <= 1, name
    assert decide_actions_heuristic(state, "nobody", rng) == []


def test_random_policy_targets_rivals() -> None:
    state = create_initial_state()
    rng = make_rng(4)
    for _ in range(20):
        for c in policy_random(state, "cn_gov", rng):
            assert c.target_faction_id != "cn_gov"
            assert c.action.available_to("cn_gov", "government")
