from __future__ import annotations

import pytest

from agirace.events import EVENTS, apply_event_choice, get_event, select_event
from agirace.factions import create_initial_state
from agirace.policies import choose_event_option
from agirace.stats import compute_global_safety
from agirace.utils import sequence_rng


def test_quiet_quarter_when_roll_exceeds_chance() -> None:
    state = create_initial_state()
    assert select_event(state, sequence_rng([0.9]), []) is None


def test_weighted_pick_takes_first_event_on_zero_roll() -> None:
    state = create_initial_state()
    assert select_event(state, sequence_rng([0.1, 0.0]), []).id == "supply_shock"


def test_recent_events_are_skipped() -> None:
    state = create_initial_state()
    ev = select_event(state, sequence_rng([0.1, 0.0]), ["supply_shock"])
    assert ev.id == "alignment_incident"


def test_nothing_eligible_gives_none() -> None:
    state = create_initial_state()
    history = [ev.id for ev in EVENTS[:3]]
    assert select_event(state, sequence_rng([0.0]), history, events=EVENTS[:3]) is None


def test_pact_lifts_every_faction() -> None:
    state = create_initial_state()
    before = {fid: f.safety_score for fid, f in state.factions.items()}
    ev = get_event("global_summit")
    assert apply_event_choice(state, "us_gov", ev, ev.choice("sign_pact"))
    assert state.factions["us_gov"].safety_score == before["us_gov"] + 8
    assert state.factions["us_gov"].capability_score == 0.0
    for fid in ("us_lab_a", "us_lab_b", "cn_lab", "cn_gov"):
        assert state.factions[fid].safety_score == before[fid] + 4
    assert state.global_safety == compute_global_safety(state)
    assert state.log[-1] == "Global Safety Summit: US Executive chose to sign the pact."


def test_unknown_faction_or_choice() -> None:
    state = create_initial_state()
    ev = get_event("funding_surge")
    assert not apply_event_choice(state, "nobody", ev, ev.choices[0])
    with pytest.raises(KeyError):
        ev.choice("nope")
    with pytest.raises(KeyError):
        get_event("meteor")


def test_safety_minded_lab_picks_transparency() -> None:
    state = create_initial_state()
    choice = choose_event_option(state, "us_lab_a", get_event("alignment_incident"))
    assert choice.id == "full_transparency"


def test_later_events_wait_for_their_turn() -> None:
    state = create_initial_state()
    late = [get_event(i) for i in ("breakthrough_paper", "jailbreak_wave", "compute_shortage")]
    assert select_event(state, sequence_rng([0.1, 0.0]), [], events=late).id == "compute_shortage"
    state.turn = 3
    assert select_event(state, sequence_rng([0.1, 0.0]), [], events=late).id == "jailbreak_wave"
    state.turn = 4
    assert select_event(state, sequence_rng([0.1, 0.0]), [], events=late).id == "breakthrough_paper"


def test_tech_gated_event_needs_an_unlock() -> None:
    state = create_initial_state()
    gated = [get_event("interpretability_success")]
    assert select_event(state, sequence_rng([0.1, 0.0]), [], events=gated) is None
    state.factions["cn_lab"].unlocked_techs.add("safe_interpretability")
    assert select_event(state, sequence_rng([0.1, 0.0]), [], events=gated).id == "interpretability_success"


def test_research_effects_feed_the_pools() -> None:
    state = create_initial_state()
    ev = get_event("chip_war_escalation")
    apply_event_choice(state, "cn_lab", ev, ev.choice("efficiency_research"))
    lab = state.factions["cn_lab"]
    assert lab.research["ops"] == 15
    assert lab.capability_score == 15 + 3
