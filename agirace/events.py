# agirace/events.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, TYPE_CHECKING

from .config import Config
from .stats import (
    add_research, apply_resource_delta, apply_score_delta, apply_stat_delta, refresh_global_safety,
)
from .utils import Rng

if TYPE_CHECKING:
    from .state import FactionState, GameState

logger = logging.getLogger(__name__)

# Effect kinds: resource, score, stat, research, exposure
# Targets: faction, all_labs, all_factions
@dataclass(frozen=True)
class EventEffect:
    kind: str
    key: str
    delta: float
    target: str = "faction"

@dataclass(frozen=True)
class EventChoice:
    id: str
    label: str
    effects: Tuple[EventEffect, ...]

@dataclass(frozen=True)
class EventDefinition:
    id: str
    title: str
    description: str
    weight: float
    choices: Tuple[EventChoice, ...]
    min_turn: Optional[int] = None
    max_turn: Optional[int] = None
    requires_tech: Optional[str] = None  # some faction must hold it

    def choice(self, choice_id: str) -> EventChoice:
        for c in self.choices:
            if c.id == choice_id: return c
        raise KeyError(choice_id)

def _r(key, d, target="faction"): return EventEffect("resource", key, d, target)
def _cap(d, target="faction"):    return EventEffect("score", "capability", d, target)
def _safe(d, target="faction"):   return EventEffect("score", "safety", d, target)
def _stat(key, d):                return EventEffect("stat", key, d)
def _research(branch, d):         return EventEffect("research", branch, d)

def _c(id, label, *effects) -> EventChoice:
    return EventChoice(id, label, tuple(effects))

EVENTS: Tuple[EventDefinition, ...] = (
    EventDefinition("supply_shock", "Supply Chain Shock",
                    "An export clampdown tightens access to advanced accelerators.", 1.2, (
        _c("lobby_exemptions", "Lobby for exemptions", _r("influence", -4), _r("capital", -6), _r("compute", 6)),
        _c("domestic_build", "Shift to domestic buildout", _r("capital", -10), _r("compute", 8), _safe(2)),
        _c("pause_scaling", "Pause scaling", _safe(4), _cap(-2)),
    )),
    EventDefinition("alignment_incident", "Alignment Incident",
                    "A deployed model exhibits unsafe goal pursuit. Regulators are watching.", 1.1, (
        _c("full_transparency", "Full transparency", _r("trust", 6), _safe(5), _cap(-2)),
        _c("contain_quietly", "Contain quietly", _r("trust", -5), _stat("opsec", 4), _safe(-2)),
        _c("suspend_deployments", "Suspend deployments", _safe(7), _r("capital", -6)),
    )),
    EventDefinition("breakthrough_rumor", "Breakthrough Rumor",
                    "Leaked hints suggest a rival is close to a major capability jump.", 1.0, (
        _c("accelerate_training", "Accelerate training", _r("compute", -4), _cap(6), _safe(-3)),
        _c("joint_review", "Joint safety review", _safe(5), _r("trust", 3), _cap(-2)),
        _c("ignore_rumor", "Ignore the rumor", _r("capital", 2)),
    )),
    EventDefinition("funding_surge", "Funding Surge",
                    "A wave of capital looks for returns in frontier AI.", 0.9, (
        _c("invest_compute", "Expand compute", _r("capital", 6), _r("compute", 8)),
        _c("hire_safety", "Hire safety team", _r("talent", 5), _safe(4)),
        _c("policy_push", "Policy push", _r("influence", 6), _r("trust", 2)),
    )),
    EventDefinition("global_summit", "Global Safety Summit",
                    "Governments propose a binding summit to slow capability races.", 1.0, (
        # the pact lifts everyone's safety; global safety follows from the scores
        _c("sign_pact", "Sign the pact", _safe(4, "all_factions"), _safe(4), _cap(-2)),
        _c("no_commitment", "No commitment", _r("influence", -2), _cap(2)),
        _c("demand_audits", "Demand audits", _r("trust", 3), _r("influence", 2)),
    )),
    EventDefinition("breakthrough_paper", "Breakthrough Paper",
                    "A major capability jump is published and everyone races to replicate it.", 1.2, (
        _c("fast_follow", "Fast-follow implementation", _r("compute", -5), _r("talent", -3), _cap(8)),
        _c("safety_first_adaptation", "Safe adaptation study", _safe(5), _cap(3), _r("trust", 3)),
        _c("publish_critique", "Publish safety critique",
           _safe(3, "all_factions"), _r("influence", 4), _cap(-2, "all_labs")),
    ), min_turn=4),
    EventDefinition("jailbreak_wave", "Jailbreak Wave",
                    "A new family of jailbreaks spreads across deployed models.", 1.1, (
        _c("rapid_patch", "Rapid patch", _r("compute", -3), _safe(4)),
        _c("deeper_fix", "Deeper architectural fix", _safe(7), _cap(-2), _research("safety", 10)),
        _c("media_response", "Public response", _r("trust", 2), _safe(2), _r("influence", 2)),
    ), min_turn=3),
    EventDefinition("chip_war_escalation", "Chip War Escalation",
                    "Export controls on advanced chips tighten again.", 1.2, (
        _c("stockpile_chips", "Stockpile chips", _r("capital", -12), _r("compute", 10)),
        _c("lobby_exemptions", "Lobby for exemptions", _r("influence", -5), _r("compute", 6)),
        _c("efficiency_research", "Efficiency research", _research("ops", 15), _cap(3)),
    ), min_turn=4),
    EventDefinition("compute_shortage", "Global Compute Shortage",
                    "Demand for accelerators outstrips supply worldwide.", 1.1, (
        _c("pay_premium", "Pay the premium", _r("capital", -12), _r("compute", 8)),
        _c("cloud_partnerships", "Cloud partnerships", _r("capital", -6), _r("compute", 5), _r("influence", 2)),
        _c("optimize_existing", "Optimize existing compute", _research("ops", 12), _cap(2)),
    )),
    EventDefinition("interpretability_success", "Interpretability Breakthrough",
                    "Interpretability tools finally expose what frontier models are doing.", 0.85, (
        _c("publish_tools", "Publish the tools", _safe(5, "all_factions"), _r("trust", 6), _safe(3, "all_labs")),
        _c("internal_advantage", "Keep as advantage", _safe(8), _stat("opsec", 2)),
        _c("commercial_product", "Commercialize", _r("capital", 8), _r("influence", 4)),
    ), requires_tech="safe_interpretability"),
)

def get_event(event_id: str) -> EventDefinition:
    for ev in EVENTS:
        if ev.id == event_id: return ev
    raise KeyError(event_id)

def select_event(state: "GameState", rng: Rng, history: Sequence[str], cfg: Optional[Config] = None,
                 events: Sequence[EventDefinition] = EVENTS) -> Optional[EventDefinition]:
    cfg = cfg or Config()
    if rng() > cfg.event_chance:
        return None
    recent = set(history[-cfg.event_history:]) if cfg.event_history else set()
    eligible = [
        ev for ev in events
        if ev.id not in recent
        and (ev.min_turn is None or state.turn >= ev.min_turn)
        and (ev.max_turn is None or state.turn <= ev.max_turn)
        and (ev.requires_tech is None or any(ev.requires_tech in f.unlocked_techs for f in state.factions.values()))
    ]
    if not eligible:
        return None
    roll = rng() * sum(ev.weight for ev in eligible)
    for ev in eligible:
        roll -= ev.weight
        if roll <= 0:
            return ev
    return eligible[-1]

def _targets(state: "GameState", faction: "FactionState", target: str) -> List["FactionState"]:
    if target == "all_labs": return state.labs()
    if target == "all_factions": return list(state.factions.values())
    return [faction]

def apply_event_effect(state: "GameState", faction: "FactionState", effect: EventEffect) -> None:
    for f in _targets(state, faction, effect.target):
        if effect.kind == "resource": apply_resource_delta(f, {effect.key: effect.delta})
        elif effect.kind == "score" and effect.key == "capability": apply_score_delta(f, capability=effect.delta)
        elif effect.kind == "score" and effect.key == "safety": apply_score_delta(f, safety=effect.delta)
        elif effect.kind == "stat": apply_stat_delta(f, {effect.key: effect.delta})
        elif effect.kind == "research": add_research(f, effect.key, effect.delta)
        elif effect.kind == "exposure": f.exposure = max(0.0, f.exposure + effect.delta)
        else:
            logger.warning("ignoring event effect of unknown kind %r", effect.kind)

def apply_event_choice(state: "GameState", faction_id: str, event: EventDefinition, choice: EventChoice) -> bool:
    faction = state.get(faction_id)
    if faction is None:
        logger.warning("event %s: unknown faction %r", event.id, faction_id)
        return False
    for effect in choice.effects:
        apply_event_effect(state, faction, effect)
    refresh_global_safety(state)
    state.log.append(f"{event.title}: {faction.name} chose to {choice.label.lower()}.")
    return True
