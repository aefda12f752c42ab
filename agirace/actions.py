# agirace/actions.py
from __future__ import annotations
from dataclasses import dataclass, field as dc_field
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from .constants import (
    LAB, GOVERNMENT, OPEN, SECRET, CAPABILITIES, SAFETY, OPS, POLICY,
    RESEARCH_CAPABILITIES, RESEARCH_SAFETY, BUILD_COMPUTE, DEPLOY_PRODUCTS, DEPLOY_AGI,
    POLICY_WORK, ESPIONAGE, SUBSIDIZE, REGULATE, COUNTERINTEL, HIRE_TALENT,
    PUBLISH_RESEARCH, FORM_ALLIANCE, SECURE_FUNDING, HARDWARE_PARTNERSHIP,
    OPEN_SOURCE_RELEASE, DEFENSIVE_MEASURES, ACCELERATE_TIMELINE, SAFETY_PAUSE,
    OPEN_RESEARCH, MOVE_FAST, STATE_RESOURCES, EXECUTIVE_ORDER, STRATEGIC_INITIATIVE,
)
from .errors import UnknownActionError

@dataclass(frozen=True)
class ScoreEffects:
    capability_delta: float = 0.0
    safety_delta: float = 0.0

@dataclass(frozen=True)
class ActionDefinition:
    id: str
    name: str
    description: str
    allowed_for: Tuple[str, ...]
    base_research: Mapping[str, float] = dc_field(default_factory=dict)
    base_resource_delta: Mapping[str, float] = dc_field(default_factory=dict)
    exposure: float = 0.0
    score_effects: Optional[ScoreEffects] = None
    security_level_delta: int = 0
    faction_specific: Optional[str] = None
    target: bool = False

    @property
    def kind(self) -> str:
        return self.id

    def available_to(self, faction_id: str, faction_type: str) -> bool:
        if faction_type not in self.allowed_for: return False
        return self.faction_specific is None or self.faction_specific == faction_id

def _a(id, name, description, allowed_for, **kw) -> ActionDefinition:
    for k in ("base_research", "base_resource_delta"):
        if k in kw: kw[k] = MappingProxyType(dict(kw[k]))
    return ActionDefinition(id=id, name=name, description=description, allowed_for=tuple(allowed_for), **kw)

_BOTH = (LAB, GOVERNMENT)

_CATALOG: List[ActionDefinition] = [
    _a(RESEARCH_CAPABILITIES, "Capabilities Sprint", "Push frontier model capability.", (LAB,),
       base_research={CAPABILITIES: 12}, exposure=1),
    _a(RESEARCH_SAFETY, "Alignment Research", "Invest in alignment and interpretability.", _BOTH,
       base_research={SAFETY: 12}, exposure=1),
    _a(BUILD_COMPUTE, "Build Compute", "Expand datacenter capacity.", (LAB,),
       base_resource_delta={"capital": -10, "compute": 8}),
    _a(DEPLOY_PRODUCTS, "Deploy Products", "Ship products for revenue and public goodwill.", (LAB,),
       base_resource_delta={"capital": 12, "trust": 2}),
    _a(DEPLOY_AGI, "Deploy AGI", "Attempt deployment of a general system.", (LAB,)),
    _a(POLICY_WORK, "Policy Push", "Shape regulation and standards.", _BOTH,
       base_research={POLICY: 10}, base_resource_delta={"influence": 3, "trust": 1}),
    _a(ESPIONAGE, "Espionage", "Steal research from a rival.", _BOTH, exposure=2, target=True),
    _a(SUBSIDIZE, "Subsidize Lab", "Direct funding to a lab.", (GOVERNMENT,),
       base_resource_delta={"capital": -8}, target=True),
    _a(REGULATE, "Regulate Lab", "Impose compute and deployment limits on a lab.", (GOVERNMENT,), target=True),
    _a(COUNTERINTEL, "Counterintelligence", "Harden operational security.", (GOVERNMENT,),
       base_resource_delta={"capital": -4}),
    _a(HIRE_TALENT, "Hire Talent", "Recruit top researchers.", (LAB,),
       base_resource_delta={"capital": -8, "talent": 10}),
    _a(PUBLISH_RESEARCH, "Publish Research", "Publish safety findings openly.", (LAB,),
       base_research={SAFETY: 4}, base_resource_delta={"trust": 6, "influence": 2}),
    _a(FORM_ALLIANCE, "Form Alliance", "Create a cooperative pact.", _BOTH,
       base_research={POLICY: 5}, base_resource_delta={"influence": 3, "trust": 2}, target=True),
    _a(SECURE_FUNDING, "Secure Funding", "Appropriate new budget.", (GOVERNMENT,),
       base_resource_delta={"capital": 15, "influence": -2}),
    _a(HARDWARE_PARTNERSHIP, "Hardware Partnership", "Partner with a chip supplier.", (LAB,),
       base_resource_delta={"compute": 12, "capital": -6}),
    _a(OPEN_SOURCE_RELEASE, "Open Source Release", "Release model weights to the public.", (LAB,),
       base_research={CAPABILITIES: -5}, base_resource_delta={"trust": 10, "influence": 4},
       score_effects=ScoreEffects(capability_delta=-3)),
    _a(DEFENSIVE_MEASURES, "Defensive Measures", "Harden infrastructure against intrusion.", (LAB,),
       base_research={OPS: 6}, base_resource_delta={"capital": -5}, security_level_delta=1),
    _a(ACCELERATE_TIMELINE, "Accelerate Timeline", "Cut corners to ship sooner.", (LAB,),
       base_research={CAPABILITIES: 18}, base_resource_delta={"trust": -4}, exposure=3,
       score_effects=ScoreEffects(capability_delta=8, safety_delta=-6)),
    _a(SAFETY_PAUSE, "Safety Pause", "Pause scaling to consolidate safety.", (LAB,),
       base_research={SAFETY: 15}, base_resource_delta={"trust": 5},
       score_effects=ScoreEffects(capability_delta=-2, safety_delta=6)),
    _a(OPEN_RESEARCH, "Open Research Initiative", "Collaborative research with academia.", (LAB,),
       base_research={CAPABILITIES: 8, SAFETY: 4}, base_resource_delta={"trust": 8, "influence": 3},
       score_effects=ScoreEffects(capability_delta=2), faction_specific="us_lab_a"),
    _a(MOVE_FAST, "Move Fast", "Aggressive scaling sprint.", (LAB,),
       base_research={CAPABILITIES: 20}, base_resource_delta={"trust": -3}, exposure=4,
       score_effects=ScoreEffects(capability_delta=10, safety_delta=-4), faction_specific="us_lab_b"),
    _a(STATE_RESOURCES, "State Resources", "Draw on state-backed compute and data.", (LAB,),
       base_research={CAPABILITIES: 10}, base_resource_delta={"compute": 15, "data": 8},
       faction_specific="cn_lab"),
    _a(EXECUTIVE_ORDER, "Executive Order", "Unilateral restrictions on a lab.", (GOVERNMENT,),
       base_research={POLICY: 8}, base_resource_delta={"influence": -5}, faction_specific="us_gov",
       target=True),
    _a(STRATEGIC_INITIATIVE, "Strategic Initiative", "National program backing a lab.", (GOVERNMENT,),
       base_research={POLICY: 6}, base_resource_delta={"capital": -10}, faction_specific="cn_gov",
       target=True),
]

ACTIONS: Mapping[str, ActionDefinition] = MappingProxyType({a.id: a for a in _CATALOG})

def get_action(action_id: str) -> ActionDefinition:
    try:
        return ACTIONS[action_id]
    except KeyError:
        raise UnknownActionError(action_id) from None

def actions_for(faction_id: str, faction_type: str) -> List[ActionDefinition]:
    return [a for a in ACTIONS.values() if a.available_to(faction_id, faction_type)]

@dataclass(frozen=True)
class ActionChoice:
    action_id: str
    openness: str = OPEN
    target_faction_id: Optional[str] = None

    def __post_init__(self):
        get_action(self.action_id)
        if self.openness not in (OPEN, SECRET):
            raise ValueError(f"openness must be {OPEN!r} or {SECRET!r}, got {self.openness!r}")

    @property
    def action(self) -> ActionDefinition:
        return ACTIONS[self.action_id]

    @classmethod
    def from_dict(cls, d: Dict[str, Optional[str]]) -> "ActionChoice":
        return cls(action_id=d["action_id"], openness=d.get("openness") or OPEN,
                   target_faction_id=d.get("target_faction_id"))
