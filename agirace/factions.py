# agirace/factions.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional

from .config import Config
from .constants import LAB, GOVERNMENT
from .errors import MissingStrategyError
from .state import FACTION_CLASSES, FactionState, GameState, Resources, calendar_for
from .stats import refresh_global_safety

@dataclass(frozen=True)
class StrategyProfile:
    risk_tolerance: float
    safety_focus: float
    openness_preference: float
    espionage_focus: float

@dataclass(frozen=True)
class FactionTemplate:
    id: str
    name: str
    type: str
    resources: Dict[str, float]
    safety_culture: float
    opsec: float
    capability_score: float
    safety_score: float
    strategy: StrategyProfile

def _t(id, name, type, compute, talent, capital, data, influence, trust,
       safety_culture, opsec, capability, safety, strategy) -> FactionTemplate:
    return FactionTemplate(
        id=id, name=name, type=type,
        resources=dict(compute=compute, talent=talent, capital=capital, data=data,
                       influence=influence, trust=trust),
        safety_culture=safety_culture, opsec=opsec,
        capability_score=capability, safety_score=safety,
        strategy=StrategyProfile(*strategy),
    )

FACTION_TEMPLATES: List[FactionTemplate] = [
    _t("us_lab_a", "OpenBrain", LAB, 60, 80, 60, 60, 40, 60, 80, 55, 10, 25, (35, 75, 70, 15)),
    _t("us_lab_b", "Nexus Labs", LAB, 80, 70, 80, 60, 40, 55, 60, 60, 15, 20, (55, 45, 45, 25)),
    _t("cn_lab", "DeepCent", LAB, 75, 60, 70, 80, 40, 45, 45, 70, 15, 15, (65, 35, 30, 45)),
    _t("us_gov", "US Executive", GOVERNMENT, 20, 30, 70, 20, 90, 70, 60, 50, 0, 35, (30, 65, 60, 20)),
    _t("cn_gov", "PRC Executive", GOVERNMENT, 20, 30, 70, 20, 85, 55, 50, 55, 0, 30, (40, 50, 50, 30)),
]

STRATEGIES: Dict[str, StrategyProfile] = {t.id: t.strategy for t in FACTION_TEMPLATES}

# governments back their own national labs
HOME_LABS: Dict[str, List[str]] = {"us_gov": ["us_lab_a", "us_lab_b"], "cn_gov": ["cn_lab"]}

def get_strategy(faction_id: str) -> StrategyProfile:
    try:
        return STRATEGIES[faction_id]
    except KeyError:
        raise MissingStrategyError(faction_id) from None

def faction_from_template(t: FactionTemplate) -> FactionState:
    cls = FACTION_CLASSES[t.type]
    f = cls(
        id=t.id, name=t.name, resources=Resources(**t.resources),
        safety_culture=float(t.safety_culture), opsec=float(t.opsec),
        capability_score=float(t.capability_score), safety_score=float(t.safety_score),
    )
    f.public_opinion = 50.0 if t.type == GOVERNMENT else f.resources.trust
    return f

def create_initial_state(cfg: Optional[Config] = None, templates: Optional[List[FactionTemplate]] = None) -> GameState:
    cfg = cfg or Config()
    templates = FACTION_TEMPLATES if templates is None else templates
    year, quarter = calendar_for(0, cfg.start_year, cfg.start_quarter)
    state = GameState(factions={t.id: faction_from_template(t) for t in templates}, year=year, quarter=quarter)
    state.alliances = {fid: [] for fid in state.factions}
    refresh_global_safety(state)
    state.log.append(f"{year} Q{quarter}: the race begins.")
    return state
