# agirace/economy.py
from __future__ import annotations
from typing import TYPE_CHECKING

from .config import Rates
from .constants import CAPABILITIES, SAFETY, OPS, POLICY
from .stats import add_research, apply_resource_delta

if TYPE_CHECKING:
    from .state import FactionState, GameState

def capability_ratio(faction: "FactionState") -> float:
    total = faction.capability_score + faction.safety_score
    return 0.5 if total <= 0 else faction.capability_score / total

def apply_lab_income(faction: "FactionState", rates: Rates) -> None:
    r = faction.resources
    capital = rates.lab_capital_base + rates.lab_capital_trust * r.trust + rates.lab_capital_influence * r.influence
    base = rates.lab_research_base + rates.lab_research_compute * r.compute + rates.lab_research_data * r.data
    w = capability_ratio(faction)

    apply_resource_delta(faction, {"capital": capital})
    add_research(faction, CAPABILITIES, rates.lab_capability_share * base * w)
    add_research(faction, SAFETY, rates.lab_safety_share * base * (1.0 - w) + rates.lab_safety_floor)
    add_research(faction, OPS, rates.lab_ops_share * base)

def apply_government_income(faction: "FactionState", rates: Rates) -> None:
    r = faction.resources
    capital = rates.gov_capital_base + rates.gov_capital_influence * r.influence + rates.gov_capital_trust * r.trust
    apply_resource_delta(faction, {"capital": capital})
    add_research(faction, POLICY, rates.gov_policy_base + rates.gov_policy_influence * r.influence)

def apply_income(state: "GameState", rates: Rates) -> None:
    for f in state.factions.values():
        f.compute_income(rates)
