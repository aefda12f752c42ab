# agirace/stats.py
"""Bounded mutation helpers.

Every change to a faction's resources, culture stats or scores goes through
this module so the [0, 100] bounds hold after each call.
"""
from __future__ import annotations
from typing import Mapping, Optional, TYPE_CHECKING

from .constants import (
    CAPABILITIES, SAFETY, OPS, POLICY, RESOURCE_KEYS, STAT_KEYS,
    MIN_SECURITY_LEVEL, MAX_SECURITY_LEVEL,
)
from .utils import clamp, round1

if TYPE_CHECKING:
    from .state import FactionState, GameState

# per-branch resource weights; research gain = base + weighted
RESEARCH_WEIGHTS = {
    CAPABILITIES: (("compute", 0.15), ("talent", 0.12), ("data", 0.10)),
    SAFETY:       (("talent", 0.10), ("safety_culture", 0.15), ("trust", 0.05)),
    OPS:          (("capital", 0.10), ("compute", 0.05), ("talent", 0.05)),
    POLICY:       (("influence", 0.10), ("trust", 0.05)),
}

def apply_resource_delta(faction: "FactionState", delta: Optional[Mapping[str, Optional[float]]]) -> None:
    if not delta: return
    res = faction.resources
    for key in RESOURCE_KEYS:
        d = delta.get(key)
        if d is None: continue
        setattr(res, key, clamp(getattr(res, key) + d))

def apply_stat_delta(faction: "FactionState", delta: Optional[Mapping[str, Optional[float]]]) -> None:
    if not delta: return
    for key in STAT_KEYS:
        d = delta.get(key)
        if d is None: continue
        setattr(faction, key, clamp(getattr(faction, key) + d))

def apply_score_delta(faction: "FactionState", capability: Optional[float] = None, safety: Optional[float] = None) -> None:
    if capability is not None:
        faction.capability_score = clamp(faction.capability_score + capability)
    if safety is not None:
        faction.safety_score = clamp(faction.safety_score + safety)

def apply_security_level_delta(faction: "FactionState", delta: int) -> None:
    faction.security_level = int(clamp(faction.security_level + delta, MIN_SECURITY_LEVEL, MAX_SECURITY_LEVEL))

def add_research(faction: "FactionState", branch: str, amount: float) -> None:
    # pools never go negative, even for negative base research
    faction.research[branch] = max(0.0, faction.research.get(branch, 0.0) + amount)

def _stat(faction: "FactionState", key: str) -> float:
    if key in RESOURCE_KEYS:
        return faction.resources.get(key)
    return float(getattr(faction, key))

def compute_research_gain(faction: "FactionState", branch: str, base: float) -> float:
    weights = RESEARCH_WEIGHTS.get(branch)
    if weights is None:
        return base
    weighted = sum(w * _stat(faction, key) for key, w in weights)
    return base + weighted

def compute_global_safety(state: "GameState") -> float:
    """Capability-weighted mean safety; every faction weighs at least 10."""
    if not state.factions:
        return 0.0
    total_w = 0.0; acc = 0.0
    for f in state.factions.values():
        w = max(10.0, f.capability_score)
        acc += w * f.safety_score; total_w += w
    return round1(acc / total_w)

def refresh_global_safety(state: "GameState") -> float:
    state.global_safety = compute_global_safety(state)
    return state.global_safety
