# agirace/victory.py
from __future__ import annotations
from dataclasses import dataclass, field as dc_field
from typing import Dict, List, Optional, TYPE_CHECKING

from .config import Config
from .constants import (
    VICTORY_SAFE_AGI, VICTORY_DOMINANT, VICTORY_PUBLIC_TRUST, VICTORY_REGULATORY,
    VICTORY_ALLIANCE, VICTORY_CONTROL, LOSS_CATASTROPHE, LOSS_COLLAPSE,
    LOSS_OBSOLESCENCE, LOSS_COUP,
)

if TYPE_CHECKING:
    from .state import FactionState, GameState

@dataclass
class Outcome:
    victory: bool
    type: str
    faction_id: str
    message: str
    details: Dict[str, float] = dc_field(default_factory=dict)

def _rival_labs(state: "GameState", faction: "FactionState") -> List["FactionState"]:
    return [f for f in state.labs() if f.id != faction.id]

def max_rival_capability(state: "GameState", faction: "FactionState") -> float:
    return max([0.0] + [f.capability_score for f in _rival_labs(state, faction)])

def too_early(state: "GameState", cfg: Config) -> bool:
    return state.turn < cfg.min_victory_turn

# --- Deployment ---
def check_deployment(state: "GameState", faction: "FactionState", cfg: Config) -> Optional[Outcome]:
    if not faction.can_deploy_agi: return None
    v = cfg.victory
    if faction.safety_score >= v.safe_agi_faction_safety and state.global_safety >= v.safe_agi_global_safety:
        return Outcome(True, VICTORY_SAFE_AGI, faction.id,
                       f"{faction.name} deployed safe AGI and wins the race!",
                       {"faction_safety": faction.safety_score, "global_safety": state.global_safety})
    if faction.safety_score < v.catastrophe_faction_safety or state.global_safety < v.catastrophe_global_safety:
        return Outcome(False, LOSS_CATASTROPHE, faction.id,
                       f"{faction.name} deployed unsafe AGI. Global catastrophe ensues.",
                       {"faction_safety": faction.safety_score, "global_safety": state.global_safety})
    return None

# --- Lab checks ---
def check_dominant(state: "GameState", faction: "FactionState", cfg: Config) -> Optional[Outcome]:
    v = cfg.victory
    if faction.capability_score < v.dominant_min_capability: return None
    rival = max_rival_capability(state, faction)
    if rival <= 0:
        return Outcome(True, VICTORY_DOMINANT, faction.id,
                       f"{faction.name} achieved total technological dominance!",
                       {"capability": faction.capability_score, "lead_pct": 100.0})
    lead = (faction.capability_score - rival) / rival * 100.0
    if lead >= v.dominant_lead_pct:
        return Outcome(True, VICTORY_DOMINANT, faction.id,
                       f"{faction.name} achieved technological dominance with a {lead:.0f}% lead!",
                       {"capability": faction.capability_score, "second_place": rival, "lead_pct": lead})
    return None

def check_public_trust(state: "GameState", faction: "FactionState", cfg: Config) -> Optional[Outcome]:
    v = cfg.victory
    if faction.resources.trust >= v.public_trust_min_trust and faction.capability_score >= v.public_trust_min_capability:
        return Outcome(True, VICTORY_PUBLIC_TRUST, faction.id,
                       f"{faction.name} won through public trust and successful product deployment!",
                       {"trust": faction.resources.trust, "capability": faction.capability_score})
    return None

def check_collapse(state: "GameState", faction: "FactionState", cfg: Config) -> Optional[Outcome]:
    if faction.resources.trust < cfg.victory.collapse_trust:
        return Outcome(False, LOSS_COLLAPSE, faction.id,
                       f"{faction.name} collapsed due to loss of public trust.",
                       {"trust": faction.resources.trust})
    return None

def check_obsolescence(state: "GameState", faction: "FactionState", cfg: Config) -> Optional[Outcome]:
    rivals = _rival_labs(state, faction)
    if not rivals: return None
    gap = max(f.capability_score for f in rivals) - faction.capability_score
    if gap >= cfg.victory.obsolescence_gap:
        return Outcome(False, LOSS_OBSOLESCENCE, faction.id,
                       f"{faction.name} became obsolete, falling {gap:.0f} points behind.",
                       {"capability": faction.capability_score, "gap": gap})
    return None

# --- Government checks ---
def check_regulatory(state: "GameState", faction: "FactionState", cfg: Config) -> Optional[Outcome]:
    v = cfg.victory
    if state.turn < cfg.max_turn: return None
    labs = state.labs()
    if all(l.safety_score >= v.regulatory_lab_safety for l in labs) and state.global_safety >= v.regulatory_global_safety:
        return Outcome(True, VICTORY_REGULATORY, faction.id,
                       f"{faction.name} achieved regulatory victory! All labs maintained safe practices through {state.year}.",
                       {"labs": float(len(labs)), "global_safety": state.global_safety})
    return None

def check_alliance(state: "GameState", faction: "FactionState", cfg: Config) -> Optional[Outcome]:
    v = cfg.victory
    if faction.resources.influence < v.alliance_min_influence: return None
    partners = [f for f in state.factions.values() if f.id != faction.id and f.resources.trust >= v.alliance_min_trust]
    if len(partners) >= v.alliance_min_allies:
        return Outcome(True, VICTORY_ALLIANCE, faction.id,
                       f"{faction.name} forged a global safety treaty!",
                       {"allies": float(len(partners)), "influence": faction.resources.influence})
    return None

def check_control(state: "GameState", faction: "FactionState", cfg: Config) -> Optional[Outcome]:
    v = cfg.victory
    if faction.resources.influence < v.control_min_influence: return None
    if all(l.capability_score <= v.control_lab_capability_max for l in state.labs()):
        return Outcome(True, VICTORY_CONTROL, faction.id,
                       f"{faction.name} achieved total control over AI development!",
                       {"influence": faction.resources.influence})
    return None

def check_coup(state: "GameState", faction: "FactionState", cfg: Config) -> Optional[Outcome]:
    v = cfg.victory
    if faction.resources.influence >= v.coup_min_influence: return None
    dangerous = [l for l in state.labs() if l.capability_score >= v.coup_lab_capability]
    if dangerous:
        return Outcome(False, LOSS_COUP, faction.id,
                       f"{faction.name} lost control as AI labs became too powerful.",
                       {"influence": faction.resources.influence, "dangerous_labs": float(len(dangerous))})
    return None

LAB_CHECKS = (check_dominant, check_public_trust, check_collapse, check_obsolescence)
GOVERNMENT_CHECKS = (check_alliance, check_control, check_collapse, check_coup)

def _first(checks, state, faction, cfg) -> Optional[Outcome]:
    for check in checks:
        out = check(state, faction, cfg)
        if out is not None:
            return out
    return None

def evaluate_lab(state: "GameState", faction: "FactionState", cfg: Config, deploying: bool = False) -> Optional[Outcome]:
    if too_early(state, cfg): return None
    # the deploy pass only settles the deployment; regular checks run once per turn
    if deploying: return check_deployment(state, faction, cfg)
    return _first(LAB_CHECKS, state, faction, cfg)

def evaluate_government(state: "GameState", faction: "FactionState", cfg: Config) -> Optional[Outcome]:
    # regulatory carries its own turn check
    out = check_regulatory(state, faction, cfg)
    if out is not None or too_early(state, cfg): return out
    return _first(GOVERNMENT_CHECKS, state, faction, cfg)

def evaluate_horizon(state: "GameState", cfg: Config) -> Optional[Outcome]:
    """Turn-limit fallback: governments win if every lab stayed safe, else None (stalemate)."""
    v = cfg.victory
    govs = state.governments()
    if not govs: return None
    if not all(l.safety_score >= v.horizon_lab_safety for l in state.labs()): return None
    if state.global_safety < v.horizon_global_safety: return None
    winner = max(govs, key=lambda g: (g.resources.influence, g.resources.trust))
    return Outcome(True, VICTORY_REGULATORY, winner.id,
                   f"Turn limit reached with every lab safe: {winner.name} claims a regulatory victory.",
                   {"global_safety": state.global_safety})

# --- Progress tracking ---
@dataclass
class VictoryProgress:
    type: str
    label: str
    progress: int
    requirements: List[str]
    status: str
    is_warning: bool = False

def _pct(x: float, of: float) -> float:
    return min(100.0, x / of * 100.0) if of > 0 else 100.0

def victory_progress(state: "GameState", faction_id: str, cfg: Optional[Config] = None) -> List[VictoryProgress]:
    cfg = cfg or Config(); v = cfg.victory
    f = state.get(faction_id)
    if f is None: return []
    out: List[VictoryProgress] = []
    labs = state.labs()
    if f.is_lab:
        rival = max_rival_capability(state, f)
        lead = (f.capability_score - rival) / rival * 100.0 if rival > 0 else 100.0
        out.append(VictoryProgress(
            VICTORY_SAFE_AGI, "Safe AGI Victory",
            round((_pct(f.safety_score, v.safe_agi_faction_safety) + _pct(state.global_safety, v.safe_agi_global_safety)
                   + (100.0 if f.can_deploy_agi else 0.0)) / 3),
            [f"Safety >= {v.safe_agi_faction_safety:g}", f"Global Safety >= {v.safe_agi_global_safety:g}",
             "AGI breakthrough unlocked"],
            f"Safety: {f.safety_score:.0f}, Global: {state.global_safety:.0f}, AGI: {'Ready' if f.can_deploy_agi else 'Not ready'}"))
        out.append(VictoryProgress(
            VICTORY_DOMINANT, "Dominant Victory", round(max(0.0, _pct(lead, v.dominant_lead_pct))),
            [f"{v.dominant_lead_pct:g}%+ capability lead", f"Capability >= {v.dominant_min_capability:g}"],
            f"Lead: {lead:.0f}%, Capability: {f.capability_score:.0f}"))
        out.append(VictoryProgress(
            VICTORY_PUBLIC_TRUST, "Public Trust Victory",
            round((_pct(f.resources.trust, v.public_trust_min_trust) + _pct(f.capability_score, v.public_trust_min_capability)) / 2),
            [f"Trust >= {v.public_trust_min_trust:g}", f"Capability >= {v.public_trust_min_capability:g}"],
            f"Trust: {f.resources.trust:.0f}, Capability: {f.capability_score:.0f}"))
        margin = f.resources.trust - v.collapse_trust
        collapse = max(0.0, min(100.0, 100.0 - margin / 30.0 * 100.0))
        if collapse > 50:
            out.append(VictoryProgress(LOSS_COLLAPSE, "Trust Collapse Warning", round(collapse),
                                       [f"Trust must stay above {v.collapse_trust:g}"],
                                       f"Trust: {f.resources.trust:.0f} (margin: {margin:.0f})", True))
        gap = rival - f.capability_score
        obs = max(0.0, min(100.0, _pct(gap, v.obsolescence_gap)))
        if obs > 40:
            out.append(VictoryProgress(LOSS_OBSOLESCENCE, "Obsolescence Warning", round(obs),
                                       [f"Don't fall {v.obsolescence_gap:g}+ points behind"],
                                       f"Gap: {gap:.0f} points behind leader", True))
    else:
        compliant = [l for l in labs if l.safety_score >= v.regulatory_lab_safety]
        lab_share = len(compliant) / len(labs) * 100.0 if labs else 100.0
        out.append(VictoryProgress(
            VICTORY_REGULATORY, "Regulatory Victory",
            round((lab_share + _pct(state.global_safety, v.regulatory_global_safety) + _pct(state.turn, cfg.max_turn)) / 3),
            [f"All labs safety >= {v.regulatory_lab_safety:g}", f"Global Safety >= {v.regulatory_global_safety:g}",
             f"Survive to turn {cfg.max_turn}"],
            f"Labs: {len(compliant)}/{len(labs)} compliant, {cfg.max_turn - state.turn} turns remaining"))
        partners = [o for o in state.factions.values() if o.id != f.id and o.resources.trust >= v.alliance_min_trust]
        out.append(VictoryProgress(
            VICTORY_ALLIANCE, "Alliance Victory",
            round((_pct(len(partners), v.alliance_min_allies) + _pct(f.resources.influence, v.alliance_min_influence)) / 2),
            [f"{v.alliance_min_allies}+ factions with trust >= {v.alliance_min_trust:g}",
             f"Influence >= {v.alliance_min_influence:g}"],
            f"Allies: {len(partners)}/{v.alliance_min_allies}, Influence: {f.resources.influence:.0f}"))
        controlled = [l for l in labs if l.capability_score <= v.control_lab_capability_max]
        ctrl_share = len(controlled) / len(labs) * 100.0 if labs else 100.0
        out.append(VictoryProgress(
            VICTORY_CONTROL, "Control Victory",
            round((ctrl_share + _pct(f.resources.influence, v.control_min_influence)) / 2),
            [f"All labs capability <= {v.control_lab_capability_max:g}", f"Influence >= {v.control_min_influence:g}"],
            f"Labs controlled: {len(controlled)}/{len(labs)}, Influence: {f.resources.influence:.0f}"))
        dangerous = [l for l in labs if l.capability_score >= v.coup_lab_capability - 10]
        if f.resources.influence < v.coup_min_influence + 20 and dangerous:
            coup = max(0.0, min(100.0, 100.0 - (f.resources.influence - v.coup_min_influence) / 20.0 * 100.0))
            out.append(VictoryProgress(LOSS_COUP, "Coup Risk Warning", round(coup),
                                       [f"Influence must stay above {v.coup_min_influence:g}",
                                        f"Keep labs below capability {v.coup_lab_capability:g}"],
                                       f"Influence: {f.resources.influence:.0f}, Dangerous labs: {len(dangerous)}", True))
    return out

def victory_distances(state: "GameState", faction_id: str, cfg: Optional[Config] = None) -> Dict[str, Dict[str, float]]:
    cfg = cfg or Config(); v = cfg.victory
    f = state.get(faction_id)
    if f is None: return {}
    labs = state.labs()
    if f.is_lab:
        rival = max_rival_capability(state, f)
        return {
            VICTORY_SAFE_AGI: {"safety_needed": max(0.0, v.safe_agi_faction_safety - f.safety_score),
                               "global_safety_needed": max(0.0, v.safe_agi_global_safety - state.global_safety),
                               "needs_agi": float(not f.can_deploy_agi)},
            VICTORY_DOMINANT: {"capability_needed": max(0.0, rival * (1 + v.dominant_lead_pct / 100.0) - f.capability_score),
                               "current_lead": f.capability_score - rival},
            VICTORY_PUBLIC_TRUST: {"trust_needed": max(0.0, v.public_trust_min_trust - f.resources.trust),
                                   "capability_needed": max(0.0, v.public_trust_min_capability - f.capability_score)},
            LOSS_COLLAPSE: {"trust_margin": f.resources.trust - v.collapse_trust},
            LOSS_OBSOLESCENCE: {"capability_gap": rival - f.capability_score,
                                "gap_to_safe": v.obsolescence_gap - (rival - f.capability_score)},
        }
    partners = [o for o in state.factions.values() if o.id != f.id and o.resources.trust >= v.alliance_min_trust]
    return {
        VICTORY_REGULATORY: {"labs_compliant": float(sum(l.safety_score >= v.regulatory_lab_safety for l in labs)),
                             "total_labs": float(len(labs)), "turns_remaining": float(cfg.max_turn - state.turn)},
        VICTORY_ALLIANCE: {"allies_needed": float(max(0, v.alliance_min_allies - len(partners))),
                           "current_allies": float(len(partners))},
        VICTORY_CONTROL: {"influence_needed": max(0.0, v.control_min_influence - f.resources.influence),
                          "labs_controlled": float(sum(l.capability_score <= v.control_lab_capability_max for l in labs))},
    }

def closest_victory(state: "GameState", faction_id: str, cfg: Optional[Config] = None) -> Optional[VictoryProgress]:
    candidates = [p for p in victory_progress(state, faction_id, cfg) if not p.is_warning]
    return max(candidates, key=lambda p: p.progress) if candidates else None

def most_urgent_threat(state: "GameState", faction_id: str, cfg: Optional[Config] = None) -> Optional[VictoryProgress]:
    warnings = [p for p in victory_progress(state, faction_id, cfg) if p.is_warning]
    return max(warnings, key=lambda p: p.progress) if warnings else None
