# agirace/espionage.py
from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, TYPE_CHECKING

from .config import Config, DetectionConfig, EspionageConfig
from .constants import BRANCHES
from .stats import apply_resource_delta, apply_score_delta
from .utils import Rng, clamp

if TYPE_CHECKING:
    from .state import FactionState, GameState

@dataclass
class EspionageResult:
    success: bool
    detected: bool
    branch: Optional[str] = None
    stolen: float = 0.0

def espionage_success_chance(attacker: "FactionState", target: "FactionState", ec: EspionageConfig) -> float:
    raw = ec.base_success + ec.attacker_opsec_factor * attacker.opsec - ec.target_opsec_factor * target.opsec
    return clamp(raw, ec.min_success, ec.max_success)

def largest_branch(faction: "FactionState") -> str:
    # sorted() is stable, so ties resolve to the earlier branch
    return sorted(BRANCHES, key=lambda b: -faction.research.get(b, 0.0))[0]

def resolve_espionage(state: "GameState", attacker: "FactionState", target: "FactionState",
                      rng: Rng, cfg: Config, log: List[str]) -> EspionageResult:
    """Theft roll, then an independent detection roll. Always two RNG draws, in that order."""
    ec = cfg.espionage
    result = EspionageResult(success=False, detected=False)

    if rng() < espionage_success_chance(attacker, target, ec):
        branch = largest_branch(target)
        stolen = min(ec.max_steal, target.research.get(branch, 0.0))
        target.research[branch] -= stolen
        attacker.research[branch] += stolen
        result.success, result.branch, result.stolen = True, branch, stolen
        log.append(f"{attacker.name} stole {stolen:.1f} {branch} research from {target.name}.")

    if rng() < ec.detect_chance:
        apply_resource_delta(attacker, {"trust": ec.attacker_trust_penalty, "influence": ec.attacker_influence_penalty})
        apply_resource_delta(target, {"trust": ec.target_trust_bonus})
        state.adjust_tension(attacker.id, target.id, cfg.relations.espionage_tension)
        result.detected = True
        log.append(f"{attacker.name} was caught conducting espionage against {target.name}.")
    return result

def detection_chance(faction: "FactionState", dc: DetectionConfig) -> float:
    raw = dc.base_chance + faction.exposure * dc.per_exposure - faction.opsec * dc.opsec_factor
    return clamp(raw, 0.0, dc.max_chance)

def roll_detection(faction: "FactionState", rng: Rng, dc: DetectionConfig, log: List[str]) -> bool:
    """Ambient exposure check. No RNG draw when exposure is zero."""
    if faction.exposure <= 0:
        return False
    if rng() < detection_chance(faction, dc):
        apply_resource_delta(faction, {"trust": dc.trust_penalty, "influence": dc.influence_penalty})
        apply_score_delta(faction, safety=dc.safety_penalty)
        faction.exposure = 0.0
        log.append(f"{faction.name} was exposed for secret activity.")
        return True
    return False
