# agirace/resolution.py
from __future__ import annotations
import logging
from typing import List, Optional, TYPE_CHECKING

from .actions import ActionChoice, ActionDefinition
from .config import Config
from .constants import (
    OPENNESS_MODIFIERS, SECRET, DEPLOY_AGI, ESPIONAGE, SUBSIDIZE, STRATEGIC_INITIATIVE,
    REGULATE, EXECUTIVE_ORDER, COUNTERINTEL, DEFENSIVE_MEASURES, FORM_ALLIANCE,
    OPEN_SOURCE_RELEASE, SUBSIDY_BUNDLE, STRATEGIC_INITIATIVE_BUNDLE, REGULATION_PENALTY,
    EXECUTIVE_ORDER_PENALTY, EXECUTIVE_ORDER_SAFETY_BONUS, COUNTERINTEL_OPSEC,
    DEFENSIVE_MEASURES_OPSEC, OPEN_SOURCE_SPILLOVER,
)
from .espionage import resolve_espionage
from .stats import (
    add_research, apply_resource_delta, apply_score_delta, apply_security_level_delta,
    apply_stat_delta, compute_research_gain,
)
from .utils import Rng

if TYPE_CHECKING:
    from .state import FactionState, GameState

logger = logging.getLogger(__name__)

def apply_openness(faction: "FactionState", openness: str) -> None:
    mod = OPENNESS_MODIFIERS[openness]
    if mod["trust"]: apply_resource_delta(faction, {"trust": mod["trust"]})
    if mod["safety"]: apply_score_delta(faction, safety=mod["safety"])
    if mod["capability"]: apply_score_delta(faction, capability=mod["capability"])

def apply_action_research(faction: "FactionState", action: ActionDefinition, openness: str) -> None:
    mult = OPENNESS_MODIFIERS[openness]["research"]
    for branch, base in action.base_research.items():
        add_research(faction, branch, compute_research_gain(faction, branch, base) * mult)

def _target(state: "GameState", faction: "FactionState", choice: ActionChoice,
            action: ActionDefinition, log: List[str], lab_only: bool = False) -> Optional["FactionState"]:
    target = state.get(choice.target_faction_id)
    if target is None or target.id == faction.id:
        log.append(f"{faction.name}'s {action.name} had no valid target.")
        logger.warning("%s: %s without a valid target (%r)", faction.id, action.id, choice.target_faction_id)
        return None
    if lab_only and not target.is_lab:
        log.append(f"{faction.name}'s {action.name} can only target a lab.")
        logger.warning("%s: %s targeted non-lab %s", faction.id, action.id, target.id)
        return None
    return target

def _penalize_lab(target: "FactionState", penalty) -> None:
    apply_resource_delta(target, {"compute": penalty["compute"], "influence": penalty["influence"]})
    apply_score_delta(target, capability=penalty["capability"])

def resolve_action(state: "GameState", faction: "FactionState", choice: ActionChoice,
                   rng: Rng, cfg: Config, deploy_attempts: List[str], log: List[str]) -> bool:
    """Applies one choice. Returns False when the choice was rejected outright."""
    action = choice.action
    if faction.type not in action.allowed_for:
        log.append(f"{faction.name} attempted invalid action {action.name}.")
        logger.warning("%s (%s) cannot use %s", faction.id, faction.type, action.id)
        return False
    if action.faction_specific is not None and action.faction_specific != faction.id:
        log.append(f"{action.name} is not available to {faction.name}.")
        logger.warning("%s cannot use %s (reserved for %s)", faction.id, action.id, action.faction_specific)
        return False

    # --- Base effects ---
    apply_resource_delta(faction, action.base_resource_delta)
    apply_openness(faction, choice.openness)
    apply_action_research(faction, action, choice.openness)
    if action.score_effects is not None:
        apply_score_delta(faction, capability=action.score_effects.capability_delta,
                          safety=action.score_effects.safety_delta)
    if action.security_level_delta:
        apply_security_level_delta(faction, action.security_level_delta)
    if choice.openness == SECRET:
        faction.exposure += action.exposure
    log.append(f"{faction.name} used {action.name} ({choice.openness}).")

    # --- Kind-specific effects ---
    kind = action.kind
    if kind == DEPLOY_AGI:
        if not faction.can_deploy_agi:
            log.append(f"{faction.name} attempted AGI deployment without the breakthrough.")
        else:
            deploy_attempts.append(faction.id)
            log.append(f"{faction.name} is attempting to deploy AGI.")

    elif kind == ESPIONAGE:
        target = _target(state, faction, choice, action, log)
        if target is not None:
            resolve_espionage(state, faction, target, rng, cfg, log)

    elif kind in (SUBSIDIZE, STRATEGIC_INITIATIVE):
        target = _target(state, faction, choice, action, log, lab_only=True)
        if target is not None:
            apply_resource_delta(target, SUBSIDY_BUNDLE if kind == SUBSIDIZE else STRATEGIC_INITIATIVE_BUNDLE)
            log.append(f"{faction.name} subsidized {target.name}." if kind == SUBSIDIZE
                       else f"{faction.name} launched a strategic initiative backing {target.name}.")

    elif kind in (REGULATE, EXECUTIVE_ORDER):
        target = _target(state, faction, choice, action, log, lab_only=True)
        if target is not None:
            if kind == REGULATE:
                _penalize_lab(target, REGULATION_PENALTY)
                log.append(f"{faction.name} imposed regulations on {target.name}.")
            else:
                _penalize_lab(target, EXECUTIVE_ORDER_PENALTY)
                apply_score_delta(faction, safety=EXECUTIVE_ORDER_SAFETY_BONUS)
                log.append(f"{faction.name} issued an executive order restricting {target.name}.")

    elif kind == COUNTERINTEL:
        apply_stat_delta(faction, {"opsec": COUNTERINTEL_OPSEC})

    elif kind == DEFENSIVE_MEASURES:
        apply_stat_delta(faction, {"opsec": DEFENSIVE_MEASURES_OPSEC})

    elif kind == FORM_ALLIANCE:
        target = _target(state, faction, choice, action, log)
        if target is not None:
            if state.add_alliance(faction.id, target.id):
                log.append(f"{faction.name} formed an alliance with {target.name}.")
            else:
                log.append(f"{faction.name} reaffirmed its alliance with {target.name}.")
            if faction.is_government and target.is_government:
                state.treaties.add("treaty:" + "|".join(sorted((faction.id, target.id))))
                state.adjust_tension(faction.id, target.id, -cfg.relations.alliance_tension_relief)

    elif kind == OPEN_SOURCE_RELEASE:
        for other in state.labs():
            if other.id != faction.id:
                apply_score_delta(other, capability=OPEN_SOURCE_SPILLOVER)
        log.append(f"{faction.name} open-sourced a model; rival labs benefit.")

    return True

def resolve_faction_actions(state: "GameState", faction: "FactionState", choices, rng: Rng,
                            cfg: Config, deploy_attempts: List[str], log: List[str]) -> int:
    choices = list(choices)
    if len(choices) > cfg.action_points:
        log.append(f"{faction.name} queued {len(choices)} actions; only {cfg.action_points} resolved.")
        logger.warning("%s queued %d actions, truncating to %d", faction.id, len(choices), cfg.action_points)
    applied = 0
    for choice in choices[:cfg.action_points]:
        applied += resolve_action(state, faction, choice, rng, cfg, deploy_attempts, log)
    return applied
