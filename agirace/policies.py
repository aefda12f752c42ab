# agirace/policies.py
from __future__ import annotations
from typing import Callable, Dict, List, Optional, TYPE_CHECKING

from .actions import ActionChoice, actions_for
from .config import Config
from .constants import (
    OPEN, SECRET, DEPLOY_AGI, RESEARCH_SAFETY, RESEARCH_CAPABILITIES, DEPLOY_PRODUCTS,
    BUILD_COMPUTE, POLICY_WORK, REGULATE, SUBSIDIZE, ESPIONAGE, COUNTERINTEL,
)
from .events import EventChoice, EventDefinition
from .factions import HOME_LABS, get_strategy
from .utils import Rng

if TYPE_CHECKING:
    from .state import FactionState, GameState

Policy = Callable[["GameState", str, Rng, Config], List[ActionChoice]]

# thresholds the heuristic aims for, looser than the victory thresholds
SAFE_FACTION = 70.0
SAFE_GLOBAL = 60.0

def pick_one(rng: Rng, options: List):
    return options[min(len(options) - 1, int(rng() * len(options)))]

def pick_openness(preference: float, rng: Rng) -> str:
    return OPEN if rng() * 100.0 < preference else SECRET

def top_capability_lab(state: "GameState") -> Optional["FactionState"]:
    labs = sorted(state.labs(), key=lambda f: -f.capability_score)
    return labs[0] if labs else None

def home_labs(state: "GameState", faction_id: str) -> List["FactionState"]:
    return [state.factions[i] for i in HOME_LABS.get(faction_id, []) if i in state.factions]

def decide_actions_heuristic(state: "GameState", faction_id: str, rng: Rng, cfg: Optional[Config] = None) -> List[ActionChoice]:
    """Rule-based fallback policy. Raises MissingStrategyError for factions without a profile."""
    cfg = cfg or Config()
    f = state.get(faction_id)
    if f is None: return []
    strat = get_strategy(faction_id)
    choices: List[ActionChoice] = []
    openness = pick_openness(strat.openness_preference, rng)

    if f.is_lab:
        if f.can_deploy_agi and f.safety_score >= SAFE_FACTION and state.global_safety >= SAFE_GLOBAL:
            return [ActionChoice(DEPLOY_AGI, OPEN)]
        prioritize_safety = f.safety_score < SAFE_FACTION or strat.safety_focus > strat.risk_tolerance
        choices.append(ActionChoice(RESEARCH_SAFETY if prioritize_safety else RESEARCH_CAPABILITIES, openness))

        if f.resources.capital < 40: choices.append(ActionChoice(DEPLOY_PRODUCTS, OPEN))
        elif f.resources.compute < 60: choices.append(ActionChoice(BUILD_COMPUTE, OPEN))
        else: choices.append(ActionChoice(pick_one(rng, [POLICY_WORK, DEPLOY_PRODUCTS, BUILD_COMPUTE]), OPEN))
    else:
        if state.global_safety < SAFE_GLOBAL:
            target = top_capability_lab(state)
            if target is not None:
                choices.append(ActionChoice(REGULATE, OPEN, target.id))

        allies = home_labs(state, faction_id)
        if allies and f.resources.capital > 30:
            ally = sorted(allies, key=lambda l: l.capability_score)[0]
            choices.append(ActionChoice(SUBSIDIZE, OPEN, ally.id))
        else:
            choices.append(ActionChoice(POLICY_WORK, OPEN))

        if strat.espionage_focus > 35:
            target = top_capability_lab(state)
            if target is not None and target.id != faction_id:
                choices.append(ActionChoice(ESPIONAGE, SECRET, target.id))
        else:
            choices.append(ActionChoice(COUNTERINTEL, OPEN))

    return choices[:cfg.action_points]

def policy_random(state: "GameState", faction_id: str, rng: Rng, cfg: Optional[Config] = None) -> List[ActionChoice]:
    """Uniformly random legal actions with random rival targets."""
    cfg = cfg or Config()
    f = state.get(faction_id)
    if f is None: return []
    menu = actions_for(f.id, f.type)
    rivals = [o for o in state.factions if o != faction_id]
    out = []
    for _ in range(cfg.action_points):
        a = pick_one(rng, menu)
        target = pick_one(rng, rivals) if a.target and rivals else None
        out.append(ActionChoice(a.id, pick_one(rng, [OPEN, SECRET]), target))
    return out

POLICIES: Dict[str, Policy] = {
    "heuristic": decide_actions_heuristic,
    "random": policy_random,
}

# --- Events ---
def score_event_choice(state: "GameState", faction_id: str, choice: EventChoice) -> float:
    f = state.get(faction_id)
    if f is None: return 0.0
    strat = get_strategy(faction_id)
    safety_w = strat.safety_focus / 50.0
    risk_w = strat.risk_tolerance / 50.0
    influence_w = 1.4 if f.is_government else 0.7
    resource_w = {"trust": safety_w, "influence": influence_w, "compute": risk_w, "capital": 0.4, "talent": 0.6}

    score = 0.0
    for e in choice.effects:
        if e.kind == "score":
            w = safety_w if e.key == "safety" else risk_w
            # pacts that lift every faction count more for governments
            if e.target == "all_factions": w = 1.5 if f.is_government else 0.8
            score += e.delta * w
        elif e.kind == "resource": score += e.delta * resource_w.get(e.key, 0.0)
        elif e.kind == "stat": score += e.delta * (safety_w if e.key == "safety_culture" else 0.4)
        elif e.kind == "research": score += e.delta * 0.5
    return score

def choose_event_option(state: "GameState", faction_id: str, event: EventDefinition) -> EventChoice:
    best = event.choices[0]; best_score = score_event_choice(state, faction_id, best)
    for c in event.choices[1:]:
        s = score_event_choice(state, faction_id, c)
        if s > best_score: best, best_score = c, s
    return best
