# agirace/scenarios.py
from copy import deepcopy
from typing import Callable, Dict, Iterable, Optional, Tuple
import pandas as pd

from .config import Config
from .engine import GameEngine
from .factions import create_initial_state
from .policies import Policy, decide_actions_heuristic
from .state import GameState
from .stats import apply_resource_delta, apply_score_delta, apply_stat_delta, refresh_global_safety

# --- Helpers ---
def _boost_labs(state: GameState, resources: Dict[str, float], capability: float = 0.0, safety: float = 0.0):
    for lab in state.labs():
        apply_resource_delta(lab, resources)
        apply_score_delta(lab, capability=capability, safety=safety)

def _set_culture(state: GameState, delta: float):
    for f in state.factions.values():
        apply_stat_delta(f, {"safety_culture": delta})

# --- Scenario builders ---
def _baseline(cfg: Config, state: GameState) -> None:
    pass

def _arms_race(cfg: Config, state: GameState) -> None:
    # cheaper secrecy, richer labs, weaker norms
    cfg.detection.per_exposure = 0.05
    _boost_labs(state, {"compute": 15, "capital": 10}, capability=10, safety=-5)
    _set_culture(state, -15)

def _safety_summit(cfg: Config, state: GameState) -> None:
    cfg.flags.enable_events = True
    _boost_labs(state, {"trust": 10}, safety=15)
    _set_culture(state, 10)
    state.add_alliance("us_gov", "cn_gov")
    state.treaties.add("treaty:cn_gov|us_gov")

SCENARIOS: Dict[str, Callable[[Config, GameState], None]] = {
    "baseline": _baseline,
    "arms_race": _arms_race,
    "safety_summit": _safety_summit,
}

def make_scenario(name: str, base_cfg: Optional[Config] = None) -> Tuple[Config, GameState]:
    if name not in SCENARIOS:
        raise KeyError(f"unknown scenario {name!r}; choose from {sorted(SCENARIOS)}")
    cfg = deepcopy(base_cfg) if base_cfg is not None else Config()
    state = create_initial_state(cfg)
    SCENARIOS[name](cfg, state)
    refresh_global_safety(state)
    return cfg, state

def run_scenario_batch(names: Iterable[str], seeds: Iterable[int], policy: Policy = decide_actions_heuristic,
                       base_cfg: Optional[Config] = None) -> pd.DataFrame:
    rows = []
    seeds = list(seeds)
    for name in names:
        for seed in seeds:
            cfg, state = make_scenario(name, base_cfg)
            cfg.seed = seed
            engine = GameEngine(cfg, state)
            engine.run(policy)
            s = engine.state
            rows.append({
                "scenario": name, "seed": seed, "turns": s.turn,
                "winner": s.winner_id, "victory_type": s.victory_type,
                "loser": s.loser_id, "loss_type": s.loss_type,
                "global_safety": s.global_safety,
            })
    return pd.DataFrame(rows)
