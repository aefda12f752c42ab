# agirace/engine.py
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Sequence
import numpy as np
import pandas as pd

from .actions import ActionChoice
from .config import Config
from .constants import BRANCHES, STALEMATE, LOSS_CATASTROPHE
from .economy import apply_income
from .espionage import roll_detection
from .events import apply_event_choice, select_event
from .factions import create_initial_state
from .policies import Policy, choose_event_option, decide_actions_heuristic
from .resolution import resolve_faction_actions
from .state import GameState, calendar_for
from .stats import refresh_global_safety
from .tech import resolve_unlocks
from .utils import Rng
from .victory import Outcome, evaluate_horizon

logger = logging.getLogger(__name__)

# --- Turn resolution ---
def advance_calendar(state: GameState, cfg: Config) -> None:
    state.turn += 1
    state.year, state.quarter = calendar_for(state.turn, cfg.start_year, cfg.start_quarter)

def _is_terminal(outcome: Outcome, cfg: Config) -> bool:
    if outcome.victory or outcome.type == LOSS_CATASTROPHE: return True
    return cfg.flags.terminal_on_any_loss or outcome.faction_id == cfg.player_faction_id

def apply_outcome(state: GameState, outcome: Outcome, cfg: Config) -> bool:
    """Records an outcome. Returns True when it ended the game."""
    if not _is_terminal(outcome, cfg):
        state.log.append(f"Warning: {outcome.message}")
        logger.warning("turn %d: non-terminal %s for %s", state.turn, outcome.type, outcome.faction_id)
        return False
    state.game_over = True
    if outcome.victory:
        state.winner_id, state.victory_type = outcome.faction_id, outcome.type
    else:
        state.loser_id, state.loss_type = outcome.faction_id, outcome.type
    state.log.append(outcome.message)
    logger.info("game over on turn %d: %s (%s)", state.turn, outcome.type, outcome.faction_id)
    return True

def evaluate_outcomes(state: GameState, deploy_attempts: Sequence[str], cfg: Config) -> None:
    for fid in dict.fromkeys(deploy_attempts):
        f = state.get(fid)
        out = f.evaluate_victory(state, cfg, deploying=True) if f is not None else None
        if out is not None and apply_outcome(state, out, cfg): return

    for f in state.factions.values():
        out = f.evaluate_victory(state, cfg)
        if out is not None and apply_outcome(state, out, cfg): return

    if state.turn >= cfg.max_turn:
        out = evaluate_horizon(state, cfg)
        if out is not None:
            apply_outcome(state, out, cfg)
            return
        state.game_over = True
        state.victory_type = STALEMATE
        state.log.append(f"{state.year} Q{state.quarter}: the race ends in stalemate. No faction prevails.")
        logger.info("game over on turn %d: stalemate", state.turn)

def resolve_turn(state: GameState, choices: Mapping[str, Sequence[ActionChoice]], rng: Rng,
                 cfg: Optional[Config] = None) -> List[str]:
    """One quarter: income, actions, detection, unlocks, then victory/loss checks.

    Mutates ``state`` in place and returns the log lines appended this turn.
    A finished game is left untouched.
    """
    cfg = cfg or Config()
    if state.game_over:
        return []
    start = len(state.log); log = state.log

    advance_calendar(state, cfg)
    log.append(f"--- {state.year} Q{state.quarter} ---")

    apply_income(state, cfg.rates)
    refresh_global_safety(state)

    deploy_attempts: List[str] = []
    for fid, fchoices in choices.items():
        f = state.get(fid)
        if f is None:
            log.append(f"Ignored actions for unknown faction {fid!r}.")
            logger.warning("turn %d: choices for unknown faction %r", state.turn, fid)
            continue
        resolve_faction_actions(state, f, fchoices, rng, cfg, deploy_attempts, log)
    refresh_global_safety(state)

    for f in state.factions.values():
        roll_detection(f, rng, cfg.detection, log)
    refresh_global_safety(state)

    for f in state.factions.values():
        resolve_unlocks(f, log)
    refresh_global_safety(state)

    evaluate_outcomes(state, deploy_attempts, cfg)
    logger.debug("turn %d resolved: %d log lines, global safety %.1f",
                 state.turn, len(log) - start, state.global_safety)
    return log[start:]

# --- Simulation runner ---
@dataclass
class TurnRecord:
    turn: int
    year: int
    quarter: int
    faction: str
    type: str
    compute: float; talent: float; capital: float; data: float; influence: float; trust: float
    safety_culture: float; opsec: float
    capability: float; safety: float; exposure: float
    research_capabilities: float; research_safety: float; research_ops: float; research_policy: float
    techs: int
    can_deploy_agi: int
    security_level: int
    allies: int
    global_safety: float
    actions: str
    event: str
    game_over: int
    winner: str

class GameEngine:
    def __init__(self, cfg: Optional[Config] = None, state: Optional[GameState] = None):
        self.cfg = cfg or Config()
        self.gen = np.random.default_rng(self.cfg.seed)
        self.state = state if state is not None else create_initial_state(self.cfg)
        self.logs: List[TurnRecord] = []
        self.event_history: List[str] = []

    def rng(self) -> float:
        return float(self.gen.random())

    def _fire_event(self) -> str:
        ev = select_event(self.state, self.rng, self.event_history, self.cfg)
        if ev is None: return ""
        self.event_history.append(ev.id)
        self.state.log.append(f"Event: {ev.title}. {ev.description}")
        for fid in list(self.state.factions):
            apply_event_choice(self.state, fid, ev, choose_event_option(self.state, fid, ev))
        return ev.id

    def decide(self, policy: Policy) -> Dict[str, List[ActionChoice]]:
        return {fid: policy(self.state, fid, self.rng, self.cfg) for fid in self.state.factions}

    def step(self, policy: Policy = decide_actions_heuristic) -> List[str]:
        if self.state.game_over: return []
        event = self._fire_event() if self.cfg.flags.enable_events else ""
        choices = self.decide(policy)
        lines = resolve_turn(self.state, choices, self.rng, self.cfg)
        self._record(choices, event)
        return lines

    def _record(self, choices: Mapping[str, Sequence[ActionChoice]], event: str) -> None:
        s = self.state
        for fid, f in s.factions.items():
            r = f.resources
            acts = ",".join(f"{c.action_id}:{c.openness}" + (f">{c.target_faction_id}" if c.target_faction_id else "")
                            for c in choices.get(fid, []))
            self.logs.append(TurnRecord(
                turn=s.turn, year=s.year, quarter=s.quarter, faction=fid, type=f.type,
                compute=r.compute, talent=r.talent, capital=r.capital, data=r.data,
                influence=r.influence, trust=r.trust,
                safety_culture=f.safety_culture, opsec=f.opsec,
                capability=f.capability_score, safety=f.safety_score, exposure=f.exposure,
                **{f"research_{b}": f.research[b] for b in BRANCHES},
                techs=len(f.unlocked_techs), can_deploy_agi=int(f.can_deploy_agi),
                security_level=f.security_level, allies=len(s.alliances.get(fid, [])),
                global_safety=s.global_safety, actions=acts, event=event,
                game_over=int(s.game_over), winner=s.winner_id or "",
            ))

    def run(self, policy: Policy = decide_actions_heuristic, turns: Optional[int] = None) -> pd.DataFrame:
        limit = self.cfg.max_turn if turns is None else turns
        for _ in range(limit):
            if self.state.game_over: break
            self.step(policy)
        return self.frame()

    def frame(self) -> pd.DataFrame:
        return pd.DataFrame([pd.Series(l.__dict__) for l in self.logs])
