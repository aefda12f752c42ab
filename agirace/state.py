# agirace/state.py
from __future__ import annotations
import copy
from dataclasses import dataclass, field as dc_field
from typing import ClassVar, Dict, List, Optional, Set, Tuple, TYPE_CHECKING

from .constants import BRANCHES, GOVERNMENT, LAB, RESOURCE_KEYS
from .utils import pair_key

if TYPE_CHECKING:
    from .config import Config, Rates
    from .victory import Outcome

@dataclass
class Resources:
    compute: float = 0.0
    talent: float = 0.0
    capital: float = 0.0
    data: float = 0.0
    influence: float = 0.0
    trust: float = 0.0

    def get(self, key: str) -> float:
        return float(getattr(self, key))

    def as_dict(self) -> Dict[str, float]:
        return {k: getattr(self, k) for k in RESOURCE_KEYS}

def _empty_research() -> Dict[str, float]:
    return {b: 0.0 for b in BRANCHES}

@dataclass
class FactionState:
    id: str
    name: str
    resources: Resources = dc_field(default_factory=Resources)
    safety_culture: float = 50.0
    opsec: float = 50.0
    capability_score: float = 0.0
    safety_score: float = 0.0
    exposure: float = 0.0
    research: Dict[str, float] = dc_field(default_factory=_empty_research)
    unlocked_techs: Set[str] = dc_field(default_factory=set)
    can_deploy_agi: bool = False
    public_opinion: float = 50.0
    security_level: int = 2

    type: ClassVar[str] = ""

    @property
    def is_lab(self) -> bool:
        return self.type == LAB

    @property
    def is_government(self) -> bool:
        return self.type == GOVERNMENT

    def compute_income(self, rates: "Rates") -> None:
        raise NotImplementedError

    def evaluate_victory(self, state: "GameState", cfg: "Config", deploying: bool = False) -> Optional["Outcome"]:
        raise NotImplementedError

@dataclass
class LabState(FactionState):
    type: ClassVar[str] = LAB

    def compute_income(self, rates: "Rates") -> None:
        from .economy import apply_lab_income
        apply_lab_income(self, rates)

    def evaluate_victory(self, state, cfg, deploying=False):
        from .victory import evaluate_lab
        return evaluate_lab(state, self, cfg, deploying)

@dataclass
class GovernmentState(FactionState):
    type: ClassVar[str] = GOVERNMENT
    security_level: int = 3

    def compute_income(self, rates: "Rates") -> None:
        from .economy import apply_government_income
        apply_government_income(self, rates)

    def evaluate_victory(self, state, cfg, deploying=False):
        from .victory import evaluate_government
        return evaluate_government(state, self, cfg)

FACTION_CLASSES = {LAB: LabState, GOVERNMENT: GovernmentState}

def calendar_for(turn: int, start_year: int = 2026, start_quarter: int = 1) -> Tuple[int, int]:
    q = (start_quarter - 1) + turn
    return start_year + q // 4, q % 4 + 1

@dataclass
class GameState:
    factions: Dict[str, FactionState]
    turn: int = 0
    year: int = 2026
    quarter: int = 1
    global_safety: float = 0.0
    game_over: bool = False
    winner_id: Optional[str] = None
    loser_id: Optional[str] = None
    victory_type: Optional[str] = None
    loss_type: Optional[str] = None
    log: List[str] = dc_field(default_factory=list)
    alliances: Dict[str, List[str]] = dc_field(default_factory=dict)
    tensions: Dict[str, float] = dc_field(default_factory=dict)
    treaties: Set[str] = dc_field(default_factory=set)

    def get(self, faction_id: Optional[str]) -> Optional[FactionState]:
        if faction_id is None: return None
        return self.factions.get(faction_id)

    def labs(self) -> List[FactionState]:
        return [f for f in self.factions.values() if f.is_lab]

    def governments(self) -> List[FactionState]:
        return [f for f in self.factions.values() if f.is_government]

    def allies_of(self, faction_id: str) -> List[str]:
        return list(self.alliances.get(faction_id, []))

    def add_alliance(self, a: str, b: str) -> bool:
        """Symmetric edge; returns False when it already existed."""
        if a == b: return False
        left = self.alliances.setdefault(a, [])
        right = self.alliances.setdefault(b, [])
        if b in left and a in right:
            return False
        if b not in left: left.append(b)
        if a not in right: right.append(a)
        return True

    def tension(self, a: str, b: str) -> float:
        return self.tensions.get(pair_key(a, b), 0.0)

    def adjust_tension(self, a: str, b: str, delta: float) -> float:
        k = pair_key(a, b)
        self.tensions[k] = float(min(100.0, max(0.0, self.tensions.get(k, 0.0) + delta)))
        return self.tensions[k]

    def clone(self) -> "GameState":
        return copy.deepcopy(self)
