# agirace/persistence.py
"""JSON save/load for GameState.

Sets become sorted lists and keyed maps become lists of [key, value]
entries, so the payload is plain JSON. Only the tail of the log is kept.
"""
from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .config import Config
from .constants import RESOURCE_KEYS
from .errors import SaveFormatError
from .state import FACTION_CLASSES, FactionState, GameState, Resources

logger = logging.getLogger(__name__)

SAVE_VERSION = 1

def _faction_to_dict(f: FactionState) -> Dict[str, Any]:
    return {
        "id": f.id, "name": f.name, "type": f.type,
        "resources": f.resources.as_dict(),
        "safety_culture": f.safety_culture, "opsec": f.opsec,
        "capability_score": f.capability_score, "safety_score": f.safety_score,
        "exposure": f.exposure,
        "research": dict(f.research),
        "unlocked_techs": sorted(f.unlocked_techs),
        "can_deploy_agi": f.can_deploy_agi,
        "public_opinion": f.public_opinion,
        "security_level": f.security_level,
    }

def _faction_from_dict(d: Dict[str, Any]) -> FactionState:
    cls = FACTION_CLASSES.get(d.get("type"))
    if cls is None:
        raise SaveFormatError(f"faction {d.get('id')!r} has unknown type {d.get('type')!r}")
    return cls(
        id=d["id"], name=d["name"],
        resources=Resources(**{k: float(d["resources"].get(k, 0.0)) for k in RESOURCE_KEYS}),
        safety_culture=float(d["safety_culture"]), opsec=float(d["opsec"]),
        capability_score=float(d["capability_score"]), safety_score=float(d["safety_score"]),
        exposure=float(d.get("exposure", 0.0)),
        research={k: float(v) for k, v in d["research"].items()},
        unlocked_techs=set(d.get("unlocked_techs", [])),
        can_deploy_agi=bool(d.get("can_deploy_agi", False)),
        public_opinion=float(d.get("public_opinion", 50.0)),
        security_level=int(d.get("security_level", 2)),
    )

def serialize_state(state: GameState, cfg: Optional[Config] = None) -> Dict[str, Any]:
    cfg = cfg or Config()
    return {
        "version": SAVE_VERSION,
        "turn": state.turn, "year": state.year, "quarter": state.quarter,
        "global_safety": state.global_safety,
        "game_over": state.game_over,
        "winner_id": state.winner_id, "loser_id": state.loser_id,
        "victory_type": state.victory_type, "loss_type": state.loss_type,
        "factions": [_faction_to_dict(f) for f in state.factions.values()],
        "alliances": [[k, list(v)] for k, v in state.alliances.items()],
        "tensions": [[k, v] for k, v in state.tensions.items()],
        "treaties": sorted(state.treaties),
        "log": state.log[-cfg.log_tail:] if cfg.log_tail > 0 else [],
    }

def deserialize_state(data: Dict[str, Any]) -> GameState:
    version = data.get("version")
    if version != SAVE_VERSION:
        logger.warning("save version %r does not match %d; loading anyway", version, SAVE_VERSION)
    try:
        factions = [_faction_from_dict(d) for d in data["factions"]]
        return GameState(
            factions={f.id: f for f in factions},
            turn=int(data["turn"]), year=int(data["year"]), quarter=int(data["quarter"]),
            global_safety=float(data["global_safety"]),
            game_over=bool(data["game_over"]),
            winner_id=data.get("winner_id"), loser_id=data.get("loser_id"),
            victory_type=data.get("victory_type"), loss_type=data.get("loss_type"),
            log=list(data.get("log", [])),
            alliances={k: list(v) for k, v in data.get("alliances", [])},
            tensions={k: float(v) for k, v in data.get("tensions", [])},
            treaties=set(data.get("treaties", [])),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise SaveFormatError(f"malformed save data: {e}") from e

def save_state(state: GameState, path: Union[str, Path], cfg: Optional[Config] = None) -> Path:
    path = Path(path)
    path.write_text(json.dumps(serialize_state(state, cfg), indent=2), encoding="utf-8")
    logger.debug("saved turn %d to %s", state.turn, path)
    return path

def load_state(path: Union[str, Path]) -> GameState:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise SaveFormatError(f"cannot read save file {path}: {e}") from e
    if not isinstance(data, dict):
        raise SaveFormatError(f"save file {path} does not hold an object")
    return deserialize_state(data)
