from __future__ import annotations

import json
import logging

import pytest

from agirace.config import Config
from agirace.engine import GameEngine
from agirace.errors import SaveFormatError
from agirace.persistence import deserialize_state, load_state, save_state, serialize_state


def _played(turns: int = 6):
    engine = GameEngine(Config(seed=8))
    engine.run(turns=turns)
    engine.state.add_alliance("us_gov", "cn_gov")
    engine.state.treaties.add("treaty:cn_gov|us_gov")
    engine.state.adjust_tension("us_gov", "cn_gov", 15)
    return engine.state


def test_save_and_load_restore_the_game(tmp_path) -> None:
    state = _played()
    state.log.extend(f"filler {i}" for i in range(80))
    path = save_state(state, tmp_path / "game.json")
    loaded = load_state(path)
    assert loaded.log == state.log[-50:]
    loaded.log = state.log
    assert loaded == state


def test_payload_is_plain_json() -> None:
    data = serialize_state(_played(2), Config(log_tail=0))
    assert data["log"] == []
    assert isinstance(data["treaties"], list)
    assert json.loads(json.dumps(data)) == data


def test_version_mismatch_warns(caplog) -> None:
    data = serialize_state(_played(1))
    data["version"] = 99
    with caplog.at_level(logging.WARNING, logger="agirace.persistence"):
        state = deserialize_state(data)
    assert state.turn == 1
    assert "version" in caplog.text


def test_unknown_faction_type_is_rejected() -> None:
    data = serialize_state(_played(1))
    data["factions"][0]["type"] = "corporation"
    with pytest.raises(SaveFormatError):
        deserialize_state(data)


def test_missing_fields_are_rejected() -> None:
    data = serialize_state(_played(1))
    del data["turn"]
    with pytest.raises(SaveFormatError):
        deserialize_state(data)


def test_unreadable_files(tmp_path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(SaveFormatError):
        load_state(bad)
    listed = tmp_path / "list.json"
    listed.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(SaveFormatError):
        load_state(listed)
    with pytest.raises(SaveFormatError):
        load_state(tmp_path / "missing.json")
