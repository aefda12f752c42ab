from __future__ import annotations

import pytest

from agirace.errors import CatalogError
from agirace.state import LabState
from agirace.tech import TECH_GRAPH, TECH_TREE, TechNode, build_tech_graph, resolve_unlocks, techs_in_branch


def _lab() -> LabState:
    return LabState(id="lab", name="Lab")


def test_catalog_is_a_dag_with_six_nodes_per_branch() -> None:
    assert len(TECH_TREE) == 24
    assert TECH_GRAPH.number_of_edges() == 20
    for branch in ("capabilities", "safety", "ops", "policy"):
        assert len(techs_in_branch(branch)) == 6


def test_unlock_first_affordable_and_keep_remainder() -> None:
    lab = _lab()
    lab.research["capabilities"] = 25
    log = []
    unlocked = resolve_unlocks(lab, log)
    assert unlocked == ["cap_eff_training"]
    assert lab.research["capabilities"] == pytest.approx(5)
    assert "cap_arch_breakthrough" not in lab.unlocked_techs
    assert lab.capability_score == 6
    assert len(log) == 1


def test_unlocks_cascade_within_a_branch() -> None:
    lab = _lab()
    lab.research["safety"] = 18 + 22 + 26 + 1
    resolve_unlocks(lab)
    assert {"safe_alignment_benchmarks", "safe_interpretability", "safe_adversarial"} <= lab.unlocked_techs
    assert lab.research["safety"] == pytest.approx(1)
    assert lab.safety_score == 6 + 7 + 8
    assert lab.safety_culture == 52


def test_agi_breakthrough_sets_deploy_flag() -> None:
    lab = _lab()
    lab.research["capabilities"] = 200
    resolve_unlocks(lab)
    assert lab.can_deploy_agi
    assert len([t for t in lab.unlocked_techs if t.startswith("cap_")]) == 6


def test_already_unlocked_nodes_are_not_reapplied() -> None:
    lab = _lab()
    lab.research["ops"] = 16
    resolve_unlocks(lab)
    compute = lab.resources.compute
    lab.research["ops"] = 15
    resolve_unlocks(lab)
    assert lab.resources.compute == compute
    assert lab.research["ops"] == 15


def test_cycle_is_rejected() -> None:
    a = TechNode("a", "A", "ops", 1, ("b",), ())
    b = TechNode("b", "B", "ops", 1, ("a",), ())
    with pytest.raises(CatalogError):
        build_tech_graph([a, b])


def test_dangling_prereq_is_rejected() -> None:
    with pytest.raises(CatalogError):
        build_tech_graph([TechNode("a", "A", "ops", 1, ("ghost",), ())])
