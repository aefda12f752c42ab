# agirace/tech.py
from __future__ import annotations
from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Mapping, Optional, Tuple, TYPE_CHECKING
import networkx as nx

from .constants import BRANCHES, CAPABILITIES, SAFETY, OPS, POLICY
from .errors import CatalogError
from .stats import apply_resource_delta, apply_score_delta, apply_stat_delta

if TYPE_CHECKING:
    from .state import FactionState

# --- Effects ---
@dataclass(frozen=True)
class TechEffect:
    kind: str            # "capability" | "safety" | "resource" | "stat" | "unlock_agi"
    key: Optional[str] = None
    value: float = 0.0

def cap(v):      return TechEffect("capability", value=v)
def safe(v):     return TechEffect("safety", value=v)
def res(k, v):   return TechEffect("resource", key=k, value=v)
def stat(k, v):  return TechEffect("stat", key=k, value=v)
UNLOCK_AGI = TechEffect("unlock_agi")

@dataclass(frozen=True)
class TechNode:
    id: str
    name: str
    branch: str
    cost: float
    prereqs: Tuple[str, ...]
    effects: Tuple[TechEffect, ...]

    def describe(self) -> str:
        parts = []
        for e in self.effects:
            if e.kind == "capability": parts.append(f"capability {e.value:+g}")
            elif e.kind == "safety": parts.append(f"safety {e.value:+g}")
            elif e.kind in ("resource", "stat"): parts.append(f"{e.key} {e.value:+g}")
            elif e.kind == "unlock_agi": parts.append("AGI deployment unlocked")
        return ", ".join(parts)

def _chain(branch: str, rows) -> List[TechNode]:
    out, prev = [], None
    for id_, name, cost, effects in rows:
        out.append(TechNode(id_, name, branch, float(cost), (prev,) if prev else (), tuple(effects)))
        prev = id_
    return out

_NODES: List[TechNode] = (
    _chain(CAPABILITIES, [
        ("cap_eff_training", "Efficient Training", 20, [cap(6)]),
        ("cap_arch_breakthrough", "Architecture Breakthrough", 25, [cap(7)]),
        ("cap_multimodal", "Multimodal Integration", 30, [cap(8)]),
        ("cap_long_horizon", "Long-Horizon Agents", 35, [cap(9)]),
        ("cap_scalable_reasoning", "Scalable Reasoning", 40, [cap(10)]),
        ("cap_agi_breakthrough", "AGI Breakthrough", 50, [cap(12), UNLOCK_AGI]),
    ])
    + _chain(SAFETY, [
        ("safe_alignment_benchmarks", "Alignment Benchmarks", 18, [safe(6)]),
        ("safe_interpretability", "Interpretability Tools", 22, [safe(7), stat("safety_culture", 2)]),
        ("safe_adversarial", "Adversarial Training", 26, [safe(8)]),
        ("safe_monitoring", "Runtime Monitoring", 30, [safe(9)]),
        ("safe_scaling_laws", "Safety Scaling Laws", 34, [safe(10), stat("safety_culture", 3)]),
        ("safe_guardrails", "Verified Guardrails", 40, [safe(12)]),
    ])
    + _chain(OPS, [
        ("ops_compute_scaling", "Compute Scaling", 16, [res("compute", 6)]),
        ("ops_energy_contracts", "Energy Contracts", 20, [res("capital", 5)]),
        ("ops_data_pipeline", "Data Pipeline", 22, [res("data", 6)]),
        ("ops_ai_ops", "AI-Assisted Operations", 26, [res("capital", 6)]),
        ("ops_model_compression", "Model Compression", 30, [res("compute", 7)]),
        ("ops_reliability", "Reliability Engineering", 34, [res("trust", 6)]),
    ])
    + _chain(POLICY, [
        ("pol_audit_standards", "Audit Standards", 16, [res("trust", 4)]),
        ("pol_compute_reporting", "Compute Reporting", 20, [res("influence", 5)]),
        ("pol_joint_safety_lab", "Joint Safety Lab", 24, [safe(6)]),
        ("pol_non_prolif", "Non-Proliferation Accord", 28, [res("influence", 6)]),
        ("pol_export_controls", "Export Controls", 30, [res("influence", 7)]),
        ("pol_mutual_inspection", "Mutual Inspection", 34, [safe(8), res("trust", 4)]),
    ])
)

def build_tech_graph(nodes) -> nx.DiGraph:
    """Prereq DAG (edge prereq -> node). Raises CatalogError on broken data."""
    g = nx.DiGraph()
    for n in nodes:
        if n.id in g:
            raise CatalogError(f"duplicate tech id {n.id!r}")
        if n.branch not in BRANCHES:
            raise CatalogError(f"tech {n.id!r} has unknown branch {n.branch!r}")
        g.add_node(n.id, branch=n.branch, cost=n.cost)
    for n in nodes:
        for p in n.prereqs:
            if p not in g:
                raise CatalogError(f"tech {n.id!r} requires unknown prereq {p!r}")
            g.add_edge(p, n.id)
    if not nx.is_directed_acyclic_graph(g):
        raise CatalogError(f"tech prereq cycle: {nx.find_cycle(g)}")
    return g

TECH_GRAPH = build_tech_graph(_NODES)
TECH_TREE: Mapping[str, TechNode] = MappingProxyType({n.id: n for n in _NODES})

def techs_in_branch(branch: str) -> List[TechNode]:
    return [n for n in TECH_TREE.values() if n.branch == branch]

def apply_tech_effects(faction: "FactionState", node: TechNode) -> None:
    for e in node.effects:
        if e.kind == "capability": apply_score_delta(faction, capability=e.value)
        elif e.kind == "safety": apply_score_delta(faction, safety=e.value)
        elif e.kind == "resource": apply_resource_delta(faction, {e.key: e.value})
        elif e.kind == "stat": apply_stat_delta(faction, {e.key: e.value})
        elif e.kind == "unlock_agi": faction.can_deploy_agi = True

def next_affordable(faction: "FactionState", branch: str) -> Optional[TechNode]:
    pool = faction.research.get(branch, 0.0)
    for n in techs_in_branch(branch):
        if n.id in faction.unlocked_techs: continue
        if n.cost > pool: continue
        if all(p in faction.unlocked_techs for p in n.prereqs):
            return n
    return None

def resolve_unlocks(faction: "FactionState", log: Optional[List[str]] = None) -> List[str]:
    """Unlock every affordable node, branch by branch, until nothing more fits.

    Search restarts from the top of the catalog after each unlock, so a cheap
    node that just had its prereq satisfied is found on the next pass.
    """
    unlocked = []
    for branch in BRANCHES:
        node = next_affordable(faction, branch)
        while node is not None:
            faction.research[branch] -= node.cost
            faction.unlocked_techs.add(node.id)
            apply_tech_effects(faction, node)
            unlocked.append(node.id)
            if log is not None:
                log.append(f"{faction.name} unlocked {node.name} ({node.describe()}).")
            node = next_affordable(faction, branch)
    return unlocked
