# agirace/analytics.py
from typing import Dict
import networkx as nx
import pandas as pd

from .state import GameState

def add_derived_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Gap and share columns used by the dashboard."""
    if df.empty: return df
    df = df.copy()
    df["research_total"] = df[["research_capabilities", "research_safety", "research_ops", "research_policy"]].sum(axis=1)
    df["safety_gap"] = df["safety"] - df["capability"]
    total_cap = df.groupby("turn")["capability"].transform("sum")
    df["capability_share"] = df["capability"] / (total_cap + 1e-9)
    return df

def final_standings(df: pd.DataFrame) -> pd.DataFrame:
    if df.empty: return df
    last = df[df["turn"] == df["turn"].max()]
    cols = ["faction", "type", "capability", "safety", "trust", "influence", "capital", "techs", "can_deploy_agi"]
    return last[cols].sort_values(["capability", "safety"], ascending=False).reset_index(drop=True)

def leader_by_turn(df: pd.DataFrame, column: str = "capability") -> pd.Series:
    labs = df[df["type"] == "lab"]
    if labs.empty: return pd.Series(dtype=object)
    idx = labs.groupby("turn")[column].idxmax()
    return labs.loc[idx].set_index("turn")["faction"]

def outcome_summary(state: GameState) -> Dict[str, object]:
    return {
        "turn": state.turn,
        "date": f"{state.year} Q{state.quarter}",
        "game_over": state.game_over,
        "winner": state.winner_id,
        "victory_type": state.victory_type,
        "loser": state.loser_id,
        "loss_type": state.loss_type,
        "global_safety": state.global_safety,
    }

def alliance_graph(state: GameState) -> nx.Graph:
    g = nx.Graph()
    for fid, f in state.factions.items():
        g.add_node(fid, type=f.type, name=f.name, capability=f.capability_score)
    for a, partners in state.alliances.items():
        for b in partners:
            g.add_edge(a, b, tension=state.tension(a, b))
    return g

def alliance_centrality(state: GameState) -> pd.Series:
    g = alliance_graph(state)
    return pd.Series(nx.degree_centrality(g), name="centrality").sort_values(ascending=False)

def alliance_blocs(state: GameState):
    return [sorted(c) for c in nx.connected_components(alliance_graph(state))]
