# agirace/plotting.py
import matplotlib.pyplot as plt
import networkx as nx
import pandas as pd
import seaborn as sns

from .analytics import add_derived_columns, alliance_graph
from .state import GameState

FACTION_COLORS = {
    "us_lab_a": "#2C3E50",  # Dark Slate
    "us_lab_b": "#3498DB",  # Blue
    "cn_lab":   "#C0392B",  # Deep Red
    "us_gov":   "#8E44AD",  # Purple
    "cn_gov":   "#E67E22",  # Orange
}

def get_color(faction_id):
    return FACTION_COLORS.get(faction_id, "#95A5A6")

def set_publication_style():
    sns.set_theme(style="white", context="notebook")
    plt.rcParams.update({
        "axes.spines.top": False, "axes.spines.right": False,
        "axes.grid": True, "grid.color": "#E0E0E0", "grid.linestyle": "--", "grid.alpha": 0.5,
        "axes.titlesize": 13, "axes.labelsize": 11, "legend.fontsize": 9, "legend.frameon": False,
        "figure.dpi": 110,
    })

def _per_faction(ax, df, column, title, factions=None):
    for fid, fdf in df.groupby("faction"):
        if factions is not None and fid not in factions: continue
        ax.plot(fdf["turn"], fdf[column], label=fid, color=get_color(fid))
    ax.set_title(title, fontweight="bold")
    ax.set_xlabel("Turn")

def plot_race_dashboard(df: pd.DataFrame, state: GameState, title="AGI Race"):
    if df.empty: return None
    set_publication_style()
    df = add_derived_columns(df)
    labs = df[df["type"] == "lab"]["faction"].unique()

    fig, axes = plt.subplots(2, 2, figsize=(13, 9))
    ax_cap, ax_safe, ax_glob, ax_net = axes.flatten()

    _per_faction(ax_cap, df, "capability", "Capability Score", labs)
    ax_cap.legend(loc="upper left")
    _per_faction(ax_safe, df, "safety", "Safety Score")
    ax_safe.legend(loc="upper left")

    glob = df.groupby("turn")["global_safety"].first()
    ax_glob.plot(glob.index, glob.values, color="#27AE60", label="Global safety")
    ax_glob.fill_between(glob.index, 0, glob.values, color="#27AE60", alpha=0.15)
    ax2 = ax_glob.twinx()
    share = df[df["type"] == "lab"].pivot_table(index="turn", columns="faction", values="capability_share")
    ax2.stackplot(share.index, share.T.values, colors=[get_color(c) for c in share.columns], alpha=0.25)
    ax2.set_ylim(0, 1); ax2.set_ylabel("Lab capability share")
    ax_glob.set_ylim(0, 100); ax_glob.set_title("Global Safety", fontweight="bold"); ax_glob.set_xlabel("Turn")

    g = alliance_graph(state)
    pos = nx.circular_layout(g)
    sizes = [300 + 20 * g.nodes[n]["capability"] for n in g.nodes]
    nx.draw_networkx_nodes(g, pos, ax=ax_net, node_color=[get_color(n) for n in g.nodes], node_size=sizes)
    nx.draw_networkx_edges(g, pos, ax=ax_net, width=2.0, alpha=0.6)
    nx.draw_networkx_labels(g, pos, ax=ax_net, font_size=8, font_color="white")
    ax_net.set_title("Alliances", fontweight="bold"); ax_net.axis("off")

    outcome = state.victory_type or "in progress"
    who = state.winner_id or state.loser_id or "-"
    fig.suptitle(f"{title} | {state.year} Q{state.quarter} | {outcome} ({who})", fontweight="bold")
    plt.tight_layout()
    return fig

def plot_research_mix(df: pd.DataFrame):
    if df.empty: return None
    set_publication_style()
    cols = ["research_capabilities", "research_safety", "research_ops", "research_policy"]
    last = df[df["turn"] == df["turn"].max()].set_index("faction")[cols]
    fig, ax = plt.subplots(figsize=(9, 5))
    last.rename(columns=lambda c: c.replace("research_", "")).plot(
        kind="bar", stacked=True, ax=ax, color=sns.color_palette("RdYlBu", len(cols)), width=0.7)
    ax.set_title("Unspent Research by Branch", fontweight="bold")
    ax.set_xticklabels(ax.get_xticklabels(), rotation=0)
    plt.tight_layout()
    return fig

def save_figure(fig, path, dpi=150):
    fig.savefig(path, dpi=dpi, bbox_inches="tight")
    plt.close(fig)
