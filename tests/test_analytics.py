from __future__ import annotations

import matplotlib

matplotlib.use("Agg")

from agirace.analytics import (
    add_derived_columns, alliance_blocs, alliance_centrality, alliance_graph, final_standings,
    leader_by_turn, outcome_summary,
)
from agirace.config import Config
from agirace.engine import GameEngine
from agirace.plotting import get_color, plot_race_dashboard, plot_research_mix, save_figure


def _engine(turns: int = 4) -> GameEngine:
    engine = GameEngine(Config(seed=2))
    engine.run(turns=turns)
    return engine


def test_frame_has_one_row_per_faction_and_turn() -> None:
    df = _engine().frame()
    assert len(df) == 4 * 5
    assert list(df["turn"].unique()) == [1, 2, 3, 4]
    derived = add_derived_columns(df)
    shares = derived[derived["turn"] == 4]["capability_share"].sum()
    assert abs(shares - 1.0) < 1e-6


def test_standings_and_leaders() -> None:
    engine = _engine()
    df = engine.frame()
    standings = final_standings(df)
    assert len(standings) == 5
    assert standings["capability"].is_monotonic_decreasing
    leaders = leader_by_turn(df)
    assert list(leaders.index) == [1, 2, 3, 4]
    assert set(leaders) <= {"us_lab_a", "us_lab_b", "cn_lab"}
    summary = outcome_summary(engine.state)
    assert summary["turn"] == 4 and summary["date"] == "2027 Q1"


def test_alliance_graph() -> None:
    state = _engine(1).state
    state.add_alliance("us_gov", "us_lab_a")
    state.add_alliance("us_gov", "us_lab_b")
    g = alliance_graph(state)
    assert g.number_of_nodes() == 5 and g.number_of_edges() == 2
    assert alliance_centrality(state).index[0] == "us_gov"
    assert ["us_gov", "us_lab_a", "us_lab_b"] in alliance_blocs(state)


def test_dashboard_renders(tmp_path) -> None:
    engine = _engine()
    engine.state.add_alliance("cn_gov", "cn_lab")
    fig = plot_race_dashboard(engine.frame(), engine.state)
    assert fig is not None and len(fig.axes) >= 4
    save_figure(fig, tmp_path / "dash.png")
    assert (tmp_path / "dash.png").exists()
    mix = plot_research_mix(engine.frame())
    save_figure(mix, tmp_path / "mix.png")
    assert get_color("unknown") == "#95A5A6"


def test_empty_frame_gives_no_figure() -> None:
    engine = GameEngine()
    assert plot_race_dashboard(engine.frame(), engine.state) is None
