from __future__ import annotations

import pytest

from agirace.config import Rates
from agirace.economy import apply_income, capability_ratio
from agirace.factions import create_initial_state


def test_lab_income() -> None:
    state = create_initial_state()
    lab = state.factions["us_lab_a"]
    lab.compute_income(Rates())
    base = 8 + 0.08 * 60 + 0.05 * 60
    w = 10 / 35
    assert lab.resources.capital == pytest.approx(60 + 4 + 0.04 * 60 + 0.02 * 40)
    assert lab.research["capabilities"] == pytest.approx(0.6 * base * w)
    assert lab.research["safety"] == pytest.approx(0.4 * base * (1 - w) + 2)
    assert lab.research["ops"] == pytest.approx(0.25 * base)
    assert lab.research["policy"] == 0


def test_government_income() -> None:
    state = create_initial_state()
    gov = state.factions["us_gov"]
    gov.compute_income(Rates())
    assert gov.resources.capital == pytest.approx(70 + 5 + 0.03 * 90 + 0.02 * 70)
    assert gov.research["policy"] == pytest.approx(5 + 0.05 * 90)
    assert gov.research["capabilities"] == 0


def test_capability_ratio_defaults_to_even_split() -> None:
    state = create_initial_state()
    gov = state.factions["us_gov"]
    gov.capability_score = gov.safety_score = 0
    assert capability_ratio(gov) == 0.5


def test_income_respects_capital_cap() -> None:
    state = create_initial_state()
    for f in state.factions.values():
        f.resources.capital = 99
    apply_income(state, Rates())
    assert all(f.resources.capital == 100 for f in state.factions.values())
