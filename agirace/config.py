# agirace/config.py
from __future__ import annotations
from dataclasses import dataclass, field as dc_field
from typing import Optional

@dataclass
class Rates:
    # --- Income (once per faction per turn, before actions) ---
    lab_capital_base: float = 4.0
    lab_capital_trust: float = 0.04
    lab_capital_influence: float = 0.02

    lab_research_base: float = 8.0
    lab_research_compute: float = 0.08
    lab_research_data: float = 0.05
    lab_capability_share: float = 0.6
    lab_safety_share: float = 0.4
    lab_safety_floor: float = 2.0   # flat safety research every turn
    lab_ops_share: float = 0.25

    gov_capital_base: float = 5.0
    gov_capital_influence: float = 0.03
    gov_capital_trust: float = 0.02
    gov_policy_base: float = 5.0
    gov_policy_influence: float = 0.05

@dataclass
class DetectionConfig:
    base_chance: float = 0.1
    per_exposure: float = 0.08
    opsec_factor: float = 0.003
    max_chance: float = 0.65

    trust_penalty: float = -8.0
    influence_penalty: float = -5.0
    safety_penalty: float = -5.0

@dataclass
class EspionageConfig:
    base_success: float = 0.35
    attacker_opsec_factor: float = 0.002
    target_opsec_factor: float = 0.004
    min_success: float = 0.05
    max_success: float = 0.85
    max_steal: float = 12.0

    detect_chance: float = 0.25
    attacker_trust_penalty: float = -6.0
    attacker_influence_penalty: float = -4.0
    target_trust_bonus: float = 2.0

@dataclass
class VictoryThresholds:
    # Lab victories
    safe_agi_faction_safety: float = 80.0
    safe_agi_global_safety: float = 70.0
    dominant_lead_pct: float = 100.0
    dominant_min_capability: float = 90.0
    public_trust_min_trust: float = 97.0
    public_trust_min_capability: float = 80.0

    # Government victories
    regulatory_lab_safety: float = 65.0
    regulatory_global_safety: float = 60.0
    alliance_min_trust: float = 93.0
    alliance_min_allies: int = 4
    alliance_min_influence: float = 120.0
    control_min_influence: float = 120.0
    control_lab_capability_max: float = 15.0

    # Losses
    catastrophe_faction_safety: float = 70.0
    catastrophe_global_safety: float = 60.0
    obsolescence_gap: float = 50.0
    collapse_trust: float = 20.0
    coup_min_influence: float = 30.0
    coup_lab_capability: float = 70.0

    # Fixed-horizon fallback when the turn limit is reached unresolved
    horizon_lab_safety: float = 60.0
    horizon_global_safety: float = 50.0

@dataclass
class RelationsConfig:
    espionage_tension: float = 10.0
    alliance_tension_relief: float = 10.0

@dataclass
class Flags:
    terminal_on_any_loss: bool = False
    enable_events: bool = False

@dataclass
class Config:
    seed: int = 42
    max_turn: int = 32
    min_victory_turn: int = 24
    action_points: int = 2
    start_year: int = 2026
    start_quarter: int = 1
    player_faction_id: Optional[str] = "us_lab_a"
    log_tail: int = 50
    event_chance: float = 0.45
    event_history: int = 3
    rates: Rates = dc_field(default_factory=Rates)
    detection: DetectionConfig = dc_field(default_factory=DetectionConfig)
    espionage: EspionageConfig = dc_field(default_factory=EspionageConfig)
    victory: VictoryThresholds = dc_field(default_factory=VictoryThresholds)
    relations: RelationsConfig = dc_field(default_factory=RelationsConfig)
    flags: Flags = dc_field(default_factory=Flags)
