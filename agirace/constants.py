# agirace/constants.py
from types import MappingProxyType
from typing import Dict, Tuple

# --- Bounds ---
MIN_STAT = 0.0
MAX_STAT = 100.0
MIN_SECURITY_LEVEL = 1
MAX_SECURITY_LEVEL = 5

# --- Faction Types ---
LAB = "lab"
GOVERNMENT = "government"
FACTION_TYPES: Tuple[str, ...] = (LAB, GOVERNMENT)

# --- Research Branches (catalog order matters for unlocks and espionage ties) ---
CAPABILITIES = "capabilities"
SAFETY = "safety"
OPS = "ops"
POLICY = "policy"
BRANCHES: Tuple[str, ...] = (CAPABILITIES, SAFETY, OPS, POLICY)

RESOURCE_KEYS: Tuple[str, ...] = ("compute", "talent", "capital", "data", "influence", "trust")
STAT_KEYS: Tuple[str, ...] = ("safety_culture", "opsec")

# --- Openness ---
OPEN = "open"
SECRET = "secret"

# research multiplier and per-action trust / safety / capability shifts
OPENNESS_MODIFIERS: "MappingProxyType[str, Dict[str, float]]" = MappingProxyType({
    OPEN:   {"research": 0.9, "trust": 2.0, "safety": 1.0, "capability": 0.0},
    SECRET: {"research": 1.1, "trust": -3.0, "safety": -2.0, "capability": 1.0},
})

# --- Lab Actions ---
RESEARCH_CAPABILITIES = "research_capabilities"
RESEARCH_SAFETY = "research_safety"
BUILD_COMPUTE = "build_compute"
DEPLOY_PRODUCTS = "deploy_products"
DEPLOY_AGI = "deploy_agi"
HIRE_TALENT = "hire_talent"
PUBLISH_RESEARCH = "publish_research"
HARDWARE_PARTNERSHIP = "hardware_partnership"
OPEN_SOURCE_RELEASE = "open_source_release"
DEFENSIVE_MEASURES = "defensive_measures"
ACCELERATE_TIMELINE = "accelerate_timeline"
SAFETY_PAUSE = "safety_pause"

# --- Shared Actions ---
POLICY_WORK = "policy"
ESPIONAGE = "espionage"
FORM_ALLIANCE = "form_alliance"

# --- Government Actions ---
SUBSIDIZE = "subsidize"
REGULATE = "regulate"
COUNTERINTEL = "counterintel"
SECURE_FUNDING = "secure_funding"

# --- Faction-Specific Actions ---
OPEN_RESEARCH = "open_research"            # us_lab_a
MOVE_FAST = "move_fast"                    # us_lab_b
STATE_RESOURCES = "state_resources"        # cn_lab
EXECUTIVE_ORDER = "executive_order"        # us_gov
STRATEGIC_INITIATIVE = "strategic_initiative"  # cn_gov

# --- Targeted Bundles ---
SUBSIDY_BUNDLE = MappingProxyType({"capital": 6.0})
STRATEGIC_INITIATIVE_BUNDLE = MappingProxyType({"compute": 8.0, "capital": 6.0, "data": 4.0})
REGULATION_PENALTY = MappingProxyType({"compute": -6.0, "influence": -2.0, "capability": -4.0})
EXECUTIVE_ORDER_PENALTY = MappingProxyType({"compute": -8.0, "influence": -3.0, "capability": -6.0})
EXECUTIVE_ORDER_SAFETY_BONUS = 3.0
COUNTERINTEL_OPSEC = 6.0
DEFENSIVE_MEASURES_OPSEC = 4.0
OPEN_SOURCE_SPILLOVER = 2.0

# --- Outcomes ---
VICTORY_SAFE_AGI = "safe_agi"
VICTORY_DOMINANT = "dominant"
VICTORY_PUBLIC_TRUST = "public_trust"
VICTORY_REGULATORY = "regulatory"
VICTORY_ALLIANCE = "alliance"
VICTORY_CONTROL = "control"

LOSS_CATASTROPHE = "catastrophe"
LOSS_COLLAPSE = "collapse"
LOSS_OBSOLESCENCE = "obsolescence"
LOSS_COUP = "coup"

STALEMATE = "stalemate"
