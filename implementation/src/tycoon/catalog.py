from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from tycoon.constants import GRID_COLUMNS
from tycoon.errors import UnknownDefinitionError
from tycoon.types import (
    BuildingDef,
    BusinessDef,
    HQLevelConfig,
    LeagueConfig,
    Milestone,
    ProjectDef,
    ProjectEffect,
    TargetTier,
)


BUSINESS_DEFS: List[BusinessDef] = [
    BusinessDef("lemonade", "Lemonade Stand", 10, 1.15, 0.4, 2000, manager_cost_mult=12),
    BusinessDef("newspaper", "Newspaper Rack", 50, 1.16, 4.8, 4000, manager_cost_mult=16),
    BusinessDef("carwash", "Car Wash", 200, 1.17, 36.0, 8000, manager_cost_mult=20,
                unlock_at_total_earned=500),
    BusinessDef("pizza", "Pizza Shop", 1000, 1.18, 240.0, 12000, manager_cost_mult=24,
                unlock_at_total_earned=2000),
    BusinessDef("coffee", "Coffee Cart", 5000, 1.19, 900.0, 10000, manager_cost_mult=26,
                unlock_at_total_earned=50_000),
    BusinessDef("foodtruck", "Food Truck", 25_000, 1.2, 4800.0, 12000, manager_cost_mult=27,
                unlock_at_total_earned=250_000),
    BusinessDef("gym", "Fitness Gym", 120_000, 1.205, 27_000.0, 15000, manager_cost_mult=28,
                unlock_at_total_earned=1_000_000),
    BusinessDef("laundromat", "Laundromat", 600_000, 1.21, 144_000.0, 18000, manager_cost_mult=29,
                unlock_at_total_earned=5_000_000),
    BusinessDef("arcade", "Retro Arcade", 3_000_000, 1.215, 700_000.0, 20000, manager_cost_mult=30,
                unlock_at_total_earned=25_000_000),
    BusinessDef("hotel", "Boutique Hotel", 15_000_000, 1.22, 3_750_000.0, 25000,
                manager_cost_mult=31, unlock_at_total_earned=100_000_000),
    BusinessDef("airline", "Regional Airline", 80_000_000, 1.225, 21_000_000.0, 30000,
                manager_cost_mult=32, unlock_at_total_earned=500_000_000),
    BusinessDef("datacenter", "Data Center", 400_000_000, 1.23, 120_000_000.0, 40000,
                manager_cost_mult=33, unlock_at_total_earned=2_000_000_000),
]

BUSINESS_BY_ID: Dict[str, BusinessDef] = {d.id: d for d in BUSINESS_DEFS}


BUILDING_DEFS: List[BuildingDef] = [
    BuildingDef("hq", "HQ", build_cost=0, hq_level_required=1, upgrade_base_cost=200),
    BuildingDef("lemonade", "Lemonade Stand", build_cost=15, hq_level_required=1, business_id="lemonade"),
    BuildingDef("newspaper", "Newspaper Rack", build_cost=60, hq_level_required=1, business_id="newspaper"),
    BuildingDef("carwash", "Car Wash", build_cost=250, hq_level_required=2, business_id="carwash"),
    BuildingDef("pizza", "Pizza Shop", build_cost=1200, hq_level_required=3, business_id="pizza"),
]

BUILDING_BY_ID: Dict[str, BuildingDef] = {d.id: d for d in BUILDING_DEFS}
BUILDING_FOR_BUSINESS: Dict[str, BuildingDef] = {
    d.business_id: d for d in BUILDING_DEFS if d.business_id is not None
}


HQ_LEVELS: List[HQLevelConfig] = [
    HQLevelConfig(1, plots=6, unlocked_building_ids=("lemonade", "newspaper"),
                  queue_slots=1, buy_mode_unlocks=("x1",)),
    HQLevelConfig(2, plots=10, unlocked_building_ids=("lemonade", "newspaper", "carwash"),
                  queue_slots=1, buy_mode_unlocks=("x1", "x10")),
    HQLevelConfig(3, plots=14, unlocked_building_ids=("lemonade", "newspaper", "carwash", "pizza"),
                  queue_slots=1, buy_mode_unlocks=("x1", "x10", "x100", "max")),
    HQLevelConfig(4, plots=18, unlocked_building_ids=("lemonade", "newspaper", "carwash", "pizza"),
                  queue_slots=2, buy_mode_unlocks=("x1", "x10", "x100", "max")),
]


_MINUTE = 60 * 1000
_HOUR = 60 * 60

PROJECT_DEFS: List[ProjectDef] = [
    ProjectDef("offline-cap-2h", "Continuity Plan", "Extend offline cap by +2 hours.",
               10 * _MINUTE, 10 * 60, ProjectEffect(offline_cap_seconds_add=2 * _HOUR),
               total_earned_at_least=200),
    ProjectDef("profit-boost-25", "Narrative Control", "Increase all profits by +25%.",
               15 * _MINUTE, 15 * 60, ProjectEffect(global_profit_mult=1.25),
               total_earned_at_least=1000),
    ProjectDef("cycle-optimization", "Process Discipline", "Speed up all cycles by 10%.",
               20 * _MINUTE, 20 * 60, ProjectEffect(global_time_mult=0.9),
               total_earned_at_least=5000),
    ProjectDef("auto-dispatch", "Delegation Doctrine", "Auto-run all idle operations.",
               25 * _MINUTE, 25 * 60, ProjectEffect(auto_run_all=True),
               total_earned_at_least=15_000, hq_level_at_least=3),
    ProjectDef("profit-boost-50", "Marketing Blitz", "Increase all profits by +50%.",
               30 * _MINUTE, 30 * 60, ProjectEffect(global_profit_mult=1.5),
               total_earned_at_least=10_000, hq_level_at_least=3),
    ProjectDef("offline-cap-4h", "Vault Expansion", "Extend offline cap by +4 hours.",
               35 * _MINUTE, 40 * 60, ProjectEffect(offline_cap_seconds_add=4 * _HOUR),
               total_earned_at_least=20_000, hq_level_at_least=3),
    ProjectDef("cycle-overclock", "Distribution Pressure", "Speed up all cycles by 15%.",
               45 * _MINUTE, 45 * 60, ProjectEffect(global_time_mult=0.85),
               total_earned_at_least=50_000, hq_level_at_least=3),
    ProjectDef("offline-cap-8h", "Deep Storage", "Extend offline cap by +8 hours.",
               60 * _MINUTE, 60 * 60, ProjectEffect(offline_cap_seconds_add=8 * _HOUR),
               total_earned_at_least=250_000, hq_level_at_least=3),
    ProjectDef("profit-boost-100", "Board Alignment", "Increase all profits by +100%.",
               90 * _MINUTE, 90 * 60, ProjectEffect(global_profit_mult=2.0),
               total_earned_at_least=1_000_000, hq_level_at_least=3),
    ProjectDef("cycle-mastery", "Executive Efficiency", "Speed up all cycles by 25%.",
               120 * _MINUTE, 120 * 60, ProjectEffect(global_time_mult=0.75),
               total_earned_at_least=5_000_000, hq_level_at_least=3),
]

PROJECT_BY_ID: Dict[str, ProjectDef] = {d.id: d for d in PROJECT_DEFS}


MILESTONES: List[Milestone] = [
    Milestone(10, 2.0),
    Milestone(25, 2.0),
    Milestone(50, 3.0),
    Milestone(100, 5.0),
]


WAR_LEAGUES: List[LeagueConfig] = [
    LeagueConfig("bronze", 0, attack_loot_cap_minutes=8, defense_loss_cap_minutes=4,
                 raid_min_minutes=12, raid_max_minutes=20),
    LeagueConfig("silver", 200, attack_loot_cap_minutes=10, defense_loss_cap_minutes=5,
                 raid_min_minutes=12, raid_max_minutes=18),
    LeagueConfig("gold", 500, attack_loot_cap_minutes=12, defense_loss_cap_minutes=6,
                 raid_min_minutes=10, raid_max_minutes=18),
    LeagueConfig("plat", 1000, attack_loot_cap_minutes=14, defense_loss_cap_minutes=6,
                 raid_min_minutes=10, raid_max_minutes=16),
]

LEAGUE_BY_ID: Dict[str, LeagueConfig] = {c.id: c for c in WAR_LEAGUES}

# Attacker strength bump for incoming raids by league.
LEAGUE_RAID_BONUS: Dict[str, float] = {"bronze": 0.0, "silver": 5.0, "gold": 10.0, "plat": 15.0}

TARGET_TIERS: List[TargetTier] = [
    TargetTier("easy", defense_mult=0.8, loot_seconds=60, trophy_win=8, trophy_loss=4),
    TargetTier("medium", defense_mult=1.0, loot_seconds=180, trophy_win=15, trophy_loss=8),
    TargetTier("hard", defense_mult=1.2, loot_seconds=480, trophy_win=25, trophy_loss=12),
]

WAR_TARGET_NAMES: List[str] = [
    "Vertex Capital",
    "Skyline Partners",
    "River Dock Union",
    "Crown & Coin Holdings",
    "Neon Nights Group",
    "White Glove Consulting",
    "Ghostwire Labs",
    "Ironheart Security",
]

FALLBACK_TARGET_NAME = "Rival Corp"


def business_def(business_id: str) -> BusinessDef:
    try:
        return BUSINESS_BY_ID[business_id]
    except KeyError:
        raise UnknownDefinitionError("business", business_id) from None


def building_def(type_id: str) -> BuildingDef:
    try:
        return BUILDING_BY_ID[type_id]
    except KeyError:
        raise UnknownDefinitionError("building", type_id) from None


def project_def(project_id: str) -> ProjectDef:
    try:
        return PROJECT_BY_ID[project_id]
    except KeyError:
        raise UnknownDefinitionError("project", project_id) from None


def hq_config(level: int) -> HQLevelConfig:
    """Highest HQ config whose level is <= `level` (level 1 for anything lower)."""
    chosen = HQ_LEVELS[0]
    for entry in HQ_LEVELS:
        if entry.level <= level:
            chosen = entry
    return chosen


def next_hq_level(level: int) -> Optional[int]:
    for entry in HQ_LEVELS:
        if entry.level > level:
            return entry.level
    return None


def plot_count_for_hq(level: int) -> int:
    return hq_config(level).plots


def queue_slots_for_hq(level: int) -> int:
    return hq_config(level).queue_slots


def unlocked_buy_modes_for_hq(level: int) -> Tuple[str, ...]:
    return hq_config(level).buy_mode_unlocks


def unlocked_building_ids_for_hq(level: int) -> Tuple[str, ...]:
    return hq_config(level).unlocked_building_ids


def plot_position(index: int) -> Tuple[int, int]:
    return index % GRID_COLUMNS, index // GRID_COLUMNS


def league_for_trophies(trophies: float) -> str:
    league = WAR_LEAGUES[0].id
    for entry in sorted(WAR_LEAGUES, key=lambda c: c.min_trophies):
        if trophies >= entry.min_trophies:
            league = entry.id
    return league


def league_config(league: str) -> LeagueConfig:
    return LEAGUE_BY_ID.get(league, WAR_LEAGUES[0])
