from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class BusinessDef:
    id: str
    name: str
    base_cost: float
    cost_growth: float
    base_profit_per_cycle: float
    base_cycle_time_ms: float
    profit_growth: float = 1.0
    manager_cost_mult: Optional[float] = None
    unlock_at_total_earned: float = 0.0


@dataclass(frozen=True)
class BuildingDef:
    id: str
    name: str
    build_cost: float
    hq_level_required: int
    business_id: Optional[str] = None
    upgrade_base_cost: Optional[float] = None


@dataclass(frozen=True)
class HQLevelConfig:
    level: int
    plots: int
    unlocked_building_ids: Tuple[str, ...]
    queue_slots: int
    buy_mode_unlocks: Tuple[str, ...]


@dataclass(frozen=True)
class ProjectEffect:
    offline_cap_seconds_add: float = 0.0
    global_profit_mult: float = 1.0
    global_time_mult: float = 1.0
    auto_run_all: bool = False


@dataclass(frozen=True)
class ProjectDef:
    id: str
    name: str
    description: str
    duration_ms: float
    target_seconds: float
    effect: ProjectEffect = field(default_factory=ProjectEffect)
    total_earned_at_least: float = 0.0
    hq_level_at_least: int = 1


@dataclass(frozen=True)
class LeagueConfig:
    id: str
    min_trophies: int
    attack_loot_cap_minutes: float
    defense_loss_cap_minutes: float
    raid_min_minutes: float
    raid_max_minutes: float


@dataclass(frozen=True)
class Milestone:
    count: int
    mult: float


@dataclass(frozen=True)
class TargetTier:
    """One raid-target difficulty band."""
    id: str
    defense_mult: float
    loot_seconds: float
    trophy_win: int
    trophy_loss: int


@dataclass
class UpgradeEffect:
    profit_mult: float = 1.0
    time_mult: float = 1.0


@dataclass
class UpgradeDef:
    """Business-scoped or global one-time upgrade.

    Price is `max(cost, income_per_sec * target_seconds)` so that late
    purchases stay meaningful relative to income.
    """
    id: str
    name: str
    kind: str  # "business" | "global"
    cost: float
    target_seconds: float = 0.0
    target_business_id: Optional[str] = None
    effect: UpgradeEffect = field(default_factory=UpgradeEffect)
    unlock_business_id: Optional[str] = None
    unlock_count_at_least: int = 0
    unlock_total_earned_at_least: float = 0.0


@dataclass
class WarUpgradeEffect:
    offense_bonus: float = 0.0
    defense_bonus: float = 0.0
    vault_protect_pct: float = 0.0
    loss_mult: float = 1.0
    loot_mult: float = 1.0
    attack_cooldown_mult: float = 1.0
    shield_duration_bonus_sec: float = 0.0


@dataclass
class WarUpgradeDef:
    id: str
    name: str
    description: str
    kind: str  # "security" | "war"
    base_seconds: float
    cost_growth: float
    effect_per_level: WarUpgradeEffect = field(default_factory=WarUpgradeEffect)


@dataclass
class WarBonuses:
    offense_bonus: float = 0.0
    defense_bonus: float = 0.0
    vault_protect_pct: float = 0.0
    loss_mult: float = 1.0
    loot_mult: float = 1.0
    attack_cooldown_mult: float = 1.0
    shield_duration_bonus_sec: float = 0.0


BUY_MODES: List[str] = ["x1", "x10", "x100", "max"]
