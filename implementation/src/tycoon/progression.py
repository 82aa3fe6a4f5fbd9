"""Progression math: multiplier composition and cost curves.

All functions here are pure reads of a `GameState`. Per business:

    total_profit_mult = milestone * upgrades * buffs * building * projects * growth
    total_time_mult   = upgrades * building * projects
    profit_per_cycle  = base_profit * count * total_profit_mult
    cycle_time_ms     = max(MIN_CYCLE_MS, base_cycle_ms * total_time_mult)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional

from tycoon.catalog import (
    BUILDING_FOR_BUSINESS,
    BUSINESS_DEFS,
    MILESTONES,
    PROJECT_BY_ID,
    PROJECT_DEFS,
    business_def,
    unlocked_buy_modes_for_hq,
)
from tycoon.config import DEFAULT_CONFIG, EngineConfig
from tycoon.constants import (
    BUILDING_UPGRADE_BASE_SECONDS,
    BUILDING_UPGRADE_COST_GROWTH,
    BUILDING_UPGRADE_TIME_GROWTH,
    DEFAULT_MANAGER_COST_MULT,
    MAX_BUY_ITERATIONS,
    MIN_CYCLE_MS,
    MIN_PROJECT_DURATION_MS,
)
from tycoon.store import BuildingInstance, GameState, TempBuff, finite
from tycoon.types import BuildingDef, BusinessDef, Milestone, ProjectDef
from tycoon.upgrades import default_manager


@dataclass(frozen=True)
class BusinessDerived:
    profit_per_cycle: float
    cycle_time_ms: float
    total_profit_mult: float
    total_time_mult: float


@dataclass(frozen=True)
class BuyInfo:
    quantity: int
    cost: float


# ── milestones ────────────────────────────────────────────────────────

def milestone_mult(count: int) -> float:
    mult = 1.0
    for milestone in MILESTONES:
        if count >= milestone.count:
            mult *= milestone.mult
    return mult


def next_milestone(count: int) -> Optional[Milestone]:
    for milestone in MILESTONES:
        if count < milestone.count:
            return milestone
    return None


# ── buildings ─────────────────────────────────────────────────────────

def hq_level(state: GameState) -> int:
    hq = state.buildings.get("hq")
    if hq is None:
        return 1
    level = finite(hq.building_level, 1.0)
    return max(1, int(level))


def unlocked_buy_modes(state: GameState) -> tuple:
    return unlocked_buy_modes_for_hq(hq_level(state))


def building_for_business(state: GameState, business_id: str) -> Optional[BuildingInstance]:
    bdef = BUILDING_FOR_BUSINESS.get(business_id)
    if bdef is None:
        return None
    for building in state.buildings.values():
        if building.type_id == bdef.id:
            return building
    return None


def building_profit_mult(level: int) -> float:
    if level <= 1:
        return 1.0
    return 1.0 + 0.25 * (level - 1)


def building_time_mult(level: int) -> float:
    if level <= 1:
        return 1.0
    return max(0.6, 1.0 - 0.05 * (level - 1))


def building_upgrade_cost(bdef: BuildingDef, level: int) -> float:
    base = bdef.upgrade_base_cost if bdef.upgrade_base_cost is not None else bdef.build_cost
    return base * BUILDING_UPGRADE_COST_GROWTH ** max(0, level - 1)


def building_upgrade_time_sec(level: int) -> float:
    return BUILDING_UPGRADE_BASE_SECONDS * BUILDING_UPGRADE_TIME_GROWTH ** max(0, level - 1)


# ── projects ──────────────────────────────────────────────────────────

def project_profit_mult(completed: List[str]) -> float:
    mult = 1.0
    for project_id in completed:
        pdef = PROJECT_BY_ID.get(project_id)
        if pdef is not None:
            mult *= pdef.effect.global_profit_mult
    return mult


def project_time_mult(completed: List[str]) -> float:
    mult = 1.0
    for project_id in completed:
        pdef = PROJECT_BY_ID.get(project_id)
        if pdef is not None:
            mult *= pdef.effect.global_time_mult
    return mult


def has_auto_run_all(state: GameState) -> bool:
    return any(
        PROJECT_BY_ID[pid].effect.auto_run_all
        for pid in state.completed_projects if pid in PROJECT_BY_ID
    )


def offline_cap_seconds(state: GameState, config: EngineConfig = DEFAULT_CONFIG) -> float:
    bonus = sum(
        PROJECT_BY_ID[pid].effect.offline_cap_seconds_add
        for pid in state.completed_projects if pid in PROJECT_BY_ID
    )
    return config.offline_cap_base_seconds + bonus


def project_time_buff_mult(buffs: List[TempBuff]) -> float:
    mult = 1.0
    for buff in buffs:
        if buff.kind == "project-time":
            mult *= buff.mult
    return mult


def project_duration_ms(state: GameState, base_duration_ms: float) -> float:
    return max(MIN_PROJECT_DURATION_MS, base_duration_ms * project_time_buff_mult(state.active_buffs))


def project_cost(income_per_sec: float, pdef: ProjectDef) -> float:
    return max(0.0, income_per_sec * pdef.target_seconds)


def is_project_unlocked(pdef: ProjectDef, total_earned: float, hq: int) -> bool:
    return total_earned >= pdef.total_earned_at_least and hq >= pdef.hq_level_at_least


def available_projects(state: GameState) -> List[ProjectDef]:
    running = {run.id for run in state.running_projects}
    hq = hq_level(state)
    return [
        p for p in PROJECT_DEFS
        if p.id not in state.completed_projects
        and p.id not in running
        and is_project_unlocked(p, state.total_earned, hq)
    ]


# ── businesses ────────────────────────────────────────────────────────

def business_buff_mult(state: GameState, business_id: str) -> float:
    mult = 1.0
    for buff in state.active_buffs:
        if buff.kind == "business-profit" and buff.business_id == business_id:
            mult *= buff.mult
    return mult


def derive_business(state: GameState, bdef: BusinessDef,
                    count_override: Optional[int] = None) -> BusinessDerived:
    business = state.businesses.get(bdef.id)
    if count_override is not None:
        count = count_override
    else:
        count = business.count if business is not None else 0

    upgrade_profit, upgrade_time = default_manager().get_multipliers(state.purchased_upgrades, bdef.id)
    building = building_for_business(state, bdef.id)
    level = building.building_level if building is not None else 1
    growth_mult = bdef.profit_growth ** (count - 1) if count > 0 else 1.0

    total_profit_mult = (
        milestone_mult(count)
        * upgrade_profit
        * business_buff_mult(state, bdef.id)
        * building_profit_mult(level)
        * project_profit_mult(state.completed_projects)
        * growth_mult
    )
    total_time_mult = upgrade_time * building_time_mult(level) * project_time_mult(state.completed_projects)

    profit_per_cycle = finite(bdef.base_profit_per_cycle * count * total_profit_mult)
    cycle_time_ms = max(MIN_CYCLE_MS, finite(bdef.base_cycle_time_ms * total_time_mult, MIN_CYCLE_MS))
    return BusinessDerived(
        profit_per_cycle=profit_per_cycle,
        cycle_time_ms=cycle_time_ms,
        total_profit_mult=total_profit_mult,
        total_time_mult=total_time_mult,
    )


def next_unit_cost(bdef: BusinessDef, owned: int) -> float:
    return bdef.base_cost * bdef.cost_growth ** owned


def bulk_cost(bdef: BusinessDef, start_count: int, quantity: int) -> float:
    cost = 0.0
    unit = next_unit_cost(bdef, start_count)
    for _ in range(quantity):
        cost += unit
        unit *= bdef.cost_growth
    return cost


def max_affordable(bdef: BusinessDef, start_count: int, cash: float) -> BuyInfo:
    """Greedy accumulation bounded by MAX_BUY_ITERATIONS."""
    quantity = 0
    cost = 0.0
    unit = next_unit_cost(bdef, start_count)
    while quantity < MAX_BUY_ITERATIONS and cost + unit <= cash:
        cost += unit
        quantity += 1
        unit *= bdef.cost_growth
    return BuyInfo(quantity=quantity, cost=cost)


def buy_info(state: GameState, business_id: str) -> BuyInfo:
    bdef = business_def(business_id)
    owned = state.businesses[business_id].count
    if state.buy_mode == "max":
        return max_affordable(bdef, owned, finite(state.cash))
    quantity = {"x10": 10, "x100": 100}.get(state.buy_mode, 1)
    return BuyInfo(quantity=quantity, cost=bulk_cost(bdef, owned, quantity))


def manager_cost(bdef: BusinessDef) -> float:
    mult = bdef.manager_cost_mult if bdef.manager_cost_mult is not None else DEFAULT_MANAGER_COST_MULT
    return bdef.base_cost * mult


def business_counts(state: GameState) -> Dict[str, int]:
    return {
        d.id: (state.businesses[d.id].count if d.id in state.businesses else 0)
        for d in BUSINESS_DEFS
    }


def income_per_sec(state: GameState) -> float:
    total = 0.0
    for bdef in BUSINESS_DEFS:
        derived = derive_business(state, bdef)
        if derived.cycle_time_ms > 0:
            total += derived.profit_per_cycle / (derived.cycle_time_ms / 1000.0)
    return finite(total)


def is_business_unlocked(state: GameState, business_id: str) -> bool:
    if building_for_business(state, business_id) is not None:
        return True
    business = state.businesses.get(business_id)
    return business is not None and business.count > 0


def prune_expired_buffs(buffs: List[TempBuff], now: float) -> List[TempBuff]:
    return [buff for buff in buffs if buff.expires_at > now]
