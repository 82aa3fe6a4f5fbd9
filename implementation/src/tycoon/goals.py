"""Rotating goals and the temporary buffs they grant.

Progress is never stored. Each evaluation builds a `GoalContext` from the
state and compares it against the goal target; a met goal appends its
reward buff, and freed slots are refilled from a freshly built pool.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Tuple

from tycoon.catalog import BUSINESS_BY_ID, BUSINESS_DEFS, next_hq_level, unlocked_building_ids_for_hq
from tycoon.constants import (
    GOAL_BUFF_DURATION_MS,
    GOAL_BUSINESS_PROFIT_MULT,
    GOAL_COUNT_TARGETS,
    GOAL_PROJECT_TIME_MULT,
    GOAL_SLOTS,
)
from tycoon.events import push_event
from tycoon.progression import (
    available_projects,
    business_counts,
    hq_level,
    is_business_unlocked,
    prune_expired_buffs,
    unlocked_buy_modes,
)
from tycoon.projects import can_start_any_project
from tycoon.rng import pick_index, shuffled
from tycoon.store import GameState, GoalReward, GoalState, TempBuff

logger = logging.getLogger(__name__)

BUSINESS_GOAL_TYPES = ("own-count", "hire-manager")


@dataclass
class GoalContext:
    counts: Dict[str, int]
    managers: Dict[str, bool]
    bulk_buys: int
    purchased_upgrades: int
    projects_started: int
    building_levels: Dict[str, int]
    buildings_built: int
    hq_level: int
    unbuilt_types: List[str] = field(default_factory=list)
    bulk_buy_unlocked: bool = False
    hq_target_level: Optional[int] = None
    can_start_project: bool = False


@dataclass(frozen=True)
class GoalProgress:
    current: int
    target: int

    @property
    def complete(self) -> bool:
        return self.current >= self.target


def goal_context(state: GameState) -> GoalContext:
    levels: Dict[str, int] = {}
    for building in state.buildings.values():
        levels[building.type_id] = max(levels.get(building.type_id, 0), building.building_level)
    hq = hq_level(state)
    built_types = set(levels)
    has_empty_plot = any(plot.building_id is None for plot in state.world.plots)
    unbuilt = [
        type_id for type_id in unlocked_building_ids_for_hq(hq)
        if type_id != "hq" and type_id not in built_types
    ] if has_empty_plot else []

    return GoalContext(
        counts=business_counts(state),
        managers={d.id: state.businesses[d.id].manager_owned for d in BUSINESS_DEFS},
        bulk_buys=state.bulk_buys,
        purchased_upgrades=len(state.purchased_upgrades),
        projects_started=state.projects_started,
        building_levels=levels,
        buildings_built=sum(1 for b in state.buildings.values() if b.type_id != "hq"),
        hq_level=hq,
        unbuilt_types=unbuilt,
        bulk_buy_unlocked=any(mode != "x1" for mode in unlocked_buy_modes(state)),
        hq_target_level=next_hq_level(hq),
        can_start_project=bool(available_projects(state)) and can_start_any_project(state),
    )


def _reward(goal_type: str, business_id: Optional[str] = None) -> GoalReward:
    if goal_type in BUSINESS_GOAL_TYPES:
        return GoalReward("business-profit", GOAL_BUSINESS_PROFIT_MULT, GOAL_BUFF_DURATION_MS,
                          business_id=business_id)
    return GoalReward("project-time", GOAL_PROJECT_TIME_MULT, GOAL_BUFF_DURATION_MS)


def _goal(goal_id: str, goal_type: str, target: int, business_id: Optional[str] = None,
          building_type: Optional[str] = None) -> GoalState:
    return GoalState(
        id=goal_id,
        type=goal_type,
        target=target,
        reward=_reward(goal_type, business_id),
        business_id=business_id,
        building_type=building_type,
    )


def build_goal_pool(context: GoalContext, unlocked_business_ids: List[str]) -> List[GoalState]:
    pool: List[GoalState] = []
    for business_id in unlocked_business_ids:
        owned = context.counts.get(business_id, 0)
        for target in GOAL_COUNT_TARGETS:
            if owned < target:
                pool.append(_goal(f"own-{business_id}-{target}", "own-count", target,
                                  business_id=business_id))
        if owned > 0 and not context.managers.get(business_id, False):
            pool.append(_goal(f"manager-{business_id}", "hire-manager", 1, business_id=business_id))

    pool.append(_goal(f"upgrade-{context.purchased_upgrades + 1}", "buy-upgrade",
                      context.purchased_upgrades + 1))
    if context.can_start_project:
        pool.append(_goal(f"project-{context.projects_started + 1}", "start-project",
                          context.projects_started + 1))
    for type_id, level in sorted(context.building_levels.items()):
        if type_id == "hq":
            continue
        pool.append(_goal(f"building-{type_id}-{level + 1}", "upgrade-building", level + 1,
                          building_type=type_id))
    for type_id in context.unbuilt_types:
        pool.append(_goal(f"build-{type_id}", "build-type", 1, building_type=type_id))
    if context.bulk_buy_unlocked:
        pool.append(_goal(f"bulk-{context.bulk_buys + 1}", "bulk-buy", context.bulk_buys + 1))
    if context.hq_target_level is not None:
        pool.append(_goal(f"hq-{context.hq_target_level}", "hq-level", context.hq_target_level))
    return pool


def goal_progress(goal: GoalState, context: GoalContext) -> GoalProgress:
    if goal.type == "own-count":
        current = context.counts.get(goal.business_id or "", 0)
    elif goal.type == "hire-manager":
        current = 1 if context.managers.get(goal.business_id or "", False) else 0
    elif goal.type == "buy-upgrade":
        current = context.purchased_upgrades
    elif goal.type == "start-project":
        current = context.projects_started
    elif goal.type == "upgrade-building":
        current = context.building_levels.get(goal.building_type or "", 0)
    elif goal.type == "build-type":
        current = 1 if goal.building_type in context.building_levels else 0
    elif goal.type == "bulk-buy":
        current = context.bulk_buys
    elif goal.type == "hq-level":
        current = context.hq_level
    else:
        current = 0
    return GoalProgress(current=current, target=goal.target)


def goal_label(goal: GoalState) -> str:
    plural = "" if goal.target == 1 else "s"
    if goal.type == "own-count":
        name = BUSINESS_BY_ID[goal.business_id].name if goal.business_id in BUSINESS_BY_ID else "Business"
        return f"Own {goal.target} {name}"
    if goal.type == "hire-manager":
        name = BUSINESS_BY_ID[goal.business_id].name if goal.business_id in BUSINESS_BY_ID else "Business"
        return f"Hire a manager for {name}"
    if goal.type == "buy-upgrade":
        return f"Buy {goal.target} upgrade{plural}"
    if goal.type == "start-project":
        return f"Start {goal.target} project{plural}"
    if goal.type == "upgrade-building":
        return f"Upgrade {goal.building_type} to level {goal.target}"
    if goal.type == "build-type":
        return f"Build a {goal.building_type}"
    if goal.type == "bulk-buy":
        return f"Make {goal.target} bulk purchase{plural}"
    return f"Reach HQ level {goal.target}"


def pick_goals(pool: List[GoalState], count: int, exclude_types: Set[str],
               exclude_ids: Set[str], seed: int) -> Tuple[List[GoalState], int]:
    """Choose up to `count` goals, one per new type first, then at random.

    Returns (goals, next_seed).
    """
    candidates = [goal for goal in pool if goal.id not in exclude_ids]
    picked: List[GoalState] = []
    if count <= 0 or not candidates:
        return picked, seed

    by_type: Dict[str, List[GoalState]] = {}
    for goal in candidates:
        by_type.setdefault(goal.type, []).append(goal)
    fresh_types = [t for t in by_type if t not in exclude_types]
    fresh_types, seed = shuffled(fresh_types, seed)
    for goal_type in fresh_types:
        if len(picked) >= count:
            break
        options = by_type[goal_type]
        index, seed = pick_index(seed, len(options))
        picked.append(options[index])

    leftover = [goal for goal in candidates if goal not in picked]
    leftover, seed = shuffled(leftover, seed)
    picked.extend(leftover[:count - len(picked)])
    return picked, seed


def _unlocked_business_ids(state: GameState) -> List[str]:
    return [d.id for d in BUSINESS_DEFS if is_business_unlocked(state, d.id)]


def _refill(state: GameState, context: GoalContext) -> bool:
    needed = GOAL_SLOTS - len(state.active_goals)
    if needed <= 0:
        return False
    pool = build_goal_pool(context, _unlocked_business_ids(state))
    picked, state.rng_seed = pick_goals(
        pool,
        needed,
        exclude_types={goal.type for goal in state.active_goals},
        exclude_ids={goal.id for goal in state.active_goals},
        seed=state.rng_seed,
    )
    state.active_goals.extend(picked)
    return bool(picked)


def process_goals(state: GameState, now: float) -> GameState:
    new = state.copy()
    context = goal_context(new)
    new.active_buffs = prune_expired_buffs(new.active_buffs, now)

    kept = []
    for goal in new.active_goals:
        if not goal_progress(goal, context).complete:
            kept.append(goal)
            continue
        reward = goal.reward
        new.active_buffs.append(TempBuff(
            id=f"goal-{goal.id}-{int(now)}",
            kind=reward.kind,
            mult=reward.mult,
            expires_at=now + reward.duration_ms,
            business_id=reward.business_id,
        ))
        if reward.kind == "project-time":
            for run in new.running_projects:
                remaining = run.ends_at - now
                if remaining > 0:
                    run.ends_at = now + remaining * reward.mult
        push_event(new, "goal", "Goal complete", now, detail=goal_label(goal))
        logger.info("goal %s complete; %s x%.2f buff granted", goal.id, reward.kind, reward.mult)
    new.active_goals = kept

    _refill(new, context)
    return new


def ensure_goals(state: GameState) -> GameState:
    """Drop already-met goals without reward and fill empty slots."""
    new = state.copy()
    context = goal_context(new)
    new.active_goals = [g for g in new.active_goals if not goal_progress(g, context).complete]
    new.active_goals = new.active_goals[:GOAL_SLOTS]
    _refill(new, context)
    return new
