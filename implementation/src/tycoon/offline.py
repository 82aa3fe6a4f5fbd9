"""Offline reconciliation.

Run once when the host resumes after a gap. The elapsed time is capped by
`offline_cap_seconds`, then every timer in the state is collapsed by that
amount in closed form:

- auto-run businesses: with `remaining` left on the cycle in flight,
  `payouts = 1 + floor((dt - remaining) / cycle)` and the next cycle ends
  `cycle - (dt - remaining) % cycle` after `now`. This equals running the
  live cycle processor in cycle-sized steps over the same `dt`.
- manual businesses: a cycle in flight pays at most once and goes idle.
- project runs and build queue items: finished ones complete in finish
  order, the rest keep their remaining time relative to `now`.
"""
from __future__ import annotations

import logging
import math

from tycoon.catalog import BUSINESS_DEFS, PROJECT_BY_ID
from tycoon.buildings import complete_upgrade
from tycoon.config import DEFAULT_CONFIG, EngineConfig
from tycoon.progression import (
    derive_business,
    has_auto_run_all,
    offline_cap_seconds,
    prune_expired_buffs,
)
from tycoon.store import GameState, finite

logger = logging.getLogger(__name__)


def sync_offline_progress(state: GameState, now: float,
                          config: EngineConfig = DEFAULT_CONFIG) -> GameState:
    last_seen_at = finite(state.last_seen_at, now)
    if now <= last_seen_at:
        if state.last_seen_at == now:
            return state
        new = state.copy()
        new.last_seen_at = now
        return new

    new = state.copy()
    new.active_buffs = prune_expired_buffs(new.active_buffs, now)
    auto_run_all = has_auto_run_all(new)
    dt = min(now - last_seen_at, offline_cap_seconds(new, config) * 1000)
    effective_now = last_seen_at + dt
    earned = 0.0

    for bdef in BUSINESS_DEFS:
        business = new.businesses[bdef.id]
        if business.count <= 0:
            business.stop()
            continue

        derived = derive_business(new, bdef)
        cycle_ms = derived.cycle_time_ms
        profit = derived.profit_per_cycle

        if business.manager_owned or auto_run_all:
            if business.running and business.ends_at is not None:
                remaining = max(0.0, business.ends_at - last_seen_at)
            else:
                remaining = cycle_ms
            business.running = True
            if dt < remaining:
                business.ends_at = now + (remaining - dt)
            else:
                after = dt - remaining
                payouts = 1 + math.floor(after / cycle_ms)
                earned += new.credit(payouts * profit)
                business.ends_at = now + (cycle_ms - after % cycle_ms)
            continue

        if business.running and business.ends_at is not None:
            remaining = max(0.0, business.ends_at - last_seen_at)
            if dt >= remaining:
                earned += new.credit(profit)
                business.stop()
            else:
                business.ends_at = now + (remaining - dt)
        else:
            business.stop()

    running = []
    for run in new.running_projects:
        if run.id not in PROJECT_BY_ID or run.id in new.completed_projects:
            continue
        if run.ends_at <= effective_now:
            new.completed_projects.append(run.id)
            continue
        run.ends_at = now + (run.ends_at - effective_now)
        running.append(run)
    new.running_projects = running

    remaining_items = []
    for item in sorted(new.build_queue, key=lambda item: item.finish_at):
        if item.finish_at <= effective_now:
            complete_upgrade(new, item.building_id)
            continue
        item.finish_at = now + (item.finish_at - effective_now)
        building = new.buildings.get(item.building_id)
        if building is not None:
            building.upgrading_until = item.finish_at
        remaining_items.append(item)
    new.build_queue = remaining_items

    new.last_seen_at = now
    logger.debug("offline sync over %.0f ms (capped from %.0f) earned %.2f",
                 dt, now - last_seen_at, earned)
    return new
