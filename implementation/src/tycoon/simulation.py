"""Host-facing entry points: new game, resume, and the tick pipeline.

Tick pipeline (fixed order, each stage reads the previous stage's output):
1. process_business_cycles  (payouts, auto-run restarts, buff expiry)
2. process_build_queue      (finished building upgrades, HQ grid growth)
3. process_project_completions
4. process_upgrade_offers   (rotate the shop every 90 s)
5. process_risk_events      (theft check once a minute)
6. process_goals            (rewards, buff grants, slot refill)
7. process_war_tick         (targets, shield expiry, incoming raids)
8. mark_seen                (last_seen_at = now)

On resume the host calls `resume()` once, which runs the offline
reconciler before periodic ticking starts.
"""
from __future__ import annotations

import logging
from typing import Any

from tycoon.buildings import default_buildings, default_world, process_build_queue, revalidate_buy_mode
from tycoon.business import process_business_cycles
from tycoon.catalog import BUSINESS_DEFS, league_config, queue_slots_for_hq
from tycoon.config import DEFAULT_CONFIG, EngineConfig
from tycoon.goals import ensure_goals, process_goals
from tycoon.offers import ensure_upgrade_offers, process_upgrade_offers
from tycoon.offline import sync_offline_progress
from tycoon.progression import hq_level
from tycoon.projects import process_project_completions
from tycoon.risk import process_risk_events
from tycoon.rng import UINT32_MASK, stable_seed
from tycoon.save import normalize_state
from tycoon.store import BusinessState, GameState
from tycoon.war import default_war_state, process_war_tick, refresh_war_targets, schedule_raid_delay

logger = logging.getLogger(__name__)


def mark_seen(state: GameState, now: float) -> GameState:
    if state.last_seen_at == now:
        return state
    new = state.copy()
    new.last_seen_at = now
    return new


def tick(state: GameState, now: float, config: EngineConfig = DEFAULT_CONFIG) -> GameState:
    state = process_business_cycles(state, now, config)
    state = process_build_queue(state, now)
    state = process_project_completions(state, now)
    state = process_upgrade_offers(state, now)
    state = process_risk_events(state, now)
    state = process_goals(state, now)
    state = process_war_tick(state, now, config)
    return mark_seen(state, now)


def _sanitize(state: GameState, now: float) -> GameState:
    new = state.copy()
    revalidate_buy_mode(new)
    kept = []
    queued = set()
    for item in sorted(new.build_queue, key=lambda item: item.finish_at):
        if item.building_id in new.buildings and item.building_id not in queued:
            kept.append(item)
            queued.add(item.building_id)
    kept = kept[:queue_slots_for_hq(hq_level(new))]
    if len(kept) != len(new.build_queue):
        logger.warning("dropped %d invalid build queue items", len(new.build_queue) - len(kept))
    new.build_queue = kept
    finish_by_building = {item.building_id: item.finish_at for item in kept}
    for building_id, building in new.buildings.items():
        building.upgrading_until = finish_by_building.get(building_id)
    if new.war.next_raid_at <= 0:
        delay, new.war.rng_seed = schedule_raid_delay(new.war.rng_seed, league_config(new.war.league))
        new.war.next_raid_at = now + delay
    new.last_theft_check_at = now
    return new


def _settle(state: GameState, now: float, config: EngineConfig) -> GameState:
    if not state.war.targets:
        state = refresh_war_targets(state, now, force=True)
    state = sync_offline_progress(state, now, config)
    state = ensure_upgrade_offers(state, now)
    return ensure_goals(state)


def create_initial_state(now: float, seed: int,
                         config: EngineConfig = DEFAULT_CONFIG) -> GameState:
    """Fresh game. `seed` drives the war stream; the economy stream derives from it."""
    war_seed = int(seed) & UINT32_MASK
    state = GameState(
        businesses={d.id: BusinessState() for d in BUSINESS_DEFS},
        world=default_world(),
        buildings=default_buildings(),
        war=default_war_state(now, war_seed),
        last_theft_check_at=now,
        last_seen_at=now,
        rng_seed=stable_seed(war_seed, salt="economy"),
    )
    return _settle(state, now, config)


def resume(raw: Any, now: float, config: EngineConfig = DEFAULT_CONFIG) -> GameState:
    """Normalize a decoded save, reconcile the offline gap, and refill offers and goals."""
    state = normalize_state(raw, now)
    state = _sanitize(state, now)
    logger.info("resuming after %.1f s away", max(0.0, now - state.last_seen_at) / 1000)
    return _settle(state, now, config)
