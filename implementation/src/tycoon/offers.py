"""Upgrade shop: the rotating offer set and purchases."""
from __future__ import annotations

import logging
from typing import List

from tycoon.constants import UPGRADE_OFFER_COUNT, UPGRADE_OFFER_REFRESH_MS
from tycoon.events import push_event
from tycoon.progression import business_counts, income_per_sec
from tycoon.rng import shuffled
from tycoon.store import GameState
from tycoon.types import UpgradeDef
from tycoon.upgrades import UpgradeManager, default_manager

logger = logging.getLogger(__name__)


def available_upgrades(state: GameState) -> List[UpgradeDef]:
    return default_manager().available(
        business_counts(state), state.total_earned, state.purchased_upgrades
    )


def upgrade_cost(state: GameState, upgrade: UpgradeDef) -> float:
    return UpgradeManager.get_cost(upgrade, income_per_sec(state))


def _sample(state: GameState, available: List[UpgradeDef], now: float) -> None:
    picked, state.rng_seed = shuffled([u.id for u in available], state.rng_seed)
    state.upgrade_offers = picked[:UPGRADE_OFFER_COUNT]
    state.last_offer_refresh_at = now


def ensure_upgrade_offers(state: GameState, now: float) -> GameState:
    """Resample only when an offer went stale or slots can be filled."""
    available = available_upgrades(state)
    ids = {u.id for u in available}
    kept = [oid for oid in state.upgrade_offers if oid in ids]
    if len(kept) == min(UPGRADE_OFFER_COUNT, len(available)) and len(kept) == len(state.upgrade_offers):
        return state
    new = state.copy()
    _sample(new, available, now)
    return new


def process_upgrade_offers(state: GameState, now: float) -> GameState:
    available = available_upgrades(state)
    ids = {u.id for u in available}
    kept = [oid for oid in state.upgrade_offers if oid in ids]
    needs_refresh = (
        now - state.last_offer_refresh_at >= UPGRADE_OFFER_REFRESH_MS
        or len(kept) < min(UPGRADE_OFFER_COUNT, len(available))
    )
    if not needs_refresh and len(kept) == len(state.upgrade_offers):
        return state

    new = state.copy()
    if needs_refresh:
        _sample(new, available, now)
    else:
        new.upgrade_offers = kept
    return new


def buy_upgrade(state: GameState, upgrade_id: str, now: float) -> GameState:
    manager = default_manager()
    upgrade = manager.get(upgrade_id)
    if upgrade is None or upgrade_id in state.purchased_upgrades:
        return state
    if not manager.is_unlocked(upgrade, business_counts(state), state.total_earned):
        return state
    cost = upgrade_cost(state, upgrade)
    if cost <= 0 or state.cash < cost:
        return state

    new = state.copy()
    new.debit(cost)
    new.purchased_upgrades.append(upgrade_id)
    push_event(new, "upgrade", "Upgrade purchased", now, detail=upgrade.name)
    logger.debug("bought upgrade %s for %.2f", upgrade_id, cost)
    return ensure_upgrade_offers(new, now)
