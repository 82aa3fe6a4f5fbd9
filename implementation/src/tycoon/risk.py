from __future__ import annotations

import logging

from tycoon.constants import (
    THEFT_BASE_THRESHOLD,
    THEFT_CHANCE,
    THEFT_CHECK_MS,
    THEFT_MAX_PCT,
    THEFT_MIN_PCT,
    THEFT_THRESHOLD_SECONDS,
)
from tycoon.events import push_event
from tycoon.progression import income_per_sec
from tycoon.rng import rand_range, random_float
from tycoon.store import GameState

logger = logging.getLogger(__name__)


def theft_threshold(state: GameState) -> float:
    return max(THEFT_BASE_THRESHOLD, income_per_sec(state) * THEFT_THRESHOLD_SECONDS)


def is_cash_at_risk(state: GameState) -> bool:
    return state.cash > theft_threshold(state)


def process_risk_events(state: GameState, now: float) -> GameState:
    """Once per THEFT_CHECK_MS, maybe lose a slice of on-hand cash.

    Only cash above the threshold is exposed; the safe is never touched.
    Draws come from the economy stream `state.rng_seed`.
    """
    if now - state.last_theft_check_at < THEFT_CHECK_MS:
        return state

    new = state.copy()
    new.last_theft_check_at = now
    if not is_cash_at_risk(new):
        return new

    roll, new.rng_seed = random_float(new.rng_seed)
    if roll >= THEFT_CHANCE:
        return new
    pct, new.rng_seed = rand_range(new.rng_seed, THEFT_MIN_PCT, THEFT_MAX_PCT)
    loss = new.debit(new.cash * pct)
    new.last_theft_loss = loss
    push_event(new, "theft", "Cash stolen", now, amount=loss)
    logger.info("theft took %.2f (%.1f%% of cash)", loss, pct * 100)
    return new
