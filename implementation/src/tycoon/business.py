"""Business actions and the per-tick cycle processor.

Every function takes a `GameState` and returns the next one. A request
that cannot be honoured (locked business, not enough cash, already
running) returns the input state object untouched.
"""
from __future__ import annotations

import logging
import math

from tycoon.catalog import BUSINESS_BY_ID, BUSINESS_DEFS
from tycoon.config import DEFAULT_CONFIG, EngineConfig
from tycoon.constants import MIN_CYCLE_MS, TAP_BONUS_AMOUNT, TAP_BONUS_EVERY, TAP_PAY
from tycoon.events import can_toast, push_event
from tycoon.progression import (
    buy_info,
    derive_business,
    has_auto_run_all,
    is_business_unlocked,
    manager_cost,
    prune_expired_buffs,
    unlocked_buy_modes,
)
from tycoon.store import GameState, finite

logger = logging.getLogger(__name__)


def tap_work(state: GameState, now: float) -> GameState:
    new = state.copy()
    new.work_taps += 1
    bonus = TAP_BONUS_AMOUNT if new.work_taps % TAP_BONUS_EVERY == 0 else 0.0
    new.credit(TAP_PAY + bonus)
    return new


def set_buy_mode(state: GameState, mode: str) -> GameState:
    if mode not in unlocked_buy_modes(state) or mode == state.buy_mode:
        return state
    new = state.copy()
    new.buy_mode = mode
    return new


def buy_business(state: GameState, business_id: str, now: float) -> GameState:
    if business_id not in BUSINESS_BY_ID or not is_business_unlocked(state, business_id):
        return state
    info = buy_info(state, business_id)
    if info.quantity <= 0 or state.cash < info.cost:
        return state

    bdef = BUSINESS_BY_ID[business_id]
    new = state.copy()
    business = new.businesses[business_id]
    business.count += info.quantity
    new.debit(info.cost)
    if info.quantity >= 10:
        new.bulk_buys += 1

    if (business.manager_owned or has_auto_run_all(new)) and not business.running:
        business.running = True
        business.ends_at = now + derive_business(new, bdef).cycle_time_ms

    push_event(new, "buy", "Units acquired", now, detail=f"{info.quantity} x {bdef.name}")
    logger.debug("bought %d x %s for %.2f", info.quantity, business_id, info.cost)
    return new


def run_business(state: GameState, business_id: str, now: float) -> GameState:
    if business_id not in BUSINESS_BY_ID or not is_business_unlocked(state, business_id):
        return state
    business = state.businesses[business_id]
    if business.count <= 0 or business.running:
        return state
    new = state.copy()
    target = new.businesses[business_id]
    target.running = True
    target.ends_at = now + derive_business(new, BUSINESS_BY_ID[business_id]).cycle_time_ms
    return new


def run_all_businesses(state: GameState, now: float) -> GameState:
    new = state.copy()
    changed = False
    for bdef in BUSINESS_DEFS:
        if not is_business_unlocked(state, bdef.id):
            continue
        business = new.businesses[bdef.id]
        if business.running or business.count <= 0:
            continue
        business.running = True
        business.ends_at = now + derive_business(state, bdef).cycle_time_ms
        changed = True
    return new if changed else state


def hire_manager(state: GameState, business_id: str, now: float) -> GameState:
    if business_id not in BUSINESS_BY_ID or not is_business_unlocked(state, business_id):
        return state
    bdef = BUSINESS_BY_ID[business_id]
    if state.businesses[business_id].manager_owned:
        return state
    cost = manager_cost(bdef)
    if state.cash < cost:
        return state

    new = state.copy()
    new.debit(cost)
    business = new.businesses[business_id]
    business.manager_owned = True
    if business.count > 0 and not business.running:
        business.running = True
        business.ends_at = now + derive_business(state, bdef).cycle_time_ms
    push_event(new, "manager", "Handler assigned", now, detail=bdef.name)
    return new


def deposit_safe(state: GameState, amount: float) -> GameState:
    value = min(finite(amount), state.cash)
    if value <= 0:
        return state
    new = state.copy()
    new.cash -= value
    new.safe_cash += value
    return new


def withdraw_safe(state: GameState, amount: float) -> GameState:
    value = min(finite(amount), state.safe_cash)
    if value <= 0:
        return state
    new = state.copy()
    new.safe_cash -= value
    new.cash += value
    return new


def process_business_cycles(state: GameState, now: float,
                            config: EngineConfig = DEFAULT_CONFIG) -> GameState:
    """Advance every business to `now`.

    Auto-run businesses (manager owned, or the auto-run-all project done)
    loop one payout per elapsed cycle, at most `config.max_cycle_catchup`
    times; past the cap the cycle is re-anchored at `now` and the skipped
    cycles are not paid. Manual businesses pay a finished cycle once and
    go idle.
    """
    new = state.copy()
    new.active_buffs = prune_expired_buffs(new.active_buffs, now)
    new.cash = finite(new.cash)
    new.total_earned = finite(new.total_earned, new.cash)
    auto_run_all = has_auto_run_all(new)
    earned_this_tick = 0.0

    for bdef in BUSINESS_DEFS:
        business = new.businesses[bdef.id]
        if business.count <= 0:
            business.count = 0
            business.stop()
            continue

        derived = derive_business(new, bdef)
        cycle_ms = finite(derived.cycle_time_ms, MIN_CYCLE_MS)
        profit = finite(derived.profit_per_cycle)
        auto_run = business.manager_owned or auto_run_all

        ends_at = business.ends_at
        if ends_at is not None and not math.isfinite(ends_at):
            ends_at = None

        if auto_run and (not business.running or ends_at is None):
            business.running = True
            ends_at = now + cycle_ms
        elif not auto_run and (not business.running or ends_at is None):
            business.running = False
            ends_at = None

        if business.running and ends_at is not None and ends_at <= now:
            if auto_run:
                loops = 0
                while ends_at <= now and loops < config.max_cycle_catchup:
                    earned_this_tick += new.credit(profit)
                    ends_at += cycle_ms
                    loops += 1
                if ends_at <= now:
                    logger.warning("%s hit the catch-up cap after %d cycles; re-anchoring",
                                   bdef.id, loops)
                    ends_at = now + cycle_ms
            else:
                earned_this_tick += new.credit(profit)
                business.running = False
                ends_at = None

        business.ends_at = ends_at

    if earned_this_tick > 0 and can_toast(state, now):
        push_event(new, "cash", "Cycle payout", now, detail="Liquidity captured",
                   amount=earned_this_tick)
    return new
