import pytest

from tycoon.constants import THEFT_CHANCE
from tycoon.risk import is_cash_at_risk, process_risk_events, theft_threshold
from tycoon.rng import random_float

from conftest import NOW


def _seed_where(predicate):
    for seed in range(10_000):
        if predicate(random_float(seed)[0]):
            return seed
    raise AssertionError("no seed found")


def _exposed(state, seed):
    state.cash = 10_000.0
    state.safe_cash = 500.0
    state.rng_seed = seed
    state.last_theft_check_at = NOW - 60_000
    return state


def test_threshold_tracks_income(fresh, lemonade):
    assert theft_threshold(fresh) == 50.0
    lemonade.businesses["lemonade"].count = 1000
    assert theft_threshold(lemonade) > 50.0
    assert not is_cash_at_risk(fresh)


def test_check_runs_once_per_minute(fresh):
    fresh.last_theft_check_at = NOW - 59_999
    assert process_risk_events(fresh, NOW) is fresh


def test_theft_takes_a_slice_of_cash(fresh):
    state = _exposed(fresh, _seed_where(lambda roll: roll < THEFT_CHANCE))
    robbed = process_risk_events(state, NOW)
    assert 0.05 * 10_000 <= robbed.last_theft_loss <= 0.12 * 10_000
    assert robbed.cash == pytest.approx(10_000 - robbed.last_theft_loss)
    assert robbed.safe_cash == 500.0
    assert robbed.last_theft_check_at == NOW
    assert robbed.rng_seed != state.rng_seed
    assert robbed.events[0].kind == "theft"


def test_lucky_roll_keeps_cash(fresh):
    state = _exposed(fresh, _seed_where(lambda roll: roll >= THEFT_CHANCE))
    safe = process_risk_events(state, NOW)
    assert safe.cash == 10_000.0
    assert safe.last_theft_check_at == NOW


def test_theft_replays_from_seed(fresh):
    seed = _seed_where(lambda roll: roll < THEFT_CHANCE)
    a = process_risk_events(_exposed(fresh.copy(), seed), NOW)
    b = process_risk_events(_exposed(fresh.copy(), seed), NOW)
    assert a.cash == b.cash
    assert a.rng_seed == b.rng_seed


def test_cash_below_threshold_is_safe(fresh):
    fresh.cash = 40.0
    fresh.last_theft_check_at = NOW - 120_000
    state = process_risk_events(fresh, NOW)
    assert state.cash == 40.0
    assert state.last_theft_check_at == NOW
