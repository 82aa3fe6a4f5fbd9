import pytest

from tycoon.catalog import BUSINESS_BY_ID
from tycoon.constants import MAX_BUY_ITERATIONS
from tycoon.progression import (
    building_profit_mult,
    building_time_mult,
    bulk_cost,
    buy_info,
    derive_business,
    income_per_sec,
    manager_cost,
    max_affordable,
    milestone_mult,
    next_milestone,
    offline_cap_seconds,
)
from tycoon.store import TempBuff
from tycoon.types import BusinessDef

from conftest import NOW, with_business


def test_milestones_compound():
    assert milestone_mult(9) == 1.0
    assert milestone_mult(10) == 2.0
    assert milestone_mult(25) == 4.0
    assert milestone_mult(100) == 60.0
    assert next_milestone(10).count == 25
    assert next_milestone(100) is None


def test_ten_units_with_milestone_double_profit(fresh):
    bdef = BusinessDef("test", "Test", 10, 1.15, 1.0, 1000)
    derived = derive_business(fresh, bdef, count_override=10)
    assert derived.profit_per_cycle == pytest.approx(20.0)
    assert derived.cycle_time_ms == pytest.approx(1000.0)


def test_cycle_time_has_floor(fresh):
    bdef = BusinessDef("fast", "Fast", 1, 1.1, 1.0, 10)
    assert derive_business(fresh, bdef, count_override=1).cycle_time_ms == 250.0


def test_building_multipliers():
    assert building_profit_mult(1) == 1.0
    assert building_profit_mult(3) == pytest.approx(1.5)
    assert building_time_mult(1) == 1.0
    assert building_time_mult(3) == pytest.approx(0.9)
    assert building_time_mult(50) == pytest.approx(0.6)


def test_building_level_scales_business(fresh):
    state = with_business(fresh, "lemonade", count=1)
    state.buildings["lemonade-plot-2"].building_level = 3
    derived = derive_business(state, BUSINESS_BY_ID["lemonade"])
    assert derived.profit_per_cycle == pytest.approx(0.4 * 1.5)
    assert derived.cycle_time_ms == pytest.approx(2000 * 0.9)


def test_business_buff_applies_to_its_target_only(fresh):
    state = with_business(fresh, "lemonade", count=1)
    state.active_buffs = [TempBuff("b", "business-profit", 1.1, NOW + 1000, business_id="lemonade")]
    assert derive_business(state, BUSINESS_BY_ID["lemonade"]).profit_per_cycle == pytest.approx(0.44)
    assert derive_business(state, BUSINESS_BY_ID["newspaper"], count_override=1).profit_per_cycle \
        == pytest.approx(4.8)


def test_purchased_upgrade_multiplies_profit(fresh):
    state = with_business(fresh, "lemonade", count=10)
    base = derive_business(state, BUSINESS_BY_ID["lemonade"]).profit_per_cycle
    state.purchased_upgrades = ["lemonade-promo"]
    assert derive_business(state, BUSINESS_BY_ID["lemonade"]).profit_per_cycle == pytest.approx(base * 3)


def test_completed_projects_scale_profit_and_time(fresh):
    state = with_business(fresh, "lemonade", count=1)
    state.completed_projects = ["profit-boost-25", "cycle-optimization"]
    derived = derive_business(state, BUSINESS_BY_ID["lemonade"])
    assert derived.profit_per_cycle == pytest.approx(0.4 * 1.25)
    assert derived.cycle_time_ms == pytest.approx(1800.0)


def test_bulk_cost_is_geometric_sum():
    bdef = BUSINESS_BY_ID["lemonade"]
    assert bulk_cost(bdef, 0, 3) == pytest.approx(10 + 11.5 + 13.225)
    assert bulk_cost(bdef, 0, 0) == 0.0


def test_max_affordable_is_greedy():
    bdef = BUSINESS_BY_ID["lemonade"]
    info = max_affordable(bdef, 0, 22.0)
    assert info.quantity == 2
    assert info.cost == pytest.approx(21.5)
    assert max_affordable(bdef, 0, 5.0).quantity == 0


def test_max_affordable_caps_iterations():
    info = max_affordable(BUSINESS_BY_ID["lemonade"], 0, 1e300)
    assert info.quantity == MAX_BUY_ITERATIONS


def test_buy_info_follows_buy_mode(fresh):
    state = with_business(fresh, "lemonade", count=0)
    assert buy_info(state, "lemonade").quantity == 1
    state.buy_mode = "x10"
    assert buy_info(state, "lemonade").quantity == 10
    state.buy_mode = "max"
    state.cash = 22.0
    assert buy_info(state, "lemonade").quantity == 2


def test_manager_cost_uses_business_multiplier():
    assert manager_cost(BUSINESS_BY_ID["lemonade"]) == pytest.approx(120.0)


def test_income_per_sec(fresh):
    assert income_per_sec(fresh) == 0.0
    state = with_business(fresh, "lemonade", count=1)
    assert income_per_sec(state) == pytest.approx(0.2)


def test_offline_cap_grows_with_projects(fresh):
    assert offline_cap_seconds(fresh) == 2 * 60 * 60
    state = fresh.copy()
    state.completed_projects = ["offline-cap-2h", "offline-cap-4h"]
    assert offline_cap_seconds(state) == 8 * 60 * 60
