import pytest

from tycoon.buildings import (
    default_world,
    ensure_plots,
    place_building,
    process_build_queue,
    select_plot,
    start_building_upgrade,
)

from conftest import NOW


def test_default_world_puts_hq_on_first_plot():
    world = default_world()
    assert len(world.plots) == 6
    assert world.plots[0].building_id == "hq"
    assert (world.plots[1].x, world.plots[1].y) == (1, 0)


def test_ensure_plots_keeps_links():
    world = default_world()
    world.plots[3].building_id = "lemonade-plot-4"
    ensure_plots(world, 2)
    assert len(world.plots) == 10
    assert world.plots[3].building_id == "lemonade-plot-4"
    assert world.plots[6].y == 1


def test_place_building_rules(fresh):
    fresh.cash = 5000.0
    assert place_building(fresh, "plot-1", "lemonade", NOW) is fresh
    assert place_building(fresh, "plot-2", "hq", NOW) is fresh
    assert place_building(fresh, "plot-2", "carwash", NOW) is fresh
    assert place_building(fresh, "plot-99", "lemonade", NOW) is fresh

    state = place_building(fresh, "plot-2", "lemonade", NOW)
    assert state.buildings["lemonade-plot-2"].plot_id == "plot-2"
    assert state.world.plots[1].building_id == "lemonade-plot-2"
    assert state.world.selected_plot_id == "plot-2"
    assert place_building(state, "plot-3", "lemonade", NOW) is state


def test_select_plot(fresh):
    assert select_plot(fresh, "plot-4").world.selected_plot_id == "plot-4"
    assert fresh.world.selected_plot_id is None


def test_hq_upgrade_expands_grid_and_buy_modes(fresh):
    fresh.cash = 1000.0
    state = start_building_upgrade(fresh, "hq", NOW)
    assert state.cash == pytest.approx(800.0)
    assert state.buildings["hq"].upgrading_until == pytest.approx(NOW + 10_000)
    assert len(state.build_queue) == 1
    assert start_building_upgrade(state, "hq", NOW) is state

    assert process_build_queue(state, NOW + 9_999) is state
    done = process_build_queue(state, NOW + 10_000)
    assert done.buildings["hq"].building_level == 2
    assert done.buildings["hq"].upgrading_until is None
    assert done.build_queue == []
    assert len(done.world.plots) == 10
    assert done.world.plots[0].building_id == "hq"


def test_queue_slots_are_limited(fresh):
    fresh.cash = 5000.0
    state = place_building(fresh, "plot-2", "lemonade", NOW)
    state = start_building_upgrade(state, "hq", NOW)
    assert start_building_upgrade(state, "lemonade-plot-2", NOW) is state


def test_building_upgrade_cost_grows(fresh):
    fresh.cash = 5000.0
    state = place_building(fresh, "plot-2", "lemonade", NOW)
    state.buildings["lemonade-plot-2"].building_level = 2
    before = state.cash
    state = start_building_upgrade(state, "lemonade-plot-2", NOW)
    assert before - state.cash == pytest.approx(15 * 1.8)
    assert state.build_queue[0].finish_at == pytest.approx(NOW + 16_000)
