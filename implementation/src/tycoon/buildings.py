"""World grid, building placement, and the upgrade build queue."""
from __future__ import annotations

import logging
from typing import Dict, List, Optional

from tycoon.catalog import (
    BUILDING_BY_ID,
    building_def,
    plot_count_for_hq,
    plot_position,
    queue_slots_for_hq,
    unlocked_buy_modes_for_hq,
)
from tycoon.events import push_event
from tycoon.progression import building_upgrade_cost, building_upgrade_time_sec, hq_level
from tycoon.store import BuildingInstance, BuildQueueItem, GameState, Plot, WorldState

logger = logging.getLogger(__name__)


# ── world helpers ─────────────────────────────────────────────────────

def create_plots(count: int) -> List[Plot]:
    plots = []
    for i in range(count):
        x, y = plot_position(i)
        plots.append(Plot(id=f"plot-{i + 1}", x=x, y=y))
    return plots


def default_world() -> WorldState:
    plots = create_plots(plot_count_for_hq(1))
    if plots:
        plots[0].building_id = "hq"
    return WorldState(plots=plots, selected_plot_id=None)


def default_buildings() -> Dict[str, BuildingInstance]:
    return {"hq": BuildingInstance(id="hq", type_id="hq", plot_id="plot-1")}


def ensure_plots(world: WorldState, level: int) -> None:
    """Grow the grid in place to the plot count of `level`, keeping links."""
    required = plot_count_for_hq(level)
    if len(world.plots) >= required:
        return
    existing = {plot.id: plot for plot in world.plots}
    plots = create_plots(required)
    for plot in plots:
        if plot.id in existing:
            plot.building_id = existing[plot.id].building_id
    world.plots = plots


def sync_world(world: WorldState, buildings: Dict[str, BuildingInstance]) -> None:
    """Relink every plot from the building records; plot 1 defaults to the HQ."""
    by_id = {plot.id: plot for plot in world.plots}
    for plot in world.plots:
        plot.building_id = None
    for building in buildings.values():
        plot = by_id.get(building.plot_id)
        if plot is not None:
            plot.building_id = building.id
    if world.plots and world.plots[0].building_id is None:
        world.plots[0].building_id = "hq"


def revalidate_buy_mode(state: GameState) -> None:
    allowed = unlocked_buy_modes_for_hq(hq_level(state))
    if state.buy_mode not in allowed:
        state.buy_mode = allowed[-1] if allowed else "x1"


def complete_upgrade(state: GameState, building_id: str) -> Optional[BuildingInstance]:
    """Apply one finished level-up in place. Returns None for a vanished building."""
    building = state.buildings.get(building_id)
    if building is None:
        logger.warning("dropping queue item for missing building %s", building_id)
        return None
    building.building_level += 1
    building.upgrading_until = None
    if building.type_id == "hq":
        ensure_plots(state.world, building.building_level)
        sync_world(state.world, state.buildings)
        revalidate_buy_mode(state)
    logger.debug("%s reached level %d", building_id, building.building_level)
    return building


# ── actions ───────────────────────────────────────────────────────────

def select_plot(state: GameState, plot_id: Optional[str]) -> GameState:
    new = state.copy()
    new.world.selected_plot_id = plot_id
    return new


def place_building(state: GameState, plot_id: str, type_id: str, now: float) -> GameState:
    plot = next((p for p in state.world.plots if p.id == plot_id), None)
    if plot is None or plot.building_id:
        return state
    bdef = BUILDING_BY_ID.get(type_id)
    if bdef is None or type_id == "hq":
        return state
    if bdef.hq_level_required > hq_level(state):
        return state
    if any(b.type_id == type_id for b in state.buildings.values()):
        return state
    if state.cash < bdef.build_cost:
        return state

    new = state.copy()
    building_id = f"{type_id}-{plot_id}"
    new.debit(bdef.build_cost)
    new.buildings[building_id] = BuildingInstance(id=building_id, type_id=type_id, plot_id=plot_id)
    for entry in new.world.plots:
        if entry.id == plot_id:
            entry.building_id = building_id
    new.world.selected_plot_id = plot_id
    push_event(new, "build", "Asset placed", now, detail=bdef.name)
    return new


def start_building_upgrade(state: GameState, building_id: str, now: float) -> GameState:
    building = state.buildings.get(building_id)
    if building is None or building.upgrading_until is not None:
        return state
    if len(state.build_queue) >= queue_slots_for_hq(hq_level(state)):
        return state
    bdef = building_def(building.type_id)
    cost = building_upgrade_cost(bdef, building.building_level)
    if state.cash < cost:
        return state

    finish_at = now + building_upgrade_time_sec(building.building_level) * 1000
    new = state.copy()
    new.debit(cost)
    new.buildings[building_id].upgrading_until = finish_at
    new.build_queue.append(BuildQueueItem(building_id=building_id, finish_at=finish_at))
    push_event(new, "upgrade", "Upgrade started", now, detail=bdef.name)
    return new


def process_build_queue(state: GameState, now: float) -> GameState:
    if not state.build_queue:
        return state
    if min(item.finish_at for item in state.build_queue) > now:
        return state

    new = state.copy()
    remaining = []
    for item in sorted(new.build_queue, key=lambda item: item.finish_at):
        if item.finish_at <= now:
            complete_upgrade(new, item.building_id)
        else:
            remaining.append(item)
    new.build_queue = remaining
    return new
