from __future__ import annotations

import pytest

from tycoon.buildings import sync_world
from tycoon.simulation import create_initial_state
from tycoon.store import BuildingInstance, GameState

NOW = 1_700_000_000_000.0
SEED = 12345


def with_business(state: GameState, business_id: str = "lemonade", count: int = 1,
                  manager: bool = False, plot_id: str = "plot-2") -> GameState:
    """Copy of `state` with the business building placed and `count` units owned."""
    new = state.copy()
    building_id = f"{business_id}-{plot_id}"
    new.buildings[building_id] = BuildingInstance(id=building_id, type_id=business_id, plot_id=plot_id)
    sync_world(new.world, new.buildings)
    business = new.businesses[business_id]
    business.count = count
    business.manager_owned = manager
    return new


@pytest.fixture
def now() -> float:
    return NOW


@pytest.fixture
def fresh() -> GameState:
    return create_initial_state(NOW, SEED)


@pytest.fixture
def lemonade(fresh: GameState) -> GameState:
    state = with_business(fresh, "lemonade", count=1)
    state.active_goals = []
    state.active_buffs = []
    return state
