import pytest

from tycoon.business import process_business_cycles
from tycoon.offline import sync_offline_progress
from tycoon.store import BuildQueueItem, ProjectRun

from conftest import NOW


def _auto(state, ends_at):
    business = state.businesses["lemonade"]
    business.manager_owned = True
    business.running = True
    business.ends_at = ends_at
    state.last_seen_at = NOW
    return state


@pytest.mark.parametrize("elapsed", [300, 500, 2500, 10_500, 61_234])
def test_offline_matches_live_loop(lemonade, elapsed):
    state = _auto(lemonade, NOW + 500)
    offline = sync_offline_progress(state, NOW + elapsed)
    live = process_business_cycles(state, NOW + elapsed)
    assert offline.cash == pytest.approx(live.cash)
    assert offline.businesses["lemonade"].ends_at == pytest.approx(live.businesses["lemonade"].ends_at)
    assert offline.businesses["lemonade"].ends_at > NOW + elapsed


def test_idle_business_pays_once(lemonade):
    business = lemonade.businesses["lemonade"]
    business.running = True
    business.ends_at = NOW + 2000
    lemonade.last_seen_at = NOW
    state = sync_offline_progress(lemonade, NOW + 6000)
    assert state.cash == pytest.approx(0.4)
    assert not state.businesses["lemonade"].running
    assert state.businesses["lemonade"].ends_at is None


def test_unfinished_manual_cycle_keeps_remaining_time(lemonade):
    business = lemonade.businesses["lemonade"]
    business.running = True
    business.ends_at = NOW + 2000
    lemonade.last_seen_at = NOW
    state = sync_offline_progress(lemonade, NOW + 500)
    assert state.cash == 0.0
    assert state.businesses["lemonade"].ends_at == pytest.approx(NOW + 2000)


def test_elapsed_time_is_capped(lemonade):
    state = _auto(lemonade, NOW + 2000)
    state = sync_offline_progress(state, NOW + 10 * 60 * 60 * 1000)
    assert state.cash == pytest.approx(3600 * 0.4)


def test_sync_is_idempotent(lemonade):
    state = _auto(lemonade, NOW + 500)
    once = sync_offline_progress(state, NOW + 7000)
    assert sync_offline_progress(once, NOW + 7000) is once
    assert once.last_seen_at == NOW + 7000


def test_clock_going_backwards_pays_nothing(lemonade):
    state = _auto(lemonade, NOW + 500)
    back = sync_offline_progress(state, NOW - 5000)
    assert back.cash == state.cash
    assert back.last_seen_at == NOW - 5000


def test_projects_and_build_queue_advance(lemonade):
    lemonade.last_seen_at = NOW
    lemonade.running_projects = [
        ProjectRun("offline-cap-2h", NOW - 1000, NOW + 1000, 10.0),
        ProjectRun("profit-boost-25", NOW, NOW + 60_000, 10.0),
    ]
    lemonade.buildings["hq"].upgrading_until = NOW + 5000
    lemonade.build_queue = [BuildQueueItem("hq", NOW + 5000)]
    state = sync_offline_progress(lemonade, NOW + 10_000)
    assert state.completed_projects == ["offline-cap-2h"]
    assert [run.id for run in state.running_projects] == ["profit-boost-25"]
    assert state.running_projects[0].ends_at == pytest.approx(NOW + 60_000)
    assert state.buildings["hq"].building_level == 2
    assert state.buildings["hq"].upgrading_until is None
    assert state.build_queue == []
    assert len(state.world.plots) == 10
