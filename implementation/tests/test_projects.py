import pytest

from tycoon.progression import available_projects, offline_cap_seconds
from tycoon.projects import process_project_completions, start_project
from tycoon.store import ProjectRun, TempBuff

from conftest import NOW


def _funded(state):
    state.cash = 1000.0
    state.total_earned = 1000.0
    return state


def test_start_project_prices_from_income(lemonade):
    state = start_project(_funded(lemonade), "offline-cap-2h", NOW)
    assert state.cash == pytest.approx(1000.0 - 0.2 * 600)
    assert state.projects_started == 1
    run = state.running_projects[0]
    assert run.ends_at == pytest.approx(NOW + 10 * 60 * 1000)
    assert run.cost == pytest.approx(120.0)


def test_start_project_rejections(lemonade, fresh):
    funded = _funded(lemonade)
    assert start_project(funded, "no-such-project", NOW) is funded
    assert start_project(funded, "auto-dispatch", NOW) is funded
    assert start_project(_funded(fresh), "offline-cap-2h", NOW) is fresh

    running = start_project(funded, "offline-cap-2h", NOW)
    assert start_project(running, "profit-boost-25", NOW) is running


def test_project_time_buff_shortens_duration(lemonade):
    state = _funded(lemonade)
    state.active_buffs = [TempBuff("g", "project-time", 0.9, NOW + 60_000)]
    state = start_project(state, "offline-cap-2h", NOW)
    assert state.running_projects[0].ends_at == pytest.approx(NOW + 0.9 * 600_000)


def test_completion_applies_effect(lemonade):
    state = start_project(_funded(lemonade), "offline-cap-2h", NOW)
    assert process_project_completions(state, NOW + 1000) is state
    done = process_project_completions(state, NOW + 600_000)
    assert done.completed_projects == ["offline-cap-2h"]
    assert done.running_projects == []
    assert offline_cap_seconds(done) == 4 * 60 * 60
    assert "offline-cap-2h" not in [p.id for p in available_projects(done)]


def test_unknown_runs_are_dropped(lemonade):
    lemonade.running_projects = [ProjectRun("ghost", NOW, NOW + 5, 0.0)]
    assert process_project_completions(lemonade, NOW).running_projects == []
