import pytest

from tycoon.catalog import BUSINESS_BY_ID
from tycoon.goals import build_goal_pool, ensure_goals, goal_context, goal_progress, pick_goals, process_goals
from tycoon.progression import derive_business
from tycoon.store import GoalReward, GoalState, ProjectRun, TempBuff

from conftest import NOW, with_business


def _pool(state):
    return build_goal_pool(goal_context(state), ["lemonade"])


def test_pool_covers_goal_kinds(lemonade):
    ids = {goal.id for goal in _pool(lemonade)}
    assert {"own-lemonade-10", "own-lemonade-100", "manager-lemonade", "upgrade-1",
            "building-lemonade-2", "build-newspaper", "hq-2"} <= ids
    assert not any(i.startswith("bulk-") for i in ids)
    assert not any(i.startswith("project-") for i in ids)


def test_pick_goals_prefers_distinct_types(lemonade):
    picked, seed = pick_goals(_pool(lemonade), 3, set(), set(), 77)
    assert len(picked) == 3
    assert len({goal.type for goal in picked}) == 3
    again, seed_again = pick_goals(_pool(lemonade), 3, set(), set(), 77)
    assert [g.id for g in again] == [g.id for g in picked]
    assert seed_again == seed


def test_pick_goals_skips_excluded_ids(lemonade):
    pool = _pool(lemonade)
    exclude = {goal.id for goal in pool[:-1]}
    picked, _ = pick_goals(pool, 3, set(), exclude, 1)
    assert [g.id for g in picked] == [pool[-1].id]


def test_ensure_goals_fills_slots(fresh):
    state = ensure_goals(fresh.copy())
    assert len(state.active_goals) == 3
    assert len({g.id for g in state.active_goals}) == 3


def test_business_goal_grants_profit_buff(fresh):
    state = with_business(fresh, "lemonade", count=10)
    state.active_buffs = []
    state.active_goals = [GoalState(
        id="own-lemonade-10", type="own-count", target=10,
        reward=GoalReward("business-profit", 1.1, 300_000, business_id="lemonade"),
        business_id="lemonade",
    )]
    base = derive_business(state, BUSINESS_BY_ID["lemonade"]).profit_per_cycle
    done = process_goals(state, NOW)
    assert "own-lemonade-10" not in [g.id for g in done.active_goals]
    buff = done.active_buffs[0]
    assert buff.id == f"goal-own-lemonade-10-{int(NOW)}"
    assert buff.expires_at == NOW + 300_000
    assert derive_business(done, BUSINESS_BY_ID["lemonade"]).profit_per_cycle == pytest.approx(base * 1.1)
    assert done.events[0].kind == "goal"


def test_project_time_goal_scales_running_projects(lemonade):
    lemonade.projects_started = 1
    lemonade.running_projects = [ProjectRun("offline-cap-2h", NOW - 1000, NOW + 100_000, 1.0)]
    lemonade.active_goals = [GoalState(
        id="project-1", type="start-project", target=1,
        reward=GoalReward("project-time", 0.9, 300_000),
    )]
    done = process_goals(lemonade, NOW)
    assert done.running_projects[0].ends_at == pytest.approx(NOW + 90_000)
    assert any(b.kind == "project-time" for b in done.active_buffs)
    assert "project-1" not in [g.id for g in done.active_goals]


def test_unmet_goal_stays(lemonade):
    goal = GoalState(
        id="own-lemonade-25", type="own-count", target=25,
        reward=GoalReward("business-profit", 1.1, 300_000, business_id="lemonade"),
        business_id="lemonade",
    )
    lemonade.active_goals = [goal]
    assert goal_progress(goal, goal_context(lemonade)).current == 1
    done = process_goals(lemonade, NOW)
    assert done.active_goals[0].id == "own-lemonade-25"
    assert done.active_buffs == []


def test_expired_buffs_are_pruned(lemonade):
    lemonade.active_buffs = [TempBuff("old", "project-time", 0.9, NOW - 1)]
    assert process_goals(lemonade, NOW).active_buffs == []
