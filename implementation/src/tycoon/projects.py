from __future__ import annotations

import logging

from tycoon.catalog import PROJECT_BY_ID, project_def
from tycoon.constants import PROJECT_SLOTS
from tycoon.events import push_event
from tycoon.progression import (
    hq_level,
    income_per_sec,
    is_project_unlocked,
    project_cost,
    project_duration_ms,
)
from tycoon.store import GameState, ProjectRun

logger = logging.getLogger(__name__)


def can_start_any_project(state: GameState) -> bool:
    return len(state.running_projects) < PROJECT_SLOTS


def start_project(state: GameState, project_id: str, now: float) -> GameState:
    pdef = PROJECT_BY_ID.get(project_id)
    if pdef is None or project_id in state.completed_projects:
        return state
    if not is_project_unlocked(pdef, state.total_earned, hq_level(state)):
        return state
    if any(run.id == project_id for run in state.running_projects):
        return state
    if not can_start_any_project(state):
        return state
    cost = project_cost(income_per_sec(state), pdef)
    if cost <= 0 or state.cash < cost:
        return state

    new = state.copy()
    new.debit(cost)
    new.projects_started += 1
    new.running_projects.append(ProjectRun(
        id=project_id,
        started_at=now,
        ends_at=now + project_duration_ms(state, pdef.duration_ms),
        cost=cost,
    ))
    push_event(new, "project", "Project started", now, detail=pdef.name)
    return new


def process_project_completions(state: GameState, now: float) -> GameState:
    if not state.running_projects:
        return state
    new = state.copy()
    running = []
    changed = False
    for run in new.running_projects:
        if run.id not in PROJECT_BY_ID or run.id in new.completed_projects:
            changed = True
            continue
        if run.ends_at <= now:
            new.completed_projects.append(run.id)
            push_event(new, "project", "Project complete", now, detail=project_def(run.id).name)
            logger.info("project %s completed", run.id)
            changed = True
        else:
            running.append(run)
    if not changed:
        return state
    new.running_projects = running
    return new
