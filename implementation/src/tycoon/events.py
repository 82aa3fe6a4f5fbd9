"""Bounded feed of player-facing notifications (newest first)."""
from __future__ import annotations

from typing import Optional

from tycoon.constants import UI_EVENT_LIMIT, UI_EVENT_MIN_GAP_MS
from tycoon.store import GameState, UiEvent


def push_event(state: GameState, kind: str, title: str, now: float,
               detail: Optional[str] = None, amount: Optional[float] = None) -> UiEvent:
    """Prepend an event to `state.events` in place. Call on a copied state only."""
    state.event_seq += 1
    event = UiEvent(
        id=f"{kind}-{int(now)}-{state.event_seq}",
        kind=kind,
        title=title,
        at=now,
        detail=detail,
        amount=amount,
    )
    state.events = [event] + state.events[:UI_EVENT_LIMIT - 1]
    state.last_event_at = now
    return event


def can_toast(state: GameState, now: float) -> bool:
    return now - state.last_event_at > UI_EVENT_MIN_GAP_MS
