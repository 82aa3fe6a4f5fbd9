"""Game state records.

The engine threads one `GameState` value through every entry point. Entry
points call `state.copy()` first and mutate only the copy, so a snapshot
handed to the engine is never changed underneath its owner.
"""
from __future__ import annotations

import copy
import math
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from tycoon.catalog import league_for_trophies


def finite(value: object, fallback: float = 0.0) -> float:
    """`value` as a float when it is a finite number, else `fallback`."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return fallback
    if not math.isfinite(value):
        return fallback
    return float(value)


@dataclass
class BusinessState:
    count: int = 0
    manager_owned: bool = False
    running: bool = False
    ends_at: Optional[float] = None

    def stop(self) -> None:
        self.running = False
        self.ends_at = None


@dataclass
class Plot:
    id: str
    x: int
    y: int
    building_id: Optional[str] = None


@dataclass
class WorldState:
    plots: List[Plot] = field(default_factory=list)
    selected_plot_id: Optional[str] = None


@dataclass
class BuildingInstance:
    id: str
    type_id: str
    plot_id: str
    building_level: int = 1
    upgrading_until: Optional[float] = None


@dataclass
class BuildQueueItem:
    building_id: str
    finish_at: float


@dataclass
class ProjectRun:
    id: str
    started_at: float
    ends_at: float
    cost: float


@dataclass
class TempBuff:
    id: str
    kind: str  # "business-profit" | "project-time"
    mult: float
    expires_at: float
    business_id: Optional[str] = None


@dataclass
class GoalReward:
    kind: str  # "business-profit" | "project-time"
    mult: float
    duration_ms: float
    business_id: Optional[str] = None


@dataclass
class GoalState:
    id: str
    type: str
    target: int
    reward: GoalReward
    business_id: Optional[str] = None
    building_type: Optional[str] = None


@dataclass
class UiEvent:
    id: str
    kind: str
    title: str
    at: float
    detail: Optional[str] = None
    amount: Optional[float] = None


@dataclass
class WarTarget:
    id: str
    name: str
    defense: float
    loot_cap: float
    trophy_win: int
    trophy_loss: int
    difficulty: str
    refresh_at: float


@dataclass
class IncomingRaid:
    ends_at: float
    attacker_offense: float
    chance: float
    roll: float
    vault_protect_pct: float
    loot_cap: float
    steal_pct: float


@dataclass
class BattleReport:
    kind: str  # "attack" | "defense"
    offense: float
    defense: float
    p_win: float
    roll: float
    income_per_sec: float
    loot: float
    loot_cap: float
    target_loot: Optional[float] = None
    loot_mult: Optional[float] = None
    vault_protect_pct: Optional[float] = None
    lootable_cash: Optional[float] = None
    steal_pct: Optional[float] = None
    loss_mult: Optional[float] = None


@dataclass
class RaidEvent:
    id: str
    kind: str
    result: str  # "win" | "loss"
    loot: float
    trophies_delta: int
    at: float
    report: BattleReport
    target_name: Optional[str] = None


@dataclass
class RaidReport:
    result: str
    loot_lost: float
    protected_amount: float
    trophies_delta: int
    at: float


@dataclass
class WarState:
    trophies: int = 0
    shield_until: Optional[float] = None
    attack_cooldown_until: Optional[float] = None
    heat_until: Optional[float] = None
    targets: List[WarTarget] = field(default_factory=list)
    last_targets_at: float = 0.0
    incoming_raid: Optional[IncomingRaid] = None
    raid_log: List[RaidEvent] = field(default_factory=list)
    rng_seed: int = 0
    next_raid_at: float = 0.0
    war_upgrade_levels: Dict[str, int] = field(default_factory=dict)
    raid_report: Optional[RaidReport] = None
    unread_raid_report: bool = False

    @property
    def league(self) -> str:
        return league_for_trophies(self.trophies)


@dataclass
class GameState:
    cash: float = 0.0
    safe_cash: float = 0.0
    total_earned: float = 0.0
    work_taps: int = 0
    bulk_buys: int = 0
    buy_mode: str = "x1"
    businesses: Dict[str, BusinessState] = field(default_factory=dict)
    world: WorldState = field(default_factory=WorldState)
    buildings: Dict[str, BuildingInstance] = field(default_factory=dict)
    build_queue: List[BuildQueueItem] = field(default_factory=list)
    war: WarState = field(default_factory=WarState)
    purchased_upgrades: List[str] = field(default_factory=list)
    upgrade_offers: List[str] = field(default_factory=list)
    last_offer_refresh_at: float = 0.0
    last_theft_check_at: float = 0.0
    last_theft_loss: float = 0.0
    active_goals: List[GoalState] = field(default_factory=list)
    active_buffs: List[TempBuff] = field(default_factory=list)
    events: List[UiEvent] = field(default_factory=list)
    last_event_at: float = 0.0
    event_seq: int = 0
    projects_started: int = 0
    completed_projects: List[str] = field(default_factory=list)
    running_projects: List[ProjectRun] = field(default_factory=list)
    last_seen_at: float = 0.0
    rng_seed: int = 0

    def copy(self) -> "GameState":
        return copy.deepcopy(self)

    def credit(self, amount: float) -> float:
        """Add earnings to cash and total_earned. Returns the amount applied."""
        amount = finite(amount)
        if amount <= 0.0:
            return 0.0
        self.cash = finite(self.cash) + amount
        self.total_earned = finite(self.total_earned) + amount
        return amount

    def debit(self, amount: float) -> float:
        """Remove up to `amount` from cash (never below zero). Returns the amount taken."""
        amount = finite(amount)
        if amount <= 0.0:
            return 0.0
        cash = finite(self.cash)
        taken = min(cash, amount)
        self.cash = cash - taken
        return taken
