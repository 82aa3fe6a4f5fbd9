"""Raid war: rival targets, attack resolution, and incoming raids.

Every random draw here consumes `state.war.rng_seed` and writes the
advanced seed back, so a saved war state replays identically.

Attack and defense share one win model:

    p_win = clamp(sigmoid((offense - defense) / scale), 0.05, 0.95)

Incoming raids are scheduled ahead of time. When a raid fires, its
outcome roll is drawn immediately and stored on `IncomingRaid`; resolving
it at `ends_at` only reads that record.
"""
from __future__ import annotations

import logging
import math
from typing import List, Optional, Tuple

from tycoon.catalog import (
    BUSINESS_DEFS,
    FALLBACK_TARGET_NAME,
    LEAGUE_RAID_BONUS,
    TARGET_TIERS,
    WAR_TARGET_NAMES,
    league_config,
)
from tycoon.config import DEFAULT_CONFIG, EngineConfig
from tycoon.constants import (
    SAFE_DEFENSE_BONUS,
    WAR_ATTACK_COOLDOWN_MS,
    WAR_DEFENSE_LOSS_TROPHIES,
    WAR_DEFENSE_WIN_TROPHIES,
    WAR_HEAT_MIN_MS,
    WAR_HEAT_PULL_MS,
    WAR_HEAT_SPAN_MS,
    WAR_LOOT_FLOOR_PCT,
    WAR_LOOT_ROLL_MAX,
    WAR_LOOT_ROLL_MIN,
    WAR_MAX_LOOT_MINUTES,
    WAR_MAX_LOSS_MINUTES,
    WAR_MIN_ATTACK_COOLDOWN_MS,
    WAR_PWIN_MAX,
    WAR_PWIN_MIN,
    WAR_RAID_BAIT_CASH,
    WAR_RAID_LOG_LIMIT,
    WAR_RAID_OFFENSE_MIN,
    WAR_RAID_OFFENSE_SPAN,
    WAR_RAID_STEAL_MIN,
    WAR_RAID_STEAL_SPAN,
    WAR_RAID_TROPHY_THRESHOLD,
    WAR_RAID_WINDOW_MIN_S,
    WAR_RAID_WINDOW_SPAN_S,
    WAR_SHIELD_MS,
    WAR_TARGET_NOISE,
    WAR_TARGET_REFRESH_MS,
)
from tycoon.events import can_toast, push_event
from tycoon.progression import hq_level, income_per_sec
from tycoon.rng import rand_range, random_float
from tycoon.store import (
    BattleReport,
    GameState,
    IncomingRaid,
    RaidEvent,
    RaidReport,
    WarState,
    WarTarget,
)
from tycoon.types import LeagueConfig, WarBonuses
from tycoon.upgrades import UpgradeManager, default_manager

logger = logging.getLogger(__name__)


# ── pure combat math ──────────────────────────────────────────────────

def sigmoid(value: float) -> float:
    if value >= 0:
        return 1.0 / (1.0 + math.exp(-value))
    z = math.exp(value)
    return z / (1.0 + z)


def win_probability(offense: float, defense: float, scale: float = DEFAULT_CONFIG.war_pwin_scale) -> float:
    """Clamped sigmoid of the power gap; stays in [0.05, 0.95] for any input."""
    if not scale > 0:
        scale = DEFAULT_CONFIG.war_pwin_scale
    gap = offense - defense
    if math.isnan(gap):
        return WAR_PWIN_MIN
    if math.isinf(gap):
        chance = 1.0 if gap > 0 else 0.0
    else:
        chance = sigmoid(gap / scale)
    return min(max(chance, WAR_PWIN_MIN), WAR_PWIN_MAX)


def schedule_raid_delay(seed: int, league: LeagueConfig) -> Tuple[float, int]:
    """Return (delay_ms, next_seed) drawn from the league's raid interval."""
    value, seed = random_float(seed)
    minutes = league.raid_min_minutes + (league.raid_max_minutes - league.raid_min_minutes) * value
    return minutes * 60 * 1000, seed


def generate_targets(defense: float, income: float, seed: int, now: float,
                     names: Optional[List[str]] = None) -> Tuple[List[WarTarget], int]:
    """One target per difficulty tier, names drawn without replacement."""
    available = list(WAR_TARGET_NAMES if names is None else names)
    targets = []
    for index, tier in enumerate(TARGET_TIERS):
        name = FALLBACK_TARGET_NAME
        if available:
            pick, seed = rand_range(seed, 0, len(available) - 0.0001)
            name = available.pop(int(pick))
        noise, seed = rand_range(seed, 0, WAR_TARGET_NOISE)
        targets.append(WarTarget(
            id=f"target-{int(now)}-{index}",
            name=name,
            defense=defense * tier.defense_mult + noise,
            loot_cap=income * tier.loot_seconds,
            trophy_win=tier.trophy_win,
            trophy_loss=tier.trophy_loss,
            difficulty=tier.id,
            refresh_at=now + WAR_TARGET_REFRESH_MS,
        ))
    return targets, seed


def default_war_state(now: float, seed: int) -> WarState:
    """Fresh war state; the first raid lands mid-way through the bronze interval."""
    league = league_config("bronze")
    midpoint = league.raid_min_minutes + (league.raid_max_minutes - league.raid_min_minutes) * 0.5
    return WarState(rng_seed=seed, next_raid_at=now + midpoint * 60 * 1000)


# ── player war stats ──────────────────────────────────────────────────

def war_bonuses(state: GameState) -> WarBonuses:
    return default_manager().get_war_bonuses(state.war.war_upgrade_levels)


def offense_power(state: GameState, bonuses: Optional[WarBonuses] = None) -> float:
    bonuses = bonuses or war_bonuses(state)
    building_levels = sum(b.building_level for b in state.buildings.values())
    managers = sum(1 for d in BUSINESS_DEFS if state.businesses[d.id].manager_owned)
    return hq_level(state) * 10 + building_levels * 2 + managers * 5 + bonuses.offense_bonus


def defense_power(state: GameState, bonuses: Optional[WarBonuses] = None) -> float:
    bonuses = bonuses or war_bonuses(state)
    safe_bonus = SAFE_DEFENSE_BONUS if state.safe_cash > 0 else 0.0
    return hq_level(state) * 12 + safe_bonus + len(state.completed_projects) * 8 + bonuses.defense_bonus


def vault_protect_pct(state: GameState) -> float:
    return war_bonuses(state).vault_protect_pct


def attack_cooldown_ms(state: GameState) -> float:
    return max(WAR_MIN_ATTACK_COOLDOWN_MS, WAR_ATTACK_COOLDOWN_MS * war_bonuses(state).attack_cooldown_mult)


def shield_duration_ms(state: GameState) -> float:
    return WAR_SHIELD_MS + war_bonuses(state).shield_duration_bonus_sec * 1000


def war_upgrade_cost(state: GameState, upgrade_id: str) -> Optional[float]:
    upgrade = default_manager().get_war(upgrade_id)
    if upgrade is None:
        return None
    level = state.war.war_upgrade_levels.get(upgrade_id, 0)
    return UpgradeManager.get_war_cost(upgrade, income_per_sec(state), level)


def _log(war: WarState, event: RaidEvent) -> None:
    war.raid_log = [event] + war.raid_log[:WAR_RAID_LOG_LIMIT - 1]


# ── actions ───────────────────────────────────────────────────────────

def buy_war_upgrade(state: GameState, upgrade_id: str) -> GameState:
    cost = war_upgrade_cost(state, upgrade_id)
    if cost is None or cost <= 0 or state.cash < cost:
        return state
    new = state.copy()
    new.debit(cost)
    levels = new.war.war_upgrade_levels
    levels[upgrade_id] = levels.get(upgrade_id, 0) + 1
    logger.debug("war upgrade %s -> level %d", upgrade_id, levels[upgrade_id])
    return new


def refresh_war_targets(state: GameState, now: float, force: bool = False) -> GameState:
    war = state.war
    if not force and war.targets and now - war.last_targets_at < WAR_TARGET_REFRESH_MS:
        return state
    new = state.copy()
    new.war.targets, new.war.rng_seed = generate_targets(
        defense_power(state), income_per_sec(state), new.war.rng_seed, now
    )
    new.war.last_targets_at = now
    return new


def attack_war_target(state: GameState, target_id: str, now: float,
                      config: EngineConfig = DEFAULT_CONFIG) -> GameState:
    war = state.war
    if war.attack_cooldown_until is not None and now < war.attack_cooldown_until:
        return state
    target = next((t for t in war.targets if t.id == target_id), None)
    if target is None:
        return state

    new = state.copy()
    nwar = new.war
    seed = nwar.rng_seed
    bonuses = war_bonuses(state)
    income = income_per_sec(state)
    offense = offense_power(state, bonuses)
    league = league_config(war.league)

    chance = win_probability(offense, target.defense, config.war_pwin_scale)
    roll, seed = random_float(seed)
    win = roll < chance

    loot = 0.0
    if win:
        frac, seed = rand_range(seed, WAR_LOOT_ROLL_MIN, WAR_LOOT_ROLL_MAX)
        loot = min(target.loot_cap, frac * target.loot_cap)
    loot_cap = income * min(WAR_MAX_LOOT_MINUTES, league.attack_loot_cap_minutes) * 60
    loot = min(loot * bonuses.loot_mult, loot_cap)
    if win:
        loot = new.credit(loot)
    else:
        loot = 0.0

    trophies_delta = target.trophy_win if win else -target.trophy_loss
    nwar.trophies = max(0, nwar.trophies + trophies_delta)
    nwar.attack_cooldown_until = now + attack_cooldown_ms(state)

    if not win:
        heat, seed = random_float(seed)
        nwar.heat_until = now + WAR_HEAT_MIN_MS + heat * WAR_HEAT_SPAN_MS
        nwar.next_raid_at = min(nwar.next_raid_at, now + WAR_HEAT_PULL_MS)

    if win:
        for entry in nwar.targets:
            if entry.id == target_id:
                entry.loot_cap = max(entry.loot_cap - loot, entry.loot_cap * WAR_LOOT_FLOOR_PCT)

    report = BattleReport(
        kind="attack",
        offense=offense,
        defense=target.defense,
        p_win=chance,
        roll=roll,
        income_per_sec=income,
        loot=loot,
        loot_cap=loot_cap,
        target_loot=target.loot_cap,
        loot_mult=bonuses.loot_mult,
    )
    _log(nwar, RaidEvent(
        id=f"attack-{int(now)}-{target.id}",
        kind="attack",
        result="win" if win else "loss",
        loot=loot,
        trophies_delta=trophies_delta,
        at=now,
        report=report,
        target_name=target.name,
    ))
    nwar.rng_seed = seed
    push_event(new, "raid", "Raid success" if win else "Raid failed", now,
               detail=target.name, amount=loot if win else None)
    logger.info("attack on %s: p=%.3f roll=%.3f %s loot=%.2f",
                target.name, chance, roll, "win" if win else "loss", loot)
    return new


def _resolve_incoming(new: GameState, now: float, seed: int, league: LeagueConfig) -> int:
    war = new.war
    raid = war.incoming_raid
    bonuses = war_bonuses(new)
    attacker_wins = raid.roll < raid.chance

    loss = 0.0
    protected = 0.0
    if attacker_wins:
        steal_base = new.cash * raid.steal_pct
        protected = steal_base * raid.vault_protect_pct
        loss = new.debit(min(max(0.0, steal_base - protected), raid.loot_cap * bonuses.loss_mult))

    trophies_delta = -WAR_DEFENSE_LOSS_TROPHIES if attacker_wins else WAR_DEFENSE_WIN_TROPHIES
    war.trophies = max(0, war.trophies + trophies_delta)
    shield = shield_duration_ms(new)
    delay, seed = schedule_raid_delay(seed, league)
    result = "loss" if attacker_wins else "win"

    war.raid_report = RaidReport(
        result=result,
        loot_lost=loss,
        protected_amount=protected,
        trophies_delta=trophies_delta,
        at=now,
    )
    war.unread_raid_report = True
    war.shield_until = now + shield
    war.next_raid_at = now + shield + delay
    war.incoming_raid = None
    if attacker_wins:
        heat, seed = random_float(seed)
        war.heat_until = now + WAR_HEAT_MIN_MS + heat * WAR_HEAT_SPAN_MS
        war.next_raid_at = min(war.next_raid_at, now + WAR_HEAT_PULL_MS)
    _log(war, RaidEvent(
        id=f"defense-{int(now)}",
        kind="defense",
        result=result,
        loot=loss,
        trophies_delta=trophies_delta,
        at=now,
        report=BattleReport(
            kind="defense",
            offense=raid.attacker_offense,
            defense=defense_power(new, bonuses),
            p_win=1 - raid.chance,
            roll=raid.roll,
            income_per_sec=income_per_sec(new),
            loot=loss,
            loot_cap=raid.loot_cap,
            vault_protect_pct=raid.vault_protect_pct,
            lootable_cash=new.cash,
            steal_pct=raid.steal_pct,
            loss_mult=bonuses.loss_mult,
        ),
    ))
    if can_toast(new, now):
        if attacker_wins:
            push_event(new, "defense", "Hostile action succeeded", now,
                       detail="Asset extraction complete", amount=-loss)
        else:
            push_event(new, "defense", "Countermeasures triggered", now, detail="No losses recorded")
    logger.info("incoming raid resolved: %s, lost %.2f (protected %.2f)", result, loss, protected)
    return seed


def _launch_incoming(new: GameState, now: float, seed: int, league: LeagueConfig,
                     config: EngineConfig) -> int:
    war = new.war
    defense = defense_power(new)

    window, seed = random_float(seed)
    duration_ms = (WAR_RAID_WINDOW_MIN_S + window * WAR_RAID_WINDOW_SPAN_S) * 1000
    swing, seed = random_float(seed)
    attacker = (
        defense
        + (WAR_RAID_OFFENSE_MIN + swing * WAR_RAID_OFFENSE_SPAN)
        + LEAGUE_RAID_BONUS.get(war.league, 0.0)
    )
    chance = win_probability(attacker, defense, config.war_pwin_scale)
    roll, seed = random_float(seed)
    steal, seed = random_float(seed)
    cap_minutes = min(WAR_MAX_LOSS_MINUTES, league.defense_loss_cap_minutes)
    delay, seed = schedule_raid_delay(seed, league)

    war.incoming_raid = IncomingRaid(
        ends_at=now + duration_ms,
        attacker_offense=attacker,
        chance=chance,
        roll=roll,
        vault_protect_pct=vault_protect_pct(new),
        loot_cap=income_per_sec(new) * cap_minutes * 60,
        steal_pct=WAR_RAID_STEAL_MIN + steal * WAR_RAID_STEAL_SPAN,
    )
    war.next_raid_at = now + delay
    push_event(new, "defense", "Incoming raid", now, detail=f"Lands in {int(duration_ms / 1000)}s")
    logger.info("incoming raid scheduled for %.0f (attacker %.1f vs defense %.1f)",
                war.incoming_raid.ends_at, attacker, defense)
    return seed


def process_war_tick(state: GameState, now: float,
                     config: EngineConfig = DEFAULT_CONFIG) -> GameState:
    new = state.copy()
    war = new.war
    seed = war.rng_seed

    stale = (
        not war.targets
        or any(t.refresh_at <= now for t in war.targets)
        or now - war.last_targets_at >= WAR_TARGET_REFRESH_MS
    )
    if stale:
        war.targets, seed = generate_targets(defense_power(new), income_per_sec(new), seed, now)
        war.last_targets_at = now

    if war.shield_until is not None and war.shield_until <= now:
        war.shield_until = None

    league = league_config(war.league)
    eligible = war.trophies >= WAR_RAID_TROPHY_THRESHOLD

    if war.incoming_raid is not None:
        if now >= war.incoming_raid.ends_at:
            seed = _resolve_incoming(new, now, seed, league)
    else:
        heat_active = war.heat_until is not None and war.heat_until > now
        trigger_at = war.next_raid_at - WAR_HEAT_PULL_MS if heat_active else war.next_raid_at
        if eligible and now >= trigger_at and war.shield_until is None and new.cash > WAR_RAID_BAIT_CASH:
            seed = _launch_incoming(new, now, seed, league, config)
        elif now >= war.next_raid_at and (not eligible or new.cash <= WAR_RAID_BAIT_CASH):
            delay, seed = schedule_raid_delay(seed, league)
            war.next_raid_at = now + delay
            logger.debug("raid skipped; next check at %.0f", war.next_raid_at)

    war.rng_seed = seed
    return new


def acknowledge_raid_report(state: GameState) -> GameState:
    if not state.war.unread_raid_report:
        return state
    new = state.copy()
    new.war.unread_raid_report = False
    return new
