"""Save/load and export/import of game state.

Auto-save: JSON written atomically to a local file.
Export: base64-JSON, or AES-256-CBC encrypted base64 (pycryptodome,
PBKDF2-derived key, random IV prepended to the ciphertext).
Import: accepts raw JSON, base64-JSON, and the encrypted form.

Persisted keys use the camelCase contract; snake_case keys are accepted on
read. `normalize_state` never raises: every field falls back to a safe
default when it is missing, wrong-typed, or out of range.
"""
from __future__ import annotations

import base64
import binascii
import json
import logging
import math
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

from Crypto.Cipher import AES
from Crypto.Protocol.KDF import PBKDF2
from Crypto.Random import get_random_bytes
from Crypto.Util.Padding import pad, unpad

from tycoon.buildings import default_buildings, default_world, ensure_plots, revalidate_buy_mode, sync_world
from tycoon.catalog import BUILDING_BY_ID, BUSINESS_DEFS, PROJECT_BY_ID, TARGET_TIERS, league_config
from tycoon.constants import GOAL_SLOTS, UI_EVENT_LIMIT, WAR_RAID_LOG_LIMIT
from tycoon.goals import goal_label
from tycoon.progression import hq_level
from tycoon.rng import UINT32_MASK, stable_seed
from tycoon.store import (
    BattleReport,
    BuildingInstance,
    BuildQueueItem,
    BusinessState,
    GameState,
    GoalReward,
    GoalState,
    IncomingRaid,
    Plot,
    ProjectRun,
    RaidEvent,
    RaidReport,
    TempBuff,
    UiEvent,
    WarState,
    WarTarget,
    WorldState,
    finite,
)
from tycoon.types import BUY_MODES
from tycoon.upgrades import default_manager
from tycoon.war import default_war_state

logger = logging.getLogger(__name__)

SAVE_VERSION = 1

_PASS_PHRASE = b"tycoon-save-export"
_SALT_VALUE = b"tycoon#salt#v1"
_KEY_BYTES = 32
_KDF_ITERATIONS = 20_000

_GOAL_TYPES = {
    "own-count", "hire-manager", "buy-upgrade", "start-project",
    "upgrade-building", "build-type", "bulk-buy", "hq-level",
}
_BUFF_KINDS = {"business-profit", "project-time"}
_DIFFICULTIES = {tier.id for tier in TARGET_TIERS}


# ── field readers ─────────────────────────────────────────────────────

def _snake(key: str) -> str:
    out = []
    for ch in key:
        if ch.isupper():
            out.append("_")
            out.append(ch.lower())
        else:
            out.append(ch)
    return "".join(out)


def _get(raw: Mapping[str, Any], key: str, default: Any = None) -> Any:
    """Look up a camelCase key, falling back to its snake_case spelling."""
    if key in raw:
        return raw[key]
    return raw.get(_snake(key), default)


def _num(value: Any, fallback: float = 0.0) -> float:
    return finite(value, fallback)


def _opt_num(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value) if math.isfinite(value) else None


def _count(value: Any, fallback: int = 0) -> int:
    """Non-negative integer via floor + clamp."""
    number = _opt_num(value)
    if number is None:
        return fallback
    return max(0, int(math.floor(number)))


def _str(value: Any) -> Optional[str]:
    return value if isinstance(value, str) else None


def _dicts(value: Any) -> List[Mapping[str, Any]]:
    if not isinstance(value, list):
        return []
    return [entry for entry in value if isinstance(entry, dict)]


# ── normalization ─────────────────────────────────────────────────────

def _business(value: Any) -> BusinessState:
    state = BusinessState()
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        state.count = _count(value)
        return state
    if not isinstance(value, dict):
        return state
    state.count = _count(_get(value, "count"))
    state.manager_owned = _get(value, "managerOwned") is True
    state.running = _get(value, "running") is True
    state.ends_at = _opt_num(_get(value, "endsAt"))
    if state.count <= 0 or not state.running or state.ends_at is None:
        state.stop()
    return state


def _buildings(value: Any) -> Dict[str, BuildingInstance]:
    if not isinstance(value, dict):
        return default_buildings()
    result: Dict[str, BuildingInstance] = {}
    for key, entry in value.items():
        if not isinstance(entry, dict):
            continue
        type_id = _str(_get(entry, "typeId"))
        if type_id not in BUILDING_BY_ID:
            if type_id is not None:
                logger.warning("dropping building %s of unknown type %r", key, type_id)
            continue
        result[key] = BuildingInstance(
            id=key,
            type_id=type_id,
            plot_id=_str(_get(entry, "plotId")) or "",
            building_level=max(1, _count(_get(entry, "buildingLevel"), 1)),
            upgrading_until=_opt_num(_get(entry, "upgradingUntil")),
        )
    if "hq" not in result:
        result.update(default_buildings())
    return result


def _world(value: Any) -> WorldState:
    if not isinstance(value, dict):
        return default_world()
    plots_raw = _get(value, "plots")
    if isinstance(plots_raw, list):
        plots = [
            Plot(
                id=entry["id"],
                x=int(_num(entry.get("x"))),
                y=int(_num(entry.get("y"))),
                building_id=_str(_get(entry, "buildingId")),
            )
            for entry in _dicts(plots_raw) if isinstance(entry.get("id"), str)
        ]
    else:
        plots = default_world().plots
    return WorldState(plots=plots, selected_plot_id=_str(_get(value, "selectedPlotId")))


def _build_queue(value: Any) -> List[BuildQueueItem]:
    # Accept both the bare list and the `{"active": [...]}` wrapper.
    if isinstance(value, dict):
        value = value.get("active")
    items = []
    for entry in _dicts(value):
        building_id = _str(_get(entry, "buildingId"))
        if building_id is not None:
            items.append(BuildQueueItem(building_id=building_id,
                                        finish_at=_num(_get(entry, "finishAt"))))
    return items


def _known_upgrades(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    manager = default_manager()
    result: List[str] = []
    for entry in value:
        if not isinstance(entry, str):
            continue
        if manager.get(entry) is None:
            logger.warning("dropping unknown upgrade id %r", entry)
            continue
        if entry not in result:
            result.append(entry)
    return result


def _completed_projects(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    result: List[str] = []
    for entry in value:
        if isinstance(entry, str) and entry in PROJECT_BY_ID and entry not in result:
            result.append(entry)
    return result


def _running_projects(value: Any) -> List[ProjectRun]:
    return [
        ProjectRun(
            id=entry["id"],
            started_at=_num(_get(entry, "startedAt")),
            ends_at=_num(_get(entry, "endsAt")),
            cost=_num(_get(entry, "cost")),
        )
        for entry in _dicts(value) if _str(entry.get("id")) in PROJECT_BY_ID
    ]


def _goals(value: Any) -> List[GoalState]:
    goals = []
    for entry in _dicts(value):
        goal_id = _str(entry.get("id"))
        goal_type = _str(entry.get("type"))
        reward = entry.get("reward")
        if goal_id is None or goal_type not in _GOAL_TYPES or not isinstance(reward, dict):
            continue
        kind = _str(reward.get("kind"))
        if kind not in _BUFF_KINDS:
            continue
        goals.append(GoalState(
            id=goal_id,
            type=goal_type,
            target=max(1, _count(entry.get("target"), 1)),
            reward=GoalReward(
                kind=kind,
                mult=_num(reward.get("mult"), 1.0),
                duration_ms=_num(_get(reward, "durationMs")),
                business_id=_str(_get(reward, "businessId")),
            ),
            business_id=_str(_get(entry, "businessId")),
            building_type=_str(_get(entry, "buildingType")),
        ))
    return goals[:GOAL_SLOTS]


def _buffs(value: Any) -> List[TempBuff]:
    return [
        TempBuff(
            id=entry["id"],
            kind=entry["kind"],
            mult=_num(entry.get("mult"), 1.0),
            expires_at=_num(_get(entry, "expiresAt")),
            business_id=_str(_get(entry, "businessId")),
        )
        for entry in _dicts(value)
        if isinstance(entry.get("id"), str) and _str(entry.get("kind")) in _BUFF_KINDS
    ]


def _events(value: Any, now: float) -> List[UiEvent]:
    return [
        UiEvent(
            id=entry["id"],
            kind=_str(entry.get("kind")) or "info",
            title=_str(entry.get("title")) or "",
            at=_num(entry.get("at"), now),
            detail=_str(entry.get("detail")),
            amount=_opt_num(entry.get("amount")),
        )
        for entry in _dicts(value) if isinstance(entry.get("id"), str)
    ][:UI_EVENT_LIMIT]


def _targets(value: Any, now: float) -> List[WarTarget]:
    targets = []
    for entry in _dicts(value):
        if not isinstance(entry.get("id"), str) or not isinstance(entry.get("name"), str):
            continue
        loot_cap = _opt_num(_get(entry, "lootCap"))
        if loot_cap is None:
            loot_cap = _num(entry.get("loot"))
        difficulty = _str(entry.get("difficulty"))
        targets.append(WarTarget(
            id=entry["id"],
            name=entry["name"],
            defense=_num(entry.get("defense")),
            loot_cap=loot_cap,
            trophy_win=int(_num(_get(entry, "trophyWin"))),
            trophy_loss=int(_num(_get(entry, "trophyLoss"))),
            difficulty=difficulty if difficulty in _DIFFICULTIES else "easy",
            refresh_at=_num(_get(entry, "refreshAt"), now),
        ))
    return targets


def _battle_report(value: Any, kind: str, loot: float) -> BattleReport:
    raw = value if isinstance(value, dict) else {}
    return BattleReport(
        kind=kind,
        offense=_num(raw.get("offense")),
        defense=_num(raw.get("defense")),
        p_win=_num(_get(raw, "pWin"), 0.5),
        roll=_num(raw.get("roll"), 0.5),
        income_per_sec=_num(_get(raw, "incomePerSec")),
        loot=_num(raw.get("loot"), loot),
        loot_cap=_num(_get(raw, "lootCap")),
        target_loot=_opt_num(_get(raw, "targetLoot")),
        loot_mult=_opt_num(_get(raw, "lootMult")),
        vault_protect_pct=_opt_num(_get(raw, "vaultProtectPct")),
        lootable_cash=_opt_num(_get(raw, "lootableCash")),
        steal_pct=_opt_num(_get(raw, "stealPct")),
        loss_mult=_opt_num(_get(raw, "lossMult")),
    )


def _raid_log(value: Any, now: float) -> List[RaidEvent]:
    log = []
    for entry in _dicts(value):
        kind = entry.get("kind")
        result = entry.get("result")
        if not isinstance(entry.get("id"), str) or kind not in ("attack", "defense") \
                or result not in ("win", "loss"):
            continue
        loot = _num(entry.get("loot"))
        log.append(RaidEvent(
            id=entry["id"],
            kind=kind,
            result=result,
            loot=loot,
            trophies_delta=int(_num(_get(entry, "trophiesDelta"))),
            at=_num(entry.get("at"), now),
            report=_battle_report(entry.get("report"), kind, loot),
            target_name=_str(_get(entry, "targetName")),
        ))
    return log[:WAR_RAID_LOG_LIMIT]


def _incoming_raid(value: Any) -> Optional[IncomingRaid]:
    if not isinstance(value, dict):
        return None
    fields = {
        "ends_at": _opt_num(_get(value, "endsAt")),
        "attacker_offense": _opt_num(_get(value, "attackerOffense")),
        "chance": _opt_num(value.get("chance")),
        "roll": _opt_num(value.get("roll")),
        "vault_protect_pct": _opt_num(_get(value, "vaultProtectPct")),
        "loot_cap": _opt_num(_get(value, "lootCap")),
        "steal_pct": _opt_num(_get(value, "stealPct")),
    }
    if any(v is None for v in fields.values()):
        return None
    return IncomingRaid(**fields)


def _raid_report(value: Any) -> Optional[RaidReport]:
    if not isinstance(value, dict) or value.get("result") not in ("win", "loss"):
        return None
    return RaidReport(
        result=value["result"],
        loot_lost=_num(_get(value, "lootLost")),
        protected_amount=_num(_get(value, "protectedAmount")),
        trophies_delta=int(_num(_get(value, "trophiesDelta"))),
        at=_num(value.get("at")),
    )


def _war_levels(raw: Mapping[str, Any]) -> Dict[str, int]:
    manager = default_manager()
    levels: Dict[str, int] = {}
    value = _get(raw, "warUpgradeLevels")
    if isinstance(value, dict):
        for key, level in value.items():
            if manager.get_war(key) is None:
                logger.warning("dropping unknown war upgrade id %r", key)
                continue
            if _count(level) > 0:
                levels[key] = _count(level)
    legacy = _get(raw, "warUpgrades")
    if isinstance(legacy, list):
        for key in legacy:
            if isinstance(key, str) and manager.get_war(key) is not None:
                levels[key] = max(levels.get(key, 0), 1)
    return levels


def _seed(value: Any, now: float, salt: str) -> int:
    number = _opt_num(value)
    if number is None:
        return stable_seed(now, salt=salt)
    return int(number) & UINT32_MASK


def normalize_war(value: Any, now: float) -> WarState:
    if not isinstance(value, dict):
        return default_war_state(now, stable_seed(now, salt="war"))
    war = WarState(
        trophies=_count(value.get("trophies")),
        shield_until=_opt_num(_get(value, "shieldUntil")),
        attack_cooldown_until=_opt_num(_get(value, "attackCooldownUntil")),
        heat_until=_opt_num(_get(value, "heatUntil")),
        targets=_targets(value.get("targets"), now),
        last_targets_at=_num(_get(value, "lastTargetsAt")),
        incoming_raid=_incoming_raid(_get(value, "incomingRaid")),
        raid_log=_raid_log(_get(value, "raidLog"), now),
        rng_seed=_seed(_get(value, "rngSeed"), now, "war"),
        war_upgrade_levels=_war_levels(value),
        raid_report=_raid_report(_get(value, "raidReport")),
        unread_raid_report=_get(value, "unreadRaidReport") is True,
    )
    next_raid_at = _opt_num(_get(value, "nextRaidAt"))
    if next_raid_at is None:
        next_raid_at = now + league_config(war.league).raid_min_minutes * 60 * 1000
    war.next_raid_at = next_raid_at
    return war


def normalize_state(raw: Any, now: float) -> GameState:
    """Build a valid `GameState` from an arbitrary decoded save blob."""
    if not isinstance(raw, dict):
        raw = {}
    cash = max(0.0, _num(raw.get("cash")))
    businesses_raw = raw.get("businesses")
    if not isinstance(businesses_raw, dict):
        businesses_raw = {}

    state = GameState(
        cash=cash,
        safe_cash=max(0.0, _num(_get(raw, "safeCash"))),
        total_earned=max(0.0, _num(_get(raw, "totalEarned"), cash)),
        work_taps=_count(_get(raw, "workTaps")),
        bulk_buys=_count(_get(raw, "bulkBuys")),
        buy_mode=_get(raw, "buyMode") if _get(raw, "buyMode") in BUY_MODES else "x1",
        businesses={d.id: _business(businesses_raw.get(d.id)) for d in BUSINESS_DEFS},
        world=_world(raw.get("world")),
        buildings=_buildings(raw.get("buildings")),
        build_queue=_build_queue(_get(raw, "buildQueue")),
        war=normalize_war(raw.get("war"), now),
        purchased_upgrades=_known_upgrades(_get(raw, "purchasedUpgrades")),
        upgrade_offers=_known_upgrades(_get(raw, "upgradeOffers")),
        last_offer_refresh_at=_num(_get(raw, "lastOfferRefreshAt")),
        last_theft_check_at=_num(_get(raw, "lastTheftCheckAt")),
        last_theft_loss=max(0.0, _num(_get(raw, "lastTheftLoss"))),
        active_goals=_goals(_get(raw, "activeGoals")),
        active_buffs=_buffs(_get(raw, "activeBuffs")),
        events=_events(_get(raw, "uiEvents", _get(raw, "events")), now),
        last_event_at=_num(_get(raw, "lastUiEventAt", _get(raw, "lastEventAt"))),
        event_seq=_count(_get(raw, "eventSeq")),
        projects_started=_count(_get(raw, "projectsStarted")),
        completed_projects=_completed_projects(_get(raw, "completedProjects")),
        running_projects=_running_projects(_get(raw, "runningProjects")),
        last_seen_at=_num(_get(raw, "lastSeenAt"), now),
        rng_seed=_seed(_get(raw, "rngSeed"), now, "economy"),
    )
    state.running_projects = [
        run for run in state.running_projects if run.id not in state.completed_projects
    ]
    ensure_plots(state.world, hq_level(state))
    sync_world(state.world, state.buildings)
    revalidate_buy_mode(state)
    return state


# ── serialization ─────────────────────────────────────────────────────

def _report_dict(report: BattleReport) -> Dict[str, Any]:
    data = {
        "kind": report.kind,
        "offense": report.offense,
        "defense": report.defense,
        "pWin": report.p_win,
        "roll": report.roll,
        "incomePerSec": report.income_per_sec,
        "loot": report.loot,
        "lootCap": report.loot_cap,
        "targetLoot": report.target_loot,
        "lootMult": report.loot_mult,
        "vaultProtectPct": report.vault_protect_pct,
        "lootableCash": report.lootable_cash,
        "stealPct": report.steal_pct,
        "lossMult": report.loss_mult,
    }
    return {k: v for k, v in data.items() if v is not None}


def _war_dict(war: WarState) -> Dict[str, Any]:
    raid = war.incoming_raid
    report = war.raid_report
    return {
        "trophies": war.trophies,
        "league": war.league,
        "shieldUntil": war.shield_until,
        "attackCooldownUntil": war.attack_cooldown_until,
        "heatUntil": war.heat_until,
        "targets": [
            {
                "id": t.id, "name": t.name, "defense": t.defense, "lootCap": t.loot_cap,
                "trophyWin": t.trophy_win, "trophyLoss": t.trophy_loss,
                "difficulty": t.difficulty, "refreshAt": t.refresh_at,
            }
            for t in war.targets
        ],
        "lastTargetsAt": war.last_targets_at,
        "incomingRaid": None if raid is None else {
            "endsAt": raid.ends_at, "attackerOffense": raid.attacker_offense,
            "chance": raid.chance, "roll": raid.roll,
            "vaultProtectPct": raid.vault_protect_pct, "lootCap": raid.loot_cap,
            "stealPct": raid.steal_pct,
        },
        "raidLog": [
            {
                "id": e.id, "kind": e.kind, "result": e.result, "loot": e.loot,
                "trophiesDelta": e.trophies_delta, "at": e.at, "targetName": e.target_name,
                "report": _report_dict(e.report),
            }
            for e in war.raid_log
        ],
        "rngSeed": war.rng_seed,
        "nextRaidAt": war.next_raid_at,
        "warUpgradeLevels": dict(war.war_upgrade_levels),
        "raidReport": None if report is None else {
            "result": report.result, "lootLost": report.loot_lost,
            "protectedAmount": report.protected_amount,
            "trophiesDelta": report.trophies_delta, "at": report.at,
        },
        "unreadRaidReport": war.unread_raid_report,
    }


def to_dict(state: GameState) -> Dict[str, Any]:
    """Flat JSON-ready record using the camelCase persisted contract."""
    return {
        "version": SAVE_VERSION,
        "cash": state.cash,
        "safeCash": state.safe_cash,
        "totalEarned": state.total_earned,
        "workTaps": state.work_taps,
        "bulkBuys": state.bulk_buys,
        "buyMode": state.buy_mode,
        "businesses": {
            key: {
                "count": b.count, "managerOwned": b.manager_owned,
                "running": b.running, "endsAt": b.ends_at,
            }
            for key, b in state.businesses.items()
        },
        "world": {
            "plots": [
                {"id": p.id, "x": p.x, "y": p.y, "buildingId": p.building_id}
                for p in state.world.plots
            ],
            "selectedPlotId": state.world.selected_plot_id,
        },
        "buildings": {
            key: {
                "id": b.id, "typeId": b.type_id, "plotId": b.plot_id,
                "buildingLevel": b.building_level, "upgradingUntil": b.upgrading_until,
            }
            for key, b in state.buildings.items()
        },
        "buildQueue": {
            "active": [
                {"buildingId": i.building_id, "finishAt": i.finish_at} for i in state.build_queue
            ],
        },
        "war": _war_dict(state.war),
        "purchasedUpgrades": list(state.purchased_upgrades),
        "upgradeOffers": list(state.upgrade_offers),
        "lastOfferRefreshAt": state.last_offer_refresh_at,
        "lastTheftCheckAt": state.last_theft_check_at,
        "lastTheftLoss": state.last_theft_loss,
        "activeGoals": [
            {
                "id": g.id, "type": g.type, "target": g.target, "label": goal_label(g),
                "businessId": g.business_id, "buildingType": g.building_type,
                "reward": {
                    "kind": g.reward.kind, "mult": g.reward.mult,
                    "durationMs": g.reward.duration_ms, "businessId": g.reward.business_id,
                },
            }
            for g in state.active_goals
        ],
        "activeBuffs": [
            {
                "id": b.id, "kind": b.kind, "mult": b.mult,
                "expiresAt": b.expires_at, "businessId": b.business_id,
            }
            for b in state.active_buffs
        ],
        "uiEvents": [
            {
                "id": e.id, "kind": e.kind, "title": e.title, "at": e.at,
                "detail": e.detail, "amount": e.amount,
            }
            for e in state.events
        ],
        "lastUiEventAt": state.last_event_at,
        "eventSeq": state.event_seq,
        "projectsStarted": state.projects_started,
        "completedProjects": list(state.completed_projects),
        "runningProjects": [
            {"id": r.id, "startedAt": r.started_at, "endsAt": r.ends_at, "cost": r.cost}
            for r in state.running_projects
        ],
        "lastSeenAt": state.last_seen_at,
        "rngSeed": state.rng_seed,
    }


# ── encryption ────────────────────────────────────────────────────────

def _derive_key() -> bytes:
    return PBKDF2(_PASS_PHRASE, _SALT_VALUE, dkLen=_KEY_BYTES, count=_KDF_ITERATIONS)


def _encrypt(plaintext: str) -> str:
    iv = get_random_bytes(AES.block_size)
    cipher = AES.new(_derive_key(), AES.MODE_CBC, iv)
    encrypted = cipher.encrypt(pad(plaintext.encode("utf-8"), AES.block_size))
    return base64.b64encode(iv + encrypted).decode("ascii")


def _decrypt(raw: bytes) -> Optional[str]:
    iv, body = raw[:AES.block_size], raw[AES.block_size:]
    try:
        cipher = AES.new(_derive_key(), AES.MODE_CBC, iv)
        return unpad(cipher.decrypt(body), AES.block_size).decode("utf-8")
    except (ValueError, UnicodeDecodeError) as e:
        logger.warning("save decryption failed: %s", e)
        return None


# ── text export / import ──────────────────────────────────────────────

def export_save_text(state: GameState, encrypted: bool = False) -> str:
    json_str = json.dumps(to_dict(state), separators=(",", ":"))
    if encrypted:
        return _encrypt(json_str)
    return base64.b64encode(json_str.encode("utf-8")).decode("ascii")


def _try_import_data(encoded: str) -> Optional[dict]:
    """Try raw JSON, then base64-JSON, then base64 AES ciphertext."""
    try:
        data = json.loads(encoded)
        if isinstance(data, dict):
            return data
    except ValueError:
        pass

    try:
        raw = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        return None

    try:
        data = json.loads(raw.decode("utf-8"))
        if isinstance(data, dict):
            return data
    except (ValueError, UnicodeDecodeError):
        pass

    if len(raw) >= 2 * AES.block_size and len(raw) % AES.block_size == 0:
        plaintext = _decrypt(raw)
        if plaintext is not None:
            try:
                data = json.loads(plaintext)
            except ValueError:
                return None
            if isinstance(data, dict):
                return data
    return None


def import_save_text(text: str, now: float) -> Optional[GameState]:
    data = _try_import_data(text.strip())
    if data is None:
        logger.warning("could not parse imported save text")
        return None
    return normalize_state(data, now)


# ── files ─────────────────────────────────────────────────────────────

def save_game(state: GameState, path: Path) -> bool:
    """Auto-save: write JSON atomically (tmp + rename)."""
    tmp_path = path.with_suffix(".tmp")
    try:
        tmp_path.write_text(json.dumps(to_dict(state), indent=2), encoding="utf-8")
        tmp_path.replace(path)
    except OSError as e:
        logger.error("error saving game: %s", e)
        return False
    return True


def load_game(path: Path, now: float) -> Optional[GameState]:
    """Read and normalize a save file. None on a missing or corrupt file."""
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.error("error loading save file: %s", e)
        return None
    return normalize_state(data, now)
