import base64
import json

import pytest

from tycoon.save import (
    export_save_text,
    import_save_text,
    load_game,
    normalize_state,
    save_game,
    to_dict,
)

from conftest import NOW, with_business


def test_save_and_load_round_trip(tmp_path, fresh):
    state = with_business(fresh, "lemonade", count=12, manager=True)
    state.cash = 321.5
    state.war.trophies = 240
    path = tmp_path / "save.json"
    assert save_game(state, path)
    loaded = load_game(path, NOW)
    assert to_dict(loaded) == to_dict(state)
    assert loaded.war.league == "silver"
    assert json.loads(path.read_text())["war"]["league"] == "silver"


def test_load_missing_or_corrupt_file(tmp_path):
    assert load_game(tmp_path / "absent.json", NOW) is None
    bad = tmp_path / "bad.json"
    bad.write_text("{not json")
    assert load_game(bad, NOW) is None


def test_export_import_plain_and_encrypted(fresh):
    fresh.cash = 77.0
    for encrypted in (False, True):
        text = export_save_text(fresh, encrypted=encrypted)
        restored = import_save_text(text, NOW)
        assert restored is not None
        assert restored.cash == 77.0
        assert restored.rng_seed == fresh.rng_seed


def test_encrypted_export_uses_fresh_iv(fresh):
    assert export_save_text(fresh, encrypted=True) != export_save_text(fresh, encrypted=True)


def test_import_accepts_raw_json_and_rejects_garbage(fresh):
    assert import_save_text(json.dumps({"cash": 5}), NOW).cash == 5.0
    assert import_save_text("definitely not a save", NOW) is None
    junk = base64.b64encode(b"\x00" * 32).decode("ascii")
    assert import_save_text(junk, NOW) is None


def test_normalize_garbage_gives_valid_state():
    state = normalize_state("nonsense", NOW)
    assert state.cash == 0.0
    assert "hq" in state.buildings
    assert len(state.world.plots) == 6
    assert state.last_seen_at == NOW
    assert state.buy_mode == "x1"

    state = normalize_state({
        "cash": float("nan"),
        "totalEarned": -5,
        "buyMode": "x1000",
        "businesses": {"lemonade": {"count": 3.7, "running": True}, "ghost": {"count": 9}},
        "purchasedUpgrades": ["lemonade-promo", "not-a-real-upgrade", 7],
        "completedProjects": ["offline-cap-2h", "offline-cap-2h", "nope"],
        "buildings": {"x": {"typeId": "castle", "plotId": "plot-3"}},
    }, NOW)
    assert state.cash == 0.0
    assert state.total_earned == 0.0
    assert state.buy_mode == "x1"
    assert state.businesses["lemonade"].count == 3
    assert not state.businesses["lemonade"].running
    assert "ghost" not in state.businesses
    assert state.purchased_upgrades == ["lemonade-promo"]
    assert state.completed_projects == ["offline-cap-2h"]
    assert list(state.buildings) == ["hq"]

    state = normalize_state({
        "war": {"targets": [{"id": "t", "name": "n", "difficulty": ["hard"]}]},
        "runningProjects": [{"id": ["offline-cap-2h"], "endsAt": NOW}],
        "activeBuffs": [{"id": "b", "kind": {"k": 1}, "expiresAt": NOW + 1}],
    }, NOW)
    assert [t.difficulty for t in state.war.targets] == ["easy"]
    assert state.running_projects == []
    assert state.active_buffs == []


def test_normalize_accepts_snake_case_and_legacy_keys():
    state = normalize_state({
        "safe_cash": 40,
        "last_seen_at": NOW - 5000,
        "buildQueue": [{"buildingId": "hq", "finishAt": NOW + 10}],
        "war": {
            "trophies": 12,
            "warUpgrades": ["acquisition-ops"],
            "targets": [{"id": "t", "name": "Old", "defense": 5, "loot": 44}],
            "next_raid_at": NOW + 99,
        },
    }, NOW)
    assert state.safe_cash == 40.0
    assert state.last_seen_at == NOW - 5000
    assert state.build_queue[0].finish_at == NOW + 10
    assert state.war.war_upgrade_levels == {"acquisition-ops": 1}
    assert state.war.targets[0].loot_cap == 44.0
    assert state.war.next_raid_at == NOW + 99


def test_hq_level_restores_grid_and_buy_mode():
    state = normalize_state({
        "buyMode": "max",
        "buildings": {"hq": {"typeId": "hq", "plotId": "plot-1", "buildingLevel": 3}},
        "world": {"plots": [{"id": "plot-1", "x": 0, "y": 0, "buildingId": "hq"}]},
    }, NOW)
    assert len(state.world.plots) == 14
    assert state.buy_mode == "max"
    assert state.world.plots[0].building_id == "hq"


def test_missing_war_seed_is_derived():
    a = normalize_state({"war": {}}, NOW)
    b = normalize_state({"war": {}}, NOW)
    assert a.war.rng_seed == b.war.rng_seed
    assert a.war.next_raid_at == pytest.approx(NOW + 12 * 60_000)
