"""Upgrade system: data model loading, multiplier composition, pricing.

Two families share `upgrade_data.json`:
  - one-time business/global upgrades that scale profit or cycle time
  - leveled war upgrades (security / war) that feed the raid engine

Multipliers compose as a plain product; for war upgrades the additive
effects accumulate `effect * level` and multiplicative ones `effect ** level`.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from tycoon.constants import VAULT_PROTECT_CAP
from tycoon.types import (
    UpgradeDef,
    UpgradeEffect,
    WarBonuses,
    WarUpgradeDef,
    WarUpgradeEffect,
)

logger = logging.getLogger(__name__)


class UpgradeManager:
    """Holds the upgrade tables and answers pricing/multiplier queries.

    The manager itself is stateless with respect to the player: purchased
    ids and war-upgrade levels are passed in from the game state.
    """

    def __init__(self) -> None:
        self.upgrades: List[UpgradeDef] = []
        self.war_upgrades: List[WarUpgradeDef] = []
        self._by_id: Dict[str, UpgradeDef] = {}
        self._war_by_id: Dict[str, WarUpgradeDef] = {}

    def load(self, path: Optional[Path] = None) -> None:
        if path is None:
            path = Path(__file__).resolve().parent / "upgrade_data.json"
        if not path.exists():
            logger.warning("upgrade data not found at %s", path)
            return
        raw = json.loads(path.read_text(encoding="utf-8"))

        self.upgrades = []
        for entry in raw.get("upgrades", []):
            effect = entry.get("effect", {})
            unlock = entry.get("unlock", {})
            self.upgrades.append(UpgradeDef(
                id=entry["id"],
                name=entry["name"],
                kind=entry.get("kind", "global"),
                cost=float(entry["cost"]),
                target_seconds=float(entry.get("target_seconds", 0.0)),
                target_business_id=entry.get("target_business_id"),
                effect=UpgradeEffect(
                    profit_mult=float(effect.get("profit_mult", 1.0)),
                    time_mult=float(effect.get("time_mult", 1.0)),
                ),
                unlock_business_id=unlock.get("business_id"),
                unlock_count_at_least=int(unlock.get("count_at_least", 0)),
                unlock_total_earned_at_least=float(unlock.get("total_earned_at_least", 0.0)),
            ))

        self.war_upgrades = []
        for entry in raw.get("war_upgrades", []):
            effect = entry.get("effect_per_level", {})
            self.war_upgrades.append(WarUpgradeDef(
                id=entry["id"],
                name=entry["name"],
                description=entry.get("description", ""),
                kind=entry.get("kind", "war"),
                base_seconds=float(entry["base_seconds"]),
                cost_growth=float(entry["cost_growth"]),
                effect_per_level=WarUpgradeEffect(
                    offense_bonus=float(effect.get("offense_bonus", 0.0)),
                    defense_bonus=float(effect.get("defense_bonus", 0.0)),
                    vault_protect_pct=float(effect.get("vault_protect_pct", 0.0)),
                    loss_mult=float(effect.get("loss_mult", 1.0)),
                    loot_mult=float(effect.get("loot_mult", 1.0)),
                    attack_cooldown_mult=float(effect.get("attack_cooldown_mult", 1.0)),
                    shield_duration_bonus_sec=float(effect.get("shield_duration_bonus_sec", 0.0)),
                ),
            ))

        self._by_id = {u.id: u for u in self.upgrades}
        self._war_by_id = {u.id: u for u in self.war_upgrades}

    def get(self, upgrade_id: str) -> Optional[UpgradeDef]:
        return self._by_id.get(upgrade_id)

    def get_war(self, upgrade_id: str) -> Optional[WarUpgradeDef]:
        return self._war_by_id.get(upgrade_id)

    # ── business / global upgrades ────────────────────────────────────

    def get_multipliers(self, purchased: Iterable[str], business_id: str) -> Tuple[float, float]:
        """Return (profit_mult, time_mult) for one business.

        Global upgrades always apply; business upgrades only to their target.
        """
        owned = set(purchased)
        profit_mult = 1.0
        time_mult = 1.0
        for upgrade in self.upgrades:
            if upgrade.id not in owned:
                continue
            if upgrade.kind == "business" and upgrade.target_business_id != business_id:
                continue
            profit_mult *= upgrade.effect.profit_mult
            time_mult *= upgrade.effect.time_mult
        return profit_mult, time_mult

    @staticmethod
    def is_unlocked(upgrade: UpgradeDef, counts: Mapping[str, int], total_earned: float) -> bool:
        if upgrade.unlock_business_id:
            if counts.get(upgrade.unlock_business_id, 0) < upgrade.unlock_count_at_least:
                return False
        if total_earned < upgrade.unlock_total_earned_at_least:
            return False
        return True

    def available(self, counts: Mapping[str, int], total_earned: float,
                  purchased: Iterable[str]) -> List[UpgradeDef]:
        owned = set(purchased)
        return [
            u for u in self.upgrades
            if u.id not in owned and self.is_unlocked(u, counts, total_earned)
        ]

    @staticmethod
    def get_cost(upgrade: UpgradeDef, income_per_sec: float) -> float:
        return max(upgrade.cost, income_per_sec * upgrade.target_seconds)

    # ── war upgrades ──────────────────────────────────────────────────

    def get_war_bonuses(self, levels: Mapping[str, int]) -> WarBonuses:
        bonuses = WarBonuses()
        for upgrade_id, level in levels.items():
            upgrade = self._war_by_id.get(upgrade_id)
            if upgrade is None or level <= 0:
                continue
            eff = upgrade.effect_per_level
            bonuses.offense_bonus += eff.offense_bonus * level
            bonuses.defense_bonus += eff.defense_bonus * level
            bonuses.vault_protect_pct += eff.vault_protect_pct * level
            bonuses.loss_mult *= eff.loss_mult ** level
            bonuses.loot_mult *= eff.loot_mult ** level
            bonuses.attack_cooldown_mult *= eff.attack_cooldown_mult ** level
            bonuses.shield_duration_bonus_sec += eff.shield_duration_bonus_sec * level
        bonuses.vault_protect_pct = min(max(bonuses.vault_protect_pct, 0.0), VAULT_PROTECT_CAP)
        return bonuses

    @staticmethod
    def get_war_cost(upgrade: WarUpgradeDef, income_per_sec: float, level: int) -> float:
        return max(0.0, income_per_sec * upgrade.base_seconds * (upgrade.cost_growth ** level))


_DEFAULT: Optional[UpgradeManager] = None


def default_manager() -> UpgradeManager:
    """Shared manager loaded from the bundled `upgrade_data.json`."""
    global _DEFAULT
    if _DEFAULT is None:
        manager = UpgradeManager()
        manager.load()
        _DEFAULT = manager
    return _DEFAULT
