"""Engine configuration supplied by the host."""

from __future__ import annotations

from dataclasses import dataclass

from tycoon.constants import BASE_OFFLINE_CAP_SECONDS, MAX_CYCLE_CATCHUP, WAR_PWIN_SCALE


@dataclass(frozen=True)
class EngineConfig:
    offline_cap_base_seconds: float = BASE_OFFLINE_CAP_SECONDS
    max_cycle_catchup: int = MAX_CYCLE_CATCHUP
    war_pwin_scale: float = WAR_PWIN_SCALE


DEFAULT_CONFIG = EngineConfig()
