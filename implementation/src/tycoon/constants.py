from __future__ import annotations

# Manual work
TAP_PAY = 0.25
TAP_BONUS_EVERY = 20
TAP_BONUS_AMOUNT = 2.0

# Businesses
DEFAULT_MANAGER_COST_MULT = 25.0
MAX_BUY_ITERATIONS = 500
MAX_CYCLE_CATCHUP = 100
MIN_CYCLE_MS = 250.0

# Offline
BASE_OFFLINE_CAP_SECONDS = 2 * 60 * 60

# Upgrade offers
UPGRADE_OFFER_COUNT = 3
UPGRADE_OFFER_REFRESH_MS = 90 * 1000

# Risk (theft)
THEFT_CHECK_MS = 60 * 1000
THEFT_CHANCE = 0.25
THEFT_MIN_PCT = 0.05
THEFT_MAX_PCT = 0.12
THEFT_BASE_THRESHOLD = 50.0
THEFT_THRESHOLD_SECONDS = 90.0

# Goals / buffs
GOAL_SLOTS = 3
GOAL_BUFF_DURATION_MS = 5 * 60 * 1000
GOAL_BUSINESS_PROFIT_MULT = 1.1
GOAL_PROJECT_TIME_MULT = 0.9
GOAL_COUNT_TARGETS = (10, 25, 50, 100)

# Projects
PROJECT_SLOTS = 1
MIN_PROJECT_DURATION_MS = 1000.0

# Buildings
BUILDING_UPGRADE_COST_GROWTH = 1.8
BUILDING_UPGRADE_BASE_SECONDS = 10.0
BUILDING_UPGRADE_TIME_GROWTH = 1.6
GRID_COLUMNS = 6

# War
WAR_ATTACK_COOLDOWN_MS = 2 * 60 * 1000
WAR_MIN_ATTACK_COOLDOWN_MS = 30 * 1000
WAR_SHIELD_MS = 15 * 60 * 1000
WAR_RAID_TROPHY_THRESHOLD = 20
WAR_MAX_LOOT_MINUTES = 10
WAR_MAX_LOSS_MINUTES = 6
WAR_PWIN_SCALE = 20.0
WAR_PWIN_MIN = 0.05
WAR_PWIN_MAX = 0.95
WAR_TARGET_REFRESH_MS = 2 * 60 * 1000
WAR_TARGET_NOISE = 6.0
WAR_LOOT_FLOOR_PCT = 0.45
WAR_LOOT_ROLL_MIN = 0.25
WAR_LOOT_ROLL_MAX = 0.6
WAR_RAID_BAIT_CASH = 50.0
WAR_RAID_WINDOW_MIN_S = 60.0
WAR_RAID_WINDOW_SPAN_S = 60.0
WAR_RAID_OFFENSE_MIN = -15.0
WAR_RAID_OFFENSE_SPAN = 50.0
WAR_RAID_STEAL_MIN = 0.06
WAR_RAID_STEAL_SPAN = 0.12
WAR_DEFENSE_LOSS_TROPHIES = 4
WAR_DEFENSE_WIN_TROPHIES = 1
WAR_HEAT_MIN_MS = 120 * 1000
WAR_HEAT_SPAN_MS = 180 * 1000
WAR_HEAT_PULL_MS = 120 * 1000
WAR_RAID_LOG_LIMIT = 10
VAULT_PROTECT_CAP = 0.9
SAFE_DEFENSE_BONUS = 20.0

# Event feed
UI_EVENT_LIMIT = 6
UI_EVENT_MIN_GAP_MS = 800
