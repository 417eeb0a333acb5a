"""
Constants Module - Centralized configuration values
===================================================

PURPOSE: Single source of truth for club defaults and business rules
PATTERN: Modular constants organized by category
SCOPE: Values seeded into a fresh document and shared by the managers

Tariff, court list and opening hours are copied into the persisted settings
object when the document is first created; afterwards the document is the
authority and these values only describe the defaults.
"""
from tracking import t

from typing import Dict, List, Tuple

# Court Configuration
DEFAULT_COURTS: List[Dict[str, object]] = [
    {"id": 1, "name": "Court 1"},
    {"id": 2, "name": "Court 2"},
    {"id": 3, "name": "Court 3"},
    {"id": 4, "name": "Court 4"},
]

DEFAULT_OPENING_HOURS = {"start": "08:00", "end": "22:00"}

# Tariff (rates are per hour, charged per half-hour increment)
DEFAULT_TARIFF = {
    "offPeakRate": 24,
    "peakRate": 32,
    "peakStartHour": 17,
    "peakEndHour": 20,
}

# Booking rules
SLOT_MINUTES = 30
MIN_DURATION_MINUTES = 60
MAX_DURATION_MINUTES = 180
DEFAULT_DURATION_MINUTES = 60
DEFAULT_MATCH_DURATION_MINUTES = 90
DEFAULT_MATCH_START_HOUR = 18
MIN_MATCH_PLAYERS = 2
MAX_MATCH_PLAYERS = 8
DEFAULT_MATCH_PLAYERS = 4

RESERVATION_STATUS_CONFIRMED = "confirmed"
TRANSACTION_CAPTURED = "captured"
TRANSACTION_PENDING_SPLIT = "pending_split"

MATCH_SCHEDULED = "scheduled"
MATCH_COMPLETED = "completed"
PLAYER_CONFIRMED = "confirmed"
ROLE_OWNER = "owner"
ROLE_PLAYER = "player"

# Skill tiers, lowest first
SKILL_LEVELS: Tuple[str, ...] = ("beginner", "intermediate", "advanced", "expert")
DEFAULT_MIN_LEVEL = "beginner"
DEFAULT_MAX_LEVEL = "advanced"

# Ranking and achievements
INITIAL_RANKING_POINTS = 1200
RANKING_FLOOR = 800
WIN_POINTS = 25
LOSS_POINTS = 10

ACHIEVEMENT_HABITUE = "habitue"
ACHIEVEMENT_VETERAN = "veteran"
ACHIEVEMENT_CHAMPION = "champion"
HABITUE_MINUTES = 600
VETERAN_MATCHES = 10
CHAMPION_WIN_RATE = 0.6

# Listings
RECENT_MESSAGES_LIMIT = 5
LEADERBOARD_SIZE = 5
DASHBOARD_WINDOW_DAYS = 7

ADMIN_GUIDE_URL = "/docs/ADMIN_GUIDE.html"

# Collections held by the persisted document
DOCUMENT_COLLECTIONS: Tuple[str, ...] = (
    "users",
    "reservations",
    "reservationParticipants",
    "matches",
    "matchPlayers",
    "messages",
    "playerStats",
    "follows",
    "notifications",
    "transactions",
    "trainingLibrary",
    "documents",
)


def skill_rank(level: str) -> int:
    """Return the position of a skill tier, raising ``ValueError`` if unknown."""
    t('infrastructure.constants.skill_rank')
    return SKILL_LEVELS.index(level)
