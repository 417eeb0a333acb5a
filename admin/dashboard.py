"""
Administrator reports
Read-only views over the club document for staff accounts
"""
from tracking import t

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

from domain.errors import NotFoundOrForbidden
from domain.models import CurrentUser
from infrastructure import constants
from infrastructure.document_store import DocumentStore
from infrastructure.time_utils import parse_iso_datetime, to_iso, utc_now
from players.stats import rank_players
from reservations.lifecycle import courts_from_settings
from users.manager import user_name


class AdminDashboard:
    """Collection of reports restricted to administrators"""

    def __init__(self, store: DocumentStore) -> None:
        t('admin.dashboard.AdminDashboard.__init__')
        self.store = store
        self.logger = logging.getLogger('AdminDashboard')

    def _require_admin(self, user: CurrentUser) -> None:
        if not user.is_admin:
            self.logger.warning("Non-admin user %s requested an admin report", user.id)
            raise NotFoundOrForbidden("Administrator access required")

    def dashboard(self, user: CurrentUser, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Headline metrics for the club

        Returns:
            Recent reservation count, captured revenue, occupancy per court,
            top players, upcoming matches and member count
        """
        t('admin.dashboard.AdminDashboard.dashboard')
        self._require_admin(user)
        document = self.store.read()
        now = now or utc_now()
        window_start = now - timedelta(days=constants.DASHBOARD_WINDOW_DAYS)

        recent = 0
        for reservation in document["reservations"]:
            start = parse_iso_datetime(reservation.get("startDateTime"))
            if start is not None and window_start <= start <= now:
                recent += 1

        revenue = sum(
            item["amount"]
            for item in document["transactions"]
            if item["status"] == constants.TRANSACTION_CAPTURED
        )

        occupancy = []
        for court in courts_from_settings(document["settings"]):
            minutes = sum(
                item["durationMinutes"]
                for item in document["reservations"]
                if item["courtNumber"] == court.id
            )
            occupancy.append({"courtId": court.id, "courtName": court.name, "totalMinutes": minutes})

        upcoming = 0
        for match in document["matches"]:
            match_start = parse_iso_datetime(match.get("matchDate"))
            if match_start is not None and match_start >= now:
                upcoming += 1

        return {
            "generatedAt": to_iso(now),
            "reservationsThisWeek": recent,
            "totalRevenue": round(revenue, 2),
            "occupancyByCourt": occupancy,
            "topPlayers": rank_players(document, constants.LEADERBOARD_SIZE),
            "upcomingMatches": upcoming,
            "membersCount": len(document["users"]),
        }

    def reservations(self, user: CurrentUser, date: Optional[str] = None) -> List[Dict[str, Any]]:
        """All reservations, optionally for one day, with owner and participant names"""
        t('admin.dashboard.AdminDashboard.reservations')
        self._require_admin(user)
        document = self.store.read()
        rows = []
        for reservation in document["reservations"]:
            if date and reservation["date"] != date:
                continue
            reservation["ownerName"] = user_name(document, reservation["ownerId"], default="Client")
            reservation["participants"] = [
                user_name(document, participant_id)
                for participant_id in reservation.get("participants", [])
            ]
            rows.append(reservation)
        return rows

    def transactions(self, user: CurrentUser) -> List[Dict[str, Any]]:
        t('admin.dashboard.AdminDashboard.transactions')
        self._require_admin(user)
        return self.store.read()["transactions"]

    def members(self, user: CurrentUser) -> List[Dict[str, Any]]:
        t('admin.dashboard.AdminDashboard.members')
        self._require_admin(user)
        document = self.store.read()
        stats_by_user = {row["userId"]: row for row in document["playerStats"]}
        members = []
        for member in document["users"]:
            stats = stats_by_user.get(member["id"], {})
            members.append(
                {
                    "id": member["id"],
                    "name": member.get("name", ""),
                    "email": member.get("email", ""),
                    "level": member.get("level", ""),
                    "matchesPlayed": stats.get("matchesPlayed", 0),
                    "rankingPoints": stats.get("rankingPoints", 0),
                    "joinedAt": member.get("createdAt"),
                    "isAdmin": bool(member.get("isAdmin", False)),
                }
            )
        return members
