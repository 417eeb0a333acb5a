"""Ranking points, win/loss records and achievements for club players."""

from __future__ import annotations
from tracking import t

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional

from infrastructure import constants
from infrastructure.document_store import DocumentStore, Snapshot, initial_stats_row
from infrastructure.time_utils import to_iso
from users.manager import user_name


@dataclass
class PlayerStats:
    """Mutable counters for one player, mirrored to a ``playerStats`` row."""

    user_id: str
    matches_played: int = 0
    wins: int = 0
    losses: int = 0
    total_play_time_minutes: int = 0
    ranking_points: int = constants.INITIAL_RANKING_POINTS
    streak: int = 0
    achievements: List[str] = field(default_factory=list)

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "PlayerStats":
        return cls(
            user_id=record["userId"],
            matches_played=record.get("matchesPlayed", 0),
            wins=record.get("wins", 0),
            losses=record.get("losses", 0),
            total_play_time_minutes=record.get("totalPlayTimeMinutes", 0),
            ranking_points=record.get("rankingPoints", constants.INITIAL_RANKING_POINTS),
            streak=record.get("streak", 0),
            achievements=list(record.get("achievements", [])),
        )

    def apply_to(self, record: Dict[str, Any]) -> Dict[str, Any]:
        record.update(
            {
                "matchesPlayed": self.matches_played,
                "wins": self.wins,
                "losses": self.losses,
                "totalPlayTimeMinutes": self.total_play_time_minutes,
                "rankingPoints": self.ranking_points,
                "streak": self.streak,
                "achievements": list(self.achievements),
                "updatedAt": to_iso(),
            }
        )
        return record

    def record_play_time(self, duration_minutes: int) -> None:
        t('players.stats.PlayerStats.record_play_time')
        self.total_play_time_minutes += duration_minutes
        self.ranking_points += round(duration_minutes / 30)
        if self.total_play_time_minutes >= constants.HABITUE_MINUTES:
            self.grant(constants.ACHIEVEMENT_HABITUE)

    def record_win(self) -> None:
        t('players.stats.PlayerStats.record_win')
        self.matches_played += 1
        self.wins += 1
        self.ranking_points += constants.WIN_POINTS
        self.streak += 1
        self._check_match_achievements()

    def record_loss(self) -> None:
        t('players.stats.PlayerStats.record_loss')
        self.matches_played += 1
        self.losses += 1
        self.ranking_points = max(
            constants.RANKING_FLOOR, self.ranking_points - constants.LOSS_POINTS
        )
        self.streak = 0
        self._check_match_achievements()

    def grant(self, achievement: str) -> bool:
        """Add an achievement once; returns False if it was already held."""
        if achievement in self.achievements:
            return False
        self.achievements.append(achievement)
        return True

    @property
    def win_rate(self) -> float:
        if self.matches_played == 0:
            return 0.0
        return self.wins / self.matches_played

    def _check_match_achievements(self) -> None:
        if self.matches_played >= constants.VETERAN_MATCHES:
            self.grant(constants.ACHIEVEMENT_VETERAN)
        if self.win_rate >= constants.CHAMPION_WIN_RATE:
            self.grant(constants.ACHIEVEMENT_CHAMPION)


def stats_row_for(document: Snapshot, user_id: str) -> Dict[str, Any]:
    """Return the player's stats row, creating it lazily inside ``document``."""

    t('players.stats.stats_row_for')
    for row in document["playerStats"]:
        if row["userId"] == user_id:
            return row
    row = initial_stats_row(user_id)
    document["playerStats"].append(row)
    return row


class PlayerStatsUpdater:
    """Derives rankings and achievements from completed bookings and matches."""

    def __init__(self, store: DocumentStore) -> None:
        t('players.stats.PlayerStatsUpdater.__init__')
        self.store = store
        self.logger = logging.getLogger('PlayerStatsUpdater')

    def after_reservation(self, reservation: Mapping[str, Any]) -> List[Dict[str, Any]]:
        """Credit play time and points to every participant of a booking."""

        t('players.stats.PlayerStatsUpdater.after_reservation')
        participants = list(reservation.get("participants") or [])
        duration = reservation.get("durationMinutes") or constants.DEFAULT_DURATION_MINUTES

        def update(document: Snapshot) -> List[Dict[str, Any]]:
            rows = []
            for user_id in participants:
                row = stats_row_for(document, user_id)
                stats = PlayerStats.from_record(row)
                stats.record_play_time(duration)
                rows.append(stats.apply_to(row))
            return rows

        rows = self.store.commit(update)
        self.logger.info(
            "Play time +%s min credited to %s players for reservation %s",
            duration,
            len(rows),
            reservation.get("id"),
        )
        return rows

    def after_match(
        self,
        player_ids: Iterable[str],
        winners: Iterable[str],
        *,
        match_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Apply a published result to every player of the match."""

        t('players.stats.PlayerStatsUpdater.after_match')
        players = list(dict.fromkeys(player_ids))
        winner_set = set(winners or [])

        def update(document: Snapshot) -> List[Dict[str, Any]]:
            rows = []
            for user_id in players:
                row = stats_row_for(document, user_id)
                stats = PlayerStats.from_record(row)
                if user_id in winner_set:
                    stats.record_win()
                else:
                    stats.record_loss()
                rows.append(stats.apply_to(row))
            return rows

        rows = self.store.commit(update)
        self.logger.info(
            "Match %s result applied: %s winners among %s players",
            match_id,
            len(winner_set & set(players)),
            len(players),
        )
        return rows

    def get_stats(self, user_id: str) -> Dict[str, Any]:
        """Return the stored row, or the initial values if none exists yet."""

        t('players.stats.PlayerStatsUpdater.get_stats')
        for row in self.store.read()["playerStats"]:
            if row["userId"] == user_id:
                return row
        return PlayerStats(user_id=user_id).apply_to({"userId": user_id})

    def leaderboard(self, limit: int = constants.LEADERBOARD_SIZE) -> List[Dict[str, Any]]:
        t('players.stats.PlayerStatsUpdater.leaderboard')
        return rank_players(self.store.read(), limit)


def rank_players(document: Snapshot, limit: int = constants.LEADERBOARD_SIZE) -> List[Dict[str, Any]]:
    """Top players by ranking points with their win rate in percent."""

    t('players.stats.rank_players')
    ranked = sorted(document["playerStats"], key=lambda row: row["rankingPoints"], reverse=True)
    board = []
    for row in ranked[:limit]:
        played = row.get("matchesPlayed", 0)
        board.append(
            {
                "userId": row["userId"],
                "name": user_name(document, row["userId"], default="Unknown player"),
                "rankingPoints": row["rankingPoints"],
                "matchesPlayed": played,
                "winRate": round(row.get("wins", 0) / played * 100) if played else 0,
            }
        )
    return board
