"""
Match Lifecycle Module

Open games players organise among themselves. A match is ``scheduled`` until
its creator publishes a result, which moves it to ``completed`` for good and
feeds the result to the player stats.
"""
from tracking import t

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol

from domain.errors import (
    MatchClosed,
    MatchFull,
    MatchNotFound,
    MatchPrivate,
    NotFoundOrForbidden,
    ValidationError,
)
from domain.models import CurrentUser, JoinOutcome, MatchRequest
from domain.validation import (
    clamp,
    clamp_duration,
    coerce_int,
    coerce_number,
    ensure_list,
    require_iso_moment,
    require_start_hour,
    sanitize_string,
)
from infrastructure import constants
from infrastructure.document_store import DocumentStore, Snapshot, new_id
from infrastructure.time_utils import to_iso
from reservations.lifecycle import Notifier, clamp_court, courts_from_settings
from users.manager import user_name


class MatchStatsHook(Protocol):
    def after_match(self, player_ids: Iterable[str], winners: Iterable[str], *, match_id: Optional[str] = None) -> Any:
        ...


def parse_match_request(payload: Mapping[str, Any]) -> MatchRequest:
    """
    Validate match input; numeric fields fall back to defaults and are clamped.

    Raises:
        ValidationError: missing title, malformed date, a start time off the
            half hour or past midnight, or unknown skill tiers.
    """
    t('matches.lifecycle.parse_match_request')
    title = sanitize_string(payload.get("title"))
    if not title or not payload.get("matchDate"):
        raise ValidationError("Match title and date are required")
    match_date = require_iso_moment(payload.get("matchDate"), "matchDate")

    min_level = sanitize_string(payload.get("minLevel"), constants.DEFAULT_MIN_LEVEL).lower()
    max_level = sanitize_string(payload.get("maxLevel"), constants.DEFAULT_MAX_LEVEL).lower()
    try:
        min_rank = constants.skill_rank(min_level)
        max_rank = constants.skill_rank(max_level)
    except ValueError:
        raise ValidationError(
            "Unknown skill level",
            details={"minLevel": min_level, "maxLevel": max_level, "levels": list(constants.SKILL_LEVELS)},
        ) from None
    if min_rank > max_rank:
        raise ValidationError(
            "Minimum level is above maximum level",
            details={"minLevel": min_level, "maxLevel": max_level},
        )

    duration = clamp_duration(
        payload.get("durationMinutes"),
        constants.MIN_DURATION_MINUTES,
        constants.MAX_DURATION_MINUTES,
        constants.DEFAULT_MATCH_DURATION_MINUTES,
    )
    start_hour = payload.get("startHour")
    if coerce_number(start_hour) is None:
        start_hour = constants.DEFAULT_MATCH_START_HOUR
    return MatchRequest(
        title=title,
        description=sanitize_string(payload.get("description")),
        match_date=match_date,
        start_hour=require_start_hour(start_hour, duration),
        duration_minutes=duration,
        court_number=coerce_int(payload.get("courtNumber"), 1),
        is_public=bool(payload.get("isPublic", True)),
        min_level=min_level,
        max_level=max_level,
        max_players=int(
            clamp(
                coerce_int(payload.get("maxPlayers"), constants.DEFAULT_MATCH_PLAYERS),
                constants.MIN_MATCH_PLAYERS,
                constants.MAX_MATCH_PLAYERS,
            )
        ),
    )


def _find_match(document: Snapshot, match_id: str) -> Dict[str, Any]:
    for match in document["matches"]:
        if match["id"] == match_id:
            return match
    raise MatchNotFound("Match not found", details={"matchId": match_id})


def players_of(document: Snapshot, match_id: str) -> List[Dict[str, Any]]:
    t('matches.lifecycle.players_of')
    return [row for row in document["matchPlayers"] if row["matchId"] == match_id]


def _player_row(match_id: str, user_id: str, role: str) -> Dict[str, Any]:
    return {
        "id": new_id(),
        "matchId": match_id,
        "userId": user_id,
        "role": role,
        "status": constants.PLAYER_CONFIRMED,
        "joinedAt": to_iso(),
    }


class MatchManager:
    """
    Creates matches and manages their players, chat and result.

    Attributes:
        store (DocumentStore): Shared club document
        stats (MatchStatsHook): Receives published results
        notifier (Notifier): Tells creators when someone joins
        logger (logging.Logger): Logger instance for this class
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        stats: Optional[MatchStatsHook] = None,
        notifier: Optional[Notifier] = None,
    ) -> None:
        t('matches.lifecycle.MatchManager.__init__')
        self.store = store
        self.stats = stats
        self.notifier = notifier
        self.logger = logging.getLogger('MatchManager')

    def create(self, user: CurrentUser, payload: Mapping[str, Any]) -> Dict[str, Any]:
        """Create a match with its creator as the first confirmed player."""
        t('matches.lifecycle.MatchManager.create')
        request = parse_match_request(payload)

        def create_match(document: Snapshot) -> Dict[str, Any]:
            court = clamp_court(request.court_number, courts_from_settings(document["settings"]))
            match = {
                "id": new_id(),
                "creatorId": user.id,
                "title": request.title,
                "description": request.description,
                "matchDate": request.match_date,
                "startHour": request.start_hour,
                "durationMinutes": request.duration_minutes,
                "courtNumber": court,
                "isPublic": request.is_public,
                "minLevel": request.min_level,
                "maxLevel": request.max_level,
                "maxPlayers": request.max_players,
                "createdAt": to_iso(),
                "status": constants.MATCH_SCHEDULED,
            }
            document["matches"].append(match)
            document["matchPlayers"].append(_player_row(match["id"], user.id, constants.ROLE_OWNER))
            return match

        match = self.store.commit(create_match)
        self.logger.info(
            "Match %s '%s' created by %s for %s (max %s players)",
            match["id"],
            match["title"],
            user.id,
            match["matchDate"],
            match["maxPlayers"],
        )
        return match

    def join(self, user: CurrentUser, match_id: str) -> JoinOutcome:
        """
        Add the caller to a public match.

        Joining twice is a successful no-op reported through
        ``JoinOutcome.already_joined``.

        Raises:
            MatchNotFound, MatchPrivate, MatchClosed, MatchFull
        """
        t('matches.lifecycle.MatchManager.join')

        def add_player(document: Snapshot) -> Dict[str, Any]:
            match = _find_match(document, match_id)
            if not match.get("isPublic", True):
                raise MatchPrivate("This match is private", details={"matchId": match_id})
            players = players_of(document, match_id)
            if any(row["userId"] == user.id for row in players):
                return {"match": match, "joined": False}
            if match["status"] == constants.MATCH_COMPLETED:
                raise MatchClosed("This match is already completed", details={"matchId": match_id})
            confirmed = [row for row in players if row["status"] == constants.PLAYER_CONFIRMED]
            if len(confirmed) >= match["maxPlayers"]:
                raise MatchFull(
                    "This match is full",
                    details={"matchId": match_id, "maxPlayers": match["maxPlayers"]},
                )
            document["matchPlayers"].append(_player_row(match_id, user.id, constants.ROLE_PLAYER))
            return {"match": match, "joined": True}

        outcome = self.store.commit(add_player)
        match = outcome["match"]
        if not outcome["joined"]:
            self.logger.debug("User %s already in match %s", user.id, match_id)
            return JoinOutcome(match_id=match_id, already_joined=True)

        self.logger.info("User %s joined match %s", user.id, match_id)
        self._notify(
            match["creatorId"],
            "match",
            "New player joined",
            f"{user.name} joined your match {match['title']}",
        )
        return JoinOutcome(match_id=match_id)

    def leave(self, user: CurrentUser, match_id: str) -> bool:
        """
        Remove the caller's player row.

        The creator's row is tagged ``owner`` and never removed here.

        Returns:
            True if a row was removed
        """
        t('matches.lifecycle.MatchManager.leave')

        def remove_player(document: Snapshot) -> bool:
            match = _find_match(document, match_id)
            if match["status"] == constants.MATCH_COMPLETED:
                raise MatchClosed("This match is already completed", details={"matchId": match_id})
            before = len(document["matchPlayers"])
            document["matchPlayers"] = [
                row
                for row in document["matchPlayers"]
                if not (
                    row["matchId"] == match_id
                    and row["userId"] == user.id
                    and row.get("role") != constants.ROLE_OWNER
                )
            ]
            return len(document["matchPlayers"]) < before

        removed = self.store.commit(remove_player)
        if removed:
            self.logger.info("User %s left match %s", user.id, match_id)
        return removed

    def post_message(self, user: CurrentUser, match_id: str, content: Any) -> Dict[str, Any]:
        """Append a chat message; only current players may write."""
        t('matches.lifecycle.MatchManager.post_message')
        text = sanitize_string(content)
        if not text:
            raise ValidationError("Message is empty")

        def append(document: Snapshot) -> Dict[str, Any]:
            _find_match(document, match_id)
            if not any(row["userId"] == user.id for row in players_of(document, match_id)):
                raise NotFoundOrForbidden(
                    "You must be playing in this match to post messages",
                    details={"matchId": match_id},
                )
            message = {
                "id": new_id(),
                "matchId": match_id,
                "senderId": user.id,
                "senderName": user.name,
                "content": text,
                "createdAt": to_iso(),
            }
            document["messages"].append(message)
            return message

        return self.store.commit(append)

    def list_messages(self, user: CurrentUser, match_id: str) -> List[Dict[str, Any]]:
        t('matches.lifecycle.MatchManager.list_messages')
        messages = []
        for message in self.store.read()["messages"]:
            if message["matchId"] != match_id:
                continue
            message["canDelete"] = message["senderId"] == user.id
            messages.append(message)
        return messages

    def publish_result(self, user: CurrentUser, match_id: str, winners: Any) -> Dict[str, Any]:
        """
        Close the match with its winners and update every player's stats.

        An empty winner list is accepted and records a loss for every player.

        Raises:
            NotFoundOrForbidden: unknown match or caller is not the creator
            ValidationError: winners are not all players of the match
            MatchClosed: a result was already published
        """
        t('matches.lifecycle.MatchManager.publish_result')
        winner_ids = list(dict.fromkeys(w for w in ensure_list(winners) if isinstance(w, str)))

        def complete(document: Snapshot) -> Dict[str, Any]:
            match = next((item for item in document["matches"] if item["id"] == match_id), None)
            if match is None or match["creatorId"] != user.id:
                raise NotFoundOrForbidden(
                    "Only the match creator can publish the result",
                    details={"matchId": match_id},
                )
            if match["status"] == constants.MATCH_COMPLETED:
                raise MatchClosed("A result was already published", details={"matchId": match_id})
            player_ids = [row["userId"] for row in players_of(document, match_id)]
            outsiders = [winner for winner in winner_ids if winner not in player_ids]
            if outsiders:
                raise ValidationError(
                    "Winners must be players of the match",
                    details={"unknownWinners": outsiders},
                )
            match["status"] = constants.MATCH_COMPLETED
            match["result"] = {"winners": winner_ids}
            match["completedAt"] = to_iso()
            return {"match": match, "players": player_ids}

        outcome = self.store.commit(complete)
        match = outcome["match"]
        self.logger.info(
            "Match %s completed by %s with winners %s", match_id, user.id, winner_ids
        )

        if self.stats is not None:
            try:
                self.stats.after_match(outcome["players"], winner_ids, match_id=match_id)
            except Exception:
                self.logger.exception("Stats update failed after match %s", match_id)
        return match

    def list_for_user(self, user: CurrentUser) -> List[Dict[str, Any]]:
        """Matches with players, the caller's membership and recent chat."""
        t('matches.lifecycle.MatchManager.list_for_user')
        document = self.store.read()
        listing = []
        for match in document["matches"]:
            rows = players_of(document, match["id"])
            match["participants"] = [
                {
                    "id": row["id"],
                    "userId": row["userId"],
                    "role": row.get("role", constants.ROLE_PLAYER),
                    "status": row["status"],
                    "name": user_name(document, row["userId"]),
                }
                for row in rows
            ]
            match["joined"] = any(row["userId"] == user.id for row in rows)
            match["isOwner"] = match["creatorId"] == user.id
            messages = [item for item in document["messages"] if item["matchId"] == match["id"]]
            match["messages"] = messages[-constants.RECENT_MESSAGES_LIMIT:]
            listing.append(match)
        return listing

    def get_match(self, match_id: str) -> Dict[str, Any]:
        t('matches.lifecycle.MatchManager.get_match')
        return _find_match(self.store.read(), match_id)

    def _notify(self, user_id: str, type: str, title: str, body: str) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.create(user_id, type, title, body)
        except Exception:
            self.logger.exception("Notification to %s failed", user_id)
