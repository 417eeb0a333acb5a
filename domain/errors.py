"""Typed failures raised by the club services.

The HTTP boundary maps each kind to a status code through ``status_code``;
the services themselves never deal with transport concerns.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ClubError(Exception):
    """Base class for every failure surfaced to callers."""

    status_code = 500

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})

    @property
    def kind(self) -> str:
        return type(self).__name__

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"error": self.kind, "message": self.message}
        if self.details:
            payload["details"] = dict(self.details)
        return payload


class ValidationError(ClubError):
    """Malformed or missing input, rejected before the store is read."""

    status_code = 400


class SlotConflict(ClubError):
    """The requested interval overlaps a live reservation on the same court."""

    status_code = 409


class NotFoundOrForbidden(ClubError):
    """Missing target or caller without rights; the two are not distinguished."""

    status_code = 404


class MatchNotFound(ClubError):
    status_code = 404


class MatchPrivate(ClubError):
    status_code = 403


class MatchFull(ClubError):
    status_code = 409


class MatchClosed(ClubError):
    """The match already has a published result."""

    status_code = 409


class PersistenceFailure(ClubError):
    """The document could not be read or written; prior state is kept."""

    status_code = 500


__all__ = [
    "ClubError",
    "ValidationError",
    "SlotConflict",
    "NotFoundOrForbidden",
    "MatchNotFound",
    "MatchPrivate",
    "MatchFull",
    "MatchClosed",
    "PersistenceFailure",
]
