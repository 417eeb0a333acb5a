"""Bootstrap helpers for wiring club services together."""

from .container import ClubServices, build_club_services

__all__ = ["ClubServices", "build_club_services"]
