"""Runtime configuration for the club services.

Values come from the process environment, optionally pre-filled from a
``.env`` file, and are frozen into :class:`AppSettings`. Services receive the
settings object explicitly; only :func:`get_settings` touches the real
environment.
"""

from __future__ import annotations
from tracking import t

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Optional

import pytz
from dotenv import load_dotenv

TRUTHY = frozenset({"1", "true", "yes", "on"})


def _to_bool(value: Optional[str], default: bool = False) -> bool:
    t('infrastructure.settings._to_bool')
    if value is None:
        return default
    return value.strip().lower() in TRUTHY


def _checked_timezone(name: str) -> str:
    """Reject zone names pytz does not know, before any booking is priced."""
    t('infrastructure.settings._checked_timezone')
    try:
        pytz.timezone(name)
    except pytz.UnknownTimeZoneError:
        raise ValueError(f"CLUB_TIMEZONE is not a known time zone: {name!r}") from None
    return name


@dataclass(frozen=True)
class AppSettings:
    """Where the club document lives, who administers it and how it logs."""

    data_file: str
    club_name: str
    timezone: str
    admin_email: str
    admin_name: str
    payment_provider: str
    production_mode: bool
    log_directory: str


def load_settings(env: Optional[Mapping[str, str]] = None) -> AppSettings:
    """
    Build settings from ``env``, or from the process environment and ``.env``.

    Raises:
        ValueError: ``CLUB_TIMEZONE`` names an unknown zone.
    """
    t('infrastructure.settings.load_settings')
    if env is None:
        load_dotenv(override=False)
        env = os.environ

    return AppSettings(
        data_file=env.get("CLUB_DATA_FILE", "data/db.json"),
        club_name=env.get("CLUB_NAME", "Padel Paradise"),
        timezone=_checked_timezone(env.get("CLUB_TIMEZONE", "Europe/Paris")),
        admin_email=env.get("ADMIN_EMAIL", "admin@padelparadise.club").strip().lower(),
        admin_name=env.get("ADMIN_NAME", "Club Administrator"),
        payment_provider=env.get("PAYMENT_PROVIDER", "SumUp"),
        production_mode=_to_bool(env.get("PRODUCTION_MODE"), default=False),
        log_directory=env.get("LOG_DIRECTORY", "logs"),
    )


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    """Process-wide settings, read once."""
    t('infrastructure.settings.get_settings')
    return load_settings()
