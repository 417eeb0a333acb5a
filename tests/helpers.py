"""Shared fakes and utilities for unit tests."""

from __future__ import annotations
from tracking import t

from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from bootstrap.container import ClubServices, build_club_services
from domain.errors import PersistenceFailure
from domain.models import CurrentUser
from infrastructure.document_store import DocumentStore
from infrastructure.repository import DocumentRepository
from infrastructure.settings import AppSettings, load_settings


class DummyLogger:
    """Lightweight stand-in for ``logging.Logger`` that records calls."""

    def __init__(self) -> None:
        self.records: List[Tuple[str, Tuple[Any, ...], Dict[str, Any]]] = []

    def _record(self, level: str, *args: Any, **kwargs: Any) -> None:
        self.records.append((level, args, kwargs))

    def debug(self, *args: Any, **kwargs: Any) -> None:
        self._record("debug", *args, **kwargs)

    def info(self, *args: Any, **kwargs: Any) -> None:
        self._record("info", *args, **kwargs)

    def warning(self, *args: Any, **kwargs: Any) -> None:
        self._record("warning", *args, **kwargs)

    def error(self, *args: Any, **kwargs: Any) -> None:
        self._record("error", *args, **kwargs)

    def exception(self, *args: Any, **kwargs: Any) -> None:
        self._record("exception", *args, **kwargs)

    def levels(self) -> List[str]:
        return [level for level, _, _ in self.records]

    def last(self, level: Optional[str] = None) -> Optional[Tuple[str, Tuple[Any, ...], Dict[str, Any]]]:
        """Return the most recent record, optionally filtered by level."""
        for entry in reversed(self.records):
            if level is None or entry[0] == level:
                return entry
        return None


class FailingRepository(DocumentRepository):
    """Repository whose saves start failing once ``fail`` is switched on."""

    def __init__(self, file_path: str) -> None:
        super().__init__(file_path, logger=DummyLogger())
        self.fail = False
        self.save_attempts = 0

    def save(self, document: Dict[str, Any]) -> None:
        self.save_attempts += 1
        if self.fail:
            raise PersistenceFailure("disk unavailable")
        super().save(document)


class ExplodingNotifier:
    """Notifier that always raises, to exercise best-effort side effects."""

    def __init__(self) -> None:
        self.calls = 0

    def create(self, user_id: str, type: str, title: str, body: str) -> None:
        self.calls += 1
        raise RuntimeError("notification backend down")


class ExplodingStats:
    def __init__(self) -> None:
        self.calls = 0

    def after_reservation(self, reservation: Any) -> None:
        self.calls += 1
        raise RuntimeError("stats backend down")

    def after_match(self, player_ids: Any, winners: Any, *, match_id: Any = None) -> None:
        self.calls += 1
        raise RuntimeError("stats backend down")


def make_settings(tmp_path: Path, **overrides: str) -> AppSettings:
    t('tests.helpers.make_settings')
    env = {
        "CLUB_DATA_FILE": str(tmp_path / "data" / "db.json"),
        "CLUB_TIMEZONE": "Europe/Paris",
        "LOG_DIRECTORY": str(tmp_path / "logs"),
    }
    env.update(overrides)
    return load_settings(env)


def make_store(tmp_path: Path, repository: Optional[DocumentRepository] = None) -> DocumentStore:
    t('tests.helpers.make_store')
    return DocumentStore(repository=repository, settings=make_settings(tmp_path))


def make_services(tmp_path: Path) -> ClubServices:
    t('tests.helpers.make_services')
    return build_club_services(make_settings(tmp_path))


def add_player(services: ClubServices, email: str, name: str) -> CurrentUser:
    """Register a member and return their request identity."""
    t('tests.helpers.add_player')
    profile = services.users.add_member(email, name)
    return CurrentUser.from_record(profile)


def admin_user(services: ClubServices) -> CurrentUser:
    t('tests.helpers.admin_user')
    admin = services.users.find_by_email(services.settings.admin_email)
    return CurrentUser.from_record(admin)
