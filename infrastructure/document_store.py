"""
Document Store

Holds the entire club state as one JSON document mirrored to disk. Reads hand
out copies of the last committed snapshot; every mutation goes through
:meth:`DocumentStore.commit`, which runs under one lock so the read, the
mutation and the write form a single indivisible step.
"""
from tracking import t

import copy
import logging
import threading
import uuid
from typing import Any, Callable, Dict, Optional, TypeVar

from infrastructure import constants
from infrastructure.repository import DocumentRepository
from infrastructure.settings import AppSettings, get_settings
from infrastructure.time_utils import to_iso

Snapshot = Dict[str, Any]
T = TypeVar("T")


def new_id() -> str:
    """Return a fresh opaque identifier."""
    t('infrastructure.document_store.new_id')
    return uuid.uuid4().hex


def initial_stats_row(user_id: str) -> Dict[str, Any]:
    """Return the stats row every player starts from."""
    t('infrastructure.document_store.initial_stats_row')
    return {
        "id": new_id(),
        "userId": user_id,
        "matchesPlayed": 0,
        "wins": 0,
        "losses": 0,
        "totalPlayTimeMinutes": 0,
        "rankingPoints": constants.INITIAL_RANKING_POINTS,
        "streak": 0,
        "achievements": [],
        "updatedAt": to_iso(),
    }


def build_default_document(settings: AppSettings) -> Snapshot:
    """Build the document written when no persisted state exists yet."""
    t('infrastructure.document_store.build_default_document')
    admin_id = new_id()
    now = to_iso()
    document: Snapshot = {name: [] for name in constants.DOCUMENT_COLLECTIONS}
    document["users"].append(
        {
            "id": admin_id,
            "email": settings.admin_email,
            "name": settings.admin_name,
            "level": "administrator",
            "isAdmin": True,
            "createdAt": now,
            "updatedAt": now,
        }
    )
    document["playerStats"].append(initial_stats_row(admin_id))
    document["documents"].append(
        {
            "id": new_id(),
            "title": "Administrator guide",
            "type": "link",
            "url": constants.ADMIN_GUIDE_URL,
            "createdAt": now,
        }
    )
    document["settings"] = {
        "clubName": settings.club_name,
        "timezone": settings.timezone,
        "courts": copy.deepcopy(constants.DEFAULT_COURTS),
        "openingHours": dict(constants.DEFAULT_OPENING_HOURS),
        "pricing": dict(constants.DEFAULT_TARIFF),
    }
    return document


class DocumentStore:
    """
    Atomic read-modify-write access to the persisted club document.

    Attributes:
        repository (DocumentRepository): Backing file access
        settings (AppSettings): Used to seed a fresh document
        logger (logging.Logger): Logger instance for this class
    """

    def __init__(
        self,
        repository: Optional[DocumentRepository] = None,
        settings: Optional[AppSettings] = None,
    ) -> None:
        t('infrastructure.document_store.DocumentStore.__init__')
        self.logger = logging.getLogger('DocumentStore')
        self.settings = settings or get_settings()
        self.repository = repository or DocumentRepository(
            self.settings.data_file, logger=self.logger
        )
        self._lock = threading.RLock()
        self._snapshot: Optional[Snapshot] = None
        self._commit_count = 0
        self._committing = False

    @property
    def commit_count(self) -> int:
        return self._commit_count

    def read(self) -> Snapshot:
        """Return a private copy of the last committed snapshot."""
        t('infrastructure.document_store.DocumentStore.read')
        with self._lock:
            return copy.deepcopy(self._current())

    def commit(self, mutator: Callable[[Snapshot], T]) -> T:
        """
        Apply ``mutator`` to a fresh copy of the state and persist the result.

        The new snapshot becomes authoritative only after it is durably
        written. Any exception from ``mutator`` or from the write aborts the
        commit and leaves the previous snapshot in place.

        Returns:
            A copy of whatever ``mutator`` returned.

        Raises:
            RuntimeError: ``mutator`` called ``commit`` again.
        """
        t('infrastructure.document_store.DocumentStore.commit')
        with self._lock:
            if self._committing:
                raise RuntimeError("DocumentStore.commit called from inside a mutator")
            self._committing = True
            try:
                working = copy.deepcopy(self._current())
                result = mutator(working)
                self.repository.save(working)
                self._snapshot = working
                self._commit_count += 1
            finally:
                self._committing = False
            self.logger.debug("Commit %s persisted", self._commit_count)
            return copy.deepcopy(result)

    def _current(self) -> Snapshot:
        if self._snapshot is None:
            self._snapshot = self._load_or_seed()
        return self._snapshot

    def _load_or_seed(self) -> Snapshot:
        t('infrastructure.document_store.DocumentStore._load_or_seed')
        if not self.repository.exists():
            document = build_default_document(self.settings)
            self.repository.save(document)
            self.logger.info(
                "Seeded new club document at %s with %s courts",
                self.repository.path,
                len(document["settings"]["courts"]),
            )
            return document

        document = self.repository.load()
        repaired = self._normalise_document(document)
        if repaired:
            self.logger.warning(
                "Added %s missing sections to document %s", repaired, self.repository.path
            )
            self.repository.save(document)
        self.logger.info(
            "Document loaded from %s: %s users, %s reservations, %s matches",
            self.repository.path,
            len(document["users"]),
            len(document["reservations"]),
            len(document["matches"]),
        )
        return document

    def _normalise_document(self, document: Snapshot) -> int:
        """Add collections or settings missing from an older document."""
        repaired = 0
        for name in constants.DOCUMENT_COLLECTIONS:
            if not isinstance(document.get(name), list):
                document[name] = []
                repaired += 1
        if not isinstance(document.get("settings"), dict):
            document["settings"] = build_default_document(self.settings)["settings"]
            repaired += 1
        return repaired


__all__ = [
    "DocumentStore",
    "Snapshot",
    "build_default_document",
    "initial_stats_row",
    "new_id",
]
