"""Persistence helpers for the club document."""

from __future__ import annotations

import json
import os
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any, Dict, Optional

from domain.errors import PersistenceFailure
from tracking import t


class DocumentRepository:
    """Read/write the whole club state to a single JSON backing file."""

    def __init__(self, file_path: str, *, logger: Any) -> None:
        t('infrastructure.repository.DocumentRepository.__init__')
        self._path = Path(file_path)
        self._logger = logger

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        t('infrastructure.repository.DocumentRepository.exists')
        return self._path.exists()

    def load(self) -> Dict[str, Any]:
        """Load the document from disk.

        Raises:
            PersistenceFailure: the file is unreadable or does not hold a JSON object.
        """

        t('infrastructure.repository.DocumentRepository.load')
        try:
            with self._path.open('r', encoding='utf-8') as handle:
                payload = json.load(handle)
        except (OSError, ValueError) as exc:
            self._logger.error("Failed to load document from %s: %s", self._path, exc)
            raise PersistenceFailure(
                "Stored club data could not be read",
                details={"path": str(self._path)},
            ) from exc

        if not isinstance(payload, dict):
            self._logger.error(
                "Invalid document format in %s; expected object, received %s",
                self._path,
                type(payload).__name__,
            )
            raise PersistenceFailure(
                "Stored club data is malformed",
                details={"path": str(self._path)},
            )

        self._logger.debug("Loaded document from %s", self._path)
        return payload

    def save(self, document: Dict[str, Any]) -> None:
        """Persist the document atomically.

        The payload goes to a temporary sibling file that replaces the target
        only once fully written, so a failed save leaves the old file intact.
        """

        t('infrastructure.repository.DocumentRepository.save')
        tmp_path: Optional[Path] = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with NamedTemporaryFile(
                'w',
                encoding='utf-8',
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix='.tmp',
                delete=False,
            ) as handle:
                tmp_path = Path(handle.name)
                json.dump(document, handle, indent=2, ensure_ascii=False)
                handle.write("\n")
                handle.flush()
                os.fsync(handle.fileno())
            tmp_path.replace(self._path)
            tmp_path = None
            self._logger.debug("Document saved to %s", self._path)
        except (OSError, TypeError, ValueError) as exc:
            self._logger.error("Failed to save document to %s: %s", self._path, exc)
            raise PersistenceFailure(
                "Club data could not be saved",
                details={"path": str(self._path)},
            ) from exc
        finally:
            if tmp_path is not None:
                try:
                    tmp_path.unlink()
                except OSError:
                    pass
