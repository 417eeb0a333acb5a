"""Notification records addressed to members."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from domain.errors import NotFoundOrForbidden
from domain.models import CurrentUser
from infrastructure.document_store import DocumentStore, Snapshot, new_id
from infrastructure.time_utils import to_iso
from tracking import t


class NotificationService:
    """Create, list and acknowledge member notifications."""

    def __init__(self, store: DocumentStore) -> None:
        t('notifications.service.NotificationService.__init__')
        self.store = store
        self.logger = logging.getLogger('NotificationService')

    def create(self, user_id: str, type: str, title: str, body: str) -> Dict[str, Any]:
        """Append one unread notification for ``user_id``."""

        t('notifications.service.NotificationService.create')
        entry = {
            "id": new_id(),
            "userId": user_id,
            "type": type,
            "title": title,
            "body": body,
            "isRead": False,
            "createdAt": to_iso(),
        }

        def append(document: Snapshot) -> Dict[str, Any]:
            document["notifications"].append(entry)
            return entry

        stored = self.store.commit(append)
        self.logger.debug("Notification %s (%s) queued for %s", stored["id"], type, user_id)
        return stored

    def list_for_user(self, user: CurrentUser) -> List[Dict[str, Any]]:
        """Return the caller's notifications, newest first."""

        t('notifications.service.NotificationService.list_for_user')
        notifications = [
            item for item in self.store.read()["notifications"] if item["userId"] == user.id
        ]
        notifications.sort(key=lambda item: item["createdAt"], reverse=True)
        return notifications

    def mark_read(self, user: CurrentUser, notification_id: str) -> Dict[str, Any]:
        t('notifications.service.NotificationService.mark_read')

        def acknowledge(document: Snapshot) -> Dict[str, Any]:
            for item in document["notifications"]:
                if item["id"] == notification_id and item["userId"] == user.id:
                    item["isRead"] = True
                    item["readAt"] = to_iso()
                    return item
            raise NotFoundOrForbidden(
                "Notification not found",
                details={"notificationId": notification_id},
            )

        return self.store.commit(acknowledge)
