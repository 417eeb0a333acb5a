"""In-app notifications stored alongside the club document."""

from .service import NotificationService

__all__ = ["NotificationService"]
