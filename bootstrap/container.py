"""Dependency container wiring the club services around one document store."""

from __future__ import annotations
from tracking import t

from dataclasses import dataclass
from typing import Optional

from admin.dashboard import AdminDashboard
from infrastructure.document_store import DocumentStore
from infrastructure.settings import AppSettings, get_settings
from matches.lifecycle import MatchManager
from notifications.service import NotificationService
from players.stats import PlayerStatsUpdater
from reservations.lifecycle import ReservationManager
from reservations.payments import PaymentService
from users.manager import UserManager


@dataclass
class ClubServices:
    """Every component of the booking core, sharing one store."""

    settings: AppSettings
    store: DocumentStore
    users: UserManager
    notifications: NotificationService
    stats: PlayerStatsUpdater
    payments: PaymentService
    reservations: ReservationManager
    matches: MatchManager
    admin: AdminDashboard


def build_club_services(
    settings: Optional[AppSettings] = None,
    *,
    store: Optional[DocumentStore] = None,
) -> ClubServices:
    """Construct the store and the managers that depend on it."""

    t('bootstrap.container.build_club_services')
    settings = settings or get_settings()
    store = store or DocumentStore(settings=settings)

    notifications = NotificationService(store)
    stats = PlayerStatsUpdater(store)
    return ClubServices(
        settings=settings,
        store=store,
        users=UserManager(store),
        notifications=notifications,
        stats=stats,
        payments=PaymentService(store, provider=settings.payment_provider),
        reservations=ReservationManager(store, stats=stats, notifier=notifications),
        matches=MatchManager(store, stats=stats, notifier=notifications),
        admin=AdminDashboard(store),
    )
