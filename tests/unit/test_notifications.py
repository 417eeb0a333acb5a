from tracking import t

import pytest

from domain.errors import NotFoundOrForbidden
from tests.helpers import add_player, make_services


def test_notifications_are_listed_newest_first_per_user(tmp_path):
    t('tests.unit.test_notifications.test_notifications_are_listed_newest_first_per_user')
    services = make_services(tmp_path)
    ana = add_player(services, "ana@example.com", "Ana")
    bruno = add_player(services, "bruno@example.com", "Bruno")

    services.notifications.create(ana.id, "reservation", "First", "one")
    services.notifications.create(bruno.id, "match", "Other", "two")
    services.store.commit(
        lambda document: document["notifications"].append(
            {
                "id": "later",
                "userId": ana.id,
                "type": "match",
                "title": "Second",
                "body": "three",
                "isRead": False,
                "createdAt": "2999-01-01T00:00:00Z",
            }
        )
    )

    titles = [item["title"] for item in services.notifications.list_for_user(ana)]

    assert titles == ["Second", "First"]


def test_mark_read_only_for_recipient(tmp_path):
    t('tests.unit.test_notifications.test_mark_read_only_for_recipient')
    services = make_services(tmp_path)
    ana = add_player(services, "ana@example.com", "Ana")
    bruno = add_player(services, "bruno@example.com", "Bruno")
    note = services.notifications.create(ana.id, "reservation", "Booked", "court 1")

    with pytest.raises(NotFoundOrForbidden):
        services.notifications.mark_read(bruno, note["id"])

    updated = services.notifications.mark_read(ana, note["id"])

    assert updated["isRead"] is True
    assert updated["readAt"]
    assert services.notifications.list_for_user(ana)[0]["isRead"] is True
