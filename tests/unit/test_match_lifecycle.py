from tracking import t

import pytest

from domain.errors import (
    MatchClosed,
    MatchFull,
    MatchNotFound,
    MatchPrivate,
    NotFoundOrForbidden,
    ValidationError,
)
from matches.lifecycle import MatchManager, parse_match_request
from tests.helpers import ExplodingStats, add_player, make_services


def _match_payload(**overrides):
    payload = {"title": "Friday doubles", "matchDate": "2024-06-07"}
    payload.update(overrides)
    return payload


@pytest.fixture
def services(tmp_path):
    t('tests.unit.test_match_lifecycle.services')
    return make_services(tmp_path)


@pytest.fixture
def players(services):
    t('tests.unit.test_match_lifecycle.players')
    return [
        add_player(services, f"player{index}@example.com", f"Player {index}")
        for index in range(1, 6)
    ]


def test_parse_match_request_applies_defaults():
    t('tests.unit.test_match_lifecycle.test_parse_match_request_applies_defaults')
    request = parse_match_request(_match_payload())

    assert request.start_hour == 18
    assert request.duration_minutes == 90
    assert request.max_players == 4
    assert request.court_number == 1
    assert request.is_public is True
    assert (request.min_level, request.max_level) == ("beginner", "advanced")


def test_parse_match_request_validates_start_hour_like_bookings():
    assert parse_match_request(_match_payload(startHour="19.5")).start_hour == 19.5
    assert parse_match_request(_match_payload(startHour=0)).start_hour == 0
    assert parse_match_request(_match_payload(startHour="")).start_hour == 18

    for bad in (37.3, 18.25, 23, -1):
        with pytest.raises(ValidationError):
            parse_match_request(_match_payload(startHour=bad))


def test_parse_match_request_clamps_players():
    assert parse_match_request(_match_payload(maxPlayers=1)).max_players == 2
    assert parse_match_request(_match_payload(maxPlayers=40)).max_players == 8


@pytest.mark.parametrize(
    "overrides",
    [
        {"title": "  "},
        {"matchDate": None},
        {"matchDate": "next friday"},
        {"minLevel": "pro"},
        {"minLevel": "expert", "maxLevel": "beginner"},
    ],
)
def test_parse_match_request_rejects_bad_input(overrides):
    with pytest.raises(ValidationError):
        parse_match_request(_match_payload(**overrides))


def test_creator_is_first_player_with_owner_role(services, players):
    t('tests.unit.test_match_lifecycle.test_creator_is_first_player_with_owner_role')
    creator = players[0]

    match = services.matches.create(creator, _match_payload(courtNumber=9))

    assert match["status"] == "scheduled"
    assert match["creatorId"] == creator.id
    assert match["courtNumber"] == 4
    rows = services.store.read()["matchPlayers"]
    assert len(rows) == 1
    assert rows[0]["userId"] == creator.id
    assert rows[0]["role"] == "owner"
    assert rows[0]["status"] == "confirmed"


def test_join_until_full(services, players):
    t('tests.unit.test_match_lifecycle.test_join_until_full')
    creator, second, third, fourth, fifth = players
    match = services.matches.create(creator, _match_payload(maxPlayers=4))

    for player in (second, third, fourth):
        outcome = services.matches.join(player, match["id"])
        assert outcome.already_joined is False

    with pytest.raises(MatchFull):
        services.matches.join(fifth, match["id"])

    rows = [row for row in services.store.read()["matchPlayers"] if row["matchId"] == match["id"]]
    assert len(rows) == 4
    assert fifth.id not in {row["userId"] for row in rows}


def test_joining_twice_is_a_no_op(services, players):
    creator, second = players[:2]
    match = services.matches.create(creator, _match_payload())
    services.matches.join(second, match["id"])

    outcome = services.matches.join(second, match["id"])

    assert outcome.already_joined is True
    rows = [row for row in services.store.read()["matchPlayers"] if row["userId"] == second.id]
    assert len(rows) == 1


def test_creator_joining_own_full_match_is_a_no_op(services, players):
    creator, second = players[:2]
    match = services.matches.create(creator, _match_payload(maxPlayers=2))
    services.matches.join(second, match["id"])

    assert services.matches.join(creator, match["id"]).already_joined is True


def test_join_notifies_creator(services, players):
    creator, second = players[:2]
    match = services.matches.create(creator, _match_payload())

    services.matches.join(second, match["id"])

    notes = services.notifications.list_for_user(creator)
    assert [note["type"] for note in notes] == ["match"]
    assert "Player 2" in notes[0]["body"]


def test_private_and_unknown_matches_cannot_be_joined(services, players):
    creator, second = players[:2]
    match = services.matches.create(creator, _match_payload(isPublic=False))

    with pytest.raises(MatchPrivate) as excinfo:
        services.matches.join(second, match["id"])
    assert excinfo.value.status_code == 403

    with pytest.raises(MatchNotFound):
        services.matches.join(second, "missing")


def test_leave_removes_player_but_never_the_owner(services, players):
    t('tests.unit.test_match_lifecycle.test_leave_removes_player_but_never_the_owner')
    creator, second = players[:2]
    match = services.matches.create(creator, _match_payload())
    services.matches.join(second, match["id"])

    assert services.matches.leave(second, match["id"]) is True
    assert services.matches.leave(second, match["id"]) is False
    assert services.matches.leave(creator, match["id"]) is False

    rows = services.store.read()["matchPlayers"]
    assert [row["userId"] for row in rows] == [creator.id]

    with pytest.raises(MatchNotFound):
        services.matches.leave(second, "missing")


def test_messages_require_membership_and_content(services, players):
    creator, second, outsider = players[:3]
    match = services.matches.create(creator, _match_payload())
    services.matches.join(second, match["id"])

    message = services.matches.post_message(second, match["id"], "  See you there  ")
    assert message["content"] == "See you there"
    assert message["senderName"] == "Player 2"

    with pytest.raises(ValidationError):
        services.matches.post_message(second, match["id"], "   ")
    with pytest.raises(NotFoundOrForbidden):
        services.matches.post_message(outsider, match["id"], "let me in")
    with pytest.raises(MatchNotFound):
        services.matches.post_message(second, "missing", "hello")

    listed = services.matches.list_messages(creator, match["id"])
    assert [item["canDelete"] for item in listed] == [False]
    assert services.matches.list_messages(second, match["id"])[0]["canDelete"] is True


def test_listing_shows_participants_and_recent_messages(services, players):
    t('tests.unit.test_match_lifecycle.test_listing_shows_participants_and_recent_messages')
    creator, second, outsider = players[:3]
    match = services.matches.create(creator, _match_payload())
    services.matches.join(second, match["id"])
    for index in range(7):
        services.matches.post_message(creator, match["id"], f"message {index}")

    listing = services.matches.list_for_user(outsider)

    assert len(listing) == 1
    entry = listing[0]
    assert entry["joined"] is False
    assert entry["isOwner"] is False
    assert [p["name"] for p in entry["participants"]] == ["Player 1", "Player 2"]
    assert [p["role"] for p in entry["participants"]] == ["owner", "player"]
    assert [m["content"] for m in entry["messages"]] == [f"message {i}" for i in range(2, 7)]

    own = services.matches.list_for_user(creator)[0]
    assert own["joined"] is True
    assert own["isOwner"] is True


def test_publishing_result_updates_every_player(services, players):
    t('tests.unit.test_match_lifecycle.test_publishing_result_updates_every_player')
    a, b, c, d = players[:4]
    match = services.matches.create(a, _match_payload())
    for player in (b, c, d):
        services.matches.join(player, match["id"])

    completed = services.matches.publish_result(a, match["id"], [a.id, b.id])

    assert completed["status"] == "completed"
    assert completed["result"] == {"winners": [a.id, b.id]}
    assert completed["completedAt"]

    for winner in (a, b):
        stats = services.stats.get_stats(winner.id)
        assert stats["rankingPoints"] == 1225
        assert stats["wins"] == 1
        assert stats["streak"] == 1
        assert stats["matchesPlayed"] == 1
    for loser in (c, d):
        stats = services.stats.get_stats(loser.id)
        assert stats["rankingPoints"] == 1190
        assert stats["losses"] == 1
        assert stats["streak"] == 0
        assert stats["matchesPlayed"] == 1


def test_only_creator_publishes_and_only_once(services, players):
    creator, second = players[:2]
    match = services.matches.create(creator, _match_payload())
    services.matches.join(second, match["id"])

    with pytest.raises(NotFoundOrForbidden):
        services.matches.publish_result(second, match["id"], [second.id])
    with pytest.raises(NotFoundOrForbidden):
        services.matches.publish_result(creator, "missing", [creator.id])
    services.matches.publish_result(creator, match["id"], [creator.id])

    with pytest.raises(MatchClosed):
        services.matches.publish_result(creator, match["id"], [second.id])
    assert services.stats.get_stats(second.id)["losses"] == 1


def test_winners_must_be_players(services, players):
    creator, second, outsider = players[:3]
    match = services.matches.create(creator, _match_payload())
    services.matches.join(second, match["id"])

    with pytest.raises(ValidationError) as excinfo:
        services.matches.publish_result(creator, match["id"], [creator.id, outsider.id])

    assert excinfo.value.details == {"unknownWinners": [outsider.id]}
    assert services.matches.get_match(match["id"])["status"] == "scheduled"


def test_completed_match_is_closed_to_joins_and_leaves(services, players):
    creator, second, late = players[:3]
    match = services.matches.create(creator, _match_payload())
    services.matches.join(second, match["id"])
    services.matches.publish_result(creator, match["id"], [creator.id])

    with pytest.raises(MatchClosed):
        services.matches.join(late, match["id"])
    with pytest.raises(MatchClosed):
        services.matches.leave(second, match["id"])


def test_stats_failure_does_not_reopen_match(services, players):
    creator, second = players[:2]
    manager = MatchManager(services.store, stats=ExplodingStats())
    match = manager.create(creator, _match_payload())
    manager.join(second, match["id"])

    completed = manager.publish_result(creator, match["id"], [second.id])

    assert completed["status"] == "completed"
    assert manager.get_match(match["id"])["status"] == "completed"


def test_result_without_winners_counts_as_a_loss_for_everyone(services, players):
    t('tests.unit.test_match_lifecycle.test_result_without_winners_counts_as_a_loss_for_everyone')
    creator, second = players[:2]
    match = services.matches.create(creator, _match_payload())
    services.matches.join(second, match["id"])

    completed = services.matches.publish_result(creator, match["id"], [])

    assert completed["status"] == "completed"
    assert completed["result"] == {"winners": []}
    for player in (creator, second):
        stats = services.stats.get_stats(player.id)
        assert stats["losses"] == 1
        assert stats["rankingPoints"] == 1190
