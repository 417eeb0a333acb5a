"""Unit tests for member lookups and registration in UserManager."""
from tracking import t

import pytest

from domain.errors import NotFoundOrForbidden, ValidationError
from tests.helpers import make_services
from users.manager import find_user_by_email, is_valid_email, normalize_email, user_name


def _create_manager(tmp_path):
    t('tests.unit.test_user_manager._create_manager')
    return make_services(tmp_path).users


def test_add_member_creates_profile_and_stats(tmp_path):
    t('tests.unit.test_user_manager.test_add_member_creates_profile_and_stats')
    manager = _create_manager(tmp_path)

    profile = manager.add_member(' Jane@Example.com ', ' Jane Doe ', level='intermediate')

    assert profile['email'] == 'jane@example.com'
    assert profile['name'] == 'Jane Doe'
    assert profile['level'] == 'intermediate'
    assert profile['isAdmin'] is False
    # Persisted copy should match
    stored = manager.get_user(profile['id'])
    assert stored == profile
    stats = [row for row in manager.store.read()['playerStats'] if row['userId'] == profile['id']]
    assert len(stats) == 1


def test_add_member_rejects_duplicates_case_insensitively(tmp_path):
    t('tests.unit.test_user_manager.test_add_member_rejects_duplicates_case_insensitively')
    manager = _create_manager(tmp_path)
    manager.add_member('jane@example.com', 'Jane')
    commits = manager.store.commit_count

    with pytest.raises(ValidationError):
        manager.add_member('JANE@example.com', 'Other Jane')

    assert manager.store.commit_count == commits
    assert len(manager.get_all_users()) == 2


@pytest.mark.parametrize('email,name', [('not-an-email', 'Jane'), ('jane@example.com', '  '), (None, 'Jane')])
def test_add_member_validates_input(tmp_path, email, name):
    manager = _create_manager(tmp_path)

    with pytest.raises(ValidationError):
        manager.add_member(email, name)


def test_resolve_emails_drops_unknown_and_duplicates(tmp_path):
    manager = _create_manager(tmp_path)
    jane = manager.add_member('jane@example.com', 'Jane')
    john = manager.add_member('john@example.com', 'John')

    resolved = manager.resolve_emails(['john@example.com', 'nobody@example.com', 'JANE@example.com', 'john@example.com'])

    assert resolved == [john['id'], jane['id']]
    assert manager.resolve_emails(None) == []


def test_current_user_builds_identity(tmp_path):
    t('tests.unit.test_user_manager.test_current_user_builds_identity')
    manager = _create_manager(tmp_path)
    admin = manager.find_by_email(manager.store.settings.admin_email)

    identity = manager.current_user(admin['id'])

    assert identity.is_admin is True
    assert identity.name == admin['name']
    with pytest.raises(NotFoundOrForbidden):
        manager.current_user('missing')
    assert manager.get_user('missing') is None


def test_email_helpers():
    assert normalize_email('  A@B.CO ') == 'a@b.co'
    assert normalize_email(42) == ''
    assert is_valid_email('first.last+tag@club.example.org')
    assert not is_valid_email('first@last')

    document = {'users': [{'id': 'u1', 'email': 'Ana@Example.com', 'name': ''}]}
    assert find_user_by_email(document, 'ana@example.com')['id'] == 'u1'
    assert find_user_by_email(document, '') is None
    assert user_name(document, 'u1') == 'Player'
    assert user_name(document, 'u2', default='Client') == 'Client'
