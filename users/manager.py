"""
Member directory for the club
Looks up and registers member profiles held in the club document
"""
from tracking import t

import logging
import re
from typing import Any, Dict, Iterable, List, Optional

from domain.errors import NotFoundOrForbidden, ValidationError
from domain.models import CurrentUser
from infrastructure.document_store import DocumentStore, Snapshot, initial_stats_row, new_id
from infrastructure.time_utils import to_iso

EMAIL_PATTERN = re.compile(r'^[\w.+-]+@([\w-]+\.)+[\w-]{2,}$', re.IGNORECASE)


def normalize_email(email: Any) -> str:
    """Trim and lowercase an email address; non-strings become ``''``."""
    t('users.manager.normalize_email')
    if not isinstance(email, str):
        return ''
    return email.strip().lower()


def is_valid_email(email: Any) -> bool:
    t('users.manager.is_valid_email')
    return bool(EMAIL_PATTERN.match(normalize_email(email)))


def find_user_by_email(document: Snapshot, email: Any) -> Optional[Dict[str, Any]]:
    """Case-insensitive email lookup inside an already-read snapshot."""
    t('users.manager.find_user_by_email')
    wanted = normalize_email(email)
    if not wanted:
        return None
    for user in document["users"]:
        if normalize_email(user.get("email")) == wanted:
            return user
    return None


def user_name(document: Snapshot, user_id: str, default: str = "Player") -> str:
    t('users.manager.user_name')
    for user in document["users"]:
        if user["id"] == user_id:
            return user.get("name") or default
    return default


class UserManager:
    """
    Manages member profiles stored in the shared club document

    Credentials and sessions belong to the authentication layer; this class
    only answers "who is this" and "does this member exist".
    """

    def __init__(self, store: DocumentStore) -> None:
        """
        Initialize the UserManager

        Args:
            store: Document store holding the ``users`` collection
        """
        t('users.manager.UserManager.__init__')
        self.store = store
        self.logger = logging.getLogger('UserManager')

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        """
        Retrieve a single member profile by id

        Args:
            user_id: Member id to look up

        Returns:
            Copy of the profile if found, None otherwise
        """
        t('users.manager.UserManager.get_user')
        for user in self.store.read()["users"]:
            if user["id"] == user_id:
                return user
        self.logger.debug("No profile found for user_id: %s", user_id)
        return None

    def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Case-insensitive lookup by email address."""
        t('users.manager.UserManager.find_by_email')
        return find_user_by_email(self.store.read(), email)

    def resolve_emails(self, emails: Iterable[Any]) -> List[str]:
        """
        Map invitee emails to member ids

        Unknown addresses are dropped silently and duplicates collapse.

        Args:
            emails: Email addresses as typed by the inviting member

        Returns:
            Member ids in first-seen order
        """
        t('users.manager.UserManager.resolve_emails')
        document = self.store.read()
        resolved: List[str] = []
        for email in emails or []:
            user = find_user_by_email(document, email)
            if user and user["id"] not in resolved:
                resolved.append(user["id"])
        return resolved

    def current_user(self, user_id: str) -> CurrentUser:
        """Build the request identity for an existing member."""
        t('users.manager.UserManager.current_user')
        record = self.get_user(user_id)
        if record is None:
            raise NotFoundOrForbidden("Unknown member", details={"userId": user_id})
        return CurrentUser.from_record(record)

    def add_member(
        self,
        email: str,
        name: str,
        *,
        level: Optional[str] = None,
        is_admin: bool = False,
    ) -> Dict[str, Any]:
        """
        Register a member together with their initial stats row

        Args:
            email: Unique email address
            name: Display name
            level: Free-form playing level shown on the profile
            is_admin: Grants access to the administration reports

        Returns:
            The stored profile

        Raises:
            ValidationError: If the email is malformed, the name empty, or
                the email already belongs to a member
        """
        t('users.manager.UserManager.add_member')
        clean_email = normalize_email(email)
        clean_name = (name or '').strip() if isinstance(name, str) else ''
        if not is_valid_email(clean_email):
            raise ValidationError("Invalid email address", details={"email": email})
        if not clean_name:
            raise ValidationError("Name is required")

        def register(document: Snapshot) -> Dict[str, Any]:
            if find_user_by_email(document, clean_email):
                raise ValidationError(
                    "An account already exists for this email",
                    details={"email": clean_email},
                )
            now = to_iso()
            profile = {
                "id": new_id(),
                "email": clean_email,
                "name": clean_name,
                "level": level or "",
                "isAdmin": bool(is_admin),
                "createdAt": now,
                "updatedAt": now,
            }
            document["users"].append(profile)
            document["playerStats"].append(initial_stats_row(profile["id"]))
            return profile

        profile = self.store.commit(register)
        self.logger.info("Registered member %s (%s)", profile["id"], clean_email)
        return profile

    def get_all_users(self) -> List[Dict[str, Any]]:
        t('users.manager.UserManager.get_all_users')
        return self.store.read()["users"]
