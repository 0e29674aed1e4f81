# Rev 0.2.0
from __future__ import annotations
from typing import Any, List, Optional

from taskhub.errors import NotFoundError, ValidationError
from taskhub.models.entities import USER_FIELDS, Activity, User
from taskhub.repositories.base import Storage
from taskhub.utils.logging_setup import get_logger
from .validation import FieldChecker

log = get_logger("users")

DEFAULT_AVATAR_COLOR = "#605E5C"


def initials_for(full_name: str) -> str:
    parts = [p for p in full_name.split() if p]
    if not parts:
        return "?"
    if len(parts) == 1:
        return parts[0][:2].upper()
    return (parts[0][0] + parts[-1][0]).upper()


class UserService:
    def __init__(self, storage: Storage):
        self._storage = storage

    # ---- queries
    def list_users(self) -> List[User]:
        return self._storage.users.list_users()

    def get_user(self, user_id: int) -> User:
        user = self._storage.users.get_user(user_id)
        if user is None:
            raise NotFoundError("user", user_id)
        return user

    def activities_for_user(self, user_id: int) -> List[Activity]:
        self.get_user(user_id)
        return self._storage.activities.list_activities_for_user(user_id)

    # ---- commands
    def create_user(self, **fields: Any) -> User:
        chk = self._check(fields, creating=True)
        data = chk.data
        if not data.get("initials"):
            data["initials"] = initials_for(data["full_name"])
        data.setdefault("avatar_color", None)
        if not data["avatar_color"]:
            data["avatar_color"] = DEFAULT_AVATAR_COLOR
        with self._storage.transaction():
            self._ensure_unique_username(data["username"], None)
            user = self._storage.users.create_user(**{k: data.get(k) for k in USER_FIELDS})
        log.info("Created user #%s (%s)", user.id, user.username)
        return user

    def update_user(self, user_id: int, **fields: Any) -> User:
        chk = self._check(fields, creating=False)
        with self._storage.transaction():
            if self._storage.users.get_user(user_id) is None:
                raise NotFoundError("user", user_id)
            if "username" in chk.data:
                self._ensure_unique_username(chk.data["username"], user_id)
            user = self._storage.users.update_user(user_id, **chk.data)
        log.info("Updated user #%s fields=%s", user_id, sorted(chk.data))
        return user

    def delete_user(self, user_id: int) -> bool:
        """Unsets task references, then deletes. False if already gone."""
        with self._storage.transaction():
            if self._storage.users.get_user(user_id) is None:
                return False
            self._storage.tasks.clear_user_references(user_id)
            deleted = self._storage.users.delete_user(user_id)
        log.info("Deleted user #%s", user_id)
        return deleted

    # ---- internals
    def _check(self, fields: dict, *, creating: bool) -> FieldChecker:
        chk = FieldChecker(dict(fields))
        chk.reject_unknown(USER_FIELDS)
        chk.text("username", required=creating, max_length=64)
        chk.text("full_name", required=creating, max_length=200)
        chk.text("initials", max_length=4)
        chk.text("avatar_color", max_length=32)
        chk.text("role")
        chk.text("email")
        if not creating:
            for name in ("username", "full_name", "initials", "avatar_color"):
                if name in chk.data and not chk.data[name]:
                    chk.fail(name, "Must not be empty")
        chk.raise_if_failed("Invalid user data")
        return chk

    def _ensure_unique_username(self, username: str, user_id: Optional[int]) -> None:
        existing = self._storage.users.get_user_by_username(username)
        if existing is not None and existing.id != user_id:
            raise ValidationError.for_field("username", f"Username {username!r} is already taken")
