"""Usuários conhecidos e suas permissões."""
from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Mapping


@dataclass(frozen=True)
class User:
    id: str
    role: str
    permissions: FrozenSet[str]

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def can(self, permission: str) -> bool:
        return permission in self.permissions


def _user(user_id: str, role: str, *permissions: str) -> User:
    return User(id=user_id, role=role, permissions=frozenset(permissions))


DEFAULT_USERS: Mapping[str, User] = {
    user.id: user
    for user in (
        _user(
            "netrunnerX",
            "admin",
            "create",
            "read",
            "update",
            "delete",
            "manage_users",
            "verify_images",
        ),
        _user("reliefAdmin", "contributor", "create", "read", "update", "verify_reports"),
        _user("citizen1", "reporter", "create", "read"),
        _user("responder1", "responder", "read", "update", "create_reports"),
    )
}


__all__ = ["DEFAULT_USERS", "User"]
