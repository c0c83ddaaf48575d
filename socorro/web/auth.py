"""Autenticação simulada por cabeçalho e checagem de permissões."""
from __future__ import annotations

import logging
from typing import Callable, Mapping, Optional

from fastapi import Request

from socorro.domain.entities import DEFAULT_USERS, User

from .errors import AuthenticationError, AuthorizationError

log = logging.getLogger("socorro.auth")


def user_id_from_request(request: Request) -> Optional[str]:
    """Lê ``x-user-id`` ou, na falta dele, ``Authorization: Bearer <id>``."""

    user_id = request.headers.get("x-user-id")
    if user_id:
        return user_id.strip()
    authorization = request.headers.get("authorization") or ""
    if authorization.lower().startswith("bearer "):
        return authorization[7:].strip() or None
    return None


class Authenticator:
    """Resolve o usuário da requisição contra um diretório estático."""

    def __init__(self, users: Mapping[str, User] = DEFAULT_USERS) -> None:
        self._users = dict(users)

    @property
    def users(self) -> list[User]:
        return list(self._users.values())

    def current_user(self, request: Request) -> User:
        user_id = user_id_from_request(request)
        if not user_id:
            raise AuthenticationError("Authentication required. Please provide x-user-id header.")
        user = self._users.get(user_id)
        if user is None:
            log.warning("usuário desconhecido %r em %s", user_id, request.url.path)
            raise AuthenticationError("Invalid user credentials.")
        request.state.user = user
        return user

    def require(self, permission: str) -> Callable[[Request], User]:
        """Cria a dependência FastAPI que exige ``permission``."""

        def dependency(request: Request) -> User:
            user = self.current_user(request)
            if not user.can(permission):
                log.warning(
                    "permissão %s negada para %s em %s", permission, user.id, request.url.path
                )
                raise AuthorizationError("Insufficient permissions for this action.")
            return user

        return dependency


__all__ = ["Authenticator", "user_id_from_request"]
