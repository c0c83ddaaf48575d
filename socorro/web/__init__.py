"""Infraestrutura HTTP compartilhada: envelopes, erros, autenticação e limites."""

from .auth import Authenticator, user_id_from_request
from .envelope import failure, success
from .errors import (
    AppError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    RateLimitError,
    UpstreamServiceError,
    ValidationError,
    domain_errors,
    install_exception_handlers,
)
from .rate_limit import FixedWindowRateLimiter, RateLimiters, client_key

__all__ = [
    "AppError",
    "AuthenticationError",
    "Authenticator",
    "AuthorizationError",
    "ConflictError",
    "FixedWindowRateLimiter",
    "NotFoundError",
    "RateLimitError",
    "RateLimiters",
    "UpstreamServiceError",
    "ValidationError",
    "client_key",
    "domain_errors",
    "failure",
    "install_exception_handlers",
    "success",
    "user_id_from_request",
]
