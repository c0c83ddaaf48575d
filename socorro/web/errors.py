"""Hierarquia de erros da API e tratadores de exceção do FastAPI."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pymongo.errors import DuplicateKeyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from .envelope import failure

log = logging.getLogger("socorro.web")


class AppError(Exception):
    """Erro com status HTTP e mensagem destinados ao cliente."""

    status_code = 500

    def __init__(
        self,
        message: str,
        errors: Iterable[Any] = (),
        *,
        status_code: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.errors = list(errors)
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    status_code = 400


class AuthenticationError(AppError):
    status_code = 401


class AuthorizationError(AppError):
    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    status_code = 409


class RateLimitError(AppError):
    status_code = 429

    def __init__(self, message: str, retry_after: int) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class UpstreamServiceError(AppError):
    status_code = 502


def _envelope(status_code: int, message: str, errors: Iterable[Any] = (), **extra: Any) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=failure(message, errors, status_code, extra=extra or None),
    )


def _render(exc: AppError) -> JSONResponse:
    return _envelope(exc.status_code, exc.message, exc.errors)


@contextmanager
def domain_errors() -> Iterator[None]:
    """Converte as exceções dos serviços de domínio nos erros da API."""

    try:
        yield
    except (KeyError, IndexError):
        raise
    except LookupError as exc:
        raise NotFoundError(str(exc.args[0]) if exc.args else "Resource not found") from exc
    except PermissionError as exc:
        raise AuthorizationError(str(exc)) from exc
    except ValueError as exc:
        raise ValidationError(str(exc)) from exc


def install_exception_handlers(app: FastAPI, *, production: bool = False) -> None:
    """Registra os tratadores que convertem exceções no envelope de erro."""

    @app.exception_handler(AppError)
    async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
        if isinstance(exc, RateLimitError):
            log.warning("limite excedido em %s %s", request.method, request.url.path)
            response = _envelope(exc.status_code, exc.message, exc.errors, retryAfter=exc.retry_after)
            response.headers["Retry-After"] = str(exc.retry_after)
            return response
        return _render(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        errors = [
            {
                "field": ".".join(str(part) for part in error.get("loc", ())[1:]) or None,
                "message": error.get("msg", ""),
                "value": error.get("input"),
            }
            for error in exc.errors()
        ]
        return JSONResponse(
            status_code=400,
            content=failure("Validation failed", _jsonable(errors), 400),
        )

    @app.exception_handler(DuplicateKeyError)
    async def handle_duplicate(request: Request, exc: DuplicateKeyError) -> JSONResponse:
        return _render(ConflictError("Duplicate entry", ["A record with this data already exists"]))

    @app.exception_handler(httpx.HTTPStatusError)
    async def handle_upstream_status(
        request: Request, exc: httpx.HTTPStatusError
    ) -> JSONResponse:
        log.warning("serviço externo respondeu %s em %s", exc.response.status_code, request.url.path)
        return _render(
            UpstreamServiceError(
                "External service error",
                [f"External API returned status {exc.response.status_code}"],
            )
        )

    @app.exception_handler(httpx.TransportError)
    async def handle_upstream_transport(
        request: Request, exc: httpx.TransportError
    ) -> JSONResponse:
        return _render(
            UpstreamServiceError(
                "Service unavailable",
                ["External service is currently unavailable"],
                status_code=503,
            )
        )

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code == 404 and exc.detail == "Not Found":
            log.warning("rota não encontrada: %s %s", request.method, request.url.path)
            return _envelope(404, "Route not found", [f"Cannot {request.method} {request.url.path}"])
        return _envelope(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        log.exception("erro inesperado em %s %s", request.method, request.url.path)
        if production:
            return _envelope(
                500,
                "Internal server error",
                ["Something went wrong. Please try again later."],
            )
        return _envelope(500, str(exc) or "Internal server error")


def _jsonable(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    return str(value)


__all__ = [
    "AppError",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "NotFoundError",
    "RateLimitError",
    "UpstreamServiceError",
    "ValidationError",
    "domain_errors",
    "install_exception_handlers",
]
