"""Cadastro e consulta de desastres."""

from .service import DisastersService, Pagination, VALID_TAGS, validate_tags

__all__ = ["DisastersService", "Pagination", "VALID_TAGS", "validate_tags"]
