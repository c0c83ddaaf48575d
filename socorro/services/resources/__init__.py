"""Recursos de apoio vinculados aos desastres."""

from .service import LocatedResource, ResourceSearch, ResourcesService, within_radius

__all__ = ["LocatedResource", "ResourceSearch", "ResourcesService", "within_radius"]
