"""Entidades de domínio da plataforma de resposta a desastres."""
from .coordinates import EARTH_RADIUS_KM, Coordinates, is_valid_coordinates
from .disaster import AuditEntry, Disaster, utcnow
from .enrichment import (
    CATEGORIES,
    SENTIMENTS,
    AddressComponents,
    GeocodeResult,
    ImageAnalysis,
    ImageVerification,
    LocationExtraction,
    OfficialUpdate,
    ReverseGeocodeResult,
    SocialMediaPost,
    SocialMediaReport,
    clamp,
)
from .report import VERIFICATION_STATUSES, Report
from .resource import AVAILABILITY_STATUSES, RESOURCE_TYPES, Resource
from .user import DEFAULT_USERS, User

__all__ = [
    "AVAILABILITY_STATUSES",
    "AddressComponents",
    "AuditEntry",
    "CATEGORIES",
    "Coordinates",
    "DEFAULT_USERS",
    "Disaster",
    "EARTH_RADIUS_KM",
    "GeocodeResult",
    "ImageAnalysis",
    "ImageVerification",
    "LocationExtraction",
    "OfficialUpdate",
    "RESOURCE_TYPES",
    "Report",
    "Resource",
    "ReverseGeocodeResult",
    "SENTIMENTS",
    "SocialMediaPost",
    "SocialMediaReport",
    "User",
    "VERIFICATION_STATUSES",
    "clamp",
    "is_valid_coordinates",
    "utcnow",
]
