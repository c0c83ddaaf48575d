"""API pública do domínio da plataforma Socorro.

O módulo centraliza as entidades, portas e repositórios mais utilizados
para que possam ser importados diretamente de ``socorro.domain``.
"""

from .entities import (
    AuditEntry,
    Coordinates,
    Disaster,
    GeocodeResult,
    ImageAnalysis,
    ImageVerification,
    LocationExtraction,
    OfficialUpdate,
    Report,
    Resource,
    ReverseGeocodeResult,
    SocialMediaPost,
    SocialMediaReport,
    User,
)
from .ports import (
    CacheStore,
    Geocoder,
    LanguageModel,
    Notifier,
    SocialMediaSource,
    UpdateSource,
)
from .repositories import (
    DisasterQuery,
    DisasterRepository,
    ImageVerificationRepository,
    OfficialUpdateRepository,
    ReportRepository,
    ResourceRepository,
    SocialMediaReportRepository,
)

__all__ = [
    "AuditEntry",
    "CacheStore",
    "Coordinates",
    "Disaster",
    "DisasterQuery",
    "DisasterRepository",
    "GeocodeResult",
    "Geocoder",
    "ImageAnalysis",
    "ImageVerification",
    "ImageVerificationRepository",
    "LanguageModel",
    "LocationExtraction",
    "Notifier",
    "OfficialUpdate",
    "OfficialUpdateRepository",
    "Report",
    "ReportRepository",
    "Resource",
    "ResourceRepository",
    "ReverseGeocodeResult",
    "SocialMediaPost",
    "SocialMediaReport",
    "SocialMediaReportRepository",
    "SocialMediaSource",
    "UpdateSource",
    "User",
]
