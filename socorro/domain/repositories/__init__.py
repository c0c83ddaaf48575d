"""Interfaces de repositório utilizadas pela camada de domínio."""
from .disaster_repository import DisasterQuery, DisasterRepository
from .official_update_repository import OfficialUpdateRepository
from .report_repository import ReportRepository
from .resource_repository import ResourceRepository
from .social_media_repository import SocialMediaReportRepository
from .verification_repository import ImageVerificationRepository

__all__ = [
    "DisasterQuery",
    "DisasterRepository",
    "ImageVerificationRepository",
    "OfficialUpdateRepository",
    "ReportRepository",
    "ResourceRepository",
    "SocialMediaReportRepository",
]
