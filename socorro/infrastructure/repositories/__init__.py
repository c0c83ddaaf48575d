"""Implementações de repositório (MongoDB e memória)."""
from .indexes import ensure_indexes
from .memory import (
    InMemoryDisasterRepository,
    InMemoryImageVerificationRepository,
    InMemoryOfficialUpdateRepository,
    InMemoryReportRepository,
    InMemoryResourceRepository,
    InMemorySocialMediaReportRepository,
)
from .mongo_disaster_repository import (
    MongoDisasterRepository,
    MongoReportRepository,
    MongoResourceRepository,
)
from .mongo_enrichment_repository import (
    MongoImageVerificationRepository,
    MongoOfficialUpdateRepository,
    MongoSocialMediaReportRepository,
)

__all__ = [
    "InMemoryDisasterRepository",
    "InMemoryImageVerificationRepository",
    "InMemoryOfficialUpdateRepository",
    "InMemoryReportRepository",
    "InMemoryResourceRepository",
    "InMemorySocialMediaReportRepository",
    "MongoDisasterRepository",
    "MongoImageVerificationRepository",
    "MongoOfficialUpdateRepository",
    "MongoReportRepository",
    "MongoResourceRepository",
    "MongoSocialMediaReportRepository",
    "ensure_indexes",
]
