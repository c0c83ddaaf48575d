"""Monitoramento de redes sociais associado aos desastres."""

from .classifier import Classification, ReportClassifier
from .service import SocialMediaFeed, SocialMediaService, keywords_for
from .sources import BlueskySource, MockSocialMediaSource, TwitterSource

__all__ = [
    "BlueskySource",
    "Classification",
    "MockSocialMediaSource",
    "ReportClassifier",
    "SocialMediaFeed",
    "SocialMediaService",
    "TwitterSource",
    "keywords_for",
]
