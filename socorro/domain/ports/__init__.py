"""Portas que conectam o domínio com serviços externos e adaptadores."""
from .cache_store import CacheStore
from .geocoder import Geocoder
from .language_model import LanguageModel
from .notifier import Notifier
from .social_media_source import SocialMediaSource
from .update_source import UpdateSource

__all__ = [
    "CacheStore",
    "Geocoder",
    "LanguageModel",
    "Notifier",
    "SocialMediaSource",
    "UpdateSource",
]
