"""Adaptadores de infraestrutura: banco, cache e repetição de chamadas."""
from .cache import InMemoryCacheStore, MongoCacheStore, NullCacheStore, cache_key
from .database import MongoClientFactory, MongoSettings
from .retry import retry_with_backoff

__all__ = [
    "InMemoryCacheStore",
    "MongoCacheStore",
    "MongoClientFactory",
    "MongoSettings",
    "NullCacheStore",
    "cache_key",
    "retry_with_backoff",
]
