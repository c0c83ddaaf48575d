"""Implementações do cache chave/valor com expiração preguiçosa."""
from __future__ import annotations

import hashlib
import json
import logging
import threading
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Tuple

from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from socorro.domain.entities import utcnow
from socorro.domain.ports import CacheStore
from socorro.logging_config import log_cache

log = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def cache_key(prefix: str, *parts: Any) -> str:
    """Monta uma chave estável ``prefixo:sha256`` a partir das partes informadas."""

    raw = json.dumps(parts, sort_keys=True, default=str, ensure_ascii=False)
    digest = hashlib.sha256(raw.lower().encode("utf-8")).hexdigest()
    return f"{prefix}:{digest}"


class InMemoryCacheStore(CacheStore):
    """Cache em memória do processo, protegido por lock."""

    def __init__(self, clock: Clock = utcnow) -> None:
        self._clock = clock
        self._entries: Dict[str, Tuple[Any, datetime]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                log_cache("get", key, hit=False)
                return None
            value, expires_at = entry
            if expires_at <= self._clock():
                del self._entries[key]
                log_cache("expired", key, hit=False)
                return None
        log_cache("get", key, hit=True)
        return value

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        expires_at = self._clock() + timedelta(seconds=ttl_seconds)
        with self._lock:
            self._entries[key] = (value, expires_at)
        log_cache("set", key, hit=False)

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear_expired(self) -> int:
        now = self._clock()
        with self._lock:
            expired = [key for key, (_, at) in self._entries.items() if at <= now]
            for key in expired:
                del self._entries[key]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)


class NullCacheStore(CacheStore):
    """Cache desativado: toda leitura é um *miss*."""

    def get(self, key: str) -> Optional[Any]:
        return None

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        return None

    def delete(self, key: str) -> None:
        return None

    def clear_expired(self) -> int:
        return 0


class MongoCacheStore(CacheStore):
    """Cache persistido em uma coleção MongoDB.

    Cada documento tem o formato ``{_id: chave, value, expires_at,
    created_at}``. Falhas do driver são registradas e tratadas como *miss*
    para que o cache nunca interrompa uma requisição.
    """

    def __init__(
        self,
        collection: Collection,
        *,
        clock: Clock = utcnow,
        ensure_indexes: bool = True,
    ) -> None:
        self._collection = collection
        self._clock = clock
        if ensure_indexes:
            try:
                # índice TTL nativo do Mongo
                self._collection.create_index(
                    "expires_at", name="cache_expires_at_ttl", expireAfterSeconds=0
                )
            except PyMongoError as exc:
                log.warning("não foi possível criar índice do cache: %s", exc)

    def get(self, key: str) -> Optional[Any]:
        try:
            document = self._collection.find_one({"_id": key})
            if not document:
                log_cache("get", key, hit=False)
                return None
            if _as_aware(document["expires_at"]) <= self._clock():
                self._collection.delete_one({"_id": key})
                log_cache("expired", key, hit=False)
                return None
        except PyMongoError as exc:
            log.error("falha ao ler cache %s: %s", key, exc)
            return None
        log_cache("get", key, hit=True)
        return document.get("value")

    def set(self, key: str, value: Any, ttl_seconds: int) -> None:
        now = self._clock()
        document = {
            "_id": key,
            "value": value,
            "expires_at": now + timedelta(seconds=ttl_seconds),
            "created_at": now,
        }
        try:
            self._collection.replace_one({"_id": key}, document, upsert=True)
        except PyMongoError as exc:
            log.error("falha ao gravar cache %s: %s", key, exc)
            return
        log_cache("set", key, hit=False)

    def delete(self, key: str) -> None:
        try:
            self._collection.delete_one({"_id": key})
        except PyMongoError as exc:
            log.error("falha ao remover cache %s: %s", key, exc)

    def clear_expired(self) -> int:
        try:
            result = self._collection.delete_many({"expires_at": {"$lt": self._clock()}})
        except PyMongoError as exc:
            log.error("falha ao limpar cache expirado: %s", exc)
            return 0
        deleted = int(getattr(result, "deleted_count", 0) or 0)
        log.info("limpeza do cache removeu %d entradas", deleted)
        return deleted


def _as_aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


__all__ = [
    "InMemoryCacheStore",
    "MongoCacheStore",
    "NullCacheStore",
    "cache_key",
]
