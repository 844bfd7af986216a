"""Redis-backed answer cache keyed by query fingerprint."""

from __future__ import annotations

import hashlib
import logging
from datetime import datetime, timedelta
from typing import Any, Optional

from ragops.core.config import settings
from ragops.models import CacheEntry, QueryAnswer
from ragops.models.document import utcnow

logger = logging.getLogger(__name__)


def normalize_query(query: str) -> str:
    return query.strip().lower()


def query_key(query: str) -> str:
    """Cache key: SHA-256 of the trimmed, lower-cased query."""

    return hashlib.sha256(normalize_query(query).encode("utf-8")).hexdigest()


class QueryCache:
    """JSON cache entries in Redis.

    Expiry is enforced twice: Redis drops keys after the TTL, and reads reject
    entries whose `expires_at` has passed. Cache failures never reach callers.
    """

    prefix = "rag:cache:"

    def __init__(self, redis: Optional[Any], *, ttl_seconds: Optional[int] = None) -> None:
        self.redis = redis
        self.ttl_seconds = settings.QUERY_CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    async def get(self, key: str, *, now: Optional[datetime] = None) -> Optional[CacheEntry]:
        if self.redis is None:
            return None
        try:
            raw = await self.redis.get(self._key(key))
        except Exception as exc:
            logger.warning("Cache read failed: %s", exc)
            return None
        if not raw:
            return None

        try:
            entry = CacheEntry.model_validate_json(raw)
        except ValueError as exc:
            logger.warning("Discarding unreadable cache entry %s: %s", key, exc)
            await self.delete(key)
            return None

        if entry.is_expired(now):
            await self.delete(key)
            return None
        return entry

    async def put(self, key: str, answer: QueryAnswer, *, now: Optional[datetime] = None) -> Optional[CacheEntry]:
        created = now or utcnow()
        entry = CacheEntry(
            query_key=key,
            result=answer,
            hit_count=1,
            created_at=created,
            expires_at=created + timedelta(seconds=self.ttl_seconds),
        )
        # A zero TTL disables caching; Redis rejects `ex=0`.
        if self.redis is None or self.ttl_seconds <= 0:
            return None
        try:
            await self.redis.set(self._key(key), entry.model_dump_json(), ex=self.ttl_seconds)
        except Exception as exc:
            logger.warning("Cache write failed: %s", exc)
            return None
        return entry

    async def record_hit(self, entry: CacheEntry, *, now: Optional[datetime] = None) -> None:
        """Bump the hit counter without extending the entry's lifetime."""

        if self.redis is None:
            return
        remaining = int((entry.expires_at - (now or utcnow())).total_seconds())
        if remaining <= 0:
            return
        updated = entry.model_copy(update={"hit_count": entry.hit_count + 1})
        try:
            await self.redis.set(self._key(entry.query_key), updated.model_dump_json(), ex=remaining)
        except Exception as exc:
            logger.debug("Cache hit counter update failed: %s", exc)

    async def delete(self, key: str) -> None:
        if self.redis is None:
            return
        try:
            await self.redis.delete(self._key(key))
        except Exception as exc:
            logger.warning("Cache delete failed: %s", exc)


__all__ = ["QueryCache", "normalize_query", "query_key"]
