"""Usage monitoring: append-only event log, Prometheus metrics and threshold alerts."""

from __future__ import annotations

import logging
from datetime import datetime, time, timezone
from typing import Any, Optional

from prometheus_client import Counter, Histogram

from ragops.core.config import settings
from ragops.models import UsageEvent, UsageKind

logger = logging.getLogger("ragops.monitoring")

rag_events_total = Counter(
    "ragops_events_total",
    "Ingestion and query events",
    ["kind", "outcome"],
)

rag_event_latency_seconds = Histogram(
    "ragops_event_latency_seconds",
    "Latency of ingestion and query events",
    ["kind"],
)

rag_tokens_total = Counter(
    "ragops_tokens_total",
    "Estimated tokens processed",
    ["kind"],
)


class UsageMonitor:
    """Best-effort usage tracking.

    Persisting an event never raises into the caller. Alerts are evaluated
    locally for every event whether or not persistence succeeded.
    """

    def __init__(
        self,
        collection: Optional[Any] = None,
        *,
        latency_threshold_ms: Optional[int] = None,
        daily_token_limit: Optional[int] = None,
    ) -> None:
        self.collection = collection
        self.latency_threshold_ms = settings.ALERT_LATENCY_MS if latency_threshold_ms is None else latency_threshold_ms
        self.daily_token_limit = settings.DAILY_TOKEN_LIMIT if daily_token_limit is None else daily_token_limit

    async def track(self, event: UsageEvent) -> bool:
        """Record `event`; returns whether it reached the usage store."""

        self._observe(event)
        persisted = await self._persist(event)
        self._check_alerts(event)
        return persisted

    async def _persist(self, event: UsageEvent) -> bool:
        if self.collection is None:
            logger.debug("Usage store unavailable; event not persisted: %s", event.kind.value)
            return False
        payload = event.model_dump()
        payload["kind"] = event.kind.value
        try:
            await self.collection.insert_one(payload)
        except Exception as exc:
            logger.error("Failed to log usage event: %s", exc)
            return False
        return True

    def _observe(self, event: UsageEvent) -> None:
        outcome = "success" if event.success else "failure"
        rag_events_total.labels(kind=event.kind.value, outcome=outcome).inc()
        rag_tokens_total.labels(kind=event.kind.value).inc(event.token_estimate)
        if event.latency_ms is not None:
            rag_event_latency_seconds.labels(kind=event.kind.value).observe(event.latency_ms / 1000)

    def _check_alerts(self, event: UsageEvent) -> None:
        if not event.success:
            logger.warning("[RAG Alert] Operation failed. kind=%s metadata=%s", event.kind.value, event.metadata)
        if event.latency_ms is not None and event.latency_ms > self.latency_threshold_ms:
            logger.warning(
                "[RAG Alert] High latency: %sms kind=%s metadata=%s",
                event.latency_ms,
                event.kind.value,
                event.metadata,
            )

    async def daily_usage(self, *, now: Optional[datetime] = None) -> int:
        """Sum of token estimates recorded since midnight UTC."""

        if self.collection is None:
            return 0
        current = now or datetime.now(timezone.utc)
        start = datetime.combine(current.date(), time.min, tzinfo=timezone.utc)
        pipeline = [
            {"$match": {"timestamp": {"$gte": start}}},
            {"$group": {"_id": None, "tokens": {"$sum": "$token_estimate"}}},
        ]
        try:
            cursor = self.collection.aggregate(pipeline)
            rows = [row async for row in cursor]
        except Exception as exc:
            logger.error("Failed to aggregate daily usage: %s", exc)
            return 0
        total = int(rows[0]["tokens"]) if rows else 0
        if total > self.daily_token_limit:
            logger.warning("[RAG Alert] Daily token limit exceeded: %s > %s", total, self.daily_token_limit)
        return total

    async def ensure_indexes(self) -> None:
        if self.collection is None:
            return
        await self.collection.create_index([("timestamp", -1)])
        await self.collection.create_index([("kind", 1), ("timestamp", -1)])


def query_event(*, tokens: int, latency_ms: int, success: bool, **metadata: Any) -> UsageEvent:
    return UsageEvent(
        kind=UsageKind.QUERY,
        token_estimate=max(tokens, 0),
        latency_ms=max(latency_ms, 0),
        success=success,
        metadata=metadata,
    )


def ingest_event(*, tokens: int, success: bool, latency_ms: Optional[int] = None, **metadata: Any) -> UsageEvent:
    return UsageEvent(
        kind=UsageKind.INGEST,
        token_estimate=max(tokens, 0),
        latency_ms=latency_ms,
        success=success,
        metadata=metadata,
    )


__all__ = ["UsageMonitor", "ingest_event", "query_event"]
