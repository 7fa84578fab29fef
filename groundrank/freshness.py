"""Freshness decay and combined authority/freshness boosting."""

from __future__ import annotations

import math
from datetime import datetime, timezone

from groundrank.models import QueryType

_DECAY_RATES = {
    QueryType.NEWS: 0.1,
    QueryType.RESEARCH: 0.005,
    QueryType.TECHNICAL: 0.01,
    QueryType.FACTUAL: 0.01,
    QueryType.GENERAL: 0.01,
}

# (authority weight, freshness weight) per query type.
_BOOST_WEIGHTS = {
    QueryType.NEWS: (0.2, 0.4),
    QueryType.RESEARCH: (0.4, 0.1),
    QueryType.TECHNICAL: (0.3, 0.1),
    QueryType.FACTUAL: (0.25, 0.15),
    QueryType.GENERAL: (0.2, 0.2),
}

UNKNOWN_DATE_DECAY = 0.8
MIN_DECAY = 0.01


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def freshness_decay(
    published_date: datetime | None,
    query_type: QueryType,
    now: datetime | None = None,
) -> float:
    """Exponential decay ``exp(-rate * days_old)`` clamped to ``[0.01, 1.0]``.

    The rate depends on the query type. A missing date gives a mild 0.8.
    Naive datetimes are taken as UTC; ``now`` defaults to the current time.
    """
    if published_date is None:
        return UNKNOWN_DATE_DECAY
    current = _as_utc(now) if now is not None else datetime.now(timezone.utc)
    days_old = max((current - _as_utc(published_date)).days, 0)
    decay = math.exp(-_DECAY_RATES[query_type] * days_old)
    return min(max(decay, MIN_DECAY), 1.0)


def authority_freshness_boost(
    base_score: float,
    authority_multiplier: float,
    freshness_multiplier: float,
    query_type: QueryType,
) -> float:
    """Scale a score by authority and freshness, weighted by query type."""
    auth_weight, fresh_weight = _BOOST_WEIGHTS[query_type]
    auth_boost = 1.0 + auth_weight * (authority_multiplier - 1.0)
    fresh_boost = 1.0 + fresh_weight * (freshness_multiplier - 1.0)
    return base_score * auth_boost * fresh_boost