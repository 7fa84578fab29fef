"""Keyword-based query type detection."""

from __future__ import annotations

from groundrank.models import QueryType


def _signals(text: str) -> tuple[str, ...]:
    """Split a comma-separated list of phrases."""
    return tuple(part.strip() for part in text.split(",") if part.strip())


# Order matters: on a tie the earlier type wins.
_SIGNALS = (
    (
        QueryType.NEWS,
        _signals(
            "latest, today, breaking, news, update, announce, report, "
            "yesterday, this week, recent"
        ),
    ),
    (
        QueryType.RESEARCH,
        _signals(
            "study, research, paper, analysis, impact, effect, evidence, "
            "systematic, review, meta-analysis, journal"
        ),
    ),
    (
        QueryType.TECHNICAL,
        _signals(
            "api, code, function, error, bug, implement, library, framework, "
            "documentation, tutorial, how to, example, syntax, install, "
            "config, setup"
        ),
    ),
    (
        QueryType.FACTUAL,
        _signals(
            "what is, who is, when did, where is, how many, definition, "
            "meaning, capital of, population"
        ),
    ),
)


def detect_query_type(query: str) -> QueryType:
    """Classify a query by counting substring signals of each type."""
    q = query.lower()
    counts = [
        (qtype, sum(1 for signal in signals if signal in q))
        for qtype, signals in _SIGNALS
    ]
    best = max(count for _, count in counts)
    if best == 0:
        return QueryType.GENERAL
    return next(qtype for qtype, count in counts if count == best)