from datetime import datetime, timedelta, timezone

import pytest

from groundrank.freshness import authority_freshness_boost, freshness_decay
from groundrank.models import QueryType

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def test_recent_doc_high_score():
    decay = freshness_decay(NOW, QueryType.GENERAL, now=NOW)
    assert decay > 0.99


def test_recent_doc_with_default_now():
    decay = freshness_decay(datetime.now(timezone.utc), QueryType.GENERAL)
    assert decay > 0.99


def test_old_doc_low_score_for_news():
    old = NOW - timedelta(days=30)
    assert freshness_decay(old, QueryType.NEWS, now=NOW) < 0.1


def test_old_doc_moderate_for_research():
    old = NOW - timedelta(days=30)
    assert freshness_decay(old, QueryType.RESEARCH, now=NOW) > 0.8


def test_unknown_date_mild_penalty():
    assert freshness_decay(None, QueryType.GENERAL) == 0.8


def test_decay_never_zero():
    ancient = NOW - timedelta(days=10000)
    decay = freshness_decay(ancient, QueryType.NEWS, now=NOW)
    assert decay >= 0.01
    assert decay == pytest.approx(0.01)


def test_future_date_is_not_boosted():
    future = NOW + timedelta(days=5)
    assert freshness_decay(future, QueryType.NEWS, now=NOW) == 1.0


def test_naive_date_treated_as_utc():
    naive = datetime(2024, 5, 2, 12, 0)
    aware = naive.replace(tzinfo=timezone.utc)
    assert freshness_decay(naive, QueryType.NEWS, now=NOW) == freshness_decay(
        aware, QueryType.NEWS, now=NOW
    )


def test_decay_monotonic_in_age():
    values = [
        freshness_decay(NOW - timedelta(days=d), QueryType.TECHNICAL, now=NOW)
        for d in (0, 10, 100, 1000)
    ]
    assert values == sorted(values, reverse=True)


def test_authority_freshness_boost_news():
    score = authority_freshness_boost(1.0, 1.2, 0.5, QueryType.NEWS)
    assert score < 1.0


def test_authority_freshness_boost_research():
    score = authority_freshness_boost(1.0, 1.2, 0.5, QueryType.RESEARCH)
    assert score > 0.9
    # 1.0 * (1 + 0.4*0.2) * (1 + 0.1*-0.5) = 1.08 * 0.95
    assert score == pytest.approx(1.026)


def test_boost_preserves_zero():
    assert authority_freshness_boost(0.0, 1.5, 1.0, QueryType.GENERAL) == 0.0


def test_neutral_multipliers_leave_score_unchanged():
    for qtype in QueryType:
        assert authority_freshness_boost(0.7, 1.0, 1.0, qtype) == pytest.approx(0.7)