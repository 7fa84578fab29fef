"""Shared value types used throughout the ranking stages."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class SourceTier(Enum):
    """Trust tier of a source, from most (TIER1) to least (TIER4) authoritative."""

    TIER1 = "tier1"
    TIER2 = "tier2"
    TIER3 = "tier3"
    TIER4 = "tier4"


class QueryType(Enum):
    """Kind of query, used to pick adaptive ranking weights."""

    NEWS = "news"
    RESEARCH = "research"
    TECHNICAL = "technical"
    FACTUAL = "factual"
    GENERAL = "general"


class VerificationStatus(Enum):
    """How well a claim is backed by independent sources."""

    VERIFIED = "verified"
    PARTIAL = "partial"
    UNVERIFIED = "unverified"
    CONTESTED = "contested"


class ContradictionSeverity(Enum):
    """How strongly two claims disagree."""

    HARD = "hard"
    SOFT = "soft"


@dataclass(frozen=True)
class Claim:
    """A statement found in a source, with its verification outcome."""

    text: str
    source_url: str
    confidence: float
    verification: VerificationStatus
    source_span: tuple[int, int] = (0, 0)


@dataclass(frozen=True)
class Contradiction:
    """Two claims from different sources that disagree."""

    claim_a: str
    source_a: str
    claim_b: str
    source_b: str
    severity: ContradictionSeverity