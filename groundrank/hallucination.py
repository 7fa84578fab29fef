"""Anti-hallucination checks: cross-referencing, contradictions, echo chambers."""

from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass, field
from decimal import Decimal
from urllib.parse import urlsplit

from groundrank.authority import domain_to_org
from groundrank.models import (
    Claim,
    Contradiction,
    ContradictionSeverity,
    VerificationStatus,
)

_CONFIDENCE = {
    VerificationStatus.VERIFIED: 0.9,
    VerificationStatus.PARTIAL: 0.7,
    VerificationStatus.UNVERIFIED: 0.5,
    VerificationStatus.CONTESTED: 0.2,
}

_FUZZY_OVERLAP = 0.6
_CONTRADICTION_RATIO = 0.2
_HARD_CONTRADICTION_RATIO = 1.0


@dataclass
class HallucinationCheck:
    """Outcome of the anti-hallucination stage."""

    claims: list[Claim]
    contradictions: list[Contradiction]
    warnings: list[str]
    unique_orgs: int
    echo_chamber_risk: bool


@dataclass
class DocClaims:
    """A document's key phrases, for cross-reference checking."""

    url: str
    domain: str
    key_phrases: list[str] = field(default_factory=list)


def _long_words(phrase: str) -> set[str]:
    return {w for w in phrase.split() if len(w.encode("utf-8")) > 3}


def _url_org(url: str) -> str | None:
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return None
    return domain_to_org(host) if host else None


def _parse_number(word: str) -> float | None:
    text = word.replace(",", "").replace("%", "")
    if not text or "_" in text or not text.isascii():
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _format_number(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    text = format(Decimal(repr(value)), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def extract_number_claims(
    docs: Sequence[DocClaims],
) -> dict[tuple[str, str], list[tuple[float, str]]]:
    """Collect numbers in key phrases, keyed by (preceding context, unit).

    The context is up to three words before the number; the unit is ``%``
    when the number carries one, otherwise the following word (or empty).
    Numbers with no preceding words are ignored.
    """
    number_claims: dict[tuple[str, str], list[tuple[float, str]]] = defaultdict(list)
    for doc in docs:
        for phrase in doc.key_phrases:
            words = phrase.split()
            for i, word in enumerate(words):
                num = _parse_number(word)
                if num is None:
                    continue
                context = " ".join(words[max(i - 3, 0):i])
                if word.endswith("%"):
                    unit = "%"
                elif i + 1 < len(words):
                    unit = words[i + 1]
                else:
                    unit = ""
                if context:
                    number_claims[(context, unit)].append((num, doc.url))
    return dict(number_claims)


def _cross_reference(docs: Sequence[DocClaims]) -> dict[str, list[str]]:
    phrase_sources: dict[str, list[str]] = {}
    for doc in docs:
        for raw in doc.key_phrases:
            phrase = raw.lower()
            url = doc.url
            sources = phrase_sources.setdefault(phrase, [])
            if url not in sources:
                sources.append(url)

            words = _long_words(phrase)
            if len(words) < 3:
                continue
            for existing, existing_sources in phrase_sources.items():
                if existing == phrase:
                    continue
                existing_words = _long_words(existing)
                if len(existing_words) < 3:
                    continue
                overlap = len(words & existing_words)
                ratio = overlap / max(len(words), len(existing_words))
                if ratio >= _FUZZY_OVERLAP and url not in existing_sources:
                    existing_sources.append(url)
    return phrase_sources


def _status_for(org_count: int) -> VerificationStatus:
    if org_count >= 2:
        return VerificationStatus.VERIFIED
    if org_count == 1:
        return VerificationStatus.PARTIAL
    return VerificationStatus.UNVERIFIED


def _find_contradictions(docs: Sequence[DocClaims]) -> list[Contradiction]:
    contradictions = []
    for (topic, _unit), values in extract_number_claims(docs).items():
        if len(values) < 2:
            continue
        nums = [n for n, _ in values if not math.isnan(n)]
        high = max(nums, default=float("-inf"))
        low = min(nums, default=float("inf"))
        if not low > 0.0:
            continue
        spread = (high - low) / low
        if not spread > _CONTRADICTION_RATIO:
            continue
        (n1, src1), (n2, src2) = values[0], values[1]
        contradictions.append(
            Contradiction(
                claim_a=f"{topic}: {_format_number(n1)}",
                source_a=src1,
                claim_b=f"{topic}: {_format_number(n2)}",
                source_b=src2,
                severity=(
                    ContradictionSeverity.HARD
                    if spread > _HARD_CONTRADICTION_RATIO
                    else ContradictionSeverity.SOFT
                ),
            )
        )
    return contradictions


def check_hallucination(docs: Sequence[DocClaims], min_orgs: int) -> HallucinationCheck:
    """Cross-reference key phrases, detect numeric contradictions and echo chambers."""
    warnings: list[str] = []

    unique_orgs = len({domain_to_org(d.domain) for d in docs})
    echo_chamber_risk = unique_orgs < min_orgs and len(docs) >= min_orgs
    if echo_chamber_risk:
        warnings.append(
            f"Limited source diversity: only {unique_orgs} unique organizations "
            f"in top {len(docs)} results (minimum: {min_orgs})"
        )

    claims = []
    for phrase, sources in _cross_reference(docs).items():
        orgs = {org for org in map(_url_org, sources) if org is not None}
        status = _status_for(len(orgs))
        if sources:
            claims.append(
                Claim(
                    text=phrase,
                    source_url=sources[0],
                    confidence=_CONFIDENCE[status],
                    verification=status,
                )
            )

    contradictions = _find_contradictions(docs)
    if contradictions:
        warnings.append(f"{len(contradictions)} contradictions detected across sources")

    return HallucinationCheck(
        claims=claims,
        contradictions=contradictions,
        warnings=warnings,
        unique_orgs=unique_orgs,
        echo_chamber_risk=echo_chamber_risk,
    )