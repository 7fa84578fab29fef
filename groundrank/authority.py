"""Source authority classification by domain."""

from __future__ import annotations

from groundrank.models import SourceTier


def _domain_set(text: str) -> frozenset[str]:
    return frozenset(text.split())


_TIER1_DOMAINS = _domain_set(
    """
    nature.com science.org thelancet.com who.int
    nasa.gov cdc.gov nih.gov arxiv.org pubmed.ncbi.nlm.nih.gov
    ieee.org acm.org springer.com sciencedirect.com
    cell.com pnas.org bmj.com nejm.org
    worldbank.org un.org europa.eu
    """
)

_TIER2_DOMAINS = _domain_set(
    """
    reuters.com apnews.com bbc.com bbc.co.uk nytimes.com
    washingtonpost.com theguardian.com npr.org cnn.com cnbc.com
    forbes.com news.google.com news.yahoo.com docs.python.org
    docs.rs doc.rust-lang.org developer.mozilla.org
    developer.apple.com learn.microsoft.com cloud.google.com
    en.wikipedia.org wikipedia.org stackoverflow.com github.com
    docs.github.com cppreference.com man7.org wikidata.org
    wikimedia.org
    """
)

_TIER3_DOMAINS = _domain_set(
    """
    medium.com dev.to reddit.com old.reddit.com quora.com
    news.ycombinator.com hashnode.dev substack.com wordpress.com
    blogspot.com tumblr.com stackexchange.com
    """
)

_TIER1_SUFFIXES = (".gov", ".edu", ".ac.uk", ".mil")

_TWO_PART_TLDS = _domain_set("co.uk com.au co.jp co.kr com.br co.in")

_TIER_WEIGHTS = {
    SourceTier.TIER1: 1.0,
    SourceTier.TIER2: 0.5,
    SourceTier.TIER3: 0.0,
    SourceTier.TIER4: -0.3,
}


def _matches_any(domain: str, known: frozenset[str]) -> bool:
    return any(domain == k or domain.endswith("." + k) for k in known)


def classify_domain(domain: str) -> SourceTier:
    """Return the trust tier of a domain.

    Tier 1: government, education and major scientific sources.
    Tier 2: established news and official documentation.
    Tier 3: blogs, forums and community sites.
    Tier 4: everything else.
    """
    d = domain.lower()
    if d.endswith(_TIER1_SUFFIXES) or _matches_any(d, _TIER1_DOMAINS):
        return SourceTier.TIER1
    if _matches_any(d, _TIER2_DOMAINS):
        return SourceTier.TIER2
    if _matches_any(d, _TIER3_DOMAINS):
        return SourceTier.TIER3
    return SourceTier.TIER4


def authority_boost(tier: SourceTier) -> float:
    """Score multiplier for a tier: ``1 + 0.2 * weight``."""
    return 1.0 + 0.2 * _TIER_WEIGHTS[tier]


def domain_to_org(domain: str) -> str:
    """Group a domain under its parent organisation.

    ``blog.example.com`` becomes ``example.com``; two-part country suffixes
    such as ``co.uk`` keep one more label (``www.bbc.co.uk`` -> ``bbc.co.uk``).
    """
    parts = domain.split(".")
    if len(parts) <= 2:
        return domain
    suffix = ".".join(parts[-2:])
    if suffix in _TWO_PART_TLDS:
        return ".".join(parts[-3:])
    return suffix