"""Five-stage ranking pipeline with anti-hallucination checks.

Stage 1: inverse-square-rank fusion of keyword and vector ranks.
Stage 2: optional cross-encoder rerank.
Stage 3: authority and freshness boost.
Stage 4: cross-referencing, contradiction and echo-chamber checks.
Stage 5: diversity filter (near-duplicates, per-domain cap, MMR).
"""

from __future__ import annotations

import hashlib
import logging
import math
import re
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from groundrank import authority, diversity, freshness, hallucination
from groundrank.diversity import DiversityCandidate
from groundrank.hallucination import DocClaims
from groundrank.models import (
    Claim,
    Contradiction,
    ContradictionSeverity,
    QueryType,
    SourceTier,
    VerificationStatus,
)
from groundrank.query_type import detect_query_type

logger = logging.getLogger(__name__)

Fingerprint = Callable[[str], int]
Snippet = Callable[[str, str, int], str]

_SENTENCE_SPLIT = re.compile(r"[.!?]")
_RERANK_BODY_CHARS = 512
_STAGE3_LIMIT = 30
_SIMHASH_THRESHOLD = 3
_SNIPPET_CHARS = 1500
_NLI_TOP_DOCS = 5
_MAX_KEY_PHRASES = 20

_BASE_CONFIDENCE = {
    VerificationStatus.VERIFIED: 0.9,
    VerificationStatus.PARTIAL: 0.7,
    VerificationStatus.UNVERIFIED: 0.5,
    VerificationStatus.CONTESTED: 0.3,
}

_TIER_ADJUSTMENT = {
    SourceTier.TIER1: 0.1,
    SourceTier.TIER2: 0.05,
    SourceTier.TIER3: 0.0,
    SourceTier.TIER4: -0.05,
}


@dataclass
class RankerConfig:
    """Limits and weights for the ranking pipeline."""

    bm25_top_k: int = 200
    hnsw_top_k: int = 200
    rerank_top_k: int = 50
    min_verification_sources: int = 3
    mmr_lambda: float = 0.7
    max_results_per_domain: int = 2
    min_unique_orgs: int = 3
    min_relevance_score: float = 0.0
    cross_encoder_model_path: str = ""
    source_tiers_path: str = ""


@dataclass
class RankCandidate:
    """A retrieved document entering the pipeline."""

    url: str
    domain: str
    title: str
    body_text: str
    published_date: datetime | None = None
    source_tier: SourceTier = SourceTier.TIER4
    bm25_score: float | None = None
    vector_score: float | None = None
    bm25_rank: int | None = None
    vector_rank: int | None = None
    embedding: list[float] | None = None


@dataclass
class RankedResult:
    """A final result with its confidence metadata."""

    content: str
    url: str
    title: str
    confidence: float
    verification: VerificationStatus
    claims: list[Claim]
    contradictions: list[Contradiction]
    source_tier: SourceTier
    freshness: datetime | None
    relevance_score: float


@dataclass
class SearchResponse:
    """Ranked results together with warnings and timing."""

    results: list[RankedResult]
    warnings: list[str]
    coverage_score: float
    total_pages_crawled: int
    total_time_ms: int
    query: str


@dataclass
class PairScore:
    """A cross-encoder's output for one text pair."""

    score: float
    logits: list[float] = field(default_factory=list)


class NliLabel(Enum):
    """Natural-language-inference outcome for a sentence pair."""

    CONTRADICTION = "contradiction"
    ENTAILMENT = "entailment"
    NEUTRAL = "neutral"


_NLI_LABELS = (NliLabel.CONTRADICTION, NliLabel.ENTAILMENT, NliLabel.NEUTRAL)


class CrossEncoderModel(ABC):
    """A model that scores text pairs; used for reranking and NLI."""

    @abstractmethod
    def score_pairs(self, pairs: Sequence[tuple[str, str]]) -> list[PairScore]:
        """Score each pair; raise on failure."""

    def classify_from_logits(self, logits: Sequence[float]) -> tuple[NliLabel, float]:
        """Label and probability from the first three logits.

        Logits are read in the order contradiction, entailment, neutral.
        """
        probs = softmax_3(logits[0], logits[1], logits[2])
        best = max(range(3), key=probs.__getitem__)
        return _NLI_LABELS[best], probs[best]


def softmax_3(a: float, b: float, c: float) -> tuple[float, float, float]:
    """Numerically stable softmax of three values."""
    peak = max(a, b, c)
    ea, eb, ec = math.exp(a - peak), math.exp(b - peak), math.exp(c - peak)
    total = ea + eb + ec
    return ea / total, eb / total, ec / total


def clean_text_for_nli(text: str) -> str:
    """Drop bracketed citations and tidy leftover spacing."""
    kept: list[str] = []
    in_bracket = False
    for ch in text:
        if ch == "[":
            in_bracket = True
        elif ch == "]":
            in_bracket = False
        elif not in_bracket:
            kept.append(ch)
    result = "".join(kept).replace("  ", " ").replace(" ,", ",").replace(" .", ".")
    return result.strip()


def extract_key_phrases(text: str) -> list[str]:
    """Sentences of 5 to 50 words, at most 20 of them."""
    phrases = []
    for sentence in _SENTENCE_SPLIT.split(text):
        sentence = sentence.strip()
        if 5 <= len(sentence.split()) <= 50:
            phrases.append(sentence)
            if len(phrases) == _MAX_KEY_PHRASES:
                break
    return phrases


def _content_fingerprint(text: str) -> int:
    """64-bit content hash; identical bodies share a fingerprint."""
    return int.from_bytes(hashlib.blake2b(text.encode("utf-8"), digest_size=8).digest(), "big")


def _leading_snippet(body: str, query: str, max_chars: int) -> str:
    """The first ``max_chars`` characters of the body."""
    return body[:max_chars]


def _inverse_square(rank: int) -> float:
    return math.inf if rank == 0 else 1.0 / (rank * rank)


def _fusion_score(candidate: RankCandidate) -> float:
    if candidate.bm25_rank is None and candidate.vector_rank is None:
        return (candidate.bm25_score or 0.0) * 0.5 + (candidate.vector_score or 0.0) * 0.5
    return sum(
        _inverse_square(rank)
        for rank in (candidate.bm25_rank, candidate.vector_rank)
        if rank is not None
    )


def _sort_desc(scored: list[tuple[int, float]]) -> None:
    scored.sort(key=lambda item: item[1], reverse=True)


def _overall_verification(
    claims: Sequence[Claim], contradictions: Sequence[Contradiction]
) -> VerificationStatus:
    statuses = {c.verification for c in claims}
    if VerificationStatus.VERIFIED in statuses:
        return VerificationStatus.VERIFIED
    if VerificationStatus.PARTIAL in statuses:
        return VerificationStatus.PARTIAL
    if contradictions:
        return VerificationStatus.CONTESTED
    return VerificationStatus.UNVERIFIED


class RankingPipeline:
    """Runs the five ranking stages over retrieved candidates."""

    def __init__(
        self,
        config: RankerConfig,
        fingerprint: Fingerprint | None = None,
        snippet: Snippet | None = None,
        reranker: CrossEncoderModel | None = None,
        nli_model: CrossEncoderModel | None = None,
    ) -> None:
        self.config = config
        self.fingerprint = fingerprint or _content_fingerprint
        self.snippet = snippet or _leading_snippet
        self.reranker = reranker
        self.nli_model = nli_model
        if reranker is None:
            logger.info("No cross-encoder reranker; stage 2 passes scores through")
        if nli_model is None:
            logger.info("No NLI model; stage 4 uses heuristics only")

    def rank(
        self, candidates: Sequence[RankCandidate], query: str, top_k: int
    ) -> SearchResponse:
        """Rank candidates for a query and return at most ``top_k`` results."""
        start = time.monotonic()
        candidates = list(candidates)
        qtype = detect_query_type(query)
        logger.info("Starting ranking: %d candidates, %s query", len(candidates), qtype.name)

        # Stage 1: fusion.
        scored = [(i, _fusion_score(c)) for i, c in enumerate(candidates)]
        _sort_desc(scored)
        del scored[max(self.config.bm25_top_k, self.config.hnsw_top_k):]

        # Stage 2: cross-encoder rerank.
        if self.reranker is not None:
            self._rerank(scored, candidates, query)
        del scored[self.config.rerank_top_k:]

        if self.config.min_relevance_score > 0.0:
            before = len(scored)
            scored = [item for item in scored if item[1] >= self.config.min_relevance_score]
            if len(scored) < before:
                logger.debug("Removed %d low-relevance results", before - len(scored))

        # Stage 3: authority and freshness.
        scored = [
            (idx, self._boost(candidates[idx], score, qtype)) for idx, score in scored
        ]
        _sort_desc(scored)
        del scored[_STAGE3_LIMIT:]

        # Stage 4: anti-hallucination.
        doc_claims = [
            DocClaims(
                url=candidates[idx].url,
                domain=candidates[idx].domain,
                key_phrases=extract_key_phrases(candidates[idx].body_text),
            )
            for idx, _ in scored
        ]
        check = hallucination.check_hallucination(doc_claims, self.config.min_unique_orgs)

        if self.nli_model is not None:
            nli_contradictions = self._nli_contradictions(self.nli_model, scored, candidates)
            if nli_contradictions:
                logger.info("NLI contradictions detected: %d", len(nli_contradictions))
                check.contradictions.extend(nli_contradictions)
                check.warnings.append(
                    "NLI model detected semantic contradictions across sources"
                )

        # Stage 5: diversity.
        diversity_candidates = [
            DiversityCandidate(
                url=candidates[idx].url,
                domain=candidates[idx].domain,
                score=score,
                body_hash=self.fingerprint(candidates[idx].body_text),
                embedding=candidates[idx].embedding,
            )
            for idx, score in scored
        ]
        chosen = diversity.diversify(
            diversity_candidates,
            self.config.max_results_per_domain,
            _SIMHASH_THRESHOLD,
            self.config.mmr_lambda,
            top_k,
        )

        results = [
            self._build_result(candidates[scored[di][0]], scored[di][1], check, query)
            for di in chosen
        ]

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.info("Ranking complete: %d results in %d ms", len(results), elapsed_ms)

        return SearchResponse(
            results=results,
            warnings=check.warnings,
            coverage_score=self._coverage(check.unique_orgs),
            total_pages_crawled=len(candidates),
            total_time_ms=elapsed_ms,
            query=query,
        )

    def _coverage(self, unique_orgs: int) -> float:
        if self.config.min_unique_orgs:
            return unique_orgs / self.config.min_unique_orgs
        return math.inf if unique_orgs else math.nan

    def _rerank(
        self,
        scored: list[tuple[int, float]],
        candidates: Sequence[RankCandidate],
        query: str,
    ) -> None:
        pairs = [
            (query, candidates[idx].body_text[:_RERANK_BODY_CHARS]) for idx, _ in scored
        ]
        try:
            scores = self.reranker.score_pairs(pairs)
        except Exception as exc:  # a model failure must not sink the search
            logger.warning("Cross-encoder reranking failed, using fusion only: %s", exc)
            return
        for pos, pair_score in enumerate(scores[: len(scored)]):
            idx, fused = scored[pos]
            scored[pos] = (idx, 0.3 * fused + 0.7 * pair_score.score)
        _sort_desc(scored)

    @staticmethod
    def _boost(candidate: RankCandidate, score: float, qtype: QueryType) -> float:
        auth = authority.authority_boost(candidate.source_tier)
        fresh = freshness.freshness_decay(candidate.published_date, qtype)
        return freshness.authority_freshness_boost(score, auth, fresh, qtype)

    def _build_result(
        self,
        candidate: RankCandidate,
        score: float,
        check: hallucination.HallucinationCheck,
        query: str,
    ) -> RankedResult:
        claims = [c for c in check.claims if c.source_url == candidate.url]
        contras = [
            c
            for c in check.contradictions
            if candidate.url in (c.source_a, c.source_b)
        ]
        verification = _overall_verification(claims, contras)
        confidence = _BASE_CONFIDENCE[verification] + _TIER_ADJUSTMENT[candidate.source_tier]
        return RankedResult(
            content=self.snippet(candidate.body_text, query, _SNIPPET_CHARS),
            url=candidate.url,
            title=candidate.title,
            confidence=min(max(confidence, 0.1), 0.99),
            verification=verification,
            claims=claims,
            contradictions=contras,
            source_tier=candidate.source_tier,
            freshness=candidate.published_date,
            relevance_score=score,
        )

    @staticmethod
    def _first_sentence(body: str) -> str | None:
        for piece in _SENTENCE_SPLIT.split(body):
            cleaned = clean_text_for_nli(piece)
            if len(cleaned.split()) >= 8:
                return cleaned
        return None

    def _nli_contradictions(
        self,
        nli: CrossEncoderModel,
        scored: Sequence[tuple[int, float]],
        candidates: Sequence[RankCandidate],
    ) -> list[Contradiction]:
        sentences: list[tuple[str, str]] = []
        for idx, _ in scored[:_NLI_TOP_DOCS]:
            sentence = self._first_sentence(candidates[idx].body_text)
            if sentence is not None and len(sentence.split()) >= 6:
                sentences.append((sentence, candidates[idx].url))
        if len(sentences) < 2:
            return []

        meta = [
            (i, j)
            for i in range(len(sentences))
            for j in range(i + 1, len(sentences))
        ]
        pairs = [(sentences[i][0], sentences[j][0]) for i, j in meta]
        try:
            scores = nli.score_pairs(pairs)
        except Exception as exc:  # a model failure must not sink the search
            logger.warning("Batched NLI scoring failed: %s", exc)
            return []

        contradictions = []
        for (i, j), pair_score in zip(meta, scores):
            logits = pair_score.logits
            if len(logits) < 3:
                continue
            head = logits[:3]
            if max(head) - min(head) < 0.5:
                continue
            label, conf = nli.classify_from_logits(logits)
            if label is NliLabel.CONTRADICTION and conf > 0.7:
                contradictions.append(
                    Contradiction(
                        claim_a=sentences[i][0],
                        source_a=sentences[i][1],
                        claim_b=sentences[j][0],
                        source_b=sentences[j][1],
                        severity=(
                            ContradictionSeverity.HARD
                            if conf > 0.9
                            else ContradictionSeverity.SOFT
                        ),
                    )
                )
        return contradictions