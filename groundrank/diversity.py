"""Diversity filtering: near-duplicate removal, per-domain caps and MMR."""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass

_U64_MASK = (1 << 64) - 1


@dataclass
class DiversityCandidate:
    """A ranked document considered for the final, diversified result list."""

    url: str
    domain: str
    score: float
    body_hash: int
    embedding: list[float] | None = None


def hamming_distance(a: int, b: int) -> int:
    """Number of differing bits between two 64-bit fingerprints."""
    return bin((a ^ b) & _U64_MASK).count("1")


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors; 0.0 for mismatched or zero vectors."""
    if len(a) != len(b):
        return 0.0
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = sum(x * x for x in a)
    norm_b = sum(y * y for y in b)
    denom = math.sqrt(norm_a) * math.sqrt(norm_b)
    if denom < 1e-10:
        return 0.0
    return dot / denom


def diversify(
    candidates: Sequence[DiversityCandidate],
    max_per_domain: int,
    simhash_threshold: int,
    mmr_lambda: float,
    top_k: int,
) -> list[int]:
    """Pick indices of candidates to keep, in their original order.

    A candidate is skipped when its fingerprint is within ``simhash_threshold``
    bits of one already kept, when its domain already holds
    ``max_per_domain`` results, or when, with at least three results kept,
    its MMR score ``lambda * score - (1 - lambda) * max_similarity`` is
    negative.
    """
    selected: list[int] = []
    selected_hashes: list[int] = []
    domain_counts: Counter[str] = Counter()

    for idx, candidate in enumerate(candidates):
        if len(selected) >= top_k:
            break

        if any(
            hamming_distance(candidate.body_hash, h) <= simhash_threshold
            for h in selected_hashes
        ):
            continue

        if domain_counts[candidate.domain] >= max_per_domain:
            continue

        if selected and candidate.embedding is not None:
            similarities = (
                cosine_similarity(candidate.embedding, candidates[si].embedding)
                for si in selected
                if candidates[si].embedding is not None
            )
            max_sim = max(similarities, default=0.0)
            max_sim = max(max_sim, 0.0)
            mmr_score = mmr_lambda * candidate.score - (1.0 - mmr_lambda) * max_sim
            if mmr_score < 0.0 and len(selected) >= 3:
                continue

        selected.append(idx)
        selected_hashes.append(candidate.body_hash)
        domain_counts[candidate.domain] += 1

    return selected