"""Rank fusion and maximal marginal relevance selection."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence


def isr_fuse(
    ranked_lists: Iterable[Sequence[tuple[str, float]]],
) -> list[tuple[str, float]]:
    """Inverse Square Rank fusion: each document scores ``sum(1 / rank**2)``.

    Ranks are 1-based positions within each list; the incoming scores are
    ignored. Results are sorted by fused score, highest first.
    """
    scores: dict[str, float] = defaultdict(float)
    for ranked in ranked_lists:
        for rank, (doc_id, _score) in enumerate(ranked, start=1):
            scores[doc_id] += 1.0 / (rank * rank)
    return sorted(scores.items(), key=lambda item: item[1], reverse=True)


def mmr_select(
    candidates: Sequence[tuple[str, float]],
    similarity: Callable[[str, str], float],
    mmr_lambda: float,
    top_k: int,
) -> list[tuple[str, float]]:
    """Greedy Maximal Marginal Relevance selection.

    Each step picks the candidate maximising
    ``lambda * relevance - (1 - lambda) * max_similarity_to_selected``.
    """
    selected: list[tuple[str, float]] = []
    remaining = list(candidates)

    while len(selected) < top_k and remaining:
        best_idx = 0
        best_mmr = float("-inf")
        for idx, (doc_id, relevance) in enumerate(remaining):
            max_sim = max(
                (similarity(doc_id, sel_id) for sel_id, _ in selected),
                default=0.0,
            )
            max_sim = max(max_sim, 0.0)
            mmr = mmr_lambda * relevance - (1.0 - mmr_lambda) * max_sim
            if mmr > best_mmr:
                best_mmr = mmr
                best_idx = idx
        selected.append(remaining.pop(best_idx))

    return selected