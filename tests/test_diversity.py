import pytest

from groundrank.diversity import (
    DiversityCandidate,
    cosine_similarity,
    diversify,
    hamming_distance,
)


def make_candidate(url, domain, score, body_hash, embedding=None):
    return DiversityCandidate(
        url=url, domain=domain, score=score, body_hash=body_hash, embedding=embedding
    )


def test_respects_domain_cap():
    candidates = [
        make_candidate("https://a.com/1", "a.com", 1.0, 0xAAAA000000000000),
        make_candidate("https://a.com/2", "a.com", 0.9, 0xBBBB000000000000),
        make_candidate("https://a.com/3", "a.com", 0.8, 0xCCCC000000000000),
        make_candidate("https://b.com/1", "b.com", 0.7, 0xDDDD000000000000),
    ]
    selected = diversify(candidates, 2, 3, 0.7, 10)
    a_count = sum(1 for i in selected if candidates[i].domain == "a.com")
    assert a_count <= 2
    assert 3 in selected


def test_removes_near_duplicates():
    candidates = [
        make_candidate("https://a.com/1", "a.com", 1.0, 0xFF00FF00),
        make_candidate("https://b.com/1", "b.com", 0.9, 0xFF00FF01),
        make_candidate("https://c.com/1", "c.com", 0.8, 0x00FF00FF),
    ]
    selected = diversify(candidates, 5, 3, 0.7, 10)
    assert len(selected) == 2
    assert 0 in selected
    assert 2 in selected


def test_top_k_limits_output():
    candidates = [
        make_candidate(
            f"https://site{i}.com/page", f"site{i}.com", 1.0 - i * 0.01, i * 1000000
        )
        for i in range(20)
    ]
    selected = diversify(candidates, 5, 3, 0.7, 5)
    assert len(selected) == 5


def test_mmr_penalizes_similar_embeddings():
    candidates = [
        make_candidate("https://a.com/1", "a.com", 1.0, 1, [1.0, 0.0, 0.0]),
        make_candidate("https://b.com/1", "b.com", 0.95, 2, [0.99, 0.01, 0.0]),
        make_candidate("https://c.com/1", "c.com", 0.5, 3, [0.0, 1.0, 0.0]),
    ]
    selected = diversify(candidates, 5, 3, 0.3, 10)
    assert 0 in selected
    assert selected[0] == 0


def test_mmr_skips_similar_after_three_results():
    embedding = [1.0, 0.0]
    candidates = [
        make_candidate("https://a.com/1", "a.com", 0.1, 0x0, embedding),
        make_candidate("https://b.com/1", "b.com", 0.1, 0xFF, embedding),
        make_candidate("https://c.com/1", "c.com", 0.1, 0xFF00, embedding),
        make_candidate("https://d.com/1", "d.com", 0.1, 0xFF0000, embedding),
    ]
    selected = diversify(candidates, 5, 3, 0.3, 10)
    assert selected == [0, 1, 2]


def test_empty_input():
    assert diversify([], 5, 3, 0.7, 10) == []


def test_hamming_distance_counts_bits():
    assert hamming_distance(0xFF00FF00, 0xFF00FF01) == 1
    assert hamming_distance(0, 0) == 0
    assert hamming_distance(0, 0xFFFFFFFFFFFFFFFF) == 64


def test_cosine_similarity_identical_and_orthogonal():
    assert cosine_similarity([1.0, 2.0], [1.0, 2.0]) == pytest.approx(1.0)
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == 0.0


def test_cosine_similarity_degenerate_inputs():
    assert cosine_similarity([1.0, 0.0], [1.0]) == 0.0
    assert cosine_similarity([0.0, 0.0], [1.0, 1.0]) == 0.0