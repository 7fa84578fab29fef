import pytest

from groundrank.fusion import isr_fuse, mmr_select


def test_isr_ranks_consensus_higher():
    list_a = [("doc1", 0.9), ("doc2", 0.8), ("doc3", 0.7)]
    list_b = [("doc2", 0.95), ("doc1", 0.85), ("doc4", 0.6)]

    fused = isr_fuse([list_a, list_b])

    assert fused[0][0] in ("doc1", "doc2")
    assert fused[1][0] in ("doc1", "doc2")
    assert len(fused) == 4


def test_isr_scores_follow_inverse_square_rank():
    fused = dict(isr_fuse([[("a", 0.1), ("b", 0.9)]]))
    assert fused["a"] == pytest.approx(1.0)
    assert fused["b"] == pytest.approx(0.25)


def test_isr_empty():
    assert isr_fuse([]) == []


def _sim(x, y):
    if {x, y} == {"a", "b"}:
        return 0.95
    return 0.1


def test_mmr_promotes_diversity():
    candidates = [("a", 1.0), ("b", 0.6), ("c", 0.5)]
    selected = mmr_select(candidates, _sim, 0.5, 2)
    assert selected[0][0] == "a"
    assert selected[1][0] == "c"


def test_mmr_pure_relevance_orders_by_score():
    candidates = [("a", 1.0), ("b", 0.6), ("c", 0.5)]
    selected = mmr_select(candidates, _sim, 1.0, 3)
    assert [doc for doc, _ in selected] == ["a", "b", "c"]


def test_mmr_top_k_bounds():
    candidates = [("a", 1.0), ("b", 0.6)]
    assert mmr_select(candidates, _sim, 0.5, 0) == []
    assert len(mmr_select(candidates, _sim, 0.5, 10)) == 2


def test_mmr_does_not_modify_input():
    candidates = [("a", 1.0), ("b", 0.6), ("c", 0.5)]
    mmr_select(candidates, _sim, 0.5, 3)
    assert candidates == [("a", 1.0), ("b", 0.6), ("c", 0.5)]