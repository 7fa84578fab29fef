import dataclasses

import pytest

from groundrank.models import (
    Claim,
    ContradictionSeverity,
    Contradiction,
    QueryType,
    SourceTier,
    VerificationStatus,
)


@pytest.mark.parametrize(
    "enum_cls",
    [SourceTier, QueryType, VerificationStatus, ContradictionSeverity],
)
def test_enum_round_trips_through_value(enum_cls):
    for member in enum_cls:
        assert enum_cls(member.value) is member


def test_unknown_enum_value_rejected():
    with pytest.raises(ValueError):
        SourceTier("tier9")


def test_claim_default_span():
    claim = Claim(
        text="earth orbits the sun",
        source_url="https://a.com/1",
        confidence=0.9,
        verification=VerificationStatus.VERIFIED,
    )
    assert claim.source_span == (0, 0)
    assert claim.verification is VerificationStatus.VERIFIED


def test_claim_is_immutable():
    claim = Claim("x", "https://a.com/1", 0.5, VerificationStatus.UNVERIFIED)
    with pytest.raises(dataclasses.FrozenInstanceError):
        claim.text = "y"
    assert claim.text == "x"


def test_claim_equality_and_replace():
    claim = Claim("x", "https://a.com/1", 0.5, VerificationStatus.UNVERIFIED)
    same = Claim("x", "https://a.com/1", 0.5, VerificationStatus.UNVERIFIED)
    assert claim == same
    changed = dataclasses.replace(claim, verification=VerificationStatus.PARTIAL)
    assert changed.verification is VerificationStatus.PARTIAL
    assert changed.text == claim.text
    assert not changed == claim


def test_contradiction_fields_and_hashable():
    c = Contradiction(
        claim_a="the population is: 100",
        source_a="https://a.com/1",
        claim_b="the population is: 500",
        source_b="https://b.com/1",
        severity=ContradictionSeverity.HARD,
    )
    assert c.source_a == "https://a.com/1"
    assert c.severity is ContradictionSeverity.HARD
    assert len({c, dataclasses.replace(c)}) == 1