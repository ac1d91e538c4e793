import pytest

from kestrelpay.swarm import Vote, VoteAggregator
from kestrelpay.swarm.aggregator import FALLBACK_REASON, round_half_up


def vote(recommend, confidence=0.6, reason="r", weight=1.0, scorer_id=0):
    return Vote(
        scorer_id=scorer_id,
        recommend=recommend,
        confidence=confidence,
        reason=reason,
        weight=weight,
    )


def test_threshold_is_inclusive():
    result = VoteAggregator(threshold=75).aggregate([vote(True, 0.75)])
    assert result.confidence == 75
    assert result.recommended is True


def test_just_below_threshold_is_not_recommended():
    result = VoteAggregator(threshold=75).aggregate([vote(True, 0.7499)])
    assert result.confidence == 75
    assert result.recommended is False


def test_rejecting_vote_contributes_its_complement():
    aggregator = VoteAggregator()
    assert aggregator.calculate_confidence([vote(False, 0.9)]) == pytest.approx(10.0)
    assert aggregator.calculate_confidence([vote(False, 0.2)]) == pytest.approx(80.0)


def test_weights_scale_contributions():
    votes = [vote(True, 0.9, weight=1.0), vote(True, 0.3, weight=0.5)]
    # (0.9 + 0.15) / 1.5
    assert VoteAggregator().calculate_confidence(votes) == pytest.approx(70.0)


@pytest.mark.parametrize("low, high", [(0.4, 0.5), (0.5, 0.95), (0.1, 1.0)])
def test_raising_a_recommending_confidence_never_lowers_the_aggregate(low, high):
    others = [vote(False, 0.7, weight=0.4), vote(True, 0.55, weight=0.9)]
    aggregator = VoteAggregator()
    before = aggregator.calculate_confidence(others + [vote(True, low, weight=0.6)])
    after = aggregator.calculate_confidence(others + [vote(True, high, weight=0.6)])
    assert after >= before


def test_dominant_reason_is_most_cited_positive_reason():
    votes = [
        vote(True, reason="A"),
        vote(True, reason="A"),
        vote(True, reason="B"),
        vote(False, reason="C"),
    ]
    assert VoteAggregator().aggregate(votes).reason == "A"


def test_negative_reasons_are_not_counted():
    votes = [vote(True, reason="A"), vote(False, reason="C"), vote(False, reason="C")]
    assert VoteAggregator().aggregate(votes).reason == "A"


def test_dominant_reason_tie_goes_to_first_seen():
    votes = [
        vote(True, reason="B"),
        vote(True, reason="A"),
        vote(True, reason="A"),
        vote(True, reason="B"),
    ]
    assert VoteAggregator().aggregate(votes).reason == "B"


def test_all_negative_votes_use_fallback_reason():
    votes = [vote(False, reason="X"), vote(False, reason="Y")]
    result = VoteAggregator().aggregate(votes)
    assert result.reason == FALLBACK_REASON
    assert result.vote_distribution.positive == 0


def test_vote_distribution_totals():
    votes = [vote(True), vote(False), vote(True), vote(True), vote(False)]
    distribution = VoteAggregator().aggregate(votes).vote_distribution
    assert distribution.total == 5
    assert distribution.positive == 3
    assert distribution.negative == 2


def test_empty_vote_set_is_neutral():
    result = VoteAggregator().aggregate([])
    assert result.recommended is False
    assert result.confidence == 0
    assert result.reason == FALLBACK_REASON
    assert result.vote_distribution.to_dict() == {"total": 0, "positive": 0, "negative": 0}


def test_zero_threshold_still_rejects_empty_population():
    assert VoteAggregator(threshold=0).aggregate([]).recommended is False


def test_last_recommendation_is_replaced():
    aggregator = VoteAggregator()
    assert aggregator.last_recommendation is None
    first = aggregator.aggregate([vote(True, 0.9, reason="first")])
    second = aggregator.aggregate([vote(False, 0.9, reason="second")])
    assert aggregator.last_recommendation is second
    assert first.reason == "first"
    assert second.reason == FALLBACK_REASON


@pytest.mark.parametrize("value, expected", [(74.5, 75), (74.49, 74), (0.5, 1), (100.0, 100)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_recommendation_to_dict():
    result = VoteAggregator().aggregate([vote(True, 0.8, reason="A")])
    data = result.to_dict()
    assert data["recommended"] is True
    assert data["confidence"] == 80
    assert data["reason"] == "A"
    assert data["timestamp"].endswith("Z")
    assert data["vote_distribution"]["total"] == 1
