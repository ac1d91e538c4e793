"""
KestrelPay - Vote Aggregation
Combines scorer votes into a single execution recommendation.
"""

import math
from collections import Counter
from dataclasses import dataclass, field

from typing import Any, Dict, List, Optional, Sequence

from ..utils.timestamps import utc_timestamp
from .scorer import Vote


DEFAULT_THRESHOLD = 75.0
FALLBACK_REASON = "Conditions optimal"


@dataclass(frozen=True)
class VoteDistribution:
    """Vote tally for one cycle."""
    total: int = 0
    positive: int = 0
    negative: int = 0

    def to_dict(self) -> Dict[str, int]:
        return {
            "total": self.total,
            "positive": self.positive,
            "negative": self.negative
        }


@dataclass(frozen=True)
class Recommendation:
    """The swarm's decision for one evaluation cycle."""
    recommended: bool
    confidence: int  # 0-100
    reason: str
    timestamp: str = field(default_factory=utc_timestamp)
    vote_distribution: VoteDistribution = field(default_factory=VoteDistribution)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recommended": self.recommended,
            "confidence": self.confidence,
            "reason": self.reason,
            "timestamp": self.timestamp,
            "vote_distribution": self.vote_distribution.to_dict()
        }


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class VoteAggregator:
    """
    Reduces a vote set to a Recommendation.

    Aggregation:
    1. Each vote contributes confidence * weight when it recommends,
       (1 - confidence) * weight when it rejects
    2. Aggregate confidence = 100 * contributions / total weight
    3. Recommended when the aggregate meets the threshold (inclusive)
    4. Reason is the most cited reason among recommending votes,
       first-seen wins ties
    """

    def __init__(self, threshold: float = DEFAULT_THRESHOLD, fallback_reason: str = FALLBACK_REASON):
        """
        Initialize aggregator.

        Args:
            threshold: Minimum aggregate confidence (0-100) to recommend.
            fallback_reason: Reason used when no vote recommends.
        """
        self.threshold = threshold
        self.fallback_reason = fallback_reason
        self.last_recommendation: Optional[Recommendation] = None

    def calculate_confidence(self, votes: Sequence[Vote]) -> float:
        """
        Weighted aggregate confidence on a 0-100 scale.

        Returns 0.0 when the total weight is zero (empty population).
        """
        total_weight = 0.0
        weighted_sum = 0.0

        for vote in votes:
            if vote.recommend:
                weighted_sum += vote.confidence * vote.weight
            else:
                weighted_sum += (1 - vote.confidence) * vote.weight
            total_weight += vote.weight

        if total_weight <= 0:
            return 0.0
        return (weighted_sum / total_weight) * 100

    def dominant_reason(self, votes: Sequence[Vote]) -> str:
        """Most frequently cited reason among recommending votes."""
        reason_counts = Counter(vote.reason for vote in votes if vote.recommend)
        if not reason_counts:
            return self.fallback_reason
        # most_common keeps insertion order among equal counts
        return reason_counts.most_common(1)[0][0]

    def aggregate(self, votes: List[Vote]) -> Recommendation:
        """
        Combine votes into a Recommendation and store it as the last one.

        Args:
            votes: One vote per scorer.

        Returns:
            The new Recommendation.
        """
        positive = sum(1 for vote in votes if vote.recommend)
        distribution = VoteDistribution(
            total=len(votes),
            positive=positive,
            negative=len(votes) - positive
        )

        if not votes:
            recommendation = Recommendation(
                recommended=False,
                confidence=0,
                reason=self.fallback_reason,
                vote_distribution=distribution
            )
        else:
            aggregate_confidence = self.calculate_confidence(votes)
            recommendation = Recommendation(
                recommended=aggregate_confidence >= self.threshold,
                confidence=round_half_up(aggregate_confidence),
                reason=self.dominant_reason(votes),
                vote_distribution=distribution
            )

        self.last_recommendation = recommendation
        return recommendation
