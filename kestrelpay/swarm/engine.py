"""
KestrelPay - Swarm Engine
Runs evaluation cycles over a fixed scorer population.
"""

import logging
import random
import threading
from collections import Counter
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..config import SwarmConfig
from ..models.intent import IntentDescriptor
from .aggregator import DEFAULT_THRESHOLD, Recommendation, VoteAggregator
from .heuristics import Clock, Conditions, evaluate_scorer
from .scorer import Scorer, create_population


logger = logging.getLogger(__name__)


class SwarmEngine:
    """
    Evaluates payment intents against current conditions.

    Cycle:
    1. Fetch market and network snapshots
    2. Every scorer votes on the same snapshots and intent
    3. Votes are aggregated into one Recommendation
    4. The Recommendation replaces the previous one

    Cycles are serialized; the population never changes after
    construction.
    """

    def __init__(
        self,
        snapshot_provider,
        population_size: int = 25,
        confidence_threshold: float = DEFAULT_THRESHOLD,
        rng: Optional[random.Random] = None,
        clock: Optional[Clock] = None,
        scorers: Optional[List[Scorer]] = None
    ):
        """
        Initialize the engine.

        Args:
            snapshot_provider: Object with fetch_market_snapshot() and
                fetch_network_snapshot().
            population_size: Number of scorers to create.
            confidence_threshold: Aggregate confidence (0-100) required to recommend.
            rng: Random source for population, base confidence and simulated signals.
            clock: Returns the current local datetime.
            scorers: Prebuilt population; overrides population_size.
        """
        self.snapshot_provider = snapshot_provider
        self.rng = rng or random.Random()
        self.clock = clock or datetime.now
        self.aggregator = VoteAggregator(threshold=confidence_threshold)
        self._scorers: List[Scorer] = (
            list(scorers) if scorers is not None
            else create_population(population_size, self.rng)
        )
        self._lock = threading.Lock()

    @classmethod
    def from_config(cls, config: SwarmConfig, snapshot_provider, rng: Optional[random.Random] = None) -> "SwarmEngine":
        """Create an engine from swarm configuration."""
        if rng is None:
            rng = random.Random(config.seed)
        return cls(
            snapshot_provider,
            population_size=config.population_size,
            confidence_threshold=config.confidence_threshold,
            rng=rng
        )

    @property
    def scorers(self) -> List[Scorer]:
        return list(self._scorers)

    @property
    def threshold(self) -> float:
        return self.aggregator.threshold

    @property
    def last_recommendation(self) -> Optional[Recommendation]:
        return self.aggregator.last_recommendation

    def evaluate(self, intent: Optional[IntentDescriptor] = None) -> Recommendation:
        """
        Run one evaluation cycle.

        Args:
            intent: The candidate payment; an empty descriptor if omitted.

        Returns:
            The new current Recommendation.

        Raises:
            SnapshotUnavailable: If a snapshot could not be obtained. The
                previous Recommendation stays current.
        """
        intent = intent or IntentDescriptor()

        with self._lock:
            market = self.snapshot_provider.fetch_market_snapshot()
            network = self.snapshot_provider.fetch_network_snapshot()
            conditions = Conditions(market=market, network=network, intent=intent, now=self.clock())

            votes = [evaluate_scorer(scorer, conditions, self.rng) for scorer in self._scorers]
            recommendation = self.aggregator.aggregate(votes)

        logger.debug(
            "Swarm cycle: %d/%d positive, confidence %d, recommended=%s",
            recommendation.vote_distribution.positive,
            recommendation.vote_distribution.total,
            recommendation.confidence,
            recommendation.recommended
        )
        return recommendation

    def get_status(self) -> Dict[str, Any]:
        """Population composition and last decision time."""
        with self._lock:
            last = self.aggregator.last_recommendation
            counts = Counter(scorer.specialization.value for scorer in self._scorers)
            return {
                "population_size": len(self._scorers),
                "threshold": self.aggregator.threshold,
                "last_decision_time": last.timestamp if last else None,
                "specialization_counts": dict(counts)
            }
