"""
KestrelPay - Scorer Heuristics
Per-specialization scoring of current conditions.

Every heuristic starts from a base confidence drawn from [0.4, 0.7) for
the cycle, so repeated evaluation of identical inputs is not
deterministic unless the random source is.
"""

import logging
import random
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict

from ..models.intent import IntentDescriptor
from ..models.snapshot import MarketSnapshot, NetworkSnapshot
from .scorer import Scorer, Specialization, Vote


logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


@dataclass(frozen=True)
class Assessment:
    """What a heuristic concludes before it is attributed to a scorer."""
    recommend: bool
    confidence: float
    reason: str


@dataclass(frozen=True)
class Conditions:
    """Everything a heuristic may look at during one cycle."""
    market: MarketSnapshot
    network: NetworkSnapshot
    intent: IntentDescriptor
    now: datetime


UNKNOWN_ASSESSMENT = Assessment(recommend=False, confidence=0.1, reason="Unknown specialization")


def draw_base_confidence(rng: random.Random) -> float:
    return rng.random() * 0.3 + 0.4


def analyze_price(conditions: Conditions, base: float, rng: random.Random) -> Assessment:
    current = conditions.market.gas_price
    average = conditions.market.average_gas

    if current < average * 0.7:
        return Assessment(True, min(base + 0.3, 0.95), "Gas prices significantly below average")
    if current > average * 1.3:
        return Assessment(False, base + 0.2, "Gas prices elevated")
    return Assessment(True, base, "Gas prices at normal levels")


def analyze_congestion(conditions: Conditions, base: float, rng: random.Random) -> Assessment:
    network = conditions.network
    congestion = network.pending_transactions / network.max_capacity if network.max_capacity else 1.0

    if congestion < 0.3:
        return Assessment(True, min(base + 0.25, 0.9), "Low network congestion")
    if congestion > 0.8:
        return Assessment(False, base + 0.15, "High network congestion")
    return Assessment(True, base, "Moderate network congestion")


def analyze_temporal(conditions: Conditions, base: float, rng: random.Random) -> Assessment:
    # Low-activity hours
    if 2 <= conditions.now.hour <= 6:
        return Assessment(True, min(base + 0.2, 0.85), "Optimal time window (low activity hours)")
    return Assessment(True, base, "Standard time window")


def analyze_liquidity(conditions: Conditions, base: float, rng: random.Random) -> Assessment:
    # Simulated signal, independent of the inputs
    liquidity_score = rng.random()

    if liquidity_score > 0.7:
        return Assessment(True, min(base + 0.15, 0.8), "High liquidity conditions")
    return Assessment(True, base - 0.1, "Moderate liquidity")


def analyze_mempool(conditions: Conditions, base: float, rng: random.Random) -> Assessment:
    density = conditions.network.mempool_size / 10000

    if density < 0.2:
        return Assessment(True, min(base + 0.2, 0.9), "Low mempool density")
    return Assessment(True, base, "Normal mempool conditions")


def analyze_execution(conditions: Conditions, base: float, rng: random.Random) -> Assessment:
    deadline = conditions.intent.deadline()
    if deadline is not None:
        remaining = deadline.timestamp() - conditions.now.timestamp()
        if remaining < 3600:
            return Assessment(True, min(base + 0.25, 0.95), "Approaching execution deadline")
    return Assessment(True, base, "Standard execution timing")


HEURISTICS: Dict[Specialization, Callable[[Conditions, float, random.Random], Assessment]] = {
    Specialization.PRICE_ANALYSIS: analyze_price,
    Specialization.CONGESTION_ANALYSIS: analyze_congestion,
    Specialization.TEMPORAL_PATTERN: analyze_temporal,
    Specialization.LIQUIDITY_FLOW: analyze_liquidity,
    Specialization.POOL_DENSITY: analyze_mempool,
    Specialization.EXECUTION_TIMING: analyze_execution,
}


def evaluate_scorer(scorer: Scorer, conditions: Conditions, rng: random.Random) -> Vote:
    """
    Produce this cycle's vote for one scorer and record it as its last vote.

    A missing or failing heuristic yields a low-confidence rejection
    instead of aborting the cycle.
    """
    base = draw_base_confidence(rng)
    heuristic = HEURISTICS.get(scorer.specialization)

    if heuristic is None:
        assessment = UNKNOWN_ASSESSMENT
    else:
        try:
            assessment = heuristic(conditions, base, rng)
        except Exception:
            logger.error(
                "Heuristic %s failed for scorer %d",
                scorer.specialization, scorer.id, exc_info=True
            )
            assessment = UNKNOWN_ASSESSMENT

    vote = Vote(
        scorer_id=scorer.id,
        recommend=assessment.recommend,
        confidence=min(1.0, max(0.0, assessment.confidence)),
        reason=assessment.reason,
        weight=scorer.weight
    )
    scorer.last_vote = vote
    return vote
