"""
KestrelPay - Swarm Engine
Scorer population, heuristics, and vote aggregation.
"""

from .aggregator import Recommendation, VoteAggregator, VoteDistribution
from .engine import SwarmEngine
from .scorer import Scorer, Specialization, Vote, create_population

__all__ = [
    "Recommendation",
    "VoteAggregator",
    "VoteDistribution",
    "SwarmEngine",
    "Scorer",
    "Specialization",
    "Vote",
    "create_population",
]
