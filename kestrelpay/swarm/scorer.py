"""
KestrelPay - Scorer Population
Independent scoring units and the votes they cast.
"""

import random
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, List, Optional


MIN_WEIGHT = 0.2
MAX_WEIGHT = 1.0


class Specialization(str, Enum):
    """Which heuristic a scorer runs."""
    PRICE_ANALYSIS = "price-analysis"
    CONGESTION_ANALYSIS = "congestion-analysis"
    TEMPORAL_PATTERN = "temporal-pattern"
    LIQUIDITY_FLOW = "liquidity-flow"
    POOL_DENSITY = "pool-density"
    EXECUTION_TIMING = "execution-timing"


@dataclass(frozen=True)
class Vote:
    """One scorer's output for one evaluation cycle."""
    scorer_id: int
    recommend: bool
    confidence: float  # 0-1
    reason: str
    weight: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Scorer:
    """A voting unit with a fixed specialization and weight."""
    id: int
    specialization: Specialization
    weight: float
    last_vote: Optional[Vote] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "specialization": self.specialization.value,
            "weight": self.weight,
            "last_vote": self.last_vote.to_dict() if self.last_vote else None
        }


def draw_weight(rng: random.Random) -> float:
    """Uniform weight in (MIN_WEIGHT, MAX_WEIGHT]."""
    return MAX_WEIGHT - rng.random() * (MAX_WEIGHT - MIN_WEIGHT)


def create_population(count: int, rng: Optional[random.Random] = None) -> List[Scorer]:
    """
    Create a scorer population.

    Specializations are drawn independently, so duplicates are expected.

    Args:
        count: Number of scorers.
        rng: Random source; a fresh unseeded one if omitted.

    Returns:
        Scorers with sequential ids starting at 0.
    """
    if count < 0:
        raise ValueError(f"Population size must be >= 0, got {count}")

    rng = rng or random.Random()
    specializations = list(Specialization)
    return [
        Scorer(
            id=i,
            specialization=rng.choice(specializations),
            weight=draw_weight(rng)
        )
        for i in range(count)
    ]
