"""
Fixtures shared by the KestrelPay tests: scripted randomness, fixed
snapshots and a fixed clock.
"""

from datetime import datetime

import pytest

from kestrelpay.config import AppConfig, IntentConfig
from kestrelpay.models import MarketSnapshot, NetworkSnapshot
from kestrelpay.swarm import Scorer, Specialization, SwarmEngine


class ScriptedRandom:
    """Returns queued values from random(), then a default."""

    def __init__(self, values=(), default=0.5):
        self.values = list(values)
        self.default = default

    def random(self):
        if self.values:
            return self.values.pop(0)
        return self.default

    def choice(self, seq):
        return seq[int(self.random() * len(seq))]


class FixedSnapshotProvider:
    def __init__(self, market=None, network=None):
        self.market = market or MarketSnapshot(gas_price=45.0, average_gas=45.0)
        self.network = network or NetworkSnapshot(
            pending_transactions=50000, max_capacity=100000, mempool_size=5000
        )
        self.market_calls = 0
        self.network_calls = 0

    def fetch_market_snapshot(self):
        self.market_calls += 1
        return self.market

    def fetch_network_snapshot(self):
        self.network_calls += 1
        return self.network


NOON = datetime(2026, 3, 14, 12, 0, 0)


def fixed_clock(moment=NOON):
    return lambda: moment


def single_price_engine(gas_price, average_gas=50.0, base_draw=0.99):
    """One price-analysis scorer of weight 1.0 against a fixed market."""
    provider = FixedSnapshotProvider(
        market=MarketSnapshot(gas_price=gas_price, average_gas=average_gas)
    )
    scorer = Scorer(id=0, specialization=Specialization.PRICE_ANALYSIS, weight=1.0)
    return SwarmEngine(
        provider,
        rng=ScriptedRandom(default=base_draw),
        clock=fixed_clock(),
        scorers=[scorer]
    )


@pytest.fixture
def provider():
    return FixedSnapshotProvider()


@pytest.fixture
def recommending_engine():
    # 10 < 0.7 * 50, base 0.697 capped at 0.95
    return single_price_engine(gas_price=10.0)


@pytest.fixture
def rejecting_engine():
    # 80 > 1.3 * 50, rejection at 0.897 confidence
    return single_price_engine(gas_price=80.0)


@pytest.fixture
def app_config():
    return AppConfig(intents=IntentConfig(seed_sample_intent=False))
