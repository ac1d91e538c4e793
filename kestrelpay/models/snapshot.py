"""
KestrelPay - Condition Snapshots
Market and network snapshots consumed by the swarm, and their providers.
"""

import logging
import random
import time
import requests
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from ..config import SnapshotConfig, SnapshotSource


logger = logging.getLogger(__name__)


class SnapshotUnavailable(RuntimeError):
    """A snapshot could not be fetched and no fallback was allowed."""


@dataclass(frozen=True)
class MarketSnapshot:
    """Execution price conditions (gas price in gwei)."""
    gas_price: float
    average_gas: float
    timestamp: float = 0.0

    @classmethod
    def neutral(cls) -> "MarketSnapshot":
        return cls(gas_price=45.0, average_gas=45.0, timestamp=time.time())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MarketSnapshot":
        return cls(
            gas_price=float(_pick(data, "gas_price", "gasPrice")),
            average_gas=float(_pick(data, "average_gas", "averageGas")),
            timestamp=float(data.get("timestamp") or time.time())
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class NetworkSnapshot:
    """Network load conditions."""
    pending_transactions: int
    max_capacity: int
    mempool_size: int
    block_number: int = 0

    @classmethod
    def neutral(cls) -> "NetworkSnapshot":
        return cls(pending_transactions=50000, max_capacity=100000, mempool_size=5000)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NetworkSnapshot":
        return cls(
            pending_transactions=int(_pick(data, "pending_transactions", "pendingTransactions")),
            max_capacity=int(_pick(data, "max_capacity", "maxCapacity")),
            mempool_size=int(_pick(data, "mempool_size", "mempoolSize")),
            block_number=int(_pick(data, "block_number", "blockNumber", default=0))
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


_MISSING = object()


def _pick(data: Dict[str, Any], *keys: str, default: Any = _MISSING) -> Any:
    """Read the first present key, accepting snake_case or camelCase feeds."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    if default is _MISSING:
        raise KeyError(keys[0])
    return default


class SimulatedSnapshotProvider:
    """
    Synthetic snapshots drawn from the injected random source.

    Gas price is uniform in [10, 110) against a fixed 45 gwei average;
    pending transactions fall in [10000, 60000) of a 100000 capacity and
    mempool size in [2000, 10000).
    """

    BLOCK_NUMBER = 18965432

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    def fetch_market_snapshot(self) -> MarketSnapshot:
        return MarketSnapshot(
            gas_price=self.rng.random() * 100 + 10,
            average_gas=45.0,
            timestamp=time.time()
        )

    def fetch_network_snapshot(self) -> NetworkSnapshot:
        return NetworkSnapshot(
            pending_transactions=int(self.rng.random() * 50000) + 10000,
            max_capacity=100000,
            mempool_size=int(self.rng.random() * 8000) + 2000,
            block_number=self.BLOCK_NUMBER
        )


class HttpSnapshotProvider:
    """
    Snapshots fetched from JSON data feeds.

    Handles:
    - Request timeouts and retries
    - Falling back to the last-known-good snapshot
    - Falling back to a neutral snapshot when nothing was ever fetched
    """

    def __init__(self, config: SnapshotConfig, session: Optional[requests.Session] = None):
        """
        Initialize the HTTP provider.

        Args:
            config: Snapshot configuration with feed URLs.
            session: Optional requests session (shared connection pool).
        """
        self.market_url = config.market_url
        self.network_url = config.network_url
        self.timeout = config.timeout
        self.retry_attempts = max(1, config.retry_attempts)
        self.retry_delay = max(0.0, config.retry_delay)
        self.fallback_to_default = config.fallback_to_default
        self.session = session or requests.Session()
        self._last_market: Optional[MarketSnapshot] = None
        self._last_network: Optional[NetworkSnapshot] = None

    def _get_json(self, url: str) -> Dict[str, Any]:
        last_error = None
        for attempt in range(self.retry_attempts):
            try:
                response = self.session.get(url, timeout=self.timeout)
                if response.status_code == 200:
                    return response.json()
                last_error = f"HTTP {response.status_code}"
            except requests.exceptions.Timeout:
                last_error = "Request timeout"
            except requests.exceptions.ConnectionError:
                last_error = "Connection error"
            except ValueError as e:
                last_error = f"Invalid JSON: {e}"
            except requests.exceptions.RequestException as e:
                last_error = str(e) or type(e).__name__

            if attempt < self.retry_attempts - 1:
                time.sleep(self.retry_delay)
        raise SnapshotUnavailable(
            f"Fetching {url} failed after {self.retry_attempts} attempts: {last_error}"
        )

    def fetch_market_snapshot(self) -> MarketSnapshot:
        try:
            snapshot = MarketSnapshot.from_dict(self._get_json(self.market_url))
        except (SnapshotUnavailable, KeyError, TypeError, ValueError) as e:
            return self._fallback("market", self._last_market, MarketSnapshot.neutral, e)
        self._last_market = snapshot
        return snapshot

    def fetch_network_snapshot(self) -> NetworkSnapshot:
        try:
            snapshot = NetworkSnapshot.from_dict(self._get_json(self.network_url))
        except (SnapshotUnavailable, KeyError, TypeError, ValueError) as e:
            return self._fallback("network", self._last_network, NetworkSnapshot.neutral, e)
        self._last_network = snapshot
        return snapshot

    def _fallback(self, kind, last_known, neutral, error):
        if last_known is not None:
            logger.warning("Using last known %s snapshot: %s", kind, error)
            return last_known
        if self.fallback_to_default:
            logger.warning("Using neutral %s snapshot: %s", kind, error)
            return neutral()
        raise SnapshotUnavailable(f"No {kind} snapshot available: {error}") from error


def create_snapshot_provider(config: SnapshotConfig, rng: Optional[random.Random] = None):
    """Create the provider selected by configuration."""
    if config.source is SnapshotSource.HTTP:
        return HttpSnapshotProvider(config)
    return SimulatedSnapshotProvider(rng)
