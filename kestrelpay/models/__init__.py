"""
KestrelPay - Data Models
Payment intents and the condition snapshots the swarm scores against.
"""

from .intent import ConditionType, IntentDescriptor, IntentStatus, PaymentIntent
from .snapshot import (
    HttpSnapshotProvider,
    MarketSnapshot,
    NetworkSnapshot,
    SimulatedSnapshotProvider,
    SnapshotUnavailable,
    create_snapshot_provider,
)

__all__ = [
    "ConditionType",
    "IntentDescriptor",
    "IntentStatus",
    "PaymentIntent",
    "HttpSnapshotProvider",
    "MarketSnapshot",
    "NetworkSnapshot",
    "SimulatedSnapshotProvider",
    "SnapshotUnavailable",
    "create_snapshot_provider",
]
