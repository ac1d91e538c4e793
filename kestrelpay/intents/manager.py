"""
KestrelPay - Intent Manager
Handles the payment intent lifecycle and analytics counters.
"""

import logging
import uuid
from dataclasses import dataclass, asdict

from typing import Any, Dict, List, Optional

from ..config import IntentConfig
from ..models.intent import ConditionType, IntentStatus, PaymentIntent
from ..swarm.aggregator import Recommendation
from ..swarm.engine import SwarmEngine
from ..utils.timestamps import utc_timestamp


logger = logging.getLogger(__name__)


class IntentNotPending(ValueError):
    """The intent already left the pending state."""


class ExecutionNotRecommended(ValueError):
    """The swarm did not recommend executing the intent now."""

    def __init__(self, recommendation: Recommendation):
        super().__init__("Execution not recommended")
        self.recommendation = recommendation


@dataclass
class Analytics:
    """Running intent counters."""
    total_intents: int = 0
    executed_intents: int = 0
    cancelled_intents: int = 0
    total_volume: float = 0.0
    average_confidence: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class IntentManager:
    """
    Manages payment intents in memory.

    Lifecycle:
    1. Created pending, with an initial swarm analysis
    2. Executed only if a fresh analysis recommends it
    3. Or cancelled while still pending
    """

    def __init__(self, engine: SwarmEngine, config: Optional[IntentConfig] = None):
        """
        Initialize intent manager.

        Args:
            engine: Swarm engine used for analyses.
            config: Intent configuration.
        """
        self.engine = engine
        self.config = config or IntentConfig()
        self._intents: Dict[str, PaymentIntent] = {}
        self.analytics = Analytics()

        if self.config.seed_sample_intent:
            self._seed_sample_intent()

    def _seed_sample_intent(self):
        """Store one executed demo intent."""
        now = utc_timestamp()
        sample = PaymentIntent(
            id="sample-1",
            sender="0xUser123...",
            receiver="0xRecipient1...",
            amount=0.5,
            token=self.config.default_token,
            condition_type=ConditionType.TIME,
            condition_value="2024-01-15T14:30",
            status=IntentStatus.EXECUTED,
            created_at=now,
            executed_at=now,
            swarm_analysis={"confidence": 85, "reason": "Optimal gas prices"}
        )
        self._intents[sample.id] = sample
        self.analytics.total_intents = 1
        self.analytics.executed_intents = 1
        self.analytics.total_volume = 0.5
        self.analytics.average_confidence = 85

    def get_intent(self, intent_id: str) -> Optional[PaymentIntent]:
        """Get a specific intent by ID."""
        return self._intents.get(intent_id)

    def create_intent(
        self,
        receiver: str,
        amount: Any,
        condition_type: Any,
        condition_value: Any = None,
        sender: Optional[str] = None,
        token: Optional[str] = None
    ) -> PaymentIntent:
        """
        Create a pending intent and run the initial swarm analysis.

        Args:
            receiver: Recipient address.
            amount: Positive payment amount.
            condition_type: time / price (or gas) / manual, or 0/1/2.
            condition_value: Deadline or price threshold.
            sender: Sender address; configured default if omitted.
            token: Token symbol; configured default if omitted.

        Returns:
            The stored intent.
        """
        if not receiver or amount in (None, "") or condition_type in (None, ""):
            raise ValueError("Missing required fields")

        try:
            amount_value = float(amount)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid amount: {amount!r}")
        if not amount_value > 0:
            raise ValueError("Amount must be positive")

        intent = PaymentIntent(
            id=uuid.uuid4().hex,
            sender=sender or self.config.default_sender,
            receiver=receiver,
            amount=amount_value,
            token=token or self.config.default_token,
            condition_type=ConditionType.parse(condition_type),
            condition_value=condition_value
        )

        analysis = self.engine.evaluate(intent.descriptor)
        intent.swarm_analysis = analysis.to_dict()

        self._intents[intent.id] = intent
        self.analytics.total_intents += 1
        self.analytics.total_volume += amount_value

        logger.info("Intent %s created (confidence %d)", intent.id, analysis.confidence)
        return intent

    def execute_intent(self, intent_id: str) -> Optional[PaymentIntent]:
        """
        Execute a pending intent after a final swarm check.

        Returns:
            The executed intent, or None if not found.

        Raises:
            IntentNotPending: If the intent is executed or cancelled.
            ExecutionNotRecommended: If the final analysis rejects execution;
                the intent stays pending.
        """
        intent = self._intents.get(intent_id)
        if not intent:
            return None
        if intent.status is not IntentStatus.PENDING:
            raise IntentNotPending("Intent not pending")

        final_analysis = self.engine.evaluate(intent.descriptor)
        if not final_analysis.recommended:
            logger.info("Intent %s execution rejected (confidence %d)", intent_id, final_analysis.confidence)
            raise ExecutionNotRecommended(final_analysis)

        intent.status = IntentStatus.EXECUTED
        intent.executed_at = utc_timestamp()
        intent.final_analysis = final_analysis.to_dict()
        self.analytics.executed_intents += 1

        logger.info("Intent %s executed", intent_id)
        return intent

    def cancel_intent(self, intent_id: str) -> Optional[PaymentIntent]:
        """
        Cancel a pending intent.

        Returns:
            The cancelled intent, or None if not found.
        """
        intent = self._intents.get(intent_id)
        if not intent:
            return None
        if intent.status is not IntentStatus.PENDING:
            raise IntentNotPending("Intent not pending")

        intent.status = IntentStatus.CANCELLED
        intent.cancelled_at = utc_timestamp()
        self.analytics.cancelled_intents += 1

        logger.info("Intent %s cancelled", intent_id)
        return intent

    def get_user_intents(self, address: str) -> List[PaymentIntent]:
        """Get a sender's intents, newest first."""
        return sorted(
            [i for i in self._intents.values() if i.sender == address],
            key=lambda i: i.created_at,
            reverse=True
        )

    def get_analytics(self) -> Dict[str, Any]:
        """Counters with a fresh average confidence, plus swarm status."""
        confidences = [
            i.swarm_analysis["confidence"] for i in self._intents.values()
            if i.swarm_analysis
        ]
        self.analytics.average_confidence = (
            int(round(sum(confidences) / len(confidences))) if confidences else 0
        )
        return {
            "analytics": self.analytics.to_dict(),
            "swarm_status": self.engine.get_status()
        }
