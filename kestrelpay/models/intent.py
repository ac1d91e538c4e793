"""
KestrelPay - Intent Models
Conditional payment intents and the descriptor the swarm evaluates.
"""

from dataclasses import dataclass, asdict, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union

from ..utils.timestamps import utc_timestamp


class ConditionType(Enum):
    """When a payment intent becomes executable."""
    TIME = "time"
    PRICE = "price"
    MANUAL = "manual"

    @classmethod
    def parse(cls, value: Any) -> "ConditionType":
        """
        Accept enum values or names, the frontend's "gas" for price
        conditions, or a select index (0/1/2).
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid condition type: {value!r}")
        if isinstance(value, int) or (isinstance(value, str) and value.strip().isdigit()):
            members = list(cls)
            index = int(value)
            if 0 <= index < len(members):
                return members[index]
            raise ValueError(f"Invalid condition type: {value!r}")
        if isinstance(value, str):
            name = value.strip().lower()
            name = CONDITION_ALIASES.get(name, name)
            try:
                return cls(name)
            except ValueError:
                pass
        raise ValueError(f"Invalid condition type: {value!r}")


# Gas price is the only price condition the frontend offers
CONDITION_ALIASES = {"gas": "price"}


class IntentStatus(Enum):
    """Lifecycle states of a payment intent."""
    PENDING = "pending"
    EXECUTED = "executed"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class IntentDescriptor:
    """The candidate payment under evaluation."""
    receiver: str = ""
    amount: float = 0.0
    condition_type: ConditionType = ConditionType.MANUAL
    condition_value: Optional[Union[str, float]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IntentDescriptor":
        """Build a descriptor from request data, tolerating missing fields."""
        data = data or {}
        condition_type = data.get("condition_type", data.get("conditionType"))
        condition_value = data.get("condition_value", data.get("conditionValue"))
        amount = data.get("amount") or 0
        return cls(
            receiver=str(data.get("receiver") or ""),
            amount=float(amount),
            condition_type=(
                ConditionType.parse(condition_type)
                if condition_type is not None else ConditionType.MANUAL
            ),
            condition_value=condition_value
        )

    def deadline(self) -> Optional[datetime]:
        """
        Deadline of a time-based condition.

        The value is epoch seconds (number or numeric string) or an
        ISO-8601 date-time; naive values are local time. Returns None
        for price/manual conditions and unparseable values.
        """
        if self.condition_type is not ConditionType.TIME or self.condition_value in (None, ""):
            return None

        value = self.condition_value
        if isinstance(value, bool):
            return None

        text = str(value).strip()
        try:
            return datetime.fromtimestamp(float(text))
        except (OverflowError, OSError):
            return None
        except ValueError:
            pass
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
        if parsed.tzinfo is not None:
            parsed = parsed.astimezone().replace(tzinfo=None)
        return parsed

    def to_dict(self) -> Dict[str, Any]:
        return {
            **asdict(self),
            "condition_type": self.condition_type.value
        }


@dataclass
class PaymentIntent:
    """A stored payment intent and its swarm analyses."""
    id: str
    sender: str
    receiver: str
    amount: float
    condition_type: ConditionType
    condition_value: Optional[Union[str, float]]
    token: str = "ETH"
    status: IntentStatus = IntentStatus.PENDING
    created_at: str = field(default_factory=utc_timestamp)
    executed_at: Optional[str] = None
    cancelled_at: Optional[str] = None
    swarm_analysis: Optional[Dict[str, Any]] = None
    final_analysis: Optional[Dict[str, Any]] = None

    @property
    def descriptor(self) -> IntentDescriptor:
        return IntentDescriptor(
            receiver=self.receiver,
            amount=self.amount,
            condition_type=self.condition_type,
            condition_value=self.condition_value
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            **asdict(self),
            "condition_type": self.condition_type.value,
            "status": self.status.value
        }
