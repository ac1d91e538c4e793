"""
KestrelPay - Intent Management
In-memory intent lifecycle and analytics.
"""

from .manager import ExecutionNotRecommended, IntentManager, IntentNotPending

__all__ = ["ExecutionNotRecommended", "IntentManager", "IntentNotPending"]
