"""
KestrelPay - Utilities
Resource monitoring and timestamp helpers.
"""

from .memory import ResourceMonitor
from .timestamps import utc_timestamp

__all__ = ["ResourceMonitor", "utc_timestamp"]
