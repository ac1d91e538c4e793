"""
KestrelPay - Resource Monitoring
Host and process memory usage for the health endpoint.
"""

import os
import psutil
from typing import Dict, Any


class ResourceMonitor:
    """
    Reports host RAM usage and this process's resident memory.
    """

    def __init__(self, max_ram_percent: float = 85.0):
        """
        Initialize resource monitor.

        Args:
            max_ram_percent: Host RAM usage above which a warning is reported.
        """
        self.max_ram_percent = max_ram_percent
        self._process = psutil.Process(os.getpid())

    def get_ram_info(self) -> Dict[str, float]:
        """Get current host RAM usage information."""
        mem = psutil.virtual_memory()
        return {
            "total_gb": mem.total / (1024 ** 3),
            "used_gb": mem.used / (1024 ** 3),
            "available_gb": mem.available / (1024 ** 3),
            "percent": mem.percent
        }

    def get_process_rss_mb(self) -> float:
        """Resident memory of this process in MB."""
        return self._process.memory_info().rss / (1024 ** 2)

    def get_status(self) -> Dict[str, Any]:
        """Get complete memory status."""
        ram = self.get_ram_info()

        status = {
            "ram": {
                "total_gb": round(ram["total_gb"], 2),
                "used_gb": round(ram["used_gb"], 2),
                "available_gb": round(ram["available_gb"], 2),
                "percent": round(ram["percent"], 1)
            },
            "process_rss_mb": round(self.get_process_rss_mb(), 1),
            "warnings": []
        }

        if ram["percent"] > self.max_ram_percent:
            status["warnings"].append(
                f"RAM usage ({ram['percent']:.1f}%) exceeds threshold ({self.max_ram_percent}%)"
            )

        return status
