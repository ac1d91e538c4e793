"""
KestrelPay - Swarm-Scored Payment Intents
Conditional payment intents evaluated by a population of scoring heuristics.
"""

__version__ = "2.0.0"

from .main import create_app
from .swarm import SwarmEngine

__all__ = ["create_app", "SwarmEngine", "__version__"]
