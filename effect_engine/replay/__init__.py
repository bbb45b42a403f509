"""
Signal replay (pure state reconstruction).
"""

from .runner import replay, ReplayResult

__all__ = ["replay", "ReplayResult"]
