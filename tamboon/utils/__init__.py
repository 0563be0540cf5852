"""
Utilities package for Tamboon.

Exports shared helpers for logging, profiling, and other cross-cutting concerns.
Keep this package lightweight and free of donation-specific logic.
"""

from tamboon.utils.logging import configure_logging, get_logger
from tamboon.utils.profiler import ProfileStats, profile_block

__all__ = [
    "configure_logging",
    "get_logger",
    "ProfileStats",
    "profile_block",
]
