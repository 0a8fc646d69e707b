"""
Test utilities package.

Provides helper functions and classes for testing navcore.
"""

from .clock import ManualClock

__all__ = [
    "ManualClock",
]
