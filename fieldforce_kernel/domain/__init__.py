"""
Pure domain layer.

Contains domain primitives with NO dependencies on:
- ORM (SQLAlchemy)
- Database
- I/O (except SystemClock, the sanctioned boundary for time)
"""

from fieldforce_kernel.domain.clock import Clock, DeterministicClock, SystemClock

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
]
