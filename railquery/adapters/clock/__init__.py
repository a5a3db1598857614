"""Clock adapters - Implementations of the Clock port.

Available implementations:
- SystemClock: Host clock converted to the civil timezone
- FixedClock: Frozen instant for tests and replays
"""

from .system_clock import FixedClock, SystemClock

__all__ = ["SystemClock", "FixedClock"]
