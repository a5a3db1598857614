"""Clock port - Injectable source of the current civil time.

The selector and the wired extractor take "now" from this port so that
relative dates ("明天", "tomorrow") and departed-train checks are
reproducible in tests. A bare ``extract()`` call without a clock or a
``today`` reads the host clock in the configured timezone.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    """Port for the current time.

    Implementations:
    - adapters/clock/system_clock.py (SystemClock) - Production
    - adapters/clock/system_clock.py (FixedClock) - Testing
    """

    def now(self) -> datetime:
        """Return the current time as an aware datetime in the civil timezone."""
        ...
