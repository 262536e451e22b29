"""
Time sources for the parking core.

Every core operation reads time through a clock so tests can pin it.
"""

import time


class SystemClock:
    """Wall clock in epoch milliseconds"""

    def now_ms(self) -> int:
        return int(time.time() * 1000)


class ManualClock:
    """Clock that only moves when told to"""

    def __init__(self, start_ms: int = 0):
        self._now = start_ms

    def now_ms(self) -> int:
        return self._now

    def set(self, now_ms: int):
        self._now = now_ms

    def advance(self, ms: int = 0, minutes: int = 0):
        self._now += ms + minutes * 60_000
