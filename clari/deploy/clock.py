"""Time source used by the polling loops."""

from __future__ import annotations

import time


class Clock:
    """Wall-clock time and blocking sleep; swapped for a fake in tests."""

    def now(self) -> float:
        return time.time()

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)


SYSTEM_CLOCK = Clock()


__all__ = ["Clock", "SYSTEM_CLOCK"]
