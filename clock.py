"""
Clock sources for the scheduler's dispatch loop.

The scheduler reads its clock once per iteration and hands the elapsed time to
the queue it services. Any zero-argument callable returning a non-decreasing
integer works; these two cover wall-clock and deterministic runs.
"""

import time


class WallClock:
    """Monotonic wall-clock time in milliseconds."""

    def __call__(self) -> int:
        return int(time.monotonic() * 1000)

    def __repr__(self) -> str:
        return "WallClock()"


class VirtualClock:
    """
    Deterministic clock for simulations and tests.

    Every call returns the current reading and then advances it by `tick`,
    so each scheduler iteration receives exactly `tick` units of work time.

    Example:
        clock = VirtualClock(tick=10)
        clock()  # 0
        clock()  # 10
    """

    def __init__(self, tick: int = 50, start: int = 0):
        if tick < 0:
            raise ValueError("tick cannot be negative")
        self.tick = tick
        self.current = start

    def __call__(self) -> int:
        now = self.current
        self.current += self.tick
        return now

    def __repr__(self) -> str:
        return f"VirtualClock(tick={self.tick}, current={self.current})"
