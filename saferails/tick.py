"""
Tick sources: turning host time into advance() calls
"""

import logging
import math
from typing import Iterable, Iterator, List, Optional

from saferails.errors import InvalidInput
from saferails.simulator import SeparationSimulator
from saferails.state import TickResult

log = logging.getLogger(__name__)


class TickClock:
    """
    Converts monotonically non-decreasing timestamps (s) into time steps

    The first timestamp only establishes the reference and yields dt = 0,
    the same way a frame callback has no previous frame to measure against.
    """

    def __init__(self) -> None:
        self.last_time: Optional[float] = None

    def tick(self, timestamp: float) -> float:
        """Return seconds elapsed since the previous timestamp"""
        if not math.isfinite(timestamp):
            raise InvalidInput(f"timestamp must be finite, got {timestamp!r}")
        if self.last_time is None:
            self.last_time = timestamp
            return 0.0
        if timestamp < self.last_time:
            raise InvalidInput(f"timestamp went backwards: {timestamp} < {self.last_time}")
        dt = timestamp - self.last_time
        self.last_time = timestamp
        return dt

    def reset(self) -> None:
        self.last_time = None


def drive(simulator: SeparationSimulator, timestamps: Iterable[float]) -> Iterator[TickResult]:
    """
    Host-style loop over a timestamp stream

    The clock keeps ticking on every timestamp, but advance() is only
    called while the simulator is running; paused or braked frames are
    skipped rather than treated as errors.
    """
    clock = TickClock()
    for timestamp in timestamps:
        dt = clock.tick(timestamp)
        if simulator.is_running:
            yield simulator.advance(dt)


def replay(simulator: SeparationSimulator, dts: Iterable[float]) -> List[TickResult]:
    """
    Advance through a recorded sequence of time steps, stopping at the
    first separation violation

    Args:
        simulator: Simulator to drive; started if not already running
        dts: Time steps (s)

    Returns:
        One TickResult per advance performed
    """
    if not simulator.is_running:
        simulator.start()
    results: List[TickResult] = []
    for dt in dts:
        result = simulator.advance(dt)
        results.append(result)
        if result.event.is_violation:
            break
    log.debug("replayed %d ticks", len(results))
    return results
