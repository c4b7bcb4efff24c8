"""
Cycle Scheduler

Decides when redistribution runs: every ``interval`` simulated cycles, or
immediately when forced.
"""

from typing import Callable


class CycleScheduler:
    """
    Two-state cycle counter (idle / due).

    ``tick`` advances one simulated cycle and fires the action once the
    interval is reached; ``force`` fires it unconditionally. Both reset the
    counter after firing.
    """

    def __init__(self, interval: int, action: Callable[[], object]):
        """
        Initialize scheduler.

        Args:
            interval: Cycles between scheduled firings
            action: Callable run synchronously when due
        """
        self.interval = interval
        self._action = action

        self.cycles_since_reallocation = 0
        self.total_cycles = 0
        self.firings = 0

    @property
    def is_due(self) -> bool:
        return self.cycles_since_reallocation >= self.interval

    def tick(self) -> bool:
        """
        Advance one cycle.

        Returns:
            True if the action ran on this cycle
        """
        self.cycles_since_reallocation += 1
        self.total_cycles += 1

        if self.is_due:
            self.force()
            return True
        return False

    def force(self):
        """Run the action now and reset the counter."""
        outcome = self._action()
        self.firings += 1
        self.cycles_since_reallocation = 0
        return outcome

    def reset(self) -> None:
        self.cycles_since_reallocation = 0
