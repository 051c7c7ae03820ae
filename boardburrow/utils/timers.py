"""
Fire-and-forget delayed callbacks.

The celebration screen leaves for the main stage after a fixed delay. The
store asks a ``Scheduler`` for that delay instead of sleeping, so the core
never blocks.
"""

import threading
from typing import Callable, List, Tuple

from boardburrow.config.logging_config import get_logger

logger = get_logger(__name__)


class Scheduler:
    """Runs a callback once after a delay on a daemon timer thread."""

    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> None:
        """
        Schedule a callback.

        Args:
            delay_seconds: Seconds to wait before running the callback
            callback: Zero-argument callable to run
        """
        timer = threading.Timer(delay_seconds, callback)
        timer.daemon = True
        timer.start()
        logger.debug(f"Scheduled callback in {delay_seconds:.1f}s")


class ManualScheduler(Scheduler):
    """Scheduler that queues callbacks until ``run_pending`` is called."""

    def __init__(self):
        self.pending: List[Tuple[float, Callable[[], None]]] = []

    def schedule(self, delay_seconds: float, callback: Callable[[], None]) -> None:
        self.pending.append((delay_seconds, callback))

    def run_pending(self) -> int:
        """Run every queued callback in order; returns how many ran."""
        ran = 0
        while self.pending:
            _, callback = self.pending.pop(0)
            callback()
            ran += 1
        return ran
