"""
Cycle scheduler.

Runs the reply loop repeatedly with a random pause between cycles until
asked to stop.
"""

import logging
import random
import threading
from typing import Callable, Optional

from autoreply.loop import ReplyLoop
from autoreply.models import CycleResult

logger = logging.getLogger(__name__)

MIN_DELAY_SECONDS = 75
MAX_DELAY_SECONDS = 120


class Scheduler:
    """
    Runs ReplyLoop.run_cycle() forever with a randomized delay.

    The pause waits on a stop event, so stop() ends it immediately. A bounded
    run is available through run(max_cycles=N).

    Attributes:
        loop: The reply loop to run
        min_delay: Lower bound of the pause, in seconds (inclusive)
        max_delay: Upper bound of the pause, in seconds (inclusive)
    """

    def __init__(
        self,
        loop: ReplyLoop,
        min_delay: int = MIN_DELAY_SECONDS,
        max_delay: int = MAX_DELAY_SECONDS,
        rng: Optional[random.Random] = None,
        stop_event: Optional[threading.Event] = None,
        on_cycle: Optional[Callable[[CycleResult], None]] = None,
    ):
        if max_delay < min_delay:
            raise ValueError(f"max_delay ({max_delay}) is lower than min_delay ({min_delay})")
        self.loop = loop
        self.min_delay = min_delay
        self.max_delay = max_delay
        self.rng = rng or random.Random()
        self.stop_event = stop_event or threading.Event()
        self.on_cycle = on_cycle
        self.cycles_run = 0

    def next_delay(self) -> int:
        """Draw a whole number of seconds uniformly from [min_delay, max_delay]."""
        return self.rng.randint(self.min_delay, self.max_delay)

    def stop(self) -> None:
        """Ask the scheduler to stop after the current cycle."""
        self.stop_event.set()

    @property
    def stopped(self) -> bool:
        return self.stop_event.is_set()

    def run_once(self) -> CycleResult:
        logger.info("-" * 38)
        logger.info("Starting message processing...")
        result = self.loop.run_cycle()
        logger.info("Message processing completed.")
        logger.info("-" * 38)
        self.cycles_run += 1
        if self.on_cycle:
            self.on_cycle(result)
        return result

    def sleep(self) -> bool:
        """
        Pause before the next cycle.

        Returns:
            True if the pause was cut short by stop()
        """
        seconds = self.next_delay()
        logger.info(f"Running again after {seconds} seconds")
        return self.stop_event.wait(seconds)

    def run(self, max_cycles: Optional[int] = None) -> int:
        """
        Run cycles until stopped or until max_cycles have run.

        Every cycle, including the last bounded one, is followed by a pause
        unless a stop was requested.

        Returns:
            The number of cycles run
        """
        while not self.stopped:
            self.run_once()
            if self.stopped:
                break
            if self.sleep():
                break
            if max_cycles is not None and self.cycles_run >= max_cycles:
                break

        logger.info(f"Scheduler stopped after {self.cycles_run} cycles")
        return self.cycles_run
