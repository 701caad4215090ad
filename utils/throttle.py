# file: utils/throttle.py
import time
from typing import Callable, Optional


class Throttle:
    """
    Gates how often expensive work runs.

    ``ready()`` returns True at most once per ``interval_secs`` and arms the
    next window when it does. The first call is always ready.
    """

    def __init__(self, interval_secs: float = 0.5, clock: Callable[[], float] = time.monotonic):
        self.interval_secs = interval_secs
        self.clock = clock
        self.last_run: Optional[float] = None

    def ready(self) -> bool:
        now = self.clock()
        if self.last_run is not None and now - self.last_run < self.interval_secs:
            return False
        self.last_run = now
        return True

    def reset(self) -> None:
        self.last_run = None
