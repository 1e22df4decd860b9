import time


class Clock:
    """Keeps track of the time between host ticks.

    The clock starts on the first call to ``tick()`` (unless started
    explicitly), so the first frame always has a delta of zero.
    """

    def __init__(self, *, auto_start=True, timer=time.perf_counter):
        self._auto_start = bool(auto_start)
        self._timer = timer

        self._last_time = None
        self._elapsed = 0.0
        self._delta = 0.0
        self._running = False

    @property
    def running(self):
        """Whether the clock is running."""
        return self._running

    @property
    def delta(self):
        """The time (in seconds) between the two most recent ticks."""
        return self._delta

    @property
    def elapsed(self):
        """The total time (in seconds) accumulated by ``tick()``."""
        return self._elapsed

    def start(self):
        self._last_time = self._timer()
        self._elapsed = 0.0
        self._delta = 0.0
        self._running = True

    def stop(self):
        self._running = False

    def tick(self):
        """Advance the clock and return the time since the previous tick."""
        if not self._running:
            if self._auto_start:
                self.start()
            self._delta = 0.0
            return 0.0

        now = self._timer()
        self._delta = now - self._last_time
        self._last_time = now
        self._elapsed += self._delta
        return self._delta
