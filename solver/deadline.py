# solver/deadline.py
import time
from typing import Callable, Optional


class DeadlineGuard:
    """Cooperative time box polled by the solvers.

    The guard never interrupts anything: a solver asks ``is_working()`` at
    each recursive call or loop iteration and unwinds once it reports False.
    ``working`` only ever goes from True to False within a run, either when
    the deadline passes or when the owner calls ``terminate()``.

    A limit of zero (or None) disables the bound so the guard keeps
    reporting working until it is terminated, which makes exhaustive runs
    deterministic.
    """

    def __init__(self, seconds: Optional[float], *, clock: Callable[[], float] = time.monotonic):
        try:
            limit = float(seconds) if seconds is not None else 0.0
        except (TypeError, ValueError):
            limit = 0.0
        self.seconds = limit if limit > 0 else 0.0
        self._clock = clock
        self._deadline: Optional[float] = None
        self._working = False
        self.expired = False

    @property
    def disabled(self) -> bool:
        return self.seconds <= 0

    def start(self) -> "DeadlineGuard":
        self._working = True
        self.expired = False
        self._deadline = None if self.disabled else self._clock() + self.seconds
        return self

    def terminate(self) -> None:
        self._working = False

    def is_working(self) -> bool:
        if not self._working:
            return False
        if self._deadline is not None and self._clock() >= self._deadline:
            self._working = False
            self.expired = True
        return self._working

    def remaining(self) -> Optional[float]:
        """Seconds left, or None when the bound is disabled."""
        if self._deadline is None:
            return None
        if not self._working:
            return 0.0
        return max(0.0, self._deadline - self._clock())

    def __enter__(self) -> "DeadlineGuard":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.terminate()
