"""Fixed-interval scheduler for poll cycles.

Ticks fire every ``interval`` seconds measured from the start of the previous
tick. They run on the scheduler's own background thread, so they never
overlap: when a tick overruns its slot, the missed firings are skipped and the
next tick is aligned to the following interval boundary.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)


class Scheduler:
    """Background repeating timer with graceful stop.

    Example:
        ```python
        scheduler = Scheduler()
        scheduler.start(60.0, cycle.run_once)
        # ... until shutdown ...
        scheduler.stop()  # waits for an in-flight tick
        ```
    """

    def __init__(self, name: str = "StatsScheduler") -> None:
        self._name = name
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()
        self._interval_seconds = 0.0
        self._on_tick: Callable[[], object] | None = None
        self._tick_count = 0
        self._skipped_count = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def tick_count(self) -> int:
        """Number of ticks that have finished (successfully or not)."""
        return self._tick_count

    @property
    def skipped_count(self) -> int:
        """Number of firings skipped because the previous tick overran."""
        return self._skipped_count

    def start(self, interval_seconds: float, on_tick: Callable[[], object]) -> None:
        """Start firing ``on_tick`` every ``interval_seconds`` without blocking.

        The first tick fires one interval after this call.

        Raises:
            ValueError: If the interval is not a positive, finite number of seconds
                a thread can wait for
            RuntimeError: If the scheduler is already running
        """
        if not math.isfinite(interval_seconds) or interval_seconds <= 0:
            raise ValueError(
                f"Scheduler interval must be a positive finite number, got {interval_seconds}"
            )
        if interval_seconds > threading.TIMEOUT_MAX:
            raise ValueError(
                f"Scheduler interval {interval_seconds}s exceeds the maximum wait of "
                f"{threading.TIMEOUT_MAX}s"
            )
        if self.is_running:
            raise RuntimeError("Scheduler already running")

        self._interval_seconds = interval_seconds
        self._on_tick = on_tick
        self._stop_event.clear()

        self._thread = threading.Thread(target=self._run_loop, name=self._name, daemon=True)
        self._thread.start()
        logger.debug(f"Scheduler started with interval {interval_seconds}s")

    def stop(self, timeout: float | None = None) -> None:
        """Stop future firings and wait for an in-flight tick to finish.

        Args:
            timeout: Maximum seconds to wait for the thread. None waits indefinitely.
        """
        self._stop_event.set()

        if self._thread is not None:
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning(f"Scheduler thread did not stop within {timeout}s")
                return
            self._thread = None

        logger.debug(f"Scheduler stopped after {self._tick_count} ticks")

    def _run_loop(self) -> None:
        next_fire = time.monotonic() + self._interval_seconds

        while not self._stop_event.wait(timeout=max(0.0, next_fire - time.monotonic())):
            self._run_tick()

            now = time.monotonic()
            next_fire += self._interval_seconds
            if next_fire <= now:
                missed = int((now - next_fire) // self._interval_seconds) + 1
                self._skipped_count += missed
                next_fire += missed * self._interval_seconds
                logger.warning(
                    f"Tick overran its {self._interval_seconds}s interval, "
                    f"skipped {missed} firing(s)"
                )

    def _run_tick(self) -> None:
        try:
            if self._on_tick is not None:
                self._on_tick()
        except Exception:
            logger.exception("Unexpected error in scheduled tick")
        finally:
            self._tick_count += 1
