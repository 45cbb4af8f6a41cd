# SPDX-License-Identifier: BSL-1.1
# Copyright (c) 2026 MuVeraAI Corporation

"""
Reference scheduler trigger for the threshold check.

The notifier does not schedule itself. Something has to call
``check_thresholds()`` once a day and right after a session starts; this
module is one such caller. Cooperative callers can drive it with
:meth:`ThresholdScheduler.run_pending`; everyone else calls ``start()`` to
run it on a daemon thread.
"""

from __future__ import annotations

import logging
import threading
from datetime import datetime, timedelta
from typing import Callable

from budget_alerts.config import SchedulerConfig

logger = logging.getLogger("budget_alerts.scheduler")

_MAX_POLL_SECONDS = 60.0


def _local_now() -> datetime:
    return datetime.now().astimezone()


class ThresholdScheduler:
    """
    Runs ``job`` every ``config.interval``.

    A job that raises is logged and rescheduled; it never stops the loop.

    Usage::

        scheduler = ThresholdScheduler(tracker.check_thresholds)
        scheduler.start()
        ...
        scheduler.stop()
    """

    def __init__(
        self,
        job: Callable[[], object],
        config: SchedulerConfig | None = None,
        clock: Callable[[], datetime] | None = None,
        name: str = "budget-threshold-check",
    ) -> None:
        self._job = job
        self._config = config or SchedulerConfig()
        self._clock: Callable[[], datetime] = clock if clock is not None else _local_now
        self._name = name
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._next_run: datetime | None = None
        self.run_count = 0

    @property
    def next_run(self) -> datetime | None:
        return self._next_run

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run_pending(self) -> bool:
        """
        Run the job if it is due.

        Returns:
            True if the job ran during this call.
        """
        with self._lock:
            now = self._clock()
            if self._next_run is not None and now < self._next_run:
                return False
            self._run(now)
            return True

    def run_now(self) -> None:
        """Run the job immediately and restart the interval from now."""
        with self._lock:
            self._run(self._clock())

    def start(self) -> None:
        """Start the background loop. Calling start twice is a no-op."""
        if self.running:
            return
        self._stop_event.clear()
        if self._config.run_on_start:
            self.run_now()
        elif self._next_run is None:
            self._next_run = self._clock() + self._config.interval

        self._thread = threading.Thread(target=self._loop, name=self._name, daemon=True)
        self._thread.start()
        logger.info("scheduler_started", extra={"job": self._name, "interval_seconds": self._poll_interval()})

    def stop(self, timeout: float | None = None) -> None:
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
        logger.info("scheduler_stopped", extra={"job": self._name})

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _run(self, now: datetime) -> None:
        self.run_count += 1
        try:
            self._job()
        except Exception:
            logger.exception("scheduled_job_failed", extra={"job": self._name})
        finally:
            self._next_run = now + self._config.interval

    def _poll_interval(self) -> float:
        return min(self._config.interval / timedelta(seconds=1), _MAX_POLL_SECONDS)

    def _loop(self) -> None:
        while not self._stop_event.wait(self._poll_interval()):
            self.run_pending()
