# goldcast/pipeline/scheduler.py
"""
Cancellable periodic runner with single-flight semantics.

* a timer tick that finds a run in flight is skipped
* ``trigger()`` asks for a run now; if one is in flight, exactly one more run
  follows it (so an on-demand request is never lost)
* ``stop()`` cancels the timer and the in-flight run and waits for both
"""

import asyncio
import inspect
from typing import Any, Awaitable, Callable, Optional

from goldcast.monitoring.error_logging import ErrorComponent, ErrorLogger
from goldcast.utils.logger import get_logger

logger = get_logger(__name__)


class RefreshScheduler:
    """
    Args:
        job (Callable[[], Awaitable[Any]]): Coroutine function to run.
        period (float): Seconds between timer ticks.
        name (str): Label used in log lines.
        run_immediately (bool): Run once as soon as ``start`` is called.
    """

    def __init__(
        self,
        job: Callable[[], Awaitable[Any]],
        period: float,
        name: str = "refresh",
        run_immediately: bool = True,
        error_logger: Optional[ErrorLogger] = None,
    ):
        if period <= 0:
            raise ValueError("period must be positive")
        self.job = job
        self.period = period
        self.name = name
        self.run_immediately = run_immediately
        self.error_logger = error_logger or ErrorLogger(ErrorComponent.SCHEDULER)

        self.run_count = 0
        self.skipped_ticks = 0
        self.last_error: Optional[BaseException] = None

        self._timer_task: Optional[asyncio.Task] = None
        self._inflight: Optional[asyncio.Task] = None
        self._wakeup: Optional[asyncio.Event] = None
        self._rerun = False
        self._stopped = False

    @property
    def running(self) -> bool:
        return self._timer_task is not None and not self._timer_task.done()

    @property
    def busy(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def start(self) -> None:
        if self.running:
            return
        self._stopped = False
        self._wakeup = asyncio.Event()
        if self.run_immediately:
            self._wakeup.set()
        self._timer_task = asyncio.get_running_loop().create_task(self._timer_loop())
        logger.info(f"[{self.name}] scheduler started (every {self.period:g}s)")

    def trigger(self) -> None:
        """Request an on-demand run."""
        if self._stopped or self._wakeup is None:
            return
        if self.busy:
            self._rerun = True
        else:
            self._wakeup.set()

    async def run_once(self) -> None:
        """Run the job now (or join the run in flight) and wait for it."""
        if not self.busy:
            self._launch()
        await asyncio.shield(self._inflight)

    async def _timer_loop(self) -> None:
        while not self._stopped:
            try:
                await asyncio.wait_for(self._wakeup.wait(), timeout=self.period)
            except asyncio.TimeoutError:
                pass
            self._wakeup.clear()
            if self.busy:
                self.skipped_ticks += 1
                logger.debug(f"[{self.name}] tick skipped, refresh still in flight")
                continue
            self._launch()

    def _launch(self) -> None:
        self._inflight = asyncio.get_running_loop().create_task(self._run_job())

    async def _run_job(self) -> None:
        while True:
            self._rerun = False
            try:
                outcome = self.job()
                if inspect.isawaitable(outcome):
                    await outcome
                self.run_count += 1
                self.last_error = None
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                self.last_error = exc
                self.error_logger.log_error(
                    f"Scheduled job '{self.name}' failed", exception=exc, severity="error"
                )
            if not self._rerun or self._stopped:
                return

    async def stop(self) -> None:
        """Cancel the timer and the in-flight run; no work continues afterwards."""
        self._stopped = True
        tasks = [t for t in (self._timer_task, self._inflight) if t is not None and not t.done()]
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._timer_task = None
        self._inflight = None
        logger.info(f"[{self.name}] scheduler stopped")
