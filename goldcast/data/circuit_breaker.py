# goldcast/data/circuit_breaker.py
"""
Per-key circuit breaker.

closed    -> calls go through; consecutive failures are counted
open      -> after ``failure_threshold`` consecutive failures, calls are refused
             until ``cooldown_seconds`` elapse
half-open -> after the cool-down one trial call goes through; a success closes
             the breaker, a failure re-opens it for another cool-down
"""

import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Optional, Set

from goldcast.utils.logger import get_logger

logger = get_logger(__name__)


class BreakerStatus(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


@dataclass(frozen=True)
class BreakerState:
    status: BreakerStatus = BreakerStatus.CLOSED
    consecutive_failures: int = 0
    open_until: Optional[float] = None


class CircuitBreaker:
    """
    Tracks consecutive failures per request key.

    Args:
        name (str): Label used in log lines.
        failure_threshold (int): Consecutive failures that open the breaker.
        cooldown_seconds (float): How long an open breaker refuses calls.
        clock (Callable[[], float]): Monotonic time source.
    """

    def __init__(
        self,
        name: str = "quotes",
        failure_threshold: int = 2,
        cooldown_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be >= 1")
        self.name = name
        self.failure_threshold = failure_threshold
        self.cooldown_seconds = cooldown_seconds
        self._clock = clock
        self._states: Dict[str, BreakerState] = {}
        # Keys whose half-open trial call is in flight
        self._trial_in_flight: Set[str] = set()
        self._lock = threading.Lock()

    def state(self, key: str) -> BreakerState:
        with self._lock:
            state = self._states.get(key, BreakerState())
        if state.status is BreakerStatus.OPEN and self._clock() >= state.open_until:
            return BreakerState(BreakerStatus.HALF_OPEN, state.consecutive_failures, state.open_until)
        return state

    def allow_request(self, key: str, claim_trial: bool = True) -> bool:
        """
        False while the breaker for ``key`` is open and cooling down.

        Once half-open, exactly one caller is admitted as the trial call until it
        reports back through ``record_success``/``record_failure`` (or
        ``release_trial``). Callers that will not report back pass
        ``claim_trial=False`` and are refused while half-open.
        """
        with self._lock:
            state = self._states.get(key)
            if state is None or state.status is BreakerStatus.CLOSED:
                return True
            if self._clock() < state.open_until:
                return False
            if not claim_trial or key in self._trial_in_flight:
                return False
            self._trial_in_flight.add(key)
        logger.info(f"[{self.name}] half-open trial call admitted for '{key}'")
        return True

    def release_trial(self, key: str) -> None:
        """Give up a claimed trial call without an outcome (e.g. the call was cancelled)."""
        with self._lock:
            self._trial_in_flight.discard(key)

    def record_success(self, key: str) -> None:
        with self._lock:
            previous = self._states.pop(key, None)
            self._trial_in_flight.discard(key)
        if previous is not None and previous.status is BreakerStatus.OPEN:
            logger.info(f"[{self.name}] breaker closed for '{key}'")

    def record_failure(self, key: str) -> BreakerState:
        with self._lock:
            current = self._states.get(key, BreakerState())
            failures = current.consecutive_failures + 1
            if failures >= self.failure_threshold:
                new_state = BreakerState(
                    status=BreakerStatus.OPEN,
                    consecutive_failures=failures,
                    open_until=self._clock() + self.cooldown_seconds,
                )
            else:
                new_state = BreakerState(BreakerStatus.CLOSED, failures, None)
            self._states[key] = new_state
            self._trial_in_flight.discard(key)

        if new_state.status is BreakerStatus.OPEN:
            logger.warning(
                f"[{self.name}] breaker open for '{key}' after {failures} consecutive failures; "
                f"cooling down {self.cooldown_seconds:.0f}s"
            )
        return new_state

    def reset(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._states.clear()
                self._trial_in_flight.clear()
            else:
                self._states.pop(key, None)
                self._trial_in_flight.discard(key)
