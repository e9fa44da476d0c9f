# goldcast/monitoring/error_logging.py
"""
Error Logging Framework for goldcast.

Fallbacks are never silent: every time a source is skipped, a cache is served
or a neutral sentiment is substituted, the reason and component are recorded.
"""

import logging
import traceback
import threading
from typing import Dict, Any, Optional
from datetime import datetime, timezone
from pathlib import Path
import json
from enum import Enum

from goldcast.data.errors import (
    EmptyPayloadError,
    InsufficientHistoryError,
    MalformedPayloadError,
    NetworkFailureError,
    SourceTimeoutError,
)


class ErrorComponent(Enum):
    """Component identifiers for error tracking and monitoring."""
    ORCHESTRATOR = "orchestrator"
    MARKET_CHART_SOURCE = "market_chart_source"
    INTRADAY_CHART_SOURCE = "intraday_chart_source"
    CIRCUIT_BREAKER = "circuit_breaker"
    SENTIMENT_SERVICE = "sentiment_service"
    NEWS_FEED = "news_feed"
    PREDICTION = "prediction"
    QUICK_STATS = "quick_stats"
    SCHEDULER = "scheduler"


class FallbackReason(Enum):
    """Reasons why fallback was triggered."""
    TIMEOUT = "timeout"
    NETWORK_FAILURE = "network_failure"
    EMPTY_PAYLOAD = "empty_payload"
    MALFORMED_PAYLOAD = "malformed_payload"
    INSUFFICIENT_HISTORY = "insufficient_history"
    CIRCUIT_OPEN = "circuit_open"
    CACHE_SERVED = "cache_served"
    NO_DATA = "no_data"
    UNKNOWN = "unknown"


_REASON_BY_ERROR = (
    (SourceTimeoutError, FallbackReason.TIMEOUT),
    (NetworkFailureError, FallbackReason.NETWORK_FAILURE),
    (EmptyPayloadError, FallbackReason.EMPTY_PAYLOAD),
    (MalformedPayloadError, FallbackReason.MALFORMED_PAYLOAD),
    (InsufficientHistoryError, FallbackReason.INSUFFICIENT_HISTORY),
)


def reason_for(exception: Exception) -> FallbackReason:
    """Map an exception onto the fallback reason it represents."""
    for error_type, reason in _REASON_BY_ERROR:
        if isinstance(exception, error_type):
            return reason
    return FallbackReason.UNKNOWN


class ErrorLogger:
    """
    Structured error logging with component tagging and fallback tracking.

    Usage:
        error_logger = ErrorLogger(component=ErrorComponent.ORCHESTRATOR)
        try:
            series = await provider.fetch(symbol, timeframe)
        except DataSourceError as exc:
            error_logger.log_fallback(
                reason=reason_for(exc),
                exception=exc,
                context={"symbol": "XAU", "timeframe": "1h"},
                fallback_action="Trying secondary source",
            )
    """

    HISTORY_LIMIT = 100

    def __init__(
        self,
        component: ErrorComponent,
        base_logger: Optional[logging.Logger] = None,
        error_log_path: Optional[str] = None,
    ):
        """
        Initialize error logger for a specific component.

        Args:
            component: ErrorComponent enum identifying the component
            base_logger: Optional logging.Logger to use (creates default if None)
            error_log_path: Optional JSONL file that receives every record
        """
        self.component = component
        self.logger = base_logger or logging.getLogger(f"goldcast.error.{component.value}")

        self.error_count = 0
        self.fallback_count = 0
        self.error_history: list[Dict[str, Any]] = []
        self._lock = threading.Lock()

        self.error_log_path = Path(error_log_path) if error_log_path else None
        if self.error_log_path is not None:
            self.error_log_path.parent.mkdir(parents=True, exist_ok=True)

    def log_fallback(
        self,
        reason: FallbackReason,
        exception: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None,
        fallback_action: Optional[str] = None,
    ) -> None:
        """
        Log an error event with fallback information.

        Args:
            reason: FallbackReason enum indicating why fallback occurred
            exception: Optional exception that triggered the fallback
            context: Optional context dict (symbol, timeframe, source, ...)
            fallback_action: Optional description of fallback action taken
        """
        with self._lock:
            self.fallback_count += 1
            fallback_count = self.fallback_count

        error_record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "component": self.component.value,
            "reason": reason.value,
            "fallback_count": fallback_count,
            "exception_type": type(exception).__name__ if exception else None,
            "exception_message": str(exception) if exception else None,
            "traceback": _format_traceback(exception),
            "context": context or {},
            "fallback_action": fallback_action or "Using fallback data",
        }
        self._remember(error_record)

        context_str = ", ".join(f"{k}={v}" for k, v in (context or {}).items())
        exc_str = f": {exception}" if exception else ""

        log_msg = (
            f"[{self.component.value.upper()}] "
            f"Fallback triggered ({reason.value}){exc_str} "
            f"| Context: {context_str} "
            f"| Action: {fallback_action or 'Using fallback data'}"
        )
        self.logger.warning(log_msg)

        self._persist_error(error_record)

    def log_error(
        self,
        error_msg: str,
        exception: Optional[Exception] = None,
        context: Optional[Dict[str, Any]] = None,
        severity: str = "warning",
    ) -> None:
        """
        Log a general error (not necessarily triggering fallback).

        Args:
            error_msg: Description of the error
            exception: Optional exception object
            context: Optional context dict
            severity: 'debug', 'info', 'warning', 'error', 'critical'
        """
        with self._lock:
            self.error_count += 1

        error_record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "component": self.component.value,
            "message": error_msg,
            "exception_type": type(exception).__name__ if exception else None,
            "exception_message": str(exception) if exception else None,
            "traceback": _format_traceback(exception),
            "context": context or {},
            "severity": severity,
        }
        self._remember(error_record)

        log_func = getattr(self.logger, severity, self.logger.warning)
        context_str = ", ".join(f"{k}={v}" for k, v in (context or {}).items())
        log_func(f"[{self.component.value.upper()}] {error_msg} | Context: {context_str}")

        self._persist_error(error_record)

    def _remember(self, error_record: Dict[str, Any]) -> None:
        with self._lock:
            self.error_history.append(error_record)
            if len(self.error_history) > self.HISTORY_LIMIT:
                del self.error_history[: len(self.error_history) - self.HISTORY_LIMIT]

    def _persist_error(self, error_record: Dict[str, Any]) -> None:
        """Append error record to JSONL error log file."""
        if self.error_log_path is None:
            return
        try:
            with open(self.error_log_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(error_record, default=str) + "\n")
        except OSError as e:
            self.logger.error(f"Failed to write error log: {e}")

    def get_error_summary(self) -> Dict[str, Any]:
        """Get summary statistics of errors logged by this component."""
        return {
            "component": self.component.value,
            "total_errors": self.error_count,
            "total_fallbacks": self.fallback_count,
            "recent_errors": self.error_history[-10:] if self.error_history else [],
        }

    def clear_history(self) -> None:
        """Clear in-memory error history."""
        with self._lock:
            self.error_history.clear()


def _format_traceback(exception: Optional[Exception]) -> Optional[str]:
    if exception is None or exception.__traceback__ is None:
        return None
    return "".join(traceback.format_exception(type(exception), exception, exception.__traceback__))


def create_component_logger(
    component: ErrorComponent, error_log_path: Optional[str] = None
) -> ErrorLogger:
    """Create a component-specific error logger."""
    return ErrorLogger(component=component, error_log_path=error_log_path)
