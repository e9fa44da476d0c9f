# goldcast/data/errors.py
"""
Custom Exceptions for the Quote and News Pipeline
-------------------------------------------------

Adapter-level errors (everything under ``DataSourceError``) are caught at the
orchestrator boundary and turned into "no data from this source". Only
``NoDataAvailableError`` is meant to reach the user.
"""


class GoldcastError(Exception):
    """
    Base exception for all goldcast errors.
    """
    pass


class DataSourceError(GoldcastError):
    """
    Raised by a source adapter when it cannot produce usable data.
    """

    def __init__(self, source: str, message: str = ""):
        self.source = source
        self.message = message or f"Source '{source}' failed."
        super().__init__(self.message)


class NetworkFailureError(DataSourceError):
    """
    Transport error or non-2xx HTTP status.
    """

    def __init__(self, source: str, message: str = "", status_code: int = None):
        self.status_code = status_code
        super().__init__(source, message or f"Network failure from '{source}'.")


class SourceTimeoutError(DataSourceError):
    """
    The request exceeded its timeout. Kept apart from NetworkFailureError so
    callers can say "try again shortly".
    """

    def __init__(self, source: str, timeout: float = None):
        self.timeout = timeout
        suffix = f" after {timeout}s" if timeout is not None else ""
        super().__init__(source, f"Request to '{source}' timed out{suffix}.")


class EmptyPayloadError(DataSourceError):
    """
    Response parsed but carried no usable points.
    """
    pass


class MalformedPayloadError(DataSourceError):
    """
    Response is missing expected fields or is not valid JSON.
    """
    pass


class InsufficientHistoryError(DataSourceError):
    """
    Fewer samples than the component's minimum.
    """

    def __init__(self, source: str, count: int, minimum: int):
        self.count = count
        self.minimum = minimum
        super().__init__(
            source,
            f"Source '{source}' returned {count} points; more than {minimum} required.",
        )


class NoDataAvailableError(GoldcastError):
    """
    Every source failed and no last-known-good series exists for the key.
    """

    retryable = True

    def __init__(self, key: str, timeframe: str):
        self.key = key
        self.timeframe = timeframe
        super().__init__(
            f"No price data available for '{key}' ({timeframe}). Please retry shortly."
        )
