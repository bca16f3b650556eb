"""Errors raised by resilience policies instead of calling the protected function"""


class ResilienceError(Exception):
    """Base class for policy rejections"""

    pass


class CircuitOpenError(ResilienceError):
    """Circuit breaker is open and short-circuited the call"""

    def __init__(self, message: str, retry_after: float | None = None):
        super().__init__(message)
        self.retry_after = retry_after


class BulkheadFullError(ResilienceError):
    """No concurrency slot became free within the allowed wait"""

    pass
