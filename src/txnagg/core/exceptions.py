"""Exception hierarchy for categorization and query processing.

Each exception carries an ``error_code`` from the catalog in errors.py and the
HTTP status the API layer should answer with.
"""

from typing import Any


class TransactionAggregationError(Exception):
    """Base exception for all service errors.

    Attributes:
        error_code: Code from the error catalog (e.g., "QUERY_001")
        details: Additional context about the error (for logging)
        http_status: HTTP status code to return (default: 500)
    """

    def __init__(
        self,
        error_code: str,
        details: dict[str, Any] | None = None,
        http_status: int = 500,
        message: str | None = None,
    ):
        self.error_code = error_code
        self.details = details or {}
        self.http_status = http_status
        super().__init__(message or error_code)


class ValidationFailure(TransactionAggregationError):
    """Raised when a request cannot be answered as posed.

    - No search criteria supplied (QUERY_001)
    - Start date after end date (QUERY_002)
    """

    def __init__(self, error_code: str = "QUERY_001", details: dict[str, Any] | None = None, message: str | None = None):
        super().__init__(error_code, details, http_status=400, message=message)


class NotFoundError(TransactionAggregationError):
    """Raised when a summary is requested for a customer with no transactions."""

    def __init__(self, error_code: str = "CUST_001", details: dict[str, Any] | None = None, message: str | None = None):
        super().__init__(error_code, details, http_status=404, message=message)


class DegradedRuleSetError(TransactionAggregationError):
    """No active rules are available.

    Recoverable: categorizers log it and fall back to ``Other``.
    """

    def __init__(self, details: dict[str, Any] | None = None):
        super().__init__("RULE_001", details, http_status=503)


class StoreUnavailableError(TransactionAggregationError):
    """Raised on the read path when a store query fails.

    Interactive reads do not retry; the background worker retries on its own
    schedule instead.
    """

    def __init__(self, details: dict[str, Any] | None = None, message: str | None = None):
        super().__init__("STORE_001", details, http_status=500, message=message)
