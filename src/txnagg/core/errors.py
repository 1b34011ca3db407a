"""Error codes and user-friendly messages.

Each catalog entry has:
- code: Unique identifier
- message: Technical description (for logs)
- user_message: User-friendly explanation
- suggestion: Actionable guidance for the caller
- retry_allowed: Whether the error is retryable
"""


ERROR_CATALOG: dict[str, dict] = {
    "QUERY_001": {
        "code": "QUERY_001",
        "message": "Search request has no criteria",
        "user_message": "At least one search criterion is required.",
        "suggestion": "Provide an id, customer, amount range, date range, description, category, source, currency or type.",
        "retry_allowed": False,
    },
    "QUERY_002": {
        "code": "QUERY_002",
        "message": "Invalid date range",
        "user_message": "The start date must not be after the end date.",
        "suggestion": "Swap the dates or narrow the range and try again.",
        "retry_allowed": False,
    },
    "CUST_001": {
        "code": "CUST_001",
        "message": "No transactions found for customer",
        "user_message": "We couldn't find any transactions for this customer.",
        "suggestion": "Check the customer ID and try again.",
        "retry_allowed": False,
    },
    "RULE_001": {
        "code": "RULE_001",
        "message": "No active categorization rules available",
        "user_message": "Transactions are temporarily categorized as Other.",
        "suggestion": "Seed or restore category rules.",
        "retry_allowed": True,
    },
    "STORE_001": {
        "code": "STORE_001",
        "message": "Transaction store operation failed",
        "user_message": "We couldn't read transactions right now.",
        "suggestion": "Please try again in a few moments.",
        "retry_allowed": True,
    },
    "VAL_001": {
        "code": "VAL_001",
        "message": "Request parameters failed validation",
        "user_message": "Invalid input data",
        "suggestion": "Please check your input and try again",
        "retry_allowed": True,
    },
}


def get_error(error_code: str) -> dict:
    """Get error definition by code.

    Args:
        error_code: Error code from the catalog

    Returns:
        Dict with error details (a generic entry for unknown codes)
    """
    if error_code not in ERROR_CATALOG:
        return {
            "code": "UNKNOWN",
            "message": f"Unknown error code: {error_code}",
            "user_message": "An unexpected error occurred.",
            "suggestion": "Please try again. Contact support if the problem persists.",
            "retry_allowed": True,
        }
    return ERROR_CATALOG[error_code]


def get_user_message(error_code: str) -> str:
    return get_error(error_code)["user_message"]


def is_retryable(error_code: str) -> bool:
    return get_error(error_code)["retry_allowed"]
