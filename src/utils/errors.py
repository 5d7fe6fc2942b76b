"""API error types

Every error carries the HTTP status the API layer answers with.
"""


class RecipeApiError(Exception):
    """Base error for the recipe API"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(RecipeApiError):
    """Malformed, missing or conflicting input"""
    status_code = 400


class PageOutOfRangeError(ValidationError):
    """Requested page is past the last page"""

    def __init__(self, total_pages: int):
        super().__init__(
            f"Page number exceeds total pages. Maximum page number is {total_pages}."
        )
        self.total_pages = total_pages


class NotFoundError(RecipeApiError):
    status_code = 404


class BackendQueryError(RecipeApiError):
    """Athena could not answer the query"""


class QueryFailedError(BackendQueryError):
    """Athena reported FAILED or CANCELLED"""

    def __init__(self, state: str, reason: str | None):
        super().__init__(f"Query {state}: {reason or 'no reason given'}")
        self.state = state
        self.reason = reason


class QueryTimeoutError(BackendQueryError):
    """Query did not reach a terminal state before the deadline"""

    def __init__(self, execution_id: str, timeout: float):
        super().__init__(
            f"Query {execution_id} did not finish within {timeout:g} seconds"
        )
        self.execution_id = execution_id
        self.timeout = timeout


class TransportError(BackendQueryError):
    """Network, credential or throttling failure talking to AWS"""


class MalformedDataError(RecipeApiError):
    """Stored data could not be parsed"""
