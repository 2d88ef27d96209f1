"""Error hierarchy for Users API calls.

Every failure of a request surfaces as one of the UsersApiError subclasses;
callers that only need a message can catch the base class.
"""


class UsersApiError(Exception):
    """Base exception for all Users API failures."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class NetworkFailure(UsersApiError):
    """Raised when the request could not be sent or no response arrived.

    Examples:
        - DNS or connection failure
        - Read or connect timeout
    """


class ApiError(UsersApiError):
    """Raised on a non-2xx response.

    ``message`` carries the server's ``error`` field when the body has one.
    """

    def __init__(
        self,
        message: str,
        status_code: int,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, cause)
        self.status_code = status_code


class ParseFailure(UsersApiError):
    """Raised when a response body is not JSON or does not match the expected shape."""
