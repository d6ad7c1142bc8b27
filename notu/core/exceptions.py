"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.

Taxonomy for remote calls:
    NetworkError         - transport failure, no response received
    HttpError            - non-2xx response (server message when supplied)
    SessionExpiredError  - refresh exhausted, the session is over
    ResponseFormatError  - 2xx response whose body does not parse
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class NetworkError(ApplicationError):
    """Raised when a request never produced a response."""

    def __init__(self, message: str = "Network unreachable") -> None:
        super().__init__(message, code="NET_UNREACHABLE")


class HttpError(ApplicationError):
    """Raised for a non-2xx response from the remote service."""

    def __init__(
        self,
        status: int,
        message: str | None = None,
        code: str | None = None,
    ) -> None:
        self.status = status
        self.server_message = message
        super().__init__(
            message or f"Request failed with status {status}",
            code=code or f"HTTP_{status}",
        )


class SessionExpiredError(ApplicationError):
    """Raised when the session cannot be renewed."""

    def __init__(self, message: str = "Session expired") -> None:
        super().__init__(message, code="AUTH_SESSION_EXPIRED")


class NotFoundError(ApplicationError):
    """Raised when a resource cannot be found."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, code="RES_NOT_FOUND")


class ValidationError(ApplicationError):
    """Raised when validation fails."""

    def __init__(self, message: str = "Validation failed", details: dict | None = None) -> None:
        self.details = details or {}
        super().__init__(message, code="VAL_VALIDATION_ERROR")


class StorageError(ApplicationError):
    """Raised when local storage cannot be written."""

    def __init__(self, message: str = "Storage error") -> None:
        super().__init__(message, code="SYS_STORAGE_ERROR")


class ResponseFormatError(ApplicationError):
    """Raised when a response body does not have the expected shape."""

    def __init__(self, message: str = "Unexpected response from server") -> None:
        super().__init__(message, code="NET_BAD_RESPONSE")
