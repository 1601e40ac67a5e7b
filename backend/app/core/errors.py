"""API error classes.

Every failure of the deletion flow maps to one of these, so the exception
handlers in main.py can render a consistent error envelope with a
machine-readable code.

WHY CUSTOM ERROR CLASSES:
- Consistent error response format across all endpoints
- Easy to map to HTTP status codes in exception handlers
- Type-safe error handling in services/repositories
"""


class APIError(Exception):
    """Base class for API errors.

    All API errors have a code, message, and HTTP status.
    Subclasses set default status_code.

    Attributes:
        code: Machine-readable error code (e.g., "NOT_FOUND").
        message: Human-readable error message.
        status_code: HTTP status code to return.
        details: Optional list of additional error details.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: list[dict] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


class ValidationError(APIError):
    """Field validation failed (400).

    Use for missing identifier or code, malformed request bodies, etc.
    """

    def __init__(
        self,
        message: str,
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=400,
            details=details,
        )


class NotFoundError(APIError):
    """Resource not found (404)."""

    def __init__(
        self, message: str = "No account found with this email or phone number."
    ) -> None:
        super().__init__(
            code="NOT_FOUND",
            message=message,
            status_code=404,
        )


class ExpiredOrMissingError(APIError):
    """No eligible pending deletion request (400).

    Deliberately covers both "code expired" and "never requested" so a
    caller cannot tell which one happened.
    """

    def __init__(self) -> None:
        super().__init__(
            code="CODE_EXPIRED_OR_MISSING",
            message="No pending request found or code expired. Please request a new code.",
            status_code=400,
        )


class InvalidCodeError(APIError):
    """Verification code did not match (400).

    Recoverable: the pending request stays usable until it expires.
    """

    def __init__(self) -> None:
        super().__init__(
            code="INVALID_CODE",
            message="Invalid verification code. Please try again.",
            status_code=400,
        )


class ServiceUnavailableError(APIError):
    """Verification code could not be delivered (500).

    The pending request is kept, so an operator can resend the code
    out-of-band.
    """

    def __init__(
        self,
        message: str = "Failed to send verification code. Please try again later.",
    ) -> None:
        super().__init__(
            code="DELIVERY_FAILED",
            message=message,
            status_code=500,
        )


class DeletionFailedError(APIError):
    """Account deletion failed after successful verification (500).

    Fatal for the request: a partially deleted account is not safe to
    re-drive automatically, so the user is pointed at support.
    """

    def __init__(
        self, message: str = "Failed to delete account. Please contact support."
    ) -> None:
        super().__init__(
            code="DELETION_FAILED",
            message=message,
            status_code=500,
        )


class InternalError(APIError):
    """Unexpected server error (500).

    Use for unhandled exceptions. Never expose stack traces to clients.
    """

    def __init__(self, message: str = "An unexpected error occurred") -> None:
        super().__init__(
            code="INTERNAL_ERROR",
            message=message,
            status_code=500,
        )
