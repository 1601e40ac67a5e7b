"""Response envelope models.

Error responses share one flat shape, ``{"error": ..., "code": ...}``, which
is what the storefront clients already read (they surface ``error`` as the
inline message).

WHY A SHARED ERROR MODEL:
- Consistent structure across all endpoints and exception handlers
- Clients only need to read one field to show a message
- Machine-readable code for clients that branch on failure type
"""

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response body.

    Usage in exception handlers:
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=exc.message, code=exc.code).model_dump(
                exclude_none=True
            ),
        )

    Attributes:
        error: Human-readable error message.
        code: Machine-readable error code (e.g., "INVALID_CODE").
        details: Optional list of field-level errors (for validation).
    """

    error: str
    code: str
    details: list[dict] | None = None
