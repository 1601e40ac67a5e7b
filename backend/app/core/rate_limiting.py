"""Rate limiting configuration using slowapi.

Security: Caps how often one client can request codes (each one sends a
WhatsApp message or an email) and how fast it can guess them.

The deletion endpoint multiplexes two actions over one URL, so the limit key
carries the action as well as the client IP. send-otp and verify-otp are
counted in separate buckets with separate limits.

Usage in routers:
    from app.core.rate_limiting import limiter, limit_for_action

    async def scoped_body(request: Request, body: ...) -> ...:
        request.state.rate_limit_action = body.action
        return body

    @router.post("/delete-account")
    @limiter.limit(limit_for_action)
    async def delete_account(
        request: Request, body: Annotated[..., Depends(scoped_body)], ...
    ):
        ...
"""

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from app.core.config import settings
from app.core.responses import ErrorResponse

SEND_OTP_ACTION = "send-otp"
VERIFY_OTP_ACTION = "verify-otp"

# Fallback scope when no action was recorded (body failed to parse)
_UNSCOPED = "default"


def rate_limit_key_func(request: Request) -> str:
    """Get rate limit key from request.

    Key format: "{action}:{ip}". The action is recorded on
    ``request.state.rate_limit_action`` by the endpoint's body dependency,
    which FastAPI resolves before the limiter runs.

    Args:
        request: The incoming request.

    Returns:
        Rate limit key string.
    """
    action = getattr(request.state, "rate_limit_action", None) or _UNSCOPED
    return f"{action}:{get_remote_address(request)}"


def limit_for_action(key: str) -> str:
    """Pick the limit string for a key produced by rate_limit_key_func.

    Args:
        key: "{action}:{ip}" key.

    Returns:
        slowapi limit string from settings.
    """
    action, _, _ = key.partition(":")
    if action == VERIFY_OTP_ACTION:
        return settings.rate_limit_verify_otp
    return settings.rate_limit_send_otp


# Global limiter instance
# Configured with in-memory storage (suitable for single-instance deployment)
# For multi-instance, configure Redis storage via RATELIMIT_STORAGE_URL
limiter = Limiter(
    key_func=rate_limit_key_func,
    enabled=settings.rate_limit_enabled,
)


def rate_limit_exceeded_handler(
    _request: Request,
    exc: RateLimitExceeded,
) -> Response:
    """Handle rate limit exceeded errors.

    Security: Returns 429 Too Many Requests with standard error envelope.

    Args:
        request: The incoming request.
        exc: The rate limit exception.

    Returns:
        JSONResponse with 429 status and retry-after header.
    """
    # Parse retry-after from exception detail (e.g., "10 per 1 minute")
    # Fallback to 60 seconds if parsing fails
    try:
        retry_after = str(exc.detail.split()[-1])
        int(retry_after.rstrip("s"))
    except (ValueError, AttributeError, IndexError):
        retry_after = "60"

    return JSONResponse(
        status_code=429,
        content=ErrorResponse(
            error="Too many requests. Please try again later.",
            code="RATE_LIMITED",
        ).model_dump(exclude_none=True),
        headers={"Retry-After": retry_after},
    )
