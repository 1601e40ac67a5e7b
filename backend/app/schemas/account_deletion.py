"""Account deletion request/response schemas.

POST /delete-account takes one body discriminated by ``action``:

1. ``send-otp``: identifier (+ optional reason) → code delivered
2. ``verify-otp``: identifier + otp → account deleted

Identifier and code are optional at the schema level so that a missing
value is reported with the same message the service uses, rather than a
generic field error.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from app.core.identifiers import NotificationChannel

# Long enough for any RFC 5321 address
_MAX_IDENTIFIER_LENGTH = 320
_MAX_REASON_LENGTH = 1000
_MAX_OTP_LENGTH = 16

# =============================================================================
# Request Schemas
# =============================================================================


class SendOtpRequest(BaseModel):
    """Request body for ``action: "send-otp"``.

    Attributes:
        identifier: Email address or phone number, any formatting.
        reason: Optional free-text reason for leaving.
    """

    model_config = ConfigDict(extra="forbid")

    action: Literal["send-otp"]
    identifier: str | None = Field(default=None, max_length=_MAX_IDENTIFIER_LENGTH)
    reason: str | None = Field(default=None, max_length=_MAX_REASON_LENGTH)


class VerifyOtpRequest(BaseModel):
    """Request body for ``action: "verify-otp"``.

    Attributes:
        identifier: Normalized identifier returned by send-otp.
        otp: Code the user received.
    """

    model_config = ConfigDict(extra="forbid")

    action: Literal["verify-otp"]
    identifier: str | None = Field(default=None, max_length=_MAX_IDENTIFIER_LENGTH)
    otp: str | None = Field(default=None, max_length=_MAX_OTP_LENGTH)


DeleteAccountRequest = SendOtpRequest | VerifyOtpRequest

# =============================================================================
# Response Schemas
# =============================================================================


class SendOtpResponse(BaseModel):
    """Response for a successful send-otp.

    Attributes:
        success: Always True (failures use the error envelope).
        message: User-facing confirmation.
        identifier: Normalized identifier; clients send this back on verify.
        channel: Channel the code went out on.
    """

    success: bool = True
    message: str
    identifier: str
    channel: NotificationChannel


class VerifyOtpResponse(BaseModel):
    """Response for a successful verify-otp."""

    success: bool = True
    message: str
