"""Pydantic request/response schemas for API endpoints."""

from app.schemas.account_deletion import (
    DeleteAccountRequest,
    SendOtpRequest,
    SendOtpResponse,
    VerifyOtpRequest,
    VerifyOtpResponse,
)

__all__ = [
    # Account deletion
    "DeleteAccountRequest",
    "SendOtpRequest",
    "SendOtpResponse",
    "VerifyOtpRequest",
    "VerifyOtpResponse",
]
