"""Account deletion endpoint.

One URL, two actions selected by the ``action`` field of the body:

- POST /delete-account {"action": "send-otp", ...} — issue and deliver a code
- POST /delete-account {"action": "verify-otp", ...} — verify code, delete account

No authentication: possession of the identifier's inbox or phone is the
proof of ownership.
"""

from typing import Annotated

from fastapi import APIRouter, Body, Depends, Request

from app.api.deps import DeletionService
from app.core.rate_limiting import limit_for_action, limiter
from app.schemas.account_deletion import (
    DeleteAccountRequest,
    SendOtpRequest,
    SendOtpResponse,
    VerifyOtpResponse,
)

router = APIRouter()


async def scoped_body(
    request: Request,
    body: Annotated[DeleteAccountRequest, Body(discriminator="action")],
) -> DeleteAccountRequest:
    """Parse the body and record its action for the rate limit key.

    Dependencies resolve before the limiter wrapper runs, so the key
    function can read the action back from ``request.state``.
    """
    request.state.rate_limit_action = body.action
    return body


@router.post("/delete-account")
@limiter.limit(limit_for_action)
async def delete_account(
    request: Request,  # noqa: ARG001
    body: Annotated[DeleteAccountRequest, Depends(scoped_body)],
    service: DeletionService,
) -> SendOtpResponse | VerifyOtpResponse:
    """Request a deletion code or confirm one.

    Rate limits (per client IP, per action): send-otp
    ``settings.rate_limit_send_otp``, verify-otp
    ``settings.rate_limit_verify_otp``.
    """
    if isinstance(body, SendOtpRequest):
        sent = await service.initiate(body.identifier, body.reason)
        return SendOtpResponse(
            message=sent.message,
            identifier=sent.identifier,
            channel=sent.channel,
        )

    confirmed = await service.confirm(body.identifier, body.otp)
    return VerifyOtpResponse(message=confirmed.message)
