"""Identity-verified account deletion.

Two-phase challenge-response:

initiate(identifier, reason)
    normalize → existence check → issue code (digest stored, earlier
    pending codes superseded) → deliver on the channel picked by the
    identifier's shape.

confirm(identifier, code)
    normalize → newest pending, unexpired request → constant-time digest
    compare → cascading deletion → mark request completed.

The service holds no state between calls; everything durable is in the
deletion request repository. Failures surface as APIError subclasses and
are never retried here.
"""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime

import structlog

from app.core.errors import (
    ExpiredOrMissingError,
    InternalError,
    InvalidCodeError,
    NotFoundError,
    ServiceUnavailableError,
    ValidationError,
)
from app.core.identifiers import (
    NotificationChannel,
    mask_identifier,
    normalize_identifier,
    select_channel,
)
from app.providers.errors import ProviderError
from app.providers.identity.base import IdentityDirectory
from app.providers.notifier.base import NotifierRegistry
from app.repositories.deletion_request_repository import DeletionRequestRepository
from app.services.cascading_deletion import CascadingDeletionExecutor
from app.services.otp import generate_otp, hash_otp, otp_expiry, verify_otp

logger = structlog.get_logger()

_SENT_MESSAGES: dict[NotificationChannel, str] = {
    NotificationChannel.CHAT: "Verification code has been sent to your WhatsApp.",
    NotificationChannel.EMAIL: "Verification code has been sent to your email.",
}
_DELETED_MESSAGE = "Your account and all personal data have been permanently deleted."


def _utcnow() -> datetime:
    return datetime.now(UTC)


@dataclass(frozen=True)
class InitiateResult:
    """Outcome of a successful initiate().

    Attributes:
        identifier: Normalized identifier the code was issued for. Clients
            must send this back on confirm.
        channel: Channel the code was delivered on.
        message: User-facing confirmation text.
    """

    identifier: str
    channel: NotificationChannel
    message: str


@dataclass(frozen=True)
class ConfirmResult:
    """Outcome of a successful confirm()."""

    message: str


class AccountDeletionService:
    """Orchestrates OTP issuance, verification and account deletion.

    Args:
        requests: Store for issued deletion requests.
        directory: Identity directory used for the existence check and,
            through the executor, the deletion itself.
        notifiers: Channel → notifier lookup.
        executor: Cascading deletion executor. Defaults to one over
            ``directory``.
        clock: Source of the current time (UTC). Injected by tests.
    """

    def __init__(
        self,
        *,
        requests: DeletionRequestRepository,
        directory: IdentityDirectory,
        notifiers: NotifierRegistry,
        executor: CascadingDeletionExecutor | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.requests = requests
        self.directory = directory
        self.notifiers = notifiers
        self.executor = executor or CascadingDeletionExecutor(directory)
        self.clock = clock

    async def initiate(
        self, identifier: str | None, reason: str | None = None
    ) -> InitiateResult:
        """Issue and deliver a deletion code.

        Args:
            identifier: Raw email or phone number.
            reason: Optional free-text reason, stored for information only.

        Returns:
            InitiateResult with the normalized identifier and channel.

        Raises:
            ValidationError: Identifier missing or unusable.
            NotFoundError: No account matches the identifier. Nothing is
                stored and nothing is sent.
            InternalError: The existence check could not be completed.
            ServiceUnavailableError: The code could not be delivered. The
                issued request is kept.
        """
        normalized = self._normalize(identifier, "Email or phone number is required")

        try:
            exists = await self.directory.exists_identity(normalized)
        except ProviderError as exc:
            logger.error("identity_check_failed", error=str(exc))
            raise InternalError("Failed to verify account. Please try again.") from exc
        if not exists:
            logger.info("identity_not_found", identifier=mask_identifier(normalized))
            raise NotFoundError()

        code = generate_otp()
        now = self.clock()
        superseded = await self.requests.supersede_pending(identifier=normalized)
        request = await self.requests.create(
            identifier=normalized,
            otp_hash=hash_otp(code),
            otp_expires_at=otp_expiry(now),
            created_at=now,
            reason=(reason or "").strip() or None,
        )
        # Durable before dispatch: a failed delivery must not lose the row
        await self.requests.commit()

        channel = select_channel(normalized)
        logger.info(
            "otp_issued",
            request_id=str(request.id),
            identifier=mask_identifier(normalized),
            channel=channel.value,
            superseded=superseded,
        )

        notifier = self.notifiers.get(channel)
        try:
            delivered = await notifier.send(normalized, code)
        except Exception:
            logger.exception("otp_dispatch_error", channel=channel.value)
            delivered = False
        if not delivered:
            logger.warning(
                "otp_dispatch_failed",
                request_id=str(request.id),
                channel=channel.value,
            )
            raise ServiceUnavailableError()

        return InitiateResult(
            identifier=normalized,
            channel=channel,
            message=_SENT_MESSAGES[channel],
        )

    async def confirm(self, identifier: str | None, code: str | None) -> ConfirmResult:
        """Verify a deletion code and delete the account.

        Args:
            identifier: Raw or normalized email or phone number.
            code: Code the user received.

        Returns:
            ConfirmResult with the user-facing message.

        Raises:
            ValidationError: Identifier or code missing.
            ExpiredOrMissingError: No pending, unexpired request exists.
            InvalidCodeError: Code does not match the newest pending request.
            DeletionFailedError: Verification passed but deletion failed.
                The request stays pending.
        """
        if not code or not code.strip():
            raise ValidationError("Identifier and OTP are required")
        normalized = self._normalize(identifier, "Identifier and OTP are required")

        request = await self.requests.get_latest_pending(
            identifier=normalized, now=self.clock()
        )
        if request is None:
            raise ExpiredOrMissingError()

        if not verify_otp(code, request.otp_hash):
            logger.info(
                "otp_mismatch",
                request_id=str(request.id),
                identifier=mask_identifier(normalized),
            )
            raise InvalidCodeError()

        outcome = await self.executor.execute(normalized)
        await self.requests.mark_completed(request.id, verified_at=self.clock())

        logger.info(
            "account_deletion_completed",
            request_id=str(request.id),
            identifier=mask_identifier(normalized),
            already_absent=outcome.already_absent,
        )
        return ConfirmResult(message=_DELETED_MESSAGE)

    def _normalize(self, identifier: str | None, missing_message: str) -> str:
        if not identifier or not identifier.strip():
            raise ValidationError(missing_message)
        normalized = normalize_identifier(identifier)
        if not normalized:
            raise ValidationError("Enter a valid email address or phone number")
        return normalized
