"""Three-phase account deletion wizard.

    INPUT ──submit_identifier──▶ VERIFY ──submit_code──▶ SUCCESS
      ▲                            │
      └─────change_identifier──────┘

The wizard is UI-agnostic: a screen (or scripts/delete_account.py) feeds it
input and renders ``phase``, ``error`` and ``loading``. A failed call keeps
the current phase and exposes the server's message in ``error``; nothing is
retried automatically.
"""

import re
from enum import Enum

from app.client.deletion_client import DeletionApiClient, DeletionApiError
from app.core.identifiers import NotificationChannel
from app.services.otp import OTP_LENGTH

_NON_DIGITS = re.compile(r"[^0-9]")

EMPTY_IDENTIFIER_ERROR = "Please enter your email or phone number."
INVALID_CODE_ERROR = "Please enter the 6-digit verification code."


class WizardPhase(str, Enum):
    """Screens of the deletion wizard.

    Values:
        INPUT: Collecting the identifier and optional reason.
        VERIFY: Code sent; collecting the 6-digit code.
        SUCCESS: Account deleted. Terminal.
    """

    INPUT = "input"
    VERIFY = "verify"
    SUCCESS = "success"


class DeletionWizard:
    """State machine for the deletion screen.

    Attributes:
        phase: Current phase.
        identifier: Identifier as typed by the user.
        reason: Optional reason as typed.
        code: Entered code, digits only.
        error: Inline error to show, or None.
        loading: True while a call is in flight.
        confirmed_identifier: Normalized identifier returned by send-otp.
            This, not the typed value, is what verify-otp receives.
        channel: Channel the code went out on.
        message: Last success message from the server.
    """

    def __init__(self, api: DeletionApiClient) -> None:
        self.api = api
        self.phase = WizardPhase.INPUT
        self.identifier = ""
        self.reason = ""
        self.code = ""
        self.error: str | None = None
        self.loading = False
        self.confirmed_identifier = ""
        self.channel: NotificationChannel | None = None
        self.message: str | None = None

    def set_identifier(self, text: str) -> None:
        """Store the typed identifier and clear any inline error."""
        self.identifier = text
        self.error = None

    def set_code(self, text: str) -> None:
        """Keep digits only, capped at the code length."""
        self.code = _NON_DIGITS.sub("", text)[:OTP_LENGTH]
        self.error = None

    async def submit_identifier(self) -> bool:
        """Request a code for the typed identifier.

        Returns:
            True if the wizard moved to VERIFY.
        """
        if self.phase is not WizardPhase.INPUT or self.loading:
            return False

        identifier = self.identifier.strip()
        if not identifier:
            self.error = EMPTY_IDENTIFIER_ERROR
            return False

        self.loading = True
        self.error = None
        try:
            sent = await self.api.send_otp(identifier, self.reason.strip() or None)
        except DeletionApiError as exc:
            self.error = exc.message
            return False
        finally:
            self.loading = False

        self.confirmed_identifier = sent.identifier or identifier
        self.channel = sent.channel
        self.message = sent.message
        self.phase = WizardPhase.VERIFY
        return True

    async def submit_code(self) -> bool:
        """Submit the entered code; on success the account is deleted.

        Returns:
            True if the wizard moved to SUCCESS.
        """
        if self.phase is not WizardPhase.VERIFY or self.loading:
            return False

        code = _NON_DIGITS.sub("", self.code)
        if len(code) != OTP_LENGTH:
            self.error = INVALID_CODE_ERROR
            return False

        self.loading = True
        self.error = None
        try:
            confirmed = await self.api.verify_otp(self.confirmed_identifier, code)
        except DeletionApiError as exc:
            self.error = exc.message
            return False
        finally:
            self.loading = False

        self.message = confirmed.message
        self.phase = WizardPhase.SUCCESS
        return True

    def change_identifier(self) -> None:
        """Go back to INPUT, discarding the entered code and any error."""
        if self.phase is not WizardPhase.VERIFY or self.loading:
            return
        self.phase = WizardPhase.INPUT
        self.code = ""
        self.error = None
