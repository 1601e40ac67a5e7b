"""Tests for AccountDeletionService (initiate / confirm)."""

import asyncio

import httpx
import pytest

from app.core.errors import (
    DeletionFailedError,
    ExpiredOrMissingError,
    InternalError,
    InvalidCodeError,
    NotFoundError,
    ServiceUnavailableError,
    ValidationError,
)
from app.core.identifiers import NotificationChannel
from app.models.deletion_request import DeletionRequestStatus
from app.providers.errors import IdentityDirectoryError
from app.providers.identity.mock_adapter import MockIdentityDirectory
from app.providers.notifier.base import NotifierRegistry
from app.providers.notifier.mock_adapter import MockNotifier
from app.services.account_deletion_service import AccountDeletionService
from app.services.otp import hash_otp
from tests.conftest import TEST_EMAIL, TEST_PHONE

_PENDING = DeletionRequestStatus.PENDING.value
_SUPERSEDED = DeletionRequestStatus.SUPERSEDED.value
_COMPLETED = DeletionRequestStatus.COMPLETED.value


def _wrong(code: str) -> str:
    """A valid-looking code that differs from ``code``."""
    return "100000" if code != "100000" else "100001"


class TestInitiate:
    """Tests for AccountDeletionService.initiate()."""

    @pytest.mark.asyncio
    async def test_local_phone_is_normalized_and_sent_over_chat(
        self, deletion_service, request_store, chat_notifier, email_notifier
    ):
        result = await deletion_service.initiate("9876543210")

        assert result.identifier == TEST_PHONE
        assert result.channel is NotificationChannel.CHAT
        assert result.message == "Verification code has been sent to your WhatsApp."
        assert len(request_store.rows) == 1
        assert request_store.rows[0].identifier == TEST_PHONE
        assert request_store.rows[0].status == _PENDING
        assert chat_notifier.sent[0]["destination"] == TEST_PHONE
        assert email_notifier.sent == []

    @pytest.mark.asyncio
    async def test_email_is_normalized_and_sent_by_email(
        self, deletion_service, email_notifier, chat_notifier
    ):
        result = await deletion_service.initiate("  Shopper@Example.com ")

        assert result.identifier == TEST_EMAIL
        assert result.channel is NotificationChannel.EMAIL
        assert email_notifier.sent[0]["destination"] == TEST_EMAIL
        assert chat_notifier.sent == []

    @pytest.mark.asyncio
    async def test_unknown_identity_creates_nothing_and_sends_nothing(
        self, deletion_service, request_store, chat_notifier, email_notifier
    ):
        with pytest.raises(NotFoundError) as exc_info:
            await deletion_service.initiate("user@example.com")

        assert exc_info.value.status_code == 404
        assert request_store.rows == []
        assert chat_notifier.sent == []
        assert email_notifier.sent == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("identifier", [None, "", "   "])
    async def test_blank_identifier_is_rejected(self, deletion_service, identifier):
        with pytest.raises(ValidationError, match="Email or phone number is required"):
            await deletion_service.initiate(identifier)

    @pytest.mark.asyncio
    async def test_identifier_without_digits_is_rejected(
        self, deletion_service, request_store
    ):
        with pytest.raises(ValidationError):
            await deletion_service.initiate("not a number")
        assert request_store.rows == []

    @pytest.mark.asyncio
    async def test_stored_digest_is_not_the_code(
        self, deletion_service, request_store, email_notifier
    ):
        await deletion_service.initiate(TEST_EMAIL)

        code = email_notifier.last_code
        row = request_store.rows[0]
        assert row.otp_hash != code
        assert row.otp_hash == hash_otp(code)

    @pytest.mark.asyncio
    async def test_expiry_is_ten_minutes_after_issue(
        self, deletion_service, request_store, clock
    ):
        await deletion_service.initiate(TEST_EMAIL)

        row = request_store.rows[0]
        assert row.created_at == clock.now
        assert (row.otp_expires_at - row.created_at).total_seconds() == 600

    @pytest.mark.asyncio
    async def test_reason_is_stored_trimmed(self, deletion_service, request_store):
        await deletion_service.initiate(TEST_EMAIL, reason="  Too many emails  ")
        assert request_store.rows[0].reason == "Too many emails"

    @pytest.mark.asyncio
    async def test_blank_reason_is_stored_as_none(
        self, deletion_service, request_store
    ):
        await deletion_service.initiate(TEST_EMAIL, reason="   ")
        assert request_store.rows[0].reason is None

    @pytest.mark.asyncio
    async def test_new_code_supersedes_earlier_pending(
        self, deletion_service, request_store, clock
    ):
        await deletion_service.initiate(TEST_EMAIL)
        clock.advance(seconds=30)
        await deletion_service.initiate(TEST_EMAIL)

        old, new = request_store.rows
        assert old.status == _SUPERSEDED
        assert new.status == _PENDING

    @pytest.mark.asyncio
    async def test_row_is_committed_before_dispatch(
        self, request_store, directory, clock
    ):
        seen_commits: list[int] = []

        class CommitCheckingNotifier(MockNotifier):
            async def send(self, destination: str, code: str) -> bool:
                seen_commits.append(request_store.commits)
                return await super().send(destination, code)

        service = AccountDeletionService(
            requests=request_store,
            directory=directory,
            notifiers=NotifierRegistry(
                [
                    CommitCheckingNotifier(NotificationChannel.EMAIL),
                    MockNotifier(NotificationChannel.CHAT),
                ]
            ),
            clock=clock,
        )
        await service.initiate(TEST_EMAIL)

        assert seen_commits == [1]

    @pytest.mark.asyncio
    async def test_delivery_failure_keeps_row_valid(
        self, request_store, directory, clock
    ):
        failing = MockNotifier(NotificationChannel.EMAIL, deliver=False)
        service = AccountDeletionService(
            requests=request_store,
            directory=directory,
            notifiers=NotifierRegistry(
                [failing, MockNotifier(NotificationChannel.CHAT)]
            ),
            clock=clock,
        )

        with pytest.raises(ServiceUnavailableError) as exc_info:
            await service.initiate(TEST_EMAIL)

        assert exc_info.value.status_code == 500
        assert request_store.rows[0].status == _PENDING
        assert request_store.commits == 1

        # The code went nowhere, but it is still the live one
        result = await service.confirm(TEST_EMAIL, failing.last_code)
        assert "permanently deleted" in result.message

    @pytest.mark.asyncio
    async def test_notifier_exception_is_delivery_failure(
        self, request_store, directory, clock
    ):
        class RaisingNotifier(MockNotifier):
            async def send(self, destination: str, code: str) -> bool:
                await super().send(destination, code)
                raise httpx.InvalidURL("bad url")

        raising = RaisingNotifier(NotificationChannel.EMAIL)
        service = AccountDeletionService(
            requests=request_store,
            directory=directory,
            notifiers=NotifierRegistry(
                [raising, MockNotifier(NotificationChannel.CHAT)]
            ),
            clock=clock,
        )

        with pytest.raises(ServiceUnavailableError) as exc_info:
            await service.initiate(TEST_EMAIL)

        assert exc_info.value.code == "DELIVERY_FAILED"
        assert request_store.rows[0].status == _PENDING
        assert request_store.commits == 1

    @pytest.mark.asyncio
    async def test_directory_failure_is_internal_error(
        self, request_store, notifiers, clock
    ):
        directory = MockIdentityDirectory([TEST_EMAIL], fail_on="exists_identity")
        service = AccountDeletionService(
            requests=request_store,
            directory=directory,
            notifiers=notifiers,
            clock=clock,
        )

        with pytest.raises(InternalError):
            await service.initiate(TEST_EMAIL)
        assert request_store.rows == []


class TestConfirm:
    """Tests for AccountDeletionService.confirm()."""

    @pytest.mark.asyncio
    async def test_correct_code_deletes_account(
        self, deletion_service, request_store, directory, email_notifier, clock
    ):
        await deletion_service.initiate(TEST_EMAIL)
        clock.advance(minutes=2)

        result = await deletion_service.confirm(TEST_EMAIL, email_notifier.last_code)

        assert result.message == (
            "Your account and all personal data have been permanently deleted."
        )
        assert TEST_EMAIL not in directory.principals
        assert len(directory.deleted) == 1
        row = request_store.rows[0]
        assert row.status == _COMPLETED
        assert row.verified_at == clock.now

    @pytest.mark.asyncio
    async def test_confirm_accepts_raw_spelling_of_identifier(
        self, deletion_service, directory, chat_notifier
    ):
        await deletion_service.initiate("+91 98765 43210")

        await deletion_service.confirm("9876543210", chat_notifier.last_code)

        assert TEST_PHONE not in directory.principals

    @pytest.mark.asyncio
    async def test_code_with_surrounding_whitespace_is_accepted(
        self, deletion_service, directory, email_notifier
    ):
        await deletion_service.initiate(TEST_EMAIL)
        await deletion_service.confirm(TEST_EMAIL, f" {email_notifier.last_code} ")
        assert TEST_EMAIL not in directory.principals

    @pytest.mark.asyncio
    async def test_wrong_code_leaves_row_untouched_and_retry_succeeds(
        self, deletion_service, request_store, directory, email_notifier
    ):
        await deletion_service.initiate(TEST_EMAIL)
        code = email_notifier.last_code

        with pytest.raises(InvalidCodeError) as exc_info:
            await deletion_service.confirm(TEST_EMAIL, _wrong(code))

        assert exc_info.value.status_code == 400
        assert request_store.rows[0].status == _PENDING
        assert request_store.rows[0].verified_at is None
        assert TEST_EMAIL in directory.principals

        await deletion_service.confirm(TEST_EMAIL, code)
        assert TEST_EMAIL not in directory.principals

    @pytest.mark.asyncio
    async def test_expired_code_fails_even_if_correct(
        self, deletion_service, directory, email_notifier, clock
    ):
        await deletion_service.initiate(TEST_EMAIL)
        clock.advance(minutes=10, seconds=1)

        with pytest.raises(ExpiredOrMissingError):
            await deletion_service.confirm(TEST_EMAIL, email_notifier.last_code)
        assert TEST_EMAIL in directory.principals

    @pytest.mark.asyncio
    async def test_code_is_valid_at_exact_expiry(
        self, deletion_service, directory, email_notifier, clock
    ):
        await deletion_service.initiate(TEST_EMAIL)
        clock.advance(minutes=10)

        await deletion_service.confirm(TEST_EMAIL, email_notifier.last_code)
        assert TEST_EMAIL not in directory.principals

    @pytest.mark.asyncio
    async def test_never_requested_is_expired_or_missing(self, deletion_service):
        with pytest.raises(ExpiredOrMissingError) as exc_info:
            await deletion_service.confirm(TEST_EMAIL, "123456")
        assert exc_info.value.message == (
            "No pending request found or code expired. Please request a new code."
        )

    @pytest.mark.asyncio
    async def test_earlier_code_fails_after_reissue(
        self, deletion_service, directory, email_notifier, clock
    ):
        await deletion_service.initiate(TEST_EMAIL)
        first = email_notifier.last_code
        clock.advance(seconds=5)
        await deletion_service.initiate(TEST_EMAIL)
        second = email_notifier.last_code

        if first != second:
            with pytest.raises(InvalidCodeError):
                await deletion_service.confirm(TEST_EMAIL, first)

        await deletion_service.confirm(TEST_EMAIL, second)
        assert TEST_EMAIL not in directory.principals

    @pytest.mark.asyncio
    async def test_completed_request_cannot_be_replayed(
        self, deletion_service, email_notifier
    ):
        await deletion_service.initiate(TEST_EMAIL)
        code = email_notifier.last_code
        await deletion_service.confirm(TEST_EMAIL, code)

        with pytest.raises(ExpiredOrMissingError):
            await deletion_service.confirm(TEST_EMAIL, code)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("identifier", "code"),
        [(TEST_EMAIL, None), (TEST_EMAIL, "  "), (None, "123456"), ("", "123456")],
    )
    async def test_missing_fields_are_rejected(
        self, deletion_service, identifier, code
    ):
        with pytest.raises(ValidationError, match="Identifier and OTP are required"):
            await deletion_service.confirm(identifier, code)

    @pytest.mark.asyncio
    async def test_deletion_failure_leaves_request_pending(
        self, request_store, notifiers, email_notifier, clock
    ):
        directory = MockIdentityDirectory([TEST_EMAIL], fail_on="delete_principal")
        service = AccountDeletionService(
            requests=request_store,
            directory=directory,
            notifiers=notifiers,
            clock=clock,
        )
        await service.initiate(TEST_EMAIL)

        with pytest.raises(DeletionFailedError) as exc_info:
            await service.confirm(TEST_EMAIL, email_notifier.last_code)

        assert exc_info.value.status_code == 500
        assert request_store.rows[0].status == _PENDING
        assert request_store.rows[0].verified_at is None

    @pytest.mark.asyncio
    async def test_principal_gone_before_confirm_still_succeeds(
        self, deletion_service, request_store, directory, email_notifier
    ):
        await deletion_service.initiate(TEST_EMAIL)
        directory.principals.pop(TEST_EMAIL)

        await deletion_service.confirm(TEST_EMAIL, email_notifier.last_code)

        assert request_store.rows[0].status == _COMPLETED
        assert directory.deleted == []


class TestConcurrentConfirm:
    """Two confirmations of the same code racing each other."""

    @pytest.mark.asyncio
    async def test_both_succeed_and_one_principal_is_deleted(
        self, request_store, notifiers, email_notifier, clock
    ):
        directory = MockIdentityDirectory([TEST_EMAIL], delay_seconds=0.05)
        service = AccountDeletionService(
            requests=request_store,
            directory=directory,
            notifiers=notifiers,
            clock=clock,
        )
        await service.initiate(TEST_EMAIL)
        code = email_notifier.last_code

        first, second = await asyncio.gather(
            service.confirm(TEST_EMAIL, code),
            service.confirm(TEST_EMAIL, code),
        )

        assert first.message == second.message
        assert len(directory.deleted) == 1
        assert request_store.rows[0].status == _COMPLETED
