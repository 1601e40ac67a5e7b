"""HTTP client for the account deletion endpoint."""

import httpx
import structlog

from app.schemas.account_deletion import SendOtpResponse, VerifyOtpResponse

logger = structlog.get_logger()

DELETE_ACCOUNT_PATH = "/api/v1/delete-account"

_GENERIC_ERROR = "Something went wrong. Please try again."
_NETWORK_ERROR = "Network error. Please check your connection and try again."


class DeletionApiError(Exception):
    """A deletion call failed.

    Attributes:
        status_code: HTTP status, or 0 if no response was received.
        code: Machine-readable error code from the envelope.
        message: User-facing message, safe to show inline.
    """

    def __init__(self, status_code: int, code: str, message: str) -> None:
        self.status_code = status_code
        self.code = code
        self.message = message
        super().__init__(message)


class DeletionApiClient:
    """Thin async wrapper over POST /api/v1/delete-account.

    Args:
        base_url: Server root, e.g. "https://api.storefront.example".
        client: Optional shared AsyncClient (tests pass one with a mock
            transport). When omitted a client is created per call.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        *,
        client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
    ) -> None:
        self.url = base_url.rstrip("/") + DELETE_ACCOUNT_PATH
        self._client = client
        self.timeout = timeout

    async def send_otp(
        self, identifier: str, reason: str | None = None
    ) -> SendOtpResponse:
        """Ask the server to issue and deliver a deletion code."""
        data = await self._call(
            {"action": "send-otp", "identifier": identifier, "reason": reason}
        )
        return SendOtpResponse.model_validate(data)

    async def verify_otp(self, identifier: str, otp: str) -> VerifyOtpResponse:
        """Submit a deletion code; on success the account is gone."""
        data = await self._call(
            {"action": "verify-otp", "identifier": identifier, "otp": otp}
        )
        return VerifyOtpResponse.model_validate(data)

    async def _call(self, payload: dict) -> dict:
        try:
            if self._client is not None:
                resp = await self._client.post(self.url, json=payload, timeout=self.timeout)
            else:
                async with httpx.AsyncClient() as client:
                    resp = await client.post(self.url, json=payload, timeout=self.timeout)
        except httpx.HTTPError as exc:
            logger.warning(
                "deletion_api_unreachable",
                action=payload["action"],
                error_type=type(exc).__name__,
            )
            raise DeletionApiError(0, "NETWORK_ERROR", _NETWORK_ERROR) from exc

        try:
            data = resp.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        if resp.is_error:
            raise DeletionApiError(
                resp.status_code,
                str(data.get("code") or "UNKNOWN"),
                str(data.get("error") or _GENERIC_ERROR),
            )
        return data
