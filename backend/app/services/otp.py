"""One-time code generation and hashing.

Codes are 6 digits, drawn uniformly from [100000, 999999] with a CSPRNG.
Only the digest is ever stored. When an OTP pepper is configured the digest
is an HMAC keyed with it, so a leaked table cannot be brute-forced over the
900,000-code space offline.
"""

import hashlib
import hmac
import secrets
from datetime import datetime, timedelta

from app.core.config import settings

OTP_MIN = 100_000
OTP_MAX = 999_999
OTP_LENGTH = 6


def generate_otp() -> str:
    """Generate a uniformly random 6-digit code.

    Returns:
        Code as a string, never with a leading zero.
    """
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


def hash_otp(code: str, pepper: str | None = None) -> str:
    """Compute the one-way digest stored for a code.

    Args:
        code: Plaintext code (surrounding whitespace is ignored).
        pepper: HMAC key. Defaults to ``settings.otp_pepper``; empty means
            plain SHA-256.

    Returns:
        64-char lowercase hex digest.
    """
    key = settings.otp_pepper.get_secret_value() if pepper is None else pepper
    data = code.strip().encode("utf-8")
    if key:
        return hmac.new(key.encode("utf-8"), data, hashlib.sha256).hexdigest()
    return hashlib.sha256(data).hexdigest()


def verify_otp(code: str, stored_hash: str, pepper: str | None = None) -> bool:
    """Check a submitted code against a stored digest in constant time."""
    return hmac.compare_digest(hash_otp(code, pepper), stored_hash)


def otp_expiry(now: datetime, ttl_minutes: int | None = None) -> datetime:
    """Return the expiry timestamp for a code issued at ``now``."""
    minutes = settings.otp_ttl_minutes if ttl_minutes is None else ttl_minutes
    return now + timedelta(minutes=minutes)
