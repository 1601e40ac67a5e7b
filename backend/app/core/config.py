"""Application configuration loaded from environment variables.

Settings for database, API, OTP issuance, notification channels and rate
limiting. Uses pydantic-settings for validation and .env file support.
"""

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Known insecure default password that must not be used in production
# Security: Runtime check in check_production_security() prevents use in production
_INSECURE_DEFAULT_PASSWORD = "storefront_dev_password"  # nosec B105


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_host: str = "localhost"
    database_port: int = 5432
    database_name: str = "storefront"
    database_user: str = "storefront_user"
    database_password: str = _INSECURE_DEFAULT_PASSWORD

    # API
    # 0.0.0.0 binds to all network interfaces (required for Docker containers)
    api_host: str = "0.0.0.0"  # nosec B104
    api_port: int = 8000

    # CORS (Security)
    # The deletion wizard is served from the storefront web app and the
    # mobile client; neither sends cookies, but wildcards are still refused.
    allowed_origins: list[str] = ["http://localhost:8081"]

    # Application
    environment: str = "development"
    log_level: str = "INFO"

    # One-time codes
    otp_ttl_minutes: int = 10
    otp_pepper: SecretStr = SecretStr("")
    default_country_code: str = "91"

    # Email channel (Resend)
    email_from: str = "Storefront <noreply@mail.storefront.example>"
    email_subject: str = "Account Deletion OTP"
    resend_api_key: SecretStr = SecretStr("")

    # Chat channel (WhatsApp Cloud API)
    whatsapp_token: SecretStr = SecretStr("")
    whatsapp_phone_id: str = ""
    whatsapp_template_name: str = ""
    whatsapp_template_lang: str = "en_US"
    whatsapp_api_version: str = "v18.0"

    notifier_timeout_seconds: float = 10.0

    # Rate Limiting (Security)
    # Format: "count/period" (e.g., "10/minute", "100/hour")
    rate_limit_send_otp: str = "5/hour"
    rate_limit_verify_otp: str = "10/minute"
    rate_limit_enabled: bool = True  # Disable for testing

    @property
    def database_url(self) -> str:
        """Async database URL for SQLAlchemy."""
        return (
            f"postgresql+asyncpg://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @property
    def database_url_sync(self) -> str:
        """Sync database URL for Alembic."""
        return (
            f"postgresql://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @model_validator(mode="after")
    def check_production_security(self) -> "Settings":
        """Validate configuration invariants.

        Checks:
        - OTP TTL must be positive (all environments)
        - Default country code must be digits only (all environments)
        - CORS must not use wildcard origin (all environments)
        - Database password must not be the default in production
        - OTP pepper must be set in production
        """
        if self.otp_ttl_minutes <= 0:
            msg = f"OTP_TTL_MINUTES must be positive. Got: {self.otp_ttl_minutes}"
            raise ValueError(msg)

        if not self.default_country_code.isdigit():
            msg = (
                "DEFAULT_COUNTRY_CODE must contain digits only. "
                f"Got: {self.default_country_code!r}"
            )
            raise ValueError(msg)

        if "*" in self.allowed_origins:
            msg = "ALLOWED_ORIGINS must not contain '*' (wildcard)."
            raise ValueError(msg)

        if self.environment == "production":
            if self.database_password == _INSECURE_DEFAULT_PASSWORD:
                msg = (
                    "Cannot use default database password in production. "
                    "Set DATABASE_PASSWORD environment variable to a secure value."
                )
                raise ValueError(msg)

            if not self.otp_pepper.get_secret_value():
                msg = (
                    "OTP_PEPPER must be set in production. "
                    'Generate with: python -c "import secrets; '
                    'print(secrets.token_hex(32))"'
                )
                raise ValueError(msg)

        return self


settings = Settings()
