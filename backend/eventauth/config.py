"""Application configuration."""
from functools import lru_cache

from pydantic import BaseModel, field_validator, model_validator
from pydantic_settings import BaseSettings


class SessionPolicy(BaseModel):
    """Lifetimes and credential rules injected into the session manager."""

    access_token_ttl_ms: int = 15 * 60 * 1000
    refresh_token_ttl_ms: int = 7 * 24 * 60 * 60 * 1000
    password_min_length: int = 12
    bcrypt_rounds: int = 10
    token_bytes: int = 32

    class Config:
        frozen = True

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_bcrypt_rounds(cls, value: int) -> int:
        if not 4 <= value <= 31:
            raise ValueError("bcrypt_rounds must be between 4 and 31.")
        return value

    @field_validator("password_min_length", "token_bytes")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("value must be at least 1.")
        return value

    @model_validator(mode="after")
    def validate_windows(self) -> "SessionPolicy":
        """Fail closed unless the access window sits inside the refresh window."""
        if self.access_token_ttl_ms <= 0 or self.refresh_token_ttl_ms <= 0:
            raise ValueError("Token lifetimes must be positive.")
        if self.access_token_ttl_ms >= self.refresh_token_ttl_ms:
            raise ValueError("access_token_ttl_ms must be shorter than refresh_token_ttl_ms.")
        return self


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App
    app_name: str = "EventAuth"
    debug: bool = False
    log_level: str = "INFO"

    # Database
    database_url: str = "sqlite:///./data/eventauth.db"

    # Sessions
    access_token_ttl_ms: int = 15 * 60 * 1000
    refresh_token_ttl_ms: int = 7 * 24 * 60 * 60 * 1000
    password_min_length: int = 12
    bcrypt_rounds: int = 10
    hash_workers: int = 4
    token_bytes: int = 32

    # Cookies
    access_cookie_name: str = "eventauth_access"
    refresh_cookie_name: str = "eventauth_refresh"
    access_cookie_path: str = "/"
    cookie_path: str = "/api/auth"
    cookie_samesite: str = "lax"
    cookie_secure: bool = True

    # Lockout
    lockout_enabled: bool = True
    lockout_max_attempts: int = 5
    lockout_window_ms: int = 15 * 60 * 1000
    lockout_record_ttl_ms: int = 24 * 60 * 60 * 1000

    # Mail
    smtp_host: str | None = None
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    mail_from: str = "noreply@openevent.com"
    site_url: str = "http://localhost:5174"
    mail_workers: int = 2

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

    @field_validator("hash_workers", "mail_workers", "lockout_max_attempts")
    @classmethod
    def validate_pool_sizes(cls, value: int) -> int:
        if value < 1:
            raise ValueError("value must be at least 1.")
        return value

    @model_validator(mode="after")
    def validate_session_policy(self) -> "Settings":
        """Fail closed if the session lifetimes or hashing cost are unusable."""
        self.session_policy()
        return self

    def session_policy(self) -> SessionPolicy:
        """Build the injected session policy from these settings."""
        return SessionPolicy(
            access_token_ttl_ms=self.access_token_ttl_ms,
            refresh_token_ttl_ms=self.refresh_token_ttl_ms,
            password_min_length=self.password_min_length,
            bcrypt_rounds=self.bcrypt_rounds,
            token_bytes=self.token_bytes,
        )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
