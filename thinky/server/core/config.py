"""
Configuration Settings.

This module defines the application configuration using Pydantic's BaseSettings.
It automatically loads all configuration from environment variables and .env file
without explicit dotenv loading.
"""

from typing import List, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# =====================================================================
# Grouped Configuration Models
# =====================================================================


class SMTPConfig(BaseModel):
    """Outgoing mail server configuration."""

    host: Optional[str] = Field(default=None, alias="SMTP_HOST", description="SMTP server host name")
    port: int = Field(default=587, alias="SMTP_PORT", description="SMTP server port")
    user: Optional[str] = Field(default=None, alias="SMTP_USER", description="SMTP login user")
    password: Optional[str] = Field(default=None, alias="SMTP_PASS", description="SMTP login password")
    secure: bool = Field(
        default=False, alias="SMTP_SECURE", description="Use implicit TLS (SMTPS) instead of STARTTLS"
    )
    sender: Optional[str] = Field(default=None, alias="SMTP_FROM", description="From address for outgoing mail")
    domain: Optional[str] = Field(default=None, alias="DOMAIN", description="Public domain used for the default sender")

    model_config = {"populate_by_name": True}

    @property
    def configured(self) -> bool:
        return bool(self.host and self.user and self.password)

    @property
    def from_address(self) -> str:
        return self.sender or f"no-reply@{self.domain or 'localhost'}"


class SessionConfig(BaseModel):
    """Signed cookie session configuration."""

    secret: Optional[str] = Field(default=None, alias="SESSION_SECRET", description="Secret used to sign sessions")
    max_age: int = Field(default=24 * 60 * 60, alias="SESSION_MAX_AGE", description="Session lifetime in seconds")
    cookie_name: str = Field(default="thinky.sid", alias="SESSION_COOKIE_NAME", description="Session cookie name")
    single_session_per_user: bool = Field(
        default=False,
        alias="SINGLE_SESSION_PER_USER",
        description="Invalidate older sessions of a user on each new login",
    )

    model_config = {"populate_by_name": True}


class RateLimitConfig(BaseModel):
    """Request throttling and login lockout configuration."""

    enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED", description="Enable request rate limiting")
    api_limit: int = Field(default=100, alias="API_RATE_LIMIT", description="Max API requests per window per client")
    auth_limit: int = Field(
        default=5, alias="AUTH_RATE_LIMIT", description="Max authentication requests per window per client"
    )
    window_seconds: int = Field(
        default=15 * 60, alias="RATE_LIMIT_WINDOW_SECONDS", description="Rate limiting window length"
    )
    max_login_attempts: int = Field(
        default=5, alias="PER_USER_MAX_ATTEMPTS", description="Failed logins before an identifier is locked"
    )
    lock_seconds: int = Field(
        default=15 * 60, alias="PER_USER_LOCK_SECONDS", description="Lock duration after too many failed logins"
    )

    model_config = {"populate_by_name": True}


class StorageConfig(BaseModel):
    """Avatar storage configuration."""

    supabase_url: Optional[str] = Field(
        default=None, alias="SUPABASE_URL", description="Hosted storage base URL (enables the hosted backend)"
    )
    service_role_key: Optional[str] = Field(
        default=None, alias="SUPABASE_SERVICE_ROLE_KEY", description="Service key for the hosted storage API"
    )
    avatar_bucket: str = Field(default="avatars", alias="SUPABASE_AVATAR_BUCKET", description="Avatar bucket name")
    upload_dir: str = Field(
        default="uploads/avatars", alias="AVATAR_UPLOAD_DIR", description="Local directory for avatars"
    )
    max_bytes: int = Field(default=2 * 1024 * 1024, alias="AVATAR_MAX_BYTES", description="Max avatar size")

    model_config = {"populate_by_name": True}

    @property
    def use_hosted(self) -> bool:
        return bool(self.supabase_url and self.service_role_key)


class CORSConfig(BaseModel):
    """CORS configuration."""

    origins: List[str] = Field(
        default=["http://localhost:3000"], alias="CORS_ORIGINS", description="Allowed CORS origins"
    )
    allow_credentials: bool = Field(
        default=True, alias="CORS_ALLOW_CREDENTIALS", description="Allow credentials in CORS requests"
    )

    model_config = {"populate_by_name": True}


# =====================================================================
# Main Settings Class
# =====================================================================


class Settings(BaseSettings):
    """
    Application settings model.

    All properties are automatically bound from environment variables and .env file.
    Pydantic's BaseSettings handles dotenv loading automatically via model_config.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
        populate_by_name=True,
    )

    # =====================================================================
    # Thinky Server Configuration
    # =====================================================================
    server_host: str = Field(
        default="0.0.0.0",
        description="Thinky server host address to bind to",
        alias="THINKY_SERVER_HOST",
    )
    server_port: int = Field(
        default=3000,
        description="Thinky server port number",
        alias="THINKY_SERVER_PORT",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        alias="THINKY_LOG_LEVEL",
    )
    log_format: str = Field(default="detailed", description="Log format (simple, detailed, json)", alias="LOG_FORMAT")
    log_file_dir: str = Field(default="logs", description="Directory for the log file", alias="LOG_FILE_DIR")
    enable_file_logging: bool = Field(
        default=False, description="Also write logs to a file", alias="ENABLE_FILE_LOGGING"
    )
    environment: str = Field(
        default="development",
        description="Deployment environment (development or production)",
        alias="ENVIRONMENT",
    )
    production_url: Optional[str] = Field(
        default=None, description="Public origin of the production deployment", alias="PRODUCTION_URL"
    )
    base_url: Optional[str] = Field(
        default=None, description="Base URL used to build links in e-mails", alias="BASE_URL"
    )
    support_email: str = Field(
        default="support@thinky.example", description="Contact address shown in e-mails", alias="SUPPORT_EMAIL"
    )

    # =====================================================================
    # Database Configuration
    # =====================================================================
    database_url: Optional[str] = Field(
        default=None,
        description="Async PostgreSQL connection URL for the application database",
        alias="DATABASE_URL",
    )

    # =====================================================================
    # Flat fields backing the grouped configurations
    # =====================================================================
    session_secret: Optional[str] = Field(default=None, alias="SESSION_SECRET")
    session_max_age: int = Field(default=24 * 60 * 60, alias="SESSION_MAX_AGE")
    session_cookie_name: str = Field(default="thinky.sid", alias="SESSION_COOKIE_NAME")
    single_session_per_user: bool = Field(default=False, alias="SINGLE_SESSION_PER_USER")

    smtp_host: Optional[str] = Field(default=None, alias="SMTP_HOST")
    smtp_port: int = Field(default=587, alias="SMTP_PORT")
    smtp_user: Optional[str] = Field(default=None, alias="SMTP_USER")
    smtp_pass: Optional[str] = Field(default=None, alias="SMTP_PASS")
    smtp_secure: bool = Field(default=False, alias="SMTP_SECURE")
    smtp_from: Optional[str] = Field(default=None, alias="SMTP_FROM")
    domain: Optional[str] = Field(default=None, alias="DOMAIN")

    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    api_rate_limit: int = Field(default=100, alias="API_RATE_LIMIT")
    auth_rate_limit: int = Field(default=5, alias="AUTH_RATE_LIMIT")
    rate_limit_window_seconds: int = Field(default=15 * 60, alias="RATE_LIMIT_WINDOW_SECONDS")
    per_user_max_attempts: int = Field(default=5, alias="PER_USER_MAX_ATTEMPTS")
    per_user_lock_seconds: int = Field(default=15 * 60, alias="PER_USER_LOCK_SECONDS")

    supabase_url: Optional[str] = Field(default=None, alias="SUPABASE_URL")
    supabase_service_role_key: Optional[str] = Field(default=None, alias="SUPABASE_SERVICE_ROLE_KEY")
    supabase_avatar_bucket: str = Field(default="avatars", alias="SUPABASE_AVATAR_BUCKET")
    avatar_upload_dir: str = Field(default="uploads/avatars", alias="AVATAR_UPLOAD_DIR")
    avatar_max_bytes: int = Field(default=2 * 1024 * 1024, alias="AVATAR_MAX_BYTES")

    cors_origins: List[str] = Field(default=["http://localhost:3000"], alias="CORS_ORIGINS")
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")

    # =====================================================================
    # Computed Properties (Grouped Configurations)
    # =====================================================================

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"

    @property
    def missing_critical(self) -> List[str]:
        """Names of critical environment variables that are not set."""
        missing = []
        if not self.database_url:
            missing.append("DATABASE_URL")
        if not self.session_secret:
            missing.append("SESSION_SECRET")
        return missing

    @property
    def smtp(self) -> SMTPConfig:
        """Get SMTP configuration from environment variables."""
        return SMTPConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def session(self) -> SessionConfig:
        """Get session cookie configuration from environment variables."""
        return SessionConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def rate_limit(self) -> RateLimitConfig:
        """Get rate limiting configuration from environment variables."""
        return RateLimitConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def storage(self) -> StorageConfig:
        """Get avatar storage configuration from environment variables."""
        return StorageConfig.model_validate(self.model_dump(by_alias=True))

    @property
    def cors(self) -> CORSConfig:
        """Get CORS configuration from environment variables."""
        return CORSConfig.model_validate(self.model_dump(by_alias=True))


settings = Settings()
