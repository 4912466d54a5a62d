"""
Application configuration classes.

Each class represents a deployment environment. The factory function
``create_app`` in ``logistics/__init__.py`` selects the appropriate
config based on the FLASK_ENV environment variable.

Everything that differs between deployments (database URL, session
secret, SMTP credentials, public base URL) is read from environment
variables so it never appears in source control.
"""

import logging
import os

# Module-level logger for startup warnings emitted by config classes.
_logger = logging.getLogger(__name__)

# =========================================================================
# Sentinel for detecting unset SECRET_KEY in production.
# =========================================================================
_DEFAULT_SECRET_KEY = "dev-secret-change-me"


def _env_flag(name: str, default: str) -> bool:
    """Read a true/false environment variable."""
    return os.environ.get(name, default).lower() == "true"


class BaseConfig:
    """
    Shared configuration values inherited by all environments.
    """

    # -- Flask core --------------------------------------------------------
    SECRET_KEY: str = os.environ.get("SECRET_KEY", _DEFAULT_SECRET_KEY)

    # -- Session cookie ----------------------------------------------------
    SESSION_COOKIE_NAME: str = "logistics_sessions"
    SESSION_COOKIE_HTTPONLY: bool = True
    SESSION_COOKIE_SAMESITE: str = "Lax"
    SESSION_COOKIE_SECURE: bool = False

    # Sessions last one day.
    PERMANENT_SESSION_LIFETIME: int = int(
        os.environ.get("PERMANENT_SESSION_LIFETIME", "86400")
    )

    # -- Uploads -----------------------------------------------------------
    # Parcel and profile photos are buffered in memory and stored in the
    # database, so keep them small.
    MAX_CONTENT_LENGTH: int = 5 * 1024 * 1024

    # -- SQLAlchemy --------------------------------------------------------
    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "DATABASE_URL", "sqlite:///logistics.db"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS: bool = False
    SQLALCHEMY_ECHO: bool = False
    SQLALCHEMY_ENGINE_OPTIONS: dict = {"pool_pre_ping": True}

    # -- Password hashing --------------------------------------------------
    BCRYPT_LOG_ROUNDS: int = int(os.environ.get("BCRYPT_LOG_ROUNDS", "12"))

    # -- Email -------------------------------------------------------------
    MAIL_SERVER: str = os.environ.get("MAIL_SERVER", "smtp.gmail.com")
    MAIL_PORT: int = int(os.environ.get("MAIL_PORT", "465"))
    MAIL_USE_TLS: bool = _env_flag("MAIL_USE_TLS", "false")
    MAIL_USE_SSL: bool = _env_flag("MAIL_USE_SSL", "true")
    MAIL_USERNAME: str = os.environ.get("MAIL_USERNAME", "")
    MAIL_PASSWORD: str = os.environ.get("MAIL_PASSWORD", "")
    MAIL_DEFAULT_SENDER: tuple[str, str] = (
        os.environ.get("MAIL_SENDER_NAME", "ABC Logistics Company"),
        os.environ.get("MAIL_DEFAULT_SENDER", "noreply@abclogistics.example"),
    )
    # Optional address copied on every outgoing notification.
    MAIL_BCC: str = os.environ.get("MAIL_BCC", "")

    # Send notifications on a background thread so a slow SMTP server
    # never holds up the response.
    MAIL_ASYNC: bool = _env_flag("MAIL_ASYNC", "true")

    # -- Public URLs -------------------------------------------------------
    # Used to build the tracking link in customer emails.
    BASE_URL: str = os.environ.get("BASE_URL", "http://localhost:8080")

    # -- Accounts ----------------------------------------------------------
    COMPANY_NAME: str = os.environ.get("COMPANY_NAME", "ABC Logistics Company")
    WORKER_CODE_PREFIX: str = os.environ.get("WORKER_CODE_PREFIX", "ABC-")

    # Name of the access policy in ``logistics.decorators.POLICIES``.
    ACCESS_POLICY: str = os.environ.get("ACCESS_POLICY", "standard")

    # -- Logging -----------------------------------------------------------
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "INFO")

    # =====================================================================
    # Production validation helpers
    # =====================================================================

    @classmethod
    def validate_production_secrets(cls, app_config: dict) -> None:
        """
        Verify that all required secrets are set for production.

        Called by ``create_app()`` when ``config_name == 'production'``.
        Raises ``RuntimeError`` for hard requirements and logs warnings
        for soft requirements.

        Args:
            app_config: The ``app.config`` dict after loading the
                        config class.

        Raises:
            RuntimeError: If any critical secret is missing or still
                          set to its insecure default value.
        """
        errors: list[str] = []

        if app_config.get("SECRET_KEY") == _DEFAULT_SECRET_KEY:
            errors.append(
                "SECRET_KEY is still the insecure default. "
                "Generate one with: python -c "
                '"import secrets; print(secrets.token_hex(32))"'
            )

        if not os.environ.get("DATABASE_URL"):
            errors.append("DATABASE_URL must be set in production.")

        if errors:
            combined = "\n  - ".join(errors)
            raise RuntimeError(f"Production configuration errors:\n  - {combined}")

        # Mail credentials are soft requirements: parcels can still be
        # registered, customers just won't get emails.
        if not app_config.get("MAIL_USERNAME") or not app_config.get("MAIL_PASSWORD"):
            _logger.warning(
                "MAIL_USERNAME / MAIL_PASSWORD are not set; "
                "parcel notifications will fail to send."
            )

        if "localhost" in app_config.get("BASE_URL", ""):
            _logger.warning(
                "BASE_URL (%s) points at localhost; tracking links in "
                "customer emails will not work.",
                app_config.get("BASE_URL"),
            )


class DevelopmentConfig(BaseConfig):
    """Development environment: verbose logging, local SQLite database."""

    DEBUG: bool = True
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "DEBUG")


class TestingConfig(BaseConfig):
    """
    Testing environment: in-memory database, no real email.

    WTF_CSRF_ENABLED is disabled so form submissions in tests don't
    need CSRF tokens. Mail is sent inline and suppressed so tests can
    inspect the outbox.
    """

    TESTING: bool = True
    WTF_CSRF_ENABLED: bool = False

    SQLALCHEMY_DATABASE_URI: str = os.environ.get(
        "TEST_DATABASE_URL", "sqlite:///:memory:"
    )
    SQLALCHEMY_ENGINE_OPTIONS: dict = {}

    # Minimum bcrypt cost keeps the suite fast.
    BCRYPT_LOG_ROUNDS: int = 4

    MAIL_SUPPRESS_SEND: bool = True
    MAIL_ASYNC: bool = False
    MAIL_BCC: str = ""
    BASE_URL: str = "http://testserver"

    LOG_LEVEL: str = "DEBUG"


class ProductionConfig(BaseConfig):
    """
    Production environment: strict settings, no debug output.

    All secrets must be set via environment variables. The application
    factory calls ``validate_production_secrets()`` at startup and will
    refuse to launch if critical values are missing.
    """

    DEBUG: bool = False
    LOG_LEVEL: str = os.environ.get("LOG_LEVEL", "WARNING")

    # Session cookie is only sent over HTTPS.
    SESSION_COOKIE_SECURE: bool = True

    SQLALCHEMY_ENGINE_OPTIONS: dict = {
        "pool_size": 5,
        "max_overflow": 10,
        "pool_recycle": 3600,
        "pool_pre_ping": True,
    }


# Lookup dict used by the application factory.
config_by_name: dict[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}
