"""
Application factory for the logistics parcel tracker.

Usage::

    from logistics import create_app
    app = create_app()           # Uses FLASK_ENV to pick config.
    app = create_app("testing")  # Explicit config for tests.
"""

import logging
import os

from flask import Flask, render_template

from .config import config_by_name
from .extensions import bcrypt, csrf, db, login_manager, mail, migrate


def create_app(config_name: str | None = None) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config_name: One of 'development', 'testing', or 'production'.
                     Defaults to the FLASK_ENV environment variable,
                     falling back to 'development'.

    Returns:
        A fully configured Flask application instance.
    """
    # Resolve the configuration class.
    if config_name is None:
        config_name = os.environ.get("FLASK_ENV", "development")
    config_class = config_by_name.get(config_name)
    if config_class is None:
        raise ValueError(
            f"Unknown config '{config_name}'. "
            f"Valid options: {list(config_by_name.keys())}"
        )

    app = Flask(__name__)
    app.config.from_object(config_class)

    # Refuse to start production with missing secrets.
    if config_name == "production":
        config_class.validate_production_secrets(app.config)

    # -- Initialize extensions ---------------------------------------------
    _register_extensions(app)

    # -- Register blueprints -----------------------------------------------
    _register_blueprints(app)

    # -- Register error handlers -------------------------------------------
    _register_error_handlers(app)

    # -- Template helpers --------------------------------------------------
    _register_template_context(app)

    # -- Register custom CLI commands --------------------------------------
    _register_cli_commands(app)

    # -- Configure logging -------------------------------------------------
    _configure_logging(app)

    return app


def _register_extensions(app: Flask) -> None:
    """Bind all Flask extensions to the application instance."""
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    csrf.init_app(app)
    bcrypt.init_app(app)
    mail.init_app(app)

    # Imported here to avoid circular imports with models.
    from .services import account_service  # pylint: disable=import-outside-toplevel

    @login_manager.user_loader
    def load_user(principal_id: str):
        """Load a worker or admin from the ``"<role>:<id>"`` session id."""
        return account_service.load_principal(principal_id)


def _register_blueprints(app: Flask) -> None:
    """
    Import and register each blueprint.

    The public paths (``/track``, ``/signin``, ``/clerks`` ...) are
    all top-level, so no blueprint uses a URL prefix.
    """
    # pylint: disable=import-outside-toplevel

    # Main: landing pages and health check.
    from .blueprints.main import bp as main_bp

    app.register_blueprint(main_bp)

    # Parcels: intake and tracking.
    from .blueprints.parcels import bp as parcels_bp

    app.register_blueprint(parcels_bp)

    # Auth: registration and sessions.
    from .blueprints.auth import bp as auth_bp

    app.register_blueprint(auth_bp)

    # Admin: staff accounts.
    from .blueprints.admin import bp as admin_bp

    app.register_blueprint(admin_bp)


def _register_error_handlers(app: Flask) -> None:
    """Register custom error pages for common HTTP error codes."""

    @app.errorhandler(403)
    def forbidden(error):  # pylint: disable=unused-argument
        """Handle 403 Forbidden errors."""
        return render_template("errors/403.html", title="FORBIDDEN"), 403

    @app.errorhandler(404)
    def not_found(error):  # pylint: disable=unused-argument
        """Handle 404 Not Found errors (including unmatched routes)."""
        return render_template("errors/404.html", title="ERROR"), 404

    @app.errorhandler(413)
    def too_large(error):  # pylint: disable=unused-argument
        """Handle uploads over MAX_CONTENT_LENGTH."""
        return render_template("errors/413.html", title="UPLOAD TOO LARGE"), 413

    @app.errorhandler(500)
    def internal_error(error):  # pylint: disable=unused-argument
        """Handle 500 Internal Server Error."""
        db.session.rollback()
        return render_template("errors/500.html", title="ERROR"), 500


def _register_template_context(app: Flask) -> None:
    """Expose the access policy and status colours to every template."""
    from .decorators import can  # pylint: disable=import-outside-toplevel

    @app.context_processor
    def inject_helpers():
        return {
            "can": can,
            "status_colors": {
                "PENDING": "red",
                "TRANSIT": "orange",
                "ARRIVED": "yellowgreen",
                "DELIVERED": "green",
            },
            "company_name": app.config["COMPANY_NAME"],
        }


def _register_cli_commands(app: Flask) -> None:
    """Register custom Flask CLI commands (e.g., flask db-check)."""
    from .cli import register_commands  # pylint: disable=import-outside-toplevel

    register_commands(app)


def _configure_logging(app: Flask) -> None:
    """
    Set up application logging.

    Services log through module-level loggers; this sets the root
    level from ``LOG_LEVEL``.
    """
    log_level = app.config.get("LOG_LEVEL", "INFO")
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Quiet down noisy libraries in development.
    if app.debug:
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
