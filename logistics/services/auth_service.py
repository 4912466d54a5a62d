"""
Auth service: session principal handling.

Wraps Flask-Login so routes can sign an account in or out with one
call. Besides Flask-Login's own keys, the session carries the
principal's id, role and email for templates and logging.
"""

import logging

from flask import session
from flask_login import login_user, logout_user

from logistics.services import account_service

logger = logging.getLogger(__name__)

SESSION_KEYS = ("user_id", "user_role", "user_email")


def sign_in(email: str, password: str):
    """
    Authenticate and establish the session principal.

    Returns:
        The signed-in Worker or Admin.

    Raises:
        account_service.AccountNotApprovedError
        account_service.InvalidCredentialsError
    """
    account = account_service.authenticate(email, password)

    # ``is_active`` mirrors ``approved``, so Flask-Login double-checks
    # the approval gate here.
    if not login_user(account):
        raise account_service.AccountNotApprovedError(
            "Your account has not been approved."
        )

    session.permanent = True
    session["user_id"] = account.id
    session["user_role"] = account.principal_role
    session["user_email"] = account.email
    return account


def clear_session() -> None:
    """Remove application-specific keys from the Flask session on logout."""
    for key in SESSION_KEYS:
        session.pop(key, None)


def sign_out() -> None:
    """End the current session."""
    email = session.get("user_email")
    clear_session()
    logout_user()
    logger.info("Signed out %s", email or "anonymous session")
