"""
Account service: worker and admin registration, sign-in checks,
approval, password resets and removal.

Passwords are hashed with bcrypt (random salt per hash) before they
touch the database. Email addresses must be unique across workers and
admins; registration is refused otherwise.
"""

import logging

from flask import current_app
from sqlalchemy.exc import IntegrityError

from logistics.extensions import bcrypt, db
from logistics.models.account import (
    ACCOUNT_MODELS,
    ADMIN_ROLE,
    WORKER_ROLE,
    Admin,
    Worker,
)
from logistics.models.parcel import new_record_id
from logistics.services import notification_service

logger = logging.getLogger(__name__)

DISPLAY_ID_LENGTH = 6


class AccountNotFoundError(LookupError):
    """Raised when no account matches the requested id."""


class DuplicateEmailError(ValueError):
    """Raised when registering an email that already has an account."""


class InvalidCredentialsError(ValueError):
    """Raised for an unknown email or a wrong password."""


class AccountNotApprovedError(ValueError):
    """Raised when a worker signs in before an admin approved them."""


# -- Password helpers ------------------------------------------------------


def hash_password(password: str) -> str:
    """Return a salted bcrypt hash of ``password``."""
    if not password:
        raise ValueError("Password is required.")
    return bcrypt.generate_password_hash(password).decode("utf-8")


def verify_password(password_hash: str, password: str) -> bool:
    """Check a plaintext password against a stored hash."""
    if not password_hash or not password:
        return False
    return bcrypt.check_password_hash(password_hash, password)


# -- Lookup ----------------------------------------------------------------


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def get_worker_by_email(email: str) -> Worker | None:
    """Return a worker by email address (case-insensitive)."""
    return Worker.query.filter(
        db.func.lower(Worker.email) == _normalize_email(email)
    ).first()


def get_admin_by_email(email: str) -> Admin | None:
    """Return an admin by email address (case-insensitive)."""
    return Admin.query.filter(
        db.func.lower(Admin.email) == _normalize_email(email)
    ).first()


def email_in_use(email: str) -> bool:
    """True if a worker or an admin already uses this email."""
    return (
        get_worker_by_email(email) is not None
        or get_admin_by_email(email) is not None
    )


def get_account(role: str, account_id: str):
    """
    Return a worker or admin by principal role and id, or None.

    Unknown roles return None rather than raising, so the user loader
    can treat a tampered session cookie as "not signed in".
    """
    model = ACCOUNT_MODELS.get(role)
    if model is None:
        return None
    return db.session.get(model, account_id)


def get_account_or_raise(role: str, account_id: str):
    account = get_account(role, account_id)
    if account is None:
        raise AccountNotFoundError(f"No {role} account with id {account_id}.")
    return account


def load_principal(principal_id: str):
    """Flask-Login user loader: ``"<role>:<id>"`` -> account or None."""
    role, _, account_id = (principal_id or "").partition(":")
    if not account_id:
        return None
    return get_account(role, account_id)


def get_all_workers() -> list[Worker]:
    """All workers, newest first."""
    return Worker.query.order_by(Worker.created_at.desc()).all()


def get_all_admins() -> list[Admin]:
    """All admins, newest first."""
    return Admin.query.order_by(Admin.created_at.desc()).all()


def admin_exists() -> bool:
    return db.session.query(Admin.id).first() is not None


# -- Registration ----------------------------------------------------------


def _check_email_available(email: str) -> None:
    if email_in_use(email):
        raise DuplicateEmailError(f"An account with email {email} already exists.")


def _commit_new_account(account) -> None:
    """
    Insert a new account.

    The per-table unique index on ``lower(email)`` catches a concurrent
    registration that slipped past ``_check_email_available``; that
    conflict is reported as a duplicate email.
    """
    email = account.email
    db.session.add(account)
    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        model = type(account)
        clash = model.query.filter(
            db.func.lower(model.email) == _normalize_email(email)
        ).first()
        if clash is not None:
            logger.info("Concurrent registration for %s rejected", email)
            raise DuplicateEmailError(
                f"An account with email {email} already exists."
            ) from exc
        raise
    except Exception:
        db.session.rollback()
        raise


def register_worker(
    first_name: str,
    second_name: str,
    email: str,
    phone_no: str,
    branch: str,
    password: str,
    image_data: bytes | None = None,
    image_content_type: str | None = None,
) -> Worker:
    """
    Create an unapproved worker account and send the welcome email.

    The worker's display code is ``WORKER_CODE_PREFIX`` followed by
    the first six characters of the record id.

    Raises:
        DuplicateEmailError: If the email is already registered.
        ValueError:          If the password is empty.
    """
    email = email.strip()
    _check_email_available(email)

    record_id = new_record_id()
    prefix = current_app.config.get("WORKER_CODE_PREFIX", "ABC-")
    worker = Worker(
        id=record_id,
        worker_code=f"{prefix}{record_id[:DISPLAY_ID_LENGTH]}",
        first_name=first_name,
        second_name=second_name,
        email=email,
        phone_no=phone_no,
        branch=branch,
        password_hash=hash_password(password),
        role="STAFF",
        approved=False,
        image_data=image_data if image_content_type else None,
        image_content_type=image_content_type if image_data else None,
    )
    _commit_new_account(worker)

    logger.info("Registered worker %s (%s), awaiting approval", worker.worker_code, email)
    notification_service.notify_account_created(worker)
    return worker


def register_admin(
    first_name: str,
    second_name: str,
    email: str,
    password: str,
    phone_no: str | None = None,
    branch: str | None = None,
    image_data: bytes | None = None,
    image_content_type: str | None = None,
) -> Admin:
    """
    Create an approved admin account and send the welcome email.

    Raises:
        DuplicateEmailError: If the email is already registered.
        ValueError:          If the password is empty.
    """
    email = email.strip()
    _check_email_available(email)

    record_id = new_record_id()
    admin = Admin(
        id=record_id,
        admin_code=record_id[:DISPLAY_ID_LENGTH],
        first_name=first_name,
        second_name=second_name,
        email=email,
        phone_no=phone_no or None,
        branch=branch or None,
        password_hash=hash_password(password),
        role="ADMIN",
        approved=True,
        image_data=image_data if image_content_type else None,
        image_content_type=image_content_type if image_data else None,
    )
    _commit_new_account(admin)

    logger.info("Registered admin %s (%s)", admin.admin_code, email)
    notification_service.notify_account_created(admin)
    return admin


# -- Authentication --------------------------------------------------------


def authenticate(email: str, password: str):
    """
    Check sign-in credentials.

    Workers are checked first, then admins. An unapproved worker is
    refused before the password is even compared.

    Returns:
        The matching Worker or Admin.

    Raises:
        AccountNotApprovedError: If the worker has not been approved.
        InvalidCredentialsError: If the email is unknown or the
                                 password is wrong.
    """
    worker = get_worker_by_email(email)
    if worker is not None:
        if not worker.approved:
            logger.info("Sign-in refused for unapproved worker %s", worker.email)
            raise AccountNotApprovedError("Your account has not been approved.")
        if verify_password(worker.password_hash, password):
            logger.info("Worker %s signed in", worker.email)
            return worker
        logger.info("Bad password for worker %s", worker.email)
        raise InvalidCredentialsError("Email or password incorrect.")

    admin = get_admin_by_email(email)
    if admin is not None and verify_password(admin.password_hash, password):
        logger.info("Admin %s signed in", admin.email)
        return admin

    logger.info("Failed sign-in for %s", _normalize_email(email))
    raise InvalidCredentialsError("Email or password incorrect.")


# -- Admin actions ---------------------------------------------------------


def approve_worker(worker_id: str, approved_by: str | None = None) -> Worker:
    """Allow a worker to sign in."""
    worker = get_account_or_raise(WORKER_ROLE, worker_id)
    worker.approved = True
    db.session.commit()

    logger.info("Worker %s approved by %s", worker.worker_code, approved_by)
    return worker


def delete_worker(worker_id: str, deleted_by: str | None = None) -> bool:
    """Remove a worker account. Returns False if it did not exist."""
    worker = get_account(WORKER_ROLE, worker_id)
    if worker is None:
        logger.info("Delete requested for missing worker %s", worker_id)
        return False

    worker_code = worker.worker_code
    db.session.delete(worker)
    db.session.commit()

    logger.info("Worker %s deleted by %s", worker_code, deleted_by)
    return True


def delete_admin(admin_id: str, deleted_by: str | None = None) -> bool:
    """
    Remove an admin account. Returns False if it did not exist.

    Raises:
        ValueError: If an admin tries to delete their own account.
    """
    if deleted_by is not None and admin_id == deleted_by:
        raise ValueError("You cannot delete your own account.")

    admin = get_account(ADMIN_ROLE, admin_id)
    if admin is None:
        logger.info("Delete requested for missing admin %s", admin_id)
        return False

    admin_code = admin.admin_code
    db.session.delete(admin)
    db.session.commit()

    logger.info("Admin %s deleted by %s", admin_code, deleted_by)
    return True


def reset_worker_password(email: str, new_password: str, reset_by: str | None = None) -> Worker:
    """
    Replace a worker's password.

    Raises:
        AccountNotFoundError: If no worker has this email.
        ValueError:           If the new password is empty.
    """
    worker = get_worker_by_email(email)
    if worker is None:
        raise AccountNotFoundError("Worker does not exist.")

    worker.password_hash = hash_password(new_password)
    db.session.commit()

    logger.info("Password reset for worker %s by %s", worker.worker_code, reset_by)
    return worker


def get_account_image(role: str, account_id: str) -> tuple[bytes, str]:
    """
    Return ``(image bytes, content type)`` for a profile photo.

    Raises:
        AccountNotFoundError: If the account or its image is missing.
    """
    account = get_account_or_raise(role, account_id)
    if not account.image_data or not account.image_content_type:
        raise AccountNotFoundError(f"No image for {role} {account_id}.")
    return account.image_data, account.image_content_type
