"""
Routes for the auth blueprint: registration, sign-in, sign-out.

Workers register themselves through ``/signup`` and wait for an admin
to approve them. Admin registration is restricted by the access
policy, except while no admin exists yet so the first one can be
created from the browser.
"""

import logging

from flask import flash, redirect, render_template, request, url_for
from flask_login import current_user
from sqlalchemy.exc import SQLAlchemyError

from logistics.blueprints.auth import bp
from logistics.blueprints.auth.forms import (
    AdminRegistrationForm,
    PasswordResetForm,
    SignInForm,
    WorkerRegistrationForm,
)
from logistics.decorators import ADMIN, can, permission_required
from logistics.extensions import login_manager
from logistics.services import account_service, auth_service
from logistics.uploads import read_image

logger = logging.getLogger(__name__)


def _flash_form_errors(form) -> None:
    for field_name, errors in form.errors.items():
        for error in errors:
            flash(f"{getattr(form, field_name).label.text}: {error}", "danger")


def _landing_page_for(account) -> str:
    """Admins land on the dashboard, workers on the home page."""
    if account.principal_role == ADMIN:
        return url_for("parcels.dashboard")
    return url_for("main.index")


def _safe_next_url() -> str | None:
    next_url = request.args.get("next", "")
    if next_url.startswith("/") and not next_url.startswith("//"):
        return next_url
    return None


# =========================================================================
# Registration
# =========================================================================


@bp.route("/signup", methods=["GET", "POST"])
def signup():
    """Worker self-registration. New workers start unapproved."""
    form = WorkerRegistrationForm()

    if request.method == "GET":
        return render_template("auth/signup.html", title="SIGN UP", form=form, q="")

    if not form.validate_on_submit():
        _flash_form_errors(form)
        return redirect(url_for("auth.signup"))

    image_data, content_type = read_image(form.image.data)
    try:
        account_service.register_worker(
            first_name=form.first_name.data.strip(),
            second_name=form.second_name.data.strip(),
            email=form.email.data,
            phone_no=form.phone_no.data.strip(),
            branch=form.branch.data.strip(),
            password=form.password.data,
            image_data=image_data,
            image_content_type=content_type,
        )
    except account_service.DuplicateEmailError:
        flash("Worker already exists.", "info")
        return redirect(url_for("auth.signup"))
    except ValueError as exc:
        flash(str(exc), "danger")
        return redirect(url_for("auth.signup"))
    except SQLAlchemyError:
        logger.exception("Could not register worker %s", form.email.data)
        flash("Registration failed. Please try again.", "danger")
        return redirect(url_for("auth.signup"))

    flash(
        "Your account has been created. You can sign in once an "
        "administrator approves it.",
        "success",
    )
    return redirect(url_for("main.index"))


@bp.route("/adminReg", methods=["GET", "POST"])
def admin_register():
    """Register a management account."""
    bootstrap = not account_service.admin_exists()
    if not bootstrap and not can("account.register_admin"):
        if not current_user.is_authenticated:
            return login_manager.unauthorized()
        flash("You do not have permission to perform this action.", "danger")
        return redirect(url_for("main.index"))

    form = AdminRegistrationForm()

    if request.method == "GET":
        return render_template(
            "auth/admin_reg.html", title="ADMIN REG.", form=form, q=""
        )

    if not form.validate_on_submit():
        _flash_form_errors(form)
        return redirect(url_for("auth.admin_register"))

    image_data, content_type = read_image(form.image.data)
    try:
        account_service.register_admin(
            first_name=form.first_name.data.strip(),
            second_name=form.second_name.data.strip(),
            email=form.email.data,
            password=form.password.data,
            phone_no=(form.phone_no.data or "").strip(),
            branch=(form.branch.data or "").strip(),
            image_data=image_data,
            image_content_type=content_type,
        )
    except account_service.DuplicateEmailError:
        flash("Admin already exists.", "info")
        return redirect(url_for("auth.admin_register"))
    except ValueError as exc:
        flash(str(exc), "danger")
        return redirect(url_for("auth.admin_register"))
    except SQLAlchemyError:
        logger.exception("Could not register admin %s", form.email.data)
        flash("Registration failed. Please try again.", "danger")
        return redirect(url_for("auth.admin_register"))

    flash("Admin account created.", "success")
    if current_user.is_authenticated:
        return redirect(url_for("parcels.dashboard"))
    return redirect(url_for("auth.signin"))


# =========================================================================
# Session
# =========================================================================


@bp.route("/signin", methods=["GET", "POST"])
def signin():
    """Email + password sign-in for workers and admins."""
    if current_user.is_authenticated:
        return redirect(_landing_page_for(current_user))

    form = SignInForm()

    if request.method == "GET":
        return render_template("auth/signin.html", title="SIGN IN", form=form, q="")

    if not form.validate_on_submit():
        _flash_form_errors(form)
        return redirect(url_for("auth.signin"))

    try:
        account = auth_service.sign_in(form.email.data, form.password.data)
    except account_service.AccountNotApprovedError as exc:
        flash(str(exc), "info")
        return redirect(url_for("auth.signin"))
    except account_service.InvalidCredentialsError as exc:
        flash(str(exc), "danger")
        return redirect(url_for("auth.signin"))
    except SQLAlchemyError:
        logger.exception("Sign-in lookup failed for %s", form.email.data)
        flash("Sign-in is unavailable right now. Please try again.", "danger")
        return redirect(url_for("auth.signin"))

    flash(f"Welcome back, {account.first_name}!", "success")
    return redirect(_safe_next_url() or _landing_page_for(account))


@bp.route("/logout", methods=["POST"])
def logout():
    """End the session and return to the sign-in page."""
    auth_service.sign_out()
    flash("You have been signed out.", "info")
    return redirect(url_for("auth.signin"))


# =========================================================================
# Password reset (admin only)
# =========================================================================


@bp.route("/forgetPassword", methods=["GET", "PUT", "POST"])
@permission_required("account.reset_password")
def reset_password():
    """Set a new password for a worker, identified by email."""
    form = PasswordResetForm()

    if request.method == "GET":
        return render_template(
            "auth/reset_password.html", title="PASSWORD RESET", form=form, q=""
        )

    if not form.validate_on_submit():
        _flash_form_errors(form)
        return redirect(url_for("auth.reset_password"))

    try:
        account_service.reset_worker_password(
            form.email.data, form.new_password.data, reset_by=current_user.id
        )
    except account_service.AccountNotFoundError:
        flash("Worker does not exist.", "info")
        return redirect(url_for("auth.reset_password"))
    except SQLAlchemyError:
        logger.exception("Could not reset password for %s", form.email.data)
        flash("Password reset failed. Please try again.", "danger")
        return redirect(url_for("auth.reset_password"))

    flash("Password updated.", "success")
    return redirect(url_for("admin.clerks"))
