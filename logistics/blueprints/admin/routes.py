"""
Routes for the admin blueprint: staff accounts.

All routes require the ``account.manage`` permission. Approval and
removal are plain state changes; nothing is kept beyond the log line.
"""

import logging

from flask import Response, flash, redirect, render_template, url_for
from flask_login import current_user
from sqlalchemy.exc import SQLAlchemyError

from logistics.blueprints.admin import bp
from logistics.decorators import permission_required
from logistics.models.account import ACCOUNT_MODELS
from logistics.services import account_service
from logistics.services.account_service import AccountNotFoundError

logger = logging.getLogger(__name__)


# =========================================================================
# Staff list
# =========================================================================


@bp.route("/clerks")
@permission_required("account.manage")
def clerks():
    """List workers (approved or not) and admins, newest first."""
    return render_template(
        "admin/clerks.html",
        title="CLERKS",
        workers=account_service.get_all_workers(),
        mgmts=account_service.get_all_admins(),
        q="",
    )


# =========================================================================
# Approval and removal
# =========================================================================


@bp.route("/admin/approve-worker/<worker_id>", methods=["PUT", "POST"])
@permission_required("account.manage")
def approve_worker(worker_id):
    """Let a worker sign in."""
    try:
        worker = account_service.approve_worker(worker_id, approved_by=current_user.id)
        flash(f"{worker.full_name} ({worker.worker_code}) approved.", "success")
    except AccountNotFoundError:
        flash("Worker not found.", "warning")
    except SQLAlchemyError:
        logger.exception("Could not approve worker %s", worker_id)
        flash("Failed to approve worker.", "danger")
    return redirect(url_for("admin.clerks"))


@bp.route("/admin/delete-worker/<worker_id>", methods=["DELETE"])
@bp.route("/admin/delete-worker/<worker_id>/delete", methods=["POST"])
@permission_required("account.manage")
def delete_worker(worker_id):
    """Remove a worker account."""
    try:
        if account_service.delete_worker(worker_id, deleted_by=current_user.id):
            flash("Worker deleted.", "success")
        else:
            flash("Worker not found.", "warning")
    except SQLAlchemyError:
        logger.exception("Could not delete worker %s", worker_id)
        flash("Failed to delete worker.", "danger")
    return redirect(url_for("admin.clerks"))


@bp.route("/admin/delete-admin/<admin_id>", methods=["DELETE"])
@bp.route("/admin/delete-admin/<admin_id>/delete", methods=["POST"])
@permission_required("account.manage")
def delete_admin(admin_id):
    """Remove another admin's account."""
    try:
        if account_service.delete_admin(admin_id, deleted_by=current_user.id):
            flash("Admin deleted.", "success")
        else:
            flash("Admin not found.", "warning")
    except ValueError as exc:
        flash(str(exc), "danger")
    except SQLAlchemyError:
        logger.exception("Could not delete admin %s", admin_id)
        flash("Failed to delete admin.", "danger")
    return redirect(url_for("admin.clerks"))


# =========================================================================
# Profiles
# =========================================================================


@bp.route("/staff/<account_type>/<account_id>")
@permission_required("account.manage")
def profile(account_type, account_id):
    """Profile page for one worker or admin."""
    if account_type not in ACCOUNT_MODELS:
        return redirect(url_for("parcels.dashboard"))

    staff = account_service.get_account(account_type, account_id)
    if staff is None:
        flash("Account not found.", "warning")
        return redirect(url_for("admin.clerks"))

    return render_template(
        "admin/profile.html", title="PROFILE", staff=staff, type=account_type, q=""
    )


@bp.route("/staff/image/<account_type>/<account_id>")
@permission_required("account.manage")
def profile_image(account_type, account_id):
    """Stream a staff photo with its stored content type."""
    try:
        data, content_type = account_service.get_account_image(account_type, account_id)
    except AccountNotFoundError:
        flash("No photo is available for that account.", "warning")
        return redirect(url_for("admin.clerks"))
    return Response(data, mimetype=content_type)
