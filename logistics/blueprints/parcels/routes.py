"""
Routes for the parcels blueprint.

Customer-facing pages (``/track``, ``/myParcel``) look parcels up by
tracking number. Staff pages list, create, edit and delete parcels.
Every form handler ends in a redirect with a flashed message, whether
the operation worked or not.
"""

import logging

from flask import Response, flash, redirect, render_template, request, url_for
from flask_login import current_user
from sqlalchemy.exc import SQLAlchemyError

from logistics.blueprints.parcels import bp
from logistics.blueprints.parcels.forms import ParcelForm
from logistics.decorators import permission_required
from logistics.services import parcel_service
from logistics.services.parcel_service import ParcelNotFoundError, StaleParcelError
from logistics.uploads import read_image

logger = logging.getLogger(__name__)


def _actor_id() -> str | None:
    return current_user.id if current_user.is_authenticated else None


# =========================================================================
# Lookup
# =========================================================================


@bp.route("/track")
@permission_required("parcel.track")
def track():
    """Public tracking page. Example: /track?parcel=ab12cd"""
    tracking_number = request.args.get("parcel", "", type=str).strip()
    parcel = None
    if tracking_number:
        parcel = parcel_service.get_parcel_by_tracking_number(tracking_number)

    return render_template(
        "parcels/track.html",
        title="TRACK PARCEL",
        parcel=parcel,
        tracking_number=tracking_number,
        not_found=bool(tracking_number and parcel is None),
        q="",
    )


@bp.route("/services")
@permission_required("parcel.view")
def services():
    """Staff list of every parcel, newest first."""
    parcels = parcel_service.search_parcels()
    return render_template(
        "parcels/logistic.html", title="LOGISTICS", parcels=parcels, q=""
    )


@bp.route("/search")
@permission_required("parcel.view")
def search():
    """Staff search by tracking number substring."""
    q = request.args.get("q", "", type=str)
    try:
        parcels = parcel_service.search_parcels(q)
    except SQLAlchemyError:
        logger.exception("Parcel search failed for %r", q)
        flash("Search is unavailable right now.", "danger")
        return redirect(url_for("main.index"))

    return render_template(
        "parcels/logistic.html", title="LOGISTICS", parcels=parcels, q=q
    )


@bp.route("/myParcel")
@permission_required("parcel.track")
def my_parcel():
    """Customer search by tracking number substring."""
    q = request.args.get("q", "", type=str)
    try:
        parcels = parcel_service.search_parcels(q)
    except SQLAlchemyError:
        logger.exception("Parcel search failed for %r", q)
        flash("Search is unavailable right now.", "danger")
        return redirect(url_for("main.index"))

    return render_template(
        "parcels/my_parcel.html", title="MY PARCEL", parcels=parcels, q=q
    )


@bp.route("/dashboard")
@permission_required("account.manage")
def dashboard():
    """Admin overview: all parcels plus a count per status."""
    parcels = parcel_service.search_parcels()
    counts = parcel_service.status_counts()
    return render_template(
        "parcels/dashboard.html",
        title="ADMIN",
        parcels=parcels,
        counts=counts,
        q="",
    )


@bp.route("/single/<parcel_id>")
@permission_required("parcel.view")
def detail(parcel_id):
    """Full parcel record, photo included."""
    parcel = parcel_service.get_parcel(parcel_id)
    if parcel is None:
        flash("Parcel not found.", "warning")
        return redirect(url_for("parcels.services"))
    return render_template("parcels/details.html", title="SINGLE", parcel=parcel, q="")


@bp.route("/parcel/<parcel_id>/image")
@permission_required("parcel.track")
def image(parcel_id):
    """Stream the stored parcel photo with its stored content type."""
    try:
        data, content_type = parcel_service.get_parcel_image(parcel_id)
    except ParcelNotFoundError:
        flash("No photo is available for that parcel.", "warning")
        return redirect(url_for("main.index"))
    return Response(data, mimetype=content_type)


# =========================================================================
# Create
# =========================================================================


@bp.route("/form")
@permission_required("parcel.create")
def new_parcel():
    """Render the parcel intake form."""
    return render_template("parcels/form.html", title="FORM", form=ParcelForm(), q="")


@bp.route("/logistics", methods=["POST"])
@permission_required("parcel.create")
def create():
    """
    Register a parcel from the multipart intake form.

    The tracking number is assigned by the service; sender and
    recipient are emailed in the background.
    """
    form = ParcelForm()
    if not form.validate_on_submit():
        for field_name, errors in form.errors.items():
            for error in errors:
                flash(f"{getattr(form, field_name).label.text}: {error}", "danger")
        return redirect(url_for("parcels.new_parcel"))

    image_data, content_type = read_image(form.image.data)

    try:
        parcel = parcel_service.create_parcel(
            sender_name=form.sender_name.data.strip(),
            sender_email=form.sender_email.data.strip(),
            recipient_email=form.recipient_email.data.strip(),
            receiver_name=form.receiver_name.data.strip(),
            origin=form.origin.data.strip(),
            destination=form.destination.data.strip(),
            description=form.description.data.strip(),
            status_level=form.status_level.data,
            image_data=image_data,
            image_content_type=content_type,
            created_by=_actor_id(),
        )
    except ValueError as exc:
        flash(str(exc), "danger")
        return redirect(url_for("parcels.new_parcel"))
    except SQLAlchemyError:
        logger.exception("Could not save parcel from %s", form.sender_email.data)
        flash("The parcel could not be saved. Please try again.", "danger")
        return redirect(url_for("main.index"))

    flash(
        f"Parcel registered. Tracking number: {parcel.tracking_number}", "success"
    )
    return redirect(url_for("parcels.services"))


# =========================================================================
# Update
# =========================================================================


@bp.route("/parcel/edit/<parcel_id>")
@permission_required("parcel.update")
def edit(parcel_id):
    """Render the edit form for one parcel."""
    parcel = parcel_service.get_parcel(parcel_id)
    if parcel is None:
        flash("Parcel not found.", "warning")
        return redirect(url_for("parcels.services"))
    return render_template("parcels/edit.html", title="EDIT", parcel=parcel, q="")


@bp.route("/update/<parcel_id>", methods=["PUT", "POST"])
@permission_required("parcel.update")
def update(parcel_id):
    """
    Apply the submitted fields to a parcel.

    Blank fields are left unchanged. A hidden ``version`` field makes
    the update fail if someone else saved the parcel in the meantime.
    """
    changes = {
        field: request.form[field].strip()
        for field in parcel_service.EDITABLE_FIELDS
        if request.form.get(field, "").strip()
    }
    expected_version = request.form.get("version", type=int)

    try:
        parcel = parcel_service.update_parcel(
            parcel_id,
            changes,
            expected_version=expected_version,
            changed_by=_actor_id(),
        )
    except ParcelNotFoundError:
        flash("Parcel not found.", "warning")
        return redirect(url_for("parcels.services"))
    except StaleParcelError as exc:
        flash(str(exc), "warning")
        return redirect(url_for("parcels.edit", parcel_id=parcel_id))
    except ValueError as exc:
        flash(str(exc), "danger")
        return redirect(url_for("parcels.edit", parcel_id=parcel_id))
    except SQLAlchemyError:
        logger.exception("Could not update parcel %s", parcel_id)
        flash("The parcel could not be updated. Please try again.", "danger")
        return redirect(url_for("parcels.services"))

    flash(f"Parcel {parcel.tracking_number} updated.", "success")
    return redirect(url_for("parcels.services"))


# =========================================================================
# Delete
# =========================================================================


@bp.route("/parcel/<parcel_id>", methods=["DELETE"])
@bp.route("/parcel/<parcel_id>/delete", methods=["POST"])
@permission_required("parcel.delete")
def delete(parcel_id):
    """Remove a parcel. Missing parcels are reported, not raised."""
    try:
        deleted = parcel_service.delete_parcel(parcel_id, deleted_by=_actor_id())
    except SQLAlchemyError:
        logger.exception("Could not delete parcel %s", parcel_id)
        flash("The parcel could not be deleted. Please try again.", "danger")
        return redirect(url_for("parcels.services"))

    if deleted:
        flash("Parcel deleted.", "success")
    else:
        flash("Parcel not found.", "warning")
    return redirect(url_for("parcels.services"))
