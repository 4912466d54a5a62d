"""
Parcel service: the parcel lifecycle.

Creating a parcel assigns its tracking number and emails the sender
and recipient. Updating a parcel emails them again, but only when the
status actually changed. Any status may follow any other; there is no
transition table.

Persistence and notification are separate steps: the notification is
only scheduled after the commit succeeds, and its own failure never
reaches the caller.
"""

import logging

from sqlalchemy.orm import defer
from sqlalchemy.orm.exc import StaleDataError

from logistics.extensions import db
from logistics.models.parcel import STATUS_LEVELS, Parcel
from logistics.services import notification_service

logger = logging.getLogger(__name__)

# Fields staff may change after creation. ``tracking_number`` is not
# one of them.
EDITABLE_FIELDS = (
    "sender_name",
    "sender_email",
    "recipient_email",
    "receiver_name",
    "origin",
    "destination",
    "description",
    "status_level",
)


class ParcelNotFoundError(LookupError):
    """Raised when no parcel matches the requested id."""


class StaleParcelError(ValueError):
    """Raised when a parcel changed since the caller last read it."""


# -- Lookup ----------------------------------------------------------------


def get_parcel(parcel_id: str) -> Parcel | None:
    """Return the full parcel record (image included), or None."""
    return db.session.get(Parcel, parcel_id)


def get_parcel_or_raise(parcel_id: str) -> Parcel:
    parcel = get_parcel(parcel_id)
    if parcel is None:
        raise ParcelNotFoundError(f"Parcel {parcel_id} not found.")
    return parcel


def get_parcel_by_tracking_number(tracking_number: str) -> Parcel | None:
    """Exact, case-insensitive tracking number lookup."""
    tracking_number = (tracking_number or "").strip()
    if not tracking_number:
        return None
    return (
        Parcel.query.options(defer(Parcel.image_data))
        .filter(db.func.lower(Parcel.tracking_number) == tracking_number.lower())
        .first()
    )


def search_parcels(query: str | None = None) -> list[Parcel]:
    """
    Return parcels for the list views, newest first.

    Args:
        query: Optional substring of the tracking number. Matching is
               case-insensitive and literal. A missing or blank query
               returns every parcel.

    Returns:
        Parcels with the image payload deferred (not loaded).
    """
    statement = Parcel.query.options(defer(Parcel.image_data))

    query = (query or "").strip()
    if query:
        statement = statement.filter(
            Parcel.tracking_number.icontains(query, autoescape=True)
        )

    return statement.order_by(Parcel.created_at.desc(), Parcel.id.desc()).all()


def status_counts() -> dict[str, int]:
    """Number of parcels in each status, for the admin dashboard."""
    rows = (
        db.session.query(Parcel.status_level, db.func.count(Parcel.id))
        .group_by(Parcel.status_level)
        .all()
    )
    counts = {status: 0 for status in STATUS_LEVELS}
    counts.update({status: count for status, count in rows})
    return counts


# -- Create ----------------------------------------------------------------


def create_parcel(
    sender_name: str,
    sender_email: str,
    recipient_email: str,
    receiver_name: str,
    origin: str,
    destination: str,
    description: str,
    status_level: str = "PENDING",
    image_data: bytes | None = None,
    image_content_type: str | None = None,
    created_by: str | None = None,
) -> Parcel:
    """
    Register a new parcel and notify sender and recipient.

    Args:
        sender_name .. description: Parcel details from the intake form.
        status_level:       Initial status (one of ``STATUS_LEVELS``).
        image_data:         Optional photo bytes.
        image_content_type: MIME type of ``image_data``.
        created_by:         Principal id of the staff member, for logging.

    Returns:
        The committed Parcel.

    Raises:
        ValueError: If ``status_level`` is not a known status.
        sqlalchemy.exc.IntegrityError: If a required field is missing.
    """
    parcel = Parcel(
        sender_name=sender_name,
        sender_email=sender_email,
        recipient_email=recipient_email,
        receiver_name=receiver_name,
        origin=origin,
        destination=destination,
        description=description,
        status_level=status_level,
        image_data=image_data if image_content_type else None,
        image_content_type=image_content_type if image_data else None,
    )
    db.session.add(parcel)
    try:
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise

    logger.info(
        "Created parcel %s (%s -> %s) by %s",
        parcel.tracking_number,
        parcel.origin,
        parcel.destination,
        created_by or "anonymous",
    )

    notification_service.notify_parcel_sent(parcel)
    return parcel


# -- Update ----------------------------------------------------------------


def update_parcel(
    parcel_id: str,
    changes: dict,
    expected_version: int | None = None,
    changed_by: str | None = None,
) -> Parcel:
    """
    Apply a partial update to a parcel.

    A "status changed" email goes to sender and recipient if, and only
    if, ``status_level`` ends up different from what it was.

    Args:
        parcel_id:        The parcel to update.
        changes:          Field name -> new value. Only
                          ``EDITABLE_FIELDS`` are accepted.
        expected_version: The ``version`` the caller last saw. When
                          given, the update is refused if the parcel
                          has changed since.
        changed_by:       Principal id of the staff member, for logging.

    Returns:
        The updated Parcel.

    Raises:
        ParcelNotFoundError: If the parcel does not exist.
        StaleParcelError:    If ``expected_version`` does not match.
        ValueError:          For unknown fields or an invalid status.
    """
    parcel = get_parcel_or_raise(parcel_id)

    if "tracking_number" in changes:
        raise ValueError("The tracking number of a parcel cannot be changed.")
    unknown = set(changes) - set(EDITABLE_FIELDS)
    if unknown:
        raise ValueError(f"Unknown parcel field(s): {', '.join(sorted(unknown))}.")

    if expected_version is not None and parcel.version != expected_version:
        raise StaleParcelError(
            f"Parcel {parcel.tracking_number} was modified by someone else "
            f"(version {parcel.version}, expected {expected_version}). "
            "Reload and try again."
        )

    previous_status = parcel.status_level
    try:
        for field, value in changes.items():
            setattr(parcel, field, value)
        db.session.commit()
    except StaleDataError as exc:
        db.session.rollback()
        raise StaleParcelError(
            f"Parcel {parcel_id} was modified by someone else. Reload and try again."
        ) from exc
    except Exception:
        db.session.rollback()
        raise

    logger.info(
        "Updated parcel %s by %s: %s",
        parcel.tracking_number,
        changed_by or "anonymous",
        ", ".join(sorted(changes)) or "no fields",
    )

    if parcel.status_level != previous_status:
        logger.info(
            "Parcel %s status %s -> %s",
            parcel.tracking_number,
            previous_status,
            parcel.status_level,
        )
        notification_service.notify_status_changed(parcel)

    return parcel


# -- Delete ----------------------------------------------------------------


def delete_parcel(parcel_id: str, deleted_by: str | None = None) -> bool:
    """
    Remove a parcel. Returns False if there was nothing to delete.
    """
    parcel = get_parcel(parcel_id)
    if parcel is None:
        logger.info("Delete requested for missing parcel %s", parcel_id)
        return False

    tracking_number = parcel.tracking_number
    db.session.delete(parcel)
    db.session.commit()

    logger.info("Deleted parcel %s by %s", tracking_number, deleted_by or "anonymous")
    return True


# -- Image -----------------------------------------------------------------


def get_parcel_image(parcel_id: str) -> tuple[bytes, str]:
    """
    Return ``(image bytes, content type)`` for a parcel.

    Raises:
        ParcelNotFoundError: If the parcel or its image is missing.
    """
    parcel = get_parcel_or_raise(parcel_id)
    if not parcel.image_data or not parcel.image_content_type:
        raise ParcelNotFoundError(f"Parcel {parcel_id} has no image.")
    return parcel.image_data, parcel.image_content_type
