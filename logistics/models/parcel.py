"""
Parcel model: shipments registered by staff.

The tracking number shown to customers is the first six characters of
the record id. It is assigned once when the parcel is created and can
never change afterwards.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import validates

from logistics.extensions import db

# Shipment lifecycle states. Any state may follow any other.
STATUS_LEVELS = ("PENDING", "TRANSIT", "ARRIVED", "DELIVERED")

TRACKING_NUMBER_LENGTH = 6


def new_record_id() -> str:
    """Return a fresh 32-character hex id for a parcel or account."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Parcel(db.Model):
    """
    A shipment travelling from ``origin`` to ``destination``.

    ``version`` is bumped by SQLAlchemy on every UPDATE and checked in
    the WHERE clause, so two writers holding the same row cannot both
    win. ``parcel_service.update_parcel`` also lets callers pass the
    version they last saw.
    """

    __tablename__ = "parcel"
    __table_args__ = (
        db.CheckConstraint(
            "status_level IN ('PENDING', 'TRANSIT', 'ARRIVED', 'DELIVERED')",
            name="CK_parcel_status_level",
        ),
    )

    id = db.Column(db.String(32), primary_key=True, default=new_record_id)
    tracking_number = db.Column(
        db.String(TRACKING_NUMBER_LENGTH), nullable=False, index=True
    )
    sender_name = db.Column(db.String(120), nullable=False)
    sender_email = db.Column(db.String(200), nullable=False)
    recipient_email = db.Column(db.String(200), nullable=False)
    receiver_name = db.Column(db.String(120), nullable=False)
    origin = db.Column(db.String(120), nullable=False)
    destination = db.Column(db.String(120), nullable=False)
    description = db.Column(db.Text, nullable=False)
    status_level = db.Column(db.String(20), nullable=False, default="PENDING")
    image_data = db.Column(db.LargeBinary, nullable=True)
    image_content_type = db.Column(db.String(100), nullable=True)
    version = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow, index=True)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    __mapper_args__ = {"version_id_col": version}

    def __init__(self, **kwargs):
        # The id has to exist before the first flush so the tracking
        # number can be derived from it.
        kwargs.setdefault("id", new_record_id())
        kwargs.setdefault("tracking_number", kwargs["id"][:TRACKING_NUMBER_LENGTH])
        super().__init__(**kwargs)

    @validates("status_level")
    def _validate_status_level(self, key, value):
        if value not in STATUS_LEVELS:
            raise ValueError(
                f"Invalid status level '{value}'. "
                f"Expected one of: {', '.join(STATUS_LEVELS)}."
            )
        return value

    @validates("tracking_number")
    def _validate_tracking_number(self, key, value):
        if self.tracking_number is not None and value != self.tracking_number:
            raise ValueError("The tracking number of a parcel cannot be changed.")
        return value

    @property
    def has_image(self) -> bool:
        return bool(self.image_content_type)

    def __repr__(self) -> str:
        return f"<Parcel {self.tracking_number} {self.status_level}>"
