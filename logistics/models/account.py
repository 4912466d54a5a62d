"""
Staff account models: workers and admins.

Workers and admins live in separate tables with the same basic shape.
Both carry a short display code derived from the record id, a bcrypt
password hash, and an ``approved`` flag. Workers must be approved by
an admin before they can sign in; admins are approved on creation.

Flask-Login identifies a signed-in principal as ``"<role>:<id>"`` so
the user loader knows which table to read.
"""

from flask_login import UserMixin

from logistics.extensions import db
from logistics.models.parcel import new_record_id, utcnow

WORKER_ROLE = "worker"
ADMIN_ROLE = "admin"


class AccountMixin(UserMixin):
    """Columns and helpers shared by ``Worker`` and ``Admin``."""

    id = db.Column(db.String(32), primary_key=True, default=new_record_id)
    first_name = db.Column(db.String(100), nullable=False)
    second_name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(200), nullable=False, index=True)
    password_hash = db.Column(db.String(128), nullable=False)
    image_data = db.Column(db.LargeBinary, nullable=True)
    image_content_type = db.Column(db.String(100), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(
        db.DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )

    # Overridden by each subclass.
    principal_role: str = ""

    @property
    def full_name(self) -> str:
        """Return the account holder's full display name."""
        return f"{self.first_name} {self.second_name}"

    @property
    def is_active(self) -> bool:
        # Flask-Login refuses to sign in inactive users.
        return bool(self.approved)

    @property
    def has_image(self) -> bool:
        return bool(self.image_content_type)

    def get_id(self) -> str:
        return f"{self.principal_role}:{self.id}"


class Worker(AccountMixin, db.Model):
    """
    Depot staff member who registers and updates parcels.

    Self-registered through ``/signup``; unapproved until an admin
    flips ``approved``.
    """

    __tablename__ = "worker"

    principal_role = WORKER_ROLE

    worker_code = db.Column(db.String(20), nullable=False, index=True)
    phone_no = db.Column(db.String(30), nullable=False)
    branch = db.Column(db.String(120), nullable=False)
    role = db.Column(db.String(20), nullable=False, default="STAFF")
    approved = db.Column(db.Boolean, nullable=False, default=False)

    @property
    def display_id(self) -> str:
        return self.worker_code

    def __repr__(self) -> str:
        return f"<Worker {self.worker_code} {self.email}>"


class Admin(AccountMixin, db.Model):
    """Management account; can approve and remove workers."""

    __tablename__ = "admin"

    principal_role = ADMIN_ROLE

    admin_code = db.Column(db.String(20), nullable=False, index=True)
    phone_no = db.Column(db.String(30), nullable=True)
    branch = db.Column(db.String(120), nullable=True)
    role = db.Column(db.String(20), nullable=False, default="ADMIN")
    approved = db.Column(db.Boolean, nullable=False, default=True)

    @property
    def display_id(self) -> str:
        return self.admin_code

    def __repr__(self) -> str:
        return f"<Admin {self.admin_code} {self.email}>"


# Lookup used by the user loader and the profile routes.
ACCOUNT_MODELS: dict[str, type[AccountMixin]] = {
    WORKER_ROLE: Worker,
    ADMIN_ROLE: Admin,
}


# One account per email per table, regardless of case.
db.Index("UQ_worker_email_lower", db.func.lower(Worker.email), unique=True)
db.Index("UQ_admin_email_lower", db.func.lower(Admin.email), unique=True)
