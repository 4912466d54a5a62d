"""Create parcel, worker and admin tables

Revision ID: 3f9a1c2b7d10
Revises:
Create Date: 2026-10-19 09:12:44.318201

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "3f9a1c2b7d10"
down_revision = None
branch_labels = None
depends_on = None


def _account_columns():
    """Columns shared by the worker and admin tables."""
    return [
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("second_name", sa.String(length=100), nullable=False),
        sa.Column("email", sa.String(length=200), nullable=False),
        sa.Column("password_hash", sa.String(length=128), nullable=False),
        sa.Column("image_data", sa.LargeBinary(), nullable=True),
        sa.Column("image_content_type", sa.String(length=100), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def upgrade():
    """Create the three application tables."""
    op.create_table(
        "parcel",
        sa.Column("id", sa.String(length=32), nullable=False),
        sa.Column("tracking_number", sa.String(length=6), nullable=False),
        sa.Column("sender_name", sa.String(length=120), nullable=False),
        sa.Column("sender_email", sa.String(length=200), nullable=False),
        sa.Column("recipient_email", sa.String(length=200), nullable=False),
        sa.Column("receiver_name", sa.String(length=120), nullable=False),
        sa.Column("origin", sa.String(length=120), nullable=False),
        sa.Column("destination", sa.String(length=120), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("status_level", sa.String(length=20), nullable=False),
        sa.Column("image_data", sa.LargeBinary(), nullable=True),
        sa.Column("image_content_type", sa.String(length=100), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.CheckConstraint(
            "status_level IN ('PENDING', 'TRANSIT', 'ARRIVED', 'DELIVERED')",
            name="CK_parcel_status_level",
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("parcel", schema=None) as batch_op:
        batch_op.create_index(
            batch_op.f("ix_parcel_tracking_number"), ["tracking_number"], unique=False
        )
        batch_op.create_index(
            batch_op.f("ix_parcel_created_at"), ["created_at"], unique=False
        )

    op.create_table(
        "worker",
        *_account_columns(),
        sa.Column("worker_code", sa.String(length=20), nullable=False),
        sa.Column("phone_no", sa.String(length=30), nullable=False),
        sa.Column("branch", sa.String(length=120), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("approved", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("worker", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_worker_email"), ["email"], unique=False)
        batch_op.create_index(
            batch_op.f("ix_worker_worker_code"), ["worker_code"], unique=False
        )
    op.create_index(
        "UQ_worker_email_lower", "worker", [sa.text("lower(email)")], unique=True
    )

    op.create_table(
        "admin",
        *_account_columns(),
        sa.Column("admin_code", sa.String(length=20), nullable=False),
        sa.Column("phone_no", sa.String(length=30), nullable=True),
        sa.Column("branch", sa.String(length=120), nullable=True),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("approved", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    with op.batch_alter_table("admin", schema=None) as batch_op:
        batch_op.create_index(batch_op.f("ix_admin_email"), ["email"], unique=False)
        batch_op.create_index(
            batch_op.f("ix_admin_admin_code"), ["admin_code"], unique=False
        )
    op.create_index(
        "UQ_admin_email_lower", "admin", [sa.text("lower(email)")], unique=True
    )


def downgrade():
    """Drop the tables created in upgrade()."""
    op.drop_index("UQ_admin_email_lower", table_name="admin")
    op.drop_index("UQ_worker_email_lower", table_name="worker")

    with op.batch_alter_table("admin", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_admin_admin_code"))
        batch_op.drop_index(batch_op.f("ix_admin_email"))
    op.drop_table("admin")

    with op.batch_alter_table("worker", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_worker_worker_code"))
        batch_op.drop_index(batch_op.f("ix_worker_email"))
    op.drop_table("worker")

    with op.batch_alter_table("parcel", schema=None) as batch_op:
        batch_op.drop_index(batch_op.f("ix_parcel_created_at"))
        batch_op.drop_index(batch_op.f("ix_parcel_tracking_number"))
    op.drop_table("parcel")
