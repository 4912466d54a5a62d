"""
Model package: imports all models so Alembic and SQLAlchemy can
discover them automatically when ``flask db`` commands are run.

  - parcel.py  -> parcel table
  - account.py -> worker and admin tables
"""

from logistics.models.account import Admin, Worker  # noqa: F401
from logistics.models.parcel import Parcel  # noqa: F401
