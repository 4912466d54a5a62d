"""
Parcels blueprint: intake, tracking, status updates and removal.
"""

from flask import Blueprint

bp = Blueprint(
    "parcels",
    __name__,
    template_folder="templates",
)

# Import routes after blueprint creation to avoid circular imports.
from logistics.blueprints.parcels import routes  # noqa: E402, F401
