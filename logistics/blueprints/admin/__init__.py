"""
Admin blueprint: worker approval, account removal, staff profiles.
"""

from flask import Blueprint

bp = Blueprint(
    "admin",
    __name__,
    template_folder="templates",
)

from logistics.blueprints.admin import routes  # noqa: E402, F401
