"""
Routes for the main blueprint: home, about, and health check.
"""

from flask import render_template
from sqlalchemy import text

from logistics.blueprints.main import bp
from logistics.extensions import db


@bp.route("/")
def index():
    """Public landing page with the tracking search box."""
    return render_template("main/index.html", title="HOME", q="")


@bp.route("/abtus")
def about():
    """About the company."""
    return render_template("main/about.html", title="ABOUT US", q="")


@bp.route("/health")
def health_check():
    """
    Health check endpoint for monitoring and load balancers.

    Returns 200 if the app is running and can reach the database.
    """
    try:
        db.session.execute(text("SELECT 1"))
        return {"status": "healthy", "database": "connected"}, 200
    except Exception as exc:  # pylint: disable=broad-except
        return {"status": "unhealthy", "database": str(exc)}, 503
