"""
Waitress WSGI entry point for production deployment.

Usage::

    python wsgi.py

Settings are read from the environment; a ``.env`` file next to this
script is loaded first if present.

Waitress is a pure-Python WSGI server that runs natively on Windows
without requiring C compilation or Unix-specific dependencies.
"""

import logging
import os

from dotenv import load_dotenv
from waitress import serve

load_dotenv()

from logistics import create_app  # noqa: E402  pylint: disable=wrong-import-position

# Force production config when running via this entry point.
app = create_app(os.environ.get("FLASK_ENV", "production"))

if __name__ == "__main__":
    host = os.environ.get("WAITRESS_HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", os.environ.get("WAITRESS_PORT", "8080")))
    logging.getLogger(__name__).info("Starting Waitress on %s:%s", host, port)
    serve(app, host=host, port=port)
