"""
Helpers for photo uploads.

Photos are small (``MAX_CONTENT_LENGTH`` caps the request) and are
stored in the database next to the record they belong to.
"""

from werkzeug.datastructures import FileStorage


def read_image(upload: FileStorage | None) -> tuple[bytes | None, str | None]:
    """
    Return ``(bytes, content type)`` for an uploaded file.

    An empty file input yields ``(None, None)``.
    """
    if upload is None or not upload.filename:
        return None, None
    data = upload.read()
    if not data:
        return None, None
    return data, upload.mimetype or "application/octet-stream"
