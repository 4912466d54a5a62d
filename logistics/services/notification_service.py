"""
Notification service: customer and staff emails.

Every notification is built in the calling request (so templates see
plain values, never ORM objects that belong to the request's session)
and then handed to ``dispatch``. With ``MAIL_ASYNC`` on, the SMTP
conversation happens on a daemon thread and the request returns
immediately. Delivery failures are logged and swallowed: a parcel that
was saved stays saved even if nobody could be emailed about it.
"""

import logging
from threading import Thread

from flask import current_app, render_template_string
from flask_mail import Message

from logistics.extensions import mail

logger = logging.getLogger(__name__)


# =============================================================================
# EMAIL TEMPLATES (HTML)
# =============================================================================

EMAIL_TEMPLATES = {
    "parcel_sent": """
<p>This is to inform you that the parcel sent by <strong>{{ sender_name }}</strong>
to <strong>{{ receiver_name }}</strong> has been successfully processed and is
currently in progress.</p>
<p>You will be notified of any further updates regarding its status.</p>
<h3>Tracking Number: {{ tracking_number }}</h3>
<h4>Status Level: {{ status_level }}</h4>
<p><strong>Thank you for your cooperation.</strong></p>
<p>To verify, click <a href="{{ tracking_link }}">here</a>.</p>
""",
    "status_changed": """
<p>This is to inform you that the parcel sent by <strong>{{ sender_name }}</strong>
to <strong>{{ receiver_name }}</strong> has a new status update.</p>
<h3>Tracking Number: {{ tracking_number }}</h3>
<h4>Status Level: {{ status_level }}</h4>
<p><strong>Thank you for your cooperation.</strong></p>
<p>To verify, click <a href="{{ tracking_link }}">here</a>.</p>
""",
    "welcome_worker": """
<p>Dear {{ first_name }},</p>
<p>Welcome to the team! This is to inform you that you have been employed as
a staff member of {{ company_name }}. Your staff ID is
<strong>{{ display_id }}</strong>.</p>
<p>You will be able to sign in once an administrator approves your account.
We wish you a great start and every success with us.</p>
""",
    "welcome_admin": """
<p>Dear {{ first_name }},</p>
<p>Welcome to the team! This is to inform you that you have been added to the
management of {{ company_name }}. Your admin ID is
<strong>{{ display_id }}</strong>.</p>
<p>We wish you a great start and every success with us.</p>
""",
}

SUBJECTS = {
    "parcel_sent": "Parcel Successfully Sent",
    "status_changed": "Parcel Status Update",
    "welcome_worker": "Welcome New Worker",
    "welcome_admin": "Welcome to the Management Team",
}


# -- Dispatch --------------------------------------------------------------


def tracking_link(tracking_number: str) -> str:
    """Public URL where a customer can look up a parcel."""
    base_url = current_app.config["BASE_URL"].rstrip("/")
    return f"{base_url}/track?parcel={tracking_number}"


def _send(app, message: Message) -> bool:
    """Deliver one message. Runs inline or on a background thread."""
    try:
        with app.app_context():
            mail.send(message)
        logger.info("Email '%s' sent to %s", message.subject, message.recipients)
        return True
    except Exception:  # pylint: disable=broad-exception-caught
        logger.exception(
            "Failed to send email '%s' to %s", message.subject, message.recipients
        )
        return False


def dispatch(message: Message) -> None:
    """
    Hand a message to the mailer without waiting for delivery.

    When ``MAIL_ASYNC`` is False (tests, CLI) the message is sent
    inline, but errors are still only logged.
    """
    app = current_app._get_current_object()  # pylint: disable=protected-access

    if not app.config.get("MAIL_ASYNC", True):
        _send(app, message)
        return

    thread = Thread(target=_send, args=(app, message), daemon=True)
    thread.start()
    logger.debug("Email '%s' queued for %s", message.subject, message.recipients)


def _notify(template_name: str, recipients: list[str], **context) -> None:
    """Render a template, build the message and dispatch it."""
    try:
        html = render_template_string(EMAIL_TEMPLATES[template_name], **context)
        bcc = current_app.config.get("MAIL_BCC")
        message = Message(
            subject=SUBJECTS[template_name],
            recipients=recipients,
            bcc=[bcc] if bcc else None,
            html=html,
        )
        dispatch(message)
    except Exception:  # pylint: disable=broad-exception-caught
        logger.exception("Could not prepare '%s' notification", template_name)


# -- Parcel notifications --------------------------------------------------


def _parcel_context(parcel) -> dict:
    return {
        "sender_name": parcel.sender_name,
        "receiver_name": parcel.receiver_name,
        "tracking_number": parcel.tracking_number,
        "status_level": parcel.status_level,
        "tracking_link": tracking_link(parcel.tracking_number),
    }


def notify_parcel_sent(parcel) -> None:
    """Tell sender and recipient that a parcel has been registered."""
    _notify(
        "parcel_sent",
        [parcel.sender_email, parcel.recipient_email],
        **_parcel_context(parcel),
    )


def notify_status_changed(parcel) -> None:
    """Tell sender and recipient about a parcel's new status."""
    _notify(
        "status_changed",
        [parcel.sender_email, parcel.recipient_email],
        **_parcel_context(parcel),
    )


# -- Account notifications -------------------------------------------------


def notify_account_created(account) -> None:
    """Send the welcome email for a new worker or admin."""
    template_name = f"welcome_{account.principal_role}"
    _notify(
        template_name,
        [account.email],
        first_name=account.first_name,
        display_id=account.display_id,
        company_name=current_app.config["COMPANY_NAME"],
    )
