"""
Forms for the parcels blueprint.

Only the intake form is a WTForms class; the edit page posts plain
fields so blank inputs can mean "leave unchanged".
"""

from flask_wtf import FlaskForm
from flask_wtf.file import FileAllowed, FileField
from wtforms import SelectField, StringField, TextAreaField
from wtforms.validators import DataRequired, Email, Length

from logistics.models.parcel import STATUS_LEVELS

IMAGE_EXTENSIONS = ["jpg", "jpeg", "png", "gif", "webp"]


class ParcelForm(FlaskForm):
    """Parcel intake: sender, receiver, route, status and an optional photo."""

    sender_name = StringField(
        "Sender",
        validators=[DataRequired(message="Sender name is required"), Length(max=120)],
    )
    sender_email = StringField(
        "Sender Email",
        validators=[DataRequired(message="Sender email is required"), Email()],
    )
    receiver_name = StringField(
        "Receiver",
        validators=[DataRequired(message="Receiver name is required"), Length(max=120)],
    )
    recipient_email = StringField(
        "Recipient Email",
        validators=[DataRequired(message="Recipient email is required"), Email()],
    )
    origin = StringField("From", validators=[DataRequired(), Length(max=120)])
    destination = StringField("To", validators=[DataRequired(), Length(max=120)])
    description = TextAreaField("Description", validators=[DataRequired()])
    status_level = SelectField(
        "Status Level",
        choices=[(status, status.title()) for status in STATUS_LEVELS],
        default="PENDING",
        validators=[DataRequired()],
    )
    image = FileField(
        "Photo", validators=[FileAllowed(IMAGE_EXTENSIONS, "Images only!")]
    )
