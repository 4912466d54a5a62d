"""
Forms for the auth blueprint: registration, sign-in and password reset.
"""

from flask_wtf import FlaskForm
from flask_wtf.file import FileAllowed, FileField
from wtforms import PasswordField, StringField, SubmitField
from wtforms.validators import DataRequired, Email, EqualTo, Length, Optional

IMAGE_EXTENSIONS = ["jpg", "jpeg", "png", "gif", "webp"]

PASSWORD_MIN_LENGTH = 8
PASSWORD_LENGTH_MESSAGE = (
    f"Password must be at least {PASSWORD_MIN_LENGTH} characters long"
)


class WorkerRegistrationForm(FlaskForm):
    """Self-registration for depot staff. Phone and branch are required."""

    first_name = StringField("First Name", validators=[DataRequired(), Length(max=100)])
    second_name = StringField("Second Name", validators=[DataRequired(), Length(max=100)])
    email = StringField("Email", validators=[DataRequired(), Email()])
    phone_no = StringField("Phone", validators=[DataRequired(), Length(min=7, max=30)])
    branch = StringField("Branch", validators=[DataRequired(), Length(max=120)])
    password = PasswordField(
        "Password",
        validators=[
            DataRequired(),
            Length(min=PASSWORD_MIN_LENGTH, message=PASSWORD_LENGTH_MESSAGE),
        ],
    )
    confirm_password = PasswordField(
        "Confirm Password",
        validators=[DataRequired(), EqualTo("password", message="Passwords must match")],
    )
    image = FileField("Photo", validators=[FileAllowed(IMAGE_EXTENSIONS, "Images only!")])
    submit = SubmitField("Sign Up")


class AdminRegistrationForm(FlaskForm):
    """Management account registration. Phone and branch are optional."""

    first_name = StringField("First Name", validators=[DataRequired(), Length(max=100)])
    second_name = StringField("Second Name", validators=[DataRequired(), Length(max=100)])
    email = StringField("Email", validators=[DataRequired(), Email()])
    phone_no = StringField("Phone", validators=[Optional(), Length(min=7, max=30)])
    branch = StringField("Branch", validators=[Optional(), Length(max=120)])
    password = PasswordField(
        "Password",
        validators=[
            DataRequired(),
            Length(min=PASSWORD_MIN_LENGTH, message=PASSWORD_LENGTH_MESSAGE),
        ],
    )
    confirm_password = PasswordField(
        "Confirm Password",
        validators=[DataRequired(), EqualTo("password", message="Passwords must match")],
    )
    image = FileField("Photo", validators=[FileAllowed(IMAGE_EXTENSIONS, "Images only!")])
    submit = SubmitField("Register Admin")


class SignInForm(FlaskForm):
    """Email and password sign-in for workers and admins."""

    email = StringField("Email", validators=[DataRequired(), Email()])
    password = PasswordField("Password", validators=[DataRequired()])
    submit = SubmitField("Sign In")


class PasswordResetForm(FlaskForm):
    """Admin form that sets a new password for a worker."""

    email = StringField("Worker Email", validators=[DataRequired(), Email()])
    new_password = PasswordField(
        "New Password",
        validators=[
            DataRequired(),
            Length(min=PASSWORD_MIN_LENGTH, message=PASSWORD_LENGTH_MESSAGE),
        ],
    )
    submit = SubmitField("Reset Password")
