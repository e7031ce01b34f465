"""
Authentication forms using Flask-WTF.
Provides the administrator login form with CSRF protection.
"""

from flask_wtf import FlaskForm
from wtforms import StringField, PasswordField
from wtforms.validators import DataRequired, Email

from utils.messages import MESSAGES


class LoginForm(FlaskForm):
    """Login form with email and password."""

    email = StringField('Email', validators=[
        DataRequired(message=MESSAGES['field_required']),
        Email(message=MESSAGES['invalid_email'])
    ])

    password = PasswordField('Password', validators=[
        DataRequired(message=MESSAGES['field_required'])
    ])
