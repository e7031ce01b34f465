"""
Reservation forms using Flask-WTF.
Guest details collected on the make-reservation page and in the admin editor.
"""

from flask_wtf import FlaskForm
from wtforms import StringField
from wtforms.validators import DataRequired, Email, Length, Optional

from utils.messages import MESSAGES


class ReservationForm(FlaskForm):
    """Guest details for a reservation."""

    first_name = StringField('First Name', validators=[
        DataRequired(message=MESSAGES['field_required']),
        Length(min=3, max=100, message=MESSAGES['min_length'].format(length=3))
    ])

    last_name = StringField('Last Name', validators=[
        DataRequired(message=MESSAGES['field_required']),
        Length(max=100)
    ])

    email = StringField('Email', validators=[
        DataRequired(message=MESSAGES['field_required']),
        Email(message=MESSAGES['invalid_email'])
    ])

    phone = StringField('Phone', validators=[
        Optional(),
        Length(max=30)
    ])

    def guest_fields(self) -> dict:
        """Posted guest values, trimmed."""
        return {
            'first_name': (self.first_name.data or '').strip(),
            'last_name': (self.last_name.data or '').strip(),
            'email': (self.email.data or '').strip(),
            'phone': (self.phone.data or '').strip(),
        }
