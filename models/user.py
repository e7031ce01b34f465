"""
User model for Flask-Login integration.
Wraps the stored User entity with the properties Flask-Login requires.
"""

from models.entities import User


class LoginUser:
    """
    User class for Flask-Login integration.
    Wraps a User entity with required Flask-Login properties.
    """

    def __init__(self, user: User):
        """
        Initialize LoginUser from a stored user.

        Args:
            user: User entity from the booking store
        """
        self.id = user.id
        self.email = user.email
        self.first_name = user.first_name
        self.last_name = user.last_name
        self.full_name = user.full_name
        self.access_level = user.access_level

    @property
    def is_authenticated(self):
        """Required by Flask-Login."""
        return True

    @property
    def is_active(self):
        """Required by Flask-Login."""
        return True

    @property
    def is_anonymous(self):
        """Required by Flask-Login."""
        return False

    def get_id(self):
        """Required by Flask-Login. Returns user ID as unicode string."""
        return str(self.id)
