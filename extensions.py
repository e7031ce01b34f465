"""
Flask extensions initialization.
Extensions are initialized here and then initialized with the app in app.py.
"""

from flask_login import LoginManager
from flask_wtf.csrf import CSRFProtect

from utils.messages import MESSAGES

# Initialize Flask-Login
login_manager = LoginManager()

# Initialize CSRF Protection
csrf = CSRFProtect()

# Configure Login Manager
login_manager.login_view = 'auth.login'
login_manager.login_message = MESSAGES['login_required']
login_manager.login_message_category = 'warning'


@login_manager.user_loader
def load_user(user_id):
    """
    Load user by ID for Flask-Login.

    Args:
        user_id: The user ID as a string

    Returns:
        LoginUser or None if not found
    """
    from models.booking_store import get_store
    from models.user import LoginUser

    try:
        user = get_store().get_user(int(user_id))
    except ValueError:
        return None
    if user:
        return LoginUser(user)
    return None
