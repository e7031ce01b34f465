"""
Route decorators for authentication and authorization.
Provides access-level based control for admin routes.
"""

from functools import wraps
from flask import flash, abort, current_app
from flask_login import login_required, current_user

from utils.messages import MESSAGES


def access_level_required(level: int = None):
    """
    Decorator to require a minimum user access level for a route.

    Usage:
        @admin_bp.route('/dashboard')
        @login_required
        @access_level_required()
        def dashboard():
            ...

    Args:
        level: Minimum access level (defaults to ADMIN_ACCESS_LEVEL)

    Returns:
        Decorator function
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            required = level if level is not None else current_app.config.get('ADMIN_ACCESS_LEVEL', 3)

            if getattr(current_user, 'access_level', 0) < required:
                flash(MESSAGES['permission_denied'], 'error')
                abort(403)

            return func(*args, **kwargs)
        return wrapper
    return decorator


# Re-export login_required for convenience
__all__ = ['login_required', 'access_level_required']
