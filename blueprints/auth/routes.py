"""
Authentication routes: login, logout.
Handles administrator authentication.
"""

from flask import render_template, redirect, url_for, flash, request, Blueprint, current_app
from flask_login import login_user, logout_user, current_user
from urllib.parse import urlparse

from blueprints.auth.forms import LoginForm
from database.sessions import renew_session
from models.booking_store import get_store
from models.errors import AuthError, QueryError
from models.user import LoginUser
from utils.messages import MESSAGES

auth_bp = Blueprint('auth', __name__, url_prefix='/user', template_folder='../../templates/auth')


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    """
    Login route with form handling.

    GET: Display login form
    POST: Process login credentials
    """
    # Redirect if already logged in
    if current_user.is_authenticated:
        return redirect(url_for('admin.dashboard'))

    form = LoginForm()

    if form.validate_on_submit():
        store = get_store()
        try:
            user_id = store.authenticate(form.email.data, form.password.data)
        except AuthError as e:
            current_app.logger.info(f"Failed login for {form.email.data}: {e}")
            flash(MESSAGES['invalid_credentials'], 'error')
            return redirect(url_for('auth.login'))
        except QueryError as e:
            current_app.logger.error(f"Login lookup failed: {e}")
            flash(MESSAGES['cant_query_db'], 'error')
            return redirect(url_for('auth.login'))

        # Fresh session for the authenticated user
        next_page = request.args.get('next')
        renew_session()

        login_user(LoginUser(store.get_user(user_id)))
        flash(MESSAGES['login_success'], 'success')

        # Redirect to next page or default
        if not next_page or urlparse(next_page).netloc != '':
            next_page = url_for('booking.home')

        return redirect(next_page)

    return render_template('login.html', form=form)


@auth_bp.route('/logout')
def logout():
    """Logout current user and drop the whole session."""
    logout_user()
    renew_session()
    flash(MESSAGES['logout_success'], 'success')
    return redirect(url_for('booking.home'))
