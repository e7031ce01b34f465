"""
Fort Smythe Bookings - room booking web application
Flask application factory and initialization
"""

import os
import click
import logging
from flask import Flask, render_template, redirect, url_for, flash, g, session
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Import configuration
from config import config

# Import extensions
from extensions import login_manager, csrf

# Import database functions
from database import close_db, init_db
from database.sessions import SqliteSessionInterface

from models import booking_store
from models.errors import QueryError
from services import mail_queue as mail
from utils.messages import MESSAGES


def create_app(config_name=None, store=None, mail_queue=None):
    """
    Application factory for Flask app.

    Args:
        config_name: Configuration name ('development', 'production', 'test')
        store: BookingStore to use instead of the one named by STORE_BACKEND
        mail_queue: MailQueue to use instead of building one from config

    Returns:
        Flask application instance
    """
    # Determine config
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    # Create Flask app
    app = Flask(__name__)

    # Load configuration
    app.config.from_object(config[config_name])
    if config_name == 'production':
        config[config_name].validate()

    # Initialize extensions
    initialize_extensions(app)

    # Storage backend and mail delivery
    initialize_services(app, store, mail_queue)

    # Register blueprints
    register_blueprints(app)

    # Register error handlers
    register_error_handlers(app)

    # Register CLI commands
    register_cli_commands(app)

    # Register context processors
    register_context_processors(app)

    # Register request and teardown handlers
    register_request_handlers(app)

    # Configure logging
    configure_logging(app)

    return app


def initialize_extensions(app):
    """Initialize Flask extensions."""
    # Initialize Flask-Login
    login_manager.init_app(app)
    # Initialize CSRF Protection
    csrf.init_app(app)
    # Server-side sessions; the cookie carries only the session id
    app.session_interface = SqliteSessionInterface()


def initialize_services(app, store=None, mail_queue=None):
    """Register the booking store and start the mail worker."""
    app.extensions[booking_store.EXTENSION_KEY] = store or booking_store.create_store(app)

    queue = mail_queue or mail.MailQueue.from_config(app.config)
    queue.start()
    app.extensions[mail.EXTENSION_KEY] = queue


def register_blueprints(app):
    """Register Flask blueprints."""
    # Import blueprints
    from blueprints.booking.routes import booking_bp
    from blueprints.auth.routes import auth_bp
    from blueprints.admin.routes import admin_bp

    # Register blueprints
    app.register_blueprint(booking_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp, url_prefix='/admin')


def register_error_handlers(app):
    """Register error handlers."""

    @app.errorhandler(404)
    def not_found_error(error):
        """Handle 404 errors."""
        return render_template('errors/404.html'), 404

    @app.errorhandler(500)
    def internal_error(error):
        """Handle 500 errors."""
        # Rollback database on error
        db = g.get('db')
        if db:
            db.rollback()
        return render_template('errors/500.html'), 500

    @app.errorhandler(403)
    def forbidden_error(error):
        """Handle 403 errors."""
        return render_template('errors/403.html'), 403

    @app.errorhandler(QueryError)
    def query_error(error):
        """Database read failures that escaped a view."""
        app.logger.error(f"Unhandled query error: {error}")
        flash(MESSAGES['cant_query_db'], 'error')
        return redirect(url_for('booking.home'))


def register_cli_commands(app):
    """Register Flask CLI commands."""

    @app.cli.command('init-db')
    def init_db_command():
        """Initialize database with schema and seed data."""
        click.echo('Initializing database...')
        with app.app_context():
            init_db()
        click.echo('Database initialized successfully!')

    @app.cli.command('create-user')
    @click.argument('email')
    @click.option('--first-name', default='')
    @click.option('--last-name', default='')
    @click.option('--access-level', default=3, type=int, show_default=True)
    @click.password_option()
    def create_user_command(email, first_name, last_name, access_level, password):
        """Create an administrator."""
        from models.errors import PersistenceError
        from utils.validators import validate_email

        if not validate_email(email):
            click.echo(f'Invalid email: {email}', err=True)
            return

        with app.app_context():
            try:
                user_id = booking_store.get_store().create_user(
                    email=email,
                    password=password,
                    first_name=first_name,
                    last_name=last_name,
                    access_level=access_level
                )
                click.echo(f'User created successfully! ID: {user_id}')
            except PersistenceError as e:
                click.echo(f'Error creating user: {str(e)}', err=True)

    @app.cli.command('reconcile-orphans')
    @click.option('--repair', is_flag=True, help='Insert missing room restrictions where the room is free.')
    def reconcile_orphans_command(repair):
        """List reservations that have no room restriction."""
        from services.booking import reconcile_orphans

        with app.app_context():
            results = reconcile_orphans(booking_store.get_store(), repair=repair)

        if not results:
            click.echo('No orphan reservations.')
            return
        for reservation, status in results:
            click.echo(
                f'{status:9} #{reservation.id} room {reservation.room_id} '
                f'{reservation.start_date}..{reservation.end_date} '
                f'{reservation.first_name} {reservation.last_name} <{reservation.email}>'
            )


def register_context_processors(app):
    """Register template context processors."""

    @app.context_processor
    def utility_processor():
        """Inject utility values into templates."""
        from datetime import datetime

        return {
            'current_year': datetime.now().year,
            'app_name': app.config.get('APP_NAME', 'Bookings'),
            'app_version': app.config.get('APP_VERSION', '1.0.0')
        }

    # Add custom template filters
    @app.template_filter('human_date')
    def human_date_filter(value):
        """Format date as YYYY-MM-DD."""
        from utils.datetime_helpers import human_date
        return human_date(value)


def register_request_handlers(app):
    """Register before-request and teardown handlers."""

    @app.before_request
    def sliding_session():
        """Every request extends the session lifetime."""
        session.permanent = True

    @app.teardown_appcontext
    def teardown_db(error):
        """Close database connection at end of request."""
        close_db(error)


def configure_logging(app):
    """Configure application logging."""
    if not app.debug and not app.testing:
        # Production logging
        if not os.path.exists('logs'):
            os.mkdir('logs')

        file_handler = logging.FileHandler('logs/bookings.log')
        file_handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
        ))
        file_handler.setLevel(logging.INFO)
        app.logger.addHandler(file_handler)
        logging.getLogger('models').addHandler(file_handler)
        logging.getLogger('services').addHandler(file_handler)

        app.logger.setLevel(logging.INFO)
        app.logger.info('Bookings startup')
    else:
        # Development logging
        app.logger.setLevel(logging.DEBUG)


# Create application instance for development server
if __name__ == '__main__':
    app = create_app()
    app.run(host='0.0.0.0', port=int(os.environ.get('PORT', 8080)), debug=True)
