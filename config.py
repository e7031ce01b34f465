"""
Flask application configuration classes.
Provides configuration for development, production, and testing environments.
"""

import os
from datetime import timedelta


def _env_bool(name: str, default: str) -> bool:
    return os.environ.get(name, default).lower() in ('1', 'true', 'yes')


class Config:
    """Base configuration class with common settings."""

    # Secret key for session management and CSRF protection
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Database configuration
    DATABASE_PATH = os.environ.get('DATABASE_PATH') or 'instance/bookings.db'
    QUERY_TIMEOUT = float(os.environ.get('QUERY_TIMEOUT', 2))

    # Server-side sessions; defaults to DATABASE_PATH
    SESSION_DATABASE_PATH = os.environ.get('SESSION_DATABASE_PATH')

    # Storage backend: 'sqlite' or 'memory'
    STORE_BACKEND = os.environ.get('STORE_BACKEND', 'sqlite')

    # Re-check availability and write reservation + restriction in one transaction
    TRANSACTIONAL_COMMIT = _env_bool('TRANSACTIONAL_COMMIT', 'true')

    # Security settings
    WTF_CSRF_ENABLED = True
    WTF_CSRF_TIME_LIMIT = 3600  # CSRF token expires after 1 hour
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    SESSION_COOKIE_SECURE = False  # Set to True in production with HTTPS
    SESSION_REFRESH_EACH_REQUEST = True
    PERMANENT_SESSION_LIFETIME = timedelta(
        hours=int(os.environ.get('SESSION_TIMEOUT_HOURS', 24))
    )

    # Template cache toggle
    TEMPLATES_AUTO_RELOAD = not _env_bool('USE_TEMPLATE_CACHE', 'true')

    # Mail
    MAIL_SERVER = os.environ.get('MAIL_SERVER', 'localhost')
    MAIL_PORT = int(os.environ.get('MAIL_PORT', 1025))
    MAIL_DEFAULT_SENDER = os.environ.get('MAIL_DEFAULT_SENDER', 'me@here.com')
    OWNER_EMAIL = os.environ.get('OWNER_EMAIL', 'property@owner.com')
    MAIL_QUEUE_SIZE = int(os.environ.get('MAIL_QUEUE_SIZE', 100))
    MAIL_SUPPRESS_SEND = _env_bool('MAIL_SUPPRESS_SEND', 'false')
    MAIL_TEMPLATE_FOLDER = os.environ.get('MAIL_TEMPLATE_FOLDER') or os.path.join(
        os.path.dirname(os.path.abspath(__file__)), 'email-templates'
    )

    # Access level required for /admin
    ADMIN_ACCESS_LEVEL = 3

    # Timezone
    TIMEZONE = os.environ.get('TIMEZONE', 'UTC')

    # Application settings
    APP_NAME = 'Fort Smythe Bookings'
    APP_VERSION = '1.0.0'


class DevelopmentConfig(Config):
    """Development environment configuration."""

    DEBUG = True
    TESTING = False
    TEMPLATES_AUTO_RELOAD = True
    SESSION_COOKIE_SECURE = False
    WTF_CSRF_SSL_STRICT = False
    MAIL_SUPPRESS_SEND = _env_bool('MAIL_SUPPRESS_SEND', 'true')


class ProductionConfig(Config):
    """Production environment configuration."""

    DEBUG = False
    TESTING = False
    SESSION_COOKIE_SECURE = os.environ.get('SESSION_COOKIE_SECURE', 'true').lower() == 'true'
    WTF_CSRF_SSL_STRICT = SESSION_COOKIE_SECURE

    SECRET_KEY = os.environ.get('SECRET_KEY') or Config.SECRET_KEY
    DATABASE_PATH = os.environ.get('DATABASE_PATH') or Config.DATABASE_PATH

    # URL scheme preference (follows SESSION_COOKIE_SECURE setting)
    PREFERRED_URL_SCHEME = 'https' if SESSION_COOKIE_SECURE else 'http'

    @classmethod
    def validate(cls) -> None:
        """Validate that required production environment variables are set."""
        secret_key = os.environ.get('SECRET_KEY')
        if not secret_key:
            raise ValueError("SECRET_KEY environment variable must be set in production")
        if len(secret_key) < 32:
            raise ValueError("SECRET_KEY must be at least 32 characters in production")
        if not os.environ.get('DATABASE_PATH'):
            raise ValueError("DATABASE_PATH environment variable must be set in production")


class TestConfig(Config):
    """Testing environment configuration."""

    TESTING = True
    DEBUG = True
    WTF_CSRF_ENABLED = False  # Disable CSRF for tests
    DATABASE_PATH = os.environ.get('DATABASE_PATH', 'instance/test_bookings.db')
    SECRET_KEY = 'test-secret-key'
    MAIL_SUPPRESS_SEND = True
    TRANSACTIONAL_COMMIT = True


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'test': TestConfig,
    'default': DevelopmentConfig
}
