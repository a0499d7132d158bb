import os
import secrets
from dotenv import load_dotenv
from sqlalchemy import event
from sqlalchemy.engine import Engine
from typing import Optional

# Find the absolute path of the root directory
basedir = os.path.abspath(os.path.dirname(__file__))

# Load the .env file from the root directory
load_dotenv(os.path.join(basedir, '.env'))


class ConfigurationError(Exception):
    """Raised when required configuration is missing or invalid"""
    pass


def _env_int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw in (None, ''):
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"Environment variable {key} must be an integer, got {raw!r}")


def _env_float(key: str, default: float) -> float:
    raw = os.environ.get(key)
    if raw in (None, ''):
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"Environment variable {key} must be a number, got {raw!r}")


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    # SQLite ignores foreign keys unless asked; cascades rely on them
    if 'sqlite' in str(type(dbapi_connection)).lower():
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class Config:
    """
    Base configuration class. Contains default configuration settings
    and settings applicable to all environments.
    """
    SECRET_KEY = os.environ.get('SECRET_KEY') or secrets.token_hex(32)
    FLASK_ENV = os.environ.get('FLASK_ENV')
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')

    @classmethod
    def validate_required_config(cls) -> None:
        """Validate that all required configuration is present"""
        # Skip validation in testing environment or during migrations
        if os.environ.get('FLASK_ENV') == 'testing' or os.environ.get('SKIP_ENV_VALIDATION'):
            return

        required_vars = ['SECRET_KEY']
        if not (os.environ.get('DATABASE_URL') or os.environ.get('POSTGRES_URI')):
            required_vars.append('DATABASE_URL')

        missing_vars = [var for var in required_vars if not os.environ.get(var)]
        if missing_vars:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing_vars)}"
            )

    @staticmethod
    def get_required_env(key: str) -> str:
        """Get required environment variable or raise error"""
        value = os.environ.get(key)
        if not value:
            raise ConfigurationError(f"Required environment variable {key} is not set")
        return value

    # Database settings
    SQLALCHEMY_DATABASE_URI = os.environ.get('POSTGRES_URI') or \
        'sqlite:///' + os.path.join(basedir, 'syndic.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Application settings
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # request ceiling; import files are capped separately
    JSON_SORT_KEYS = False

    # Resident import pipeline
    IMPORT_ALLOWED_EXTENSIONS = ('.csv', '.tsv')
    IMPORT_MAX_FILE_SIZE = _env_int('IMPORT_MAX_FILE_SIZE', 5 * 1024 * 1024)  # 5MB
    IMPORT_CHUNK_SIZE = _env_int('IMPORT_CHUNK_SIZE', 3)
    IMPORT_THROTTLE_SECONDS = _env_float('IMPORT_THROTTLE_SECONDS', 0.5)
    IMPORT_MAX_RETRIES = _env_int('IMPORT_MAX_RETRIES', 3)
    IMPORT_RETRY_BASE_DELAY = _env_float('IMPORT_RETRY_BASE_DELAY', 1.0)
    CONFLICT_CHECK_TIMEOUT = _env_float('CONFLICT_CHECK_TIMEOUT', 15.0)

    # Block/apartment lookup cache
    PROPERTY_CACHE_TTL = _env_int('PROPERTY_CACHE_TTL', 300)  # 5 minutes

    @classmethod
    def init_app(cls, app):
        """Initialize application with this config"""
        if not event.contains(Engine, "connect", _enable_sqlite_foreign_keys):
            event.listen(Engine, "connect", _enable_sqlite_foreign_keys)


class DevelopmentConfig(Config):
    """Development environment configuration"""
    DEBUG = True
    TESTING = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')

    SQLALCHEMY_DATABASE_URI = os.environ.get('DEV_DATABASE_URL') or \
        Config.SQLALCHEMY_DATABASE_URI


class TestingConfig(Config):
    """Testing environment configuration"""
    TESTING = True
    DEBUG = True

    # Use in-memory SQLite for tests
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'

    # No real waiting in tests
    IMPORT_THROTTLE_SECONDS = 0
    IMPORT_RETRY_BASE_DELAY = 0
    PROPERTY_CACHE_TTL = 0


class ProductionConfig(Config):
    """Production environment configuration"""
    DEBUG = False
    TESTING = False

    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL', '')

    @classmethod
    def init_app(cls, app):
        """Production-specific initialization"""
        Config.init_app(app)

        if not cls.SQLALCHEMY_DATABASE_URI:
            cls.SQLALCHEMY_DATABASE_URI = cls.get_required_env('POSTGRES_URI')
            app.config['SQLALCHEMY_DATABASE_URI'] = cls.SQLALCHEMY_DATABASE_URI

        cls.validate_required_config()


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'testing': TestingConfig,
    'production': ProductionConfig,
    'default': DevelopmentConfig
}


def get_config(config_name: Optional[str] = None) -> type[Config]:
    """Get configuration class based on environment"""
    if config_name is None:
        config_name = os.environ.get('FLASK_ENV', 'development')

    return config.get(config_name, DevelopmentConfig)
