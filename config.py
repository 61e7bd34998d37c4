"""Configuration module for Flask application."""
import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _default_data_dir() -> str:
    """Per-user directory holding the desktop SQLite file."""
    return os.getenv('DESKTOP_DATA_DIR') or str(Path.home() / '.saga-inventory')


class Config:
    """Base configuration class."""

    # Flask
    SECRET_KEY = os.getenv('SECRET_KEY', 'dev-secret-key-change-in-production')
    DEBUG = os.getenv('FLASK_DEBUG', '0') == '1'
    ENV = os.getenv('FLASK_ENV', 'development')
    TESTING = False
    PORT = int(os.getenv('PORT', '5000'))
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # Desktop mode: embedded SQLite store in the user's data directory
    DESKTOP_MODE = os.getenv('DESKTOP_MODE', 'false').lower() == 'true'
    DESKTOP_DATA_DIR = _default_data_dir()
    DESKTOP_DB_FILENAME = 'saga-inventory.db'
    DESKTOP_WINDOW_DELAY = float(os.getenv('DESKTOP_WINDOW_DELAY', '3'))

    # Database - Support multiple environment variable naming conventions
    # Priority: DATABASE_URL > DB_* > POSTGRES_*
    DATABASE_URL = os.getenv('DATABASE_URL')

    if not DATABASE_URL:
        if DESKTOP_MODE:
            DATABASE_URL = f"sqlite:///{Path(DESKTOP_DATA_DIR) / DESKTOP_DB_FILENAME}"
        else:
            # Try DB_* variables (Docker style)
            DB_HOST = os.getenv('DB_HOST') or os.getenv('POSTGRES_HOST', 'localhost')
            DB_PORT = os.getenv('DB_PORT') or os.getenv('POSTGRES_PORT', '5432')
            DB_NAME = os.getenv('DB_NAME') or os.getenv('POSTGRES_DB', 'inventory')
            DB_USER = os.getenv('DB_USER') or os.getenv('POSTGRES_USER', 'inventory')
            DB_PASSWORD = os.getenv('DB_PASSWORD') or os.getenv('POSTGRES_PASSWORD', 'inventory')

            DATABASE_URL = (
                f"postgresql://{DB_USER}:{DB_PASSWORD}"
                f"@{DB_HOST}:{DB_PORT}/{DB_NAME}"
            )

    # SQLAlchemy
    SQLALCHEMY_DATABASE_URI = DATABASE_URL
    SQLALCHEMY_ECHO = os.getenv('SQLALCHEMY_ECHO', 'false').lower() == 'true'
    AUTO_CREATE_SCHEMA = os.getenv('AUTO_CREATE_SCHEMA', 'true').lower() == 'true'

    # CSV import
    MAX_CONTENT_LENGTH = int(os.getenv('MAX_CONTENT_LENGTH', 5 * 1024 * 1024))  # 5MB
    IMPORT_ERROR_PREVIEW = int(os.getenv('IMPORT_ERROR_PREVIEW', '3'))

    # Redis Cache Configuration
    # List endpoints are memoized per resource and invalidated on every write
    REDIS_URL = os.getenv('REDIS_URL', 'redis://localhost:6379/0')
    CACHE_ENABLED = os.getenv('CACHE_ENABLED', 'false').lower() == 'true'
    CACHE_DEFAULT_TTL = int(os.getenv('CACHE_DEFAULT_TTL', '60'))  # seconds
    CACHE_KEY_PREFIX = os.getenv('CACHE_KEY_PREFIX', 'saga')

    # Error tracking (production only)
    SENTRY_DSN = os.getenv('SENTRY_DSN')


class DesktopConfig(Config):
    """Configuration used by the desktop launcher's server process."""

    DESKTOP_MODE = True
    ENV = 'production'
    CACHE_ENABLED = False
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL') or (
        f"sqlite:///{Path(Config.DESKTOP_DATA_DIR) / Config.DESKTOP_DB_FILENAME}"
    )


class TestConfig(Config):
    """Configuration for the pytest suite (in-memory SQLite, no Redis)."""

    TESTING = True
    ENV = 'testing'
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ECHO = False
    AUTO_CREATE_SCHEMA = True
    CACHE_ENABLED = False
    SENTRY_DSN = None
