import os
from datetime import timedelta

from dotenv import load_dotenv

# Get the absolute path of the directory the config.py file is in.
basedir = os.path.abspath(os.path.dirname(__file__))

load_dotenv(os.path.join(basedir, '.env'))


class Config:
    # Security
    SECRET_KEY = os.environ.get("SECRET_KEY", "a_very_secure_default_secret_key")

    # Database
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL"
    ) or "sqlite:///" + os.path.join(basedir, "instance", "phr.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
    }

    # Session configuration
    PERMANENT_SESSION_LIFETIME = timedelta(hours=int(os.environ.get('SESSION_LIFETIME_HOURS', '24')))
    SESSION_COOKIE_SECURE = os.environ.get('SESSION_COOKIE_SECURE', 'False').lower() == 'true'
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    # Document storage
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER') or os.path.join(basedir, 'storage')
    DOCUMENTS_BUCKET = os.environ.get('DOCUMENTS_BUCKET', 'medical-documents')
    MAX_DOCUMENT_SIZE = int(os.environ.get('MAX_DOCUMENT_SIZE_MB', 5)) * 1024 * 1024  # MB to bytes
    ALLOWED_DOCUMENT_TYPES = {'application/pdf', 'image/jpeg', 'image/png'}
    # Request bodies are capped a little above the document limit so the
    # size check can report a friendly error instead of a 413
    MAX_CONTENT_LENGTH = MAX_DOCUMENT_SIZE * 3

    # Signed URLs
    SIGNED_URL_TTL = int(os.environ.get('SIGNED_URL_TTL', 60 * 60 * 24 * 7))  # 7 days
    DOWNLOAD_URL_TTL = int(os.environ.get('DOWNLOAD_URL_TTL', 60 * 60))  # 1 hour

    # Views
    DASHBOARD_VITALS_LIMIT = int(os.environ.get('DASHBOARD_VITALS_LIMIT', '10'))

    # Environment-specific settings
    ENV = os.environ.get('FLASK_ENV', 'production')
    DEBUG = os.environ.get('FLASK_DEBUG', 'False').lower() == 'true'
    TESTING = False

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    DEBUG = True
    SQLALCHEMY_ECHO = os.environ.get('SQLALCHEMY_ECHO', 'False').lower() == 'true'
    SESSION_COOKIE_SECURE = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    DEBUG = False
    SESSION_COOKIE_SECURE = True
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
        'pool_size': 10,
        'max_overflow': 20
    }


class TestingConfig(Config):
    TESTING = True
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    SESSION_COOKIE_SECURE = False
    SECRET_KEY = 'testing-secret-key'
    SERVER_NAME = 'localhost'


# Configuration dictionary
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': ProductionConfig
}
