# app/core/config.py

import os


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in ("true", "1", "t", "yes")


class Config:
    """Settings shared by every environment."""
    # Firebase project resources
    FIREBASE_STORAGE_BUCKET = os.getenv('FIREBASE_STORAGE_BUCKET')
    FIREBASE_WEB_API_KEY = os.getenv('FIREBASE_WEB_API_KEY')

    # Identity Toolkit REST endpoint (point at the auth emulator for local runs)
    IDENTITY_TOOLKIT_URL = os.getenv('IDENTITY_TOOLKIT_URL', 'https://identitytoolkit.googleapis.com/v1')
    IDENTITY_REQUEST_TIMEOUT = float(os.getenv('IDENTITY_REQUEST_TIMEOUT', 10))
    VERIFY_REVOKED_TOKENS = _env_flag('VERIFY_REVOKED_TOKENS')

    # Username-only accounts are stored as <username>@<PRIVATE_EMAIL_DOMAIN>
    PRIVATE_EMAIL_DOMAIN = os.getenv('PRIVATE_EMAIL_DOMAIN', 'private.marneilx.com')

    FEED_LIMIT = 50
    PRESENCE_WINDOW_SECONDS = 5 * 60
    PRESENCE_HEARTBEAT_SECONDS = 2 * 60
    PRESENCE_QUERY_LIMIT = 50
    ONLINE_VISIBLE_LIMIT = 5
    STREAM_KEEPALIVE_SECONDS = float(os.getenv('STREAM_KEEPALIVE_SECONDS', 15))

    MAX_CONTENT_LENGTH = 10 * 1024 * 1024
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', '*')


class DevelopmentConfig(Config):
    """Local development against the dev Firebase project."""
    DEBUG = True
    FIREBASE_CREDENTIALS_PATH = os.getenv('DEV_FIREBASE_CREDENTIALS_PATH')


class TestingConfig(Config):
    """Test runs. Firestore and the Firebase services are injected by the tests."""
    TESTING = True
    DEBUG = False
    FIREBASE_CREDENTIALS_PATH = os.getenv('TEST_FIREBASE_CREDENTIALS_PATH')
    FIREBASE_STORAGE_BUCKET = 'test-bucket'
    STREAM_KEEPALIVE_SECONDS = 0.05


class ProductionConfig(Config):
    DEBUG = False
    FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH')


# FLASK_ENV picks the class in create_app
config_by_name = dict(
    development=DevelopmentConfig,
    testing=TestingConfig,
    production=ProductionConfig,
)
