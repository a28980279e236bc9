import os
from dotenv import load_dotenv

load_dotenv()

# Settings without which the app refuses to start.
REQUIRED_SETTINGS = (
    'SECRET_KEY',
    'JWT_SECRET',
    'ENCRYPTION_KEY',
    'SPOTIFY_CLIENT_ID',
    'SPOTIFY_CLIENT_SECRET',
    'SPOTIFY_REDIRECT_URI',
)


def _split_origins(value):
    return [origin.strip() for origin in value.split(',') if origin.strip()]


class Config:
    """Base configuration."""
    SECRET_KEY = os.getenv('SECRET_KEY')
    JWT_SECRET = os.getenv('JWT_SECRET')
    JWT_EXPIRY_SECONDS = 3600  # 1 hour
    ENCRYPTION_KEY = os.getenv('ENCRYPTION_KEY')

    SPOTIFY_CLIENT_ID = os.getenv('SPOTIFY_CLIENT_ID')
    SPOTIFY_CLIENT_SECRET = os.getenv('SPOTIFY_CLIENT_SECRET')
    SPOTIFY_REDIRECT_URI = os.getenv('SPOTIFY_REDIRECT_URI')
    SPOTIFY_RETRY_BUDGET = int(os.getenv('SPOTIFY_RETRY_BUDGET', 3))

    FRONTEND_URL = os.getenv('FRONTEND_URL', 'http://localhost:3001')
    ALLOWED_ORIGINS = _split_origins(
        os.getenv('ALLOWED_ORIGINS', 'http://localhost:3000,http://localhost:3001')
    )

    # Mail (SendGrid). Without an API key mails are logged, not sent.
    SENDGRID_API_KEY = os.getenv('SENDGRID_API_KEY')
    MAIL_FROM = os.getenv('MAIL_FROM', 'no-reply@novaplayer.app')

    # Persistence
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///novaplayer.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    REDIS_URL = os.getenv('REDIS_URL')

    # Response cache
    CACHE_KEY_PREFIX = 'novaplayer:cache:'
    CACHE_STALE_RETENTION = 86400  # keep stale entries around for a day

    # Session configuration (OAuth state only; API auth is stateless)
    SESSION_TYPE = 'filesystem'
    SESSION_FILE_DIR = './.flask_session/'
    SESSION_PERMANENT = False
    PERMANENT_SESSION_LIFETIME = 600
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    BCRYPT_ROUNDS = 12

    # Application settings
    DEBUG = False
    TESTING = False
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
    PORT = int(os.getenv('PORT', 9000))
    HOST = os.getenv('HOST', '0.0.0.0')


class ProductionConfig(Config):
    """Production configuration."""
    SESSION_COOKIE_SECURE = True


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG')
    HOST = 'localhost'


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    DEBUG = True
    SECRET_KEY = 'test-secret-key-for-testing'
    JWT_SECRET = 'test-jwt-secret-for-testing'
    ENCRYPTION_KEY = 'test-encryption-key-32-bytes-ok!'
    SPOTIFY_CLIENT_ID = 'test_client_id'
    SPOTIFY_CLIENT_SECRET = 'test_client_secret'
    SPOTIFY_REDIRECT_URI = 'http://localhost:9000/auth/spotify/callback'
    FRONTEND_URL = 'http://localhost:3001'
    SENDGRID_API_KEY = None
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    REDIS_URL = None
    BCRYPT_ROUNDS = 4


def validate_required_config(settings) -> None:
    """
    Ensure every required setting has a value.

    Args:
        settings: A mapping such as Flask's app.config.

    Raises:
        ValueError: Listing every missing setting.
    """
    missing = [key for key in REQUIRED_SETTINGS if not settings.get(key)]
    if missing:
        raise ValueError(
            f"Missing required configuration: {', '.join(missing)}"
        )


# Dictionary for easy config selection
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
