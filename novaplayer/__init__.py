import os
import logging
from typing import Optional
from flask import Flask
from flask_cors import CORS
from flask_session import Session
import redis
from flask_migrate import Migrate
from config import config, validate_required_config

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Global Redis client for sessions and caching (initialized in create_app)
_redis_client: Optional[redis.Redis] = None
_migrate: Optional[Migrate] = None


def _create_redis_client(redis_url: str) -> redis.Redis:
    """
    Create a Redis client from URL.

    Raises:
        redis.ConnectionError: If connection fails.
    """
    return redis.from_url(redis_url, decode_responses=False)


def get_redis_client() -> Optional[redis.Redis]:
    """
    Get the global Redis client.

    Returns:
        Redis client if configured and reachable, None otherwise.
    """
    return _redis_client


def _create_response_cache(app: Flask):
    """Redis-backed cache when Redis is available, in-process otherwise."""
    from novaplayer.spotify.cache import (
        MemoryCacheBackend,
        RedisCacheBackend,
        ResponseCache,
    )

    if _redis_client is not None:
        backend = RedisCacheBackend(
            _redis_client,
            stale_retention=app.config.get("CACHE_STALE_RETENTION", 86400),
        )
        logger.info("Response cache backed by Redis")
    else:
        backend = MemoryCacheBackend()
        logger.info("Response cache kept in process memory")

    return ResponseCache(
        backend,
        key_prefix=app.config.get("CACHE_KEY_PREFIX", "novaplayer:cache:"),
    )


def is_db_available() -> bool:
    """
    Check if the SQLAlchemy database is initialized and available.

    Returns:
        True if database is available, False otherwise.
    """
    from novaplayer.models.db import db
    from sqlalchemy.exc import SQLAlchemyError

    try:
        db.session.execute(db.text("SELECT 1"))
        return True
    except SQLAlchemyError:
        return False


def create_app(config_name=None):
    """Create and configure the Flask application."""
    if config_name is None:
        config_name = os.getenv("FLASK_ENV", "production")

    if not isinstance(config_name, str) or config_name not in config:
        config_name = "production"

    logger.info("Creating app with config: %s", config_name)

    app = Flask(__name__)
    app.config.from_object(config[config_name])

    # Missing secrets are fatal in every environment
    try:
        validate_required_config(app.config)
    except ValueError as e:
        logger.error("Configuration validation failed: %s", e)
        raise

    logging.getLogger().setLevel(app.config.get("LOG_LEVEL", "INFO"))
    logger.info("SPOTIFY_REDIRECT_URI: %s", app.config.get("SPOTIFY_REDIRECT_URI"))

    # Configure Redis for session storage and caching
    global _redis_client
    redis_url = app.config.get("REDIS_URL")
    if redis_url:
        try:
            redis_client = _create_redis_client(redis_url)
            redis_client.ping()
            app.config["SESSION_TYPE"] = "redis"
            app.config["SESSION_REDIS"] = redis_client
            _redis_client = redis_client
            logger.info(
                "Redis session storage configured: %s", redis_url.split("@")[-1]
            )
        except redis.ConnectionError as e:
            logger.warning(
                "Redis connection failed: %s. Falling back to filesystem sessions.", e
            )
            _redis_client = None
    else:
        logger.warning("REDIS_URL not configured. Using filesystem sessions.")
        _redis_client = None

    if _redis_client is None:
        app.config["SESSION_TYPE"] = "filesystem"
        os.makedirs(app.config["SESSION_FILE_DIR"], exist_ok=True)

    # Server-side sessions hold the OAuth state only
    Session(app)

    CORS(
        app,
        origins=app.config.get("ALLOWED_ORIGINS", []),
        supports_credentials=True,
    )

    # Token encryption is required: refresh tokens are never stored in clear
    from novaplayer.services.token_service import TokenService

    TokenService.initialize(app.config["ENCRYPTION_KEY"])

    # Initialize SQLAlchemy database
    from novaplayer.models.db import db

    db.init_app(app)

    global _migrate
    _migrate = Migrate(app, db)

    with app.app_context():
        if app.config.get("TESTING"):
            # Tests use in-memory SQLite -- create tables directly
            db.create_all()
        else:
            migrations_dir = os.path.join(
                os.path.dirname(os.path.dirname(__file__)),
                'migrations'
            )
            if os.path.isdir(migrations_dir):
                from flask_migrate import upgrade
                upgrade()
            else:
                logger.warning(
                    "No migrations/ directory found. "
                    "Using db.create_all() as fallback. "
                    "Run 'flask db init && flask db migrate' "
                    "to set up Alembic migrations."
                )
                db.create_all()

    logger.info(
        "SQLAlchemy database initialized: %s",
        app.config.get("SQLALCHEMY_DATABASE_URI", "not set"),
    )

    # Spotify integration: one gateway and cache per process
    from novaplayer.services.credential_service import CredentialService
    from novaplayer.spotify import (
        SpotifyAuthManager,
        SpotifyCredentials,
        SpotifyGateway,
    )

    auth_manager = SpotifyAuthManager(
        SpotifyCredentials.from_flask_config(app.config)
    )
    app.extensions["spotify_auth_manager"] = auth_manager
    app.extensions["spotify_gateway"] = SpotifyGateway(
        CredentialService,
        auth_manager,
        default_retry_budget=app.config.get("SPOTIFY_RETRY_BUDGET", 3),
    )
    app.extensions["spotify_cache"] = _create_response_cache(app)

    # Register blueprints
    from novaplayer.routes import main as main_blueprint

    app.register_blueprint(main_blueprint)

    # Register global error handlers
    from novaplayer.error_handlers import register_error_handlers

    register_error_handlers(app)

    return app
