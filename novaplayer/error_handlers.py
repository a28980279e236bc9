"""
Global Flask error handlers.

Converts service-layer and Spotify exceptions, plus Pydantic validation
errors, into JSON responses of the form
``{"success": false, "message": ..., "category": "error"}``.
"""

import logging
from flask import jsonify
from pydantic import ValidationError

from novaplayer.security import SessionTokenError
from novaplayer.services import (
    AuthenticationError,
    IncorrectCredentialsError,
    NotVerifiedError,
    InvalidOrExpiredTokenError,
    UserServiceError,
    UserNotFoundError,
    UserAlreadyExistsError,
    InvalidCodeError,
    CredentialStoreError,
)
from novaplayer.spotify.exceptions import (
    SpotifyError,
    SpotifyNotConnectedError,
    SpotifySessionExpiredError,
    SpotifyRateLimitError,
    SpotifyNotFoundError,
    SpotifyAPIError,
)

logger = logging.getLogger(__name__)


def json_error_response(message: str, status_code: int, category: str = "error"):
    """Create a standardized JSON error response."""
    return (
        jsonify({"success": False, "message": message, "category": category}),
        status_code,
    )


def register_error_handlers(app):
    """
    Register global error handlers with the Flask app.

    Args:
        app: The Flask application instance.
    """

    # =========================================================================
    # Pydantic Validation Errors (400)
    # =========================================================================

    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError):
        """Handle Pydantic validation errors."""
        errors_list = []
        for err in error.errors():
            field = ".".join(str(loc) for loc in err["loc"])
            errors_list.append(f"{field}: {err['msg']}")

        message = "; ".join(errors_list) if errors_list else "Validation failed"
        logger.warning(f"Validation error: {message}")
        return json_error_response(message, 400)

    # =========================================================================
    # Session & Login Errors
    # =========================================================================

    @app.errorhandler(SessionTokenError)
    def handle_session_token_error(error: SessionTokenError):
        logger.info(f"Rejected session token: {error}")
        return json_error_response("Session expired. Please log in again.", 401)

    @app.errorhandler(IncorrectCredentialsError)
    def handle_incorrect_credentials(error: IncorrectCredentialsError):
        return json_error_response(str(error), 401)

    @app.errorhandler(NotVerifiedError)
    def handle_not_verified(error: NotVerifiedError):
        return json_error_response(str(error), 403)

    @app.errorhandler(InvalidOrExpiredTokenError)
    def handle_invalid_reset_token(error: InvalidOrExpiredTokenError):
        return json_error_response(str(error), 400)

    @app.errorhandler(AuthenticationError)
    def handle_authentication_error(error: AuthenticationError):
        """Persistence failures during login or linking."""
        logger.error(f"Authentication error: {error}")
        return json_error_response("Authentication failed.", 500)

    # =========================================================================
    # User Errors
    # =========================================================================

    @app.errorhandler(UserNotFoundError)
    def handle_user_not_found(error: UserNotFoundError):
        logger.info(f"User not found: {error}")
        return json_error_response("User not found.", 404)

    @app.errorhandler(UserAlreadyExistsError)
    def handle_user_already_exists(error: UserAlreadyExistsError):
        return json_error_response("Email is already registered.", 409)

    @app.errorhandler(InvalidCodeError)
    def handle_invalid_code(error: InvalidCodeError):
        return json_error_response("Incorrect verification code.", 400)

    @app.errorhandler(UserServiceError)
    def handle_user_service_error(error: UserServiceError):
        logger.error(f"User service error: {error}")
        return json_error_response("User operation failed.", 500)

    @app.errorhandler(CredentialStoreError)
    def handle_credential_store_error(error: CredentialStoreError):
        logger.error(f"Credential store error: {error}")
        return json_error_response("Could not save Spotify credentials.", 500)

    # =========================================================================
    # Spotify Errors
    # =========================================================================

    @app.errorhandler(SpotifyNotConnectedError)
    def handle_not_connected(error: SpotifyNotConnectedError):
        logger.info(f"Spotify not connected: {error}")
        return json_error_response("Spotify account is not connected.", 401)

    @app.errorhandler(SpotifySessionExpiredError)
    def handle_session_expired(error: SpotifySessionExpiredError):
        logger.warning(f"Spotify session expired: {error}")
        return json_error_response(
            "Spotify session expired. Please reconnect Spotify.", 401
        )

    @app.errorhandler(SpotifyRateLimitError)
    def handle_rate_limit(error: SpotifyRateLimitError):
        response, status = json_error_response(
            "Spotify is rate limiting requests. Please try again shortly.", 429
        )
        if error.retry_after is not None:
            response.headers["Retry-After"] = str(int(error.retry_after))
        return response, status

    @app.errorhandler(SpotifyNotFoundError)
    def handle_spotify_not_found(error: SpotifyNotFoundError):
        logger.info(f"Spotify resource not found: {error}")
        return json_error_response("Resource not found on Spotify.", 404)

    @app.errorhandler(SpotifyAPIError)
    def handle_spotify_api_error(error: SpotifyAPIError):
        logger.error(f"Spotify API error: {error}")
        return json_error_response("Spotify is unavailable right now.", 502)

    @app.errorhandler(SpotifyError)
    def handle_spotify_error(error: SpotifyError):
        """Remaining auth-flow failures (code exchange, profile fetch)."""
        logger.error(f"Spotify error: {error}")
        return json_error_response("Spotify request failed.", 502)

    # =========================================================================
    # HTTP Error Codes
    # =========================================================================

    @app.errorhandler(400)
    def handle_bad_request(error):
        return json_error_response("Bad request.", 400)

    @app.errorhandler(401)
    def handle_unauthorized(error):
        return json_error_response("Please log in first.", 401)

    @app.errorhandler(404)
    def handle_not_found(error):
        return json_error_response("Resource not found.", 404)

    @app.errorhandler(405)
    def handle_method_not_allowed(error):
        return json_error_response("Method not allowed.", 405)

    @app.errorhandler(500)
    def handle_internal_error(error):
        logger.error(f"Internal server error: {error}", exc_info=True)
        return json_error_response("An unexpected error occurred.", 500)

    logger.info("Global error handlers registered")
