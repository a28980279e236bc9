"""
Flask routes package for NovaPlayer.

This module handles HTTP requests and responses only.
All business logic is delegated to the services and spotify layers.

The single `main` Blueprint is split across feature modules for
navigability. All modules import `main` from this package and
register routes on it.
"""

from flask import (
    Blueprint,
    current_app,
    request,
    jsonify,
)
import functools
import logging

from pydantic import ValidationError

from novaplayer.services import AuthService
from novaplayer.spotify import SpotifyAPI

logger = logging.getLogger(__name__)
main = Blueprint("main", __name__)


# =============================================================================
# Helper Functions (shared across all route modules)
# =============================================================================


def json_error(message: str, status_code: int = 400) -> tuple:
    """Return a JSON error response."""
    return (
        jsonify({
            "success": False,
            "message": message,
            "category": "error",
        }),
        status_code,
    )


def json_success(message: str, **extra) -> dict:
    """Return a JSON success response."""
    return jsonify({
        "success": True,
        "message": message,
        "category": "success",
        **extra,
    })


def validate_json(schema_class, required: bool = True):
    """
    Parse and validate the JSON request body against a Pydantic schema.

    Args:
        schema_class: The Pydantic model to validate with.
        required: When False, a missing or empty body validates as ``{}``.

    Returns:
        (parsed_model, None) on success.
        (None, error_response_tuple) on failure.

    Usage::

        parsed, err = validate_json(MySchema)
        if err:
            return err
        # use parsed.field ...
    """
    data = request.get_json(silent=True)
    if not data:
        if required:
            return None, json_error(
                "Request body must be JSON.", 400
            )
        data = {}
    if not isinstance(data, dict):
        return None, json_error("Request body must be a JSON object.", 400)

    try:
        return schema_class(**data), None
    except ValidationError as e:
        first_error = e.errors()[0] if e.errors() else {}
        msg = first_error.get("msg", "Invalid input")
        return None, json_error(
            f"Validation error: {msg}", 400
        )


def get_bearer_token():
    """Return the token from ``Authorization: Bearer <token>``, or None."""
    header = request.headers.get("Authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def require_session(f):
    """
    Decorator that enforces a valid session token.

    Injects ``user`` (User model) as a keyword argument. Invalid or
    expired tokens raise SessionTokenError, answered with 401 by the
    global error handlers.

    Usage::

        @main.route("/endpoint")
        @require_session
        def my_route(user=None):
            ...
    """
    @functools.wraps(f)
    def decorated_function(*args, **kwargs):
        token = get_bearer_token()
        if not token:
            return json_error("Please log in first.", 401)

        kwargs["user"] = AuthService.authenticate(token)
        return f(*args, **kwargs)

    return decorated_function


def get_spotify_api(user) -> SpotifyAPI:
    """Build a SpotifyAPI bound to ``user`` and the app's gateway and cache."""
    return SpotifyAPI(
        current_app.extensions["spotify_gateway"],
        user.id,
        user.spotify_id,
        cache=current_app.extensions.get("spotify_cache"),
    )


# =============================================================================
# Import route modules to register their routes on the Blueprint.
# These must be at the bottom to avoid circular imports.
# =============================================================================

from novaplayer.routes import (  # noqa: E402, F401
    core,
    auth,
    library,
    player,
    browse,
)
