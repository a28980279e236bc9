"""
Account and authentication routes: registration, verification, login,
password reset, and the Spotify OAuth flow.
"""

import logging
import secrets
from urllib.parse import urlencode

from flask import (
    current_app,
    jsonify,
    redirect,
    request,
    session,
)

from novaplayer.routes import (
    main,
    json_success,
    require_session,
    validate_json,
)
from novaplayer.schemas import (
    RegisterRequest,
    VerifyRequest,
    LoginRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
)
from novaplayer.services import (
    AuthService,
    UserService,
    AuthenticationError,
)
from novaplayer.spotify import SpotifyError

logger = logging.getLogger(__name__)

OAUTH_STATE_KEY = "spotify_oauth_state"


def _frontend_callback(**params):
    """Redirect to the frontend's OAuth landing page."""
    frontend_url = current_app.config["FRONTEND_URL"].rstrip("/")
    return redirect(f"{frontend_url}/callback?{urlencode(params)}")


# =============================================================================
# Local Accounts
# =============================================================================


@main.route("/users", methods=["POST"])
def register():
    """Create an account and email a verification code."""
    parsed, err = validate_json(RegisterRequest)
    if err:
        return err

    user = UserService.register(parsed.email, parsed.name, parsed.password)
    return json_success(
        "User created. Check your email for the verification code.",
        userId=user.id,
    ), 201


@main.route("/users/verify", methods=["POST"])
def verify():
    parsed, err = validate_json(VerifyRequest)
    if err:
        return err

    UserService.verify(parsed.email, parsed.code)
    return json_success("Account verified. You can now log in.")


@main.route("/auth/login", methods=["POST"])
def login():
    parsed, err = validate_json(LoginRequest)
    if err:
        return err

    return jsonify(AuthService.login(parsed.email, parsed.password))


@main.route("/auth/forgot-password", methods=["POST"])
def forgot_password():
    parsed, err = validate_json(ForgotPasswordRequest)
    if err:
        return err

    AuthService.forgot_password(parsed.email)
    return json_success("Email sent. Check your inbox.")


@main.route("/auth/reset-password", methods=["POST"])
def reset_password():
    parsed, err = validate_json(ResetPasswordRequest)
    if err:
        return err

    AuthService.reset_password(parsed.token, parsed.new_password)
    return json_success("Password updated successfully.")


# =============================================================================
# Spotify OAuth
# =============================================================================


@main.route("/auth/spotify")
def spotify_login():
    """Start the Spotify OAuth flow."""
    state = secrets.token_urlsafe(16)
    session[OAUTH_STATE_KEY] = state

    auth_manager = current_app.extensions["spotify_auth_manager"]
    auth_url = auth_manager.get_auth_url(state=state)
    logger.debug("Redirecting to Spotify authorization")
    return redirect(auth_url)


@main.route("/auth/spotify/callback")
def spotify_callback():
    """
    Handle the OAuth callback from Spotify.

    Always redirects to the frontend: with ``?token=<jwt>`` on success,
    with ``?error=<code>`` otherwise.
    """
    error = request.args.get("error")
    if error:
        logger.warning(f"OAuth error from Spotify: {error}")
        return _frontend_callback(error=error)

    expected_state = session.pop(OAUTH_STATE_KEY, None)
    if not expected_state or request.args.get("state") != expected_state:
        logger.warning("OAuth state mismatch")
        return _frontend_callback(error="state_mismatch")

    code = request.args.get("code")
    if not code:
        logger.error("No authorization code in callback")
        return _frontend_callback(error="missing_code")

    auth_manager = current_app.extensions["spotify_auth_manager"]
    try:
        token_info = auth_manager.exchange_code(code)
        profile = auth_manager.get_profile(token_info.access_token)
    except SpotifyError as e:
        logger.error(f"Spotify OAuth failed: {e}")
        return _frontend_callback(error="spotify_auth_failed")

    try:
        user = AuthService.link_spotify_user(profile, token_info)
    except AuthenticationError as e:
        logger.error(f"Linking Spotify account failed: {e}")
        return _frontend_callback(error="link_failed")

    session_token = AuthService.generate_session_token(user)
    return _frontend_callback(token=session_token["access_token"])


# =============================================================================
# Session
# =============================================================================


@main.route("/auth/me")
@require_session
def me(user=None):
    """Public profile of the logged-in user."""
    return jsonify(AuthService.get_profile(user.id))


@main.route("/auth/refresh-token", methods=["POST"])
@require_session
def refresh_spotify_token(user=None):
    """Force a Spotify token refresh for the logged-in user."""
    gateway = current_app.extensions["spotify_gateway"]
    access_token = gateway.refresh_credentials(user.id)
    return json_success("Spotify token refreshed.", accessToken=access_token)
