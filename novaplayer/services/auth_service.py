"""
Authentication service.

Local login, password reset, Spotify account linking and session token
issuance. Session tokens are stateless JWTs; see novaplayer.security.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from flask import current_app

from novaplayer.models.db import db, User
from novaplayer.security import (
    decode_session_token,
    encode_session_token,
    generate_reset_token,
    hash_password,
    verify_password,
    SessionTokenError,
)
from novaplayer.services.base import normalize_email, safe_commit
from novaplayer.services.email_service import EmailService
from novaplayer.services.token_service import TokenService
from novaplayer.services.user_service import UserService, UserNotFoundError
from novaplayer.spotify.auth import SpotifyProfile, TokenInfo

logger = logging.getLogger(__name__)

RESET_TOKEN_LIFETIME = timedelta(hours=1)


class AuthenticationError(Exception):
    """Base exception for authentication failures."""

    pass


class IncorrectCredentialsError(AuthenticationError):
    """Raised when email/password do not match an account."""

    pass


class NotVerifiedError(AuthenticationError):
    """Raised when logging in before verifying the email."""

    pass


class InvalidOrExpiredTokenError(AuthenticationError):
    """Raised when a password reset token is unknown or expired."""

    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AuthService:
    """Service for login, password reset and Spotify linking."""

    @staticmethod
    def generate_session_token(user: User) -> Dict[str, Any]:
        """
        Issue a session token for ``user``.

        Returns:
            ``{"access_token": <jwt>, "user": <public profile>}``
        """
        config = current_app.config
        token = encode_session_token(
            user.id,
            user.email,
            secret=config["JWT_SECRET"],
            expiry_seconds=config.get("JWT_EXPIRY_SECONDS", 3600),
            now=_utcnow(),
        )
        return {"access_token": token, "user": user.to_dict()}

    @staticmethod
    def authenticate(token: str) -> User:
        """
        Resolve a session token to its user.

        Raises:
            SessionTokenError: If the token is invalid, expired, or its
                user no longer exists.
        """
        claims = decode_session_token(token, current_app.config["JWT_SECRET"])
        user = UserService.get_by_id(claims["user_id"])
        if not user:
            raise SessionTokenError("Session user no longer exists")
        return user

    @staticmethod
    def login(email: str, password: str) -> Dict[str, Any]:
        """
        Log in with email and password.

        The password is checked before the verified flag so that a wrong
        password never reveals whether an account is verified.

        Raises:
            IncorrectCredentialsError: Unknown email, OAuth-only account,
                or wrong password.
            NotVerifiedError: Correct password, email not yet verified.
        """
        user = UserService.get_by_email(email)
        if not user:
            raise IncorrectCredentialsError("Incorrect credentials")

        if user.is_oauth_only:
            raise IncorrectCredentialsError(
                "This account was created with Spotify. Please log in with Spotify."
            )

        if not verify_password(password, user.password_hash):
            logger.info("Failed login for %s", user.email)
            raise IncorrectCredentialsError("Incorrect credentials")

        if not user.is_verified:
            raise NotVerifiedError(
                "You must verify your email before logging in."
            )

        logger.info("User %s logged in", user.id)
        return AuthService.generate_session_token(user)

    @staticmethod
    def forgot_password(email: str) -> None:
        """
        Issue a 1-hour reset token and email the reset link.

        A new request replaces any earlier token.

        Raises:
            UserNotFoundError: If no account has this email.
        """
        user = UserService.get_by_email(email)
        if not user:
            raise UserNotFoundError(f"User not found for email: {email}")

        token = generate_reset_token()
        user.reset_token = token
        user.reset_token_expires_at = _utcnow() + RESET_TOKEN_LIFETIME
        safe_commit(f"issue reset token for user {user.id}", AuthenticationError)

        EmailService.send_password_reset_email(user.email, token)

    @staticmethod
    def reset_password(token: str, new_password: str) -> None:
        """
        Set a new password using a reset token. The token is single-use.

        Raises:
            InvalidOrExpiredTokenError: If the token is unknown or expired.
        """
        user = None
        if token:
            user = User.query.filter_by(reset_token=token).first()
        if not user:
            raise InvalidOrExpiredTokenError("Invalid or expired token")

        expires_at = user.reset_token_expires_at
        if expires_at is None or _as_utc(expires_at) < _utcnow():
            raise InvalidOrExpiredTokenError("Token has expired")

        user.password_hash = hash_password(
            new_password, current_app.config.get("BCRYPT_ROUNDS", 12)
        )
        user.reset_token = None
        user.reset_token_expires_at = None
        safe_commit(f"reset password for user {user.id}", AuthenticationError)

    @staticmethod
    def link_spotify_user(profile: SpotifyProfile, token_info: TokenInfo) -> User:
        """
        Find or create the local user for a Spotify login and store tokens.

        Matches an existing user by Spotify id first, then by email. New
        users are created verified, without a password. The stored
        refresh token is kept when Spotify did not issue a new one.

        Raises:
            AuthenticationError: If the user cannot be saved.
        """
        user = User.query.filter_by(spotify_id=profile.spotify_id).first()
        email = normalize_email(profile.email)
        if not user and email:
            user = User.query.filter_by(email=email).first()

        encrypted_refresh: Optional[str] = None
        if token_info.refresh_token:
            encrypted_refresh = TokenService.encrypt_token(
                token_info.refresh_token
            )

        if user:
            user.spotify_id = profile.spotify_id
            if profile.image_url:
                user.profile_image_url = profile.image_url
            if not user.name:
                user.name = profile.display_name
            user.spotify_access_token = token_info.access_token
            if encrypted_refresh:
                user.spotify_refresh_token = encrypted_refresh
            logger.info(
                "Linked Spotify account %s to user %s",
                profile.spotify_id, user.id,
            )
        else:
            user = User(
                email=email,
                name=profile.display_name,
                spotify_id=profile.spotify_id,
                profile_image_url=profile.image_url,
                spotify_access_token=token_info.access_token,
                spotify_refresh_token=encrypted_refresh,
                is_verified=True,
                password_hash=None,
            )
            db.session.add(user)
            logger.info("Created user for Spotify account %s", profile.spotify_id)

        safe_commit(
            f"link Spotify account {profile.spotify_id}", AuthenticationError
        )
        return user

    @staticmethod
    def get_profile(user_id: int) -> Dict[str, Any]:
        """
        Public profile of a user.

        Raises:
            UserNotFoundError: If the user does not exist.
        """
        user = UserService.get_by_id(user_id)
        if not user:
            raise UserNotFoundError(f"User {user_id} not found")
        return user.to_dict()
