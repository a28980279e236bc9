"""
Per-user Spotify credential storage.

The gateway reads and writes tokens through this service: access tokens
are stored as-is, refresh tokens encrypted with TokenService.
"""

import logging
from typing import Optional

from novaplayer.models.db import db, User
from novaplayer.services.base import safe_commit
from novaplayer.services.token_service import (
    TokenService,
    TokenEncryptionError,
)
from novaplayer.spotify.exceptions import SpotifySessionExpiredError

logger = logging.getLogger(__name__)


class CredentialStoreError(Exception):
    """Raised when tokens cannot be persisted."""

    pass


class CredentialService:
    """Credential store backed by the users table."""

    @staticmethod
    def _load_current(user_id: int) -> Optional[User]:
        # The request may already hold this User; reload it so a token
        # committed by another request is visible.
        return db.session.get(User, user_id, populate_existing=True)

    @staticmethod
    def get_access_token(user_id: int) -> Optional[str]:
        user = CredentialService._load_current(user_id)
        if not user:
            return None
        return user.spotify_access_token

    @staticmethod
    def get_refresh_token(user_id: int) -> Optional[str]:
        """
        Return the decrypted refresh token, or None if none is stored.

        Raises:
            SpotifySessionExpiredError: If the stored value cannot be
                decrypted; the user has to reconnect.
        """
        user = CredentialService._load_current(user_id)
        if not user or not user.spotify_refresh_token:
            return None
        try:
            return TokenService.decrypt_token(user.spotify_refresh_token)
        except TokenEncryptionError as e:
            logger.error(
                "Stored refresh token for user %s is unreadable: %s",
                user_id, e,
            )
            raise SpotifySessionExpiredError(
                "Stored Spotify credentials are unreadable, please reconnect"
            )

    @staticmethod
    def save_tokens(
        user_id: int,
        access_token: str,
        refresh_token: Optional[str] = None,
    ) -> None:
        """
        Persist a new access token and, when given, a new refresh token.

        A None refresh_token keeps the stored one.

        Raises:
            CredentialStoreError: If the user is gone or the commit fails.
        """
        user = db.session.get(User, user_id)
        if not user:
            raise CredentialStoreError(f"User {user_id} not found")

        user.spotify_access_token = access_token
        if refresh_token:
            user.spotify_refresh_token = TokenService.encrypt_token(
                refresh_token
            )
        safe_commit(
            f"store Spotify tokens for user {user_id}",
            CredentialStoreError,
        )
