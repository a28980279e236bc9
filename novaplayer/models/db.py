"""
SQLAlchemy database models for NovaPlayer.

Defines the User model: local credentials, verification and reset
state, and the linked Spotify account.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, Any

from flask_sqlalchemy import SQLAlchemy

logger = logging.getLogger(__name__)

# The SQLAlchemy instance. Initialized with the Flask app in create_app().
db = SQLAlchemy()


class User(db.Model):
    """
    Application user.

    Either a local account (email + password hash) or an OAuth-only
    account created by the Spotify callback (no password). A local
    account linked to Spotify later keeps its password.
    """

    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    # Nullable: Spotify profiles may not expose an email.
    email = db.Column(db.String(255), unique=True, nullable=True, index=True)
    name = db.Column(db.String(255), nullable=True)
    password_hash = db.Column(db.String(255), nullable=True)

    is_verified = db.Column(db.Boolean, nullable=False, default=False)
    verification_code = db.Column(db.String(16), nullable=True)
    reset_token = db.Column(db.String(255), unique=True, nullable=True)
    reset_token_expires_at = db.Column(db.DateTime, nullable=True)

    spotify_id = db.Column(
        db.String(255), unique=True, nullable=True, index=True
    )
    spotify_access_token = db.Column(db.Text, nullable=True)
    # Stored as "<ivHex>:<ciphertextHex>" (see TokenService).
    spotify_refresh_token = db.Column(db.Text, nullable=True)
    profile_image_url = db.Column(db.String(1024), nullable=True)

    created_at = db.Column(
        db.DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime,
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    @property
    def is_oauth_only(self) -> bool:
        return self.password_hash is None

    @property
    def is_spotify_connected(self) -> bool:
        return bool(self.spotify_access_token)

    def to_dict(self) -> Dict[str, Any]:
        """Public profile. Never includes secrets or tokens."""
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "image": self.profile_image_url,
            "spotify_id": self.spotify_id,
        }

    def __repr__(self) -> str:
        return f"<User {self.id} ({self.email or self.spotify_id})>"
