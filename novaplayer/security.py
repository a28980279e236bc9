"""
Password hashing and session token utilities.

- Password hashing with bcrypt
- Stateless session tokens (JWT, HS256)
- Random verification codes and password reset tokens
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt

logger = logging.getLogger(__name__)

JWT_ALGORITHM = "HS256"
SESSION_TOKEN_EXPIRY_SECONDS = 3600
VERIFICATION_CODE_DIGITS = 6


class SessionTokenError(Exception):
    """Raised when a session token is missing, invalid or expired."""

    pass


def hash_password(password: str, rounds: int = 12) -> str:
    """Hash a password with bcrypt."""
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """
    Check a password against a bcrypt hash.

    Returns False for OAuth-only accounts (no hash) and for malformed
    hashes.
    """
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(
            password.encode("utf-8"), password_hash.encode("utf-8")
        )
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def encode_session_token(
    user_id: int,
    email: Optional[str],
    secret: str,
    expiry_seconds: int = SESSION_TOKEN_EXPIRY_SECONDS,
    now: Optional[datetime] = None,
) -> str:
    """
    Issue a signed session token.

    Claims: ``sub`` (user id as a string), ``email``, ``iat``, ``exp``.
    """
    issued_at = now or datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "email": email,
        "iat": issued_at,
        "exp": issued_at + timedelta(seconds=expiry_seconds),
    }
    return jwt.encode(payload, secret, algorithm=JWT_ALGORITHM)


def decode_session_token(token: str, secret: str) -> Dict[str, Any]:
    """
    Validate a session token and return its claims.

    Raises:
        SessionTokenError: If the token is expired, tampered or malformed.
    """
    if not token:
        raise SessionTokenError("Missing session token")
    try:
        claims = jwt.decode(token, secret, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise SessionTokenError("Session token has expired")
    except jwt.InvalidTokenError:
        raise SessionTokenError("Invalid session token")

    try:
        claims["user_id"] = int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        raise SessionTokenError("Invalid session token subject")
    return claims


def generate_verification_code() -> str:
    """Six random digits, leading zeros allowed."""
    return "".join(
        secrets.choice("0123456789") for _ in range(VERIFICATION_CODE_DIGITS)
    )


def generate_reset_token() -> str:
    """URL-safe random token for password reset links."""
    return secrets.token_urlsafe(32)
