"""
User service for local account registration and verification.

Handles sign-up with an emailed 6-digit code, code verification, and
user lookups.
"""

import logging
from typing import Optional

from flask import current_app

from novaplayer.models.db import db, User
from novaplayer.security import generate_verification_code, hash_password
from novaplayer.services.base import normalize_email, safe_commit
from novaplayer.services.email_service import EmailService

logger = logging.getLogger(__name__)


class UserServiceError(Exception):
    """Base exception for user service operations."""

    pass


class UserNotFoundError(UserServiceError):
    """Raised when a user cannot be found."""

    pass


class UserAlreadyExistsError(UserServiceError):
    """Raised when registering an email that is already taken."""

    pass


class InvalidCodeError(UserServiceError):
    """Raised when a verification code does not match."""

    pass


class UserService:
    """Service for managing User records."""

    @staticmethod
    def register(email: str, name: str, password: str) -> User:
        """
        Create an unverified local account and email its verification code.

        Args:
            email: Login email (stored lowercased).
            name: Display name.
            password: Plaintext password, hashed with bcrypt before storage.

        Returns:
            The new User.

        Raises:
            UserAlreadyExistsError: If the email is already registered.
            UserServiceError: If the user cannot be saved.
        """
        email = normalize_email(email)
        if UserService.get_by_email(email):
            raise UserAlreadyExistsError(f"Email {email} is already registered")

        code = generate_verification_code()
        user = User(
            email=email,
            name=name,
            password_hash=hash_password(
                password, current_app.config.get("BCRYPT_ROUNDS", 12)
            ),
            is_verified=False,
            verification_code=code,
        )
        db.session.add(user)
        safe_commit(f"register user {email}", UserServiceError)

        EmailService.send_verification_email(email, name, code)
        logger.info("Registered user %s (id=%s)", email, user.id)
        return user

    @staticmethod
    def verify(email: str, code: str) -> User:
        """
        Mark an account verified if ``code`` matches. The code is single-use.

        Raises:
            UserNotFoundError: If no account has this email.
            InvalidCodeError: If the code does not match. State is unchanged.
        """
        user = UserService.get_by_email(email)
        if not user:
            raise UserNotFoundError(f"User not found for email: {email}")

        if not user.verification_code or user.verification_code != code:
            logger.info("Rejected verification code for %s", user.email)
            raise InvalidCodeError("Incorrect verification code")

        user.is_verified = True
        user.verification_code = None
        safe_commit(f"verify user {user.email}", UserServiceError)
        return user

    @staticmethod
    def get_by_email(email: Optional[str]) -> Optional[User]:
        email = normalize_email(email)
        if not email:
            return None
        return User.query.filter_by(email=email).first()

    @staticmethod
    def get_by_id(user_id: int) -> Optional[User]:
        """
        Look up a user by their internal database ID.

        Returns:
            User instance if found, None otherwise.
        """
        return db.session.get(User, user_id)
