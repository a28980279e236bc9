"""
NovaPlayer Services Package

Static-method service classes, each with its own exception hierarchy.

Usage:
    from novaplayer.services import AuthService, UserService

    user = UserService.register("ana@example.com", "Ana", "s3cret!")
    UserService.verify("ana@example.com", "123456")
    session = AuthService.login("ana@example.com", "s3cret!")
"""

# Auth Service
from novaplayer.services.auth_service import (
    AuthService,
    AuthenticationError,
    IncorrectCredentialsError,
    NotVerifiedError,
    InvalidOrExpiredTokenError,
)

# User Service
from novaplayer.services.user_service import (
    UserService,
    UserServiceError,
    UserNotFoundError,
    UserAlreadyExistsError,
    InvalidCodeError,
)

# Credential Service
from novaplayer.services.credential_service import (
    CredentialService,
    CredentialStoreError,
)

# Token Service
from novaplayer.services.token_service import (
    TokenService,
    TokenEncryptionError,
)

# Email Service
from novaplayer.services.email_service import EmailService

# Video Service
from novaplayer.services.video_service import VideoService

__all__ = [
    # Auth
    "AuthService",
    "AuthenticationError",
    "IncorrectCredentialsError",
    "NotVerifiedError",
    "InvalidOrExpiredTokenError",
    # User
    "UserService",
    "UserServiceError",
    "UserNotFoundError",
    "UserAlreadyExistsError",
    "InvalidCodeError",
    # Credentials
    "CredentialService",
    "CredentialStoreError",
    # Token
    "TokenService",
    "TokenEncryptionError",
    # Email
    "EmailService",
    # Video
    "VideoService",
]
