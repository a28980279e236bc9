"""
Pydantic schemas for request validation.
"""

from pydantic import ValidationError

from .auth_requests import (
    RegisterRequest,
    VerifyRequest,
    LoginRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
)
from .player_requests import (
    DeviceRequest,
    PlayRequest,
    TransferRequest,
    SeekRequest,
    VolumeRequest,
    QueueRequest,
)
from .playlist_requests import (
    CreatePlaylistRequest,
    EditPlaylistRequest,
)

__all__ = [
    "ValidationError",
    "RegisterRequest",
    "VerifyRequest",
    "LoginRequest",
    "ForgotPasswordRequest",
    "ResetPasswordRequest",
    "DeviceRequest",
    "PlayRequest",
    "TransferRequest",
    "SeekRequest",
    "VolumeRequest",
    "QueueRequest",
    "CreatePlaylistRequest",
    "EditPlaylistRequest",
]
