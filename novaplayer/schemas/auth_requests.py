"""
Pydantic validation schemas for account and login requests.

Field names follow the frontend's camelCase (``newPassword``); snake_case
is accepted too.
"""

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

MIN_PASSWORD_LENGTH = 6

_MODEL_CONFIG = {
    "extra": "ignore",
    "alias_generator": to_camel,
    "populate_by_name": True,
    "str_strip_whitespace": True,
}


def _check_email(v: str) -> str:
    v = v.strip().lower()
    local, _, domain = v.partition("@")
    if not local or "." not in domain:
        raise ValueError("Invalid email address")
    return v


class RegisterRequest(BaseModel):
    """Schema for creating a local account."""

    model_config = _MODEL_CONFIG

    email: str
    name: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _check_email(v)


class VerifyRequest(BaseModel):
    """Schema for submitting the emailed verification code."""

    model_config = _MODEL_CONFIG

    email: str
    code: str = Field(..., min_length=1, max_length=16)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _check_email(v)


class LoginRequest(BaseModel):
    model_config = _MODEL_CONFIG

    email: str
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _check_email(v)


class ForgotPasswordRequest(BaseModel):
    model_config = _MODEL_CONFIG

    email: str

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _check_email(v)


class ResetPasswordRequest(BaseModel):
    """Schema for setting a new password with a reset token."""

    model_config = _MODEL_CONFIG

    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=MIN_PASSWORD_LENGTH)
