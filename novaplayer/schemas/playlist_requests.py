"""
Pydantic validation schemas for playlist create/edit requests.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

_DATA_URL_PREFIX = "base64,"


def _strip_data_url(v: Optional[str]) -> Optional[str]:
    """Accept a bare base64 string or a data URL; return bare base64."""
    if not v:
        return None
    if _DATA_URL_PREFIX in v:
        v = v.split(_DATA_URL_PREFIX, 1)[1]
    return v.strip() or None


class CreatePlaylistRequest(BaseModel):
    """Schema for creating a playlist with an optional JPEG cover."""

    model_config = {"extra": "ignore"}

    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(default="", max_length=300)
    image: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Playlist name cannot be empty")
        return v.strip()

    @field_validator("image")
    @classmethod
    def validate_image(cls, v: Optional[str]) -> Optional[str]:
        return _strip_data_url(v)


class EditPlaylistRequest(BaseModel):
    """Schema for editing a playlist. Omitted fields are left alone."""

    model_config = {"extra": "ignore"}

    name: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = Field(default=None, max_length=300)
    image: Optional[str] = None

    @field_validator("image")
    @classmethod
    def validate_image(cls, v: Optional[str]) -> Optional[str]:
        return _strip_data_url(v)
