"""
Pydantic validation schemas for playback control requests.

The frontend sends camelCase keys (``deviceId``, ``positionMs``).
"""

from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

_MODEL_CONFIG = {
    "extra": "ignore",
    "alias_generator": to_camel,
    "populate_by_name": True,
}


class DeviceRequest(BaseModel):
    """Body of pause/resume/next/previous: an optional target device."""

    model_config = _MODEL_CONFIG

    device_id: Optional[str] = None


class PlayRequest(BaseModel):
    """
    Schema for starting playback.

    ``uri`` is shorthand for a single-element ``uris``.
    """

    model_config = _MODEL_CONFIG

    device_id: Optional[str] = None
    context_uri: Optional[str] = None
    uris: List[str] = Field(default_factory=list)
    uri: Optional[str] = None

    @field_validator("uris", mode="before")
    @classmethod
    def coerce_uris(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v

    @model_validator(mode="after")
    def merge_single_uri(self) -> "PlayRequest":
        if self.uri and not self.uris:
            self.uris = [self.uri]
        return self


class TransferRequest(BaseModel):
    model_config = _MODEL_CONFIG

    device_id: str = Field(..., min_length=1)
    play: bool = True


class SeekRequest(BaseModel):
    model_config = _MODEL_CONFIG

    position_ms: int = Field(..., ge=0)
    device_id: Optional[str] = None


class VolumeRequest(BaseModel):
    model_config = _MODEL_CONFIG

    volume_percent: int = Field(..., ge=0, le=100)
    device_id: Optional[str] = None


class QueueRequest(BaseModel):
    """Schema for adding a track or episode to the queue."""

    model_config = _MODEL_CONFIG

    uri: str = Field(..., min_length=1)
    device_id: Optional[str] = None

    @field_validator("uri")
    @classmethod
    def validate_uri(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith("spotify:"):
            raise ValueError("uri must be a Spotify URI")
        return v
