"""Pydantic models for Mureka song task objects.

The same task object is returned by the generate and query endpoints and is posted
to the webhook, so one model covers all three.
"""

from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from songpad.models.song_task import SongTaskStatus

SongModel = Literal["auto", "mureka-5.5", "mureka-6"]

# Mureka reports timeouts as "timeouted"
_STATUS_ALIASES = {"timeouted": SongTaskStatus.TIMED_OUT.value}


class MurekaChoice(BaseModel):
    """One generated audio rendition."""

    url: Optional[str] = None
    duration: Optional[float] = None


class MurekaTask(BaseModel):
    """Song generation task as reported by Mureka."""

    id: str = Field(..., min_length=1)
    status: SongTaskStatus
    created_at: Optional[float] = None
    finished_at: Optional[float] = None
    model: Optional[str] = None
    failed_reason: Optional[str] = None
    choices: list[MurekaChoice] = Field(default_factory=list)

    @field_validator("status", mode="before")
    @classmethod
    def normalize_status(cls, v):
        if isinstance(v, str):
            return _STATUS_ALIASES.get(v, v)
        return v

    @property
    def result_url(self) -> Optional[str]:
        """URL of the first choice, the one shown to the user."""
        if self.choices:
            return self.choices[0].url
        return None
