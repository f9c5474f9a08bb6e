from datetime import datetime, timezone
from typing import List
from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator

from .utils import is_absolute_url

class Song(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int = Field(gt=0)
    name: str = Field(min_length=1)
    audio_url: str = Field(alias="audioUrl")   # absolute URL handed to the media resource
    created_at: datetime

    @field_validator("audio_url")
    @classmethod
    def _absolute_url(cls, v: str) -> str:
        if not is_absolute_url(v):
            raise ValueError(f"audioUrl must be an absolute URL, got {v!r}")
        return v

    @field_validator("created_at")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        # SQLite hands timestamps back without tzinfo; they are stored as UTC.
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)

class GetSongInput(BaseModel):
    id: StrictInt = Field(gt=0)

# Shown when the API cannot be reached. Every entry points at the same demo clip.
FALLBACK_AUDIO_URL = "https://www.soundjay.com/misc/sounds/bell-ringing-05.wav"

FALLBACK_SONGS: List[Song] = [
    Song(id=1, name="Classical Symphony No. 1", audio_url=FALLBACK_AUDIO_URL,
         created_at=datetime(2024, 1, 1, tzinfo=timezone.utc)),
    Song(id=2, name="Jazz Blues Melody", audio_url=FALLBACK_AUDIO_URL,
         created_at=datetime(2024, 1, 2, tzinfo=timezone.utc)),
    Song(id=3, name="Rock Guitar Anthem", audio_url=FALLBACK_AUDIO_URL,
         created_at=datetime(2024, 1, 3, tzinfo=timezone.utc)),
    Song(id=4, name="Electronic Dance Beat", audio_url=FALLBACK_AUDIO_URL,
         created_at=datetime(2024, 1, 4, tzinfo=timezone.utc)),
]
