"""Upload metadata and result models."""

from datetime import datetime
from enum import IntEnum, StrEnum
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from reup.models.errors import ErrorKind

MAX_TITLE_LENGTH = 100
MAX_DESCRIPTION_LENGTH = 5000


class PrivacyStatus(StrEnum):
    PUBLIC = "public"
    PRIVATE = "private"
    UNLISTED = "unlisted"


class VideoCategory(IntEnum):
    """YouTube video category codes."""

    FILM_ANIMATION = 1
    AUTOS_VEHICLES = 2
    MUSIC = 10
    PETS_ANIMALS = 15
    SPORTS = 17
    SHORT_MOVIES = 18
    TRAVEL_EVENTS = 19
    GAMING = 20
    VIDEOBLOGGING = 21
    PEOPLE_BLOGS = 22
    COMEDY = 23
    ENTERTAINMENT = 24
    NEWS_POLITICS = 25
    HOWTO_STYLE = 26
    EDUCATION = 27
    SCIENCE_TECHNOLOGY = 28
    NONPROFITS_ACTIVISM = 29


class UploadMetadata(BaseModel):
    """Metadata sent alongside an uploaded video.

    Title and description are stored as given; the upload engine truncates
    them right before transmission.
    """

    title: str = ""
    description: str = ""
    tags: list[str] = Field(default_factory=list)
    category: VideoCategory = VideoCategory.ENTERTAINMENT
    privacy: PrivacyStatus = PrivacyStatus.PRIVATE
    playlist_id: str | None = None
    notify_subscribers: bool = True
    made_for_kids: bool = False
    thumbnail_path: Path | None = None
    publish_at: datetime | None = None

    @field_validator("tags")
    @classmethod
    def strip_empty_tags(cls, v: list[str]) -> list[str]:
        return [t.strip() for t in v if t and t.strip()]


class UploadSuccess(BaseModel):
    """The primary upload succeeded. Compensating-action failures land in ``warnings``."""

    outcome: Literal["success"] = "success"
    remote_id: str = Field(..., min_length=1)
    url: str
    warnings: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return True

    @property
    def kind(self) -> ErrorKind | None:
        return ErrorKind.PARTIAL_SUCCESS if self.warnings else None


class UploadFailure(BaseModel):
    """The primary upload did not complete."""

    outcome: Literal["failure"] = "failure"
    reason: str
    kind: ErrorKind = ErrorKind.NETWORK_FAILURE

    @property
    def ok(self) -> bool:
        return False


UploadResult = UploadSuccess | UploadFailure


class ChannelInfo(BaseModel):
    id: str
    title: str = ""
    subscriber_count: int | None = None
    video_count: int | None = None


class PlaylistInfo(BaseModel):
    id: str
    title: str = ""
    item_count: int = 0
