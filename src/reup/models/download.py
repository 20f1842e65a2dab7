"""Source and download option models."""

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, Field


class SourceVideo(BaseModel):
    """A video to run through the pipeline.

    When ``local_path`` is set the file is already on disk and the download
    stage is skipped.
    """

    id: str = Field(..., min_length=1)
    title: str = ""
    local_path: Path | None = None


class QualityPreference(StrEnum):
    HIGHEST = "highest"
    UP_TO_1080P = "1080p"
    UP_TO_720P = "720p"
    UP_TO_480P = "480p"
    UP_TO_360P = "360p"
    LOWEST = "lowest"

    @property
    def max_height(self) -> int | None:
        """Height cap in pixels, None for highest/lowest."""
        if self in (QualityPreference.HIGHEST, QualityPreference.LOWEST):
            return None
        return int(self.value.rstrip("p"))


class DownloadOption(BaseModel):
    """A concrete stream selection resolved for one source."""

    format_selector: str = Field(..., min_length=1)
    container: str = "mp4"
    height: int | None = None
    label: str = ""
