"""Pipeline item, progress and batch models."""

from datetime import datetime
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from reup.models.download import QualityPreference, SourceVideo
from reup.models.errors import ErrorKind
from reup.models.transform import TransformationSpec
from reup.models.upload import PrivacyStatus, VideoCategory
from reup.pipeline.naming import parse_tags


class PipelineStage(StrEnum):
    """Stages a pipeline item moves through."""

    PENDING = "pending"
    DOWNLOADING = "downloading"
    ENCODING = "encoding"
    UPLOADING = "uploading"
    DONE = "done"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineStage.DONE, PipelineStage.FAILED)


class PipelineItem(BaseModel):
    """One source tracked through download, encode and upload."""

    index: int = Field(..., ge=0)
    source: SourceVideo
    stage: PipelineStage = Field(default=PipelineStage.PENDING)
    artifact_path: Path | None = None
    downloaded_path: Path | None = None
    encoded_path: Path | None = None
    remote_id: str | None = None
    url: str | None = None
    error: str | None = None
    error_kind: ErrorKind | None = None
    warnings: list[str] = Field(default_factory=list)
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def succeeded(self) -> bool:
        return self.stage == PipelineStage.DONE

    @property
    def failed(self) -> bool:
        return self.stage == PipelineStage.FAILED


class BatchProgress(BaseModel):
    """Aggregate progress of a running batch."""

    completed: int = Field(default=0, ge=0)
    total: int = Field(default=0, ge=0)
    current_fraction: float = Field(default=0.0, ge=0, le=1)
    current_index: int | None = None
    stage: PipelineStage | None = None
    overall: float = Field(default=0.0, ge=0, le=1)


class PipelineOptions(BaseModel):
    """Per-run pipeline configuration."""

    work_dir: Path
    encoded_subdir: str = "encoded"
    enable_encoding: bool = True
    enable_upload: bool = True
    spec: TransformationSpec = Field(default_factory=TransformationSpec)
    quality: QualityPreference = QualityPreference.UP_TO_1080P
    max_videos: int = Field(default=50, ge=1)
    title_template: str = "{original}"
    description_template: str = ""
    tags: list[str] = Field(default_factory=list)
    category: VideoCategory = VideoCategory.ENTERTAINMENT
    privacy: PrivacyStatus = PrivacyStatus.PRIVATE
    playlist_id: str | None = None
    thumbnail_path: Path | None = None
    notify_subscribers: bool = True
    made_for_kids: bool = False
    publish_at: datetime | None = None
    upload_delay_seconds: float = Field(default=30.0, ge=0)

    @field_validator("tags", mode="before")
    @classmethod
    def split_tag_string(cls, v):
        """Accept "a, b, c" as well as a list."""
        if isinstance(v, str):
            return parse_tags(v)
        return v

    @property
    def encoded_dir(self) -> Path:
        return self.work_dir / self.encoded_subdir


class BatchResult(BaseModel):
    """Per-item outcomes of a batch run."""

    items: list[PipelineItem] = Field(default_factory=list)
    cancelled: bool = False

    @property
    def succeeded(self) -> list[PipelineItem]:
        return [item for item in self.items if item.succeeded]

    @property
    def failed(self) -> list[PipelineItem]:
        return [item for item in self.items if item.failed]
