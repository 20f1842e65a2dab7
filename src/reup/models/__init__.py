"""Data models for Reup."""

from reup.models.download import DownloadOption, QualityPreference, SourceVideo
from reup.models.encode import EncodeJob, EncodeOutcome, EncodeStatus, VoiceMergeOptions
from reup.models.errors import (
    DownloadError,
    ErrorKind,
    InvalidArgumentError,
    NotFoundError,
    OperationCancelledError,
    ReupError,
    UploadError,
)
from reup.models.pipeline import (
    BatchProgress,
    BatchResult,
    PipelineItem,
    PipelineOptions,
    PipelineStage,
)
from reup.models.transform import (
    EncodePreset,
    FilterChains,
    FilterStep,
    TransformationSpec,
    build_preset,
)
from reup.models.upload import (
    ChannelInfo,
    PlaylistInfo,
    PrivacyStatus,
    UploadFailure,
    UploadMetadata,
    UploadResult,
    UploadSuccess,
    VideoCategory,
)

__all__ = [
    "BatchProgress",
    "BatchResult",
    "ChannelInfo",
    "DownloadError",
    "DownloadOption",
    "EncodeJob",
    "EncodeOutcome",
    "EncodePreset",
    "EncodeStatus",
    "ErrorKind",
    "FilterChains",
    "FilterStep",
    "InvalidArgumentError",
    "NotFoundError",
    "OperationCancelledError",
    "PipelineItem",
    "PipelineOptions",
    "PipelineStage",
    "PlaylistInfo",
    "PrivacyStatus",
    "QualityPreference",
    "ReupError",
    "SourceVideo",
    "TransformationSpec",
    "UploadError",
    "UploadFailure",
    "UploadMetadata",
    "UploadResult",
    "UploadSuccess",
    "VideoCategory",
    "VoiceMergeOptions",
    "build_preset",
]
