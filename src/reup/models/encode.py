"""Encoder job and outcome models."""

from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel, Field

from reup.models.errors import ErrorKind
from reup.models.transform import TransformationSpec


class EncodeStatus(StrEnum):
    """Terminal status of one encoder invocation."""

    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class EncodeJob(BaseModel):
    """One transformation of an input file into an output file."""

    input_path: Path
    output_path: Path
    spec: TransformationSpec = Field(default_factory=TransformationSpec)


class EncodeOutcome(BaseModel):
    """Result of running the encoder; always returned, never raised."""

    status: EncodeStatus
    output_path: Path | None = None
    exit_code: int | None = None
    error_kind: ErrorKind | None = None
    message: str = ""
    stderr_tail: list[str] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.status == EncodeStatus.COMPLETED

    @classmethod
    def completed(cls, output_path: Path) -> "EncodeOutcome":
        return cls(status=EncodeStatus.COMPLETED, output_path=output_path, exit_code=0)

    @classmethod
    def cancelled(cls) -> "EncodeOutcome":
        return cls(
            status=EncodeStatus.CANCELLED,
            error_kind=ErrorKind.CANCELLED,
            message="Encoding cancelled",
        )

    @classmethod
    def failed(
        cls,
        message: str,
        kind: ErrorKind = ErrorKind.PROCESS_FAILURE,
        exit_code: int | None = None,
        stderr_tail: list[str] | None = None,
    ) -> "EncodeOutcome":
        return cls(
            status=EncodeStatus.FAILED,
            error_kind=kind,
            exit_code=exit_code,
            message=message,
            stderr_tail=stderr_tail or [],
        )


class VoiceMergeOptions(BaseModel):
    """Options for laying a voice track over a video."""

    voice_path: Path
    mute_original_audio: bool = False
    voice_volume: float = Field(default=1.0, ge=0.0, le=2.0)
    original_audio_volume: float = Field(default=0.3, ge=0.0, le=2.0)
