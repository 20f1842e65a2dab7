"""Tests for the pydantic data models."""

import pytest
from pydantic import ValidationError

from reup.models.download import DownloadOption, QualityPreference, SourceVideo
from reup.models.encode import EncodeOutcome, EncodeStatus, VoiceMergeOptions
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
from reup.models.transform import FilterChains, FilterStep, TransformationSpec
from reup.models.upload import (
    PrivacyStatus,
    UploadFailure,
    UploadMetadata,
    UploadSuccess,
    VideoCategory,
)

# --- TransformationSpec ---


class TestTransformationSpec:
    def test_defaults_are_identity(self):
        assert TransformationSpec().is_identity

    def test_any_option_breaks_identity(self):
        assert not TransformationSpec(vertical_flip=True).is_identity
        assert not TransformationSpec(blur_sigma=1.0).is_identity

    @pytest.mark.parametrize(
        "field, value",
        [
            ("scale_factor", 0.0),
            ("scale_factor", -1.0),
            ("pitch_factor", 0.0),
            ("speed_factor", 0.25),
            ("speed_factor", 3.0),
            ("brightness", 1.5),
            ("contrast", 0.0),
            ("blur_sigma", -0.1),
            ("rotation_degrees", 720.0),
            ("scale_factor", float("nan")),
        ],
    )
    def test_out_of_range_rejected(self, field, value):
        with pytest.raises(ValidationError):
            TransformationSpec(**{field: value})

    def test_from_options_reports_invalid_argument(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            TransformationSpec.from_options(scale_factor=-1.0, blur_sigma=0.5)
        assert exc_info.value.kind == ErrorKind.INVALID_ARGUMENT
        assert list(exc_info.value.details) == ["scale_factor"]
        assert "scale_factor" in exc_info.value.message

    def test_from_options_rejects_unknown_option(self):
        with pytest.raises(InvalidArgumentError) as exc_info:
            TransformationSpec.from_options(sharpen=2.0)
        assert "sharpen" in exc_info.value.details

    def test_from_options_valid(self):
        spec = TransformationSpec.from_options(horizontal_flip=True, speed_factor=1.5)
        assert spec == TransformationSpec(horizontal_flip=True, speed_factor=1.5)

    def test_frozen(self):
        spec = TransformationSpec()
        with pytest.raises(ValidationError):
            spec.horizontal_flip = True


class TestFilterChains:
    def test_empty_chains_have_no_args(self):
        assert FilterChains().to_args() == []

    def test_args_per_stream(self):
        chains = FilterChains(
            video=(FilterStep(name="hflip", expression="hflip"),),
            audio=(FilterStep(name="atempo", expression="atempo=1.250"),),
        )
        assert chains.to_args() == ["-vf", "hflip", "-af", "atempo=1.250"]

    def test_video_only(self):
        chains = FilterChains(
            video=(
                FilterStep(name="hflip", expression="hflip"),
                FilterStep(name="vflip", expression="vflip"),
            )
        )
        assert chains.video_filter == "hflip,vflip"
        assert chains.to_args() == ["-vf", "hflip,vflip"]


# --- Encode ---


class TestEncodeOutcome:
    def test_completed(self, tmp_path):
        outcome = EncodeOutcome.completed(tmp_path / "out.mp4")
        assert outcome.ok
        assert outcome.exit_code == 0
        assert outcome.error_kind is None

    def test_failed(self):
        outcome = EncodeOutcome.failed("boom", exit_code=1, stderr_tail=["line"])
        assert not outcome.ok
        assert outcome.status == EncodeStatus.FAILED
        assert outcome.error_kind == ErrorKind.PROCESS_FAILURE
        assert outcome.stderr_tail == ["line"]

    def test_cancelled(self):
        outcome = EncodeOutcome.cancelled()
        assert outcome.status == EncodeStatus.CANCELLED
        assert outcome.error_kind == ErrorKind.CANCELLED

    def test_voice_volume_bounds(self, tmp_path):
        with pytest.raises(ValidationError):
            VoiceMergeOptions(voice_path=tmp_path / "v.mp3", voice_volume=3.0)


# --- Upload ---


class TestUploadModels:
    def test_metadata_defaults(self):
        metadata = UploadMetadata(title="x")
        assert metadata.privacy == PrivacyStatus.PRIVATE
        assert metadata.category == VideoCategory.ENTERTAINMENT
        assert metadata.notify_subscribers

    def test_blank_tags_dropped(self):
        assert UploadMetadata(tags=[" a ", "", "  ", "b"]).tags == ["a", "b"]

    def test_metadata_stores_long_title(self):
        assert len(UploadMetadata(title="t" * 300).title) == 300

    def test_success_without_warnings(self):
        success = UploadSuccess(remote_id="abc", url="https://www.youtube.com/watch?v=abc")
        assert success.ok
        assert success.kind is None

    def test_success_with_warnings_is_partial(self):
        success = UploadSuccess(remote_id="abc", url="u", warnings=["thumbnail failed: 403"])
        assert success.kind == ErrorKind.PARTIAL_SUCCESS

    def test_success_requires_id(self):
        with pytest.raises(ValidationError):
            UploadSuccess(remote_id="", url="u")

    def test_failure(self):
        failure = UploadFailure(reason="quota", kind=ErrorKind.REMOTE_REJECTED)
        assert not failure.ok
        assert failure.outcome == "failure"


# --- Download ---


class TestDownloadModels:
    @pytest.mark.parametrize(
        "quality, height",
        [
            (QualityPreference.HIGHEST, None),
            (QualityPreference.UP_TO_1080P, 1080),
            (QualityPreference.UP_TO_720P, 720),
            (QualityPreference.UP_TO_360P, 360),
            (QualityPreference.LOWEST, None),
        ],
    )
    def test_max_height(self, quality, height):
        assert quality.max_height == height

    def test_source_requires_id(self):
        with pytest.raises(ValidationError):
            SourceVideo(id="")

    def test_option_requires_selector(self):
        with pytest.raises(ValidationError):
            DownloadOption(format_selector="")


# --- Pipeline ---


class TestPipelineModels:
    def test_terminal_stages(self):
        assert PipelineStage.DONE.is_terminal
        assert PipelineStage.FAILED.is_terminal
        assert not PipelineStage.PENDING.is_terminal
        assert not PipelineStage.UPLOADING.is_terminal

    def test_item_starts_pending(self):
        item = PipelineItem(index=0, source=SourceVideo(id="a"))
        assert item.stage == PipelineStage.PENDING
        assert not item.succeeded
        assert not item.failed

    def test_progress_bounds(self):
        with pytest.raises(ValidationError):
            BatchProgress(overall=1.5)

    def test_encoded_dir(self, tmp_path):
        options = PipelineOptions(work_dir=tmp_path, encoded_subdir="out")
        assert options.encoded_dir == tmp_path / "out"

    def test_tags_from_comma_string(self, tmp_path):
        options = PipelineOptions(work_dir=tmp_path, tags="music, live,, ")
        assert options.tags == ["music", "live"]

    def test_max_videos_positive(self, tmp_path):
        with pytest.raises(ValidationError):
            PipelineOptions(work_dir=tmp_path, max_videos=0)

    def test_batch_result_partitions(self):
        items = [
            PipelineItem(index=0, source=SourceVideo(id="a"), stage=PipelineStage.DONE),
            PipelineItem(index=1, source=SourceVideo(id="b"), stage=PipelineStage.FAILED),
            PipelineItem(index=2, source=SourceVideo(id="c")),
        ]
        result = BatchResult(items=items)
        assert [i.source.id for i in result.succeeded] == ["a"]
        assert [i.source.id for i in result.failed] == ["b"]


# --- Errors ---


class TestErrors:
    def test_base(self):
        error = ReupError("msg", component="x", details={"k": 1})
        assert str(error) == "msg"
        assert error.details == {"k": 1}
        assert error.kind is None

    @pytest.mark.parametrize(
        "error, component, kind",
        [
            (NotFoundError("m"), "", ErrorKind.NOT_FOUND),
            (InvalidArgumentError("m"), "validation", ErrorKind.INVALID_ARGUMENT),
            (DownloadError("m"), "download", ErrorKind.NETWORK_FAILURE),
            (UploadError("m", kind=ErrorKind.REMOTE_REJECTED), "upload", ErrorKind.REMOTE_REJECTED),
            (OperationCancelledError(), "", ErrorKind.CANCELLED),
        ],
    )
    def test_subclasses(self, error, component, kind):
        assert isinstance(error, ReupError)
        assert error.component == component
        assert error.kind == kind
