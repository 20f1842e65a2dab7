"""Pipeline orchestrator: download, encode and upload a batch of sources."""

import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from pathlib import Path

from reup.cancellation import CancellationToken
from reup.config import Settings, get_settings
from reup.downloading.base import Downloader
from reup.encoding.supervisor import EncoderSupervisor
from reup.models.download import QualityPreference, SourceVideo
from reup.models.encode import EncodeJob, EncodeStatus
from reup.models.errors import ErrorKind, OperationCancelledError, ReupError
from reup.models.pipeline import (
    BatchProgress,
    BatchResult,
    PipelineItem,
    PipelineOptions,
    PipelineStage,
)
from reup.models.upload import PrivacyStatus, UploadFailure, UploadMetadata, VideoCategory
from reup.pipeline.naming import download_filename, render_title
from reup.pipeline.progress import BatchProgressTracker
from reup.storage.workspace import BatchWorkspace
from reup.uploading.youtube import YouTubeUploader

logger = logging.getLogger(__name__)


class _ItemCancelled(Exception):
    """Unwinds the current item when cancellation is observed."""


class PipelineOrchestrator:
    """Runs sources one at a time through download, encode and upload.

    A failing item is recorded and the batch moves on; only cancellation
    stops the loop, and even then the items processed so far are returned.
    """

    def __init__(
        self,
        downloader: Downloader | None = None,
        encoder: EncoderSupervisor | None = None,
        uploader: YouTubeUploader | None = None,
        settings: Settings | None = None,
    ):
        self.settings = settings or get_settings()
        self.downloader = downloader
        self.encoder = encoder
        self.uploader = uploader

    def default_options(self) -> PipelineOptions:
        """Pipeline options filled from settings."""
        s = self.settings
        return PipelineOptions(
            work_dir=s.work_dir,
            encoded_subdir=s.encoded_subdir,
            quality=QualityPreference(s.quality),
            max_videos=s.max_videos,
            title_template=s.title_template,
            description_template=s.description_template,
            tags=s.tags,
            category=VideoCategory(s.category),
            privacy=PrivacyStatus(s.privacy),
            upload_delay_seconds=s.upload_delay_seconds,
        )

    def run(
        self,
        sources: Iterable[SourceVideo],
        options: PipelineOptions | None = None,
        cancel: CancellationToken | None = None,
        on_progress: Callable[[BatchProgress], None] | None = None,
    ) -> BatchResult:
        """Process every source in order and return one item per source."""
        options = options or self.default_options()
        cancel = cancel or CancellationToken()

        items = [
            PipelineItem(index=i, source=source)
            for i, source in enumerate(list(sources)[: options.max_videos])
        ]
        result = BatchResult(items=items)
        tracker = BatchProgressTracker(len(items), on_progress)

        workspace = BatchWorkspace(options.work_dir, options.encoded_subdir)
        workspace.prepare()

        encoder_error = self._prepare_encoder() if options.enable_encoding else None
        upload_error = self._prepare_uploader() if options.enable_upload else None

        logger.info(
            "Starting batch of %d item(s): encoding=%s upload=%s",
            len(items),
            options.enable_encoding,
            options.enable_upload,
        )

        for item in items:
            if cancel.cancelled:
                result.cancelled = True
                break

            stages = self._stages_for(item, options)
            tracker.start_item(item.index, stages)
            item.started_at = datetime.now(UTC)

            try:
                uploaded = self._process_item(
                    item, stages, options, workspace, tracker, cancel, encoder_error, upload_error
                )
            except _ItemCancelled:
                self._fail(item, "cancelled", ErrorKind.CANCELLED)
                result.cancelled = True
                break

            tracker.finish_item()

            is_last = item.index == len(items) - 1
            if uploaded and not is_last and options.upload_delay_seconds > 0:
                logger.info("Waiting %.0fs before next upload", options.upload_delay_seconds)
                if cancel.wait(options.upload_delay_seconds):
                    result.cancelled = True
                    break

        if result.cancelled:
            logger.info("Batch cancelled")
        logger.info(
            "Batch finished: %d done, %d failed, %d total",
            len(result.succeeded),
            len(result.failed),
            len(items),
        )
        return result

    def _stages_for(self, item: PipelineItem, options: PipelineOptions) -> list[PipelineStage]:
        stages = []
        if item.source.local_path is None:
            stages.append(PipelineStage.DOWNLOADING)
        if options.enable_encoding:
            stages.append(PipelineStage.ENCODING)
        if options.enable_upload:
            stages.append(PipelineStage.UPLOADING)
        return stages

    def _process_item(
        self,
        item: PipelineItem,
        stages: list[PipelineStage],
        options: PipelineOptions,
        workspace: BatchWorkspace,
        tracker: BatchProgressTracker,
        cancel: CancellationToken,
        encoder_error: str | None,
        upload_error: str | None,
    ) -> bool:
        """Drive one item to a terminal stage. Returns True if an upload was attempted."""
        if PipelineStage.DOWNLOADING in stages:
            if not self._download(item, options, workspace, tracker, cancel):
                return False
        else:
            item.downloaded_path = item.source.local_path
            item.artifact_path = item.source.local_path

        if PipelineStage.ENCODING in stages:
            self._encode(item, options, workspace, tracker, cancel, encoder_error)

        uploaded = False
        if PipelineStage.UPLOADING in stages:
            if upload_error:
                self._fail(item, upload_error, ErrorKind.REMOTE_REJECTED)
                return False
            uploaded = True
            if not self._upload(item, options, tracker, cancel):
                return uploaded

        self._set_stage(item, PipelineStage.DONE)
        item.completed_at = datetime.now(UTC)
        return uploaded

    def _download(
        self,
        item: PipelineItem,
        options: PipelineOptions,
        workspace: BatchWorkspace,
        tracker: BatchProgressTracker,
        cancel: CancellationToken,
    ) -> bool:
        self._set_stage(item, PipelineStage.DOWNLOADING)
        tracker.update(PipelineStage.DOWNLOADING, 0.0)
        source = item.source

        try:
            downloader = self._get_downloader()
            option = downloader.resolve_best_option(source.id, options.quality)
            destination = workspace.download_path(
                download_filename(item.index, source.title or source.id, option.container)
            )
            downloader.download(
                destination,
                source.id,
                option,
                tracker.stage_callback(PipelineStage.DOWNLOADING),
                cancel,
            )
        except OperationCancelledError:
            raise _ItemCancelled()
        except ReupError as e:
            if cancel.cancelled:
                raise _ItemCancelled()
            self._fail(item, f"Download failed: {e.message}", e.kind or ErrorKind.NETWORK_FAILURE)
            return False
        except Exception as e:
            if cancel.cancelled:
                raise _ItemCancelled()
            self._fail(item, f"Download failed: {e}", ErrorKind.NETWORK_FAILURE)
            return False

        item.downloaded_path = destination
        item.artifact_path = destination
        logger.info("Downloaded %s to %s", source.id, destination.name)
        return True

    def _encode(
        self,
        item: PipelineItem,
        options: PipelineOptions,
        workspace: BatchWorkspace,
        tracker: BatchProgressTracker,
        cancel: CancellationToken,
        encoder_error: str | None,
    ) -> None:
        """Encode the artifact; on failure keep the downloaded file and carry on."""
        self._set_stage(item, PipelineStage.ENCODING)
        tracker.update(PipelineStage.ENCODING, 0.0)

        if encoder_error:
            self._fall_back_to_source(item, encoder_error)
            return

        source_path = item.artifact_path
        job = EncodeJob(
            input_path=source_path,
            output_path=workspace.encoded_path(source_path.name),
            spec=options.spec,
        )
        try:
            outcome = self.encoder.run(job, tracker.stage_callback(PipelineStage.ENCODING), cancel)
        except Exception as e:
            if cancel.cancelled:
                raise _ItemCancelled()
            logger.exception("Encoder raised for %s", item.source.id)
            self._fall_back_to_source(item, str(e))
            return

        if outcome.status == EncodeStatus.CANCELLED:
            raise _ItemCancelled()
        if not outcome.ok:
            self._fall_back_to_source(item, outcome.message)
            return

        item.encoded_path = outcome.output_path
        item.artifact_path = outcome.output_path
        logger.info("Encoded %s", source_path.name)

    def _fall_back_to_source(self, item: PipelineItem, reason: str) -> None:
        logger.warning("Encoding failed for %s, using original: %s", item.source.id, reason)
        item.warnings.append(f"Encoding failed, uploading original: {reason}")
        item.artifact_path = item.downloaded_path

    def _upload(
        self,
        item: PipelineItem,
        options: PipelineOptions,
        tracker: BatchProgressTracker,
        cancel: CancellationToken,
    ) -> bool:
        self._set_stage(item, PipelineStage.UPLOADING)
        tracker.update(PipelineStage.UPLOADING, 0.0)

        metadata = self.build_metadata(item, options)
        try:
            outcome = self.uploader.upload_video(
                item.artifact_path,
                metadata,
                tracker.stage_callback(PipelineStage.UPLOADING),
                cancel,
            )
        except Exception as e:
            if cancel.cancelled:
                raise _ItemCancelled()
            logger.exception("Uploader raised for %s", item.source.id)
            self._fail(item, f"Upload failed: {e}", ErrorKind.NETWORK_FAILURE)
            return False

        if isinstance(outcome, UploadFailure):
            if outcome.kind == ErrorKind.CANCELLED:
                raise _ItemCancelled()
            self._fail(item, f"Upload failed: {outcome.reason}", outcome.kind)
            return False

        item.remote_id = outcome.remote_id
        item.url = outcome.url
        item.warnings.extend(outcome.warnings)
        logger.info("Uploaded %s: %s", item.source.id, outcome.url)
        return True

    def build_metadata(self, item: PipelineItem, options: PipelineOptions) -> UploadMetadata:
        """Upload metadata for an item, with its templates filled in."""
        artifact: Path = item.artifact_path
        original = item.source.title or artifact.stem
        return UploadMetadata(
            title=render_title(options.title_template, original, artifact.stem, item.index),
            description=render_title(
                options.description_template, original, artifact.stem, item.index
            ),
            tags=options.tags,
            category=options.category,
            privacy=options.privacy,
            playlist_id=options.playlist_id,
            notify_subscribers=options.notify_subscribers,
            made_for_kids=options.made_for_kids,
            thumbnail_path=options.thumbnail_path,
            publish_at=options.publish_at,
        )

    def _prepare_encoder(self) -> str | None:
        """Make sure an encoder exists; return why not otherwise."""
        if self.encoder is not None:
            return None
        try:
            self.encoder = EncoderSupervisor(settings=self.settings)
        except ReupError as e:
            logger.warning("Encoding unavailable, originals will be uploaded: %s", e.message)
            return e.message
        return None

    def _prepare_uploader(self) -> str | None:
        """Open the upload session once per batch; return why it failed otherwise."""
        if self.uploader is None:
            self.uploader = YouTubeUploader(settings=self.settings)
        try:
            self.uploader.initialize()
        except ReupError as e:
            logger.error("Upload session unavailable: %s", e.message)
            return e.message
        except Exception as e:
            logger.exception("Upload session unavailable")
            return f"Upload session unavailable: {e}"
        return None

    def _get_downloader(self) -> Downloader:
        if self.downloader is None:
            from reup.downloading.ytdlp import YtDlpDownloader

            self.downloader = YtDlpDownloader()
        return self.downloader

    def _set_stage(self, item: PipelineItem, stage: PipelineStage) -> None:
        item.stage = stage
        logger.info("Item %d (%s): %s", item.index + 1, item.source.id, stage.value)

    def _fail(self, item: PipelineItem, message: str, kind: ErrorKind) -> None:
        item.stage = PipelineStage.FAILED
        item.error = message
        item.error_kind = kind
        item.completed_at = datetime.now(UTC)
        logger.error("Item %d (%s) failed: %s", item.index + 1, item.source.id, message)
