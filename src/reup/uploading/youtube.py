"""Resumable video upload to YouTube through the Data API v3."""

import logging
from collections.abc import Callable
from datetime import UTC
from pathlib import Path
from typing import Any

import httplib2
from google.auth.exceptions import GoogleAuthError, TransportError
from google.oauth2 import service_account
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaFileUpload

from reup.cancellation import CancellationToken
from reup.config import Settings, get_settings
from reup.models.errors import ErrorKind, NotFoundError, ReupError, UploadError
from reup.models.upload import (
    MAX_DESCRIPTION_LENGTH,
    MAX_TITLE_LENGTH,
    ChannelInfo,
    PlaylistInfo,
    PrivacyStatus,
    UploadFailure,
    UploadMetadata,
    UploadResult,
    UploadSuccess,
)

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/youtube",
    "https://www.googleapis.com/auth/youtube.upload",
]

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"

THUMBNAIL_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".bmp": "image/bmp",
}

ServiceFactory = Callable[[Path], Any]


def truncate(text: str, limit: int) -> str:
    """Cut ``text`` to at most ``limit`` characters."""
    return text[:limit]


def thumbnail_mime_type(path: Path) -> str:
    return THUMBNAIL_MIME_TYPES.get(path.suffix.lower(), "image/jpeg")


def build_service_account_service(credentials_path: Path) -> Any:
    """Build a YouTube API client authorised by a service-account key file."""
    credentials = service_account.Credentials.from_service_account_file(
        str(credentials_path), scopes=SCOPES
    )
    return build("youtube", "v3", credentials=credentials, cache_discovery=False)


class YouTubeUploader:
    """Owns one authenticated YouTube session and uploads videos through it.

    Uploads never raise: every call returns an UploadSuccess or an
    UploadFailure. Thumbnail and playlist steps run after the video upload
    and are best-effort; their failures become warnings on the success.
    """

    def __init__(
        self,
        credentials_path: Path | None = None,
        channel_id: str | None = None,
        settings: Settings | None = None,
        service_factory: ServiceFactory | None = None,
    ):
        self.settings = settings or get_settings()
        self.credentials_path = credentials_path or self.settings.credentials_path
        self.channel_id = channel_id or self.settings.channel_id
        self.service_factory = service_factory or build_service_account_service
        self._service: Any = None

    @property
    def initialized(self) -> bool:
        return self._service is not None

    def initialize(self, credentials_path: Path | None = None) -> None:
        """Open the session. A second call on an initialised uploader does nothing."""
        if self._service is not None:
            return

        path = credentials_path or self.credentials_path
        if path is None or not Path(path).is_file():
            raise NotFoundError(
                "Service account JSON file not found",
                component="upload",
                details={"credentials_path": str(path) if path else None},
            )
        try:
            self._service = self.service_factory(Path(path))
        except (GoogleAuthError, ValueError, OSError) as e:
            raise UploadError(
                f"Failed to authenticate: {e}",
                details={"credentials_path": str(path)},
                kind=ErrorKind.REMOTE_REJECTED,
            )
        self.credentials_path = Path(path)
        logger.info("YouTube session initialised from %s", path)

    def close(self) -> None:
        if self._service is not None and hasattr(self._service, "close"):
            self._service.close()
        self._service = None

    def __enter__(self) -> "YouTubeUploader":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def build_video_body(self, metadata: UploadMetadata) -> dict:
        """Build the videos.insert resource body, enforcing the length caps."""
        snippet = {
            "title": truncate(metadata.title, MAX_TITLE_LENGTH),
            "description": truncate(metadata.description, MAX_DESCRIPTION_LENGTH),
            "tags": list(metadata.tags),
            "categoryId": str(int(metadata.category)),
            "defaultLanguage": self.settings.default_language,
            "defaultAudioLanguage": self.settings.default_language,
        }
        if self.channel_id:
            snippet["channelId"] = self.channel_id

        status = {
            "privacyStatus": metadata.privacy.value,
            "madeForKids": metadata.made_for_kids,
            "selfDeclaredMadeForKids": metadata.made_for_kids,
        }
        # Only private videos can carry a scheduled publish time.
        if metadata.publish_at is not None and metadata.privacy == PrivacyStatus.PRIVATE:
            publish_at = metadata.publish_at.astimezone(UTC)
            status["publishAt"] = publish_at.isoformat().replace("+00:00", "Z")

        return {"snippet": snippet, "status": status}

    def upload_video(
        self,
        file_path: Path,
        metadata: UploadMetadata,
        on_progress: Callable[[float], None] | None = None,
        cancel: CancellationToken | None = None,
    ) -> UploadResult:
        """Upload one video, then attach its thumbnail and playlist membership."""
        cancel = cancel or CancellationToken()

        try:
            self.initialize()
        except ReupError as e:
            return UploadFailure(reason=e.message, kind=e.kind or ErrorKind.REMOTE_REJECTED)

        if not file_path.is_file():
            return UploadFailure(
                reason=f"Video file not found: {file_path}", kind=ErrorKind.NOT_FOUND
            )

        body = self.build_video_body(metadata)
        chunk_size = self.settings.upload_chunk_size_mb * 1024 * 1024

        try:
            media = MediaFileUpload(
                str(file_path), mimetype="video/*", chunksize=chunk_size, resumable=True
            )
            request = self._service.videos().insert(
                part="snippet,status",
                body=body,
                media_body=media,
                notifySubscribers=metadata.notify_subscribers,
            )

            response = None
            while response is None:
                if cancel.cancelled:
                    logger.info("Upload of %s cancelled", file_path.name)
                    return UploadFailure(reason="cancelled", kind=ErrorKind.CANCELLED)
                status, response = request.next_chunk()
                if status is not None and on_progress:
                    on_progress(min(1.0, status.progress()))
        except HttpError as e:
            logger.error("Upload of %s rejected: %s", file_path.name, e)
            return UploadFailure(reason=_http_error_reason(e), kind=ErrorKind.REMOTE_REJECTED)
        except (httplib2.HttpLib2Error, TransportError, OSError) as e:
            logger.error("Upload of %s failed: %s", file_path.name, e)
            return UploadFailure(reason=f"Upload failed: {e}", kind=ErrorKind.NETWORK_FAILURE)
        except GoogleAuthError as e:
            logger.error("Upload of %s lost its credentials: %s", file_path.name, e)
            return UploadFailure(
                reason=f"Authentication failed: {e}", kind=ErrorKind.REMOTE_REJECTED
            )

        video_id = response.get("id") if isinstance(response, dict) else None
        if not video_id:
            return UploadFailure(
                reason="Upload response did not include a video id",
                kind=ErrorKind.REMOTE_REJECTED,
            )

        if on_progress:
            on_progress(1.0)

        warnings = []
        if metadata.thumbnail_path is not None and metadata.thumbnail_path.is_file():
            warning = self._run_compensating(
                "thumbnail", cancel, lambda: self._set_thumbnail(video_id, metadata.thumbnail_path)
            )
            if warning:
                warnings.append(warning)

        if metadata.playlist_id:
            warning = self._run_compensating(
                "playlist", cancel, lambda: self._add_to_playlist(video_id, metadata.playlist_id)
            )
            if warning:
                warnings.append(warning)

        logger.info("Uploaded %s as %s", file_path.name, video_id)
        return UploadSuccess(
            remote_id=video_id, url=WATCH_URL.format(video_id=video_id), warnings=warnings
        )

    def _run_compensating(
        self, label: str, cancel: CancellationToken, action: Callable[[], None]
    ) -> str | None:
        """Run a post-upload step; return a warning instead of failing the upload."""
        if cancel.cancelled:
            return f"{label} skipped: cancelled"
        try:
            action()
        except (HttpError, GoogleAuthError, httplib2.HttpLib2Error, OSError) as e:
            logger.warning("Setting %s failed, keeping the upload: %s", label, e)
            return f"{label} failed: {e}"
        return None

    def _set_thumbnail(self, video_id: str, thumbnail_path: Path) -> None:
        media = MediaFileUpload(str(thumbnail_path), mimetype=thumbnail_mime_type(thumbnail_path))
        self._service.thumbnails().set(videoId=video_id, media_body=media).execute()

    def _add_to_playlist(self, video_id: str, playlist_id: str) -> None:
        body = {
            "snippet": {
                "playlistId": playlist_id,
                "resourceId": {"kind": "youtube#video", "videoId": video_id},
            }
        }
        self._service.playlistItems().insert(part="snippet", body=body).execute()

    def list_playlists(self) -> list[PlaylistInfo]:
        """Return up to 50 playlists of the authenticated channel."""
        self.initialize()
        try:
            response = (
                self._service.playlists()
                .list(part="snippet,contentDetails", mine=True, maxResults=50)
                .execute()
            )
        except HttpError as e:
            raise UploadError(_http_error_reason(e), kind=ErrorKind.REMOTE_REJECTED)
        except GoogleAuthError as e:
            raise UploadError(f"Authentication failed: {e}", kind=ErrorKind.REMOTE_REJECTED)

        return [
            PlaylistInfo(
                id=item["id"],
                title=item.get("snippet", {}).get("title", ""),
                item_count=item.get("contentDetails", {}).get("itemCount", 0),
            )
            for item in response.get("items", [])
        ]

    def get_channel_info(self) -> ChannelInfo | None:
        """Return the authenticated channel, or None when the identity has none."""
        self.initialize()
        try:
            response = (
                self._service.channels()
                .list(part="snippet,contentDetails,statistics", mine=True)
                .execute()
            )
        except HttpError as e:
            raise UploadError(_http_error_reason(e), kind=ErrorKind.REMOTE_REJECTED)
        except GoogleAuthError as e:
            raise UploadError(f"Authentication failed: {e}", kind=ErrorKind.REMOTE_REJECTED)

        items = response.get("items") or []
        if not items:
            return None
        item = items[0]
        statistics = item.get("statistics", {})
        return ChannelInfo(
            id=item["id"],
            title=item.get("snippet", {}).get("title", ""),
            subscriber_count=_optional_int(statistics.get("subscriberCount")),
            video_count=_optional_int(statistics.get("videoCount")),
        )

    def verify_connection(self) -> bool:
        """Initialise and fetch the channel; True iff a channel came back."""
        try:
            self.initialize()
            return self.get_channel_info() is not None
        except Exception as e:
            logger.warning("YouTube connection check failed: %s", e)
            return False


def _http_error_reason(error: HttpError) -> str:
    reason = getattr(error, "reason", None) or str(error)
    status = getattr(error.resp, "status", None)
    return f"HTTP {status}: {reason}" if status else reason


def _optional_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
