"""Downloader backed by yt-dlp."""

import logging
from collections.abc import Callable
from pathlib import Path

import yt_dlp
from yt_dlp.utils import DownloadError as YtDlpDownloadError

from reup.cancellation import CancellationToken
from reup.models.download import DownloadOption, QualityPreference
from reup.models.errors import DownloadError, ErrorKind, OperationCancelledError

logger = logging.getLogger(__name__)

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"


class _Cancelled(Exception):
    """Raised from a progress hook to abort yt-dlp."""


def format_selector(quality: QualityPreference, height: int | None = None) -> str:
    """Build a yt-dlp format selector preferring mp4 video with m4a audio."""
    if quality == QualityPreference.LOWEST:
        return "wv*[ext=mp4]+wa[ext=m4a]/w[ext=mp4]/w"
    cap = height or quality.max_height
    if cap is None:
        return "bv*[ext=mp4]+ba[ext=m4a]/b[ext=mp4]/b"
    return f"bv*[height<={cap}][ext=mp4]+ba[ext=m4a]/b[height<={cap}][ext=mp4]/b[height<={cap}]/b"


def pick_height(formats: list[dict], quality: QualityPreference) -> int | None:
    """Pick the best available video height allowed by ``quality``."""
    heights = sorted(
        {f["height"] for f in formats if f.get("height") and f.get("vcodec") not in (None, "none")}
    )
    if not heights:
        return None
    if quality == QualityPreference.LOWEST:
        return heights[0]
    cap = quality.max_height
    allowed = [h for h in heights if cap is None or h <= cap]
    return allowed[-1] if allowed else heights[0]


class YtDlpDownloader:
    """Resolves and downloads YouTube videos with yt-dlp."""

    def __init__(self, cookie_file: Path | None = None, ydl_opts: dict | None = None):
        self.cookie_file = cookie_file
        self.extra_opts = ydl_opts or {}

    def _base_opts(self) -> dict:
        opts = {"quiet": True, "no_warnings": True, "noprogress": True}
        if self.cookie_file:
            opts["cookiefile"] = str(self.cookie_file)
        opts.update(self.extra_opts)
        return opts

    def resolve_best_option(self, source_id: str, quality: QualityPreference) -> DownloadOption:
        url = WATCH_URL.format(video_id=source_id)
        try:
            with yt_dlp.YoutubeDL(self._base_opts()) as ydl:
                info = ydl.extract_info(url, download=False)
        except YtDlpDownloadError as e:
            raise DownloadError(f"Could not resolve {source_id}: {e}", details={"id": source_id})

        if not info:
            raise DownloadError(f"yt-dlp returned no info for {source_id}", details={"id": source_id})

        height = pick_height(info.get("formats") or [], quality)
        return DownloadOption(
            format_selector=format_selector(quality, height),
            container="mp4",
            height=height,
            label=f"{height}p" if height else quality.value,
        )

    def download(
        self,
        destination: Path,
        source_id: str,
        option: DownloadOption,
        on_progress: Callable[[float], None] | None = None,
        cancel: CancellationToken | None = None,
    ) -> None:
        cancel = cancel or CancellationToken()
        cancel.raise_if_cancelled(component="download")

        def hook(status: dict) -> None:
            if cancel.cancelled:
                raise _Cancelled()
            if status.get("status") != "downloading" or not on_progress:
                return
            total = status.get("total_bytes") or status.get("total_bytes_estimate")
            if total:
                on_progress(min(1.0, status.get("downloaded_bytes", 0) / total))

        destination.parent.mkdir(parents=True, exist_ok=True)
        opts = self._base_opts()
        opts.update(
            {
                "format": option.format_selector,
                "outtmpl": str(destination),
                "merge_output_format": option.container,
                "overwrites": True,
                "progress_hooks": [hook],
            }
        )

        url = WATCH_URL.format(video_id=source_id)
        try:
            with yt_dlp.YoutubeDL(opts) as ydl:
                ydl.download([url])
        except _Cancelled:
            raise OperationCancelledError(component="download")
        except YtDlpDownloadError as e:
            if cancel.cancelled:
                raise OperationCancelledError(component="download")
            raise DownloadError(str(e), details={"id": source_id}, kind=ErrorKind.NETWORK_FAILURE)

        if not destination.is_file():
            raise DownloadError(
                f"Download finished but {destination.name} was not written",
                details={"id": source_id},
                kind=ErrorKind.NOT_FOUND,
            )
        logger.info("Downloaded %s to %s", source_id, destination)
