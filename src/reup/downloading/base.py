"""Downloader collaborator contract."""

from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from reup.cancellation import CancellationToken
from reup.models.download import DownloadOption, QualityPreference


class Downloader(Protocol):
    """Fetches a source video to a local file.

    Implementations raise ``DownloadError`` with a descriptive message on
    failure and ``OperationCancelledError`` once ``cancel`` fires.
    """

    def resolve_best_option(
        self, source_id: str, quality: QualityPreference
    ) -> DownloadOption: ...

    def download(
        self,
        destination: Path,
        source_id: str,
        option: DownloadOption,
        on_progress: Callable[[float], None] | None = None,
        cancel: CancellationToken | None = None,
    ) -> None: ...
