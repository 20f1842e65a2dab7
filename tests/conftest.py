"""Shared test fixtures and test doubles."""

import os
import stat
import sys
from pathlib import Path

import pytest

from reup.config import Settings
from reup.models.download import DownloadOption, SourceVideo
from reup.models.encode import EncodeOutcome
from reup.models.errors import DownloadError, OperationCancelledError
from reup.models.upload import UploadFailure, UploadSuccess

FAKE_FFMPEG = """#!{python}
import os
import sys
import time

mode = os.environ.get("FAKE_FFMPEG_MODE", "ok")
args_file = os.environ.get("FAKE_FFMPEG_ARGS_FILE")
if args_file:
    with open(args_file, "w") as f:
        f.write("\\n".join(sys.argv[1:]))

err = sys.stderr
err.write("Input #0, mov,mp4,m4a, from 'in.mp4':\\n")
err.write("  Duration: 00:00:10.00, start: 0.000000, bitrate: 100 kb/s\\n")
err.flush()
if mode == "fail":
    err.write("Conversion failed!\\n")
    err.flush()
    sys.exit(3)
for t in ("00:00:02.50", "00:00:05.00", "00:00:10.00"):
    err.write("frame=   10 fps=0.0 q=28.0 size=       0kB time=" + t + " bitrate=N/A\\n")
    err.flush()
    if mode == "hang":
        time.sleep(60)
with open(sys.argv[-1], "wb") as f:
    f.write(b"encoded")
sys.exit(0)
"""


@pytest.fixture
def settings(tmp_path):
    """Settings isolated from the environment."""
    return Settings(
        _env_file=None,
        work_dir=tmp_path / "work",
        upload_delay_seconds=0,
        progress_poll_interval=0.05,
    )


@pytest.fixture
def fake_ffmpeg(tmp_path):
    """An executable that mimics ffmpeg's stderr; behaviour set by FAKE_FFMPEG_MODE."""
    if os.name == "nt":
        pytest.skip("fake ffmpeg script needs a POSIX shebang")
    path = tmp_path / "bin" / "ffmpeg"
    path.parent.mkdir()
    path.write_text(FAKE_FFMPEG.format(python=sys.executable))
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def input_video(tmp_path):
    path = tmp_path / "input.mp4"
    path.write_bytes(b"\x00" * 2048)
    return path


class FakeDownloader:
    """Writes a small file per source; ids listed in ``failing`` raise DownloadError."""

    def __init__(self, failing: set[str] | None = None, cancel_on: str | None = None):
        self.failing = failing or set()
        self.cancel_on = cancel_on
        self.downloaded: list[str] = []

    def resolve_best_option(self, source_id, quality):
        return DownloadOption(format_selector="best", container="mp4", height=720)

    def download(self, destination, source_id, option, on_progress=None, cancel=None):
        if source_id in self.failing:
            raise DownloadError(f"Video {source_id} is unavailable")
        if source_id == self.cancel_on:
            cancel.cancel()
            raise OperationCancelledError(component="download")
        if on_progress:
            on_progress(0.5)
            on_progress(1.0)
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(b"video:" + source_id.encode())
        self.downloaded.append(source_id)


class FakeEncoder:
    """Copies input to output; ``fail`` lists input names whose encode fails."""

    def __init__(self, fail: set[str] | None = None):
        self.fail = fail or set()
        self.jobs = []

    def run(self, job, on_progress=None, cancel=None):
        self.jobs.append(job)
        if job.input_path.name in self.fail:
            return EncodeOutcome.failed("FFmpeg exited with code 1", exit_code=1)
        if on_progress:
            on_progress(0.5)
        job.output_path.parent.mkdir(parents=True, exist_ok=True)
        job.output_path.write_bytes(job.input_path.read_bytes())
        if on_progress:
            on_progress(1.0)
        return EncodeOutcome.completed(job.output_path)


class FakeUploader:
    """Records uploads; file stems listed in ``reject`` come back as failures."""

    def __init__(self, reject: set[str] | None = None, init_error: Exception | None = None):
        self.reject = reject or set()
        self.init_error = init_error
        self.uploads: list[tuple[Path, object]] = []

    def initialize(self, credentials_path=None):
        if self.init_error is not None:
            raise self.init_error

    def upload_video(self, file_path, metadata, on_progress=None, cancel=None):
        self.uploads.append((file_path, metadata))
        if file_path.stem in self.reject:
            return UploadFailure(reason="quota exceeded", kind="remote_rejected")
        if on_progress:
            on_progress(1.0)
        video_id = f"vid{len(self.uploads)}"
        return UploadSuccess(remote_id=video_id, url=f"https://www.youtube.com/watch?v={video_id}")


@pytest.fixture
def sources():
    return [SourceVideo(id=f"id{i}", title=f"Video {i}") for i in range(1, 5)]
