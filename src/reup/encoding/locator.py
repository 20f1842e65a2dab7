"""Discovery of the ffmpeg executable."""

import logging
import os
from collections.abc import Iterable, Iterator
from functools import lru_cache
from pathlib import Path

from reup.config import get_settings

logger = logging.getLogger(__name__)

FFMPEG_FILE_NAME = "ffmpeg.exe" if os.name == "nt" else "ffmpeg"

_PACKAGE_DIR = Path(__file__).resolve().parent.parent


def probe_directories(
    base_dir: Path | None = None,
    cwd: Path | None = None,
    path_env: str | None = None,
) -> Iterator[Path]:
    """Yield candidate directories in probe order, without duplicates."""
    base_dir = base_dir or _PACKAGE_DIR
    cwd = cwd or Path.cwd()
    if path_env is None:
        path_env = os.environ.get("PATH", "")

    candidates = [
        base_dir / "ffmpeg",
        base_dir.parent / "ffmpeg",
        base_dir,
        cwd,
        cwd / "ffmpeg",
    ]
    candidates.extend(Path(p) for p in path_env.split(os.pathsep) if p)

    seen = set()
    for directory in candidates:
        key = str(directory)
        if key in seen:
            continue
        seen.add(key)
        yield directory


def find_ffmpeg(directories: Iterable[Path], file_name: str = FFMPEG_FILE_NAME) -> Path | None:
    """Return the first ``file_name`` that exists in ``directories``."""
    for directory in directories:
        candidate = directory / file_name
        if candidate.is_file():
            return candidate
    return None


@lru_cache(maxsize=1)
def locate_ffmpeg() -> Path | None:
    """Find ffmpeg once per process: explicit setting first, then the probe order."""
    configured = get_settings().ffmpeg_path
    if configured is not None:
        if configured.is_file():
            return configured
        logger.warning("Configured ffmpeg path does not exist: %s", configured)

    found = find_ffmpeg(probe_directories())
    if found is None:
        logger.warning("ffmpeg not found in any probe directory")
    else:
        logger.debug("Using ffmpeg at %s", found)
    return found


def is_ffmpeg_available() -> bool:
    return locate_ffmpeg() is not None
