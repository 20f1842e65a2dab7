"""Working directory layout for a batch run."""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class BatchWorkspace:
    """Download and encoded-output directories for one batch."""

    def __init__(self, base_dir: Path, encoded_subdir: str = "encoded"):
        self.base_dir = base_dir
        self.encoded_dir = base_dir / encoded_subdir

    def prepare(self) -> None:
        """Create the directories if they do not exist."""
        self.base_dir.mkdir(parents=True, exist_ok=True)
        self.encoded_dir.mkdir(parents=True, exist_ok=True)

    def download_path(self, filename: str) -> Path:
        return self.base_dir / filename

    def encoded_path(self, filename: str) -> Path:
        return self.encoded_dir / filename
