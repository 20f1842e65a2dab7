"""FFmpeg progress monitoring."""

import re
from collections.abc import Callable

# The encoder prints no structured progress, so both values are scraped from
# free-text stderr. Locales that use a decimal comma will not match.
DURATION_PATTERN = re.compile(r"Duration: (\d{2}):(\d{2}):(\d{2})\.(\d{2})")
TIME_PATTERN = re.compile(r"time=(\d{2}):(\d{2}):(\d{2})\.(\d{2})")


def _to_seconds(match: re.Match) -> float:
    hours, minutes, seconds, hundredths = (int(g) for g in match.groups())
    return hours * 3600 + minutes * 60 + seconds + hundredths / 100


class FFmpegProgressMonitor:
    """Monitor FFmpeg progress from stderr output."""

    def __init__(self, callback: Callable[[float], None] | None = None):
        self.callback = callback
        self.total_duration: float | None = None
        self.current_time = 0.0

    def parse_line(self, line: str) -> float | None:
        """Feed one stderr line; return the new fraction if the line carried one."""
        if self.total_duration is None:
            match = DURATION_PATTERN.search(line)
            if match:
                self.total_duration = _to_seconds(match)

        if not self.total_duration:
            return None

        match = TIME_PATTERN.search(line)
        if not match:
            return None

        self.current_time = _to_seconds(match)
        progress = self.progress
        if self.callback:
            self.callback(progress)
        return progress

    @property
    def progress(self) -> float:
        """Current progress as fraction [0, 1]."""
        if not self.total_duration:
            return 0.0
        return max(0.0, min(1.0, self.current_time / self.total_duration))
