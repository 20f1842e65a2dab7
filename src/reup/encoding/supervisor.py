"""Encoder supervisor: runs ffmpeg jobs with progress and cancellation."""

import logging
import queue
import subprocess
import threading
from collections import deque
from collections.abc import Callable
from pathlib import Path

from reup.cancellation import CancellationToken
from reup.config import Settings, get_settings
from reup.encoding.ffmpeg_builder import FFmpegFilterGraphBuilder
from reup.encoding.locator import locate_ffmpeg
from reup.encoding.progress import FFmpegProgressMonitor
from reup.models.encode import EncodeJob, EncodeOutcome, VoiceMergeOptions
from reup.models.errors import ErrorKind, NotFoundError

logger = logging.getLogger(__name__)

VIDEO_EXTENSIONS = {".mp4", ".webm", ".mkv", ".avi", ".mov", ".flv"}
AUDIO_EXTENSIONS = {".mp3", ".wav", ".aac", ".ogg", ".m4a", ".flac"}

STDERR_TAIL_LINES = 30


class EncoderSupervisor:
    """Owns the lifecycle of ffmpeg child processes.

    The executable is resolved once, at construction; a missing executable is
    the only condition reported by raising. Every job returns an
    EncodeOutcome.
    """

    def __init__(self, executable_path: Path | None = None, settings: Settings | None = None):
        self.settings = settings or get_settings()
        path = executable_path or locate_ffmpeg()
        if path is None or not Path(path).is_file():
            raise NotFoundError(
                "FFmpeg not found. Please install FFmpeg.",
                component="encoding",
                details={"command": str(path or "ffmpeg")},
            )
        self.executable_path = Path(path)
        self.builder = FFmpegFilterGraphBuilder(sample_rate=self.settings.audio_sample_rate)

    def run(
        self,
        job: EncodeJob,
        on_progress: Callable[[float], None] | None = None,
        cancel: CancellationToken | None = None,
    ) -> EncodeOutcome:
        """Apply the job's transformations and write its output file."""
        if not job.input_path.is_file():
            return EncodeOutcome.failed(
                f"Input file not found: {job.input_path}", kind=ErrorKind.NOT_FOUND
            )
        if job.input_path.resolve() == job.output_path.resolve():
            return EncodeOutcome.failed(
                "Output path must differ from input path", kind=ErrorKind.INVALID_ARGUMENT
            )

        job.output_path.parent.mkdir(parents=True, exist_ok=True)
        cmd = self.build_command(job)
        return self.execute(cmd, job.output_path, on_progress, cancel)

    def build_command(self, job: EncodeJob) -> list[str]:
        """Build the complete FFmpeg command for a transformation job."""
        chains = self.builder.build(job.spec)

        cmd = [str(self.executable_path), "-i", str(job.input_path)]
        cmd.extend(chains.to_args())
        cmd.extend(
            [
                "-c:v",
                self.settings.output_video_codec,
                "-preset",
                self.settings.output_preset,
                "-crf",
                str(self.settings.output_crf),
                "-c:a",
                self.settings.output_audio_codec,
                "-b:a",
                self.settings.output_audio_bitrate,
                "-y",
                str(job.output_path),
            ]
        )
        return cmd

    def extract_audio(
        self,
        video_path: Path,
        output_path: Path,
        on_progress: Callable[[float], None] | None = None,
        cancel: CancellationToken | None = None,
    ) -> EncodeOutcome:
        """Extract the audio track of a video as MP3."""
        if not video_path.is_file():
            return EncodeOutcome.failed(
                f"Input file not found: {video_path}", kind=ErrorKind.NOT_FOUND
            )
        output_path.parent.mkdir(parents=True, exist_ok=True)
        cmd = [
            str(self.executable_path),
            "-i",
            str(video_path),
            "-vn",
            "-acodec",
            "libmp3lame",
            "-q:a",
            "2",
            "-y",
            str(output_path),
        ]
        return self.execute(cmd, output_path, on_progress, cancel)

    def merge_voice(
        self,
        video_path: Path,
        output_path: Path,
        options: VoiceMergeOptions,
        on_progress: Callable[[float], None] | None = None,
        cancel: CancellationToken | None = None,
    ) -> EncodeOutcome:
        """Lay a voice track over a video, muting or mixing the original audio."""
        for path in (video_path, options.voice_path):
            if not path.is_file():
                return EncodeOutcome.failed(f"Input file not found: {path}", kind=ErrorKind.NOT_FOUND)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        cmd = self.build_merge_command(video_path, output_path, options)
        return self.execute(cmd, output_path, on_progress, cancel)

    def build_merge_command(
        self, video_path: Path, output_path: Path, options: VoiceMergeOptions
    ) -> list[str]:
        cmd = [str(self.executable_path), "-i", str(video_path), "-i", str(options.voice_path)]
        if options.mute_original_audio:
            cmd.extend(
                [
                    "-filter_complex",
                    f"[1:a]volume={options.voice_volume:.2f}[voice]",
                    "-map",
                    "0:v",
                    "-map",
                    "[voice]",
                ]
            )
        else:
            cmd.extend(
                [
                    "-filter_complex",
                    f"[0:a]volume={options.original_audio_volume:.2f}[a0];"
                    f"[1:a]volume={options.voice_volume:.2f}[a1];"
                    "[a0][a1]amix=inputs=2:duration=first[aout]",
                    "-map",
                    "0:v",
                    "-map",
                    "[aout]",
                ]
            )
        cmd.extend(
            [
                "-c:v",
                "copy",
                "-c:a",
                self.settings.output_audio_codec,
                "-b:a",
                self.settings.output_audio_bitrate,
            ]
        )
        if options.mute_original_audio:
            cmd.append("-shortest")
        cmd.extend(["-y", str(output_path)])
        return cmd

    def batch_merge_voice(
        self,
        video_dir: Path,
        voice_dir: Path,
        output_dir: Path,
        mute_original_audio: bool = False,
        voice_volume: float = 1.0,
        original_audio_volume: float = 0.3,
        on_progress: Callable[[float], None] | None = None,
        cancel: CancellationToken | None = None,
    ) -> list[EncodeOutcome]:
        """Merge voice files into videos, pairing both directories in name order."""
        cancel = cancel or CancellationToken()
        videos = sorted(p for p in video_dir.iterdir() if p.suffix.lower() in VIDEO_EXTENSIONS)
        voices = sorted(p for p in voice_dir.iterdir() if p.suffix.lower() in AUDIO_EXTENSIONS)
        total = min(len(videos), len(voices))
        output_dir.mkdir(parents=True, exist_ok=True)

        outcomes = []
        for i, (video, voice) in enumerate(zip(videos, voices)):
            if cancel.cancelled:
                break
            options = VoiceMergeOptions(
                voice_path=voice,
                mute_original_audio=mute_original_audio,
                voice_volume=voice_volume,
                original_audio_volume=original_audio_volume,
            )
            outcome = self.merge_voice(video, output_dir / video.name, options, cancel=cancel)
            outcomes.append(outcome)
            if not outcome.ok:
                logger.warning("Voice merge failed for %s: %s", video.name, outcome.message)
            if on_progress:
                on_progress((i + 1) / total)
        return outcomes

    def execute(
        self,
        cmd: list[str],
        output_path: Path,
        on_progress: Callable[[float], None] | None = None,
        cancel: CancellationToken | None = None,
    ) -> EncodeOutcome:
        """Run an ffmpeg command, translating its fate into an EncodeOutcome.

        Stderr is read on a helper thread; lines are handed back through a
        queue so progress callbacks run on the calling thread.
        """
        cancel = cancel or CancellationToken()
        if cancel.cancelled:
            return EncodeOutcome.cancelled()

        monitor = FFmpegProgressMonitor(on_progress)
        logger.debug("Running: %s", " ".join(cmd))

        try:
            process = subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
            )
        except FileNotFoundError:
            return EncodeOutcome.failed(
                f"FFmpeg executable not found: {cmd[0]}", kind=ErrorKind.NOT_FOUND
            )
        except OSError as e:
            return EncodeOutcome.failed(f"Failed to start FFmpeg: {e}")

        lines: queue.Queue[str | None] = queue.Queue()
        reader = threading.Thread(target=_read_stderr, args=(process, lines), daemon=True)
        reader.start()
        unregister = cancel.register(lambda: _kill(process))

        stderr_tail: deque[str] = deque(maxlen=STDERR_TAIL_LINES)
        try:
            while True:
                try:
                    line = lines.get(timeout=self.settings.progress_poll_interval)
                except queue.Empty:
                    if cancel.cancelled:
                        break
                    continue
                if line is None:
                    break
                stderr_tail.append(line.rstrip())
                monitor.parse_line(line)
            process.wait()
        finally:
            unregister()
            reader.join(timeout=5.0)

        if cancel.cancelled:
            logger.info("FFmpeg cancelled: %s", output_path.name)
            return EncodeOutcome.cancelled()

        if process.returncode != 0:
            logger.error("FFmpeg failed (code %d) for %s", process.returncode, output_path.name)
            return EncodeOutcome.failed(
                f"FFmpeg exited with code {process.returncode}",
                exit_code=process.returncode,
                stderr_tail=list(stderr_tail),
            )

        if on_progress:
            on_progress(1.0)
        return EncodeOutcome.completed(output_path)


def _read_stderr(process: subprocess.Popen, lines: queue.Queue) -> None:
    try:
        for line in process.stderr:
            lines.put(line)
    except (ValueError, OSError):
        # Pipe closed after the process was killed
        pass
    finally:
        lines.put(None)


def _kill(process: subprocess.Popen) -> None:
    try:
        process.kill()
    except OSError as e:
        logger.debug("Ignoring error while killing ffmpeg: %s", e)
