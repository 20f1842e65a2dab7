"""Application configuration using Pydantic BaseSettings."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Reup configuration loaded from environment variables."""

    model_config = {"env_prefix": "REUP_", "env_file": ".env", "extra": "ignore"}

    # Encoder
    ffmpeg_path: Path | None = None
    output_video_codec: str = "libx264"
    output_preset: str = "medium"
    output_crf: int = 23
    output_audio_codec: str = "aac"
    output_audio_bitrate: str = "192k"
    audio_sample_rate: int = 44100
    progress_poll_interval: float = 0.1

    # Upload
    credentials_path: Path | None = None
    channel_id: str | None = None
    upload_chunk_size_mb: int = 8
    default_language: str = "en"

    # Pipeline
    work_dir: Path = Path.home() / "Videos" / "YouTubeReup"
    encoded_subdir: str = "encoded"
    upload_delay_seconds: float = 30.0
    max_videos: int = 50
    quality: str = "1080p"
    title_template: str = "{original}"
    description_template: str = ""
    tags: list[str] = []
    category: int = 24
    privacy: str = "private"


def get_settings() -> Settings:
    """Return settings instance."""
    return Settings()
