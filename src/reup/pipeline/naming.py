"""File naming and upload title templating."""

import re

INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')
MAX_FILENAME_TITLE_LENGTH = 100


def sanitize_filename(name: str) -> str:
    """Drop characters that are not allowed in file names and cap the length."""
    sanitized = INVALID_FILENAME_CHARS.sub("", name).strip().rstrip(".")
    return sanitized[:MAX_FILENAME_TITLE_LENGTH] or "video"


def download_filename(index: int, title: str, container: str = "mp4") -> str:
    """``<index:03d>_<title>.<container>`` with a 1-based index."""
    return f"{index + 1:03d}_{sanitize_filename(title)}.{container}"


def render_title(template: str, original: str, filename: str, index: int) -> str:
    """Fill ``{original}``, ``{filename}`` and ``{index}`` (1-based) in a template."""
    return (
        template.replace("{original}", original)
        .replace("{filename}", filename)
        .replace("{index}", str(index + 1))
    )


def parse_tags(raw: str) -> list[str]:
    """Split a comma-separated tag string, dropping blanks."""
    return [tag.strip() for tag in raw.split(",") if tag.strip()]
