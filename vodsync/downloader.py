"""Downloads a time window of a YouTube video with yt-dlp."""

import logging
from pathlib import Path

from yt_dlp import YoutubeDL
from yt_dlp.utils import DownloadError, download_range_func

logger = logging.getLogger(__name__)

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"


class DownloadFailed(RuntimeError):
    pass


def build_options(output_dir: Path, start: float, end: float | None, fmt: str) -> dict:
    """yt-dlp options for downloading only [start, end) of a video."""
    return {
        "format": fmt,
        "outtmpl": str(output_dir / "%(id)s.%(ext)s"),
        "download_ranges": download_range_func(None, [(start, end if end is not None else float("inf"))]),
        "overwrites": True,
        "quiet": True,
        "noprogress": True,
    }


def download_clip(
    video_id: str,
    output_dir: Path,
    start: float = 0,
    end: float | None = None,
    fmt: str = "247",
) -> Path:
    """Download [start, end) seconds of *video_id* into *output_dir* and return the file."""
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    url = WATCH_URL.format(video_id=video_id)
    logger.info("Downloading %s [%s-%s] (format %s)", url, start, end if end is not None else "end", fmt)

    try:
        with YoutubeDL(build_options(output_dir, start, end, fmt)) as ydl:
            info = ydl.extract_info(url, download=True)
            path = Path(ydl.prepare_filename(info))
    except DownloadError as e:
        raise DownloadFailed(f"yt-dlp failed for {url}: {e}") from e

    if not path.exists():
        raise DownloadFailed(f"yt-dlp reported {path} but no file was written")
    return path
