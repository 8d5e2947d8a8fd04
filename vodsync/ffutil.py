"""FFmpeg subprocess helpers."""

import logging
import shutil
import subprocess
from pathlib import Path

from vodsync.models import ROI

logger = logging.getLogger(__name__)

FRAME_PATTERN = "frame_%04d.png"


class FFmpegNotFoundError(RuntimeError):
    pass


class ExtractionFailed(RuntimeError):
    """Raised when ffmpeg cannot decode, crop or sample a clip."""
    pass


def check_ffmpeg() -> None:
    """Raise FFmpegNotFoundError if ffmpeg is not on PATH."""
    if shutil.which("ffmpeg") is None:
        raise FFmpegNotFoundError("ffmpeg not found on PATH")


def build_frame_filter(period: float, roi: ROI | None = None) -> str:
    """Video filter chain: optional crop, then one frame every *period* seconds."""
    if period <= 0:
        raise ValueError(f"Sampling period must be positive, got {period}")
    filters: list[str] = []
    if roi is not None:
        filters.append(roi.crop_filter)
    filters.append(f"fps=1/{period:g}")
    return ",".join(filters)


def extract_frames(
    input_path: Path,
    output_dir: Path,
    period: float = 4.0,
    roi: ROI | None = None,
) -> None:
    """Write one still image every *period* seconds of *input_path* into *output_dir*.

    Frames are numbered sequentially with zero padding, so sorting their
    names gives capture order.
    """
    cmd = [
        "ffmpeg", "-y",
        "-v", "error",
        "-i", str(input_path),
        "-vf", build_frame_filter(period, roi),
        str(output_dir / FRAME_PATTERN),
    ]
    logger.debug("Running %s", " ".join(cmd))
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except FileNotFoundError as e:
        raise ExtractionFailed(f"ffmpeg could not be started: {e}") from e

    if result.returncode != 0:
        stderr = (result.stderr or "").strip()
        raise ExtractionFailed(
            f"ffmpeg frame extraction failed (rc={result.returncode}): {stderr[-500:]}"
        )
