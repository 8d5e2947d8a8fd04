"""Frame sampler: turns a downloaded clip into an ordered set of stills."""

import logging
import re
from pathlib import Path

from vodsync import ffutil, files
from vodsync.models import ROI

logger = logging.getLogger(__name__)

# ffmpeg widens the zero padding past frame 9999, so names stop sorting numerically.
FRAME_INDEX = re.compile(r"frame_(\d+)\.png")


def capture_order(path: Path) -> tuple[float, str]:
    """Sort key putting sampled frames in the order ffmpeg wrote them."""
    m = FRAME_INDEX.fullmatch(path.name)
    return (int(m.group(1)), path.name) if m else (float("inf"), path.name)


def sample(
    clip_path: Path,
    output_dir: Path,
    roi: ROI | None = None,
    period: float = 4.0,
) -> list[Path]:
    """Sample *clip_path* into *output_dir* and return the frames in capture order.

    Anything already in *output_dir* is deleted first: the scanner treats
    every file there as a frame of this clip.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    files.delete_files(output_dir)

    ffutil.extract_frames(clip_path, output_dir, period=period, roi=roi)

    frames = sorted(files.list_files(output_dir), key=capture_order)
    logger.info("Sampled %d frames from %s every %gs", len(frames), clip_path, period)
    return frames
