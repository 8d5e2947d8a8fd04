"""Finds the first frame showing the in-game 12-hour clock."""

import logging
import re
from pathlib import Path
from typing import Iterable, Iterator

from vodsync.analyzers import ocr
from vodsync.models import ClockReading, OcrMode

logger = logging.getLogger(__name__)

CLOCK_PATTERN = re.compile(r"(\d{1,2}):(\d{2}) ?([AP])M", re.IGNORECASE)


def normalize_clock(hour: int, minute: int, meridiem: str) -> tuple[int, int]:
    """Convert a 12-hour reading to 24-hour ``(hour, minute)``.

    The game shows midnight as ``12:xx AM`` and noon as ``12:xx PM``.
    """
    if not 1 <= hour <= 12 or not 0 <= minute <= 59:
        raise ValueError(f"Not a 12-hour clock reading: {hour}:{minute:02d} {meridiem}")

    meridiem = meridiem.upper()
    raw_hour = hour
    if meridiem == "PM":
        hour += 12
    if raw_hour == 12 and meridiem == "AM":
        hour = 0
    if hour == 24:
        hour = 12
    return hour, minute


def parse_clock(text: str) -> tuple[int, int] | None:
    """Return the 24-hour reading found in OCR *text*, or None."""
    m = CLOCK_PATTERN.search(text.strip())
    if m is None:
        return None
    hour, minute, meridiem = int(m.group(1)), int(m.group(2)), m.group(3) + "M"
    try:
        return normalize_clock(hour, minute, meridiem)
    except ValueError:
        logger.debug("Discarding implausible clock %r", m.group(0))
        return None


def _recognitions(
    frames: Iterable[Path],
    modes: Iterable[OcrMode],
    lang: str,
    oem: int,
) -> Iterator[tuple[Path, OcrMode, str]]:
    """Yield (frame, mode, text) lazily, frame by frame, mode by mode."""
    modes = tuple(modes)
    for frame in frames:
        for mode in modes:
            try:
                text = ocr.read_text(frame, mode, lang=lang, oem=oem)
            except ocr.RecognitionFailed as e:
                logger.warning("%s", e)
                continue
            yield frame, mode, text


def scan(
    frames: Iterable[Path],
    modes: Iterable[OcrMode] = ocr.DEFAULT_MODES,
    lang: str = "eng",
    oem: int = 3,
) -> ClockReading | None:
    """Return the clock reading of the earliest legible frame, or None.

    Frames must be in capture order. Scanning stops at the first match.
    """
    for frame, mode, text in _recognitions(frames, modes, lang, oem):
        parsed = parse_clock(text)
        if parsed is None:
            logger.debug("No clock on %s (%s): %r", frame.name, mode.name, text.strip())
            continue
        hour, minute = parsed
        logger.info("Clock %02d:%02d read on %s (%s)", hour, minute, frame.name, mode.name)
        return ClockReading(hour=hour, minute=minute, frame=frame, mode=mode.name)
    return None
