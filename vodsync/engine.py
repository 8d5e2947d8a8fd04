"""Orchestrator — runs one timestamp synchronization attempt."""

import logging
from typing import Callable

from vodsync import ffutil, timestamps
from vodsync.analyzers.clock import scan
from vodsync.analyzers.frames import sample
from vodsync.config import SyncConfig
from vodsync.models import SyncNotFound, SyncRequest, SyncResult

logger = logging.getLogger(__name__)


def synchronize(
    request: SyncRequest,
    config: SyncConfig,
    on_progress: Callable[[str, float], None] | None = None,
) -> SyncResult:
    """Locate the in-game clock in *request.clip* and turn it into a VOD offset.

    Args:
        request: Clip, reference instant and VOD to reconcile against.
        config: Sampling, OCR and timezone settings.
        on_progress: Optional callback(stage_name, fraction_complete).

    Raises:
        ffutil.FFmpegNotFoundError: ffmpeg is not installed.
        ffutil.ExtractionFailed: the clip could not be sampled.
        timestamps.MalformedDuration: the VOD duration is unreadable.
    """

    def _progress(stage: str, frac: float) -> None:
        if on_progress:
            on_progress(stage, frac)

    ffutil.check_ffmpeg()

    # Fail before the slow steps if the VOD length is unusable.
    vod_seconds = request.vod.duration_seconds

    _progress("Sampling frames", 0.0)
    frames = sample(
        request.clip,
        config.images_dir,
        roi=request.roi or config.roi,
        period=config.sample_period,
    )

    _progress(f"Reading clock on {len(frames)} frames", 0.3)
    reading = scan(frames, modes=config.ocr_modes, lang=config.ocr_lang, oem=config.ocr_oem)
    if reading is None:
        logger.info("No clock recognized in %s", request.clip)
        _progress("Done", 1.0)
        return SyncNotFound(reason="clock not recognized")

    _progress("Resolving offset", 0.9)
    offset = timestamps.resolve_offset(reading, request.reference_instant, config.tz)
    result = timestamps.validate_offset(offset, request.vod.duration)
    if isinstance(result, SyncNotFound):
        logger.warning(
            "Offset %ds from clock %02d:%02d exceeds VOD duration %ds",
            offset, reading.hour, reading.minute, vod_seconds,
        )
    else:
        logger.info("Gameplay starts %s into %s", result.timestamp, request.vod.url)

    _progress("Done", 1.0)
    return result
