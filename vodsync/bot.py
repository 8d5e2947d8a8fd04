"""Polls for new uploads and comments the matching Twitch VOD under them."""

import logging
import math
import time
from datetime import datetime, timezone
from typing import Callable
from zoneinfo import ZoneInfo

from pytesseract import TesseractNotFoundError

from vodsync import ffutil, timestamps
from vodsync.clients.twitch import TwitchClient
from vodsync.clients.youtube import YouTubeClient
from vodsync.config import Config, SyncConfig, missing_credentials
from vodsync.downloader import DownloadFailed, download_clip
from vodsync.engine import synchronize
from vodsync.ledger import ProcessedVideo, VideoLedger, VodRecord
from vodsync.models import SyncFound, SyncNotFound, SyncRequest, SyncResult, UploadedVideo, VodInfo

logger = logging.getLogger(__name__)

# Failures that end one synchronization attempt; the comment goes out without a timestamp.
ATTEMPT_ERRORS = (
    DownloadFailed,
    ffutil.FFmpegNotFoundError,
    ffutil.ExtractionFailed,
    timestamps.MalformedDuration,
    TesseractNotFoundError,
)


def build_comment(
    streamer: str,
    vod: VodInfo,
    now: datetime,
    tz: ZoneInfo,
    result: SyncResult | None = None,
) -> str:
    published = timestamps.parse_instant(vod.published_at)
    days_ago = math.floor((now - published).total_seconds() / 86400 + 0.5)
    local = published.astimezone(tz)
    text = (
        f"{streamer} played this game live on stream about {days_ago} "
        f"day{'' if days_ago == 1 else 's'} ago (on {local.month}/{local.day}/{local.year})."
    )
    if isinstance(result, SyncFound):
        link = f"{vod.url}?t={timestamps.format_twitch_timestamp(result.offset_seconds)}"
        return f"{text} The game starts at {result.timestamp} in the Twitch VOD: {link}"
    return f"{text} Check out the video description to see the Twitch VOD!"


def sync_upload(upload: UploadedVideo, vod: VodInfo, config: SyncConfig) -> SyncResult:
    """Download the start of *upload* and locate it inside *vod*.

    The VOD's publish time is when the broadcast went live, so offsets are
    measured from it.
    """
    clip = None
    try:
        clip = download_clip(
            upload.video_id,
            config.clips_dir,
            start=config.clip_start,
            end=config.clip_end,
            fmt=config.clip_format,
        )
        request = SyncRequest(
            clip=clip,
            reference_instant=timestamps.parse_instant(vod.published_at),
            vod=vod,
            roi=config.roi,
        )
        return synchronize(request, config)
    except ATTEMPT_ERRORS as e:
        logger.exception("Synchronization of %s failed", upload.video_id)
        return SyncNotFound(reason=str(e))
    finally:
        if clip is not None:
            clip.unlink(missing_ok=True)


def process_upload(
    upload: UploadedVideo,
    config: Config,
    youtube: YouTubeClient,
    twitch: TwitchClient,
    ledger: VideoLedger,
    now: datetime | None = None,
) -> ProcessedVideo:
    logger.info("Fetching Twitch VOD...")
    vod = twitch.get_vod_info_from_text(upload.description)
    record = None

    if vod is None:
        logger.info("No Twitch VOD found in YouTube video description (%r)", upload.description)
    else:
        result = sync_upload(upload, vod, config.sync) if config.sync.enabled else None
        comment = build_comment(
            config.bot.streamer,
            vod,
            now or datetime.now(timezone.utc),
            config.sync.tz,
            result,
        )
        logger.info("Posting comment (%r)", comment)
        youtube.add_comment(config.youtube.commenter_channel_id, upload.video_id, comment)
        logger.info("Comment posted")
        record = VodRecord(
            link=vod.url,
            published_at=vod.published_at,
            offset_seconds=result.offset_seconds if isinstance(result, SyncFound) else None,
        )

    video = ProcessedVideo(
        id=upload.video_id,
        title=upload.title,
        description=upload.description,
        published_at=upload.published_at,
        vod_info=record,
    )
    ledger.update(video)
    return video


def run(
    config: Config,
    youtube: YouTubeClient | None = None,
    twitch: TwitchClient | None = None,
    ledger: VideoLedger | None = None,
    sleep: Callable[[float], None] = time.sleep,
) -> ProcessedVideo | None:
    """Handle the newest upload, waiting for it to appear if it was already processed.

    Returns None when every try found an already processed upload.
    """
    if youtube is None or twitch is None:
        missing = missing_credentials(config)
        if missing:
            raise ValueError(f"Missing configuration: {', '.join(missing)}")
    youtube = youtube or YouTubeClient(
        api_key=config.youtube.api_key,
        client_id=config.youtube.client_id,
        client_secret=config.youtube.client_secret,
        commenter_refresh_token=config.youtube.commenter_refresh_token,
    )
    twitch = twitch or TwitchClient(config.twitch.client_id, config.twitch.client_secret)
    ledger = ledger or VideoLedger(config.bot.ledger_path)
    playlist_id = config.youtube.uploads_playlist_id

    for attempt in range(1, config.bot.max_tries + 1):
        logger.info("Retrieving last upload for YT playlist %s (try #%d)", playlist_id, attempt)
        upload = youtube.get_last_upload(playlist_id)
        logger.info("Fetched last upload: %s (%s)", upload.title, upload.published_at)

        if not ledger.processed(upload.video_id):
            return process_upload(upload, config, youtube, twitch, ledger)

        logger.info("Last upload already processed (%s)", upload.video_id)
        if attempt < config.bot.max_tries:
            sleep(config.bot.retry_delay)

    logger.info("Giving up after %d tries", config.bot.max_tries)
    return None
