"""Wall-clock reconciliation and VOD duration checks.

The on-screen clock only gives an hour and a minute. Its date comes from the
reference instant, read in the timezone the clock is displayed in. That
timezone is passed in explicitly; it must match the streamer's real-world
timezone or the hour substitution is meaningless.
"""

import re
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from vodsync.models import ClockReading, SyncFound, SyncNotFound, SyncResult

SECONDS_PER_DAY = 86400

DURATION_PATTERN = re.compile(r"(?:(\d+)h)?(?:(\d+)m)?(\d+)s")


class MalformedDuration(ValueError):
    """Raised when a VOD duration is not in ``NhNmNs`` form."""
    pass


def parse_instant(text: str) -> datetime:
    """Parse an ISO-8601 timestamp as returned by the YouTube and Twitch APIs."""
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def resolve_offset(reading: ClockReading, reference: datetime, tz: ZoneInfo) -> int:
    """Seconds from *reference* until the wall-clock time in *reading*.

    A naive *reference* is taken to already be in *tz*. When the reading is
    earlier in the day than the reference, it belongs to the next day.
    """
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=tz)
    local = reference.astimezone(tz)
    candidate = local.replace(
        hour=reading.hour, minute=reading.minute, second=0, microsecond=0
    )
    diff = candidate.astimezone(timezone.utc) - local.astimezone(timezone.utc)
    seconds = int(diff.total_seconds())
    if seconds < 0:
        seconds += SECONDS_PER_DAY
    return seconds


def parse_duration(text: str) -> int:
    """Parse a ``NhNmNs`` duration (hours and minutes optional) into seconds."""
    m = DURATION_PATTERN.fullmatch(text.strip())
    if m is None:
        raise MalformedDuration(f"Unrecognized VOD duration: {text!r}")
    hours, minutes, seconds = (int(g) if g else 0 for g in m.groups())
    return hours * 3600 + minutes * 60 + seconds


def validate_offset(offset_seconds: int, vod_duration: str) -> SyncResult:
    """Accept *offset_seconds* only if it lies inside the VOD."""
    duration = parse_duration(vod_duration)
    if offset_seconds > duration:
        return SyncNotFound(reason="offset exceeds VOD duration")
    return SyncFound(offset_seconds=offset_seconds)


def format_offset(seconds: int) -> str:
    h = seconds // 3600
    m = (seconds % 3600) // 60
    s = seconds % 60
    return f"{h:02d}:{m:02d}:{s:02d}"


def format_twitch_timestamp(seconds: int) -> str:
    """Format an offset for a Twitch ``?t=`` link, e.g. ``1h02m03s``."""
    h, rem = divmod(seconds, 3600)
    m, s = divmod(rem, 60)
    return f"{h}h{m:02d}m{s:02d}s"
