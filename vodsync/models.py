"""Shared data types used across vodsync."""

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True)
class ROI:
    """Pixel rectangle where the in-game clock renders on screen."""

    x: int
    y: int
    w: int
    h: int

    def __post_init__(self) -> None:
        if self.w <= 0 or self.h <= 0:
            raise ValueError(f"ROI width and height must be positive, got {self.w}x{self.h}")
        if self.x < 0 or self.y < 0:
            raise ValueError(f"ROI origin must be non-negative, got ({self.x}, {self.y})")

    @property
    def crop_filter(self) -> str:
        return f"crop={self.w}:{self.h}:{self.x}:{self.y}"

    @classmethod
    def parse(cls, text: str) -> "ROI":
        """Build an ROI from an ``x,y,w,h`` string."""
        parts = [p.strip() for p in text.split(",")]
        if len(parts) != 4:
            raise ValueError(f"ROI must be 'x,y,w,h', got {text!r}")
        x, y, w, h = (int(p) for p in parts)
        return cls(x=x, y=y, w=w, h=h)


@dataclass(frozen=True)
class OcrMode:
    """One Tesseract recognition strategy (page segmentation mode)."""

    name: str
    psm: int


@dataclass(frozen=True)
class ClockReading:
    """A 24-hour clock reading recognized on a frame."""

    hour: int
    minute: int
    frame: Path | None = None
    mode: str | None = None


@dataclass
class VodInfo:
    """A streaming-platform recording.

    ``duration`` keeps the platform's raw ``NhNmNs`` string.
    """

    url: str
    published_at: str
    duration: str

    @property
    def duration_seconds(self) -> int:
        from vodsync.timestamps import parse_duration

        return parse_duration(self.duration)


@dataclass
class SyncRequest:
    """Everything one synchronization attempt needs from its caller."""

    clip: Path
    reference_instant: datetime
    vod: VodInfo
    roi: ROI | None = None


@dataclass(frozen=True)
class SyncFound:
    offset_seconds: int

    @property
    def timestamp(self) -> str:
        from vodsync.timestamps import format_offset

        return format_offset(self.offset_seconds)


@dataclass(frozen=True)
class SyncNotFound:
    reason: str


SyncResult = SyncFound | SyncNotFound


@dataclass
class UploadedVideo:
    """The most recent upload of a watched playlist."""

    video_id: str
    title: str
    description: str
    published_at: str
