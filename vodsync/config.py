"""JSON configuration with environment overrides for deployment secrets."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from vodsync.analyzers.ocr import DEFAULT_MODES
from vodsync.models import ROI, OcrMode


@dataclass
class SyncConfig:
    """Configuration for the clip -> frames -> clock -> offset pipeline."""

    enabled: bool = True
    roi: ROI | None = None
    sample_period: float = 4.0
    ocr_modes: list[OcrMode] = field(default_factory=lambda: list(DEFAULT_MODES))
    ocr_lang: str = "eng"
    ocr_oem: int = 3
    # Timezone of the on-screen clock.
    timezone: str = "America/Toronto"
    images_dir: Path = Path("images")
    clips_dir: Path = Path("clips")
    clip_start: int = 0
    clip_end: int = 120
    clip_format: str = "247"

    @property
    def tz(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@dataclass
class YouTubeConfig:
    api_key: str = ""
    client_id: str = ""
    client_secret: str = ""
    commenter_channel_id: str = ""
    commenter_refresh_token: str = ""
    uploads_playlist_id: str = ""


@dataclass
class TwitchConfig:
    client_id: str = ""
    client_secret: str = ""


@dataclass
class BotConfig:
    """Configuration for the upload-polling loop."""

    ledger_path: Path = Path("video-processing-details.json")
    max_tries: int = 5
    retry_delay: float = 30.0
    streamer: str = "Kripp"


@dataclass
class Config:
    """Top-level configuration."""

    version: str = "1"
    log_level: str = "INFO"
    sync: SyncConfig = field(default_factory=SyncConfig)
    youtube: YouTubeConfig = field(default_factory=YouTubeConfig)
    twitch: TwitchConfig = field(default_factory=TwitchConfig)
    bot: BotConfig = field(default_factory=BotConfig)


# env var -> (section, attribute)
ENV_OVERRIDES: dict[str, tuple[str | None, str]] = {
    "YOUTUBE_API_KEY": ("youtube", "api_key"),
    "YOUTUBE_CLIENT_ID": ("youtube", "client_id"),
    "YOUTUBE_CLIENT_SECRET": ("youtube", "client_secret"),
    "YOUTUBE_COMMENTER_CHANNEL_ID": ("youtube", "commenter_channel_id"),
    "YOUTUBE_COMMENTER_REFRESH_TOKEN": ("youtube", "commenter_refresh_token"),
    "YOUTUBE_UPLOADS_PLAYLIST_ID": ("youtube", "uploads_playlist_id"),
    "TWITCH_CLIENT_ID": ("twitch", "client_id"),
    "TWITCH_CLIENT_SECRET": ("twitch", "client_secret"),
    "VIDEO_PROCESSING_FILEPATH": ("bot", "ledger_path"),
    "VODSYNC_TIMEZONE": ("sync", "timezone"),
    "VODSYNC_LOG_LEVEL": (None, "log_level"),
}


def timezone_name(name: str) -> str:
    """Return *name* if it is a known IANA timezone, else raise ValueError."""
    try:
        ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValueError(f"Unknown timezone: {name!r}") from e
    return name


def _sync_config(data: dict) -> SyncConfig:
    data = dict(data)
    if data.get("roi") is not None:
        data["roi"] = ROI(**data["roi"])
    if "ocr_modes" in data:
        data["ocr_modes"] = [OcrMode(**m) for m in data["ocr_modes"]]
        if not data["ocr_modes"]:
            raise ValueError("sync.ocr_modes must list at least one mode")
    for key in ("images_dir", "clips_dir"):
        if key in data:
            data[key] = Path(data[key])
    cfg = SyncConfig(**data)
    if cfg.clip_end <= cfg.clip_start:
        raise ValueError("sync.clip_end must be after sync.clip_start")
    return cfg


def _bot_config(data: dict) -> BotConfig:
    data = dict(data)
    if "ledger_path" in data:
        data["ledger_path"] = Path(data["ledger_path"])
    return BotConfig(**data)


def apply_env(config: Config, env: Mapping[str, str]) -> Config:
    """Overwrite config values with any non-empty environment variables."""
    for name, (section, attr) in ENV_OVERRIDES.items():
        value = env.get(name)
        if not value:
            continue
        target = getattr(config, section) if section else config
        if isinstance(getattr(target, attr), Path):
            value = Path(value)
        setattr(target, attr, value)
    timezone_name(config.sync.timezone)
    return config


def missing_credentials(config: Config) -> list[str]:
    """Names of the credentials the polling bot needs but does not have."""
    required = {
        "youtube.api_key": config.youtube.api_key,
        "youtube.client_id": config.youtube.client_id,
        "youtube.client_secret": config.youtube.client_secret,
        "youtube.commenter_channel_id": config.youtube.commenter_channel_id,
        "youtube.commenter_refresh_token": config.youtube.commenter_refresh_token,
        "youtube.uploads_playlist_id": config.youtube.uploads_playlist_id,
        "twitch.client_id": config.twitch.client_id,
        "twitch.client_secret": config.twitch.client_secret,
    }
    return [name for name, value in required.items() if not value]


def load_config(path: str | Path | None = None, env: Mapping[str, str] | None = None) -> Config:
    """Load configuration from an optional JSON file, then apply env overrides."""
    config = Config()
    if path is not None:
        data = json.loads(Path(path).read_text())
        if not isinstance(data, dict):
            raise ValueError("Config file must contain a JSON object")
        config = Config(
            version=data.get("version", "1"),
            log_level=data.get("log_level", "INFO"),
            sync=_sync_config(data["sync"]) if "sync" in data else SyncConfig(),
            youtube=YouTubeConfig(**data["youtube"]) if "youtube" in data else YouTubeConfig(),
            twitch=TwitchConfig(**data["twitch"]) if "twitch" in data else TwitchConfig(),
            bot=_bot_config(data["bot"]) if "bot" in data else BotConfig(),
        )
    return apply_env(config, os.environ if env is None else env)
