"""On-disk record of videos the bot has already handled."""

import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


class LedgerError(RuntimeError):
    pass


@dataclass
class VodRecord:
    link: str
    published_at: str
    offset_seconds: int | None = None


@dataclass
class ProcessedVideo:
    id: str
    title: str
    description: str
    published_at: str
    vod_info: VodRecord | None = None


class VideoLedger:
    """JSON file mapping video id -> ProcessedVideo. A missing file starts empty."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._videos: dict[str, dict] = {}
        self._load()

    def _load(self) -> None:
        if not self.path.exists():
            logger.info("No ledger at %s, starting empty", self.path)
            return
        try:
            data = json.loads(self.path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise LedgerError(f"Error loading video processing details from {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise LedgerError(f"Ledger {self.path} must contain a JSON object")
        self._videos = data

    def _save(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._videos, indent=2))

    def processed(self, video_id: str) -> bool:
        return video_id in self._videos

    def get(self, video_id: str) -> ProcessedVideo | None:
        data = self._videos.get(video_id)
        if data is None:
            return None
        vod = data.get("vod_info")
        return ProcessedVideo(
            id=data["id"],
            title=data["title"],
            description=data["description"],
            published_at=data["published_at"],
            vod_info=VodRecord(**vod) if vod else None,
        )

    def update(self, video: ProcessedVideo) -> None:
        self._videos[video.id] = asdict(video)
        self._save()
