"""Twitch Helix API client."""

import logging
import re

import requests

from vodsync.models import VodInfo

logger = logging.getLogger(__name__)

BASE_API_URL = "https://api.twitch.tv/helix"
OAUTH_URL = "https://id.twitch.tv/oauth2/token"

VOD_LINK_PATTERN = re.compile(r"https://www\.twitch\.tv/videos/(\d+)")


class TwitchError(RuntimeError):
    pass


class TwitchClient:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._session = session or requests.Session()
        self._timeout = timeout
        self._access_token = ""

    def _generate_access_token(self) -> str:
        response = self._session.post(
            OAUTH_URL,
            data={
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "grant_type": "client_credentials",
            },
            timeout=self._timeout,
        )
        data = response.json()
        if "error" in data or "access_token" not in data:
            raise TwitchError(f"Error generating Twitch access token: {data}")
        return data["access_token"]

    def _get(self, path: str, params: dict) -> dict:
        if not self._access_token:
            self._access_token = self._generate_access_token()
        response = self._session.get(
            f"{BASE_API_URL}/{path}",
            params=params,
            headers={
                "Authorization": f"Bearer {self._access_token}",
                "Client-ID": self._client_id,
            },
            timeout=self._timeout,
        )
        data = response.json()
        if "error" in data:
            raise TwitchError(f"Error fetching data from Twitch: {data}")
        return data

    @staticmethod
    def get_vod_link_from_text(text: str) -> str | None:
        m = VOD_LINK_PATTERN.search(text)
        return m.group(0) if m else None

    @staticmethod
    def get_vod_id_from_link(link: str) -> str | None:
        m = VOD_LINK_PATTERN.search(link)
        return m.group(1) if m else None

    def get_vod_info(self, link: str) -> VodInfo:
        vod_id = self.get_vod_id_from_link(link)
        if vod_id is None:
            raise TwitchError(f"Not a valid Twitch VOD link: {link}")

        data = self._get("videos", {"id": vod_id})
        items = data.get("data") or []
        if not items:
            raise TwitchError(f"Failed to fetch Twitch VOD info: {data}")
        vod = items[0]
        logger.debug("Fetched VOD %s (%s, %s)", vod_id, vod["published_at"], vod["duration"])
        return VodInfo(url=vod["url"], published_at=vod["published_at"], duration=vod["duration"])

    def get_vod_info_from_text(self, text: str) -> VodInfo | None:
        """Look up the first Twitch VOD linked in *text*, if any."""
        link = self.get_vod_link_from_text(text)
        if link is None:
            return None
        return self.get_vod_info(link)
