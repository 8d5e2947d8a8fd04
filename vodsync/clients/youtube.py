"""YouTube Data API client."""

import logging

import requests

from vodsync.models import UploadedVideo

logger = logging.getLogger(__name__)

BASE_API_URL = "https://youtube.googleapis.com/youtube/v3"
OAUTH_URL = "https://oauth2.googleapis.com/token"


class YouTubeError(RuntimeError):
    pass


class YouTubeClient:
    """API-key reads, plus OAuth (refresh-token grant) for the commenter account."""

    def __init__(
        self,
        api_key: str,
        client_id: str,
        client_secret: str,
        commenter_refresh_token: str,
        session: requests.Session | None = None,
        timeout: float = 30.0,
    ) -> None:
        self._api_key = api_key
        self._client_id = client_id
        self._client_secret = client_secret
        self._commenter_refresh_token = commenter_refresh_token
        self._commenter_access_token = ""
        self._session = session or requests.Session()
        self._timeout = timeout

    def _get_commenter_access_token(self) -> str:
        response = self._session.post(
            OAUTH_URL,
            data={
                "client_id": self._client_id,
                "client_secret": self._client_secret,
                "refresh_token": self._commenter_refresh_token,
                "grant_type": "refresh_token",
            },
            timeout=self._timeout,
        )
        data = response.json()
        if "error" in data or not data.get("access_token"):
            raise YouTubeError(f"Failed to refresh access token: {data}")
        return data["access_token"]

    def _request(
        self,
        method: str,
        path: str,
        params: dict | None = None,
        body: dict | None = None,
        authorization: str | None = None,
    ) -> dict:
        response = self._session.request(
            method,
            f"{BASE_API_URL}/{path}",
            params={**(params or {}), "key": self._api_key},
            json=body,
            headers={"Authorization": authorization} if authorization else None,
            timeout=self._timeout,
        )
        data = response.json()
        if "error" in data:
            raise YouTubeError(f"YouTube API error: {data}")
        return data

    def get_last_upload(self, playlist_id: str) -> UploadedVideo:
        data = self._request(
            "GET",
            "playlistItems",
            params={"part": "snippet", "playlistId": playlist_id, "maxResults": 1},
        )
        items = data.get("items") or []
        if not items:
            raise YouTubeError(f"Failed to fetch last upload of playlist {playlist_id}")
        snippet = items[0]["snippet"]
        return UploadedVideo(
            video_id=snippet["resourceId"]["videoId"],
            title=snippet["title"],
            description=snippet["description"],
            published_at=snippet["publishedAt"],
        )

    def add_comment(self, channel_id: str, video_id: str, text: str) -> dict:
        if not self._commenter_access_token:
            self._commenter_access_token = self._get_commenter_access_token()
        comment = {
            "snippet": {
                "channelId": channel_id,
                "videoId": video_id,
                "topLevelComment": {"snippet": {"textOriginal": text}},
            }
        }
        return self._request(
            "POST",
            "commentThreads",
            params={"part": "snippet"},
            body=comment,
            authorization=f"Bearer {self._commenter_access_token}",
        )
