"""
youtube.py
YouTube Data API client used by ingestion and similarity expansion:
- Resolve the caller's channel from an OAuth access token
- Subscriptions -> uploads playlist -> recent playlist items
- Batched video details and plain id search
Every request carries an explicit timeout; failures surface as UpstreamUnavailable.
"""

import json, time, random, logging, threading
from typing import List, Optional

import requests

from . import config
from .errors import UpstreamUnavailable
from .models import VideoRecord

log = logging.getLogger(__name__)

BASE = "https://www.googleapis.com/youtube/v3/"
DETAILS_CHUNK = 50 # API max ids per videos.list call


class CatalogClient:
    """Thin wrapper over the Data API for one caller's access token."""

    def __init__(self, access_token: str, timeout: float = None, session: Optional[requests.Session] = None, retries: int = 3):
        self.access_token = access_token
        self.timeout = timeout if timeout is not None else config.CATALOG_TIMEOUT
        self._shared = session
        self._local = threading.local()
        self.retries = retries

    @property
    def session(self) -> requests.Session:
        # Injected session as-is, else one Session per worker thread.
        if self._shared is not None:
            return self._shared
        s = getattr(self._local, "session", None)
        if s is None:
            s = self._local.session = requests.Session()
        return s

    # API request helper

    def _get(self, url, params):
        # GET with bearer auth, retries/backoff on 429/5xx; raises UpstreamUnavailable.
        headers = {"Authorization": f"Bearer {self.access_token}"}
        backoff = 1.0
        for attempt in range(self.retries):
            try:
                r = self.session.get(BASE + url, params=params, headers=headers, timeout=self.timeout)
            except requests.RequestException as e:
                raise UpstreamUnavailable(f"{url}: {e}") from e
            if r.status_code < 400:
                try:
                    return r.json()
                except ValueError as e:
                    raise UpstreamUnavailable(f"{url}: non-JSON reply") from e
            if r.status_code in (429, 500, 502, 503, 504) and attempt + 1 < self.retries:
                log.warning("catalog %s returned %s, retrying", url, r.status_code)
                time.sleep(backoff + random.uniform(0, 0.5))
                backoff = min(backoff * 2, 8.0)
                continue
            try:
                err = r.json()
            except ValueError:
                err = {"raw": r.text}
            raise UpstreamUnavailable(f"{r.status_code} on {url} :: {json.dumps(err)[:300]}")
        raise UpstreamUnavailable(f"{url}: retries exhausted")

    # Identity

    def my_channel_id(self) -> Optional[str]:
        # Channel id of the token's owner, None if the account has no channel.
        data = self._get("channels", {"part": "id", "mine": "true"})
        items = data.get("items") or []
        return items[0].get("id") if items else None

    # Subscriptions & uploads

    def list_subscriptions(self, limit: int = 5) -> List[str]:
        # Channel ids the caller is subscribed to (first page only).
        data = self._get("subscriptions", {
            "part": "snippet",
            "mine": "true",
            "maxResults": max(1, min(limit, 50)),
        })
        out = []
        for it in data.get("items", []):
            cid = ((it.get("snippet") or {}).get("resourceId") or {}).get("channelId")
            if cid:
                out.append(cid)
        return out[:limit]

    def uploads_playlist(self, channel_id: str) -> Optional[str]:
        ch = self._get("channels", {"id": channel_id, "part": "contentDetails"})
        items = ch.get("items", [])
        if not items:
            return None
        return items[0].get("contentDetails", {}).get("relatedPlaylists", {}).get("uploads")

    def playlist_items(self, playlist_id: str, limit: int = 5) -> List[str]:
        # Most recent video ids in a playlist.
        pl = self._get("playlistItems", {
            "part": "contentDetails",
            "playlistId": playlist_id,
            "maxResults": max(1, min(limit, 50)),
        })
        ids = [it.get("contentDetails", {}).get("videoId") for it in pl.get("items", [])]
        return [i for i in ids if i][:limit]

    # Details & search

    def video_details(self, ids: List[str]) -> List[VideoRecord]:
        # Hydrate video IDs into VideoRecords, 50 per request.
        ids = [i for i in dict.fromkeys(ids) if i]
        out = []
        for j in range(0, len(ids), DETAILS_CHUNK):
            chunk = ids[j:j + DETAILS_CHUNK]
            det = self._get("videos", {"id": ",".join(chunk), "part": "snippet,contentDetails"})
            out.extend(VideoRecord.from_api_item(it) for it in det.get("items", []))
        return out

    def search_ids(self, query: str, limit: int = None) -> List[str]:
        # Video ids matching a free-text query.
        limit = limit or config.SEARCH_RESULTS
        srch = self._get("search", {
            "part": "snippet",
            "type": "video",
            "q": query,
            "maxResults": max(1, min(limit, 50)),
        })
        return [i["id"]["videoId"] for i in srch.get("items", []) if i.get("id", {}).get("videoId")]


def catalog_factory(access_token: str) -> CatalogClient:
    # Default factory injected into the API layer.
    return CatalogClient(access_token)
