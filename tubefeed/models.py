"""
models.py — Records shared by the store, the filter and the re-ranker.

- VideoRecord: shared metadata for one platform video
- EngagementRecord: one user's score/counters for one video
- UserProfile: preference filter + verification flag
- Candidate: a video paired with the user's engagement (if any)
- ScoreOp: a single ledger mutation planned by the re-ranker
"""

from dataclasses import dataclass, field, asdict
from typing import List, Optional

# Ledger mutation kinds
SET, INC, EXPIRE = "set", "inc", "expire"

LIKE_STATES = (-1, 0, 1)


@dataclass
class VideoRecord:
    id: str
    title: str = ""
    channel_id: str = ""
    channel_title: str = ""
    duration_iso: str = ""
    category_id: Optional[int] = None
    tags: List[str] = field(default_factory=list)
    thumbnail_url: str = ""
    # reserved, not populated yet
    views: int = 0
    upload_date: str = ""

    @classmethod
    def from_api_item(cls, it: dict) -> "VideoRecord":
        # Normalize one videos.list item (snippet + contentDetails).
        sn = it.get("snippet", {}) or {}
        cd = it.get("contentDetails", {}) or {}
        thumbs = sn.get("thumbnails", {}) or {}
        thumb = ""
        for size in ("high", "medium", "default"):
            if thumbs.get(size, {}).get("url"):
                thumb = thumbs[size]["url"]
                break
        try:
            cat = int(sn.get("categoryId"))
        except (TypeError, ValueError):
            cat = None
        return cls(
            id=it.get("id") or "",
            title=sn.get("title") or "",
            channel_id=sn.get("channelId") or "",
            channel_title=sn.get("channelTitle") or "",
            duration_iso=cd.get("duration") or "",
            category_id=cat,
            tags=list(sn.get("tags") or []),
            thumbnail_url=thumb,
        )

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class EngagementRecord:
    raw_score: Optional[int] # None = expired, excluded from ranking
    time_spent_watching: int = 0
    num_clicks: int = 0
    num_times_shown: int = 0
    is_liked: int = 0
    is_subscribed: bool = False

    @property
    def active(self) -> bool:
        return self.raw_score is not None


@dataclass
class UserProfile:
    user_id: str
    settings: dict = field(default_factory=dict)
    authenticated: bool = False


@dataclass
class Candidate:
    video: VideoRecord
    engagement: Optional[EngagementRecord] = None

    @property
    def id(self) -> str:
        return self.video.id

    def to_dict(self) -> dict:
        out = self.video.to_dict()
        e = self.engagement
        out["raw_score"] = e.raw_score if e else None
        out["is_liked"] = e.is_liked if e else 0
        out["is_subscribed"] = e.is_subscribed if e else False
        return out


@dataclass(frozen=True)
class ScoreOp:
    video_id: str
    kind: str # SET / INC / EXPIRE
    value: int = 0
