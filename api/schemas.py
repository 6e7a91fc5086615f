"""
schemas.py
Pydantic request/response models for the tubefeed API.
Defines typed schemas for the feed, click feedback, search logging,
likes and preference settings.
"""

from pydantic import BaseModel
from typing import List, Literal, Optional

class VideoItem(BaseModel):
    # One ranked video card as served to the client.
    id: str
    title: str
    channel_id: str
    channel_title: str
    duration_iso: str
    category_id: Optional[int] = None
    tags: List[str] = []
    thumbnail_url: str = ""
    views: int = 0
    upload_date: str = ""
    raw_score: Optional[int] = None
    is_liked: int = 0
    is_subscribed: bool = False

class ClickRequest(BaseModel):
    # Video the user clicked; window <= 0 means the whole served batch.
    video_id: str
    search_window: int = 0

class SearchLogRequest(BaseModel):
    # Video ids the user reached through an explicit search.
    video_ids: List[str]

class LikeRequest(BaseModel):
    video_id: str
    value: Literal[-1, 0, 1]

class OkResponse(BaseModel):
    ok: bool = True
    count: Optional[int] = None
