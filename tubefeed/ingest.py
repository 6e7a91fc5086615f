"""
ingest.py — First-pass seeding of a user's ledger from their subscriptions.

- Runs only while the user has no engagement data (until a reset)
- Subscriptions -> uploads playlists -> recent uploads, fetched concurrently
- One batched details call, then videos + ledger entries are written together
Also hosts the search-logging seed path, which writes the same way.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List

from . import config
from .models import VideoRecord

log = logging.getLogger(__name__)

INGEST_SEED = 50
SEARCH_LOG_SEED = 9100
MAX_WORKERS = 8

def _channel_recent_ids(catalog, channel_id: str, per_channel: int) -> List[str]:
    # Recent upload ids for one channel ([] if it has no uploads playlist).
    playlist = catalog.uploads_playlist(channel_id)
    if not playlist:
        return []
    return catalog.playlist_items(playlist, per_channel)

def ingest(catalog, store, user_id: str, subscription_sample: int = None, per_channel: int = None) -> List[VideoRecord]:
    """
    Seed the stores from a sample of the user's subscriptions.

    Returns the merged records ([] when the ledger already has data). Any
    catalog failure propagates before anything is written.
    """
    if subscription_sample is None:
        subscription_sample = config.SUBSCRIPTION_SAMPLE
    if per_channel is None:
        per_channel = config.PER_CHANNEL_SAMPLE
    if store.has_engagement(user_id):
        log.info("ledger for %s already seeded, skipping ingest", user_id)
        return []

    channels = catalog.list_subscriptions(subscription_sample)
    if not channels:
        return []

    # independent reads: fan out, then join in subscription order
    with ThreadPoolExecutor(max_workers=min(MAX_WORKERS, len(channels))) as pool:
        per_channel_ids = list(pool.map(lambda cid: _channel_recent_ids(catalog, cid, per_channel), channels))
    ids = [vid for chunk in per_channel_ids for vid in chunk]
    if not ids:
        return []

    records = catalog.video_details(ids)
    store.upsert_videos(records)
    store.seed_ledger(user_id, [r.id for r in records], INGEST_SEED, subscribed=True)
    log.info("ingested %d videos from %d channels for %s", len(records), len(channels), user_id)
    return records

def log_search_results(catalog, store, user_id: str, video_ids: List[str], seed_score: int = SEARCH_LOG_SEED) -> List[VideoRecord]:
    # Seed videos the user found through explicit search.
    ids = [i for i in dict.fromkeys(video_ids or []) if i]
    if not ids:
        return []
    records = catalog.video_details(ids)
    store.upsert_videos(records)
    store.seed_ledger(user_id, [r.id for r in records], seed_score)
    return records
