"""
service.py
Business logic layer between FastAPI routes and the core engine (tubefeed/*).
Handles verification, preference settings, first-pass ingestion, the ranked
feed, click feedback scheduling, search logging, likes and ledger resets.
"""

import threading
from typing import Any, Dict, List

from tubefeed import feed, gate, ingest
from tubefeed.categories import ID_TO_NAME, default_settings
from tubefeed.filters import coerce_vidlength


class ServedBatches:
    """Last batch served to each user, needed to interpret the next click."""

    def __init__(self):
        self._lock = threading.Lock()
        self._batches: Dict[str, list] = {}

    def put(self, user_id: str, items: list):
        with self._lock:
            self._batches[user_id] = list(items)

    def get(self, user_id: str) -> list:
        with self._lock:
            return list(self._batches.get(user_id, []))

    def discard(self, user_id: str):
        with self._lock:
            self._batches.pop(user_id, None)

    def clear(self):
        with self._lock:
            self._batches.clear()


BATCHES = ServedBatches()

def clean_settings(raw: Dict[str, Any]) -> dict:
    # Keep vidlength (coerced) and known category flags; drop anything else.
    out = default_settings()
    raw = raw or {}
    out["vidlength"] = coerce_vidlength(raw.get("vidlength", 0))
    for name in ID_TO_NAME.values():
        if name in raw:
            out[name] = bool(raw[name])
    return out

# Verification & settings

def verify_user(store, user_id: str):
    # Allow-list check; raises Unverified/NoIdentity.
    gate.verify(store, user_id)
    return {"ok": True}

def get_settings(store, user_id: str) -> dict:
    return feed.user_settings(store, user_id)

def save_settings(store, user_id: str, raw: Dict[str, Any]) -> dict:
    settings = clean_settings(raw)
    store.save_settings(user_id, settings)
    return settings

# Ranking entrypoints used by the API

def first_pass(store, catalog, user_id: str) -> dict:
    # Seed the ledger from subscriptions (no-op once seeded).
    records = ingest.ingest(catalog, store, user_id)
    return {"ok": True, "count": len(records)}

def videos(store, user_id: str) -> List[dict]:
    # Ranked, filtered feed; remembered as the user's served batch.
    items = feed.retrieve(store, user_id)
    BATCHES.put(user_id, items)
    return [c.to_dict() for c in items]

def click_args(user_id: str, video_id: str, search_window: int) -> tuple:
    # Snapshot what the background re-rank needs before the response goes out.
    return (user_id, video_id, BATCHES.get(user_id), int(search_window or 0))

def log_search(store, catalog, user_id: str, video_ids: List[str]) -> dict:
    records = ingest.log_search_results(catalog, store, user_id, video_ids)
    return {"ok": True, "count": len(records)}

def like(store, user_id: str, video_id: str, value: int) -> dict:
    return {"ok": store.set_like(user_id, video_id, value)}

def reset(store, user_id: str) -> dict:
    # Drop engagement history and the session's served batch.
    n = store.reset_ledger(user_id)
    BATCHES.discard(user_id)
    return {"ok": True, "count": n}
