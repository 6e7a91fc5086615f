"""
feed.py — Read and feedback paths of the feed.

- retrieve(): snapshot ledger + settings, apply the preference filter, return ranked dicts
- handle_click(): background unit run after a click; re-rank then expand
"""

import logging
from typing import List, Sequence

from .categories import default_settings
from .filters import filter_candidates
from .expander import expand, usable_tags, MIN_TAGS
from .reranker import rerank

log = logging.getLogger(__name__)

def user_settings(store, user_id: str) -> dict:
    # Stored preference filter, or the permissive default.
    profile = store.get_profile(user_id)
    if profile and profile.settings:
        return profile.settings
    return default_settings()

def retrieve(store, user_id: str) -> List:
    # Candidates surviving the user's filter, highest raw score first.
    candidates = store.fetch_candidates(user_id)
    prefs = user_settings(store, user_id)
    return filter_candidates(candidates, prefs)

def handle_click(store, catalog, user_id: str, clicked_id: str, served: Sequence, search_window: int = 0):
    """
    Apply click feedback for one user. Meant to run detached from the request.

    At most once, best effort: failures are logged and dropped, never retried
    and never reported to the caller. A clicked video with fewer than two tags
    skips both the re-rank and the expansion.
    """
    try:
        clicked = store.get_video(clicked_id)
        if clicked is None:
            log.warning("click on unknown video %s by %s ignored", clicked_id, user_id)
            return
        tags = usable_tags(clicked.tags)
        if len(tags) < MIN_TAGS:
            log.info("video %s has fewer than %d tags, skipping feedback", clicked_id, MIN_TAGS)
            return
        rerank(store, user_id, clicked_id, clicked, served, search_window)
        expand(catalog, store, user_id, tags)
    except Exception:
        # the response has already been sent; log and drop
        log.exception("click feedback failed for %s on %s", user_id, clicked_id)
