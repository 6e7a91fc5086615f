"""
expander.py — Grow a user's candidate pool from the tags of a clicked video.

Flow:
1) Direct query: the first two tags as one search string.
2) Compound query: three random tag pairs OR-ed together.
3) Hydrate all result ids with one batched details call.
4) Upsert the records and seed them into the user's ledger.
Nothing is written unless every catalog call succeeded.
"""

import random
import logging
from typing import List, Sequence, Tuple

from .models import VideoRecord

log = logging.getLogger(__name__)

SIMILARITY_SEED = 57
COMBINATIONS = 3
OR_TOKEN = "|"
MIN_TAGS = 2

def usable_tags(tags) -> List[str]:
    # Non-blank tags, in order; the same list gates and drives a search cycle.
    return [t for t in (tags or []) if t and t.strip()]

def direct_query(tags: Sequence[str]) -> str:
    return " ".join(tags[:2])

def random_tag_pairs(tags: Sequence[str], n: int = COMBINATIONS, rng=random) -> List[Tuple[str, str]]:
    # Pairs drawn with replacement; a repeated index is shifted by one.
    size = len(tags)
    pairs = []
    for _ in range(n):
        i = rng.randrange(size)
        j = rng.randrange(size)
        if j == i:
            j = (j + 1) % size
        pairs.append((tags[i], tags[j]))
    return pairs

def compound_query(pairs: Sequence[Tuple[str, str]]) -> str:
    return f" {OR_TOKEN} ".join(f"{a} {b}" for a, b in pairs)

def expand(catalog, store, user_id: str, tags: Sequence[str], seed_score: int = SIMILARITY_SEED, rng=random) -> List[VideoRecord]:
    """
    Search for videos similar to a clicked one and merge them into the stores.

    Returns the merged records; an empty list when there are fewer than two
    tags (no catalog call is made in that case).
    """
    tags = usable_tags(tags)
    if len(tags) < MIN_TAGS:
        return []

    ids = list(catalog.search_ids(direct_query(tags)))
    ids.extend(catalog.search_ids(compound_query(random_tag_pairs(tags, rng=rng))))
    ids = list(dict.fromkeys(i for i in ids if i))
    if not ids:
        return []

    records = catalog.video_details(ids)
    store.upsert_videos(records)
    store.seed_ledger(user_id, [r.id for r in records], seed_score)
    log.info("expanded %s by %d similar videos", user_id, len(records))
    return records
