"""
reranker.py — Click feedback re-ranking of a user's ledger.

- The clicked video is pinned to CLICK_REWARD
- Other served videos drift by a small delta based on category/channel match
- Videos past the search window lose their score (expire) instead of decrementing
- All mutations for one click go to the store as one bulk write
"""

import logging
from typing import List, Sequence

from .models import ScoreOp, SET, INC, EXPIRE

log = logging.getLogger(__name__)

CLICK_REWARD = 45
BASE_DELTA = -1
SAME_CATEGORY_BONUS = 2
SAME_CHANNEL_BONUS = 4

def score_delta(candidate, clicked) -> int:
    # -1, +2 for same category, +4 for same channel.
    delta = BASE_DELTA
    if candidate.category_id == clicked.category_id:
        delta += SAME_CATEGORY_BONUS
    if candidate.channel_id == clicked.channel_id:
        delta += SAME_CHANNEL_BONUS
    return delta

def plan_rerank(clicked_id: str, clicked, served: Sequence, search_window: int = 0) -> List[ScoreOp]:
    """
    Plan the ledger mutations for one click.

    `served` is the batch the client had on screen, in display order; each
    entry is a Candidate or a VideoRecord. A window <= 0 covers the whole
    batch. Every served video gets exactly one op, and the clicked video is
    always set to CLICK_REWARD even when it is missing from the batch.
    """
    window = search_window if search_window and search_window > 0 else len(served)
    ops, seen = [], set()
    for idx, item in enumerate(served):
        c = getattr(item, "video", item)
        if c.id in seen:
            continue
        seen.add(c.id)
        if c.id == clicked_id:
            ops.append(ScoreOp(c.id, SET, CLICK_REWARD))
        elif idx >= window:
            ops.append(ScoreOp(c.id, EXPIRE))
        else:
            ops.append(ScoreOp(c.id, INC, score_delta(c, clicked)))
    if clicked_id not in seen:
        # no batch on record (restart, or click before any feed read)
        ops.append(ScoreOp(clicked_id, SET, CLICK_REWARD))
    return ops

def rerank(store, user_id: str, clicked_id: str, clicked, served: Sequence, search_window: int = 0) -> List[ScoreOp]:
    # Plan and apply in one bulk write; returns the applied ops.
    ops = plan_rerank(clicked_id, clicked, served, search_window)
    store.apply_score_ops(user_id, ops)
    log.info("reranked %d ledger entries for %s after click on %s", len(ops), user_id, clicked_id)
    return ops
