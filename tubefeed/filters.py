"""
filters.py — Preference filter applied to a user's candidates on read.

- Minimum length rule: whole minutes parsed from the ISO-8601 duration
- Category rule: known categories can be switched off per user
- Pure: returns a new list, inputs are left untouched
"""

import re
from typing import Iterable, List

from .categories import name_for

_MINUTES = re.compile(r"(\d+)M")

def duration_minutes(duration_iso) -> int:
    # Minutes component of e.g. PT12M30S -> 12; no "<N>M" token -> 0.
    m = _MINUTES.search(duration_iso or "")
    return int(m.group(1)) if m else 0

def coerce_vidlength(value) -> int:
    # Non-negative whole minutes; floats and "5.0" truncate, anything unparsable becomes 0.
    if isinstance(value, bool):
        return 0
    try:
        n = int(value) if isinstance(value, (int, float)) else int(float(str(value).strip()))
    except (TypeError, ValueError, OverflowError):
        return 0
    return n if n >= 0 else 0

def passes(video, prefs: dict) -> bool:
    # Length rule first, then the category rule (unknown categories always pass).
    if duration_minutes(video.duration_iso) < coerce_vidlength(prefs.get("vidlength", 0)):
        return False
    name = name_for(video.category_id)
    if name is None or name not in prefs:
        return True
    return bool(prefs[name])

def filter_candidates(candidates: Iterable, prefs: dict) -> List:
    """
    Keep the candidates a user's preference filter allows.

    Accepts Candidate objects or bare VideoRecords; order is preserved.
    """
    prefs = prefs or {}
    return [c for c in candidates if passes(getattr(c, "video", c), prefs)]
