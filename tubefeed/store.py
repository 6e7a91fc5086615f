"""
store.py
Data persistence layer for the feed:
- SQLite database with three tables: videos (shared), profiles and ledger (per user)
- Profiles hold the preference filter and the verification flag
- Ledger rows hold one user's score/counters for one video; a NULL raw_score means expired
"""

import sqlite3, json, pathlib, logging
from typing import Dict, Iterable, List, Optional

from .models import (
    VideoRecord, EngagementRecord, UserProfile, Candidate, ScoreOp,
    SET, INC, EXPIRE, LIKE_STATES,
)
from .errors import StoreWriteFailure

log = logging.getLogger(__name__)

_VIDEO_COLS = "id,title,channel_id,channel_title,duration_iso,category_id,tags,thumbnail_url,views,upload_date"
_LEDGER_COLS = "raw_score,time_spent_watching,num_clicks,num_times_shown,is_liked,is_subscribed"


def _row_to_video(r) -> VideoRecord:
    return VideoRecord(
        id=r[0], title=r[1] or "", channel_id=r[2] or "", channel_title=r[3] or "",
        duration_iso=r[4] or "", category_id=r[5],
        tags=json.loads(r[6]) if r[6] else [],
        thumbnail_url=r[7] or "", views=int(r[8] or 0), upload_date=r[9] or "",
    )

def _row_to_engagement(r) -> EngagementRecord:
    return EngagementRecord(
        raw_score=r[0], time_spent_watching=int(r[1] or 0), num_clicks=int(r[2] or 0),
        num_times_shown=int(r[3] or 0), is_liked=int(r[4] or 0), is_subscribed=bool(r[5]),
    )


class Store:
    """Handle on the SQLite file; create once per process and pass it around."""

    def __init__(self, db_path):
        self.db_path = pathlib.Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

    def get_conn(self) -> sqlite3.Connection:
        # Open SQLite connection (WAL mode).
        conn = sqlite3.connect(self.db_path)
        conn.execute("PRAGMA journal_mode=WAL;")
        return conn

    def init_db(self):
        # Create tables/indexes if missing.
        conn = self.get_conn()
        cur = conn.cursor()
        cur.execute("""
        CREATE TABLE IF NOT EXISTS videos (
          id TEXT PRIMARY KEY,
          title TEXT,
          channel_id TEXT,
          channel_title TEXT,
          duration_iso TEXT,
          category_id INTEGER,
          tags TEXT,
          thumbnail_url TEXT,
          views INTEGER DEFAULT 0,
          upload_date TEXT DEFAULT ''
        )""")
        cur.execute("""
        CREATE TABLE IF NOT EXISTS profiles (
          user_id TEXT PRIMARY KEY,
          settings TEXT,
          authenticated INTEGER DEFAULT 0
        )""")
        cur.execute("""
        CREATE TABLE IF NOT EXISTS ledger (
          user_id TEXT,
          video_id TEXT,
          raw_score INTEGER,
          time_spent_watching INTEGER DEFAULT 0,
          num_clicks INTEGER DEFAULT 0,
          num_times_shown INTEGER DEFAULT 0,
          is_liked INTEGER DEFAULT 0,
          is_subscribed INTEGER DEFAULT 0,
          PRIMARY KEY (user_id, video_id)
        )""")
        cur.execute("CREATE INDEX IF NOT EXISTS idx_ledger_score ON ledger(user_id, raw_score)")
        conn.commit()
        conn.close()

    # Video storage

    def upsert_videos(self, records: Iterable[VideoRecord]):
        # Insert or update videos; each field is overwritten, last write wins.
        rows = [(
            v.id, v.title, v.channel_id, v.channel_title, v.duration_iso, v.category_id,
            json.dumps(v.tags or []), v.thumbnail_url, int(v.views or 0), v.upload_date or "",
        ) for v in records if v.id]
        if not rows:
            return
        try:
            with self.get_conn() as conn:
                conn.executemany(f"""
                INSERT INTO videos ({_VIDEO_COLS})
                VALUES (?,?,?,?,?,?,?,?,?,?)
                ON CONFLICT(id) DO UPDATE SET
                  title=excluded.title,
                  channel_id=excluded.channel_id,
                  channel_title=excluded.channel_title,
                  duration_iso=excluded.duration_iso,
                  category_id=excluded.category_id,
                  tags=excluded.tags,
                  thumbnail_url=excluded.thumbnail_url,
                  views=excluded.views,
                  upload_date=excluded.upload_date
                """, rows)
        except sqlite3.Error as e:
            raise StoreWriteFailure(f"video upsert failed: {e}") from e

    def get_videos(self, ids: Iterable[str]) -> Dict[str, VideoRecord]:
        # Return {video_id: VideoRecord} for the ids that exist.
        ids = list({i for i in ids if i})
        if not ids:
            return {}
        q = ",".join("?" for _ in ids)
        with self.get_conn() as conn:
            rows = conn.execute(f"SELECT {_VIDEO_COLS} FROM videos WHERE id IN ({q})", ids).fetchall()
        return {r[0]: _row_to_video(r) for r in rows}

    def get_video(self, video_id: str) -> Optional[VideoRecord]:
        return self.get_videos([video_id]).get(video_id)

    # Profiles

    def get_profile(self, user_id: str) -> Optional[UserProfile]:
        with self.get_conn() as conn:
            row = conn.execute(
                "SELECT user_id, settings, authenticated FROM profiles WHERE user_id=?", (user_id,)
            ).fetchone()
        if not row:
            return None
        return UserProfile(user_id=row[0], settings=json.loads(row[1]) if row[1] else {},
                           authenticated=bool(row[2]))

    def save_settings(self, user_id: str, settings: dict):
        # Create the profile on first write; keep the verification flag.
        with self.get_conn() as conn:
            conn.execute("""
                INSERT INTO profiles (user_id, settings, authenticated) VALUES (?,?,0)
                ON CONFLICT(user_id) DO UPDATE SET settings=excluded.settings
            """, (user_id, json.dumps(settings or {})))

    def set_authenticated(self, user_id: str, flag: bool = True):
        # Create the profile on first verification; keep settings.
        with self.get_conn() as conn:
            conn.execute("""
                INSERT INTO profiles (user_id, settings, authenticated) VALUES (?,?,?)
                ON CONFLICT(user_id) DO UPDATE SET authenticated=excluded.authenticated
            """, (user_id, json.dumps({}), int(bool(flag))))

    # Ledger

    def has_engagement(self, user_id: str) -> bool:
        with self.get_conn() as conn:
            row = conn.execute("SELECT 1 FROM ledger WHERE user_id=? LIMIT 1", (user_id,)).fetchone()
        return row is not None

    def seed_ledger(self, user_id: str, video_ids: Iterable[str], seed_score: int, subscribed: bool = False):
        # New entries start with zeroed counters; existing ones only get a new raw_score.
        rows = [(user_id, vid, int(seed_score), int(bool(subscribed))) for vid in dict.fromkeys(video_ids) if vid]
        if not rows:
            return
        try:
            with self.get_conn() as conn:
                conn.executemany("""
                    INSERT INTO ledger (user_id, video_id, raw_score, is_subscribed)
                    VALUES (?,?,?,?)
                    ON CONFLICT(user_id, video_id) DO UPDATE SET
                      raw_score = excluded.raw_score,
                      is_subscribed = MAX(ledger.is_subscribed, excluded.is_subscribed)
                """, rows)
        except sqlite3.Error as e:
            raise StoreWriteFailure(f"ledger seed failed for {user_id}: {e}") from e

    def apply_score_ops(self, user_id: str, ops: List[ScoreOp]):
        # Apply one re-rank cycle in a single transaction.
        if not ops:
            return
        try:
            with self.get_conn() as conn:
                cur = conn.cursor()
                for op in ops:
                    if op.kind == SET:
                        cur.execute("""
                            INSERT INTO ledger (user_id, video_id, raw_score) VALUES (?,?,?)
                            ON CONFLICT(user_id, video_id) DO UPDATE SET raw_score = excluded.raw_score
                        """, (user_id, op.video_id, int(op.value)))
                    elif op.kind == INC:
                        # an absent score counts as zero, like a document $inc
                        cur.execute("""
                            INSERT INTO ledger (user_id, video_id, raw_score) VALUES (?,?,?)
                            ON CONFLICT(user_id, video_id) DO UPDATE SET
                              raw_score = COALESCE(ledger.raw_score, 0) + excluded.raw_score
                        """, (user_id, op.video_id, int(op.value)))
                    elif op.kind == EXPIRE:
                        cur.execute("UPDATE ledger SET raw_score = NULL WHERE user_id=? AND video_id=?",
                                    (user_id, op.video_id))
                    else:
                        raise ValueError(f"unknown score op {op.kind!r}")
        except sqlite3.Error as e:
            raise StoreWriteFailure(f"score update failed for {user_id}: {e}") from e

    def get_engagement(self, user_id: str, video_id: str) -> Optional[EngagementRecord]:
        with self.get_conn() as conn:
            row = conn.execute(f"SELECT {_LEDGER_COLS} FROM ledger WHERE user_id=? AND video_id=?",
                               (user_id, video_id)).fetchone()
        return _row_to_engagement(row) if row else None

    def fetch_candidates(self, user_id: str) -> List[Candidate]:
        # Active ledger entries joined with their videos, best score first.
        cols = ",".join("v." + c for c in _VIDEO_COLS.split(",")) + "," + ",".join("l." + c for c in _LEDGER_COLS.split(","))
        with self.get_conn() as conn:
            rows = conn.execute(f"""
                SELECT {cols}
                FROM ledger l JOIN videos v ON v.id = l.video_id
                WHERE l.user_id=? AND l.raw_score IS NOT NULL
                ORDER BY l.raw_score DESC, v.id ASC
            """, (user_id,)).fetchall()
        return [Candidate(_row_to_video(r[:10]), _row_to_engagement(r[10:])) for r in rows]

    def ledger_rows(self, user_id: str):
        # Every ledger row (expired included) as (video_id, title, EngagementRecord).
        with self.get_conn() as conn:
            rows = conn.execute(f"""
                SELECT l.video_id, COALESCE(v.title,''), {",".join("l." + c for c in _LEDGER_COLS.split(","))}
                FROM ledger l LEFT JOIN videos v ON v.id = l.video_id
                WHERE l.user_id=?
                ORDER BY l.raw_score IS NULL, l.raw_score DESC
            """, (user_id,)).fetchall()
        return [(r[0], r[1], _row_to_engagement(r[2:])) for r in rows]

    def set_like(self, user_id: str, video_id: str, value: int):
        # Record a like/dislike/neutral on an existing ledger entry.
        if value not in LIKE_STATES:
            raise ValueError(f"is_liked must be one of {LIKE_STATES}")
        with self.get_conn() as conn:
            cur = conn.execute("UPDATE ledger SET is_liked=? WHERE user_id=? AND video_id=?",
                               (int(value), user_id, video_id))
        return cur.rowcount > 0

    def reset_ledger(self, user_id: str) -> int:
        # Drop all engagement history; profile settings/verification stay.
        with self.get_conn() as conn:
            cur = conn.execute("DELETE FROM ledger WHERE user_id=?", (user_id,))
        log.info("reset ledger for %s (%d rows)", user_id, cur.rowcount)
        return cur.rowcount
