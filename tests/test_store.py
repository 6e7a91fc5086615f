import pytest

from tubefeed.models import ScoreOp, SET, INC, EXPIRE

from conftest import make_video


def test_upsert_overwrites_fields(store):
    store.upsert_videos([make_video("a", title="old", tags=["x"])])
    store.upsert_videos([make_video("a", title="new", tags=["y", "z"])])
    v = store.get_video("a")
    assert v.title == "new"
    assert v.tags == ["y", "z"]
    assert v.views == 0 and v.upload_date == ""


def test_seed_keeps_counters_on_existing_entry(store):
    store.seed_ledger("u1", ["a"], 50, subscribed=True)
    store.set_like("u1", "a", 1)
    store.seed_ledger("u1", ["a"], 57)
    e = store.get_engagement("u1", "a")
    assert e.raw_score == 57
    assert e.is_liked == 1
    assert e.is_subscribed is True


def test_ledgers_are_per_user(store):
    store.upsert_videos([make_video("a")])
    store.seed_ledger("u1", ["a"], 50)
    assert store.has_engagement("u1")
    assert not store.has_engagement("u2")
    assert store.fetch_candidates("u2") == []


def test_fetch_candidates_ranked_and_active_only(store):
    store.upsert_videos([make_video(v) for v in ("a", "b", "c")])
    store.seed_ledger("u1", ["a", "b", "c"], 50)
    store.apply_score_ops("u1", [ScoreOp("b", SET, 90), ScoreOp("a", INC, -3), ScoreOp("c", EXPIRE)])
    cands = store.fetch_candidates("u1")
    assert [(c.id, c.engagement.raw_score) for c in cands] == [("b", 90), ("a", 47)]


def test_inc_on_expired_entry_counts_from_zero(store):
    store.seed_ledger("u1", ["a"], 50)
    store.apply_score_ops("u1", [ScoreOp("a", EXPIRE)])
    store.apply_score_ops("u1", [ScoreOp("a", INC, 4)])
    assert store.get_engagement("u1", "a").raw_score == 4


def test_reset_drops_ledger_keeps_profile(store):
    store.save_settings("u1", {"vidlength": 5})
    store.set_authenticated("u1", True)
    store.seed_ledger("u1", ["a", "b"], 50)
    assert store.reset_ledger("u1") == 2
    assert not store.has_engagement("u1")
    profile = store.get_profile("u1")
    assert profile.authenticated is True
    assert profile.settings == {"vidlength": 5}


def test_set_like_validates_tri_state(store):
    store.seed_ledger("u1", ["a"], 50)
    assert store.set_like("u1", "a", -1) is True
    assert store.get_engagement("u1", "a").is_liked == -1
    assert store.set_like("u1", "zzz", 1) is False
    with pytest.raises(ValueError):
        store.set_like("u1", "a", 2)
