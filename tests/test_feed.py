import logging

from tubefeed import feed
from tubefeed.expander import SIMILARITY_SEED
from tubefeed.reranker import CLICK_REWARD

from conftest import FakeCatalog, make_video


def _seed(store, clicked_tags):
    vids = [
        make_video("a", category_id=10, channel_id="c1", duration="PT12M"),
        make_video("b", category_id=20, channel_id="c1", duration="PT4M"),
        make_video("clk", category_id=20, channel_id="c2", duration="PT9M", tags=clicked_tags),
    ]
    store.upsert_videos(vids)
    store.seed_ledger("u1", [v.id for v in vids], 50)


def test_retrieve_filters_with_stored_settings(store):
    _seed(store, ["x", "y"])
    store.save_settings("u1", {"vidlength": 5, "gaming": True})
    assert [c.id for c in feed.retrieve(store, "u1")] == ["a", "clk"]
    store.save_settings("u1", {"vidlength": 0, "gaming": False})
    assert [c.id for c in feed.retrieve(store, "u1")] == ["a"]


def test_retrieve_defaults_to_everything(store):
    _seed(store, [])
    assert [c.id for c in feed.retrieve(store, "u1")] == ["a", "b", "clk"]


def test_click_reranks_then_expands(store):
    _seed(store, ["x", "y", "z"])
    catalog = FakeCatalog(videos=[make_video("s1", category_id=23, channel_id="c3")], default_search=["s1"])
    served = feed.retrieve(store, "u1")

    feed.handle_click(store, catalog, "u1", "clk", served, 3)

    assert store.get_engagement("u1", "clk").raw_score == CLICK_REWARD
    assert store.get_engagement("u1", "a").raw_score == 49
    assert store.get_engagement("u1", "b").raw_score == 51
    assert store.get_engagement("u1", "s1").raw_score == SIMILARITY_SEED
    assert [c.id for c in feed.retrieve(store, "u1")] == ["s1", "b", "a", "clk"]


def test_sparse_tags_skip_rerank_and_expansion(store):
    _seed(store, ["only"])
    catalog = FakeCatalog(default_search=["s1"])
    served = feed.retrieve(store, "u1")

    feed.handle_click(store, catalog, "u1", "clk", served, 3)

    assert catalog.calls == []
    assert {c.engagement.raw_score for c in feed.retrieve(store, "u1")} == {50}


def test_background_failure_is_logged_not_raised(store, caplog):
    _seed(store, ["x", "y"])
    catalog = FakeCatalog(fail_on={"search_ids"})
    served = feed.retrieve(store, "u1")

    with caplog.at_level(logging.ERROR, logger="tubefeed.feed"):
        feed.handle_click(store, catalog, "u1", "clk", served, 0)

    assert "click feedback failed" in caplog.text
    # re-rank was already persisted before the expansion failed
    assert store.get_engagement("u1", "clk").raw_score == CLICK_REWARD


def test_click_on_unknown_video_is_ignored(store):
    catalog = FakeCatalog()
    feed.handle_click(store, catalog, "u1", "nope", [], 0)
    assert catalog.calls == []


def test_blank_tags_do_not_count_toward_feedback(store):
    _seed(store, ["x", "", "  "])
    catalog = FakeCatalog(default_search=["s1"])
    served = feed.retrieve(store, "u1")

    feed.handle_click(store, catalog, "u1", "clk", served, 3)

    # neither the re-rank nor the expansion ran
    assert catalog.calls == []
    assert {c.engagement.raw_score for c in feed.retrieve(store, "u1")} == {50}


def test_click_without_served_batch_still_rewards_clicked(store):
    _seed(store, ["x", "y"])
    catalog = FakeCatalog()

    feed.handle_click(store, catalog, "u1", "clk", [], 0)

    assert store.get_engagement("u1", "clk").raw_score == CLICK_REWARD
    assert store.get_engagement("u1", "a").raw_score == 50
