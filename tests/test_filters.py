from tubefeed.categories import default_settings, name_for
from tubefeed.filters import coerce_vidlength, duration_minutes, filter_candidates
from tubefeed.models import Candidate, EngagementRecord

from conftest import make_video


def test_duration_minutes_reads_minutes_token():
    assert duration_minutes("PT12M30S") == 12
    assert duration_minutes("PT1H5M") == 5
    assert duration_minutes("PT3M") == 3


def test_duration_without_minutes_token_is_zero():
    assert duration_minutes("PT45S") == 0
    assert duration_minutes("PT2H") == 0
    assert duration_minutes("") == 0
    assert duration_minutes(None) == 0


def test_short_video_excluded_before_category_matters():
    v = make_video("a", category_id=20, duration="PT3M")
    assert filter_candidates([v], {"vidlength": 5, "gaming": False}) == []
    assert filter_candidates([v], {"vidlength": 5, "gaming": True}) == []


def test_disabled_category_excluded():
    v = make_video("a", category_id=20, duration="PT10M")
    assert filter_candidates([v], {"vidlength": 0, "gaming": False}) == []
    assert filter_candidates([v], {"vidlength": 0, "gaming": True}) == [v]


def test_category_absent_from_prefs_passes():
    v = make_video("a", category_id=10, duration="PT10M")
    assert filter_candidates([v], {"vidlength": 0, "gaming": False}) == [v]


def test_unknown_category_only_length_rule_applies():
    prefs = {name: False for name in default_settings() if name != "vidlength"}
    prefs["vidlength"] = 4
    long_ = make_video("long", category_id=28, duration="PT8M")
    short = make_video("short", category_id=28, duration="PT2M")
    none_ = make_video("none", category_id=None, duration="PT8M")
    assert filter_candidates([long_, short, none_], prefs) == [long_, none_]


def test_missing_minutes_excluded_when_threshold_positive():
    v = make_video("a", duration="PT59S")
    assert filter_candidates([v], {"vidlength": 1}) == []
    assert filter_candidates([v], {"vidlength": 0}) == [v]


def test_filter_is_idempotent_and_keeps_order():
    vids = [
        make_video("a", category_id=20, duration="PT10M"),
        make_video("b", category_id=10, duration="PT2M"),
        make_video("c", category_id=10, duration="PT20M"),
        make_video("d", category_id=23, duration="PT6M"),
        make_video("e", category_id=99, duration="PT0S"),
    ]
    batch = [Candidate(v, EngagementRecord(raw_score=50)) for v in vids]
    prefs = {"vidlength": 5, "gaming": False, "comedy": True}
    once = filter_candidates(batch, prefs)
    assert [c.id for c in once] == ["c", "d"]
    assert filter_candidates(once, prefs) == once
    assert len(batch) == 5


def test_malformed_vidlength_coerced_to_zero():
    assert coerce_vidlength("abc") == 0
    assert coerce_vidlength(None) == 0
    assert coerce_vidlength(-3) == 0
    assert coerce_vidlength("7") == 7
    v = make_video("a", duration="PT1M")
    assert filter_candidates([v], {"vidlength": "ten"}) == [v]


def test_category_names():
    assert name_for(20) == "gaming"
    assert name_for("25") == "news"
    assert name_for(28) is None
    assert name_for(None) is None


def test_whole_number_vidlength_parses():
    assert coerce_vidlength(5.0) == 5
    assert coerce_vidlength("5") == 5
    assert coerce_vidlength("5.0") == 5
    assert coerce_vidlength(5.7) == 5
    assert coerce_vidlength(True) == 0
    v = make_video("a", duration="PT3M")
    assert filter_candidates([v], {"vidlength": 5.0}) == []
