import pytest

from tubefeed.models import VideoRecord
from tubefeed.store import Store


def make_video(vid, category_id=10, channel_id="c1", duration="PT10M", tags=None, title=None):
    return VideoRecord(
        id=vid, title=title or f"video {vid}", channel_id=channel_id,
        channel_title=f"channel {channel_id}", duration_iso=duration,
        category_id=category_id, tags=list(tags or []),
        thumbnail_url=f"https://i.ytimg.com/vi/{vid}/hqdefault.jpg",
    )


class FakeCatalog:
    """In-memory stand-in for CatalogClient; records every call."""

    def __init__(self, videos=(), subscriptions=(), uploads=None, search=None,
                 default_search=(), identity="UCme", fail_on=()):
        self.videos = {v.id: v for v in videos}
        self.subscriptions = list(subscriptions)
        self.uploads = dict(uploads or {})
        self.search = dict(search or {})
        self.default_search = list(default_search)
        self.identity = identity
        self.fail_on = set(fail_on)
        self.calls = []
        self.queries = []

    def _call(self, name, *args):
        from tubefeed.errors import UpstreamUnavailable
        self.calls.append((name,) + args)
        if name in self.fail_on:
            raise UpstreamUnavailable(f"{name} failed")

    def my_channel_id(self):
        self._call("my_channel_id")
        return self.identity

    def list_subscriptions(self, limit=5):
        self._call("list_subscriptions", limit)
        return self.subscriptions[:limit]

    def uploads_playlist(self, channel_id):
        self._call("uploads_playlist", channel_id)
        return f"UU-{channel_id}" if channel_id in self.uploads else None

    def playlist_items(self, playlist_id, limit=5):
        self._call("playlist_items", playlist_id, limit)
        return self.uploads[playlist_id[len("UU-"):]][:limit]

    def video_details(self, ids):
        self._call("video_details", tuple(ids))
        return [self.videos[i] for i in ids if i in self.videos]

    def search_ids(self, query, limit=None):
        self._call("search_ids", query)
        self.queries.append(query)
        return list(self.search.get(query, self.default_search))


@pytest.fixture
def store(tmp_path):
    s = Store(tmp_path / "feed.db")
    s.init_db()
    return s


@pytest.fixture
def verified_store(store):
    store.set_authenticated("UCme", True)
    return store
