"""
Tests for the news/video feed in weatherwise.news.
"""

import asyncio

import httpx
import pytest

from conftest import Recorder, json_response
from weatherwise import news
from weatherwise.models import NewsItem
from weatherwise.schemas import NewsSearchResponse, YtSearchResponse

NEWS_PATH = "/v2/everything"
VIDEO_PATH = "/youtube/v3/search"


def article(url, published, title="Storm season", source="Daily Planet"):
    return {
        "source": {"id": None, "name": source},
        "title": title,
        "url": url,
        "publishedAt": published,
        "description": "desc",
        "urlToImage": "https://img.example/a.jpg",
    }


def video(video_id, published, title="Weather report"):
    return {
        "kind": "youtube#searchResult",
        "id": {"kind": "youtube#video", "videoId": video_id},
        "snippet": {
            "title": title,
            "channelTitle": "WX Channel",
            "publishedAt": published,
            "description": "",
            "thumbnails": {
                "default": {"url": f"https://i.ytimg.com/vi/{video_id}/default.jpg"},
                "high": {"url": f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"},
            },
        },
    }


def feed_ids(items):
    return [i.id for i in items]


class TestQueries:

    def test_article_query_with_location_and_region(self):
        q = news.build_article_query(["weather", "storm"], "Paris, Ile-de-France, France")
        assert q == '"weather" OR "storm" OR "Paris, Ile-de-France, France" OR "France"'

    def test_short_region_token_is_dropped(self):
        q = news.build_article_query(["rain"], "Paris, FR")
        assert q == '"rain" OR "Paris, FR"'

    @pytest.mark.parametrize("name", [None, "", "My Current Location", "unknown city", "Search Error"])
    def test_placeholder_locations_are_not_searched(self, name):
        assert news.build_article_query(["rain"], name) == '"rain"'
        assert news.build_video_query(["rain"], name) == "rain news report"

    def test_video_query_uses_first_three_keywords(self):
        q = news.build_video_query(["weather", "climate", "rain", "cyclone"], "Oslo, NO")
        assert q == "weather climate rain news report Oslo, NO"

    def test_region_token(self):
        assert news.region_token("Austin, Texas, United States") == "United States"
        assert news.region_token("Austin") is None
        assert news.region_token("Austin, US") is None


class TestMapping:

    def test_article_mapping(self):
        resp = NewsSearchResponse.model_validate({"articles": [article("https://x/1", "2026-06-01T10:00:00Z")]})
        item = news.article_to_item(resp.articles[0], 0)
        assert item.id == "https://x/1"
        assert item.type == "article"
        assert item.published_at == "Jun 1, 2026"
        assert item.image_url == "https://img.example/a.jpg"

    def test_article_without_url_gets_generated_id_and_is_unusable(self):
        resp = NewsSearchResponse.model_validate({"articles": [article(None, None)]})
        item = news.article_to_item(resp.articles[0], 4)
        assert item.id.startswith("news-4-")
        assert item.published_at == "N/A"
        assert not item.is_usable

    def test_video_mapping_prefers_high_thumbnail(self):
        resp = YtSearchResponse.model_validate({"items": [video("abc123", "2026-06-02T08:00:00Z")]})
        item = news.video_to_item(resp.items[0], 0)
        assert item.id == item.video_id == "abc123"
        assert item.url == "https://www.youtube.com/watch?v=abc123"
        assert item.image_url.endswith("/abc123/hqdefault.jpg")
        assert item.description == "No description available."

    def test_video_without_id_is_unusable(self):
        resp = YtSearchResponse.model_validate({"items": [{"id": {"kind": "youtube#channel"}, "snippet": {"title": "t"}}]})
        assert not news.video_to_item(resp.items[0], 1).is_usable


class TestRanking:

    def _item(self, id, type, raw, title="t"):
        return NewsItem(
            id=id, type=type, title=title, source="s", url="u" if type == "article" else "",
            video_id=id if type == "video" else None, description="d", published_at="x",
            raw_published_at=raw,
        )

    def test_newest_first_with_videos_winning_ties(self):
        items = [
            self._item("a1", "article", "2026-06-01T00:00:00Z"),
            self._item("a2", "article", "2026-06-03T00:00:00Z"),
            self._item("v1", "video", "2026-06-03T00:00:00Z"),
            self._item("a3", "article", None),
        ]
        assert feed_ids(news.rank_feed(items)) == ["v1", "a2", "a1", "a3"]

    def test_unusable_and_duplicate_items_are_dropped(self):
        items = [
            self._item("a1", "article", "2026-06-01T00:00:00Z"),
            self._item("a1", "article", "2026-06-02T00:00:00Z"),
            self._item("blank", "article", "2026-06-05T00:00:00Z", title="  "),
        ]
        ranked = news.rank_feed(items)
        assert feed_ids(ranked) == ["a1"]
        assert ranked[0].raw_published_at == "2026-06-01T00:00:00Z"

    def test_truncates_to_five(self):
        items = [self._item(f"a{i}", "article", f"2026-06-0{i}T00:00:00Z") for i in range(1, 9)]
        assert feed_ids(news.rank_feed(items)) == ["a8", "a7", "a6", "a5", "a4"]


@pytest.mark.asyncio
class TestFetchNewsFeed:

    async def test_no_keys_gives_two_mock_articles(self, no_keys):
        rec = Recorder({})
        async with rec.client() as client:
            items = await news.fetch_news_feed(["weather"], "Lima, PE", client=client)
        assert rec.requests == []
        assert sorted(feed_ids(items)) == ["mock-article-1", "mock-article-2"]
        # the "now" mock article is newer than the "yesterday" one
        assert feed_ids(items) == ["mock-article-2", "mock-article-1"]

    async def test_news_error_and_two_videos(self, all_keys):
        rec = Recorder({
            NEWS_PATH: json_response({"status": "error", "code": "apiKeyInvalid"}, status=401),
            VIDEO_PATH: json_response({"items": [
                video("old", "2001-01-01T00:00:00Z"),
                video("new", "2099-01-01T00:00:00Z"),
            ]}),
        })
        async with rec.client() as client:
            items = await news.fetch_news_feed(["weather", "storm"], "Oslo, Oslo, Norway", client=client)
        assert len(items) == 4
        assert feed_ids(items)[0] == "new"
        assert feed_ids(items)[-1] == "old"
        assert {"mock-article-1", "mock-article-2"} <= set(feed_ids(items))

    async def test_real_articles_and_videos_truncated_to_five(self, all_keys):
        rec = Recorder({
            NEWS_PATH: json_response({"status": "ok", "articles": [
                article("https://n/1", "2026-06-01T00:00:00Z"),
                article("https://n/2", "2026-06-02T00:00:00Z"),
                article("https://n/3", "2026-06-03T00:00:00Z"),
            ]}),
            VIDEO_PATH: json_response({"items": [
                video("v1", "2026-06-01T12:00:00Z"),
                video("v2", "2026-06-02T12:00:00Z"),
                video("v3", "2026-06-03T00:00:00Z"),
            ]}),
        })
        async with rec.client() as client:
            items = await news.fetch_news_feed(["weather"], None, client=client)
        assert feed_ids(items) == ["v3", "https://n/3", "v2", "https://n/2", "v1"]

        params = {r.url.path: r.url.params for r in rec.requests}
        assert params[NEWS_PATH]["q"] == '"weather"'
        assert params[NEWS_PATH]["pageSize"] == "3"
        assert params[VIDEO_PATH]["q"] == "weather news report"
        assert params[VIDEO_PATH]["type"] == "video"

    async def test_zero_articles_falls_back_to_mock(self, all_keys):
        rec = Recorder({
            NEWS_PATH: json_response({"status": "ok", "totalResults": 0, "articles": []}),
            VIDEO_PATH: json_response({"items": []}),
        })
        async with rec.client() as client:
            items = await news.fetch_news_feed(["weather"], "Quito", client=client)
        assert sorted(feed_ids(items)) == ["mock-article-1", "mock-article-2"]

    async def test_video_failure_keeps_real_articles(self, all_keys):
        rec = Recorder({
            NEWS_PATH: json_response({"articles": [article("https://n/1", "2026-06-01T00:00:00Z")]}),
            VIDEO_PATH: json_response({"error": {"message": "quota"}}, status=403),
        })
        async with rec.client() as client:
            items = await news.fetch_news_feed(["weather"], client=client)
        assert feed_ids(items) == ["https://n/1"]

    async def test_unusable_provider_items_are_discarded(self, all_keys):
        rec = Recorder({
            NEWS_PATH: json_response({"articles": [
                article(None, "2026-06-01T00:00:00Z"),
                article("https://n/2", "2026-06-02T00:00:00Z", title=None),
                article("https://n/3", "2026-06-03T00:00:00Z"),
            ]}),
            VIDEO_PATH: json_response({"items": [{"id": {"kind": "youtube#channel"}, "snippet": {"title": "chan"}}]}),
        })
        async with rec.client() as client:
            items = await news.fetch_news_feed(["weather"], client=client)
        assert feed_ids(items) == ["https://n/3"]

    async def test_empty_keywords_use_defaults(self, all_keys):
        rec = Recorder({
            NEWS_PATH: json_response({"articles": []}),
            VIDEO_PATH: json_response({"items": []}),
        })
        async with rec.client() as client:
            await news.fetch_news_feed([], client=client)
        q = next(r.url.params["q"] for r in rec.requests if r.url.path == NEWS_PATH)
        assert q.startswith('"weather" OR "climate"')

    async def test_article_and_video_searches_overlap(self, all_keys):
        started = {NEWS_PATH: asyncio.Event(), VIDEO_PATH: asyncio.Event()}
        other = {NEWS_PATH: VIDEO_PATH, VIDEO_PATH: NEWS_PATH}

        async def handler(request: httpx.Request) -> httpx.Response:
            path = request.url.path
            started[path].set()
            try:
                await asyncio.wait_for(started[other[path]].wait(), timeout=2)
            except asyncio.TimeoutError:
                return httpx.Response(504)
            if path == NEWS_PATH:
                return httpx.Response(200, json={"articles": [article("https://n/1", "2026-06-01T00:00:00Z")]})
            return httpx.Response(200, json={"items": [video("v1", "2026-06-02T00:00:00Z")]})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            items = await news.fetch_news_feed(["weather"], client=client)
        # sequential requests would time out and fall back to mock articles / no videos
        assert feed_ids(items) == ["v1", "https://n/1"]

    async def test_timeouts_give_mock_articles_and_no_videos(self, all_keys):
        def slow(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with httpx.AsyncClient(transport=httpx.MockTransport(slow)) as client:
            items, live = await news.fetch_news_feed_sourced(["weather"], "Lima, PE", client=client)
        assert not live
        assert sorted(feed_ids(items)) == ["mock-article-1", "mock-article-2"]
        assert all(i.type == "article" for i in items)


@pytest.mark.asyncio
class TestLiveFlag:

    async def test_both_sources_live(self, all_keys):
        rec = Recorder({
            NEWS_PATH: json_response({"articles": [article("https://n/1", "2026-06-01T00:00:00Z")]}),
            VIDEO_PATH: json_response({"items": [video("v1", "2026-06-02T00:00:00Z")]}),
        })
        async with rec.client() as client:
            items, live = await news.fetch_news_feed_sourced(["weather"], client=client)
        assert live
        assert feed_ids(items) == ["v1", "https://n/1"]

    async def test_video_failure_is_not_live(self, all_keys):
        rec = Recorder({
            NEWS_PATH: json_response({"articles": [article("https://n/1", "2026-06-01T00:00:00Z")]}),
            VIDEO_PATH: json_response({"error": {"message": "quota"}}, status=403),
        })
        async with rec.client() as client:
            _, live = await news.fetch_news_feed_sourced(["weather"], client=client)
        assert not live

    async def test_mock_articles_are_not_live(self, all_keys):
        rec = Recorder({
            NEWS_PATH: json_response({"articles": []}),
            VIDEO_PATH: json_response({"items": [video("v1", "2026-06-02T00:00:00Z")]}),
        })
        async with rec.client() as client:
            _, live = await news.fetch_news_feed_sourced(["weather"], client=client)
        assert not live
