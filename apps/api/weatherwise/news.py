from __future__ import annotations

import time
import asyncio
import logging
from typing import Iterable, List, Optional, Sequence, Set, Tuple

import httpx

from weatherwise import mock, providers, units
from weatherwise.models import PLACEHOLDER_NAMES, NewsItem
from weatherwise.providers import ProviderError, get_json, new_client, require_key
from weatherwise.schemas import NewsArticle, NewsSearchResponse, YtSearchItem, YtSearchResponse

logger = logging.getLogger(__name__)

NEWSAPI_URL = "https://newsapi.org/v2/everything"
YOUTUBE_SEARCH_URL = "https://www.googleapis.com/youtube/v3/search"
YOUTUBE_WATCH_URL = "https://www.youtube.com/watch?v="

FEED_SIZE = 5
VIDEO_KEYWORDS = 3

DEFAULT_KEYWORDS = [
    "weather", "climate", "rain", "cyclone", "heatwave", "storm", "monsoon",
    "flood", "temperature", "environment", "climate change", "global warming",
]


def searchable_location(name: Optional[str]) -> Optional[str]:
    """The location name if it names a real place, else None."""
    if not name or not name.strip():
        return None
    if name.strip().lower() in PLACEHOLDER_NAMES:
        return None
    return name.strip()


def region_token(name: Optional[str]) -> Optional[str]:
    """Broadest part of a ``"City, State, Country"`` name (``Country``)."""
    loc = searchable_location(name)
    if not loc or "," not in loc:
        return None
    token = loc.rsplit(",", 1)[1].strip()
    return token if len(token) > 2 else None


def build_article_query(keywords: Sequence[str], location_name: Optional[str] = None) -> str:
    parts = [k for k in keywords if k]
    loc = searchable_location(location_name)
    if loc:
        parts.append(loc)
        token = region_token(loc)
        if token:
            parts.append(token)
    return " OR ".join(f'"{p}"' for p in parts)


def build_video_query(keywords: Sequence[str], location_name: Optional[str] = None) -> str:
    parts = [k for k in keywords[:VIDEO_KEYWORDS] if k] + ["news report"]
    loc = searchable_location(location_name)
    if loc:
        parts.append(loc)
    return " ".join(parts)


def _display_date(raw: Optional[str]) -> str:
    dt = units.parse_timestamp(raw)
    return units.format_news_date(dt) if dt else "N/A"


def article_to_item(article: NewsArticle, index: int) -> NewsItem:
    return NewsItem(
        id=article.url or f"news-{index}-{int(time.time() * 1000)}",
        type="article",
        title=(article.title or "").strip(),
        source=article.source.name or "Unknown Source",
        url=article.url or "",
        raw_published_at=article.published_at,
        published_at=_display_date(article.published_at),
        description=article.description or "No description available.",
        image_url=article.url_to_image,
    )


def video_to_item(item: YtSearchItem, index: int) -> NewsItem:
    vid = item.id.video_id
    thumbs = item.snippet.thumbnails
    image = next((thumbs[k].url for k in ("high", "medium", "default") if k in thumbs and thumbs[k].url), None)
    return NewsItem(
        id=vid or f"video-{index}-{int(time.time() * 1000)}",
        type="video",
        title=(item.snippet.title or "").strip(),
        source=item.snippet.channel_title or "YouTube",
        url=f"{YOUTUBE_WATCH_URL}{vid}" if vid else "",
        video_id=vid,
        raw_published_at=item.snippet.published_at,
        published_at=_display_date(item.snippet.published_at),
        description=item.snippet.description or "No description available.",
        image_url=image,
    )


async def fetch_articles(
    client: httpx.AsyncClient,
    keywords: Sequence[str],
    location_name: Optional[str] = None,
) -> Tuple[List[NewsItem], bool]:
    """NewsAPI articles and whether they are live; two mock articles when the provider can't deliver any."""
    try:
        key = require_key(providers.NEWSAPI_API_KEY, "NewsAPI")
        resp = await get_json(
            client,
            NEWSAPI_URL,
            NewsSearchResponse,
            params={
                "q": build_article_query(keywords, location_name),
                "language": "en",
                "sortBy": "relevancy",
                "pageSize": 3,
                "apiKey": key,
            },
            provider="NewsAPI",
        )
    except ProviderError as e:
        logger.warning("Falling back to mock news articles: %s", e)
        return mock.mock_articles(location_name), False

    if not resp.articles:
        logger.warning("NewsAPI returned no articles; falling back to mock news articles")
        return mock.mock_articles(location_name), False
    return [article_to_item(a, i) for i, a in enumerate(resp.articles)], True


async def fetch_videos(
    client: httpx.AsyncClient,
    keywords: Sequence[str],
    location_name: Optional[str] = None,
) -> Tuple[List[NewsItem], bool]:
    """YouTube news videos and whether they are live; empty when the provider is unconfigured or failing."""
    try:
        key = require_key(providers.YOUTUBE_API_KEY, "YouTube")
        resp = await get_json(
            client,
            YOUTUBE_SEARCH_URL,
            YtSearchResponse,
            params={
                "part": "snippet",
                "q": build_video_query(keywords, location_name),
                "type": "video",
                "maxResults": 3,
                "order": "relevance",
                "relevanceLanguage": "en",
                "key": key,
            },
            provider="YouTube search",
        )
    except ProviderError as e:
        logger.warning("No videos fetched: %s", e)
        return [], False
    return [video_to_item(v, i) for i, v in enumerate(resp.items)], True


def deduplicate(items: Iterable[NewsItem]) -> List[NewsItem]:
    """Drop items whose id was already seen, keeping order."""
    seen: Set[str] = set()
    out: List[NewsItem] = []
    for it in items:
        if it.id in seen:
            continue
        seen.add(it.id)
        out.append(it)
    return out


def rank_feed(items: Iterable[NewsItem], limit: int = FEED_SIZE) -> List[NewsItem]:
    """Usable, unique items, newest first; videos ahead of articles on equal timestamps."""
    usable = deduplicate(it for it in items if it.is_usable)
    usable.sort(key=lambda it: (-units.timestamp_ms(it.raw_published_at), 0 if it.type == "video" else 1))
    return usable[:limit]


async def fetch_news_feed_sourced(
    keywords: Sequence[str],
    location_name: Optional[str] = None,
    client: httpx.AsyncClient | None = None,
) -> Tuple[List[NewsItem], bool]:
    """Top articles and videos for ``keywords`` and whether both searches were live.

    The article and video searches run concurrently and fall back
    independently of each other. The feed is always at most five items.
    """
    keywords = list(keywords) or list(DEFAULT_KEYWORDS)

    async def _gather(c: httpx.AsyncClient):
        return await asyncio.gather(
            fetch_articles(c, keywords, location_name),
            fetch_videos(c, keywords, location_name),
        )

    if client is None:
        async with new_client() as c:
            (articles, articles_live), (videos, videos_live) = await _gather(c)
    else:
        (articles, articles_live), (videos, videos_live) = await _gather(client)

    return rank_feed([*videos, *articles]), articles_live and videos_live


async def fetch_news_feed(
    keywords: Sequence[str],
    location_name: Optional[str] = None,
    client: httpx.AsyncClient | None = None,
) -> List[NewsItem]:
    """Top articles and videos for ``keywords``; always a list of at most five items."""
    items, _ = await fetch_news_feed_sourced(keywords, location_name, client=client)
    return items
