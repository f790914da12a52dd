"""Apify actor based scrapers, one normaliser per platform."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from apify_client import ApifyClient
from django.conf import settings

from campaigns.models import Platform

from .base import ScrapedContent, ScrapeError, first_int

logger = logging.getLogger(__name__)


class ApifyScraper:
    """Run a platform's Apify actor for a single post URL and normalise the first dataset item."""

    provider = "apify"
    platform: str = ""

    def __init__(self, api_token: Optional[str] = None, actor_id: Optional[str] = None,
                 timeout: Optional[int] = None, client: Optional[ApifyClient] = None):
        self.api_token = api_token if api_token is not None else settings.APIFY_API_TOKEN
        self.actor_id = actor_id or settings.APIFY_ACTORS[self.platform]
        self.timeout = timeout or settings.SCRAPE_TIMEOUT_SECONDS
        self._client = client

    @property
    def configured(self) -> bool:
        return bool(self.api_token) or self._client is not None

    @property
    def client(self) -> ApifyClient:
        if self._client is None:
            if not self.api_token:
                raise ScrapeError("APIFY_API_TOKEN is not configured.", code="APIFY_NOT_CONFIGURED")
            self._client = ApifyClient(self.api_token)
        return self._client

    def build_input(self, url: str) -> Dict[str, Any]:
        raise NotImplementedError

    def normalize(self, url: str, item: Dict[str, Any]) -> ScrapedContent:
        raise NotImplementedError

    def fetch_items(self, url: str) -> List[Dict[str, Any]]:
        run_input = self.build_input(url)
        logger.info(f"Starting Apify actor {self.actor_id} for {url}")
        run = self.client.actor(self.actor_id).call(run_input=run_input, timeout_secs=self.timeout)
        if not run:
            raise ScrapeError(f"Apify actor {self.actor_id} returned no run.", code="APIFY_RUN_FAILED")
        status = run.get("status")
        if status and status != "SUCCEEDED":
            raise ScrapeError(f"Apify run finished with status {status}.", code="APIFY_RUN_FAILED")
        return list(self.client.dataset(run["defaultDatasetId"]).iterate_items())

    def scrape(self, url: str) -> ScrapedContent:
        items = self.fetch_items(url)
        items = [item for item in items if isinstance(item, dict) and not item.get("error")]
        if not items:
            raise ScrapeError(f"Apify actor {self.actor_id} returned no data for {url}.", code="APIFY_EMPTY_RESULT")
        content = self.normalize(url, items[0])
        if content.views is None:
            raise ScrapeError(f"No view count in Apify result for {url}.", code="APIFY_NO_VIEWS")
        return content


class TikTokApifyScraper(ApifyScraper):
    platform = Platform.TIKTOK

    def build_input(self, url):
        return {
            "postURLs": [url],
            "resultsPerPage": 1,
            "shouldDownloadVideos": False,
            "shouldDownloadCovers": False,
            "shouldDownloadSubtitles": False,
        }

    def normalize(self, url, item):
        author = item.get("authorMeta") or {}
        return ScrapedContent(
            platform=self.platform,
            url=url,
            views=first_int(item, "playCount", "stats.playCount"),
            likes=first_int(item, "diggCount", "stats.diggCount"),
            comments=first_int(item, "commentCount", "stats.commentCount"),
            shares=first_int(item, "shareCount", "stats.shareCount"),
            title=item.get("text") or "",
            author=author.get("name") or author.get("nickName") or "",
            created_at=item.get("createTimeISO"),
            provider=self.provider,
            raw=item,
        )


class YouTubeApifyScraper(ApifyScraper):
    platform = Platform.YOUTUBE

    def build_input(self, url):
        return {"channels": [url], "maxResultsShorts": 1, "maxResults": 1}

    def normalize(self, url, item):
        return ScrapedContent(
            platform=self.platform,
            url=url,
            views=first_int(item, "viewCount", "views"),
            likes=first_int(item, "likes", "likeCount"),
            comments=first_int(item, "commentsCount", "commentCount"),
            title=item.get("title") or "",
            author=item.get("channelName") or "",
            created_at=item.get("date"),
            provider=self.provider,
            raw=item,
        )


class InstagramApifyScraper(ApifyScraper):
    platform = Platform.INSTAGRAM

    def build_input(self, url):
        return {"directUrls": [url], "resultsType": "posts", "resultsLimit": 1, "addParentData": False}

    def normalize(self, url, item):
        return ScrapedContent(
            platform=self.platform,
            url=url,
            views=first_int(item, "videoPlayCount", "videoViewCount", "igPlayCount"),
            likes=first_int(item, "likesCount"),
            comments=first_int(item, "commentsCount"),
            title=(item.get("caption") or "")[:300],
            author=item.get("ownerFullName") or item.get("ownerUsername") or "",
            created_at=item.get("timestamp"),
            provider=self.provider,
            raw=item,
        )


class TwitterApifyScraper(ApifyScraper):
    platform = Platform.TWITTER

    def build_input(self, url):
        return {"startUrls": [url], "maxItems": 1}

    def normalize(self, url, item):
        author = item.get("author") or item.get("user") or {}
        return ScrapedContent(
            platform=self.platform,
            url=url,
            views=first_int(item, "viewCount", "views.count"),
            likes=first_int(item, "likeCount", "favoriteCount"),
            comments=first_int(item, "replyCount"),
            shares=first_int(item, "retweetCount"),
            title=(item.get("text") or item.get("fullText") or "")[:300],
            author=author.get("name") or author.get("userName") or "",
            created_at=item.get("createdAt"),
            provider=self.provider,
            raw=item,
        )


APIFY_SCRAPERS = {
    Platform.TIKTOK: TikTokApifyScraper,
    Platform.YOUTUBE: YouTubeApifyScraper,
    Platform.INSTAGRAM: InstagramApifyScraper,
    Platform.TWITTER: TwitterApifyScraper,
}
