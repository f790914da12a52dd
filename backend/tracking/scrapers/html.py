"""Fallback scraper reading metrics straight from the public post page."""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, Iterable, Optional

import requests
from bs4 import BeautifulSoup
from django.conf import settings

from .base import ScrapedContent, ScrapeError, coerce_int

logger = logging.getLogger(__name__)

VIEW_PATTERNS = (
    r'"playCount"\s*:\s*"?(\d+)',
    r'"play_count"\s*:\s*(\d+)',
    r'"video_view_count"\s*:\s*(\d+)',
    r'"video_play_count"\s*:\s*(\d+)',
    r'"videoPlayCount"\s*:\s*(\d+)',
    r'"videoViewCount"\s*:\s*(\d+)',
    r'"viewCount"\s*:\s*"?(\d+)',
    r'"views"\s*:\s*\{\s*"count"\s*:\s*"?(\d+)',
)
LIKE_PATTERNS = (
    r'"diggCount"\s*:\s*"?(\d+)',
    r'"like_count"\s*:\s*(\d+)',
    r'"likesCount"\s*:\s*(\d+)',
    r'"likeCount"\s*:\s*"?(\d+)',
    r'"edge_media_preview_like"\s*:\s*\{\s*"count"\s*:\s*(\d+)',
)
COMMENT_PATTERNS = (
    r'"commentCount"\s*:\s*"?(\d+)',
    r'"comment_count"\s*:\s*(\d+)',
    r'"commentsCount"\s*:\s*(\d+)',
    r'"edge_media_to_comment"\s*:\s*\{\s*"count"\s*:\s*(\d+)',
)
SHARE_PATTERNS = (
    r'"shareCount"\s*:\s*"?(\d+)',
    r'"retweetCount"\s*:\s*"?(\d+)',
)
COMPACT_VIEWS = re.compile(r"([0-9][0-9,\.]*\s*[kmb]?)\s+(?:views|view|plays|play)\b", re.IGNORECASE)
COMPACT_LIKES = re.compile(r"([0-9][0-9,\.]*\s*[kmb]?)\s+(?:likes|like)\b", re.IGNORECASE)
COMPACT_COMMENTS = re.compile(r"([0-9][0-9,\.]*\s*[kmb]?)\s+(?:comments|comment)\b", re.IGNORECASE)


def _first_match(html: str, patterns: Iterable[str]) -> Optional[int]:
    for pattern in patterns:
        match = re.search(pattern, html, flags=re.DOTALL)
        if match:
            parsed = coerce_int(match.group(1))
            if parsed is not None:
                return parsed
    return None


def _json_ld_metrics(soup: BeautifulSoup) -> Dict[str, Optional[int]]:
    metrics: Dict[str, Optional[int]] = {"views": None, "likes": None, "comments": None}
    for script in soup.find_all("script", attrs={"type": "application/ld+json"}):
        raw = (script.string or script.get_text() or "").strip()
        if not raw:
            continue
        try:
            data = json.loads(raw)
        except ValueError:
            continue
        blocks = data if isinstance(data, list) else [data]
        for block in blocks:
            if not isinstance(block, dict):
                continue
            stats = block.get("interactionStatistic") or []
            if isinstance(stats, dict):
                stats = [stats]
            for stat in stats:
                if not isinstance(stat, dict):
                    continue
                interaction = stat.get("interactionType")
                if isinstance(interaction, dict):
                    interaction = interaction.get("@type", "")
                interaction = str(interaction or "")
                count = coerce_int(stat.get("userInteractionCount"))
                if count is None:
                    continue
                if "WatchAction" in interaction and metrics["views"] is None:
                    metrics["views"] = count
                elif "LikeAction" in interaction and metrics["likes"] is None:
                    metrics["likes"] = count
                elif "CommentAction" in interaction and metrics["comments"] is None:
                    metrics["comments"] = count
    return metrics


def _meta_content(soup: BeautifulSoup, *names: str) -> str:
    for name in names:
        tag = soup.find("meta", attrs={"property": name}) or soup.find("meta", attrs={"name": name})
        if tag and tag.get("content"):
            return tag["content"]
    return ""


def _compact(pattern: re.Pattern, text: str) -> Optional[int]:
    match = pattern.search(text or "")
    return coerce_int(match.group(1)) if match else None


def extract_metrics(html: str) -> Dict[str, Any]:
    """Pull view/like/comment counts out of a post page.

    Embedded JSON keys are tried first, then JSON-LD interaction statistics,
    then compact numbers in the og/meta description ("1.2M views").
    """
    soup = BeautifulSoup(html, "html.parser")
    views = _first_match(html, VIEW_PATTERNS)
    likes = _first_match(html, LIKE_PATTERNS)
    comments = _first_match(html, COMMENT_PATTERNS)
    shares = _first_match(html, SHARE_PATTERNS)

    json_ld = _json_ld_metrics(soup)
    views = views if views is not None else json_ld["views"]
    likes = likes if likes is not None else json_ld["likes"]
    comments = comments if comments is not None else json_ld["comments"]

    description = _meta_content(soup, "og:description", "description", "twitter:description")
    if views is None:
        views = _compact(COMPACT_VIEWS, description)
    if likes is None:
        likes = _compact(COMPACT_LIKES, description)
    if comments is None:
        comments = _compact(COMPACT_COMMENTS, description)

    title = _meta_content(soup, "og:title", "twitter:title")
    if not title and soup.title and soup.title.string:
        title = soup.title.string.strip()

    return {"views": views, "likes": likes, "comments": comments, "shares": shares, "title": title}


class HtmlViewScraper:
    """Fetch the post page with a browser user agent and parse the counts."""

    provider = "html"

    def __init__(self, timeout: Optional[int] = None, session: Optional[requests.Session] = None):
        self.timeout = timeout or settings.SCRAPE_TIMEOUT_SECONDS
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": settings.HTML_SCRAPE_USER_AGENT,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.9",
        })

    def scrape(self, url: str, platform: str) -> ScrapedContent:
        try:
            response = self.session.get(url, timeout=self.timeout, allow_redirects=True)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise ScrapeError(f"Failed to fetch {url}: {exc}", code="HTML_FETCH_FAILED") from exc

        metrics = extract_metrics(response.text)
        if metrics["views"] is None:
            raise ScrapeError(f"No view count found in page for {url}.", code="HTML_NO_VIEWS")

        return ScrapedContent(
            platform=platform,
            url=url,
            views=metrics["views"],
            likes=metrics["likes"],
            comments=metrics["comments"],
            shares=metrics["shares"],
            title=(metrics["title"] or "")[:300],
            provider=self.provider,
        )
