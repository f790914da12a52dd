"""View count scrapers."""

from .apify import (
    APIFY_SCRAPERS,
    ApifyScraper,
    InstagramApifyScraper,
    TikTokApifyScraper,
    TwitterApifyScraper,
    YouTubeApifyScraper,
)
from .base import ScrapedContent, ScrapeError, coerce_int
from .html import HtmlViewScraper, extract_metrics
from .multi import MultiPlatformScraper
