"""Provider fallback chain used by the tracker and submission review."""
from __future__ import annotations

import logging
import time
from typing import Dict, List, Optional

from submissions.social_urls import platform_from_url

from ..observability.metrics import SCRAPE_COUNT, SCRAPE_LATENCY
from .apify import APIFY_SCRAPERS, ApifyScraper
from .base import ScrapedContent, ScrapeError
from .html import HtmlViewScraper

logger = logging.getLogger(__name__)


class MultiPlatformScraper:
    """Try Apify first, then the HTML fallback. Never raises for provider failures."""

    def __init__(self, apify_scrapers: Optional[Dict[str, ApifyScraper]] = None,
                 html_scraper: Optional[HtmlViewScraper] = None, timeout: Optional[int] = None):
        self.timeout = timeout
        self._apify = apify_scrapers
        self._html = html_scraper

    def apify_scraper(self, platform: str) -> Optional[ApifyScraper]:
        if self._apify is not None:
            return self._apify.get(platform)
        scraper_cls = APIFY_SCRAPERS.get(platform)
        return scraper_cls(timeout=self.timeout) if scraper_cls else None

    @property
    def html_scraper(self) -> HtmlViewScraper:
        if self._html is None:
            self._html = HtmlViewScraper(timeout=self.timeout)
        return self._html

    def scrape(self, url: str, platform: Optional[str] = None) -> ScrapedContent:
        platform = platform or platform_from_url(url)
        if not platform:
            return ScrapedContent(platform="", url=url, error="Unsupported platform")

        errors: List[str] = []

        apify = self.apify_scraper(platform)
        if apify is not None and apify.configured:
            started = time.monotonic()
            try:
                content = apify.scrape(url)
            except ScrapeError as exc:
                errors.append(f"apify: {exc.message}")
                SCRAPE_COUNT.labels(platform=platform, provider="apify", outcome="failure").inc()
            except Exception as exc:
                # apify-client raises its own ApifyApiError/requests errors
                errors.append(f"apify: {exc}")
                SCRAPE_COUNT.labels(platform=platform, provider="apify", outcome="failure").inc()
                logger.warning(f"Apify scrape crashed for {url}: {exc}")
            else:
                SCRAPE_COUNT.labels(platform=platform, provider="apify", outcome="success").inc()
                SCRAPE_LATENCY.labels(platform=platform, provider="apify").observe(time.monotonic() - started)
                return content
        elif apify is not None:
            errors.append("apify: not configured")

        started = time.monotonic()
        try:
            content = self.html_scraper.scrape(url, platform)
        except ScrapeError as exc:
            errors.append(f"html: {exc.message}")
            SCRAPE_COUNT.labels(platform=platform, provider="html", outcome="failure").inc()
        else:
            SCRAPE_COUNT.labels(platform=platform, provider="html", outcome="success").inc()
            SCRAPE_LATENCY.labels(platform=platform, provider="html").observe(time.monotonic() - started)
            return content

        message = "; ".join(errors) or "No scraper available"
        logger.warning(f"All scrapers failed for {url}: {message}")
        return ScrapedContent(platform=platform, url=url, error=message)
