from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from rest_framework.test import APIClient

from campaigns.models import Campaign, Platform
from submissions.models import Clip, ClipSubmission
from tracking.scrapers import ScrapedContent


@pytest.fixture(autouse=True)
def _clear_cache():
    # Throttle counters live in the cache.
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def make_user(db):
    User = get_user_model()
    counter = {"n": 0}

    def _make(username=None, role=User.Role.CLIPPER, **extra):
        counter["n"] += 1
        username = username or f"user{counter['n']}"
        return User.objects.create_user(
            username=username,
            email=extra.pop("email", f"{username}@example.com"),
            password=extra.pop("password", "pass1234word"),
            role=role,
            **extra,
        )

    return _make


@pytest.fixture
def clipper(make_user):
    return make_user("clipper")


@pytest.fixture
def admin_user(make_user):
    User = get_user_model()
    return make_user("admin", role=User.Role.ADMIN)


@pytest.fixture
def make_campaign(db):
    def _make(**extra):
        defaults = {
            "title": "Summer launch",
            "description": "Clip our summer launch trailer.",
            "creator": "Acme Records",
            "budget": Decimal("1000.00"),
            "payout_rate": Decimal("2.00"),
            "status": Campaign.Status.ACTIVE,
            "target_platforms": [Platform.TIKTOK, Platform.YOUTUBE],
        }
        defaults.update(extra)
        return Campaign.objects.create(**defaults)

    return _make


@pytest.fixture
def campaign(make_campaign):
    return make_campaign()


@pytest.fixture
def make_tracked_submission(db):
    """APPROVED submission with a clip, as left behind by approval."""

    def _make(user, campaign, url="https://www.tiktok.com/@clipper/video/7300000000000000001",
              initial_views=0, status=ClipSubmission.Status.APPROVED, platform=Platform.TIKTOK, **clip_fields):
        clip_fields.setdefault("views", initial_views)
        clip = Clip.objects.create(user=user, url=url, platform=platform, **clip_fields)
        return ClipSubmission.objects.create(
            user=user,
            campaign=campaign,
            clip=clip,
            clip_url=url,
            platform=platform,
            status=status,
            initial_views=initial_views,
        )

    return _make


class StubScraper:
    """Stands in for MultiPlatformScraper: returns queued view counts per URL."""

    def __init__(self, views=None, error=None):
        self.views = views or {}
        self.error = error
        self.calls = []

    def scrape(self, url, platform=None):
        self.calls.append(url)
        value = self.views.get(url)
        if isinstance(value, list):
            value = value.pop(0) if value else None
        if self.error or value is None:
            return ScrapedContent(platform=platform or "", url=url, error=self.error or "no data")
        return ScrapedContent(platform=platform or "", url=url, views=value, likes=10, shares=2, provider="stub")


@pytest.fixture
def stub_scraper():
    return StubScraper
