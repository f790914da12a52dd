from unittest.mock import MagicMock

import pytest
import requests

from tracking.scrapers import (
    HtmlViewScraper,
    MultiPlatformScraper,
    ScrapedContent,
    ScrapeError,
    TikTokApifyScraper,
    TwitterApifyScraper,
    coerce_int,
    extract_metrics,
)

TIKTOK_URL = "https://www.tiktok.com/@clipper/video/7300000000000000001"


@pytest.mark.parametrize(
    "value, expected",
    [
        (12345, 12345),
        ("1,234", 1234),
        ("1.2M", 1_200_000),
        ("15K", 15_000),
        ("2b", 2_000_000_000),
        ({"count": "7"}, 7),
        (-5, None),
        (True, None),
        ("n/a", None),
        (None, None),
    ],
)
def test_coerce_int(value, expected):
    assert coerce_int(value) == expected


def test_extract_metrics_prefers_embedded_json():
    html = '<html><script>{"playCount":98765,"diggCount":321,"commentCount":12,"shareCount":4}</script></html>'

    metrics = extract_metrics(html)

    assert metrics["views"] == 98765
    assert metrics["likes"] == 321
    assert metrics["comments"] == 12
    assert metrics["shares"] == 4


def test_extract_metrics_reads_json_ld_interaction_statistics():
    html = """
    <html><head><title>Clip</title>
    <script type="application/ld+json">
    {"@type": "VideoObject", "interactionStatistic": [
        {"interactionType": {"@type": "https://schema.org/WatchAction"}, "userInteractionCount": "4500"},
        {"interactionType": "https://schema.org/LikeAction", "userInteractionCount": 120}
    ]}
    </script></head></html>
    """

    metrics = extract_metrics(html)

    assert metrics["views"] == 4500
    assert metrics["likes"] == 120
    assert metrics["title"] == "Clip"


def test_extract_metrics_falls_back_to_meta_description():
    html = (
        '<html><head><meta property="og:title" content="Great clip">'
        '<meta property="og:description" content="1.5M views, 20K likes, 300 comments"></head></html>'
    )

    metrics = extract_metrics(html)

    assert metrics["views"] == 1_500_000
    assert metrics["likes"] == 20_000
    assert metrics["comments"] == 300
    assert metrics["title"] == "Great clip"


def _apify_client(items, status="SUCCEEDED"):
    client = MagicMock()
    client.actor.return_value.call.return_value = {"status": status, "defaultDatasetId": "dataset-1"}
    client.dataset.return_value.iterate_items.return_value = iter(items)
    return client


def test_tiktok_apify_scraper_normalizes_first_item(settings):
    client = _apify_client([
        {"playCount": 5000, "diggCount": 100, "shareCount": 3, "text": "hello", "authorMeta": {"name": "bob"}},
    ])
    scraper = TikTokApifyScraper(api_token="", client=client)

    content = scraper.scrape(TIKTOK_URL)

    assert content.views == 5000
    assert content.likes == 100
    assert content.shares == 3
    assert content.author == "bob"
    assert content.provider == "apify"
    client.actor.assert_called_once_with(settings.APIFY_ACTORS["TIKTOK"])
    run_input = client.actor.return_value.call.call_args.kwargs["run_input"]
    assert run_input["postURLs"] == [TIKTOK_URL]


def test_twitter_apify_scraper_reads_nested_view_count():
    client = _apify_client([{"views": {"count": "2.5K"}, "likeCount": 10, "retweetCount": 2, "text": "tweet"}])

    content = TwitterApifyScraper(client=client).scrape("https://x.com/someone/status/1")

    assert content.views == 2500
    assert content.shares == 2


def test_apify_scraper_raises_on_failed_run():
    scraper = TikTokApifyScraper(client=_apify_client([], status="FAILED"))

    with pytest.raises(ScrapeError) as exc:
        scraper.scrape(TIKTOK_URL)

    assert exc.value.code == "APIFY_RUN_FAILED"


def test_apify_scraper_raises_when_dataset_has_only_errors():
    scraper = TikTokApifyScraper(client=_apify_client([{"error": "not found"}]))

    with pytest.raises(ScrapeError) as exc:
        scraper.scrape(TIKTOK_URL)

    assert exc.value.code == "APIFY_EMPTY_RESULT"


def _session(text="", exc=None):
    session = MagicMock()
    session.headers = {}
    if exc is not None:
        session.get.side_effect = exc
    else:
        session.get.return_value.text = text
    return session


def test_html_scraper_parses_fetched_page():
    session = _session('<script>"playCount":777</script>')

    content = HtmlViewScraper(timeout=5, session=session).scrape(TIKTOK_URL, "TIKTOK")

    assert content.views == 777
    assert content.provider == "html"
    assert "User-Agent" in session.headers
    session.get.assert_called_once_with(TIKTOK_URL, timeout=5, allow_redirects=True)


def test_html_scraper_wraps_request_errors():
    session = _session(exc=requests.ConnectionError("offline"))

    with pytest.raises(ScrapeError) as exc:
        HtmlViewScraper(timeout=5, session=session).scrape(TIKTOK_URL, "TIKTOK")

    assert exc.value.code == "HTML_FETCH_FAILED"


def test_html_scraper_requires_a_view_count():
    with pytest.raises(ScrapeError) as exc:
        HtmlViewScraper(timeout=5, session=_session("<html></html>")).scrape(TIKTOK_URL, "TIKTOK")

    assert exc.value.code == "HTML_NO_VIEWS"


def _html_returning(views):
    html = MagicMock()
    html.scrape.return_value = ScrapedContent(platform="TIKTOK", url=TIKTOK_URL, views=views, provider="html")
    return html


def test_multi_scraper_uses_apify_when_it_succeeds():
    apify = MagicMock(configured=True)
    apify.scrape.return_value = ScrapedContent(platform="TIKTOK", url=TIKTOK_URL, views=10, provider="apify")
    html = _html_returning(5)

    content = MultiPlatformScraper(apify_scrapers={"TIKTOK": apify}, html_scraper=html).scrape(TIKTOK_URL)

    assert content.provider == "apify"
    html.scrape.assert_not_called()


def test_multi_scraper_falls_back_to_html():
    apify = MagicMock(configured=True)
    apify.scrape.side_effect = ScrapeError("actor timed out")

    content = MultiPlatformScraper(apify_scrapers={"TIKTOK": apify}, html_scraper=_html_returning(42)).scrape(
        TIKTOK_URL
    )

    assert content.success
    assert content.views == 42
    assert content.provider == "html"


def test_multi_scraper_skips_unconfigured_apify():
    apify = MagicMock(configured=False)

    content = MultiPlatformScraper(apify_scrapers={"TIKTOK": apify}, html_scraper=_html_returning(42)).scrape(
        TIKTOK_URL, "TIKTOK"
    )

    apify.scrape.assert_not_called()
    assert content.views == 42


def test_multi_scraper_reports_every_provider_error():
    apify = MagicMock(configured=True)
    apify.scrape.side_effect = RuntimeError("socket closed")
    html = MagicMock()
    html.scrape.side_effect = ScrapeError("No view count found")

    content = MultiPlatformScraper(apify_scrapers={"TIKTOK": apify}, html_scraper=html).scrape(TIKTOK_URL)

    assert not content.success
    assert "apify: socket closed" in content.error
    assert "html: No view count found" in content.error


def test_multi_scraper_rejects_unknown_platform():
    content = MultiPlatformScraper(apify_scrapers={}).scrape("https://example.com/video/1")

    assert content.error == "Unsupported platform"
