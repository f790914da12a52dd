"""Prometheus metrics for the view tracking pipeline."""
from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

SCRAPE_COUNT = Counter(
    "tracking_scrape_total",
    "Scrape attempts by platform, provider and outcome",
    labelnames=("platform", "provider", "outcome"),
)

SCRAPE_LATENCY = Histogram(
    "tracking_scrape_duration_seconds",
    "Latency of successful scrapes",
    labelnames=("platform", "provider"),
    buckets=(0.5, 1, 2, 5, 10, 20, 40, 60, 90),
)

EARNINGS_ACCRUED = Counter(
    "tracking_earnings_accrued_usd_total",
    "Clipper earnings accrued by the tracker",
    labelnames=("platform",),
)

VIEWS_GAINED = Counter(
    "tracking_views_gained_total",
    "Views gained between consecutive snapshots",
    labelnames=("platform",),
)

TRACKING_RUN_DURATION = Histogram(
    "tracking_run_duration_seconds",
    "Duration of a view tracking run",
    buckets=(10, 30, 60, 120, 180, 240, 300, 600),
)

TRACKING_RUN_RESULT = Counter(
    "tracking_run_total",
    "View tracking runs by final status",
    labelnames=("status",),
)

LAST_RUN_CLIPS = Gauge(
    "tracking_last_run_clips",
    "Clips handled by the most recent tracking run",
    labelnames=("outcome",),
)
