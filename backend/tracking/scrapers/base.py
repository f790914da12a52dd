"""Scrape result type and number parsing shared by all providers."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from backend.exceptions import ServiceError


class ScrapeError(ServiceError):
    """Raised by a provider when it cannot produce metrics for a URL."""

    default_code = "SCRAPE_FAILED"


@dataclass
class ScrapedContent:
    platform: str
    url: str
    views: Optional[int] = None
    likes: Optional[int] = None
    comments: Optional[int] = None
    shares: Optional[int] = None
    title: str = ""
    author: str = ""
    created_at: Optional[str] = None
    provider: str = ""
    error: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def success(self) -> bool:
        return self.error is None and self.views is not None


COMPACT_NUMBER = re.compile(r"^\s*([0-9][0-9,]*(?:\.[0-9]+)?)\s*([kmb])?\s*$", re.IGNORECASE)
MULTIPLIERS = {"k": 1_000, "m": 1_000_000, "b": 1_000_000_000}


def coerce_int(value: Any) -> Optional[int]:
    """Turn API or page values (``12345``, ``"1,234"``, ``"1.2M"``) into ints."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 0 else None
    if isinstance(value, float):
        return int(value) if value >= 0 else None
    if isinstance(value, dict):
        for key in ("count", "value", "total"):
            if key in value:
                return coerce_int(value[key])
        return None
    match = COMPACT_NUMBER.match(str(value))
    if not match:
        return None
    number, suffix = match.groups()
    number = number.replace(",", "")
    try:
        parsed = float(number)
    except ValueError:
        return None
    if suffix:
        parsed *= MULTIPLIERS[suffix.lower()]
    return int(round(parsed))


def first_int(item: Dict[str, Any], *keys: str) -> Optional[int]:
    """First non-null integer among ``keys``; dotted keys walk nested dicts."""
    for key in keys:
        value: Any = item
        for part in key.split("."):
            if not isinstance(value, dict):
                value = None
                break
            value = value.get(part)
        parsed = coerce_int(value)
        if parsed is not None:
            return parsed
    return None
