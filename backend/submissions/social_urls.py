"""Recognise and decompose TikTok, Instagram, YouTube and Twitter/X URLs."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from campaigns.models import Platform


@dataclass(frozen=True)
class ParsedSocialUrl:
    platform: Optional[str]
    username: Optional[str] = None
    post_id: Optional[str] = None
    is_valid: bool = False
    error: Optional[str] = None

    @property
    def is_post(self) -> bool:
        return self.is_valid and bool(self.post_id)


HANDLE = r"[A-Za-z0-9_.\-]+"

TIKTOK_PATTERNS = (
    re.compile(rf"^/@(?P<username>{HANDLE})/video/(?P<post_id>\d+)"),
    re.compile(r"^/t/(?P<post_id>[A-Za-z0-9]+)"),
    re.compile(r"^/v/(?P<post_id>\d+)"),
)
TIKTOK_PROFILE = re.compile(rf"^/@(?P<username>{HANDLE})/?$")
TIKTOK_SHORT = re.compile(r"^/(?P<post_id>[A-Za-z0-9]+)/?$")

INSTAGRAM_POST = re.compile(r"^/(?:(?P<username>[A-Za-z0-9_.]+)/)?(?:reel|reels|p|tv)/(?P<post_id>[A-Za-z0-9_\-]+)")
INSTAGRAM_PROFILE = re.compile(r"^/(?P<username>[A-Za-z0-9_.]+)/?$")
INSTAGRAM_RESERVED = {"explore", "accounts", "stories", "direct", "reels", "p", "tv"}

YOUTUBE_SHORTS = re.compile(r"^/shorts/(?P<post_id>[A-Za-z0-9_\-]{6,})")
YOUTUBE_HANDLE = re.compile(rf"^/@(?P<username>{HANDLE})")
YOUTUBE_CHANNEL = re.compile(r"^/(?:channel|c|user)/(?P<username>[A-Za-z0-9_.\-]+)")
YOUTU_BE = re.compile(r"^/(?P<post_id>[A-Za-z0-9_\-]{6,})")

TWITTER_STATUS = re.compile(r"^/(?P<username>[A-Za-z0-9_]{1,15})/status(?:es)?/(?P<post_id>\d+)")
TWITTER_PROFILE = re.compile(r"^/(?P<username>[A-Za-z0-9_]{1,15})/?$")
TWITTER_RESERVED = {"home", "explore", "search", "i", "settings", "notifications", "messages"}


def _host(netloc: str) -> str:
    host = netloc.lower().split(":")[0]
    for prefix in ("www.", "m.", "mobile."):
        if host.startswith(prefix):
            host = host[len(prefix):]
    return host


def _invalid(platform: Optional[str], error: str) -> ParsedSocialUrl:
    return ParsedSocialUrl(platform=platform, is_valid=False, error=error)


def _parse_tiktok(host: str, path: str) -> ParsedSocialUrl:
    if host in {"vm.tiktok.com", "vt.tiktok.com"}:
        match = TIKTOK_SHORT.match(path)
        if match:
            return ParsedSocialUrl(Platform.TIKTOK, post_id=match.group("post_id"), is_valid=True)
        return _invalid(Platform.TIKTOK, "Invalid TikTok short link")

    for pattern in TIKTOK_PATTERNS:
        match = pattern.match(path)
        if match:
            groups = match.groupdict()
            return ParsedSocialUrl(
                Platform.TIKTOK,
                username=groups.get("username"),
                post_id=groups["post_id"],
                is_valid=True,
            )

    match = TIKTOK_PROFILE.match(path)
    if match:
        return ParsedSocialUrl(Platform.TIKTOK, username=match.group("username"), is_valid=True)
    return _invalid(Platform.TIKTOK, "Unrecognised TikTok URL")


def _parse_instagram(path: str) -> ParsedSocialUrl:
    match = INSTAGRAM_POST.match(path)
    if match:
        return ParsedSocialUrl(
            Platform.INSTAGRAM,
            username=match.group("username"),
            post_id=match.group("post_id"),
            is_valid=True,
        )
    match = INSTAGRAM_PROFILE.match(path)
    if match and match.group("username").lower() not in INSTAGRAM_RESERVED:
        return ParsedSocialUrl(Platform.INSTAGRAM, username=match.group("username"), is_valid=True)
    return _invalid(Platform.INSTAGRAM, "Unrecognised Instagram URL")


def _parse_youtube(host: str, path: str, query: str) -> ParsedSocialUrl:
    if host == "youtu.be":
        match = YOUTU_BE.match(path)
        if match:
            return ParsedSocialUrl(Platform.YOUTUBE, post_id=match.group("post_id"), is_valid=True)
        return _invalid(Platform.YOUTUBE, "Invalid youtu.be link")

    match = YOUTUBE_SHORTS.match(path)
    if match:
        return ParsedSocialUrl(Platform.YOUTUBE, post_id=match.group("post_id"), is_valid=True)

    if path.rstrip("/") == "/watch":
        video_ids = parse_qs(query).get("v")
        if video_ids and video_ids[0]:
            return ParsedSocialUrl(Platform.YOUTUBE, post_id=video_ids[0], is_valid=True)
        return _invalid(Platform.YOUTUBE, "YouTube watch URL is missing a video id")

    for pattern in (YOUTUBE_HANDLE, YOUTUBE_CHANNEL):
        match = pattern.match(path)
        if match:
            return ParsedSocialUrl(Platform.YOUTUBE, username=match.group("username"), is_valid=True)
    return _invalid(Platform.YOUTUBE, "Unrecognised YouTube URL")


def _parse_twitter(path: str) -> ParsedSocialUrl:
    match = TWITTER_STATUS.match(path)
    if match:
        return ParsedSocialUrl(
            Platform.TWITTER,
            username=match.group("username"),
            post_id=match.group("post_id"),
            is_valid=True,
        )
    match = TWITTER_PROFILE.match(path)
    if match and match.group("username").lower() not in TWITTER_RESERVED:
        return ParsedSocialUrl(Platform.TWITTER, username=match.group("username"), is_valid=True)
    return _invalid(Platform.TWITTER, "Unrecognised Twitter/X URL")


def parse_social_url(url: str) -> ParsedSocialUrl:
    """Identify the platform of ``url`` and extract the handle and post id."""
    if not url or not isinstance(url, str):
        return _invalid(None, "URL is required")

    raw = url.strip()
    if not re.match(r"^https?://", raw, flags=re.IGNORECASE):
        raw = f"https://{raw}"

    parts = urlsplit(raw)
    host = _host(parts.netloc)
    path = parts.path or "/"

    if host == "tiktok.com" or host.endswith(".tiktok.com"):
        return _parse_tiktok(host, path)
    if host in {"instagram.com", "instagr.am"}:
        return _parse_instagram(path)
    if host in {"youtube.com", "youtu.be", "music.youtube.com"}:
        return _parse_youtube(host, path, parts.query)
    if host in {"twitter.com", "x.com"}:
        return _parse_twitter(path)
    return _invalid(None, "Unsupported platform")


def platform_from_url(url: str) -> Optional[str]:
    parsed = parse_social_url(url)
    return parsed.platform


def is_post_url(url: str) -> bool:
    return parse_social_url(url).is_post


def is_profile_url(url: str) -> bool:
    parsed = parse_social_url(url)
    return parsed.is_valid and not parsed.post_id and bool(parsed.username)


def extract_handle(url: str) -> Optional[str]:
    """Return ``@handle`` for URLs that carry one, used to group client reports by page."""
    parsed = parse_social_url(url)
    if parsed.username:
        return f"@{parsed.username}"
    return None
