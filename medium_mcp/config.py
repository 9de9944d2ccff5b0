"""Configuration: paths, timeouts, browser fingerprint and the domain allowlist."""

from __future__ import annotations

import json
import logging
import math
import os
import pathlib
from dataclasses import dataclass, field
from typing import Optional
from urllib.parse import quote, urlparse

logger = logging.getLogger(__name__)

HOME_ENV = "MEDIUM_MCP_HOME"
DOMAINS_ENV = "MEDIUM_ADDITIONAL_DOMAINS"

MEDIUM_BASE_URL = "https://medium.com"
SIGNIN_URL = f"{MEDIUM_BASE_URL}/m/signin"


@dataclass(frozen=True)
class Timeouts:
    """Playwright timeouts in milliseconds."""

    navigation: int = 15_000
    selector: int = 5_000
    login: int = 60_000
    article_navigation: int = 30_000
    article_selector: int = 10_000


TIMEOUTS = Timeouts()


# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

def config_dir() -> pathlib.Path:
    override = os.environ.get(HOME_ENV)
    if override:
        return pathlib.Path(override).expanduser()
    return pathlib.Path.home() / ".medium-mcp"


def settings_path() -> pathlib.Path:
    return config_dir() / "config.json"


def storage_state_path() -> pathlib.Path:
    return config_dir() / "auth.json"


def ensure_private_dir(path: pathlib.Path) -> None:
    """Create ``path`` (and parents) and restrict it to the owner."""
    path.mkdir(parents=True, exist_ok=True, mode=0o700)
    # mkdir's mode is filtered by the umask and ignored for existing dirs
    path.chmod(0o700)


# ---------------------------------------------------------------------------
# URLs
# ---------------------------------------------------------------------------

def author_url(username: str) -> str:
    return f"{MEDIUM_BASE_URL}/@{username}"


def author_feed_url(username: str) -> str:
    return f"{MEDIUM_BASE_URL}/feed/@{username}"


def search_url(query: str) -> str:
    return f"{MEDIUM_BASE_URL}/search?q={quote(query, safe='')}"


# ---------------------------------------------------------------------------
# Browser fingerprint
# ---------------------------------------------------------------------------

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
    "AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chrome/131.0.0.0 Safari/537.36"
)

EXTRA_HTTP_HEADERS = {
    "Accept": (
        "text/html,application/xhtml+xml,application/xml;q=0.9,"
        "image/avif,image/webp,image/apng,*/*;q=0.8"
    ),
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate, br",
    "sec-ch-ua": '"Google Chrome";v="131", "Chromium";v="131", "Not_A Brand";v="24"',
    "sec-ch-ua-mobile": "?0",
    "sec-ch-ua-platform": '"macOS"',
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Sec-Fetch-User": "?1",
    "Upgrade-Insecure-Requests": "1",
}

CONTEXT_OPTIONS = {
    "user_agent": USER_AGENT,
    "viewport": {"width": 1920, "height": 1080},
    "device_scale_factor": 2,
    "has_touch": False,
    "locale": "en-US",
    "timezone_id": "America/New_York",
    "permissions": ["geolocation"],
    "extra_http_headers": EXTRA_HTTP_HEADERS,
}

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-blink-features=AutomationControlled",
    "--disable-infobars",
]


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------

def max_show_more_clicks(limit: int, per_click: int = 10, extra: int = 2, cap: int = 20) -> int:
    """Upper bound on "Show more" clicks when loading ``limit`` search results."""
    return min(math.ceil(limit / per_click) + extra, cap)


# ---------------------------------------------------------------------------
# Settings file
# ---------------------------------------------------------------------------

@dataclass
class Settings:
    additional_domains: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"additionalDomains": list(self.additional_domains)}


def load_settings() -> Settings:
    path = settings_path()
    if not path.exists():
        return Settings()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.warning("Failed to load settings from %s, using defaults: %s", path, e)
        return Settings()

    if not isinstance(data, dict):
        logger.warning("Settings file %s is not a JSON object, using defaults", path)
        return Settings()

    raw = data.get("additionalDomains")
    if not isinstance(raw, list):
        return Settings()
    return Settings(additional_domains=[d for d in raw if isinstance(d, str)])


def save_settings(settings: Settings) -> None:
    path = settings_path()
    ensure_private_dir(path.parent)
    path.write_text(json.dumps(settings.to_dict(), indent=2), encoding="utf-8")
    path.chmod(0o600)
    logger.info("Settings saved to %s", path)


# ---------------------------------------------------------------------------
# Domain allowlist
# ---------------------------------------------------------------------------

DEFAULT_MEDIUM_DOMAINS: tuple[str, ...] = (
    "medium.com",
    "towardsdatascience.com",
    "betterprogramming.pub",
    "levelup.gitconnected.com",
    "uxdesign.cc",
    "eand.co",
    "betterhumans.pub",
    "writingcooperative.com",
)

_domain_cache: Optional[list[str]] = None


def env_domains() -> list[str]:
    raw = os.environ.get(DOMAINS_ENV, "")
    return [d.strip().lower() for d in raw.split(",") if d.strip()]


def get_valid_domains() -> list[str]:
    """Default + custom + environment domains, deduplicated, cached."""
    global _domain_cache
    if _domain_cache is None:
        merged = [*DEFAULT_MEDIUM_DOMAINS, *load_settings().additional_domains, *env_domains()]
        _domain_cache = list(dict.fromkeys(merged))
    return list(_domain_cache)


def invalidate_domain_cache() -> None:
    global _domain_cache
    _domain_cache = None


def is_valid_medium_url(url: str) -> bool:
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        return False

    hostname = parsed.hostname.lower()
    if hostname.endswith(".medium.com"):
        return True
    return any(
        hostname == domain or hostname.endswith(f".{domain}")
        for domain in get_valid_domains()
    )
