"""
Runtime settings loaded from the environment (and an optional .env file).
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

DEFAULT_TIMEOUT_S = 10.0
DEFAULT_GET_TIMEOUT_S = 3.0
DEFAULT_FANOUT = 10
DEFAULT_USER_AGENT = "Mozilla/5.0 (compatible; LinkCrawler/1.0)"


@dataclass(slots=True)
class CrawlerSettings:
    """Options shared by the fetcher, the controller and the CLI."""
    timeout_s: float = DEFAULT_TIMEOUT_S
    user_agent: str = DEFAULT_USER_AGENT
    fanout_limit: int = DEFAULT_FANOUT
    max_workers: Optional[int] = None
    log_level: Optional[str] = None
    # True when the timeout came from the environment or a CLI flag
    timeout_configured: bool = False


def _env_number(name: str, cast, default):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError:
        raise ValueError(f"Invalid value for {name}: {raw!r}") from None


def load_settings() -> CrawlerSettings:
    """Build ``CrawlerSettings`` from LINKCRAWLER_* environment variables."""
    load_dotenv()

    fanout = _env_number("LINKCRAWLER_FANOUT", int, DEFAULT_FANOUT)
    if fanout < 1:
        raise ValueError(f"LINKCRAWLER_FANOUT must be >= 1, got {fanout}")

    return CrawlerSettings(
        timeout_s=_env_number("LINKCRAWLER_TIMEOUT", float, DEFAULT_TIMEOUT_S),
        user_agent=os.getenv("LINKCRAWLER_USER_AGENT") or DEFAULT_USER_AGENT,
        fanout_limit=fanout,
        max_workers=_env_number("LINKCRAWLER_MAX_WORKERS", int, None),
        log_level=os.getenv("LINKCRAWLER_LOG_LEVEL") or None,
        timeout_configured=bool((os.getenv("LINKCRAWLER_TIMEOUT") or "").strip()),
    )
