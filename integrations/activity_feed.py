"""
Activity Feed Integration
==========================

Fetches the published CSV export of the field-activity sheet.
One URL per dashboard mode:
- FTD: activity for the day
- MTD: month-to-date activity

Setup:
1. Publish each sheet tab to the web as CSV (File -> Share -> Publish to web)
2. Set FTD_FEED_URL / MTD_FEED_URL in .env to point at your own sheets

Timeouts and connection errors are retried with exponential backoff
(FEED_MAX_ATTEMPTS, default 3). Non-success responses are not retried.
"""

import os
import time
from typing import Any, Dict, Optional

import requests
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from models.activity_models import DashboardMode
from scripts.lib.errors import ConfigError, FeedFetchError
from scripts.lib.logger import setup_logger

logger = setup_logger("activity_feed")

DEFAULT_FEED_URLS = {
    DashboardMode.FTD: (
        "https://docs.google.com/spreadsheets/d/e/2PACX-1vTq0Rt35r6tqCpDaW6Lt9DRg_8ITAESpCX"
        "fJ17lt-_zttMiY6f4s70c0daX2jVgb2vwE62eb_MWb3ES/pub?output=csv"
    ),
    DashboardMode.MTD: (
        "https://docs.google.com/spreadsheets/d/e/2PACX-1vSyhksQK6NJNYpqvsfudqavFAB9qhTT4DqF"
        "OfFyIGjzB47zR_CVFhS0ZhbevYOsQ9iUAnw7h9yfHvLE/pub?output=csv"
    ),
}

FEED_TIMEOUT_SECONDS = int(os.getenv("FEED_TIMEOUT_SECONDS", "30"))
FEED_MAX_ATTEMPTS = int(os.getenv("FEED_MAX_ATTEMPTS", "3"))

RETRYABLE_ERRORS = (
    requests.exceptions.Timeout,
    requests.exceptions.ConnectionError,
)


class ActivityFeedClient:
    """
    Published-CSV feed reader.

    Usage:
        feed = ActivityFeedClient()
        csv_text = feed.fetch_csv(DashboardMode.MTD)
    """

    def __init__(
        self,
        urls: Optional[Dict[DashboardMode, str]] = None,
        timeout: Optional[int] = None,
    ):
        self.urls = urls or {
            DashboardMode.FTD: os.getenv("FTD_FEED_URL", DEFAULT_FEED_URLS[DashboardMode.FTD]),
            DashboardMode.MTD: os.getenv("MTD_FEED_URL", DEFAULT_FEED_URLS[DashboardMode.MTD]),
        }
        self.timeout = timeout or FEED_TIMEOUT_SECONDS
        self.session = requests.Session()
        self.session.headers.update({"Accept": "text/csv, text/plain;q=0.9, */*;q=0.1"})

    def url_for(self, mode: DashboardMode) -> str:
        """Feed URL for a mode; raises ConfigError when none is set."""
        mode = DashboardMode(mode)
        url = self.urls.get(mode)
        if not url:
            raise ConfigError(
                f"No feed URL configured for {mode.value}",
                setting=f"{mode.value}_FEED_URL",
            )
        return url

    @retry(
        stop=stop_after_attempt(FEED_MAX_ATTEMPTS),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        retry=retry_if_exception_type(RETRYABLE_ERRORS),
        reraise=True,
    )
    def _get(self, url: str) -> requests.Response:
        logger.debug("GET %s", url)
        return self.session.get(url, timeout=self.timeout)

    def fetch_csv(self, mode: DashboardMode) -> str:
        """Download the raw CSV text for a mode.

        Raises:
            FeedFetchError: network failure after retries, or non-2xx response.
            ConfigError: no URL configured for the mode.
        """
        mode = DashboardMode(mode)
        url = self.url_for(mode)

        start = time.time()
        try:
            response = self._get(url)
        except requests.RequestException as e:
            logger.error("%s feed request failed: %s - %s", mode.value, url, e)
            raise FeedFetchError(
                f"Failed to load {mode.value} feed: {e}", url=url,
            ) from e
        duration = time.time() - start

        if not response.ok:
            logger.warning(
                "GET %s — %d in %.2fs", url, response.status_code, duration,
            )
            raise FeedFetchError(
                f"{mode.value} feed returned HTTP {response.status_code}",
                url=url, status_code=response.status_code,
            )

        logger.info("GET %s — %d in %.2fs", url, response.status_code, duration)
        return response.content.decode("utf-8-sig", errors="replace")

    def get_status(self) -> Dict[str, Any]:
        return {
            "name": "Activity Feed",
            "configured": {mode.value: bool(url) for mode, url in self.urls.items()},
            "timeout_seconds": self.timeout,
        }
