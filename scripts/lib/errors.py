"""
Custom error classes for the Field Activity Dashboard.
Every error carries a short code and a details dict for the API layer.

Hierarchy:
    DashboardError
    ├── FeedError
    │   ├── FeedFetchError
    │   └── EmptyFeedError
    └── ConfigError

Row-level problems (short lines, unparseable times) are never raised;
the parser tolerates them. Only feed-level failures cross into the API.
"""


class DashboardError(Exception):
    """Base exception for all dashboard errors."""

    def __init__(self, message: str, code: str = "UNKNOWN", details: dict = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{code}] {message}")


# --- Feed Errors ---

class FeedError(DashboardError):
    """Base class for failures loading the activity feed."""
    pass


class FeedFetchError(FeedError):
    """Network failure or non-success response from the feed endpoint."""

    def __init__(self, message: str, url: str = None, status_code: int = None):
        self.url = url
        self.status_code = status_code
        super().__init__(
            message, code="FEED_FETCH_FAILED",
            details={"url": url, "status_code": status_code},
        )


class EmptyFeedError(FeedError):
    """The feed was fetched but yielded no valid records."""

    def __init__(self, mode: str, line_count: int = 0):
        super().__init__(
            f"No valid data found in {mode} feed ({line_count} lines read)",
            code="FEED_EMPTY",
            details={"mode": mode, "line_count": line_count},
        )


# --- Config Errors ---

class ConfigError(DashboardError):
    """Missing or invalid configuration."""

    def __init__(self, message: str, setting: str = None):
        super().__init__(
            message, code="CONFIG_ERROR", details={"setting": setting},
        )
