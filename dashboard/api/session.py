"""
Field Activity Dashboard — Session State
==========================================
Holds the loaded records, mode, filters and chart view for the running
dashboard and serves memoised views of them.

Refresh is pull-based. A refresh replaces the record list wholesale, and
only after the feed was fetched and parsed into at least one record, so a
failed refresh leaves the previous data in place and records the error
in `last_error`.

Usage:
    session = DashboardSession(feed=ActivityFeedClient())
    session.refresh()
    session.update_filters(zone="North", timestamp=840)
    snapshot = session.snapshot()
"""
from __future__ import annotations

import os
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple

from fastapi import Request
from fastapi.concurrency import run_in_threadpool

from integrations.activity_feed import ActivityFeedClient
from models.activity_models import (
    ActivityRecord,
    AggregatedStats,
    ChartData,
    ChartView,
    DashboardMode,
    DashboardSnapshot,
    FilterCriteria,
)
from scripts.activity_analyzer import (
    GROUP_FIELDS,
    build_chart_data,
    build_dashboard,
    filter_leaderboard,
    filter_records,
    unique_filter_values,
)
from scripts.activity_parser import process_csv
from scripts.lib.errors import DashboardError, EmptyFeedError
from scripts.lib.logger import setup_logger

logger = setup_logger("dashboard_session")


class DashboardSession:
    """In-memory dashboard state: one record set, one filter set, one chart view."""

    def __init__(
        self,
        feed: Optional[ActivityFeedClient] = None,
        mode: Optional[DashboardMode] = None,
        chart_view: Optional[ChartView] = None,
    ):
        self.feed = feed or ActivityFeedClient()
        self.mode = DashboardMode(mode or os.getenv("DASHBOARD_MODE", "MTD"))
        self.chart_view = ChartView(chart_view or os.getenv("CHART_VIEW", "DAILY"))
        self.filters = FilterCriteria()
        self.records: List[ActivityRecord] = []
        self.loaded_mode: Optional[DashboardMode] = None
        self.loaded_at: Optional[datetime] = None
        self.last_error: Optional[str] = None
        self.version = 0
        self._cache: Dict[str, Tuple[Any, Any]] = {}

    # ─── Feed ──────────────────────────────────────────────

    def _apply(self, mode: DashboardMode, csv_text: str) -> int:
        """Parse fetched text and swap it in as the current record set."""
        if mode != self.mode:
            logger.info(
                "Discarding %s load: mode switched to %s", mode.value, self.mode.value,
            )
            return len(self.records)

        records = process_csv(csv_text)
        if not records:
            raise EmptyFeedError(mode.value, line_count=len(csv_text.splitlines()))

        self.records = records
        self.loaded_mode = mode
        self.loaded_at = datetime.now(timezone.utc)
        self.last_error = None
        self.version += 1
        logger.info(
            "%s data loaded: %d records (version %d)",
            mode.value, len(records), self.version,
        )
        return len(records)

    def _failed(self, mode: DashboardMode, error: DashboardError):
        self.last_error = error.message
        logger.warning(
            "%s refresh failed, keeping %d existing records: %s",
            mode.value, len(self.records), error,
        )

    def refresh(self) -> int:
        """Fetch and parse the current mode's feed; returns the record count.

        Raises:
            FeedFetchError, EmptyFeedError, ConfigError: existing records are kept.
        """
        mode = self.mode
        try:
            return self._apply(mode, self.feed.fetch_csv(mode))
        except DashboardError as e:
            self._failed(mode, e)
            raise

    async def refresh_async(self) -> int:
        """refresh() for the event loop: the fetch runs in a worker thread."""
        mode = self.mode
        try:
            csv_text = await run_in_threadpool(self.feed.fetch_csv, mode)
            return self._apply(mode, csv_text)
        except DashboardError as e:
            self._failed(mode, e)
            raise

    def _select_mode(self, mode: DashboardMode):
        self.mode = DashboardMode(mode)
        self.filters = FilterCriteria()
        logger.info("Switched to %s mode, filters reset", self.mode.value)

    def switch_mode(self, mode: DashboardMode) -> int:
        """Select the other feed: filters are reset, then the feed is refetched."""
        self._select_mode(mode)
        return self.refresh()

    async def switch_mode_async(self, mode: DashboardMode) -> int:
        self._select_mode(mode)
        return await self.refresh_async()

    # ─── Filters & view ────────────────────────────────────

    def update_filters(self, **changes: Any) -> FilterCriteria:
        """Set or clear (with None) any subset of the six filter criteria."""
        unknown = set(changes) - set(FilterCriteria.model_fields)
        if unknown:
            raise ValueError(f"Unknown filter(s): {', '.join(sorted(unknown))}")
        self.filters = FilterCriteria(**{**self.filters.model_dump(), **changes})
        logger.debug("Filters updated: %s", self.filters.model_dump(exclude_none=True))
        return self.filters

    def clear_filters(self) -> FilterCriteria:
        self.filters = FilterCriteria()
        return self.filters

    def set_chart_view(self, view: ChartView) -> ChartView:
        self.chart_view = ChartView(view)
        return self.chart_view

    # ─── Derived views (memoised on inputs) ────────────────

    def _memo(self, name: str, key: Any, build: Callable[[], Any]) -> Any:
        cached = self._cache.get(name)
        if cached is not None and cached[0] == key:
            return cached[1]
        value = build()
        self._cache[name] = (key, value)
        return value

    def filtered_records(self) -> List[ActivityRecord]:
        return self._memo(
            "filtered",
            (self.version, self.filters),
            lambda: filter_records(self.records, self.filters),
        )

    def snapshot(self) -> DashboardSnapshot:
        return self._memo(
            "snapshot",
            (self.version, self.mode, self.filters, self.chart_view),
            lambda: build_dashboard(
                self.records,
                self.filters,
                chart_view=self.chart_view,
                mode=self.mode,
                loaded_at=self.loaded_at,
            ),
        )

    def filter_options(self) -> Dict[str, Any]:
        return self._memo(
            "options", self.version, lambda: unique_filter_values(self.records),
        )

    def leaderboard(
        self,
        dimension: str,
        zone: Optional[str] = None,
        manager: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[AggregatedStats]:
        """Ranked rows for one dimension, optionally narrowed and truncated."""
        if dimension not in GROUP_FIELDS:
            raise KeyError(dimension)
        rows = filter_leaderboard(self.snapshot().leaderboards[dimension], zone, manager)
        return rows[:limit] if limit else rows

    def chart(
        self,
        view: Optional[ChartView] = None,
        manager: Optional[str] = None,
        employee: Optional[str] = None,
    ) -> ChartData:
        """Chart for the filtered records, with an optional chart-only scope."""
        records = self.filtered_records()
        if manager or employee:
            records = filter_records(
                records, FilterCriteria(manager=manager, employee=employee),
            )
        return build_chart_data(records, view or self.chart_view)

    def status(self) -> Dict[str, Any]:
        return {
            "mode": self.mode.value,
            "loaded_mode": self.loaded_mode.value if self.loaded_mode else None,
            "chart_view": self.chart_view.value,
            "record_count": len(self.records),
            "version": self.version,
            "loaded_at": self.loaded_at.isoformat() if self.loaded_at else None,
            "last_error": self.last_error,
        }


def get_session(request: Request) -> DashboardSession:
    """FastAPI dependency returning the app-wide session."""
    return request.app.state.session
