"""
Field Activity Analyzer
========================
Derives every dashboard view from a list of ActivityRecord objects:
filtering, headline metrics, leaderboards and chart series.

All functions are pure. build_dashboard() filters once and feeds the same
list to the metrics, the five leaderboards and the chart, so the views
always agree with each other.

Counting rules shared by every view:
  - a record is "won" when its status contains WON
  - OB / RV / SP counts only include won records of that type
  - hi-po inactive counts ignore the won status

Exports:
    filter_records, calculate_metrics, aggregate_by_field, build_chart_data,
    unique_filter_values, filter_leaderboard, leaderboard_options,
    chart_filter_options, build_dashboard, GROUP_FIELDS, TIMESTAMP_PRESETS
"""

from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from operator import attrgetter
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from dateutil.parser import parse as dateutil_parse

from models.activity_models import (
    ActivityRecord,
    AggregatedStats,
    ChartData,
    ChartView,
    DashboardMode,
    DashboardSnapshot,
    FilterCriteria,
    Metrics,
)
from scripts.lib.logger import setup_logger
from scripts.lib.parsing import format_minutes

logger = setup_logger("activity_analyzer")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
SLOT_MINUTES = 30
DAY_START_MINUTES = 9 * 60 + 30  # first intra-day slot, 9:30 AM

TREND_RISING_RATIO = 1.15
TREND_FALLING_RATIO = 0.85

# "Until 12:00 PM" ... "Until 8:00 PM"
TIMESTAMP_PRESETS = [720, 840, 960, 1080, 1200]

ACTIVITY_TYPES = ("OB", "RV", "SP")

# Leaderboard dimensions, in the order the dashboard shows them
GROUP_FIELDS: Dict[str, Callable[[ActivityRecord], str]] = {
    name: attrgetter(name)
    for name in ("manager", "zone", "city", "employee", "cluster_head")
}

GroupKey = Union[str, Callable[[ActivityRecord], Any]]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _safe_div(numerator: float, denominator: float, default: float = 0.0) -> float:
    """Zero-safe division."""
    if denominator == 0:
        return default
    return numerator / denominator


def _distinct(values: Iterable[Optional[str]]) -> List[str]:
    """Sorted unique non-empty values."""
    return sorted({v for v in values if v})


def _slot(minutes: int) -> int:
    """Floor minutes since midnight to the start of its 30-minute slot."""
    return (minutes // SLOT_MINUTES) * SLOT_MINUTES


def _date_sort_key(label: str) -> Tuple[int, datetime]:
    """Chronological key for a raw date label; unparseable dates sort last.

    Timezone tokens ("IST", "+05:30") are ignored so every label compares
    as a naive date.
    """
    try:
        parsed = dateutil_parse(label, ignoretz=True)
    except (ValueError, OverflowError):
        return 1, datetime.min
    return 0, parsed


def _resolve_key(key: GroupKey) -> Callable[[ActivityRecord], Any]:
    if callable(key):
        return key
    if key in GROUP_FIELDS:
        return GROUP_FIELDS[key]
    if key in ActivityRecord.model_fields or key == "timestamp_minutes":
        return attrgetter(key)
    raise ValueError(f"Unknown grouping field: {key!r}")


# ---------------------------------------------------------------------------
# Filtering
# ---------------------------------------------------------------------------

def _matches(record: ActivityRecord, criteria: FilterCriteria) -> bool:
    if criteria.pipeline and record.pipeline != criteria.pipeline:
        return False
    if criteria.date and record.date != criteria.date:
        return False
    # Cumulative: everything up to and including the ceiling
    if criteria.timestamp is not None and record.timestamp_minutes > criteria.timestamp:
        return False
    if criteria.zone and record.zone != criteria.zone:
        return False
    if criteria.manager and record.manager != criteria.manager:
        return False
    if criteria.employee and record.employee != criteria.employee:
        return False
    return True


def filter_records(
    records: Iterable[ActivityRecord],
    criteria: Optional[FilterCriteria] = None,
) -> List[ActivityRecord]:
    """Records satisfying every set criterion, in their original order."""
    if criteria is None:
        return list(records)
    return [r for r in records if _matches(r, criteria)]


# ---------------------------------------------------------------------------
# Metrics & leaderboards
# ---------------------------------------------------------------------------

def calculate_metrics(records: Iterable[ActivityRecord]) -> Metrics:
    """Headline KPIs in a single pass."""
    won_by_type: Counter = Counter()
    cities: set = set()
    hipo_inactive = 0

    for record in records:
        if record.is_won:
            if record.activity_type in ACTIVITY_TYPES:
                won_by_type[record.activity_type] += 1
            if record.city:
                cities.add(record.city.lower())

        if record.is_hipo_inactive:
            hipo_inactive += 1

    return Metrics(
        total_ob=won_by_type["OB"],
        total_rv=won_by_type["RV"],
        total_leads=sum(won_by_type[t] for t in ACTIVITY_TYPES),
        total_cities=len(cities),
        hipo_inactive=hipo_inactive,
    )


def aggregate_by_field(
    records: Iterable[ActivityRecord],
    key: GroupKey,
) -> List[AggregatedStats]:
    """Per-group counts ranked by won RV, highest first.

    `key` is a projection (record -> value) or a field name. Records whose
    value is empty are left out. The first record of each group supplies
    the manager/zone shown next to it; ties keep first-appearance order.
    """
    project = _resolve_key(key)
    groups: Dict[str, AggregatedStats] = {}

    for record in records:
        value = project(record)
        name = "" if value is None else str(value)
        if not name:
            continue

        stats = groups.get(name)
        if stats is None:
            stats = AggregatedStats(name=name, manager=record.manager, zone=record.zone)
            groups[name] = stats

        if record.is_won:
            if record.activity_type == "RV":
                stats.rv += 1
            elif record.activity_type == "OB":
                stats.ob += 1
            elif record.activity_type == "SP":
                stats.sp += 1

        if record.is_hipo_inactive:
            stats.hipo += 1

    return sorted(groups.values(), key=lambda s: s.rv, reverse=True)


def filter_leaderboard(
    stats: Sequence[AggregatedStats],
    zone: Optional[str] = None,
    manager: Optional[str] = None,
) -> List[AggregatedStats]:
    """Narrow leaderboard rows by their zone/manager metadata, keeping rank order."""
    return [
        s for s in stats
        if (not zone or s.zone == zone) and (not manager or s.manager == manager)
    ]


def leaderboard_options(
    stats: Sequence[AggregatedStats],
    zone: Optional[str] = None,
) -> Dict[str, List[str]]:
    """Zones on the leaderboard, and the managers within the selected zone."""
    return {
        "zones": _distinct(s.zone for s in stats),
        "managers": _distinct(s.manager for s in stats if not zone or s.zone == zone),
    }


# ---------------------------------------------------------------------------
# Chart series
# ---------------------------------------------------------------------------

def _hourly_series(records: Iterable[ActivityRecord]) -> Tuple[List[str], List[int]]:
    """Won RV counts per 30-minute slot from 9:30 AM to the latest activity."""
    times = [
        r.timestamp_minutes for r in records
        if r.is_won and r.activity_type == "RV"
    ]
    # 0 means midnight or unparseable; neither belongs on the chart
    times = [t for t in times if t > 0]

    latest = max(times, default=DAY_START_MINUTES)
    end = max(DAY_START_MINUTES, _slot(latest))

    slots: Dict[int, int] = {
        minute: 0 for minute in range(DAY_START_MINUTES, end + 1, SLOT_MINUTES)
    }
    for minutes in times:
        if minutes < DAY_START_MINUTES:
            continue
        slot = _slot(minutes)
        if slot in slots:
            slots[slot] += 1

    return [format_minutes(m) for m in slots], list(slots.values())


def _daily_series(records: Iterable[ActivityRecord]) -> Tuple[List[str], List[int]]:
    """Won activity counts per date present in the data, oldest first."""
    per_day: Counter = Counter()
    for record in records:
        if record.is_won and record.date:
            per_day[record.date] += 1

    labels = sorted(per_day, key=_date_sort_key)
    return labels, [per_day[label] for label in labels]


def _trend(values: Sequence[int]) -> str:
    """Compare the mean of the second half of the series against the first."""
    mid = len(values) // 2
    first, second = values[:mid], values[mid:]
    first_avg = sum(first) / (len(first) or 1)
    second_avg = sum(second) / (len(second) or 1)

    if second_avg > first_avg * TREND_RISING_RATIO:
        return "Rising"
    if second_avg < first_avg * TREND_FALLING_RATIO:
        return "Falling"
    return "Stable"


def build_chart_data(
    records: Iterable[ActivityRecord],
    view: Union[ChartView, str] = ChartView.DAILY,
) -> ChartData:
    """Bucketed chart series with total, average, peak and trend."""
    view = ChartView(view)
    if view == ChartView.HOURLY:
        labels, values = _hourly_series(records)
    else:
        labels, values = _daily_series(records)

    total = sum(values)
    peak = max(values, default=0)

    return ChartData(
        view=view,
        labels=labels,
        values=values,
        total=total,
        average=_safe_div(total, len(values)),
        peak=peak,
        peak_labels=[l for l, v in zip(labels, values) if peak > 0 and v == peak],
        trend=_trend(values),
    )


def chart_filter_options(
    records: Iterable[ActivityRecord],
    manager: Optional[str] = None,
) -> Dict[str, List[str]]:
    """Managers in the data, and the employees under the selected manager."""
    records = list(records)
    return {
        "managers": _distinct(r.manager for r in records),
        "employees": _distinct(
            r.employee for r in records if not manager or r.manager == manager
        ),
    }


# ---------------------------------------------------------------------------
# Filter dropdowns
# ---------------------------------------------------------------------------

def unique_filter_values(records: Iterable[ActivityRecord]) -> Dict[str, Any]:
    """Dropdown values for every dashboard filter.

    Pass the unfiltered records so a selection can always be changed or
    cleared.
    """
    records = list(records)
    return {
        "pipelines": _distinct(r.pipeline for r in records),
        "dates": _distinct(r.date for r in records),
        "zones": _distinct(r.zone for r in records),
        "managers": _distinct(r.manager for r in records),
        "employees": _distinct(r.employee for r in records),
        "timestamps": [
            {"value": minutes, "label": f"Until {format_minutes(minutes)}"}
            for minutes in TIMESTAMP_PRESETS
        ],
    }


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

def build_dashboard(
    records: Sequence[ActivityRecord],
    criteria: Optional[FilterCriteria] = None,
    chart_view: Union[ChartView, str] = ChartView.DAILY,
    mode: Union[DashboardMode, str] = DashboardMode.MTD,
    loaded_at: Optional[datetime] = None,
) -> DashboardSnapshot:
    """Filter once, then derive metrics, all leaderboards and the chart."""
    criteria = criteria or FilterCriteria()
    filtered = filter_records(records, criteria)

    leaderboards = {
        dimension: aggregate_by_field(filtered, project)
        for dimension, project in GROUP_FIELDS.items()
    }

    snapshot = DashboardSnapshot(
        mode=DashboardMode(mode),
        chart_view=ChartView(chart_view),
        filters=criteria,
        record_count=len(records),
        filtered_count=len(filtered),
        metrics=calculate_metrics(filtered),
        leaderboards=leaderboards,
        chart=build_chart_data(filtered, chart_view),
        loaded_at=loaded_at,
        generated_at=datetime.now(timezone.utc),
    )
    logger.debug(
        "Dashboard built: %d/%d records after filters, chart=%s",
        snapshot.filtered_count, snapshot.record_count, snapshot.chart_view.value,
    )
    return snapshot
