"""
Field Activity Dashboard — Pydantic Models
============================================

Parsed activity records, filter criteria, and the derived views
(metrics, leaderboard rows, chart series, full snapshot) served by the API.
"""
from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from scripts.lib.parsing import parse_time


# ─── Enums ──────────────────────────────────────────────────

class DashboardMode(str, Enum):
    """Which feed is loaded: for-the-day or month-to-date."""
    FTD = "FTD"
    MTD = "MTD"


class ChartView(str, Enum):
    """Intra-day 30-minute slots or per-day counts."""
    HOURLY = "HOURLY"
    DAILY = "DAILY"


Trend = Literal["Rising", "Falling", "Stable"]


# ─── Records ────────────────────────────────────────────────

class ActivityRecord(BaseModel):
    """One activity event row from the feed."""
    model_config = ConfigDict(frozen=True)

    emp_id: str = ""
    employee: str = ""
    manager: str = ""
    zone: str = ""
    city: str = ""
    cluster_head: str = ""
    pipeline: str = ""
    activity_date: str = ""
    status: str = ""
    hi_po: str = ""
    timestamp_str: str = ""
    activity_type: str = ""
    date: str = ""

    @computed_field
    @property
    def timestamp_minutes(self) -> int:
        """Minutes since midnight, always derived from timestamp_str."""
        return parse_time(self.timestamp_str)

    @property
    def is_won(self) -> bool:
        return "WON" in self.status.upper()

    @property
    def is_hipo_inactive(self) -> bool:
        return "hipo_inactive" in self.hi_po.lower()


# ─── Filters ────────────────────────────────────────────────

class FilterCriteria(BaseModel):
    """Dashboard filters. None or "" leaves a dimension unconstrained."""
    model_config = ConfigDict(frozen=True)

    pipeline: Optional[str] = None
    date: Optional[str] = None
    timestamp: Optional[int] = Field(
        None, ge=0, description="Inclusive ceiling in minutes since midnight",
    )
    zone: Optional[str] = None
    manager: Optional[str] = None
    employee: Optional[str] = None


# ─── Derived Views ──────────────────────────────────────────

class Metrics(BaseModel):
    """Headline KPIs over the filtered records."""
    total_ob: int = 0
    total_rv: int = 0
    total_leads: int = 0
    total_cities: int = 0
    hipo_inactive: int = 0


class AggregatedStats(BaseModel):
    """Leaderboard row for one group (manager, zone, city, ...)."""
    name: str
    rv: int = 0
    ob: int = 0
    sp: int = 0
    hipo: int = 0
    manager: Optional[str] = None
    zone: Optional[str] = None

    @computed_field
    @property
    def total(self) -> int:
        return self.rv + self.ob + self.sp


class ChartData(BaseModel):
    """Bucketed series plus summary statistics for the activity chart."""
    view: ChartView
    labels: List[str] = Field(default_factory=list)
    values: List[int] = Field(default_factory=list)
    total: int = 0
    average: float = 0.0
    peak: int = 0
    peak_labels: List[str] = Field(default_factory=list)
    trend: Trend = "Stable"


class DashboardSnapshot(BaseModel):
    """Everything the dashboard renders for one (records, filters, view) state."""
    mode: DashboardMode
    chart_view: ChartView
    filters: FilterCriteria
    record_count: int
    filtered_count: int
    metrics: Metrics
    leaderboards: Dict[str, List[AggregatedStats]] = Field(default_factory=dict)
    chart: ChartData
    loaded_at: Optional[datetime] = None
    generated_at: datetime


# ─── Requests ───────────────────────────────────────────────

class ModeSwitchRequest(BaseModel):
    mode: DashboardMode


class ChartViewRequest(BaseModel):
    view: ChartView
