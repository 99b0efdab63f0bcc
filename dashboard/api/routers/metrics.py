"""
Field Activity Dashboard — Metrics Router
===========================================
KPIs, leaderboards and chart series derived from the filtered records.

Endpoints:
  GET /api/metrics/kpis                              - Headline metrics
  GET /api/metrics/leaderboards/{dimension}          - Ranked stats for a dimension
  GET /api/metrics/leaderboards/{dimension}/options  - Zone/manager options for a leaderboard
  GET /api/metrics/chart                             - Chart series (HOURLY or DAILY)
  GET /api/metrics/chart/options                     - Chart-local manager/employee options
  PUT /api/metrics/chart/view                        - Set the default chart view
  GET /api/metrics/snapshot                          - Full dashboard snapshot
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from dashboard.api.session import DashboardSession, get_session
from models.activity_models import ChartView, ChartViewRequest
from scripts.activity_analyzer import (
    GROUP_FIELDS,
    chart_filter_options,
    leaderboard_options,
)
from scripts.lib.logger import setup_logger

logger = setup_logger("metrics_router")

router = APIRouter(prefix="/api/metrics", tags=["metrics"])


def _check_dimension(dimension: str):
    if dimension not in GROUP_FIELDS:
        raise HTTPException(
            status_code=404,
            detail=f"Unknown leaderboard '{dimension}'. "
                   f"Expected one of: {', '.join(GROUP_FIELDS)}",
        )


@router.get("/kpis")
async def kpis(session: DashboardSession = Depends(get_session)):
    """Won OB / RV totals, leads, distinct cities and hi-po inactive count."""
    snapshot = session.snapshot()
    return {
        "metrics": snapshot.metrics,
        "filtered_count": snapshot.filtered_count,
        "record_count": snapshot.record_count,
    }


@router.get("/leaderboards/{dimension}")
async def leaderboard(
    dimension: str,
    limit: Optional[int] = Query(None, ge=1, le=500, description="Top N rows"),
    zone: Optional[str] = Query(None, description="Only groups whose zone matches"),
    manager: Optional[str] = Query(None, description="Only groups whose manager matches"),
    session: DashboardSession = Depends(get_session),
):
    """Groups ranked by won RV count, highest first."""
    _check_dimension(dimension)
    rows = session.leaderboard(dimension, zone=zone, manager=manager, limit=limit)
    return {"dimension": dimension, "results": rows, "count": len(rows)}


@router.get("/leaderboards/{dimension}/options")
async def leaderboard_filter_options(
    dimension: str,
    zone: Optional[str] = Query(None, description="Restrict managers to this zone"),
    session: DashboardSession = Depends(get_session),
):
    """Zones on the leaderboard, and managers within the selected zone."""
    _check_dimension(dimension)
    return leaderboard_options(session.leaderboard(dimension), zone=zone)


@router.get("/chart")
async def chart(
    view: Optional[ChartView] = Query(None, description="HOURLY or DAILY (default: session view)"),
    manager: Optional[str] = Query(None, description="Chart-only manager scope"),
    employee: Optional[str] = Query(None, description="Chart-only employee scope"),
    session: DashboardSession = Depends(get_session),
):
    """Bucketed activity counts with total, average, peak and trend."""
    return session.chart(view=view, manager=manager, employee=employee)


@router.get("/chart/options")
async def chart_options(
    manager: Optional[str] = Query(None, description="Restrict employees to this manager"),
    session: DashboardSession = Depends(get_session),
):
    """Managers in the filtered data, and employees under the selected manager."""
    return chart_filter_options(session.filtered_records(), manager=manager)


@router.put("/chart/view")
async def set_chart_view(
    body: ChartViewRequest,
    session: DashboardSession = Depends(get_session),
):
    """Switch the default chart between HOURLY and DAILY."""
    view = session.set_chart_view(body.view)
    logger.info("Chart view set to %s", view.value)
    return {"chart_view": view.value}


@router.get("/snapshot")
async def snapshot(session: DashboardSession = Depends(get_session)):
    """Metrics, all five leaderboards and the chart for the current filters."""
    return session.snapshot()
