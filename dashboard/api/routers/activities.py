"""
Field Activity Dashboard — Activities Router
==============================================
Filtered activity records.

Endpoints:
  GET /api/activities   - Records matching the current filters, paginated
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query

from dashboard.api.session import DashboardSession, get_session
from scripts.lib.logger import setup_logger

logger = setup_logger("activities_router")

router = APIRouter(prefix="/api/activities", tags=["activities"])


@router.get("")
async def list_activities(
    type: Optional[str] = Query(None, description="Filter by activity type: OB, RV, SP"),
    won_only: bool = Query(False, description="Only records with a WON status"),
    limit: int = Query(50, ge=1, le=1000, description="Max results"),
    offset: int = Query(0, ge=0, description="Pagination offset"),
    session: DashboardSession = Depends(get_session),
):
    """List filtered records in feed order."""
    records = session.filtered_records()

    if type:
        records = [r for r in records if r.activity_type == type.upper()]
    if won_only:
        records = [r for r in records if r.is_won]

    page = records[offset:offset + limit]
    return {
        "results": page,
        "count": len(page),
        "total": len(records),
        "offset": offset,
        "limit": limit,
    }
