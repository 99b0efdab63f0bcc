"""
Field Activity Dashboard — Filters Router
===========================================
Read and change the dashboard filters.

Endpoints:
  GET    /api/filters           - Current filter criteria
  PATCH  /api/filters           - Set or clear (null) any subset of criteria
  DELETE /api/filters           - Clear every criterion
  GET    /api/filters/options   - Dropdown values for each filter
"""
from __future__ import annotations

from fastapi import APIRouter, Depends

from dashboard.api.session import DashboardSession, get_session
from models.activity_models import FilterCriteria
from scripts.lib.logger import setup_logger

logger = setup_logger("filters_router")

router = APIRouter(prefix="/api/filters", tags=["filters"])


@router.get("")
async def current_filters(session: DashboardSession = Depends(get_session)):
    return session.filters


@router.patch("")
async def update_filters(
    body: FilterCriteria,
    session: DashboardSession = Depends(get_session),
):
    """
    Update only the fields present in the body.

    {"zone": "North"} sets the zone; {"zone": null} clears it; omitted
    fields keep their current value.
    """
    changes = body.model_dump(exclude_unset=True)
    filters = session.update_filters(**changes)
    logger.info("Filters changed: %s", changes)
    return filters


@router.delete("")
async def clear_filters(session: DashboardSession = Depends(get_session)):
    return session.clear_filters()


@router.get("/options")
async def filter_options(session: DashboardSession = Depends(get_session)):
    """Distinct pipelines, dates, zones, managers, employees, and time presets."""
    return session.filter_options()
