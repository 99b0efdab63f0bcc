"""
Field Activity Dashboard — Feed Router
========================================
Load state of the activity feed and the triggers that reload it.

Endpoints:
  GET  /api/feed/status    - Mode, record count, last load time and error
  POST /api/feed/refresh   - Refetch the current mode's feed
  PUT  /api/feed/mode      - Switch between FTD and MTD (resets filters)

The fetch runs in a worker thread, so other requests keep being served
while a slow feed downloads. A failed load keeps the previously loaded
records: 502 for fetch errors, 422 when the feed parsed to zero records,
503 when no URL is configured.
"""
from __future__ import annotations

from typing import Awaitable

from fastapi import APIRouter, Depends, HTTPException

from dashboard.api.session import DashboardSession, get_session
from models.activity_models import ModeSwitchRequest
from scripts.lib.errors import ConfigError, EmptyFeedError, FeedFetchError
from scripts.lib.logger import setup_logger

logger = setup_logger("feed_router")

router = APIRouter(prefix="/api/feed", tags=["feed"])


async def _load(load: Awaitable[int], session: DashboardSession) -> dict:
    try:
        count = await load
    except EmptyFeedError as e:
        raise HTTPException(status_code=422, detail=e.message)
    except FeedFetchError as e:
        raise HTTPException(status_code=502, detail=e.message)
    except ConfigError as e:
        logger.error("Feed not configured: %s", e)
        raise HTTPException(status_code=503, detail=e.message)
    return {"status": "loaded", "loaded": count, **session.status()}


@router.get("/status")
async def feed_status(session: DashboardSession = Depends(get_session)):
    return {**session.status(), "feed": session.feed.get_status()}


@router.post("/refresh")
async def refresh_feed(session: DashboardSession = Depends(get_session)):
    """Refetch and reparse the feed for the current mode."""
    return await _load(session.refresh_async(), session)


@router.put("/mode")
async def switch_mode(
    body: ModeSwitchRequest,
    session: DashboardSession = Depends(get_session),
):
    """Switch feed mode. Filters are reset even if the reload fails."""
    return await _load(session.switch_mode_async(body.mode), session)
