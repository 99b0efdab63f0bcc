"""
Field Activity Dashboard — API Server
=======================================

Serves KPIs, leaderboards and chart series computed in memory from the
published FTD / MTD activity CSV feeds.

Route groups:
  /api/health              - Health check
  /api/feed/*              - Feed status, refresh, FTD/MTD mode switch
  /api/filters/*           - Current filters, updates, dropdown options
  /api/activities          - Filtered activity records
  /api/metrics/*           - KPIs, leaderboards, chart, full snapshot
"""

import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

load_dotenv()

from dashboard.api.session import DashboardSession
from scripts.lib.errors import DashboardError
from scripts.lib.logger import setup_logger

logger = setup_logger("dashboard_api")

VERSION = "1.0.0"
REFRESH_ON_STARTUP = os.getenv("FEED_REFRESH_ON_STARTUP", "true").lower() == "true"


# ─── Lifespan ─────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app):
    """Create the dashboard session and load the default feed."""
    logger.info("Starting Field Activity Dashboard...")

    if getattr(app.state, "session", None) is None:
        app.state.session = DashboardSession()
    session = app.state.session

    if REFRESH_ON_STARTUP:
        try:
            await session.refresh_async()
        except DashboardError as e:
            # Serve empty until a manual refresh succeeds
            logger.warning("Initial %s load failed: %s", session.mode.value, e)

    logger.info(
        "Field Activity Dashboard ready (%s, %d records)",
        session.mode.value, len(session.records),
    )
    yield
    logger.info("Shutting down Field Activity Dashboard...")


# ─── App Setup ────────────────────────────────────────────────

cors_origins = os.getenv(
    "CORS_ORIGINS", "http://localhost:3000,http://localhost:8001"
).split(",")

app = FastAPI(
    title="Field Activity Dashboard",
    version=VERSION,
    description="Field sales activity KPIs, leaderboards and trends from published CSV feeds",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ─── Include Routers ──────────────────────────────────────────

from dashboard.api.routers.feed import router as feed_router
from dashboard.api.routers.filters import router as filters_router
from dashboard.api.routers.activities import router as activities_router
from dashboard.api.routers.metrics import router as metrics_router

app.include_router(feed_router)
app.include_router(filters_router)
app.include_router(activities_router)
app.include_router(metrics_router)


# ─── Health ───────────────────────────────────────────────────

@app.get("/api/health", tags=["system"])
async def health():
    """Health check with load state."""
    session = getattr(app.state, "session", None)
    status = session.status() if session else {}
    return {
        "status": "healthy" if status.get("record_count") else "degraded",
        "service": "Field Activity Dashboard",
        "version": VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "mode": status.get("mode"),
        "record_count": status.get("record_count", 0),
        "data_version": status.get("version", 0),
        "last_error": status.get("last_error"),
    }
