"""
Field Activity Dashboard — Entry Point
========================================

Run: python main.py
"""

import os

from dotenv import load_dotenv

load_dotenv()

from scripts.lib.logger import setup_logger

logger = setup_logger("field-dashboard")

PORT = int(os.getenv("DASHBOARD_PORT", "8001"))

if __name__ == "__main__":
    import uvicorn

    logger.info("=" * 60)
    logger.info("  FIELD ACTIVITY DASHBOARD")
    logger.info("=" * 60)
    logger.info(f"  Environment : {os.getenv('ENVIRONMENT', 'development')}")
    logger.info(f"  Mode        : {os.getenv('DASHBOARD_MODE', 'MTD')}")
    logger.info(f"  Server      : http://0.0.0.0:{PORT}")
    logger.info(f"  API Docs    : http://localhost:{PORT}/docs")
    logger.info(f"  Debug       : {os.getenv('DEBUG', 'false')}")
    logger.info("=" * 60)

    uvicorn.run(
        "dashboard.api.main:app",
        host="0.0.0.0",
        port=PORT,
        reload=os.getenv("DEBUG", "false").lower() == "true",
    )
