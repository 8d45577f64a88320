"""
FastAPI application entrypoint.

Lifespan:
  • On startup: verify DB connectivity.
  • On shutdown: let pending token-usage stamps finish, dispose the engine.

Routers:
  • /openclaw — webhook ingestion + recorded event feed
  • /tokens   — API token management (session-authenticated)
  • /viewer   — caller's tenant and scoping mode
  • /health   — shallow liveness probe
"""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from mission_control.auth.dependencies import usage_recorder
from mission_control.auth.errors import MissionControlError
from mission_control.core.config import settings
from mission_control.core.database import engine, ping_database
from mission_control.routers.openclaw import router as openclaw_router
from mission_control.routers.tokens import router as tokens_router
from mission_control.routers.viewer import router as viewer_router

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    """Startup / shutdown lifecycle."""

    # Startup — verify DB is reachable
    try:
        await ping_database(engine)
        logger.info("Database connection verified ✓")
    except Exception:
        logger.warning(
            "Could not reach the database on startup. "
            "The app will start, but requests will fail until the DB is available."
        )

    logger.info(
        "Webhook policy: auth_required=%s rate_limit=%s/min",
        settings.MISSION_CONTROL_AUTH_REQUIRED,
        settings.MISSION_CONTROL_RATE_LIMIT_PER_MINUTE,
    )

    yield  # ← application runs here

    # Shutdown — flush best-effort usage stamps, then the pool
    await usage_recorder.wait_idle()
    await engine.dispose()
    logger.info("Database engine disposed ✓")


# ── App ─────────────────────────────────────────────────────
app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    description=(
        "Mission Control — multi-tenant coordination dashboard for AI agents. "
        "Webhook gateway: token auth, tenant attribution, per-tenant rate limits."
    ),
    lifespan=lifespan,
)


# ── Errors ──────────────────────────────────────────────────
@app.exception_handler(MissionControlError)
async def mission_control_error_handler(
    _request: Request, exc: MissionControlError
) -> JSONResponse:
    """Render domain errors as `{ok: false, error}` with their mapped status."""
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "error": str(exc)},
    )


# Mount routers
app.include_router(openclaw_router, prefix="/openclaw")
app.include_router(tokens_router, prefix="/tokens")
app.include_router(viewer_router, prefix="/viewer")


# ── Health check ────────────────────────────────────────────
@app.get(
    "/health",
    tags=["System"],
    summary="Liveness probe",
)
async def health_check() -> dict[str, str]:
    """Shallow health check — confirms the process is alive."""
    return {"status": "healthy"}
