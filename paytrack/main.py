import logging
import subprocess
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from paytrack.api.attendance import router as attendance_router
from paytrack.api.holidays import router as holidays_router
from paytrack.api.payroll import router as payroll_router
from paytrack.core.config import settings
from paytrack.working_days import warm_cache_on_startup

logger = logging.getLogger(__name__)

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run Alembic migrations and pre-load working days on startup."""
    logger.info("Running Alembic migrations...")
    try:
        result = subprocess.run(
            ["alembic", "upgrade", "head"],
            capture_output=True,
            text=True,
            cwd=_PROJECT_ROOT,
        )
        if result.returncode != 0:
            logger.error("Alembic migration failed:\n%s", result.stderr)
        else:
            logger.info("Migrations applied successfully:\n%s", result.stdout)
    except Exception as exc:
        logger.exception("Failed to run migrations: %s", exc)

    await warm_cache_on_startup()

    yield

    logger.info("Shutting down PayTrack backend.")


app = FastAPI(
    title="PayTrack API",
    description="Payroll deductions computed from punch-in/punch-out attendance.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(payroll_router, prefix="/api/payroll", tags=["Payroll"])
app.include_router(attendance_router, prefix="/api/attendance", tags=["Attendance"])
app.include_router(holidays_router, prefix="/api/holidays", tags=["Holidays"])


@app.get("/health", tags=["System"])
async def health_check() -> dict:
    return {"status": "ok"}
