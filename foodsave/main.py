"""
FastAPI app entrypoint.

Meal expiry check: HTTP trigger (/meal-expiry-check) plus an optional in-process hourly schedule.
"""
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from apscheduler.schedulers.background import BackgroundScheduler
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Load .env from the project root before any settings are read
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

from foodsave.api.routes import expiry
from foodsave.config import get_settings
from foodsave.core.constants import MEAL_EXPIRY_JOB_ID
from foodsave.scheduler.meal_expiry_job import run_meal_expiry_check_job

logger = logging.getLogger(__name__)

_scheduler = BackgroundScheduler()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Fails startup (pydantic ValidationError) when STORE_URL / STORE_SERVICE_KEY are missing
    settings = get_settings()
    if settings.scheduler_enabled:
        _scheduler.add_job(
            run_meal_expiry_check_job,
            "interval",
            minutes=settings.expiry_check_interval_minutes,
            id=MEAL_EXPIRY_JOB_ID,
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        _scheduler.start()
        app.state.scheduler = _scheduler
        logger.info("Meal expiry check scheduled every %s min", settings.expiry_check_interval_minutes)
    yield
    if _scheduler.running:
        _scheduler.shutdown(wait=False)


app = FastAPI(title="FoodSave Meal Expiry", version="0.1.0", lifespan=lifespan)

# CORS: any origin by default (cron/edge callers); CORS_ORIGINS (comma-separated) narrows it
_cors_origins = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()] or ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)

app.include_router(expiry.router, tags=["expiry"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
