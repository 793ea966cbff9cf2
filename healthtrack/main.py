"""
Main entry point for the HealthTrack Reminder Service.

This script initializes the FastAPI application, sets up the database,
includes the API routers and runs the reminder cron jobs in the background.
"""

import logging

import uvicorn
from apscheduler.schedulers.background import BackgroundScheduler
from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from . import models
from .config import settings
from .database import engine
from .routes import doctors, health_logs, medicines, users
from .scheduler import register_reminder_jobs

load_dotenv()

# Configure logging
logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create all database tables defined in models.py if they don't exist
models.Base.metadata.create_all(bind=engine)

app = FastAPI(title=settings.PROJECT_NAME)

scheduler = BackgroundScheduler()


@app.on_event("startup")
def start_scheduler():
    if not settings.SCHEDULER_ENABLED:
        logger.info("Reminder scheduler disabled via SCHEDULER_ENABLED")
        return
    register_reminder_jobs(scheduler)
    scheduler.start()
    logger.info("Scheduler started...")


@app.on_event("shutdown")
def shutdown_scheduler():
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler shut down...")


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """
    Handles all FastAPI `HTTPException`s to return a standardized
    JSON error message.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


app.include_router(medicines.router, prefix=settings.API_PREFIX)
app.include_router(doctors.router, prefix=settings.API_PREFIX)
app.include_router(health_logs.router, prefix=settings.API_PREFIX)
app.include_router(users.router, prefix=settings.API_PREFIX)


@app.get("/", tags=["Root"])
def read_root():
    """Root endpoint for basic health check."""
    return {"message": f"{settings.PROJECT_NAME} is running"}


def run():
    """Runs the service with uvicorn (the `healthtrack` console script)."""
    uvicorn.run("healthtrack.main:app", host="0.0.0.0", port=8000)
