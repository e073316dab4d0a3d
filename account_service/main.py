"""
Main entry point for the Account Service.

This script initializes the FastAPI application, sets up logging and the
database, registers the error handler, and includes the API routers.
"""

import logging
import os

from apscheduler.schedulers.background import BackgroundScheduler
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .config import settings
from .database import engine
from .exceptions import AccountServiceError, InvalidCredential, Unauthenticated
from .routes import auth
from .scheduler import expire_premium_memberships
from . import models

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

# Create all database tables defined in models.py if they don't exist
models.Base.metadata.create_all(bind=engine)

# Initialize the FastAPI application
app = FastAPI(title=settings.PROJECT_NAME)

scheduler = BackgroundScheduler()


@app.on_event("startup")
def start_scheduler():
    if not settings.ENABLE_SCHEDULER:
        return
    # Downgrade expired premium memberships every day at 2:00 AM
    scheduler.add_job(expire_premium_memberships, 'cron', hour=2, minute=0)
    scheduler.start()
    logger.info("Scheduler started...")


@app.on_event("shutdown")
def shutdown_scheduler():
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Scheduler shut down...")


@app.exception_handler(AccountServiceError)
async def account_service_error_handler(request: Request, exc: AccountServiceError):
    """
    Renders every service error as a JSON message with its own status code.
    """
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, (Unauthenticated, InvalidCredential)) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=headers,
    )


# All routes defined in routes/auth.py will be available under the /api prefix
app.include_router(auth.router, prefix=settings.API_PREFIX)

# Uploaded avatars are served back from the paths stored on the user
os.makedirs(os.path.join(settings.UPLOAD_DIR, "avatars"), exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


@app.get("/")
def read_root():
    """Root endpoint providing a simple health check."""
    return {"message": f"{settings.PROJECT_NAME} is running"}
