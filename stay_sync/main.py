# stay_sync/main.py

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stay_sync.config import ALLOWED_ORIGINS, START_SCHEDULER
from stay_sync.logging_config import setup_logging
from stay_sync.middleware import RequestIDMiddleware
from stay_sync.routes.guests import router as guests_router
from stay_sync.routes.health import router as health_router
from stay_sync.routes.metrics import router as metrics_router
from stay_sync.routes.pricing import router as pricing_router
from stay_sync.routes.properties import router as properties_router
from stay_sync.routes.reservations import router as reservations_router
from stay_sync.routes.sync import router as sync_router

# Initialize structured logging
setup_logging(component="api")
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Stay Sync API",
    description="Booking calendar for short-term rentals, mirrored to Google Calendar",
    version="1.0.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS if "*" not in ALLOWED_ORIGINS else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestIDMiddleware)

# Register routers
app.include_router(health_router, tags=["Health"])
app.include_router(metrics_router, tags=["Metrics"])
app.include_router(properties_router, tags=["Properties"])
app.include_router(pricing_router, tags=["Pricing"])
app.include_router(reservations_router, tags=["Reservations"])
app.include_router(guests_router, tags=["Guests"])
app.include_router(sync_router, tags=["Sync"])


@app.on_event("startup")
def startup_event() -> None:
    """Create missing tables and start the background sync."""
    from stay_sync.db.engine import engine, init_db
    from stay_sync.dependencies import get_scheduler

    logger.info("FastAPI application starting up...")

    init_db(engine)

    if START_SCHEDULER:
        get_scheduler().start()
    else:
        logger.info("sync_scheduler_disabled")

    logger.info("FastAPI application initialized")


@app.on_event("shutdown")
def shutdown_event() -> None:
    """Stop the sync timer and wait for the cycle in flight."""
    from stay_sync.dependencies import get_scheduler

    get_scheduler().shutdown()
