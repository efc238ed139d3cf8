import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from facility_booking.config import ALLOWED_ORIGINS, SWEEP_ENABLED, SWEEP_INTERVAL_SECONDS
from facility_booking.logging_config import setup_logging
from facility_booking.middleware import RequestIDMiddleware
from facility_booking.routes.bookings import router as bookings_router
from facility_booking.routes.health import router as health_router
from facility_booking.routes.metrics import router as metrics_router
from facility_booking.routes.payments import router as payments_router
from facility_booking.routes.rooms import router as rooms_router
from facility_booking.routes.users import router as users_router

# Initialize structured logging
setup_logging()
logger = structlog.get_logger(__name__)

app = FastAPI(
    title="Facility Booking API",
    description="Room and class reservations with holds, payments and loyalty points",
    version="1.0.0",
)

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
app.include_router(bookings_router, prefix="/v1", tags=["Bookings"])
app.include_router(rooms_router, prefix="/v1", tags=["Rooms"])
app.include_router(payments_router, prefix="/v1", tags=["Payments"])
app.include_router(users_router, prefix="/v1", tags=["Points"])


@app.on_event("startup")
def startup_event() -> None:
    """Start the hold-expiry sweep when enabled."""
    from facility_booking.jobs.sweep import start_sweep_scheduler

    logger.info("FastAPI application starting up...")

    if SWEEP_ENABLED:
        start_sweep_scheduler(SWEEP_INTERVAL_SECONDS)
    else:
        logger.info("sweep_scheduler_disabled")

    logger.info("FastAPI application initialized")


@app.on_event("shutdown")
def shutdown_event() -> None:
    from facility_booking.jobs.sweep import stop_sweep_scheduler

    stop_sweep_scheduler()
    logger.info("FastAPI application stopped")
