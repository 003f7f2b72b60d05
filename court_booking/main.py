"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from court_booking.api import availability, bookings, facilities
from court_booking.core.config import settings
from court_booking.core.database import init_db
from court_booking.services.scheduler import hold_expiry_scheduler

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Court Booking service")
    logger.info(f"Debug mode: {settings.DEBUG}")

    await init_db()

    # Release abandoned payment holds in the background
    if settings.HOLD_SWEEP_ENABLED:
        await hold_expiry_scheduler.start()

    yield

    # Shutdown
    logger.info("Shutting down Court Booking service")
    await hold_expiry_scheduler.stop()


# Create FastAPI app
app = FastAPI(
    title="Court Booking",
    description="Court availability and slot booking for sports facilities",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(facilities.sports_router)
app.include_router(facilities.router)
app.include_router(availability.router)
app.include_router(bookings.router)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "scheduler_running": hold_expiry_scheduler.running,
    }
