from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import get_settings, parse_comma_separated_origins
from app.core.error_handlers import register_exception_handlers
from app.core.telemetry import setup_telemetry
from app.database.database import create_db_and_tables
from app.routers import booking, notification, property, spam
from app.utils.logger import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Perform application startup tasks before the FastAPI app begins serving requests.

    Runs logging setup, creates the database and tables, and initializes telemetry using the provided FastAPI application. This function is intended to be used as an async lifespan context manager and yields control after startup actions complete.
    """
    setup_logging()
    create_db_and_tables()
    setup_telemetry(app)
    yield


app = FastAPI(
    title="Rental Marketplace API",
    description="Property rental backend with spam detection and content moderation",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        str(origin)
        for origin in parse_comma_separated_origins(get_settings().BACKEND_CORS_ORIGINS)
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.get("/health", include_in_schema=False)
def health_check():
    """
    Provide the application's liveness state for health checks.

    Returns:
        dict: A mapping with key "status" and value "ok" indicating the service is healthy.
    """
    return {"status": "ok"}


app.include_router(spam.router)
app.include_router(property.router)
app.include_router(booking.router)
app.include_router(notification.router)
