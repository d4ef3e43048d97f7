import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from paytrack.core.config import settings
from paytrack.core.errors import NotFoundError, StoreUnavailableError, ValidationError
from paytrack.core.logging_config import configure_logging
from paytrack.db.base import Base
from paytrack.db.session import engine

# Import models and route modules once
from paytrack.models import client as client_model, payment as payment_model  # noqa: F401
from paytrack.api.routes import analytics, clients, payments


configure_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)

app = FastAPI(title="PayTrack")

# ===============================
# CORS CONFIGURATION
# ===============================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ===============================
# CREATE DATABASE TABLES
# ===============================
if settings.CREATE_TABLES:
    Base.metadata.create_all(bind=engine)


# ===============================
# ERROR HANDLERS
# ===============================
@app.exception_handler(ValidationError)
def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": exc.message, "field": exc.field},
    )


@app.exception_handler(NotFoundError)
def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": f"{exc.entity} not found"},
    )


@app.exception_handler(StoreUnavailableError)
def store_unavailable_handler(request: Request, exc: StoreUnavailableError):
    logger.error("Request to %s failed: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Database not available. Check DATABASE_URL."},
    )


# ===============================
# INCLUDE ROUTERS
# ===============================
app.include_router(clients.router)
app.include_router(payments.router)
app.include_router(analytics.router)


# ===============================
# ROOT ENDPOINT
# ===============================
@app.get("/")
def root():
    return {"status": "Backend running successfully"}
