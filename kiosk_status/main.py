"""
Main FastAPI application for the Kiosk Status Service
"""
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging

from kiosk_status.config import settings
from kiosk_status.errors import KioskStatusError
from kiosk_status.api import (
    system,
    kiosks,
    admin
)

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.APP_DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager"""
    logger.info(f"Starting Kiosk Status Service ({settings.APP_ENV})...")
    yield
    logger.info("Shutting down Kiosk Status Service...")


app = FastAPI(
    title="Kiosk Status Service",
    description="Crowd-sourced ATM status with trust-weighted consensus",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(KioskStatusError)
async def kiosk_status_error_handler(request: Request, exc: KioskStatusError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    # Missing or malformed input is an invalid argument, not a 422
    fields = set()
    messages = []
    for error in exc.errors():
        name = ".".join(part for part in error["loc"][1:] if isinstance(part, str))
        if name:
            fields.add(name)
        else:
            messages.append(error["msg"])

    if fields:
        message = f"Invalid or missing fields: {', '.join(sorted(fields))}"
    elif messages:
        message = f"Invalid request body: {messages[0]}"
    else:
        message = "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


# Include routers
app.include_router(system.router, tags=["System"])
app.include_router(kiosks.router, prefix="/api", tags=["Kiosks"])
app.include_router(admin.router, prefix="/api/admin", tags=["Admin"])


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": "Kiosk Status",
        "version": "1.0.0",
        "status": "running"
    }
