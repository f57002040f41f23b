"""
Pulse Storefront - Main FastAPI Application

Single entry point for the storefront API.
"""
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.api_client import close_api_client
from storefront.errors import ERROR_INTERNAL
from storefront.logging import get_logger
from storefront.routers import router as storefront_router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler"""
    # Startup
    yield
    # Shutdown
    await close_api_client()


app = FastAPI(
    title="Pulse Storefront",
    description="Storefront API for the Pulse mobile-device shop",
    version="1.0.0",
    lifespan=lifespan,
)

# Frontend origins; listing "*" turns off credentialed CORS (and the pulse_sid cookie)
DEFAULT_CORS_ORIGINS = "http://localhost:3000"
_cors_origins = [
    o.strip() for o in os.environ.get("CORS_ORIGINS", DEFAULT_CORS_ORIGINS).split(",") if o.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials="*" not in _cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(storefront_router)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Log unexpected errors and answer with a generic message."""
    logger.error("Unhandled error on %s %s: %s", request.method, request.url.path, exc, exc_info=True)
    return JSONResponse(status_code=500, content={"detail": ERROR_INTERNAL})


# ==================== HEALTH CHECK ====================

@app.get("/api/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "ok", "service": "pulse-storefront"}
