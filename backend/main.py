#!/usr/bin/env python3
"""
K3s Suite Backend - Local Kubernetes & Registry Dashboard
Browses a container registry's repositories and tags, and toggles a local
minikube cluster.

IMPORTANT: Registry configuration
---------------------------------
The registry configuration lives only in process memory. It is seeded from
K3S_SUITE_REGISTRY_* environment variables and replaced wholesale by
POST /api/config/registry. Restarting the backend drops any runtime changes.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.settings import AppConfig, setup_logging, HealthCheckFilter
from registry import routes as registry_routes
from registry.config_store import get_registry_config
from system import routes as system_routes

# Configure logging
setup_logging()
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


# ==================== FastAPI Application ====================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle"""
    # Validate configuration early to fail fast on misconfiguration
    AppConfig.validate()

    logger.info("Starting K3s Suite backend...")

    # Reapply health check filter to uvicorn access logger (must be done after uvicorn starts)
    uvicorn_access = logging.getLogger("uvicorn.access")
    uvicorn_access.addFilter(HealthCheckFilter())

    config = get_registry_config()
    if config.is_configured:
        logger.info(f"Registry endpoint: {config.endpoint} (secure={config.secure_transport})")
    else:
        logger.info("No registry configured yet - set one via POST /api/config/registry")

    yield

    logger.info("K3s Suite backend shut down")


app = FastAPI(
    title="K3s Suite API",
    version=VERSION,
    lifespan=lifespan
)

# Dashboard UI runs on its own dev server; origins are pinned only when configured
cors_options = {
    "allow_credentials": True,
    "allow_methods": ["GET", "POST", "OPTIONS"],
    "allow_headers": ["Content-Type"],
}
if AppConfig.CORS_ORIGINS:
    cors_options["allow_origins"] = [o.strip() for o in AppConfig.CORS_ORIGINS.split(',') if o.strip()]
    logger.info(f"CORS restricted to: {cors_options['allow_origins']}")
else:
    cors_options["allow_origin_regex"] = ".*"
    logger.info("CORS open to all origins (K3S_SUITE_CORS_ORIGINS not set)")
app.add_middleware(CORSMiddleware, **cors_options)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Flatten Pydantic errors into {field, message, type} entries"""
    errors = [
        {
            "field": ".".join(str(part) for part in error['loc'] if part != 'body'),
            "message": error['msg'],
            "type": error['type'],
        }
        for error in exc.errors()
    ]
    logger.warning(f"Rejected {request.method} {request.url.path}: {errors}")
    return JSONResponse(status_code=422, content={"detail": "Invalid request data", "errors": errors})


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Last-resort handler: every unexpected failure becomes a structured 500"""
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "details": str(exc)}
    )


# ==================== API Routes ====================

app.include_router(registry_routes.router)  # /api/config/registry, /api/repositories
app.include_router(system_routes.router)  # /api/system/minikube


@app.get("/")
async def root():
    """Backend API root - frontend is served separately"""
    return {"message": "K3s Suite Backend API", "version": VERSION, "docs": "/docs"}


@app.get("/health")
async def health_check():
    """Health check endpoint - no authentication required"""
    return {"status": "healthy", "service": "k3s-suite-backend"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=AppConfig.HOST, port=AppConfig.PORT)
