import os
import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from app.controllers.v1.auth.auth import router as auth_router
from app.controllers.v1.health.health import router as health_router
from app.controllers.v1.project_management.project import router as project_router
from app.database.store import close_store, init_store
from app.utils.error_handlers import register_exception_handlers
from app.utils.logger_utils import logger
from config import APP_ENV, IS_PRODUCTION, SERVER_CONFIG, UPLOAD_CONFIG, validate_config


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""

    # Startup
    logger.info("🚀 Starting up the application...")
    validate_config()
    await init_store()

    yield

    # Shutdown
    logger.info("🛑 Shutting down the application...")
    await close_store()

# Create FastAPI application
app = FastAPI(title=SERVER_CONFIG["APP_NAME"], version=SERVER_CONFIG["VERSION"], lifespan=lifespan)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=SERVER_CONFIG["CORS_ORIGINS"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

if not IS_PRODUCTION:
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(f"{request.method} {request.url.path} {response.status_code} {elapsed_ms:.1f}ms")
        return response

register_exception_handlers(app)

# Uploaded documents
os.makedirs(UPLOAD_CONFIG["UPLOAD_DIR"], exist_ok=True)
app.mount(UPLOAD_CONFIG["UPLOAD_URL_PREFIX"], StaticFiles(directory=UPLOAD_CONFIG["UPLOAD_DIR"]), name="uploads")

# Routers
app.include_router(health_router, tags=["Health"])
app.include_router(auth_router, tags=["Auth"])
app.include_router(project_router, tags=["Project"])


if __name__ == "__main__":
    logger.info(f"Environment: {APP_ENV}")
    uvicorn.run("main:app", host="0.0.0.0", port=SERVER_CONFIG["PORT"], reload=not IS_PRODUCTION)
