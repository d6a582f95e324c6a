"""
Media Upload API - FastAPI Backend
Main application entry point with health check, upload routing and
pipeline error rendering.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings, validate_security_settings
from database import engine, Base
import models  # noqa: F401
from routers import health, uploads
from services.errors import UploadPipelineError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    # Startup
    print("🚀 Starting Media Upload API...")
    validate_security_settings()
    if settings.AUTO_CREATE_DB_SCHEMA:
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            print("🗄️ Database schema verified.")
        except Exception as e:
            print(f"⚠️ Database bootstrap skipped: {e}")
    yield
    # Shutdown
    await engine.dispose()
    print("👋 Shutting down API...")


app = FastAPI(
    title="Media Upload API",
    description="Upload images and videos to Cloudinary and keep video metadata",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(UploadPipelineError)
async def upload_pipeline_error_handler(request: Request, exc: UploadPipelineError):
    logger.warning(
        "upload_failed status=%s path=%s error=%s",
        exc.status_code,
        request.url.path,
        exc.message,
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(uploads.router, tags=["Uploads"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Media Upload API",
        "version": "0.1.0",
        "status": "running"
    }


def run() -> None:
    """Serve the API with uvicorn on the configured host and port."""
    uvicorn.run(app, host=settings.API_HOST, port=settings.API_PORT)


if __name__ == "__main__":
    run()
