"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from drawcheck import __version__
from drawcheck.config import settings
from drawcheck.utils.logging import setup_logging, get_logger
from drawcheck.api.routes import health, checks, rules, extraction

# Setup logging before anything else
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info(
        "Starting application",
        environment=settings.environment,
        rules_dir=str(settings.rules_path),
        dev_mode=settings.dev_mode,
    )
    yield
    logger.info("Shutting down application")


# Create FastAPI application
app = FastAPI(
    title="Drawing Rule Checker API",
    description="API for checking architectural drawings against building-code rule sets",
    version=__version__,
    lifespan=lifespan,
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if not settings.is_production else [],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(
    checks.router,
    prefix=f"/api/{settings.api_version}",
    tags=["Checks"]
)
app.include_router(
    rules.router,
    prefix=f"/api/{settings.api_version}",
    tags=["Rules"]
)
app.include_router(
    extraction.router,
    prefix=f"/api/{settings.api_version}",
    tags=["Extraction"]
)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "Drawing Rule Checker API",
        "version": settings.api_version,
        "environment": settings.environment,
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "drawcheck.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=not settings.is_production,
        log_level=settings.log_level.lower(),
    )
