"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from stablesync.api import sync_router
from stablesync.config import get_settings
from stablesync.database import init_db
from stablesync.logging_config import setup_logging

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    setup_logging()
    await init_db()
    yield
    # Shutdown
    pass


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Horse record synchronization service",
    lifespan=lifespan,
)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


# Register API routers
app.include_router(sync_router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("stablesync.main:app", host="0.0.0.0", port=8000, reload=True)
