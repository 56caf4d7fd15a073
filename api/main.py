"""FastAPI application for telesto."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from telesto import __version__
from telesto.config import settings
from telesto.database.connection import init_db, DatabaseConnection
from api.models import HealthResponse
from api.routers import grids, samples


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings.ensure_directories()
    await init_db()
    yield
    # Shutdown
    await DatabaseConnection.close()


app = FastAPI(
    title="telesto API",
    description="API for layered geological grid generation and combination",
    version=__version__,
    lifespan=lifespan,
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(grids.router, prefix="/api")
app.include_router(samples.router, prefix="/api")


@app.get("/api/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="ok",
        version=__version__,
        database="connected",
    )


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "telesto",
        "version": __version__,
        "docs": "/docs",
        "api": "/api",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
