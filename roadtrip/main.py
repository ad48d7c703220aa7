"""
FastAPI Application Entry Point.
"""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import router
from .config import settings
from .services.trip_planner import get_trip_planner


logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Fails fast with MissingCredential before any request is served
    get_trip_planner()
    yield


# Create FastAPI app
app = FastAPI(
    title="Road Trip Planner",
    description="Route, map preview, destination weather and music for a road trip",
    version="1.0.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routes
app.include_router(router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "credentials_configured": not settings.missing_credentials()
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "roadtrip.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
