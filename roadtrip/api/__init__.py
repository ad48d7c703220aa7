"""HTTP API for the road trip planner."""
from .routes import router

__all__ = ["router"]
