"""FastAPI routes for CareVoice Gateway."""

from carevoice_gateway.api.auth import Session
from carevoice_gateway.api.health import router as health_router
from carevoice_gateway.api.routes import router

__all__ = ["Session", "health_router", "router"]
