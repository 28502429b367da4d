"""HTTP routers."""

from researchly.api.routers.health import router as health_router

__all__ = ["health_router"]
