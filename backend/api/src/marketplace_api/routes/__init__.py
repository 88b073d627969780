"""API routes package.

All routers are registered in main.py with the /api prefix.
"""

from marketplace_api.routes.health import router as health_router
from marketplace_api.routes.reservations import router as reservations_router

__all__ = ["health_router", "reservations_router"]
