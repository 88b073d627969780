"""FastAPI application for the marketplace reservation API.

Serves staff-facing manual reservations. Runs on AWS Lambda behind API
Gateway (via Mangum) or locally with uvicorn.

Configuration:
    CORS_ALLOW_ORIGINS  comma-separated origins (default: local frontend)
    LOG_LEVEL           root log level (default: INFO)
"""

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from mangum import Mangum

from marketplace.utils.logging import configure_logging, get_logger
from marketplace_api.exceptions import register_exception_handlers
from marketplace_api.middleware.correlation import CorrelationIdMiddleware
from marketplace_api.routes import health_router, reservations_router

configure_logging()
logger = get_logger(__name__)

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"


def cors_origins() -> list[str]:
    raw = os.getenv("CORS_ALLOW_ORIGINS", DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


app = FastAPI(
    title="Marketplace Reservations API",
    description="REST API for staff-created manual reservations",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
# Added last so it wraps CORS and sees every request first
app.add_middleware(CorrelationIdMiddleware)

register_exception_handlers(app)

# CloudFront forwards /api/* to API Gateway
app.include_router(health_router, prefix="/api")
app.include_router(reservations_router, prefix="/api")

handler = Mangum(app, lifespan="off")


def run_server(host: str = "0.0.0.0", port: int = 8080, reload: bool = True) -> None:
    """Run the API locally with uvicorn.

    Args:
        host: Bind address
        port: Listen port
        reload: Restart on source changes under backend/*/src
    """
    import uvicorn

    if not reload:
        uvicorn.run(app, host=host, port=port)
        return

    # Reload mode needs an import string
    uvicorn.run(
        "marketplace_api.main:app",
        host=host,
        port=port,
        reload=True,
        reload_dirs=["backend/api/src", "backend/shared/src"],
    )


if __name__ == "__main__":
    run_server()
