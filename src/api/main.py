"""FastAPI application main module.

Defines the application instance, wires logging, error handling and the
recommendation router, and exposes the service-level endpoints.
"""

from typing import Any, Dict

from fastapi import FastAPI

from src import __version__
from src.api.config import settings
from src.api.exceptions import register_exception_handlers
from src.api.logging_config import RequestLoggingMiddleware, setup_logging
from src.api.metrics import metrics_service
from src.api.routes import recommend

setup_logging(settings.log_level)

# Create FastAPI application instance
app = FastAPI(
    title="Event-Weighted Recommender API",
    description="Ranks products by the weighted sum of a user's recent interaction events",
    version=__version__,
)

app.add_middleware(RequestLoggingMiddleware)
register_exception_handlers(app)
app.include_router(recommend.router)


@app.get("/ping")
def ping() -> Dict[str, str]:
    """Health check endpoint.

    Example:
        >>> response = client.get("/ping")
        >>> assert response.json() == {"status": "ok"}
    """
    return {"status": "ok"}


@app.get("/status")
def get_status() -> Dict[str, Any]:
    """Report the active configuration."""
    return {
        "version": __version__,
        "event_store": "csv" if settings.events_csv else "memory",
        "lookback_days": settings.lookback_days,
        "default_limit": settings.default_limit,
        "max_limit": settings.max_limit,
        "event_weights": settings.weight_table().as_dict(),
    }


@app.get("/metrics")
def get_metrics() -> Dict[str, Any]:
    return metrics_service.get_metrics()


if __name__ == "__main__":
    import sys
    from pathlib import Path

    import uvicorn

    # Add project root to Python path for imports
    project_root = Path(__file__).parent.parent.parent
    sys.path.insert(0, str(project_root))

    uvicorn.run(
        "src.api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
    )
