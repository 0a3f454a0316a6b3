"""Exception handlers for the recommendation API.

Engine errors already carry an HTTP status code; the handler here renders
them with a consistent JSON body:

    {"error": "StoreUnavailable", "message": "...", "details": {...}}
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from src.api.metrics import metrics_service
from src.recommender.exceptions import RecommenderError, StoreUnavailable

# Configure module logger
logger = logging.getLogger(__name__)


async def recommender_error_handler(request: Request, exc: RecommenderError) -> JSONResponse:
    """Render a RecommenderError as a JSON error response."""
    if isinstance(exc, StoreUnavailable):
        metrics_service.record_store_failure()

    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        "Recommendation request failed",
        extra={
            "path": str(request.url.path),
            "error_type": type(exc).__name__,
            "status_code": exc.status_code,
            "error": exc.message,
        },
    )

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": type(exc).__name__,
            "message": exc.message,
            "details": exc.details,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RecommenderError, recommender_error_handler)
