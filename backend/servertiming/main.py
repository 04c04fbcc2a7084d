# backend/servertiming/main.py

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import ORJSONResponse

from .api import api_example, api_health
from .core.config import settings
from .core.observability import setup_logging
from .middleware.server_timing import HEADER_NAME, ServerTimingMiddleware

# Configure logging before creating any loggers
setup_logging()
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    """Build the API with Server-Timing emission wired in."""
    application = FastAPI(title="Server-Timing API", default_response_class=ORJSONResponse)

    # Let cross-origin fetch() callers read the timing header
    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
        expose_headers=[HEADER_NAME],
    )
    if settings.SERVER_TIMING_ENABLED:
        application.add_middleware(ServerTimingMiddleware)
    logger.info(
        "server_timing enabled=%s prefix=%s total_metric=%s",
        settings.SERVER_TIMING_ENABLED,
        settings.SERVER_TIMING_PREFIX.value,
        settings.SERVER_TIMING_TOTAL_METRIC or "-",
    )

    application.include_router(api_health.router, tags=["health"])
    application.include_router(api_example.router, tags=["server-timing"])
    return application


app = create_app()
