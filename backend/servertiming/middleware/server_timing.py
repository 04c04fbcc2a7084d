"""Middleware that gives every request its own ServerTimer and emits the header."""

import logging
import time
from datetime import timedelta
from typing import Optional, Union

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from ..core.config import settings
from ..utils.server_timing import PrefixMode, ServerTimer

logger = logging.getLogger(__name__)

HEADER_NAME = "Server-Timing"


class ServerTimingMiddleware(BaseHTTPMiddleware):
    """Attach ``request.state.server_timer`` and serialize it onto the response.

    Handlers that already set ``Server-Timing`` themselves keep their value.
    """

    def __init__(
        self,
        app: ASGIApp,
        enabled: Optional[bool] = None,
        prefix: Optional[Union[PrefixMode, str]] = None,
        total_metric: Optional[str] = None,
        total_description: Optional[str] = None,
    ) -> None:
        super().__init__(app)
        self.enabled = settings.SERVER_TIMING_ENABLED if enabled is None else enabled
        self.prefix = settings.SERVER_TIMING_PREFIX if prefix is None else prefix
        self.total_metric = (
            settings.SERVER_TIMING_TOTAL_METRIC if total_metric is None else total_metric
        )
        self.total_description = (
            settings.SERVER_TIMING_TOTAL_DESC if total_description is None else total_description
        )
        # Fail at startup on a bad mode rather than on the first request
        ServerTimer().enable_prefix(self.prefix)

    async def dispatch(self, request: Request, call_next):
        if not self.enabled:
            return await call_next(request)

        timer = ServerTimer().enable_prefix(self.prefix)
        request.state.server_timer = timer
        t0 = time.perf_counter()

        response = await call_next(request)

        if self.total_metric:
            timer.add(
                self.total_metric,
                self.total_description,
                timedelta(seconds=time.perf_counter() - t0),
            )
        hdr = timer.header()
        if hdr:
            response.headers.setdefault(HEADER_NAME, hdr)
            logger.debug("server_timing.emit path=%s value=%s", request.url.path, hdr)
        return response
