from datetime import timedelta
from typing import Optional
import time

from fastapi import APIRouter, Depends, Query, Request

from ..utils.errors import error_response
from ..utils.server_timing import ServerTimer
from .dependencies import get_server_timer

router = APIRouter(tags=["server-timing"])


@router.get("/example")
def server_timing_example(
    request: Request,
    prefix: Optional[str] = Query(None, description="none, index or description"),
    timer: ServerTimer = Depends(get_server_timer),
):
    """Record a cache miss, a cached read and a timed block for this request.

    The metrics come back in the ``Server-Timing`` header and, for clients
    that cannot read it, in the body.
    """
    if prefix is not None:
        try:
            timer.enable_prefix(prefix)
        except ValueError:
            raise error_response("Invalid prefix mode", {"prefix": "none, index or description"})

    timer.add_flag("missedCache", "Cache missed")
    timer.add("cache", "Cache Read", timedelta(microseconds=23200))
    with timer.measure("db", "Database query"):
        time.sleep(0.001)

    return {
        "path": request.url.path,
        "entries": [
            {
                "name": e.name,
                "description": e.description,
                "dur_ms": round(e.duration.total_seconds() * 1000.0, 2),
            }
            for e in timer.entries()
        ],
    }
