from fastapi import Request

from ..utils.server_timing import ServerTimer


def get_server_timer(request: Request) -> ServerTimer:
    """Return the request's timer.

    Without ``ServerTimingMiddleware`` installed (or with it disabled) a
    detached timer is returned so handlers can record unconditionally.
    """
    timer = getattr(request.state, "server_timer", None)
    if timer is None:
        timer = ServerTimer()
        request.state.server_timer = timer
    return timer
