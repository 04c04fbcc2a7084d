"""Collect named timings during a request and render a ``Server-Timing`` header."""

from .utils.server_timing import PrefixMode, ServerTimer, TimingEntry

__all__ = ["PrefixMode", "ServerTimer", "TimingEntry"]
