from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import timedelta
from enum import Enum
from typing import Iterator, List, Optional, Union

logger = logging.getLogger(__name__)


class PrefixMode(str, Enum):
    """How entry positions are encoded so clients cannot reorder them.

    - ``NONE``: names are emitted as-is.
    - ``INDEX``: names become ``<zero-padded 0-based index>_<name>``.
    - ``DESCRIPTION``: descriptions become ``<1-based index>: <description>``.
    """

    NONE = "none"
    INDEX = "index"
    DESCRIPTION = "description"


@dataclass
class TimingEntry:
    name: str
    description: str = ""
    duration: timedelta = timedelta(0)
    started_at: Optional[float] = None


_SHORT_ESCAPES = {
    "\a": "\\a",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\v": "\\v",
    '"': '\\"',
    "\\": "\\\\",
}


def quote(value: str) -> str:
    """Double-quote ``value`` the way Go's ``%#v`` renders a string."""
    out = ['"']
    for ch in value:
        esc = _SHORT_ESCAPES.get(ch)
        if esc is not None:
            out.append(esc)
        elif ch.isprintable():
            out.append(ch)
        else:
            cp = ord(ch)
            if cp < 0x80:
                out.append(f"\\x{cp:02x}")
            elif cp <= 0xFFFF:
                out.append(f"\\u{cp:04x}")
            else:
                out.append(f"\\U{cp:08x}")
    out.append('"')
    return "".join(out)


def _as_mode(mode: Union[PrefixMode, str]) -> PrefixMode:
    if isinstance(mode, PrefixMode):
        return mode
    try:
        return PrefixMode(str(mode).strip().lower())
    except ValueError:
        raise ValueError(
            f"unknown prefix mode {mode!r}; expected one of "
            + ", ".join(m.value for m in PrefixMode)
        ) from None


class ServerTimer:
    """Accumulate named measurements and render a ``Server-Timing`` value.

    One instance per request. Entries keep their registration order and all
    access goes through a single lock, so worker threads serving parts of the
    same request may share the timer.

    Usage:
      t = ServerTimer().enable_prefix()
      t.add_flag('missedCache', 'Cache missed')
      t.add('cache', 'Cache Read', timedelta(microseconds=23200))
      t.start('db', 'Database query'); ...work...; t.stop('db')
      response.headers['Server-Timing'] = t.header()

    A zero duration is never rendered, so a genuinely instantaneous
    measurement looks the same as a flag.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: List[TimingEntry] = []
        self._prefix = PrefixMode.NONE

    def enable_prefix(self, mode: Union[PrefixMode, str] = PrefixMode.INDEX) -> "ServerTimer":
        mode = _as_mode(mode)
        with self._lock:
            self._prefix = mode
        return self

    @property
    def prefix_mode(self) -> PrefixMode:
        with self._lock:
            return self._prefix

    def _append(self, entry: TimingEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def add_flag(self, name: str, description: str = "") -> None:
        self._append(TimingEntry(name=name, description=description))

    def add(self, name: str, description: str, duration: timedelta) -> None:
        self._append(TimingEntry(name=name, description=description, duration=duration))

    def start(self, name: str, description: str = "") -> None:
        self._append(
            TimingEntry(name=name, description=description, started_at=time.perf_counter())
        )

    def stop(self, name: str) -> None:
        """Record elapsed time on the first entry called ``name``.

        Unknown names are ignored, as is a first match that was never started.
        """
        now = time.perf_counter()
        with self._lock:
            for entry in self._entries:
                if entry.name != name:
                    continue
                if entry.started_at is None:
                    logger.debug("server_timing.stop not_started name=%s", name)
                    return
                entry.duration = timedelta(seconds=now - entry.started_at)
                return
        logger.debug("server_timing.stop unknown name=%s", name)

    @contextmanager
    def measure(self, name: str, description: str = "") -> Iterator["ServerTimer"]:
        self.start(name, description)
        try:
            yield self
        finally:
            self.stop(name)

    def entries(self) -> List[TimingEntry]:
        with self._lock:
            return [replace(e) for e in self._entries]

    def header(self) -> str:
        with self._lock:
            entries = [replace(e) for e in self._entries]
            mode = self._prefix

        width = len(str(max(len(entries) - 1, 0)))
        parts = []
        for idx, entry in enumerate(entries):
            name = entry.name
            desc = entry.description
            if mode is PrefixMode.INDEX:
                name = f"{idx:0{width}d}_{name}"
            elif mode is PrefixMode.DESCRIPTION:
                desc = f"{idx + 1}: {desc}" if desc else str(idx + 1)

            sub = [name]
            if desc:
                sub.append(f"desc={quote(desc)}")
            if entry.duration:
                sub.append(f"dur={entry.duration.total_seconds() * 1000.0:.2f}")
            parts.append(";".join(sub))
        return ", ".join(parts)

    def __str__(self) -> str:
        return self.header()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
