import logging
import time
from datetime import timedelta

import pytest

from servertiming.utils.server_timing import ServerTimer, quote


def test_empty_timer_renders_empty_string(timer):
    assert timer.header() == ""
    assert str(timer) == ""
    assert len(timer) == 0


def test_flags_without_description():
    ti = ServerTimer()
    ti.add_flag("missedCache", "")
    assert ti.header() == "missedCache"

    ti.add_flag("coldStart")
    ti.add_flag("fallback", "")
    assert ti.header() == "missedCache, coldStart, fallback"
    assert "desc=" not in ti.header()
    assert "dur=" not in ti.header()


def test_flag_with_description(timer):
    timer.add_flag("missedCache", "Cache missed")
    assert str(timer) == 'missedCache;desc="Cache missed"'


def test_description_quotes_are_escaped(timer):
    timer.add_flag("missedCache", 'Cache missed: "3"')
    assert timer.header() == r'missedCache;desc="Cache missed: \"3\""'


def test_flag_and_timed_entry(timer):
    timer.add_flag("missedCache", "")
    timer.add("cache", "Cache Read", timedelta(microseconds=23200))
    assert timer.header() == 'missedCache, cache;desc="Cache Read";dur=23.20'


def test_timed_entry_without_description(timer):
    timer.add("render", "", timedelta(milliseconds=1.5))
    assert timer.header() == "render;dur=1.50"


def test_zero_duration_is_not_rendered(timer):
    timer.add("noop", "Did nothing", timedelta(0))
    assert timer.header() == 'noop;desc="Did nothing"'


def test_start_stop_records_elapsed_time(timer):
    timer.start("db", "Database")
    time.sleep(0.01)
    timer.stop("db")

    parts = timer.header().split(";")
    assert len(parts) == 3
    assert parts[0] == "db"
    assert parts[1] == 'desc="Database"'

    key, value = parts[2].split("=")
    assert key == "dur"
    assert float(value) > 10


def test_header_is_stable_between_calls(timer):
    timer.add_flag("a", "first")
    timer.add("b", "second", timedelta(milliseconds=3))
    timer.start("c")
    timer.stop("c")
    assert timer.header() == timer.header()


def test_registration_order_is_preserved(timer):
    timer.start("db")
    timer.add_flag("miss")
    timer.add("cache", "", timedelta(milliseconds=2))
    timer.start("render")
    timer.stop("render")
    timer.stop("db")

    names = [token.split(";")[0] for token in timer.header().split(", ")]
    assert names == ["db", "miss", "cache", "render"]


def test_stop_unknown_name_is_noop(timer, caplog):
    caplog.set_level(logging.DEBUG, logger="servertiming.utils.server_timing")
    timer.add_flag("missedCache", "Cache missed")
    before = timer.header()

    timer.stop("nope")

    assert timer.header() == before
    assert "unknown name=nope" in caplog.text


def test_stop_only_updates_first_match(timer):
    timer.start("db", "primary")
    timer.start("db", "replica")
    time.sleep(0.002)
    timer.stop("db")

    first, second = timer.entries()
    assert first.duration > timedelta(0)
    assert second.duration == timedelta(0)
    assert timer.header().endswith(', db;desc="replica"')


def test_stop_ignores_entry_that_was_never_started(timer):
    timer.add_flag("db", "flagged")
    timer.start("db", "timed")
    timer.stop("db")
    assert timer.header() == 'db;desc="flagged", db;desc="timed"'


def test_measure_context_manager(timer):
    with timer.measure("work", "Busy loop") as t:
        assert t is timer
        time.sleep(0.002)

    (entry,) = timer.entries()
    assert entry.name == "work"
    assert entry.duration >= timedelta(milliseconds=1)


def test_measure_stops_when_body_raises(timer):
    with pytest.raises(RuntimeError):
        with timer.measure("boom"):
            time.sleep(0.002)
            raise RuntimeError("fail")

    assert timer.entries()[0].duration > timedelta(0)


def test_entries_returns_copies(timer):
    timer.add_flag("a", "one")
    snapshot = timer.entries()
    snapshot[0].name = "changed"
    assert timer.header() == 'a;desc="one"'


def test_len_counts_entries(timer):
    assert not timer
    timer.add_flag("a")
    timer.start("b")
    assert len(timer) == 2
    assert timer


def test_quote_escapes_backslash_and_controls():
    assert quote("plain") == '"plain"'
    assert quote("a\\b") == '"a\\\\b"'
    assert quote("line\nbreak\ttab") == '"line\\nbreak\\ttab"'
    assert quote("\x00\x7f") == '"\\x00\\x7f"'


def test_quote_keeps_printable_unicode():
    assert quote("café ☕") == '"café ☕"'
    assert quote("zero\u200bwidth") == '"zero\\u200bwidth"'
