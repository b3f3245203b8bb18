"""Tests for the logger and the web log buffer."""

import pytest

from trackline.core import logger
from trackline.web.state import LogBuffer, log_buffer


@pytest.fixture
def web_mode():
    log_buffer.clear()
    logger.set_web_mode(True)
    yield log_buffer
    logger.set_web_mode(False)
    log_buffer.clear()


class TestLogger:
    """Tests for log_* helpers."""

    def test_call_leaves_out_none_params(self, web_mode):
        logger.log_call("LocationStore", "append", lat=50.0, accuracy=None)

        entry = web_mode.get_all()[-1]
        assert entry["level"] == "call"
        assert entry["message"] == "→ LocationStore.append(lat=50.0)"
        assert entry["data"]["params"] == {"lat": "50.0"}

    def test_result_is_shortened(self, web_mode):
        logger.log_result("WindowFilter", "filter", "x" * 200)

        entry = web_mode.get_all()[-1]
        assert entry["message"].endswith("...")
        assert len(entry["data"]["result"]) == 200

    def test_warning_always_printed(self, capsys):
        logger.set_verbose(False)
        logger.log_warning("Geolocation error: Timeout expired")
        logger.log_info("not shown")

        out = capsys.readouterr().out
        assert "Timeout expired" in out
        assert "not shown" not in out

    def test_verbose_prints_info(self, capsys):
        logger.set_verbose(True)
        try:
            logger.log_info("history snapshot: 3 points")
        finally:
            logger.set_verbose(False)

        assert "history snapshot: 3 points" in capsys.readouterr().out

    def test_nothing_buffered_outside_web_mode(self):
        log_buffer.clear()
        logger.log_error("Failed to save location data.")
        assert log_buffer.get_all() == []


class TestLogBuffer:
    """Tests for LogBuffer."""

    def test_bounded(self):
        buffer = LogBuffer(max_entries=3)
        for i in range(5):
            buffer.add("info", f"entry {i}")

        assert [e["message"] for e in buffer.get_all()] == ["entry 2", "entry 3", "entry 4"]

    def test_filter_by_level(self):
        buffer = LogBuffer()
        buffer.add("info", "saved")
        buffer.add("warning", "timeout")
        buffer.add("error", "disk full")

        assert [e["message"] for e in buffer.get_all(["warning", "error"])] == ["timeout", "disk full"]

    def test_subscriber_receives_entries(self):
        buffer = LogBuffer()
        q = buffer.subscribe()
        entry = buffer.add("info", "saved")

        assert q.get_nowait() is entry

        buffer.unsubscribe(q)
        buffer.add("info", "after")
        assert q.empty()

    def test_slow_subscriber_drops(self):
        buffer = LogBuffer(subscriber_queue_size=1)
        buffer.subscribe()
        buffer.add("info", "first")
        buffer.add("info", "second")

        assert buffer.dropped == 1
        assert len(buffer.get_all()) == 2
