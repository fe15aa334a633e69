"""
Tests for the logging bootstrap and timing decorator
"""

import logging
import logging.handlers

import pytest

from gesture_vision.modules.utils.logger import log_timing, setup_logging


@pytest.fixture
def restore_root_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers[:] = handlers
    root.setLevel(level)
    logging.getLogger("gesture_vision.test_quiet").setLevel(logging.NOTSET)


class TestSetupLogging:

    def test_console_only(self, restore_root_logging):
        root = setup_logging(level="WARNING")

        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert root.handlers[0].level == logging.WARNING

    def test_rotating_file_gets_debug(self, restore_root_logging, tmp_path):
        log_file = tmp_path / "logs" / "service.log"
        root = setup_logging(level="INFO", log_file=str(log_file))

        file_handlers = [h for h in root.handlers
                         if isinstance(h, logging.handlers.RotatingFileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].level == logging.DEBUG
        assert root.level == logging.DEBUG
        assert log_file.parent.is_dir()

        logging.getLogger("gesture_vision.test").debug("cycle detail")
        file_handlers[0].flush()
        assert "cycle detail" in log_file.read_text()

    def test_module_level_overrides(self, restore_root_logging):
        setup_logging(level="INFO", module_levels={"gesture_vision.test_quiet": "error"})
        assert logging.getLogger("gesture_vision.test_quiet").level == logging.ERROR


class TestLogTiming:

    def test_bare_decorator_logs_debug(self, caplog):
        @log_timing
        def work(x):
            return x * 2

        with caplog.at_level(logging.DEBUG, logger=__name__):
            assert work(4) == 8

        assert any("work took" in r.message and r.levelno == logging.DEBUG
                   for r in caplog.records)

    def test_slow_call_warns(self, caplog, monkeypatch):
        ticks = iter([0.0, 0.5])
        monkeypatch.setattr("gesture_vision.modules.utils.logger.time.perf_counter",
                            lambda: next(ticks, 0.5))

        @log_timing(slow_ms=150)
        def process():
            return "done"

        with caplog.at_level(logging.DEBUG, logger=__name__):
            assert process() == "done"

        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 1
        assert "budget 150ms" in warnings[0].message

    def test_fast_call_within_budget_stays_debug(self, caplog):
        @log_timing(slow_ms=10000)
        def quick():
            return 1

        with caplog.at_level(logging.DEBUG, logger=__name__):
            quick()

        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]
