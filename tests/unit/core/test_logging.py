"""
Tests for structured logging.

Covers message formatting with bound context, the cached logger factory,
global reconfiguration and the review session logger.
"""

import logging

import pytest

from recallforge.core import logging as rf_logging
from recallforge.core.logging import (
    LogConfig,
    ReviewLogger,
    StructuredLogger,
    configure_logging,
    get_logger,
)


@pytest.fixture
def restore_logging():
    """Restore the global logging config after a test reconfigures it."""
    previous = rf_logging._ConfigHolder.get_config()
    yield
    configure_logging(previous.level, previous.file_path, previous.console)


class TestStructuredLogger:
    def test_format_without_fields(self):
        logger = StructuredLogger("recallforge.test.plain", LogConfig(console=False))
        assert logger._format_message("hello") == "hello"

    def test_format_with_fields(self):
        logger = StructuredLogger("recallforge.test.fields", LogConfig(console=False))
        assert logger._format_message("Reviewed", card_id="c1", rating=4) == (
            "Reviewed | card_id=c1 | rating=4"
        )

    def test_bind_and_unbind(self):
        logger = StructuredLogger("recallforge.test.bind", LogConfig(console=False))
        logger.bind(session_id="s1")
        assert logger._format_message("x", card_id="c1") == "x | session_id=s1 | card_id=c1"
        logger.unbind("session_id")
        assert logger._format_message("x") == "x"

    def test_level_applied(self):
        logger = StructuredLogger("recallforge.test.level", LogConfig(level="debug", console=False))
        assert logger.logger.level == logging.DEBUG
        assert logger.logger.propagate is False

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "logs" / "rf.log"
        logger = StructuredLogger(
            "recallforge.test.file",
            LogConfig(level="INFO", file_path=log_file, console=False),
        )
        logger.info("Card added", card_id="c1")
        for handler in logger.logger.handlers:
            handler.flush()
            handler.close()
        assert "Card added | card_id=c1" in log_file.read_text()


class TestFactory:
    def test_cached(self):
        assert get_logger("recallforge.test.cached") is get_logger("recallforge.test.cached")

    def test_configure_reconfigures_existing(self, restore_logging):
        logger = get_logger("recallforge.test.reconfigured")
        configure_logging("DEBUG", console=False)
        assert logger.logger.level == logging.DEBUG
        assert logger.logger.handlers == []


class TestReviewLogger:
    def test_counts_reviews(self):
        rlog = ReviewLogger("session-1")
        rlog.log_review("c1", rating=4)
        rlog.log_review("c2", rating=2)
        rlog.log_undo("c2")
        assert rlog._reviews == 1
        rlog.finish()

    def test_undo_never_negative(self):
        rlog = ReviewLogger("session-2")
        rlog.log_undo("c1")
        assert rlog._reviews == 0


class TestHandlerLifecycle:
    def test_reconfigure_closes_file_handlers(self, tmp_path):
        logger = StructuredLogger(
            "recallforge.test.lifecycle",
            LogConfig(level="INFO", file_path=tmp_path / "rf.log", console=False),
        )
        logger.info("opened")
        old_handler = logger.logger.handlers[0]
        assert old_handler.stream is not None

        logger._setup_logger()

        assert old_handler.stream is None
        assert old_handler not in logger.logger.handlers
        for handler in logger.logger.handlers:
            handler.close()
