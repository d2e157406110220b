"""
Tests for logging setup.
"""

import logging

import pytest

from dutch_auction.utils.logger import LOG_FILE, ROOT_LOGGER, AuctionLogger, get_logger, setup_logging


@pytest.fixture(autouse=True)
def clean_logging():
    AuctionLogger.reset()
    yield
    AuctionLogger.reset()


class TestLogger:
    """Tests for handler setup and reset."""

    def test_subsystem_loggers_are_children(self):
        assert get_logger("registry").name == f"{ROOT_LOGGER}.registry"

    def test_setup_is_idempotent(self):
        AuctionLogger.setup()
        AuctionLogger.setup()
        assert len(logging.getLogger(ROOT_LOGGER).handlers) == 1

    def test_file_logging(self, tmp_path):
        setup_logging(level=logging.INFO, log_dir=tmp_path, log_to_file=True)

        get_logger("registry").info("auction started")
        for handler in logging.getLogger(ROOT_LOGGER).handlers:
            handler.flush()

        assert "auction started" in (tmp_path / LOG_FILE).read_text()

    def test_setup_logging_replaces_handlers(self, tmp_path):
        setup_logging(log_dir=tmp_path, log_to_file=True)
        setup_logging(level=logging.WARNING)

        root = logging.getLogger(ROOT_LOGGER)
        assert len(root.handlers) == 1
        assert root.level == logging.WARNING


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
