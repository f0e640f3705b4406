"""Tests for configuration module and logging helper."""
import logging

import pytest
from src import config
from src.utils.helpers import setup_logging


def test_grid_limits():
    """Test that grid size limits are properly set."""
    assert config.MAX_GRID_ROWS == 10_000
    assert config.MAX_GRID_COLS == 10_000
    assert config.LARGE_GRID_CELL_THRESHOLD == 1_000_000


def test_batch_limit():
    """Test that the batch size limit is set."""
    assert config.MAX_BATCH_ITEMS == 10


def test_default_boundary_groups():
    """Default groups split the four edges in two."""
    edges = set(config.DEFAULT_GROUP_A_EDGES) | set(config.DEFAULT_GROUP_B_EDGES)
    assert edges == {"top", "left", "bottom", "right"}
    assert not set(config.DEFAULT_GROUP_A_EDGES) & set(config.DEFAULT_GROUP_B_EDGES)


def test_config_constants():
    """Test that configuration constants are properly set."""
    assert config.DEFAULT_MAX_PATHS > 0
    assert config.STATS_PRECISION == 4
    assert isinstance(config.ALGORITHM_ID, str)
    assert isinstance(config.DEFAULT_LOG_LEVEL, str)


@pytest.fixture
def fresh_logger_name(request):
    name = f"test_setup_logging.{request.node.name}"
    yield name
    logger = logging.getLogger(name)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def test_setup_logging_adds_console_handler(fresh_logger_name):
    """setup_logging attaches one stderr handler at the requested level."""
    logger = setup_logging(fresh_logger_name, level=logging.DEBUG)

    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], logging.StreamHandler)


def test_setup_logging_is_idempotent(fresh_logger_name):
    """Calling setup_logging twice does not duplicate handlers."""
    setup_logging(fresh_logger_name)
    logger = setup_logging(fresh_logger_name)

    assert len(logger.handlers) == 1


def test_setup_logging_file_handler(fresh_logger_name, tmp_path):
    """A log file gets its own handler."""
    log_file = tmp_path / "analysis.log"

    logger = setup_logging(fresh_logger_name, log_file=log_file)
    logger.info("hello")

    assert len(logger.handlers) == 2
    for handler in logger.handlers:
        handler.flush()
    assert "hello" in log_file.read_text()
