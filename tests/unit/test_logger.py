"""Unit tests for logging setup."""

import logging

from loguru import logger

from repolingo.utils.logger import LoguruWrapper, get_logger, setup_logger


def test_stdlib_records_reach_loguru(tmp_path):
    log_file = tmp_path / "logs" / "repolingo.log"

    wrapper = setup_logger(level="DEBUG", log_file=str(log_file))
    logging.getLogger("repolingo.core.pipeline").info("hello from the pipeline")
    logger.remove()

    assert isinstance(wrapper, LoguruWrapper)
    assert "hello from the pipeline" in log_file.read_text(encoding="utf-8")


def test_level_filters_records(tmp_path):
    log_file = tmp_path / "repolingo.log"

    setup_logger(level="WARNING", log_file=str(log_file))
    logging.getLogger("repolingo.translation.detector").info("quiet")
    logging.getLogger("repolingo.translation.detector").warning("loud")
    logger.remove()

    content = log_file.read_text(encoding="utf-8")
    assert "loud" in content
    assert "quiet" not in content


def test_get_logger_wraps_loguru():
    assert isinstance(get_logger(), LoguruWrapper)
