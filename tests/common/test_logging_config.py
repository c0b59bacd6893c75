"""
Tests for loguru configuration.
"""

import logging

from loguru import logger

from chapter_api.common.config.logging_config import configure_logging


def test_stdlib_records_reach_loguru(settings):
    configure_logging(settings)
    messages = []
    sink_id = logger.add(messages.append, format="{message}")
    try:
        logging.getLogger("chapter_api.tests").warning("routed through loguru")
    finally:
        logger.remove(sink_id)

    assert any("routed through loguru" in str(message) for message in messages)


def test_noisy_modules_are_quietened(settings):
    configure_logging(settings)

    assert logging.getLogger("asyncpg").level == logging.WARNING
    assert logging.getLogger("httpx").level == logging.ERROR
