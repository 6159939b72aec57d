"""
Shared pytest fixtures for mermaid-fmt tests.
"""

import logging

import pytest

from mermaid_fmt.config import ConfigLoader
from mermaid_fmt.logging_config import PACKAGE_LOGGER


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Remove MERMAID_FMT_* settings so tests only see what they set."""
    for env_var in ConfigLoader.CONFIG_KEY_TO_ENV.values():
        monkeypatch.delenv(env_var, raising=False)
    monkeypatch.delenv("MERMAID_FMT_LOG_FILE", raising=False)
    yield


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers installed by configure_logging during a test."""
    yield
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
