"""Shared fixtures."""

import logging

import pytest

from rwexporter.config import PERMISSIVE_LABEL_SANITIZATION
from rwexporter.featuregate import get_registry


@pytest.fixture(autouse=True)
def reset_global_state():
    """Restore the process-wide gate and logger state after each test."""
    yield
    get_registry().apply({PERMISSIVE_LABEL_SANITIZATION.id: PERMISSIVE_LABEL_SANITIZATION.enabled})

    package_logger = logging.getLogger("rwexporter")
    package_logger.handlers = []
    package_logger.setLevel(logging.NOTSET)
