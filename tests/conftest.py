"""
Pytest Configuration for Fuel Ledger Tests

Environment overrides must be set BEFORE fuel_ledger.settings is imported
(it loads .env at import time).
"""

import logging
import os

# Keep a developer's .env thresholds out of the tests
for _key in (
    "FUEL_CONFIG_PATH",
    "FUZZY_MATCH_THRESHOLD",
    "SUGGESTION_THRESHOLD",
    "MAX_ROUTE_SUGGESTIONS",
    "MIN_SUBSTRING_LENGTH",
    "DEFAULT_TOTAL_LITERS",
    "DEFAULT_EXTRA_LITERS",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "LOG_FILE",
):
    os.environ.pop(_key, None)

import pytest
import structlog

# Import all fixtures
from tests.fixtures.fuel_fixtures import *  # noqa


@pytest.fixture(autouse=True)
def reset_logging():
    """Leave root handlers and structlog config as each test found them."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()
