import logging

import pytest


@pytest.fixture(autouse=True)
def restore_root_logger():
    # CLI commands reconfigure the root logger against click's captured stdout
    root_logger = logging.getLogger()
    handlers, level = root_logger.handlers[:], root_logger.level
    yield
    root_logger.handlers = handlers
    root_logger.setLevel(level)
