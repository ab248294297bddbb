# tests/test_logger.py
"""
Tests for the shared logger in updategen/logger.py.
"""

import logging

from updategen import logger
from updategen.generator import UpdateGenerator
from updategen.logger import log


class TestSetupLogger:
    def test_returns_the_existing_logger(self):
        handlers = list(log.handlers)
        assert logger.setup_logger() is log
        assert log.handlers == handlers

    def test_does_not_propagate(self):
        assert log.name == "updategen"
        assert log.propagate is False


class TestConfigure:
    """The enable_logging setting only silences informational messages."""

    def test_disabled_keeps_warnings(self):
        logger.configure(False)
        assert not log.isEnabledFor(logging.INFO)
        assert log.isEnabledFor(logging.WARNING)

    def test_enabled_again(self):
        logger.configure(False)
        logger.configure(True)
        assert log.isEnabledFor(logging.INFO)

    def test_generator_applies_the_setting(self, make_config, tmp_path):
        UpdateGenerator(make_config(tmp_path, enable_logging=False))
        assert not log.isEnabledFor(logging.INFO)

        UpdateGenerator(make_config(tmp_path))
        assert log.isEnabledFor(logging.INFO)
