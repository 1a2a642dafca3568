"""Tests for logger factory module."""

import logging
from unittest.mock import patch

import pytest

from plumbline.core.exceptions import ConfigurationError
from plumbline.logging import factory as factory_module
from plumbline.logging.factory import LoggerConfig, LoggerFactory
from plumbline.logging.handlers import ConsoleHandler, RotatingFileHandler
from plumbline.logging.performance import PerformanceLogger
from plumbline.logging.structured import StructuredLogger


class TestLoggerConfig:
    """Test cases for LoggerConfig class."""

    def test_default_values(self):
        config = LoggerConfig()

        assert config.level == "INFO"
        assert config.format == "json"
        assert config.console_output is True
        assert config.file_output is False
        assert config.file_path is None
        assert config.correlation_ids is True


class TestLoggerFactory:
    """Test cases for LoggerFactory class."""

    def test_factory_initialization(self, logger_factory):
        assert isinstance(logger_factory.config, LoggerConfig)
        assert logger_factory.initialized is False

    def test_configure_from_config(self, logger_factory, sample_logging_config, temp_log_file):
        logger_factory.configure_from_config(sample_logging_config)

        assert logger_factory.initialized
        assert logger_factory.config.file_output is True
        assert logger_factory.config.file_path == str(temp_log_file)
        assert logger_factory.config.backup_count == 3

        handlers = logging.getLogger().handlers
        assert any(isinstance(h, ConsoleHandler) for h in handlers)
        assert any(isinstance(h, RotatingFileHandler) for h in handlers)
        assert temp_log_file.parent.exists()

    def test_configure_from_dict_ignores_unknown_keys(self, logger_factory):
        logger_factory.configure_from_dict({"level": "DEBUG", "format": "text", "console_output": False, "bogus": 1})

        assert logger_factory.config.level == "DEBUG"
        assert logger_factory.config.format == "text"
        assert not hasattr(logger_factory.config, "bogus")
        assert logging.getLogger().level == logging.DEBUG
        assert logging.getLogger().handlers == []

    def test_reconfigure_replaces_handlers(self, logger_factory):
        logger_factory.configure_from_dict({"console_output": True})
        logger_factory.configure_from_dict({"console_output": True})

        consoles = [h for h in logging.getLogger().handlers if isinstance(h, ConsoleHandler)]
        assert len(consoles) == 1

    def test_get_logger_configures_lazily(self, logger_factory):
        with patch.object(logger_factory, "_configure_logging_system") as configure:
            logger_factory.get_logger("plumbline.test")

        configure.assert_called_once()

    def test_get_logger_caching(self, logger_factory):
        logger_factory.initialized = True

        first = logger_factory.get_logger("plumbline.sizing.advisor")
        second = logger_factory.get_logger("plumbline.sizing.advisor")
        other = logger_factory.get_logger("plumbline.sizing.advisor", level="DEBUG")

        assert isinstance(first, StructuredLogger)
        assert first is second
        assert other is not first
        assert other.get_level() == "DEBUG"

    def test_get_logger_correlation_override(self, logger_factory):
        logger_factory.initialized = True

        logger = logger_factory.get_logger("plumbline.test", enable_correlation=False)

        assert logger.get_correlation_id() is None

    def test_get_performance_logger(self, logger_factory):
        logger_factory.initialized = True

        perf_logger = logger_factory.get_performance_logger("quality.fleet")

        assert isinstance(perf_logger, PerformanceLogger)
        assert perf_logger.logger.name == "perf.quality.fleet"
        assert logger_factory.get_performance_logger("quality.fleet") is perf_logger
        assert logger_factory.get_performance_logger("quality.fleet", auto_log=False) is not perf_logger

    def test_set_level_for_all_loggers(self, logger_factory):
        logger_factory.initialized = True
        logger = logger_factory.get_logger("plumbline.test")

        logger_factory.set_level("error")

        assert logger_factory.config.level == "ERROR"
        assert logger.get_level() == "ERROR"
        assert logging.getLogger().level == logging.ERROR

    def test_set_level_for_named_logger(self, logger_factory):
        logger_factory.set_level("DEBUG", logger_name="plumbline.named")

        assert logging.getLogger("plumbline.named").level == logging.DEBUG

    def test_set_invalid_level(self, logger_factory):
        with pytest.raises(ConfigurationError) as exc_info:
            logger_factory.set_level("LOUD")

        assert exc_info.value.code == "INVALID_LOG_LEVEL"

    def test_shutdown_clears_cache(self, logger_factory):
        logger_factory.initialized = True
        logger_factory.get_logger("plumbline.test")

        logger_factory.shutdown()

        assert logger_factory._loggers == {}
        assert logger_factory.initialized is False

    def test_repr(self, logger_factory):
        assert repr(logger_factory) == "LoggerFactory(level='INFO', format='json', initialized=False)"


class TestGlobalFunctions:
    """Test module-level convenience functions."""

    def test_get_logger_uses_global_factory(self):
        logger = factory_module.get_logger("plumbline.global")

        assert logger is factory_module.get_factory().get_logger("plumbline.global")

    def test_get_performance_logger_uses_global_factory(self):
        perf_logger = factory_module.get_performance_logger("sizing.fleet")

        assert perf_logger is factory_module.get_factory().get_performance_logger("sizing.fleet")

    def test_configure_logging(self):
        with patch.object(factory_module._global_factory, "configure_from_dict") as configure:
            factory_module.configure_logging(level="DEBUG", format="text", backup_count=2)

        configure.assert_called_once_with({
            "level": "DEBUG",
            "format": "text",
            "console_output": True,
            "file_output": False,
            "file_path": None,
            "backup_count": 2,
        })

    def test_shutdown_logging(self):
        with patch.object(factory_module._global_factory, "shutdown") as shutdown:
            factory_module.shutdown_logging()

        shutdown.assert_called_once()
