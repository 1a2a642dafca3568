"""Logger factory and configuration for Plumbline.

One process-wide :class:`LoggerFactory` owns the root handler stack and the
structlog processor chain. Engine components ask it for named loggers; the
first request configures logging from :class:`LoggerConfig` unless
``configure_logging`` already did.

Classes:
    LoggerFactory: Configures logging and hands out cached loggers
    LoggerConfig: Settings the factory applies

Functions:
    get_logger: Structured logger from the global factory
    get_performance_logger: Timing logger from the global factory
    configure_logging: Configure logging system globally

Example:
    >>> from plumbline.logging import get_logger, configure_logging
    >>> configure_logging(level="INFO", format="json")
    >>> logger = get_logger(__name__)
    >>> logger.info("Fleet scored", table_count=10)
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, TypeVar

import structlog

from .formatters import get_formatter
from .handlers import ConsoleHandler, RotatingFileHandler
from .performance import PerformanceLogger
from .structured import StructuredLogger
from ..config.models import LoggingConfig
from ..core.exceptions import ConfigurationError

T = TypeVar("T")


@dataclass
class LoggerConfig:
    """Settings applied by :class:`LoggerFactory`.

    ``file_output`` only takes effect together with ``file_path``;
    ``correlation_ids`` is the default for loggers that don't override it.
    """
    level: str = "INFO"
    format: str = "json"
    console_output: bool = True
    file_output: bool = False
    file_path: Optional[str] = None
    max_file_size: int = 10485760
    backup_count: int = 5
    correlation_ids: bool = True


def _shared_processors() -> List[Any]:
    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


class LoggerFactory:
    """Configures Plumbline logging and caches the loggers it creates.

    Example:
        >>> factory = LoggerFactory()
        >>> factory.configure_from_config(engine_config.logging)
        >>> logger = factory.get_logger("plumbline.sizing.advisor")
    """

    def __init__(self, config: Optional[LoggerConfig] = None) -> None:
        self.config = config or LoggerConfig()
        self.initialized = False
        self._loggers: Dict[str, StructuredLogger] = {}
        self._performance_loggers: Dict[str, PerformanceLogger] = {}

    def configure_from_config(self, logging_config: LoggingConfig) -> None:
        """Apply the ``logging`` section of an engine configuration."""
        file_path = logging_config.file_path
        self.config = LoggerConfig(
            level=logging_config.level,
            format=logging_config.format,
            console_output=logging_config.console_output,
            file_output=file_path is not None,
            file_path=str(file_path) if file_path is not None else None,
            max_file_size=logging_config.max_file_size,
            backup_count=logging_config.backup_count,
            correlation_ids=self.config.correlation_ids,
        )
        self._reconfigure()

    def configure_from_dict(self, config_dict: Dict[str, Any]) -> None:
        """Override individual settings; keys LoggerConfig doesn't know are skipped."""
        for key in config_dict.keys() & vars(self.config).keys():
            setattr(self.config, key, config_dict[key])
        self._reconfigure()

    def _reconfigure(self) -> None:
        self.initialized = False
        self._configure_logging_system()

    def _configure_logging_system(self) -> None:
        if self.initialized:
            return
        self._configure_stdlib_logging()
        self._configure_structlog()
        self.initialized = True

    def _build_handlers(self, level: int) -> List[logging.Handler]:
        handlers: List[logging.Handler] = []
        if self.config.console_output:
            handlers.append(ConsoleHandler())
        if self.config.file_output and self.config.file_path:
            handlers.append(RotatingFileHandler(
                self.config.file_path,
                maxBytes=self.config.max_file_size,
                backupCount=self.config.backup_count,
            ))
        for handler in handlers:
            handler.setLevel(level)
            handler.setFormatter(get_formatter(self.config.format))
        return handlers

    def _configure_stdlib_logging(self) -> None:
        """Replace the root handler stack with the configured handlers."""
        level = logging.getLevelName(self.config.level.upper())
        if not isinstance(level, int):
            level = logging.INFO

        root = logging.getLogger()
        for stale in root.handlers[:]:
            root.removeHandler(stale)
            stale.close()

        root.setLevel(level)
        for handler in self._build_handlers(level):
            root.addHandler(handler)

    def _configure_structlog(self) -> None:
        if self.config.format.lower() == "json":
            renderer = structlog.processors.JSONRenderer()
        else:
            renderer = structlog.dev.ConsoleRenderer(colors=False)

        structlog.configure(
            processors=_shared_processors() + [renderer],
            wrapper_class=structlog.stdlib.BoundLogger,
            logger_factory=structlog.stdlib.LoggerFactory(),
            context_class=dict,
            cache_logger_on_first_use=True,
        )

    @staticmethod
    def _cached(cache: Dict[str, T], key: str, build: Callable[[], T]) -> T:
        if key not in cache:
            cache[key] = build()
        return cache[key]

    def get_logger(
        self,
        name: str,
        *,
        level: Optional[str] = None,
        enable_correlation: Optional[bool] = None,
    ) -> StructuredLogger:
        """Get or create a structured logger.

        Loggers are cached per ``(name, level, enable_correlation)``; the
        overrides default to the factory configuration.
        """
        self._configure_logging_system()

        correlation = self.config.correlation_ids if enable_correlation is None else enable_correlation
        return self._cached(
            self._loggers,
            f"{name}_{level}_{enable_correlation}",
            lambda: StructuredLogger(name, level=level or self.config.level, enable_correlation=correlation),
        )

    def get_performance_logger(
        self,
        name: str,
        *,
        auto_log: bool = True,
        track_metrics: bool = True,
    ) -> PerformanceLogger:
        """Get or create a timing logger that reports through ``perf.<name>``."""
        return self._cached(
            self._performance_loggers,
            f"{name}_{auto_log}_{track_metrics}",
            lambda: PerformanceLogger(
                name,
                auto_log=auto_log,
                track_metrics=track_metrics,
                logger=self.get_logger(f"perf.{name}"),
            ),
        )

    def set_level(self, level: str, logger_name: Optional[str] = None) -> None:
        """Change the level of one stdlib logger, or of everything this factory manages.

        Raises:
            ConfigurationError: If the level name is unknown
        """
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ConfigurationError(f"Invalid log level: {level}", code="INVALID_LOG_LEVEL")

        if logger_name:
            logging.getLogger(logger_name).setLevel(numeric)
            return

        self.config.level = level.upper()
        logging.getLogger().setLevel(numeric)
        for structured in self._loggers.values():
            structured.set_level(level)

    def shutdown(self) -> None:
        """Flush handlers and forget cached loggers."""
        self._loggers.clear()
        self._performance_loggers.clear()
        logging.shutdown()
        self.initialized = False

    def __repr__(self) -> str:
        return (
            f"LoggerFactory(level={self.config.level!r}, "
            f"format={self.config.format!r}, initialized={self.initialized})"
        )


_global_factory = LoggerFactory()


def configure_logging(
    *,
    level: str = "INFO",
    format: str = "json",
    console_output: bool = True,
    file_output: bool = False,
    file_path: Optional[str] = None,
    **kwargs: Any
) -> None:
    """Configure Plumbline logging globally.

    Example:
        >>> configure_logging(level="DEBUG", format="text")
    """
    settings = dict(
        level=level,
        format=format,
        console_output=console_output,
        file_output=file_output,
        file_path=file_path,
    )
    settings.update(kwargs)
    _global_factory.configure_from_dict(settings)


def get_logger(
    name: str,
    *,
    level: Optional[str] = None,
    enable_correlation: Optional[bool] = None,
) -> StructuredLogger:
    return _global_factory.get_logger(name, level=level, enable_correlation=enable_correlation)


def get_performance_logger(name: str, *, auto_log: bool = True, track_metrics: bool = True) -> PerformanceLogger:
    return _global_factory.get_performance_logger(name, auto_log=auto_log, track_metrics=track_metrics)


def get_factory() -> LoggerFactory:
    return _global_factory


def shutdown_logging() -> None:
    _global_factory.shutdown()
