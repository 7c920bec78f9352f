"""Logging configuration for the project risk simulator.

Provides logging setup with structured output, performance tracking,
and appropriate log levels for different environments.
"""

import logging
import logging.config
import functools
import sys
import time
from pathlib import Path
from typing import Optional
import json
from datetime import datetime


class PerformanceFilter(logging.Filter):
    """Filter to add performance metrics to log records."""

    def filter(self, record):
        """Add performance timing to log records."""
        if not hasattr(record, 'performance_time'):
            record.performance_time = time.time()
        return True


class RiskSimulatorFormatter(logging.Formatter):
    """JSON formatter with run context fields."""

    CONTEXT_FIELDS = ('run_id', 'component', 'operation', 'iterations', 'seed')

    def __init__(self, include_performance: bool = True):
        super().__init__()
        self.include_performance = include_performance
        self.start_time = time.time()

    def format(self, record):
        """Format log record with structured information."""
        message = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        if self.include_performance and hasattr(record, 'performance_time'):
            message['elapsed'] = f"{record.performance_time - self.start_time:.3f}s"

        for field in self.CONTEXT_FIELDS:
            if hasattr(record, field):
                message[field] = getattr(record, field)

        if record.exc_info:
            message['exception'] = self.formatException(record.exc_info)

        return json.dumps(message, default=str)


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    enable_performance: bool = True,
    enable_structured: bool = False
) -> logging.Logger:
    """Set up logging for the simulator.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional file path for log output
        enable_performance: Enable performance tracking
        enable_structured: Enable structured JSON logging

    Returns:
        Configured package logger
    """
    log_level = log_level.upper()

    config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'detailed': {
                'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            },
            'simple': {
                'format': '%(levelname)s: %(message)s'
            },
            'structured': {
                '()': RiskSimulatorFormatter,
                'include_performance': enable_performance
            }
        },
        'filters': {
            'performance': {
                '()': PerformanceFilter
            }
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'stream': sys.stderr,
                'formatter': 'structured' if enable_structured else 'simple',
                'level': log_level
            }
        },
        'loggers': {
            'risk_simulator': {
                'level': log_level,
                'handlers': ['console'],
                'propagate': False
            }
        }
    }

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        config['handlers']['file'] = {
            'class': 'logging.handlers.RotatingFileHandler',
            'filename': str(log_file),
            'maxBytes': 10 * 1024 * 1024,  # 10MB
            'backupCount': 5,
            'formatter': 'structured' if enable_structured else 'detailed',
            'level': log_level
        }
        config['loggers']['risk_simulator']['handlers'].append('file')

    if enable_performance:
        config['handlers']['console']['filters'] = ['performance']
        if log_file:
            config['handlers']['file']['filters'] = ['performance']

    logging.config.dictConfig(config)

    logger = logging.getLogger('risk_simulator')
    logger.debug(
        "Logging initialized",
        extra={'component': 'logging', 'operation': 'initialization'}
    )

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance for a specific component.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Logger instance under the ``risk_simulator`` hierarchy
    """
    if name == 'risk_simulator' or name.startswith('risk_simulator.'):
        return logging.getLogger(name)
    return logging.getLogger(f"risk_simulator.{name}")


class LoggingContext:
    """Context manager for adding structured context to logs."""

    def __init__(self, logger: logging.Logger, **context):
        """Initialize logging context.

        Args:
            logger: Logger instance
            **context: Context information to add to log records
        """
        self.logger = logger
        self.context = context
        self.old_factory = logging.getLogRecordFactory()

    def __enter__(self):
        """Enter context and set up custom log record factory."""
        def record_factory(*args, **kwargs):
            record = self.old_factory(*args, **kwargs)
            for key, value in self.context.items():
                setattr(record, key, value)
            return record

        logging.setLogRecordFactory(record_factory)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Exit context and restore original log record factory."""
        logging.setLogRecordFactory(self.old_factory)


def log_performance(func):
    """Decorator for automatic performance logging."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger(func.__module__)
        start_time = time.perf_counter()

        try:
            with LoggingContext(logger,
                                component=func.__module__,
                                operation=func.__name__):
                logger.debug(f"Starting {func.__name__}")
                result = func(*args, **kwargs)
                elapsed = time.perf_counter() - start_time
                logger.debug(f"Completed {func.__name__} in {elapsed:.3f}s")
                return result

        except Exception as e:
            elapsed = time.perf_counter() - start_time
            logger.error(
                f"Failed {func.__name__} after {elapsed:.3f}s: {e}",
                exc_info=True
            )
            raise

    return wrapper
