#!/usr/bin/env python3
"""
Logging Utilities
Structured logging for the ESG analytics pipeline.

Features:
- Structured logging with JSON format
- Colored console output
- Per-engine performance tracking
- Engine failure and report event records
- Optional rotating file, error and performance handlers

Author: ESG Analytics Team
Version: 1.0.0
"""

import logging
import logging.handlers
import sys
import threading
import time
import traceback
from contextlib import contextmanager
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Any

# Additional libraries
import colorlog
from pythonjsonlogger import jsonlogger


class LogLevel(Enum):
    """Enumeration of available log levels."""
    DEBUG = 'DEBUG'
    INFO = 'INFO'
    WARNING = 'WARNING'
    ERROR = 'ERROR'
    CRITICAL = 'CRITICAL'


@dataclass
class LogConfig:
    """Logging configuration settings."""
    # Basic settings
    log_level: str = 'INFO'
    log_format: str = 'colored'  # 'json', 'text', 'colored'

    # File logging (disabled unless a path is given)
    log_file: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5

    # Console logging
    console_logging: bool = True
    console_level: str = 'INFO'

    # Performance logging
    performance_logging: bool = False
    performance_file: Optional[str] = None

    # Error logging
    error_file: Optional[str] = None

    # Structured logging
    include_timestamp: bool = True
    include_level: bool = True
    include_module: bool = True
    include_function: bool = True
    include_line_number: bool = True

    # Additional metadata
    service_name: str = 'esg_analytics'
    environment: str = 'development'
    version: str = '1.0.0'

    # Log filtering
    exclude_modules: List[str] = field(default_factory=list)


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class PerformanceTracker:
    """Track performance metrics for logging."""

    def __init__(self):
        self.start_times = {}
        self.metrics = {}
        self.lock = threading.Lock()

    def start_timer(self, operation_name: str) -> str:
        """Start timing an operation.

        Args:
            operation_name: Name of the operation

        Returns:
            Timer ID
        """
        timer_id = f"{operation_name}_{time.perf_counter_ns()}"
        with self.lock:
            self.start_times[timer_id] = time.perf_counter()
        return timer_id

    def end_timer(self, timer_id: str) -> float:
        """End timing an operation.

        Args:
            timer_id: Timer ID from start_timer

        Returns:
            Elapsed time in seconds
        """
        end_time = time.perf_counter()
        with self.lock:
            start_time = self.start_times.pop(timer_id, end_time)
            elapsed = end_time - start_time

            operation_name = timer_id.rsplit('_', 1)[0]

            if operation_name not in self.metrics:
                self.metrics[operation_name] = {
                    'count': 0,
                    'total_time': 0.0,
                    'min_time': float('inf'),
                    'max_time': 0.0,
                    'avg_time': 0.0
                }

            metrics = self.metrics[operation_name]
            metrics['count'] += 1
            metrics['total_time'] += elapsed
            metrics['min_time'] = min(metrics['min_time'], elapsed)
            metrics['max_time'] = max(metrics['max_time'], elapsed)
            metrics['avg_time'] = metrics['total_time'] / metrics['count']

            return elapsed

    def get_metrics(self) -> Dict[str, Dict[str, float]]:
        """Snapshot of the per-operation metrics."""
        with self.lock:
            return {name: dict(values) for name, values in self.metrics.items()}

    def reset_metrics(self):
        """Reset all performance metrics."""
        with self.lock:
            self.metrics.clear()
            self.start_times.clear()


class JSONFormatter(jsonlogger.JsonFormatter):
    """JSON formatter carrying service metadata on every record."""

    def __init__(self, config: LogConfig):
        self.config = config

        fields = []
        if config.include_timestamp:
            fields.append('asctime')
        if config.include_level:
            fields.append('levelname')
        fields.append('message')
        if config.include_module:
            fields.append('module')
        if config.include_function:
            fields.append('funcName')
        if config.include_line_number:
            fields.append('lineno')

        format_string = ' '.join([f'%({name})s' for name in fields])
        super().__init__(format_string)

    def add_fields(self, log_record, record, message_dict):
        """Add service metadata and structured payloads to the record."""
        super().add_fields(log_record, record, message_dict)

        log_record['service_name'] = self.config.service_name
        log_record['environment'] = self.config.environment
        log_record['version'] = self.config.version

        if 'timestamp' not in log_record:
            log_record['timestamp'] = _utc_now()

        if record.exc_info and record.exc_info[0] is not None:
            log_record['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': traceback.format_exception(*record.exc_info)
            }

        if hasattr(record, 'extra_data'):
            log_record['extra_data'] = record.extra_data

        if hasattr(record, 'performance_data'):
            log_record['performance_data'] = record.performance_data


class ColoredFormatter(colorlog.ColoredFormatter):
    """Colored formatter for console output."""

    def __init__(self, config: LogConfig):
        self.config = config

        format_parts = []
        if config.include_timestamp:
            format_parts.append('%(asctime)s')
        format_parts.append('%(log_color)s%(levelname)-8s%(reset)s')
        if config.include_module:
            format_parts.append('%(cyan)s%(module)s%(reset)s')
        if config.include_function:
            format_parts.append('%(blue)s%(funcName)s%(reset)s')
        if config.include_line_number:
            format_parts.append('%(yellow)s:%(lineno)d%(reset)s')
        format_parts.append('%(message)s')

        super().__init__(
            ' - '.join(format_parts),
            datefmt='%Y-%m-%d %H:%M:%S',
            log_colors={
                'DEBUG': 'cyan',
                'INFO': 'green',
                'WARNING': 'yellow',
                'ERROR': 'red',
                'CRITICAL': 'red,bg_white',
            }
        )


class LogFilter(logging.Filter):
    """Drop records emitted by excluded modules."""

    def __init__(self, exclude_modules: List[str]):
        super().__init__()
        self.exclude_modules = exclude_modules

    def filter(self, record):
        return record.module not in self.exclude_modules


class AnalyticsLogger:
    """Logging front-end for the analytics pipeline."""

    def __init__(self, config: Optional[LogConfig] = None):
        """Initialize logger.

        Args:
            config: Logging configuration
        """
        self.config = config or LogConfig()
        self.performance_tracker = PerformanceTracker()
        self.loggers = {}

        self._setup_logging()

        self.logger = self.get_logger('esg_analytics')
        self.logger.debug("ESG analytics logging initialized", extra={
            'extra_data': {
                'config': asdict(self.config),
                'startup_time': _utc_now()
            }
        })

    def _level(self, name: str) -> int:
        return getattr(logging, str(name).upper(), logging.INFO)

    def _rotating_handler(self, path: str) -> logging.Handler:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        return logging.handlers.RotatingFileHandler(
            path,
            maxBytes=self.config.max_file_size,
            backupCount=self.config.backup_count
        )

    def _build_formatter(self, log_format: str) -> logging.Formatter:
        if log_format == 'json':
            return JSONFormatter(self.config)
        if log_format == 'colored':
            return ColoredFormatter(self.config)
        return logging.Formatter(
            '%(asctime)s - %(levelname)s - %(module)s - %(funcName)s:%(lineno)d - %(message)s'
        )

    def _setup_logging(self):
        """Attach handlers to the root logger."""
        root_logger = logging.getLogger()
        root_logger.setLevel(self._level(self.config.log_level))
        root_logger.handlers.clear()

        if self.config.log_file:
            file_handler = self._rotating_handler(self.config.log_file)
            # colors do not belong in files
            file_format = 'text' if self.config.log_format == 'colored' else self.config.log_format
            file_handler.setFormatter(self._build_formatter(file_format))
            file_handler.setLevel(self._level(self.config.log_level))
            if self.config.exclude_modules:
                file_handler.addFilter(LogFilter(self.config.exclude_modules))
            root_logger.addHandler(file_handler)

        if self.config.console_logging:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(self._build_formatter(self.config.log_format))
            console_handler.setLevel(self._level(self.config.console_level))
            if self.config.exclude_modules:
                console_handler.addFilter(LogFilter(self.config.exclude_modules))
            root_logger.addHandler(console_handler)

        if self.config.error_file:
            error_handler = self._rotating_handler(self.config.error_file)
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(JSONFormatter(self.config))
            root_logger.addHandler(error_handler)

        perf_logger = logging.getLogger('performance')
        perf_logger.handlers.clear()
        if self.config.performance_logging and self.config.performance_file:
            perf_handler = self._rotating_handler(self.config.performance_file)
            perf_handler.setLevel(logging.INFO)
            perf_handler.setFormatter(JSONFormatter(self.config))
            perf_logger.addHandler(perf_handler)
            perf_logger.setLevel(logging.INFO)
            perf_logger.propagate = False

    def get_logger(self, name: str) -> logging.Logger:
        """Get or create a logger for a specific module.

        Args:
            name: Logger name (usually module name)

        Returns:
            Logger instance
        """
        if name not in self.loggers:
            self.loggers[name] = logging.getLogger(name)

        return self.loggers[name]

    def log_performance(self, operation: str, duration: float,
                        extra_data: Optional[Dict[str, Any]] = None):
        """Log performance metrics.

        Args:
            operation: Operation name
            duration: Duration in seconds
            extra_data: Additional performance data
        """
        if not self.config.performance_logging:
            return

        performance_data = {
            'operation': operation,
            'duration_seconds': duration,
            'timestamp': _utc_now()
        }

        if extra_data:
            performance_data.update(extra_data)

        logging.getLogger('performance').info(f"Performance: {operation}", extra={
            'performance_data': performance_data
        })

    def log_error(self, message: str, exception: Optional[BaseException] = None,
                  extra_data: Optional[Dict[str, Any]] = None):
        """Log error with detailed information.

        Args:
            message: Error message
            exception: Exception object
            extra_data: Additional error context
        """
        error_data = {
            'error_message': message,
            'timestamp': _utc_now()
        }

        if exception is not None:
            error_data.update({
                'exception_type': type(exception).__name__,
                'exception_message': str(exception)
            })

        if extra_data:
            error_data.update(extra_data)

        exc_info = (type(exception), exception, exception.__traceback__) if exception is not None else None
        self.logger.error(message, exc_info=exc_info, extra={
            'extra_data': error_data
        })

    def log_engine_failure(self, engine: str, exception: BaseException):
        """Record an engine that fell back to its default result.

        Args:
            engine: Engine name
            exception: The exception the engine raised
        """
        self.get_logger('esg_analytics.engines').warning(f"{engine} failed: {exception}", extra={
            'extra_data': {
                'engine': engine,
                'exception_type': type(exception).__name__,
                'exception_message': str(exception),
                'timestamp': _utc_now()
            }
        })

    def log_report_event(self, industry: str, region: str, degraded_sections: List[str]):
        """Log completion of an analytics report.

        Args:
            industry: Industry the report was generated for
            region: Region the report was generated for
            degraded_sections: Engines whose sections hold default values
        """
        level = logging.WARNING if degraded_sections else logging.INFO
        self.get_logger('esg_analytics.reports').log(level, f"Report generated for {industry}/{region}", extra={
            'extra_data': {
                'industry': industry,
                'region': region,
                'degraded_sections': list(degraded_sections),
                'timestamp': _utc_now()
            }
        })

    @contextmanager
    def performance_context(self, operation_name: str,
                            extra_data: Optional[Dict[str, Any]] = None,
                            log_errors: bool = True):
        """Context manager for performance tracking.

        Exceptions are re-raised, and logged first unless ``log_errors`` is off.

        Args:
            operation_name: Name of the operation
            extra_data: Additional performance data
            log_errors: Log exceptions before re-raising them
        """
        timer_id = self.performance_tracker.start_timer(operation_name)

        try:
            yield
        except Exception as e:
            if log_errors:
                self.log_error(f"Error in {operation_name}", e, extra_data)
            raise
        finally:
            duration = self.performance_tracker.end_timer(timer_id)

            perf_data = {'operation_name': operation_name}
            if extra_data:
                perf_data.update(extra_data)

            self.log_performance(operation_name, duration, perf_data)

    def get_performance_summary(self) -> Dict[str, Any]:
        """Get performance metrics summary.

        Returns:
            Dictionary with performance summary
        """
        metrics = self.performance_tracker.get_metrics()

        summary = {
            'timestamp': _utc_now(),
            'total_operations': len(metrics),
            'operations': metrics
        }

        if metrics:
            all_avg_times = [op['avg_time'] for op in metrics.values()]
            summary['overall_stats'] = {
                'fastest_avg_operation': min(all_avg_times),
                'slowest_avg_operation': max(all_avg_times),
                'mean_avg_time': sum(all_avg_times) / len(all_avg_times)
            }

        return summary

    def set_log_level(self, level: str) -> bool:
        """Change log level at runtime.

        Args:
            level: New log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)

        Returns:
            True if the level was recognised
        """
        if str(level).upper() not in LogLevel.__members__:
            self.logger.error(f"Invalid log level: {level}")
            return False

        new_level = getattr(logging, level.upper())
        for logger in self.loggers.values():
            logger.setLevel(new_level)
        logging.getLogger().setLevel(new_level)
        self.config.log_level = level.upper()

        self.logger.info(f"Log level changed to {level.upper()}")
        return True


# Global logger instance
_global_logger: Optional[AnalyticsLogger] = None


def get_logger(name: str = 'esg_analytics') -> logging.Logger:
    """Get a logger instance from the global AnalyticsLogger.

    Args:
        name: Logger name

    Returns:
        Logger instance
    """
    global _global_logger

    if _global_logger is None:
        _global_logger = AnalyticsLogger()

    return _global_logger.get_logger(name)


def setup_logging(config: Optional[LogConfig] = None) -> AnalyticsLogger:
    """Setup global logging configuration.

    Args:
        config: Logging configuration

    Returns:
        AnalyticsLogger instance
    """
    global _global_logger
    _global_logger = AnalyticsLogger(config)
    return _global_logger


def get_analytics_logger() -> Optional[AnalyticsLogger]:
    """The global AnalyticsLogger, if one was set up."""
    return _global_logger


@contextmanager
def performance_context(operation_name: str,
                        extra_data: Optional[Dict[str, Any]] = None,
                        log_errors: bool = True):
    """Performance tracking through the global logger; a no-op without one."""
    if _global_logger:
        with _global_logger.performance_context(operation_name, extra_data, log_errors):
            yield
    else:
        yield
