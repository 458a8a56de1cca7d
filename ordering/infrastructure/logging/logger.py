"""
Structured logging for the ordering components.

Every call takes keyword context such as order ids, versions and prices.
Console output uses the configured ``log_format`` with the context appended
as ``key=value`` pairs; log files get one JSON object per record.
"""

import logging
import json
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional
from pathlib import Path

from ordering.domain.interfaces.base import ILogger
from ordering.domain.models.configuration import DEFAULT_LOG_FORMAT, OrderingConfiguration
from ordering.domain.models.identity import Id
from ordering.domain.models.version import Version

ROOT_LOGGER_NAME = "ordering"


def render_value(value: Any) -> Any:
    """Convert a context value into something JSON can hold without losing meaning."""
    if value is None or isinstance(value, (str, bool, int, float)):
        return value

    if isinstance(value, (Id, Version)):
        return str(value)

    # prices keep their exact digits
    if isinstance(value, Decimal):
        return str(value)

    if isinstance(value, Enum):
        return render_value(value.value)

    if isinstance(value, dict):
        return {str(key): render_value(item) for key, item in value.items()}

    if isinstance(value, (list, tuple, set, frozenset)):
        return [render_value(item) for item in value]

    return str(value)


def render_context(context: Dict[str, Any]) -> Dict[str, Any]:
    return {key: render_value(value) for key, value in context.items()}


class StructuredLogger:
    """Logger that carries keyword context with every record."""

    def __init__(self, name: str, level: str = "INFO", log_file: Optional[str] = None,
                 log_format: str = DEFAULT_LOG_FORMAT):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.getLevelName(level.upper()))
        # Records stop here; the root logger would print them a second time
        self.logger.propagate = False

        for handler in list(self.logger.handlers):
            self.logger.removeHandler(handler)
            handler.close()

        console_handler = logging.StreamHandler()
        console_handler.setFormatter(ContextFormatter(log_format))
        self.logger.addHandler(console_handler)

        if log_file:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setFormatter(StructuredFormatter())
            self.logger.addHandler(file_handler)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, message, kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        self._log(logging.CRITICAL, message, kwargs)

    def _log(self, level: int, message: str, context: Dict[str, Any]) -> None:
        if not self.logger.isEnabledFor(level):
            return

        extra = {
            'context': render_context(context),
            'timestamp': datetime.now().isoformat(),
            'component': render_value(context.get('component', 'unknown'))
        }

        self.logger.log(level, message, extra=extra)


class ContextFormatter(logging.Formatter):
    """Text formatter using the configured format, followed by the record's context."""

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)

        context = getattr(record, 'context', {})
        pairs = [f"{key}={value}" for key, value in context.items() if key != 'component']
        if pairs:
            line = f"{line} | {' '.join(pairs)}"

        return line


class StructuredFormatter(logging.Formatter):
    """JSON formatter for log files."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': getattr(record, 'timestamp', datetime.now().isoformat()),
            'level': record.levelname,
            'component': getattr(record, 'component', 'unknown'),
            'message': record.getMessage(),
            'logger': record.name
        }

        context = getattr(record, 'context', {})
        if context:
            log_data['context'] = render_context(context)

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data, ensure_ascii=False)


class LoggerFactory:
    """Builds loggers under the ``ordering`` namespace."""

    @staticmethod
    def create_logger(name: str, level: str = "INFO", log_file: Optional[str] = None,
                      log_format: str = DEFAULT_LOG_FORMAT) -> ILogger:
        return StructuredLogger(name, level, log_file, log_format)

    @staticmethod
    def create_component_logger(component_name: str, config: OrderingConfiguration) -> ILogger:
        """Create the logger for one component, writing ``<log_dir>/<component>.log`` when a directory is set."""
        log_file = None
        if config.log_dir:
            log_file = str(Path(config.log_dir) / f"{component_name}.log")

        return StructuredLogger(
            f"{ROOT_LOGGER_NAME}.{component_name}", config.log_level, log_file, config.log_format
        )
