"""
Logging System for Number Mask.

Structured logging with rotating log files and categories for the
keystroke, formatting and caret events produced by masked fields.
"""

import logging
import logging.handlers
import json
import traceback
from pathlib import Path
from typing import Optional, Dict, Any, Union
from enum import Enum, auto
from datetime import datetime
import uuid


class LogLevel(Enum):
    """Log levels, including a TRACE level below DEBUG for per-keystroke noise."""
    TRACE = 5
    DEBUG = 10
    INFO = 20
    WARNING = 30
    ERROR = 40
    CRITICAL = 50


class LogCategory(Enum):
    """Categories for masking events."""
    SYSTEM = auto()
    CONFIG = auto()
    KEYSTROKE = auto()
    FORMAT = auto()
    CURSOR = auto()
    FIELD_EVENT = auto()
    USER_ACTION = auto()


class StructuredFormatter(logging.Formatter):
    """Formatter that appends structured fields as a JSON suffix."""

    def __init__(self, include_json=True):
        super().__init__()
        self.include_json = include_json

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).isoformat()
        basic_line = f"[{timestamp}] {record.levelname:8} {record.name}: {record.getMessage()}"

        structured_data = {}
        for key, value in record.__dict__.items():
            if key.startswith('field_') or key in ['category', 'session_id']:
                structured_data[key] = value

        if record.exc_info:
            structured_data['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': traceback.format_exception(*record.exc_info)
            }

        structured_data['location'] = {
            'filename': record.filename,
            'line': record.lineno,
            'function': record.funcName
        }

        if structured_data and self.include_json:
            json_data = json.dumps(structured_data, default=str, ensure_ascii=False)
            return f"{basic_line} | {json_data}"

        return basic_line


class MaskLogger:
    """Logger for Number Mask with a console and rotating file handlers."""

    def __init__(self, name: str = "numbermask", log_dir: Optional[Path] = None):
        self.name = name
        self.session_id = str(uuid.uuid4())[:8]

        if log_dir is None:
            log_dir = Path.home() / "NumberMask" / "logs"
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self._setup_loggers()

        self.info("Number Mask logging system initialized",
                  session_id=self.session_id,
                  log_dir=str(self.log_dir))

    def _setup_loggers(self):
        """Setup main logger and handlers."""
        self.logger = logging.getLogger(self.name)
        self.logger.setLevel(logging.DEBUG)
        # Repeated setup_logger() calls must not stack handlers
        for handler in list(self.logger.handlers):
            handler.close()
        self.logger.handlers.clear()

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(StructuredFormatter(include_json=False))
        self.logger.addHandler(console_handler)

        log_file = self.log_dir / f"{self.name}.log"
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=10*1024*1024, backupCount=5, encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(StructuredFormatter(include_json=True))
        self.logger.addHandler(file_handler)

        error_log_file = self.log_dir / f"{self.name}_errors.log"
        error_handler = logging.handlers.RotatingFileHandler(
            error_log_file, maxBytes=5*1024*1024, backupCount=5, encoding="utf-8"
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(StructuredFormatter(include_json=True))
        self.logger.addHandler(error_handler)

    def _log(self, level: int, message: str, category: Optional[Union[LogCategory, str]] = None,
             exception: Optional[Exception] = None, **kwargs):
        """Internal logging method."""
        if isinstance(category, LogCategory):
            category_name = category.name
        elif category:
            category_name = str(category).upper()
        else:
            category_name = 'GENERAL'

        extra = {
            'session_id': self.session_id,
            'category': category_name
        }
        for key, value in kwargs.items():
            if not key.startswith('_'):
                extra[f'field_{key}'] = value

        if exception:
            self.logger.log(level, message, exc_info=(type(exception), exception, exception.__traceback__), extra=extra)
        else:
            self.logger.log(level, message, extra=extra)

    def trace(self, message: str, category: Optional[LogCategory] = None, **kwargs):
        """Log trace message (per-keystroke detail)."""
        self._log(LogLevel.TRACE.value, message, category, **kwargs)

    def debug(self, message: str, category: Optional[LogCategory] = None, **kwargs):
        self._log(LogLevel.DEBUG.value, message, category, **kwargs)

    def info(self, message: str, category: Optional[LogCategory] = None, **kwargs):
        self._log(LogLevel.INFO.value, message, category, **kwargs)

    def warning(self, message: str, category: Optional[LogCategory] = None, **kwargs):
        self._log(LogLevel.WARNING.value, message, category, **kwargs)

    def error(self, message: str, exception: Optional[Exception] = None,
              category: Optional[LogCategory] = None, **kwargs):
        self._log(LogLevel.ERROR.value, message, category, exception, **kwargs)

    def critical(self, message: str, exception: Optional[Exception] = None,
                 category: Optional[LogCategory] = None, **kwargs):
        self._log(LogLevel.CRITICAL.value, message, category, exception, **kwargs)

    def field_event(self, message: str, **kwargs):
        """Log a masked-field lifecycle event (install, blur, programmatic write)."""
        self._log(LogLevel.INFO.value, f"FIELD EVENT: {message}",
                  LogCategory.FIELD_EVENT, **kwargs)

    def log_user_action(self, action: str, details: Optional[Dict[str, Any]] = None):
        """Log user actions for debugging."""
        log_data = {'action': action}
        if details:
            log_data.update(details)
        self._log(LogLevel.INFO.value, f"USER ACTION: {action}",
                  LogCategory.USER_ACTION, **log_data)

    def log_keystroke(self, key: str, accepted: bool, **kwargs):
        """Log a key filter decision."""
        verdict = "accepted" if accepted else "rejected"
        self._log(LogLevel.TRACE.value if accepted else LogLevel.DEBUG.value,
                  f"KEY: {key!r} {verdict}", LogCategory.KEYSTROKE,
                  key=key, accepted=accepted, **kwargs)

    def log_reformat(self, raw: str, display: str, mode: str, **kwargs):
        """Log a display rewrite."""
        self._log(LogLevel.TRACE.value, f"FORMAT[{mode}]: {raw!r} -> {display!r}",
                  LogCategory.FORMAT, raw=raw, display=display, mode=mode, **kwargs)

    def set_log_level(self, level: Union[str, int, LogLevel]):
        """Set the logging level."""
        if isinstance(level, LogLevel):
            level = level.value
        elif isinstance(level, str):
            level = getattr(logging, level.upper())
        self.logger.setLevel(level)
        self.info(f"Log level set to: {logging.getLevelName(level)}", category=LogCategory.SYSTEM)


logging.addLevelName(LogLevel.TRACE.value, "TRACE")

# Global logger instance
_global_logger: Optional[MaskLogger] = None


def get_logger() -> MaskLogger:
    """Get the global logger instance."""
    global _global_logger
    if _global_logger is None:
        _global_logger = MaskLogger()
    return _global_logger


def setup_logger(name: str = "numbermask", log_dir: Optional[Path] = None) -> MaskLogger:
    """Set up and return the global logger."""
    global _global_logger
    _global_logger = MaskLogger(name, log_dir)
    return _global_logger


class LoggableMixin:
    """Mixin class to add logging capabilities to other classes."""

    def __init__(self):
        self._logger = get_logger()
        self._module_name = self.__class__.__name__

    def log_trace(self, message: str, **kwargs):
        self._logger.trace(f"[{self._module_name}] {message}", **kwargs)

    def log_debug(self, message: str, **kwargs):
        self._logger.debug(f"[{self._module_name}] {message}", **kwargs)

    def log_info(self, message: str, **kwargs):
        self._logger.info(f"[{self._module_name}] {message}", **kwargs)

    def log_warning(self, message: str, **kwargs):
        self._logger.warning(f"[{self._module_name}] {message}", **kwargs)

    def log_error(self, message: str, exception: Optional[Exception] = None, **kwargs):
        self._logger.error(f"[{self._module_name}] {message}", exception=exception, **kwargs)

    def log_field_event(self, message: str, **kwargs):
        self._logger.field_event(f"[{self._module_name}] {message}", **kwargs)
