"""Logging configuration for the arXiv search MCP server."""

import functools
import json
import logging
import logging.handlers
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, Optional

import colorlog

from .config import get_settings, LoggingConfig
from .exceptions import ConfigurationError

# Attributes every LogRecord carries; anything else came in through `extra`.
_RESERVED_ATTRS = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'lineno', 'funcName', 'created',
    'msecs', 'relativeCreated', 'thread', 'threadName',
    'processName', 'process', 'exc_info', 'exc_text', 'stack_info',
    'taskName', 'message', 'asctime',
}


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, ensure_ascii=False, default=str)


class ColoredFormatter(colorlog.ColoredFormatter):
    """Colored console formatter for development."""

    def __init__(self):
        super().__init__(
            '%(log_color)s%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S',
            log_colors={
                'DEBUG': 'cyan',
                'INFO': 'green',
                'WARNING': 'yellow',
                'ERROR': 'red',
                'CRITICAL': 'red,bg_white',
            }
        )


class TextFormatter(logging.Formatter):
    """Standard text formatter."""

    def __init__(self):
        super().__init__(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s [%(filename)s:%(lineno)d]',
            datefmt='%Y-%m-%d %H:%M:%S'
        )


def setup_logging(config: Optional[LoggingConfig] = None) -> None:
    """
    Setup logging configuration.

    Console output goes to stderr: stdout is reserved for the MCP stdio transport.

    Args:
        config: Optional logging configuration. If None, uses settings from config module.
    """
    if config is None:
        config = get_settings().logging

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    log_level = getattr(logging, config.level.upper(), logging.INFO)
    root_logger.setLevel(log_level)

    if config.format == "json":
        formatter = JSONFormatter()
    elif config.format == "colored":
        formatter = ColoredFormatter()
    else:  # text
        formatter = TextFormatter()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if config.file_path:
        try:
            file_path = Path(config.file_path)
            file_path.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                filename=config.file_path,
                maxBytes=config.max_file_size,
                backupCount=config.backup_count,
                encoding='utf-8'
            )
            # File logs are always structured
            file_handler.setFormatter(JSONFormatter())
            root_logger.addHandler(file_handler)

        except OSError as e:
            logging.getLogger(__name__).error(f"Failed to setup file logging: {e}")

    setup_logger_hierarchy(log_level)


def setup_logger_hierarchy(log_level: int, debug: Optional[bool] = None) -> None:
    """Setup logger hierarchy with appropriate levels."""
    logging.getLogger('arxiv_search_mcp').setLevel(log_level)

    # Third-party library loggers
    logging.getLogger('httpx').setLevel(logging.WARNING)
    logging.getLogger('httpcore').setLevel(logging.WARNING)
    logging.getLogger('feedparser').setLevel(logging.WARNING)

    if debug is None:
        try:
            debug = get_settings().server.debug
        except ConfigurationError:
            debug = False

    if debug:
        logging.getLogger('arxiv_search_mcp').setLevel(logging.DEBUG)
        logging.getLogger('httpx').setLevel(logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name.

    Args:
        name: Logger name

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


def log_function_call_decorator(logger_instance=None):
    """
    Trace calls to an async MCP tool handler.

    Args:
        logger_instance: Logger to use, defaults to arxiv_search_mcp.tools

    Returns:
        Decorator wrapping a coroutine function
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            func_logger = logger_instance or get_logger('arxiv_search_mcp.tools')
            func_logger.debug(f"Tool call: {func.__name__} {kwargs}")
            start_time = time.monotonic()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                func_logger.error(f"Tool {func.__name__} failed: {e}")
                raise
            func_logger.debug(f"Tool {func.__name__} finished in {time.monotonic() - start_time:.2f}s")
            return result

        return wrapper

    return decorator


def log_api_request(url: str, method: str = 'GET', **kwargs) -> None:
    """
    Log an API request.

    Args:
        url: Request URL
        method: HTTP method
        **kwargs: Additional request details
    """
    logger = get_logger('arxiv_search_mcp.api')
    logger.debug(f"API request: {method} {url}", extra={
        'url': url,
        'method': method,
        'request_details': kwargs
    })


def log_api_response(url: str, status_code: int, response_time: float) -> None:
    """
    Log an API response.

    Args:
        url: Request URL
        status_code: HTTP status code
        response_time: Response time in seconds
    """
    logger = get_logger('arxiv_search_mcp.api')
    extra = {
        'url': url,
        'status_code': status_code,
        'response_time': response_time
    }

    if status_code >= 400:
        logger.warning(f"API error response: {status_code} for {url}", extra=extra)
    else:
        logger.debug(f"API response: {status_code} for {url} in {response_time:.2f}s", extra=extra)


def log_error(error: Exception, context: Optional[Dict[str, Any]] = None) -> None:
    """
    Log an error with context.

    Args:
        error: The exception that occurred
        context: Additional context information
    """
    logger = get_logger('arxiv_search_mcp.errors')

    error_data = {
        'error_type': type(error).__name__,
        'error_message': str(error),
    }

    if context:
        error_data['context'] = context

    logger.error(f"Error occurred: {error}", extra=error_data, exc_info=error)
