"""Custom exceptions for the arXiv search MCP server."""

from typing import Optional, Any, Dict


class ArxivSearchError(Exception):
    """Base exception for all arXiv search related errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(ArxivSearchError):
    """Raised when tool-call input validation fails."""

    def __init__(self, message: str, field: Optional[str] = None, value: Optional[Any] = None):
        self.field = field
        self.value = value
        details = {}
        if field:
            details['field'] = field
        if value is not None:
            details['value'] = str(value)
        super().__init__(message, details)


class NetworkError(ArxivSearchError):
    """Raised on transient network failures (timeouts, dropped connections, 429/5xx)."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        self.original_error = original_error
        details = {}
        if original_error:
            details['original_error'] = str(original_error)
            details['error_type'] = type(original_error).__name__
        super().__init__(message, details)


class ArxivAPIError(ArxivSearchError):
    """Raised when the arXiv API rejects a request."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_text: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.status_code = status_code
        self.response_text = response_text
        details = dict(details or {})
        if status_code:
            details['status_code'] = status_code
        super().__init__(message, details)


class ParseError(ArxivSearchError):
    """Raised when a response body is not a recognizable arXiv feed."""

    def __init__(self, message: str, body_preview: Optional[str] = None):
        self.body_preview = body_preview
        details = {}
        if body_preview:
            details['body_preview'] = body_preview
        super().__init__(message, details)


class SearchError(ArxivSearchError):
    """Raised when a search or lookup fails after retries are exhausted."""

    def __init__(
        self,
        message: str,
        query: Optional[str] = None,
        cause: Optional[Exception] = None
    ):
        self.query = query
        self.cause = cause
        details = {}
        if query:
            details['query'] = query
        if cause is not None:
            details['cause'] = str(cause)
            details['cause_type'] = type(cause).__name__
        super().__init__(message, details)


class ConfigurationError(ArxivSearchError):
    """Raised when there are configuration-related issues."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        self.config_key = config_key
        details = {}
        if config_key:
            details['config_key'] = config_key
        super().__init__(message, details)


def format_error_for_user(error: Exception) -> str:
    """
    Format an error for user-friendly display.

    Args:
        error: The exception to format

    Returns:
        User-friendly error message
    """
    if isinstance(error, ValidationError):
        field_msg = f" (field: {error.field})" if error.field else ""
        return f"Invalid input: {error.message}{field_msg}"

    elif isinstance(error, SearchError):
        return error.message

    elif isinstance(error, NetworkError):
        return f"Network error: {error.message}. Please check your internet connection."

    elif isinstance(error, ParseError):
        return f"Could not read the arXiv response: {error.message}"

    elif isinstance(error, ArxivAPIError):
        if error.status_code:
            return f"arXiv API error ({error.status_code}): {error.message}"
        return f"arXiv API error: {error.message}"

    elif isinstance(error, ConfigurationError):
        return f"Configuration error: {error.message}"

    elif isinstance(error, ArxivSearchError):
        return f"Error: {error.message}"

    else:
        return f"Unexpected error: {str(error)}"
