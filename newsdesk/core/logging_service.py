"""
Centralized logging service for Newsdesk.
Structured log lines with request context, written through the standard
logging module so any handler configured by the host app picks them up.
"""

import json
import logging
import traceback

from flask import request, has_request_context

_log = logging.getLogger('newsdesk')


def configure_logging(level='INFO'):
    """Attach a console handler to the newsdesk logger (once)"""
    if not _log.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            '[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s'
        ))
        _log.addHandler(handler)
    _log.setLevel(getattr(logging, str(level).upper(), logging.INFO))


def mask_api_key(api_key):
    """Show only enough of a key to tell accounts apart"""
    if not api_key:
        return ''
    return api_key[:6] + '...'


class LoggingService:
    """Application-wide structured logging"""

    @staticmethod
    def _get_request_context():
        """Extract request context information"""
        if not has_request_context():
            return None, None

        ip_address = request.headers.get('X-Forwarded-For', request.remote_addr)
        if ip_address and ',' in ip_address:
            ip_address = ip_address.split(',')[0].strip()

        return ip_address, request.path

    @staticmethod
    def log(level, source, message, details=None):
        """
        Log a message

        Args:
            level (str): Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            source (str): Source component (accounts, klaviyo, subscribers, ...)
            message (str): Main log message
            details (str/dict): Additional details (JSON-encoded if dict)
        """
        ip_address, request_path = LoggingService._get_request_context()

        if isinstance(details, dict):
            details = json.dumps(details, default=str)

        line = f"[{source}] {message}"
        if request_path:
            line += f" (path={request_path}, ip={ip_address})"
        if details:
            line += f" details={details}"

        logging.getLogger(f'newsdesk.{source}').log(
            getattr(logging, level.upper(), logging.INFO), line
        )

    @staticmethod
    def debug(source, message, details=None):
        LoggingService.log('DEBUG', source, message, details)

    @staticmethod
    def info(source, message, details=None):
        LoggingService.log('INFO', source, message, details)

    @staticmethod
    def warning(source, message, details=None):
        LoggingService.log('WARNING', source, message, details)

    @staticmethod
    def error(source, message, details=None):
        LoggingService.log('ERROR', source, message, details)

    @staticmethod
    def log_api_call(source, endpoint, method='GET', status_code=200, details=None):
        """Log an upstream API call"""
        message = f"API {method} {endpoint} - Status: {status_code}"
        level = 'INFO' if 200 <= status_code < 400 else 'WARNING' if status_code < 500 else 'ERROR'
        LoggingService.log(level, source, message, details)

    @staticmethod
    def log_error_with_traceback(source, error, details=None):
        """Log error with full traceback"""
        error_details = {
            'error_type': type(error).__name__,
            'error_message': str(error),
            'traceback': traceback.format_exc()
        }
        if details:
            error_details['additional_details'] = details

        LoggingService.error(source, f"Exception occurred: {type(error).__name__}", error_details)


# Convenience instance for easy importing
logger = LoggingService()
