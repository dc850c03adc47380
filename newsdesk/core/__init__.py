"""
Newsdesk Core
=============

Configuration, errors, logging and the flat-file account store.
"""

from .config import Config
from .account_store import AccountStore
from .errors import NewsdeskError, NotFoundError, PersistenceError, UpstreamError, ValidationError
from .logging_service import LoggingService, logger

__all__ = [
    'Config', 'AccountStore', 'LoggingService', 'logger',
    'NewsdeskError', 'NotFoundError', 'PersistenceError', 'UpstreamError', 'ValidationError',
]
