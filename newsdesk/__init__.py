"""
Newsdesk - Klaviyo account manager back end
===========================================

A small Flask proxy in front of the Klaviyo API with:
- A flat-file store of Klaviyo accounts (name + private API key)
- API key verification
- Mailing list lookup
- Adding a single subscriber to a list

Usage:
    from flask import Flask
    from newsdesk import Newsdesk

    app = Flask(__name__)
    newsdesk = Newsdesk(app)   # registers /api/* and /health
"""

__version__ = '0.1.0'

import json
import logging

from flask import jsonify
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from .core.account_store import AccountStore
from .core.config import Config, CONFIG_KEYS
from .core.logging_service import LoggingService, configure_logging
from .modules.accounts import accounts_bp
from .modules.klaviyo import KlaviyoClient
from .modules.ops import ops_health_bp
from .modules.subscribers import subscribers_bp

logger = logging.getLogger(__name__)

BLUEPRINTS = {
    'accounts': accounts_bp,
    'subscribers': subscribers_bp,
    'ops_health': ops_health_bp,
}


class Newsdesk:
    """
    Flask extension that owns the account store and the Klaviyo client.

    Route handlers reach both through app.extensions['newsdesk'], so tests
    (or a host app) can pass their own store or client:

        Newsdesk(app, store=AccountStore(path), client=KlaviyoClient(session=fake))
    """

    def __init__(self, app=None, store=None, client=None):
        self.store = store
        self.client = client
        self._registered = []

        if app is not None:
            self.init_app(app)

    def init_app(self, app):
        for key in CONFIG_KEYS:
            app.config.setdefault(key, getattr(Config, key))

        configure_logging(app.config['LOG_LEVEL'])

        if self.store is None:
            self.store = AccountStore(app.config['ACCOUNTS_FILE'])
        if self.client is None:
            self.client = KlaviyoClient(
                base_url=app.config['KLAVIYO_API_BASE'],
                revision=app.config['KLAVIYO_REVISION'],
                timeout=float(app.config['KLAVIYO_TIMEOUT']),
            )

        origins = app.config['CORS_ORIGINS']
        if isinstance(origins, str) and origins != '*':
            origins = [o.strip() for o in origins.split(',') if o.strip()]
        CORS(app, resources={r"/api/*": {"origins": origins}})

        for name, blueprint in BLUEPRINTS.items():
            app.register_blueprint(blueprint)
            self._registered.append(name)

        app.register_error_handler(Exception, self._handle_unexpected_error)

        app.extensions['newsdesk'] = self
        logger.info(f"Newsdesk initialised (accounts file: {self.store.path})")

    @staticmethod
    def _handle_unexpected_error(error):
        """Last-resort handler: any uncaught exception becomes a JSON 500"""
        if isinstance(error, HTTPException):
            # Keep the status and headers (e.g. Allow on a 405), swap in a JSON body
            response = error.get_response()
            response.set_data(json.dumps({'error': error.description}))
            response.content_type = 'application/json'
            return response
        LoggingService.log_error_with_traceback('app', error)
        return jsonify({'error': 'An unexpected error occurred'}), 500

    def get_registered_modules(self):
        return list(self._registered)


__all__ = ['Newsdesk', 'AccountStore', 'KlaviyoClient']
