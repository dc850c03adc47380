"""
Accounts Module
===============

CRUD API over the flat-file account store.

Usage:
    from newsdesk.modules.accounts import accounts_bp

    app.register_blueprint(accounts_bp)  # Registers at /api/accounts
"""

from flask import Blueprint

accounts_bp = Blueprint(
    'accounts',
    __name__,
    url_prefix='/api/accounts'
)

from . import routes
