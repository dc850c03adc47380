"""
Subscribers Module
==================

Klaviyo proxy endpoints:
- POST /api/check-status -- verify an API key
- GET /api/lists/<account_id> -- mailing lists for a stored account
- POST /api/add-subscriber -- add one email to a list
"""

from flask import Blueprint

subscribers_bp = Blueprint(
    'subscribers',
    __name__,
    url_prefix='/api'
)

from . import routes
