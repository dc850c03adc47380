"""
Ops Routes
==========

GET /health -- reports whether the account store can be read.
HTTP 200 when ok, 503 when critical.
"""

from datetime import datetime
from flask import jsonify, current_app
from newsdesk.core.errors import PersistenceError
from . import ops_health_bp


def _check_account_store():
    store = current_app.extensions['newsdesk'].store
    try:
        count = len(store.list_accounts())
        return {'status': 'ok', 'accounts': count}
    except PersistenceError as e:
        return {'status': 'critical', 'error': e.message}


def _build_health_response():
    """Build the full health check response dict."""
    account_store = _check_account_store()
    status = account_store['status']

    return {
        'status': status,
        'timestamp': datetime.now().isoformat(),
        'checks': {
            'account_store': account_store,
        },
    }, status


@ops_health_bp.route('/')
@ops_health_bp.route('')
def health_check():
    """Public health endpoint for uptime monitors."""
    data, status = _build_health_response()
    code = 503 if status == 'critical' else 200
    return jsonify(data), code
