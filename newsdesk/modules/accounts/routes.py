"""
Accounts Routes
===============

Provides:
- GET /api/accounts -- all account records, in insertion order
- POST /api/accounts -- create an account (client may supply the id)
- PUT /api/accounts/<id> -- merge fields into an account
- DELETE /api/accounts/<id> -- remove an account (unknown id is a no-op)
"""

import logging
from flask import request, jsonify, current_app
from newsdesk.core.errors import NotFoundError, PersistenceError, ValidationError
from newsdesk.core.logging_service import LoggingService
from . import accounts_bp

logger = logging.getLogger(__name__)


def _get_store():
    """The AccountStore owned by the Newsdesk extension"""
    return current_app.extensions['newsdesk'].store


@accounts_bp.route('', methods=['GET'])
def list_accounts():
    try:
        return jsonify(_get_store().list_accounts())
    except PersistenceError as e:
        LoggingService.error('accounts', 'Error reading accounts', {'error': e.message})
        return jsonify({'error': 'Failed to read accounts file.'}), 500


@accounts_bp.route('', methods=['POST'])
def create_account():
    data = request.get_json(silent=True)
    try:
        account = _get_store().create_account(data)
        return jsonify(account), 201
    except ValidationError as e:
        return jsonify({'error': e.message}), 400
    except PersistenceError as e:
        LoggingService.error('accounts', 'Error adding account', {'error': e.message})
        return jsonify({'error': 'Failed to add account.'}), 500


@accounts_bp.route('/<account_id>', methods=['PUT'])
def update_account(account_id):
    data = request.get_json(silent=True)
    try:
        account = _get_store().update_account(account_id, data)
        return jsonify(account)
    except ValidationError as e:
        return jsonify({'error': e.message}), 400
    except NotFoundError:
        return jsonify({'error': 'Account not found'}), 404
    except PersistenceError as e:
        LoggingService.error('accounts', f'Error updating account {account_id}', {'error': e.message})
        return jsonify({'error': 'Failed to update account.'}), 500


@accounts_bp.route('/<account_id>', methods=['DELETE'])
def delete_account(account_id):
    try:
        _get_store().delete_account(account_id)
        return '', 204
    except PersistenceError as e:
        LoggingService.error('accounts', f'Error deleting account {account_id}', {'error': e.message})
        return jsonify({'error': 'Failed to delete account.'}), 500
