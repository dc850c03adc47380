"""
Subscribers Routes
==================

Provides:
- POST /check-status -- verify an API key against Klaviyo
- GET /lists/<account_id> -- Klaviyo lists for a stored account
- POST /add-subscriber -- upsert a profile and attach it to a list

Upstream failures keep Klaviyo's status code so the UI can tell a bad key
(401/403) from a transient error (429/5xx).
"""

import re
import logging
from flask import request, jsonify, current_app
from newsdesk.core.errors import NotFoundError, PersistenceError, UpstreamError, ValidationError
from newsdesk.core.logging_service import LoggingService, mask_api_key
from . import subscribers_bp

# Email validation regex — rejects consecutive dots, leading/trailing dots
EMAIL_REGEX = re.compile(r'^[a-zA-Z0-9_%+-]+(\.[a-zA-Z0-9_%+-]+)*@[a-zA-Z0-9-]+(\.[a-zA-Z0-9-]+)*\.[a-zA-Z]{2,}$')

logger = logging.getLogger(__name__)


def _get_store():
    return current_app.extensions['newsdesk'].store


def _get_client():
    return current_app.extensions['newsdesk'].client


def validate_email(email):
    """Validate email format"""
    if not email or len(email) > 255:
        return False
    return EMAIL_REGEX.match(email.lower().strip()) is not None


def _require_fields(data, *fields):
    """Raise ValidationError unless every field is present and non-empty"""
    if not isinstance(data, dict):
        raise ValidationError(f"{', '.join(fields)} are required")
    missing = [f for f in fields if not data.get(f)]
    if missing:
        raise ValidationError(f"{', '.join(missing)} required")


def _upstream_failure(error):
    """JSON body + status for an UpstreamError"""
    return jsonify({
        'success': False,
        'message': error.message,
        'statusCode': error.status_code,
    }), error.status_code


@subscribers_bp.route('/check-status', methods=['POST'])
def check_status():
    data = request.get_json(silent=True)
    try:
        _require_fields(data, 'apiKey')
    except ValidationError:
        return jsonify({'success': False, 'message': 'apiKey is required'}), 400

    api_key = data['apiKey']
    try:
        _get_client().verify_credentials(api_key)
    except UpstreamError as e:
        LoggingService.warning('subscribers', 'Klaviyo status check failed', {
            'key': mask_api_key(api_key),
            'statusCode': e.status_code,
            'message': e.message,
        })
        return _upstream_failure(e)

    return jsonify({'success': True, 'message': 'Successfully connected to Klaviyo.'})


@subscribers_bp.route('/lists/<account_id>', methods=['GET'])
def get_lists(account_id):
    try:
        account = _get_store().get_account(account_id)
        lists = _get_client().fetch_lists(account['apiKey'])
        return jsonify(lists)
    except NotFoundError:
        return jsonify({'error': 'Account not found'}), 404
    except PersistenceError as e:
        LoggingService.error('subscribers', 'Error reading accounts', {'error': e.message})
        return jsonify({'error': 'Failed to read accounts file.'}), 500
    except UpstreamError as e:
        logger.error(f"Klaviyo API Error: {e.message}")
        return jsonify({'error': e.message, 'statusCode': e.status_code}), e.status_code


@subscribers_bp.route('/add-subscriber', methods=['POST'])
def add_subscriber():
    data = request.get_json(silent=True)
    try:
        _require_fields(data, 'email', 'listId', 'accountId')
    except ValidationError:
        return jsonify({'error': 'Email, List ID, and Account ID are required'}), 400

    email = data['email'].strip() if isinstance(data['email'], str) else data['email']
    if not isinstance(email, str) or not validate_email(email):
        return jsonify({'error': 'Please enter a valid email address'}), 400
    list_id = data['listId']

    try:
        account = _get_store().get_account(data['accountId'])
    except NotFoundError:
        return jsonify({'error': 'Account not found'}), 404
    except PersistenceError as e:
        LoggingService.error('subscribers', 'Error reading accounts', {'error': e.message})
        return jsonify({'error': 'Failed to read accounts file.'}), 500

    try:
        _get_client().subscribe_email(account['apiKey'], email, list_id)
    except UpstreamError as e:
        LoggingService.warning('subscribers', f'Failed to add {email} to list {list_id}', {
            'account': account.get('id'),
            'statusCode': e.status_code,
            'message': e.message,
        })
        return _upstream_failure(e)

    LoggingService.info('subscribers', f'Added {email} to list {list_id}', {'account': account.get('id')})
    return jsonify({'success': True, 'message': f'Successfully added {email} to the list.'})
