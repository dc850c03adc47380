"""
Klaviyo Client Tests
====================

KlaviyoClient against FakeSession: auth headers, list mapping and paging,
the two-step subscribe workflow, and error normalization.
"""

import pytest
import requests

from newsdesk.core.errors import UpstreamError
from newsdesk.modules.klaviyo import normalize_upstream_error
from newsdesk.modules.klaviyo.client import LISTS_FALLBACK, SUBSCRIBE_FALLBACK, VERIFY_FALLBACK


def klaviyo_error(detail, status=400, **extra):
    error = {'status': status, 'detail': detail}
    error.update(extra)
    return {'errors': [error]}


PROFILE_PATH = '/profiles/'
ATTACH_PATH = '/lists/list1/relationships/profiles/'


# ---------------------------------------------------------------------------
# Error normalization
# ---------------------------------------------------------------------------

def test_normalize_uses_first_error_detail(fake_session, klaviyo):
    fake_session.add('GET', '/lists/', 401, klaviyo_error('Invalid key', 401))
    with pytest.raises(UpstreamError) as exc_info:
        klaviyo.verify_credentials('bad-key')
    assert exc_info.value.status_code == 401
    assert exc_info.value.message == 'Invalid key'


@pytest.mark.parametrize('body', [None, {}, {'errors': []}, {'errors': [{}]}, ['oops']])
def test_normalize_falls_back_on_missing_detail(fake_session, klaviyo, body):
    fake_session.add('GET', '/lists/', 503, body)
    with pytest.raises(UpstreamError) as exc_info:
        klaviyo.verify_credentials('key')
    assert exc_info.value.status_code == 503
    assert exc_info.value.message == VERIFY_FALLBACK


def test_network_failure_defaults_to_500(fake_session, klaviyo):
    fake_session.add_error('GET', '/lists/', requests.ConnectionError('connection refused'))
    with pytest.raises(UpstreamError) as exc_info:
        klaviyo.fetch_lists('key')
    assert exc_info.value.status_code == 500
    assert exc_info.value.message == LISTS_FALLBACK


def test_normalize_without_response():
    error = normalize_upstream_error(requests.Timeout('timed out'), 'fallback')
    assert error.status_code == 500
    assert error.message == 'fallback'


# ---------------------------------------------------------------------------
# verify_credentials
# ---------------------------------------------------------------------------

def test_verify_sends_auth_and_revision_headers(fake_session, klaviyo):
    fake_session.add('GET', '/lists/', 200, {'data': []})

    klaviyo.verify_credentials('pk_live_123')

    call = fake_session.calls[0]
    assert call['headers']['Authorization'] == 'Klaviyo-API-Key pk_live_123'
    assert call['headers']['revision'] == '2023-02-22'
    assert call['timeout'] == 5


# ---------------------------------------------------------------------------
# fetch_lists
# ---------------------------------------------------------------------------

def test_fetch_lists_maps_id_and_name(fake_session, klaviyo):
    fake_session.add('GET', '/lists/', 200, {
        'data': [
            {'type': 'list', 'id': 'L1', 'attributes': {'name': 'Newsletter'}},
            {'type': 'list', 'id': 'L2', 'attributes': {'name': 'VIP'}},
        ],
        'links': {'next': None},
    })

    assert klaviyo.fetch_lists('key') == [
        {'id': 'L1', 'name': 'Newsletter'},
        {'id': 'L2', 'name': 'VIP'},
    ]


def test_fetch_lists_follows_next_links(fake_session, klaviyo):
    next_url = 'https://klaviyo.test/api/lists/?page[cursor]=abc'
    fake_session.add('GET', '/lists/', 200, {
        'data': [{'id': 'L1', 'attributes': {'name': 'First'}}],
        'links': {'next': next_url},
    })
    fake_session.add('GET', next_url, 200, {
        'data': [{'id': 'L2', 'attributes': {'name': 'Second'}}],
        'links': {},
    })

    assert [l['id'] for l in klaviyo.fetch_lists('key')] == ['L1', 'L2']
    assert len(fake_session.calls) == 2


def test_fetch_lists_malformed_body_is_upstream_error(fake_session, klaviyo):
    fake_session.add('GET', '/lists/', 200, {'unexpected': True})
    with pytest.raises(UpstreamError) as exc_info:
        klaviyo.fetch_lists('key')
    assert exc_info.value.status_code == 500
    assert exc_info.value.message == LISTS_FALLBACK


# ---------------------------------------------------------------------------
# subscribe_email
# ---------------------------------------------------------------------------

def test_subscribe_happy_path(fake_session, klaviyo):
    fake_session.add('POST', PROFILE_PATH, 201, {'data': {'type': 'profile', 'id': 'p1'}})
    fake_session.add('POST', ATTACH_PATH, 204)

    klaviyo.subscribe_email('key', 'x@y.com', 'list1')

    upserts = fake_session.calls_to('POST', PROFILE_PATH)
    attaches = fake_session.calls_to('POST', ATTACH_PATH)
    assert len(upserts) == 1
    assert len(attaches) == 1
    assert upserts[0]['json'] == {'data': {'type': 'profile', 'attributes': {'email': 'x@y.com'}}}
    assert attaches[0]['json'] == {'data': [{'type': 'profile', 'id': 'p1'}]}


def test_subscribe_attach_failure_keeps_profile(fake_session, klaviyo):
    fake_session.add('POST', PROFILE_PATH, 201, {'data': {'type': 'profile', 'id': 'p1'}})
    fake_session.add('POST', ATTACH_PATH, 429, klaviyo_error('Request was throttled.', 429))

    with pytest.raises(UpstreamError) as exc_info:
        klaviyo.subscribe_email('key', 'x@y.com', 'list1')

    assert exc_info.value.status_code == 429
    assert exc_info.value.message == 'Request was throttled.'
    # The upsert happened and nothing tried to undo it
    assert len(fake_session.calls_to('POST', PROFILE_PATH)) == 1
    assert [c['method'] for c in fake_session.calls] == ['POST', 'POST']


def test_subscribe_upsert_failure_skips_attach(fake_session, klaviyo):
    fake_session.add('POST', PROFILE_PATH, 400, klaviyo_error('Invalid email address', 400))

    with pytest.raises(UpstreamError) as exc_info:
        klaviyo.subscribe_email('key', 'x@y.com', 'list1')

    assert exc_info.value.status_code == 400
    assert exc_info.value.message == 'Invalid email address'
    assert fake_session.calls_to('POST', ATTACH_PATH) == []


def test_subscribe_existing_profile_uses_duplicate_id(fake_session, klaviyo):
    fake_session.add('POST', PROFILE_PATH, 409, klaviyo_error(
        'A profile already exists with one of these identifiers.', 409,
        meta={'duplicate_profile_id': 'p-existing'},
    ))
    fake_session.add('POST', ATTACH_PATH, 204)

    assert klaviyo.subscribe_email('key', 'x@y.com', 'list1') == 'p-existing'
    attach = fake_session.calls_to('POST', ATTACH_PATH)[0]
    assert attach['json'] == {'data': [{'type': 'profile', 'id': 'p-existing'}]}


def test_subscribe_conflict_without_duplicate_id_fails(fake_session, klaviyo):
    fake_session.add('POST', PROFILE_PATH, 409, klaviyo_error('Conflict', 409))

    with pytest.raises(UpstreamError) as exc_info:
        klaviyo.subscribe_email('key', 'x@y.com', 'list1')

    assert exc_info.value.status_code == 409
    assert exc_info.value.message == 'Conflict'
    assert fake_session.calls_to('POST', ATTACH_PATH) == []


def test_subscribe_profile_without_id_is_upstream_error(fake_session, klaviyo):
    fake_session.add('POST', PROFILE_PATH, 201, {'data': {}})

    with pytest.raises(UpstreamError) as exc_info:
        klaviyo.subscribe_email('key', 'x@y.com', 'list1')

    assert exc_info.value.status_code == 500
    assert exc_info.value.message == SUBSCRIBE_FALLBACK
