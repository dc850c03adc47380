"""
Shared fixtures for the Newsdesk test suite.

Klaviyo is never called for real: FakeSession stands in for requests.Session
and hands back real requests.Response objects, so raise_for_status() and
.json() behave exactly as they do in production.
"""

import json
import os
import shutil
import tempfile

import pytest
import requests

from newsdesk.app import create_app
from newsdesk.core.account_store import AccountStore
from newsdesk.modules.klaviyo import KlaviyoClient

KLAVIYO_BASE = "https://klaviyo.test/api"


def make_response(status_code, body=None, url=KLAVIYO_BASE):
    """Build a requests.Response with a JSON body (or no body at all)"""
    resp = requests.Response()
    resp.status_code = status_code
    resp.url = url
    resp._content = json.dumps(body).encode() if body is not None else b''
    resp.headers['Content-Type'] = 'application/json'
    return resp


class FakeSession:
    """
    Records every request and answers from a table of canned responses.

    Register answers with add(method, path, status, body). Several answers for
    the same route are returned in order; the last one repeats. An exception
    instance registered with add_error() is raised instead.
    """

    def __init__(self, base_url=KLAVIYO_BASE):
        self.base_url = base_url
        self.routes = {}
        self.calls = []

    def add(self, method, path, status, body=None):
        url = path if path.startswith('http') else self.base_url + path
        self.routes.setdefault((method, url), []).append(make_response(status, body, url))

    def add_error(self, method, path, exc):
        self.routes.setdefault((method, self.base_url + path), []).append(exc)

    def request(self, method, url, headers=None, json=None, timeout=None):
        self.calls.append({
            'method': method,
            'url': url,
            'headers': headers or {},
            'json': json,
            'timeout': timeout,
        })
        answers = self.routes.get((method, url))
        if not answers:
            raise AssertionError(f"Unexpected Klaviyo call: {method} {url}")
        answer = answers.pop(0) if len(answers) > 1 else answers[0]
        if isinstance(answer, Exception):
            raise answer
        return answer

    def calls_to(self, method, path):
        url = self.base_url + path
        return [c for c in self.calls if c['method'] == method and c['url'] == url]


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def tmp_data_dir():
    """Create a temporary directory for the accounts file, cleaned up after."""
    d = tempfile.mkdtemp(prefix="newsdesk-test-")
    yield d
    shutil.rmtree(d, ignore_errors=True)


@pytest.fixture
def accounts_file(tmp_data_dir):
    return os.path.join(tmp_data_dir, "accounts.json")


@pytest.fixture
def store(accounts_file):
    return AccountStore(accounts_file)


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def klaviyo(fake_session):
    return KlaviyoClient(base_url=KLAVIYO_BASE, revision="2023-02-22", timeout=5, session=fake_session)


@pytest.fixture
def app(tmp_data_dir, accounts_file, store, klaviyo):
    """Flask app with Newsdesk installed, a temp accounts file and a fake Klaviyo."""
    return create_app({
        "TESTING": True,
        "SECRET_KEY": "test-secret",
        "DATA_DIR": tmp_data_dir,
        "ACCOUNTS_FILE": accounts_file,
        "KLAVIYO_API_BASE": KLAVIYO_BASE,
    }, store=store, client=klaviyo)


@pytest.fixture
def client(app):
    return app.test_client()
