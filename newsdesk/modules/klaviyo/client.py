"""
Klaviyo API Client
==================

Stateless helper around the Klaviyo REST API. Each call takes the account's
private API key; nothing is cached between calls.

Klaviyo error bodies look like:
    {"errors": [{"status": 401, "detail": "Invalid API key", ...}]}
normalize_upstream_error() turns any failed call into an UpstreamError.
"""

import logging

import requests

from newsdesk.core.errors import UpstreamError
from newsdesk.core.logging_service import LoggingService, mask_api_key

logger = logging.getLogger(__name__)

API_BASE = "https://a.klaviyo.com/api"
API_REVISION = "2023-02-22"
DEFAULT_TIMEOUT = 30

VERIFY_FALLBACK = "Invalid API Key or connection issue."
LISTS_FALLBACK = "Failed to fetch lists from Klaviyo."
SUBSCRIBE_FALLBACK = "An error occurred with the Klaviyo API."


def _first_error(response):
    """Return the first entry of a Klaviyo error body, or {} if there is none"""
    if response is None:
        return {}
    try:
        body = response.json()
    except ValueError:
        return {}
    if not isinstance(body, dict):
        return {}
    errors = body.get('errors')
    if not isinstance(errors, list) or not errors or not isinstance(errors[0], dict):
        return {}
    return errors[0]


def normalize_upstream_error(error, fallback=SUBSCRIBE_FALLBACK):
    """
    Convert a failed requests call into an UpstreamError.

    message: errors[0].detail from the response body, else `fallback`.
    status_code: the response status, else 500 (no response at all, e.g. a
    connection error or timeout).
    """
    response = getattr(error, 'response', None)
    detail = _first_error(response).get('detail')
    message = detail if isinstance(detail, str) and detail else fallback
    status_code = response.status_code if response is not None else None
    return UpstreamError(status_code or 500, message)


class KlaviyoClient:
    """Klaviyo calls used by the proxy endpoints"""

    def __init__(self, base_url=API_BASE, revision=API_REVISION, timeout=DEFAULT_TIMEOUT, session=None):
        self.base_url = base_url.rstrip('/')
        self.revision = revision
        self.timeout = timeout
        self.session = session or requests.Session()

    def _headers(self, api_key):
        return {
            "Authorization": f"Klaviyo-API-Key {api_key}",
            "revision": self.revision,
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    def _request(self, method, url, api_key, fallback, payload=None, allow_status=()):
        """
        Send one authenticated request.

        Returns the response on 2xx (or a status listed in allow_status),
        raises UpstreamError otherwise.
        """
        try:
            resp = self.session.request(
                method,
                url,
                headers=self._headers(api_key),
                json=payload,
                timeout=self.timeout,
            )
            if resp.status_code not in allow_status:
                resp.raise_for_status()
        except requests.RequestException as e:
            error = normalize_upstream_error(e, fallback)
            LoggingService.log_api_call('klaviyo', url, method, error.status_code, {
                'key': mask_api_key(api_key),
                'message': error.message,
            })
            raise error from e

        LoggingService.log_api_call('klaviyo', url, method, resp.status_code)
        return resp

    def verify_credentials(self, api_key):
        """Read-only call that succeeds only if the key is accepted"""
        self._request("GET", f"{self.base_url}/lists/", api_key, VERIFY_FALLBACK)

    def fetch_lists(self, api_key):
        """
        Fetch every list on the account.

        Returns:
            list of {id, name}, in the order Klaviyo returns them. Pages are
            followed through links.next.
        """
        lists = []
        url = f"{self.base_url}/lists/"
        seen = set()

        while url and url not in seen:
            seen.add(url)
            resp = self._request("GET", url, api_key, LISTS_FALLBACK)
            try:
                body = resp.json()
                for item in body['data']:
                    lists.append({
                        'id': item['id'],
                        'name': (item.get('attributes') or {}).get('name', ''),
                    })
                url = (body.get('links') or {}).get('next')
            except (ValueError, KeyError, TypeError, AttributeError) as e:
                logger.error(f"Unexpected Klaviyo lists response: {e}")
                raise UpstreamError(500, LISTS_FALLBACK) from e

        return lists

    def upsert_profile(self, api_key, email):
        """
        Create a profile for email and return its Klaviyo id.

        If the profile already exists Klaviyo answers 409 with the existing id
        in errors[0].meta.duplicate_profile_id; that id is returned instead.
        """
        payload = {
            "data": {
                "type": "profile",
                "attributes": {"email": email},
            }
        }
        resp = self._request(
            "POST", f"{self.base_url}/profiles/", api_key, SUBSCRIBE_FALLBACK,
            payload=payload, allow_status=(409,),
        )

        if resp.status_code == 409:
            meta = _first_error(resp).get('meta') or {}
            profile_id = meta.get('duplicate_profile_id') if isinstance(meta, dict) else None
            if not profile_id:
                raise normalize_upstream_error(requests.HTTPError(response=resp), SUBSCRIBE_FALLBACK)
            logger.info(f"Profile for {email} already exists: {profile_id}")
            return profile_id

        try:
            return resp.json()['data']['id']
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Unexpected Klaviyo profile response: {e}")
            raise UpstreamError(500, SUBSCRIBE_FALLBACK) from e

    def add_profile_to_list(self, api_key, list_id, profile_id):
        payload = {"data": [{"type": "profile", "id": profile_id}]}
        self._request(
            "POST", f"{self.base_url}/lists/{list_id}/relationships/profiles/", api_key,
            SUBSCRIBE_FALLBACK, payload=payload,
        )

    def subscribe_email(self, api_key, email, list_id):
        """
        Add email to a list: upsert the profile, then attach it to the list.

        The attach step only runs if the upsert succeeded. A failed attach
        leaves the profile in place.
        """
        profile_id = self.upsert_profile(api_key, email)
        self.add_profile_to_list(api_key, list_id, profile_id)
        logger.info(f"Subscribed {email} (profile {profile_id}) to list {list_id}")
        return profile_id
