"""
Klaviyo Module
==============

Upstream client for the Klaviyo list-management API:
- verify an API key
- fetch mailing lists
- subscribe an email to a list (profile upsert + list relationship)
"""

from .client import KlaviyoClient, normalize_upstream_error

__all__ = ['KlaviyoClient', 'normalize_upstream_error']
