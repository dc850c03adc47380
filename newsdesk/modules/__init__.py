"""
Newsdesk Modules
================

Flask blueprint modules for the account store and the Klaviyo proxy.
"""

__all__ = ['accounts', 'klaviyo', 'ops', 'subscribers']
