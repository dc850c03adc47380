"""
Error Types
===========

Every failure a Newsdesk endpoint can report. Routes catch these at the
boundary and turn them into a JSON body plus an HTTP status:

- ValidationError  -> 400
- NotFoundError    -> 404
- PersistenceError -> 500
- UpstreamError    -> the upstream status code (500 if there was none)
"""


class NewsdeskError(Exception):
    """Base class for all Newsdesk errors"""
    status_code = 500

    def __init__(self, message=None):
        super().__init__(message)
        self.message = message or self.__class__.__doc__


class ValidationError(NewsdeskError):
    """Request field missing or empty"""
    status_code = 400


class NotFoundError(NewsdeskError):
    """Account not found"""
    status_code = 404


class PersistenceError(NewsdeskError):
    """Account store could not be read or written"""
    status_code = 500


class UpstreamError(NewsdeskError):
    """
    A Klaviyo call failed.

    status_code mirrors the upstream HTTP status so callers can tell a bad key
    (401/403) from a transient failure (429/5xx). It is 500 when no response
    was received at all.
    """

    def __init__(self, status_code=None, message=None):
        super().__init__(message or 'An error occurred with the Klaviyo API.')
        self.status_code = status_code or 500

    def __repr__(self):
        return f"UpstreamError({self.status_code}, {self.message!r})"
