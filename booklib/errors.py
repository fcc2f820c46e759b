"""Error taxonomy for library operations.

None of these are fatal: each one leaves the view in its pre-operation state
and is surfaced to the user as a single notification.
"""


class LibraryError(Exception):
    """Base class for errors raised by library operations."""


class ValidationError(LibraryError):
    """A required field is missing. Raised before any remote call is made."""


class AuthError(LibraryError):
    """The identity provider rejected the credentials or could not be reached."""


class BackendUnavailable(LibraryError):
    """A document store call failed; the operation was not applied."""


class RequestCancelled(LibraryError):
    """The view that issued the request was torn down before it completed."""
