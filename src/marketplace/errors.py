"""Application errors raised by the marketplace domain and its HTTP boundary.

Validation problems use Protean's ``ValidationError`` (a dict of field →
messages) and lookups use ``ObjectNotFoundError``, as everywhere else in the
domain. The classes below cover the cases Protean has no exception for.
"""

from protean.exceptions import ObjectNotFoundError, ValidationError


class MarketplaceError(Exception):
    """Base for errors that carry their own HTTP status."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthenticationError(MarketplaceError):
    """No session, or a token that is malformed, forged or expired."""

    status_code = 401


class AuthorizationError(MarketplaceError):
    """Authenticated, but the user's role may not call this operation."""

    status_code = 403


class ConflictError(MarketplaceError):
    """A write collided with a concurrent one and could not be retried."""

    status_code = 409


class UpstreamError(MarketplaceError):
    """The persistence layer is unavailable."""

    status_code = 503


class NotFoundError(ObjectNotFoundError):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class EmptyCartError(ValidationError):
    def __init__(self):
        super().__init__({"cart": ["Cart is empty"]})
