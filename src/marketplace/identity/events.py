"""Domain events for the User aggregate's account lifecycle."""

from protean.fields import DateTime, Identifier, String

from marketplace.domain import marketplace


@marketplace.event(part_of="User")
class UserRegistered:
    """A farmer, consumer or admin account was created."""

    __version__ = 1

    user_id = Identifier(required=True)
    email = String(required=True)
    role = String(required=True)
    full_name = String(required=True)
    registered_at = DateTime(required=True)
