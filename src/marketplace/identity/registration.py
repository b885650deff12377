"""User registration — command and handler."""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.identity.user import User
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


@marketplace.command(part_of="User")
class RegisterUser:
    """Create a farmer, consumer or admin account.

    Carries the password hash, never the password: commands may be stored.
    """

    email = String(required=True, max_length=254)
    password_hash = String(required=True, max_length=255)
    full_name = String(required=True, max_length=150)
    role = String(required=True, max_length=20)
    phone_number = String(max_length=20)
    profile_picture = String(max_length=1000)
    location = Text()  # JSON: {address, city, state, country, zip_code}


@marketplace.command_handler(part_of=User)
class RegisterUserHandler:
    @handle(RegisterUser)
    def register_user(self, command):
        repo = current_domain.repository_for(User)
        if repo.find_by_email(command.email) is not None:
            raise ValidationError({"email": ["User already exists"]})

        location = json.loads(command.location) if isinstance(command.location, str) else command.location

        user = User.register(
            email=command.email,
            password_hash=command.password_hash,
            full_name=command.full_name,
            role=command.role,
            phone_number=command.phone_number,
            profile_picture=command.profile_picture,
            location=location,
        )
        repo.add(user)

        logger.info("User registered", user_id=str(user.id), role=user.role)
        return str(user.id)
