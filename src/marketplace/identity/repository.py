"""Custom queries over the User aggregate."""

from marketplace.domain import marketplace
from marketplace.identity.user import User


@marketplace.repository(part_of=User)
class UserRepository:
    def find_by_email(self, email: str) -> User | None:
        return self._dao.query.filter(email=email.strip().lower()).all().first

    def find_many(self, user_ids) -> dict[str, User]:
        """Load several users at once, keyed by id. Unknown ids are skipped."""
        wanted = {str(user_id) for user_id in user_ids if user_id}
        if not wanted:
            return {}
        users = self._dao.query.filter(id__in=list(wanted)).all().items
        return {str(user.id): user for user in users}
