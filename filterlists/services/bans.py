"""
Ban registry — read side, consulted inside the authorizing transaction.
"""
from sqlalchemy.exc import SQLAlchemyError

from filterlists.errors import StoreError
from filterlists.models.user_ban import UserBan


class BanRegistry:
    """Looks up active bans through the request's own session."""

    def is_banned(self, session, user_id):
        try:
            row = (
                session.query(UserBan.id)
                .filter(UserBan.user_id == user_id, UserBan.lifted_at.is_(None))
                .first()
            )
        except SQLAlchemyError as e:
            raise StoreError(f'failed to check ban status: {e}') from e
        return row is not None
