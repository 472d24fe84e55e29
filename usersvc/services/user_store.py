from __future__ import annotations

import logging

from fastapi import Request

from usersvc.models.schemas import User

logger = logging.getLogger(__name__)


class UserStore:
    """Process-local user list (resets on restart)."""

    def __init__(self, users: list[User] | None = None) -> None:
        self._users: list[User] = list(users or [])

    @classmethod
    def seeded(cls) -> "UserStore":
        return cls([User(id=1, name="Alice"), User(id=2, name="Bob")])

    def list_users(self) -> list[User]:
        return list(self._users)

    def create_user(self, name: str) -> User:
        # Ids are not reused only because users are never deleted.
        user = User(id=len(self._users) + 1, name=name)
        self._users.append(user)
        logger.info("user.created", extra={"user_id": user.id})
        return user


def get_user_store(request: Request) -> UserStore:
    return request.app.state.user_store
