"""User repository interface and the in-memory backing."""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from carevoice_gateway.exceptions import UserExistsError
from carevoice_gateway.models.identity import User

logger = logging.getLogger(__name__)


@runtime_checkable
class UserRepository(Protocol):
    """Keyed store of registered users, keyed by email.

    ``put`` is insert-if-absent: it raises UserExistsError rather than
    overwrite, so two racing registrations cannot both succeed.
    """

    async def get(self, email: str) -> User | None: ...

    async def exists(self, email: str) -> bool: ...

    async def put(self, user: User) -> User: ...


class InMemoryUserRepository:
    """Process-local user store. Contents are lost on restart."""

    def __init__(self) -> None:
        self._users: dict[str, User] = {}

    async def get(self, email: str) -> User | None:
        return self._users.get(email)

    async def exists(self, email: str) -> bool:
        return email in self._users

    async def put(self, user: User) -> User:
        if user.email in self._users:
            raise UserExistsError(user.email)
        self._users[user.email] = user
        logger.debug(f"Stored user {user.id} ({user.email})")
        return user

    def __len__(self) -> int:
        return len(self._users)
