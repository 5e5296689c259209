"""Supabase-backed user repository.

Expects a ``users`` table with a unique constraint on ``email``:

    id text primary key, email text unique not null, password_hash text not null,
    name text not null, udid text not null, created_at timestamptz not null
"""

import logging

from postgrest.exceptions import APIError
from supabase import Client, create_client

from carevoice_gateway.config import Settings
from carevoice_gateway.exceptions import UserExistsError
from carevoice_gateway.models.identity import User

logger = logging.getLogger(__name__)

USERS_TABLE = "users"
UNIQUE_VIOLATION = "23505"


class SupabaseUserRepository:
    """Persistent user store on a Supabase table."""

    def __init__(self, client: Client) -> None:
        self.client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "SupabaseUserRepository":
        if not settings.supabase_url or not settings.supabase_key:
            raise ValueError("SUPABASE_URL and SUPABASE_KEY are required when USER_STORE=supabase")
        return cls(create_client(settings.supabase_url, settings.supabase_key))

    async def get(self, email: str) -> User | None:
        """Look up a user by email.

        Args:
            email: The user's email

        Returns:
            User if found, None otherwise
        """
        result = (
            self.client.table(USERS_TABLE)
            .select("*")
            .eq("email", email)
            .limit(1)
            .execute()
        )
        if result.data:
            return User(**result.data[0])
        return None

    async def exists(self, email: str) -> bool:
        result = (
            self.client.table(USERS_TABLE)
            .select("id")
            .eq("email", email)
            .limit(1)
            .execute()
        )
        return bool(result.data)

    async def put(self, user: User) -> User:
        """Insert a new user.

        Raises:
            UserExistsError: If the email is already taken
        """
        try:
            self.client.table(USERS_TABLE).insert(user.model_dump(mode="json")).execute()
        except APIError as e:
            if e.code == UNIQUE_VIOLATION:
                raise UserExistsError(user.email) from e
            raise
        logger.debug(f"Stored user {user.id} ({user.email})")
        return user
