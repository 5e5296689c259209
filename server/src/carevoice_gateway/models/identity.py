"""Identity models for locally registered users."""

from datetime import UTC, datetime
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class User(BaseModel):
    """Stored user record. Never returned to callers as-is."""

    id: str = Field(default_factory=lambda: uuid4().hex)
    email: str
    password_hash: str
    name: str
    udid: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    def public(self) -> "UserPublic":
        return UserPublic(id=self.id, email=self.email, name=self.name)

    def profile(self) -> "UserProfile":
        return UserProfile(
            id=self.id,
            email=self.email,
            name=self.name,
            created_at=self.created_at,
        )


class UserPublic(BaseModel):
    """Non-secret user fields returned by register and login."""

    id: str
    email: str
    name: str


class UserProfile(BaseModel):
    """Non-secret user fields returned by the profile endpoint."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    email: str
    name: str
    created_at: datetime
