"""User storage backends."""

from carevoice_gateway.db.repository import InMemoryUserRepository, UserRepository

__all__ = ["InMemoryUserRepository", "UserRepository"]
