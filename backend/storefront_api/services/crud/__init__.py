"""CRUD helpers shared by the domain services."""

from .repository import BaseRepository, LiveRepository

__all__ = ["BaseRepository", "LiveRepository"]
