"""
Repository layer for data access.

Repositories provide an abstraction over the database, enabling:
- Single Responsibility: Each repository handles one entity type
- Testability: Can be pointed at an in-memory database for unit tests
- Consistency: Standardized CRUD operations
"""

from joinsound.repositories.base import BaseRepository
from joinsound.repositories.identity import IdentityRepository
from joinsound.repositories.sound import SoundRepository
from joinsound.repositories.settings import SettingsRepository

__all__ = [
    "BaseRepository",
    "IdentityRepository",
    "SoundRepository",
    "SettingsRepository",
]
