"""
Sound-related data models.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class Sound:
    """
    Represents an uploaded sound file in the database.

    Attributes:
        id: Unique identifier for the sound
        identity_id: Owning identity
        original_name: Filename as uploaded (untrusted, display only)
        internal_filename: Name of the file in the sound store
        mime_type: Canonical content type
        created_at: When the sound was uploaded (UTC)
    """
    id: str
    identity_id: str
    original_name: str
    internal_filename: str
    mime_type: str
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        """Public representation; the storage filename stays internal."""
        return {
            "id": self.id,
            "identity_id": self.identity_id,
            "original_name": self.original_name,
            "mime_type": self.mime_type,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
