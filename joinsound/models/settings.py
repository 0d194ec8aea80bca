"""
Playback settings models.
"""

from dataclasses import dataclass
from typing import Optional

from joinsound.config import DEFAULT_MODE


@dataclass
class Settings:
    """Playback configuration for one identity."""

    identity_id: str
    active_sound_id: Optional[str] = None
    mode: str = DEFAULT_MODE

    def to_dict(self) -> dict:
        return {
            "identity_id": self.identity_id,
            "active_sound_id": self.active_sound_id,
            "mode": self.mode,
        }


@dataclass
class SettingsPatch:
    """
    A partial settings update.

    Empty strings count as absent, so a patch of {"mode": ""} changes nothing.
    """
    active_sound_id: Optional[str] = None
    mode: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "SettingsPatch":
        if not data:
            return cls()
        return cls(
            active_sound_id=data.get("active_sound_id"),
            mode=data.get("mode"),
        )

    @property
    def has_active_sound(self) -> bool:
        return bool(self.active_sound_id)

    @property
    def has_mode(self) -> bool:
        return bool(self.mode)

    def is_empty(self) -> bool:
        return not self.has_active_sound and not self.has_mode
