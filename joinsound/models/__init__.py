"""
Data models (DTOs) for the join sound API.

These dataclasses are the typed representations of database rows and of
the upload report handed back to API callers.
"""

from joinsound.models.identity import Identity
from joinsound.models.sound import Sound
from joinsound.models.settings import Settings, SettingsPatch
from joinsound.models.upload import BulkUploadReport, FileError, UploadResult

__all__ = [
    "Identity",
    "Sound",
    "Settings",
    "SettingsPatch",
    "BulkUploadReport",
    "FileError",
    "UploadResult",
]
