"""
Service layer: validation, upload orchestration, ownership and the sound
library operations built on top of the repositories.
"""

from joinsound.services.ownership import OwnershipGuard
from joinsound.services.sound import SoundService
from joinsound.services.storage import SoundFileStore, generate_internal_filename
from joinsound.services.upload import BulkUploader, CandidateFile
from joinsound.services.validation import UploadValidator, ValidatedUpload

__all__ = [
    "OwnershipGuard",
    "SoundService",
    "SoundFileStore",
    "generate_internal_filename",
    "BulkUploader",
    "CandidateFile",
    "UploadValidator",
    "ValidatedUpload",
]
