"""
Service for the sound library: the read surface and the write surface the
web layer exposes.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from joinsound.config import ALLOWED_MODES, Config
from joinsound.errors import (
    ForbiddenError,
    NotFoundError,
    SoundFileRemovalError,
    ValidationError,
)
from joinsound.models.identity import Identity
from joinsound.models.settings import Settings, SettingsPatch
from joinsound.models.sound import Sound
from joinsound.models.upload import BulkUploadReport
from joinsound.repositories import IdentityRepository, SettingsRepository, SoundRepository
from joinsound.services.ownership import OwnershipGuard
from joinsound.services.storage import SoundFileStore
from joinsound.services.upload import BulkUploader, CandidateFile
from joinsound.services.validation import UploadValidator

logger = logging.getLogger(__name__)


class SoundService:
    """
    Business logic for sounds and playback settings.

    Repositories do the storage work; this class adds the checks that sit
    in front of them (batch limits, patch validation, sound ownership) and
    removes stored files after their rows are gone.
    """

    def __init__(self, identity_repo: IdentityRepository, sound_repo: SoundRepository,
                 settings_repo: SettingsRepository, store: SoundFileStore,
                 uploader: Optional[BulkUploader] = None,
                 max_batch_size: int = Config.MAX_BATCH_SIZE,
                 max_files_per_user: int = Config.MAX_FILES_PER_USER):
        self.identity_repo = identity_repo
        self.sound_repo = sound_repo
        self.settings_repo = settings_repo
        self.store = store
        self.max_batch_size = max_batch_size
        self.uploader = uploader or BulkUploader(
            sound_repo=sound_repo,
            store=store,
            validator=UploadValidator(),
            max_files_per_user=max_files_per_user,
        )
        self.ownership = OwnershipGuard(identity_repo, sound_repo)

    @classmethod
    def create(cls, db_path: str, sounds_path: str,
               max_batch_size: int = Config.MAX_BATCH_SIZE,
               max_files_per_user: int = Config.MAX_FILES_PER_USER) -> "SoundService":
        """Build the service with repositories that open their own connections."""
        return cls(
            identity_repo=IdentityRepository(db_path=db_path, use_shared=False),
            sound_repo=SoundRepository(db_path=db_path, use_shared=False),
            settings_repo=SettingsRepository(db_path=db_path, use_shared=False),
            store=SoundFileStore(sounds_path),
            max_batch_size=max_batch_size,
            max_files_per_user=max_files_per_user,
        )

    # Read surface

    def get_sound(self, sound_id: str) -> Sound:
        sound = self.sound_repo.get_by_id(sound_id)
        if sound is None:
            raise NotFoundError("Sound not found")
        return sound

    def get_sound_file(self, sound_id: str) -> Tuple[Sound, str]:
        """Return a sound and the path of its stored file."""
        sound = self.get_sound(sound_id)
        if not self.store.exists(sound.internal_filename):
            logger.error("Sound %s has no stored file %s", sound.id, sound.internal_filename)
            raise NotFoundError("Sound file not found")
        return sound, self.store.path(sound.internal_filename)

    def resolve_identity(self, guild_id: int, member_id: int) -> Identity:
        return self.identity_repo.resolve(guild_id, member_id)

    def list_sounds(self, guild_id: int, member_id: int) -> List[Sound]:
        identity = self.resolve_identity(guild_id, member_id)
        return self.sound_repo.list_by_identity(identity.id)

    def get_settings(self, guild_id: int, member_id: int) -> Settings:
        identity = self.resolve_identity(guild_id, member_id)
        return self.settings_repo.get_or_create(identity.id)

    # Write surface

    def delete_sound(self, sound_id: str) -> Tuple[Sound, Optional[Sound]]:
        """
        Delete a sound, then its stored file.

        The database part (row delete plus settings repair) is one
        transaction. The file is removed only after it commits; if that
        removal fails the row is already gone, so the error is logged as an
        orphaned file and raised to the caller.

        Returns:
            (deleted sound, new active sound or None)
        """
        deleted, replacement = self.sound_repo.delete(sound_id)
        logger.info("Deleted sound %s of identity %s (new active: %s)",
                    deleted.id, deleted.identity_id, replacement.id if replacement else None)

        try:
            self.store.delete(deleted.internal_filename)
        except OSError as e:
            logger.error("Orphaned sound file %s after deleting sound %s: %s",
                         deleted.internal_filename, deleted.id, e)
            raise SoundFileRemovalError("Failed to delete sound file", deleted, replacement) from e

        return deleted, replacement

    def upload_sounds(self, guild_id: int, member_id: int,
                      files: Sequence[CandidateFile]) -> BulkUploadReport:
        """Check the batch as a whole, then upload file by file."""
        if not files:
            raise ValidationError("No files uploaded")
        if len(files) > self.max_batch_size:
            raise ValidationError(f"Can't upload more than {self.max_batch_size} files at once")

        identity = self.resolve_identity(guild_id, member_id)
        current_count = self.sound_repo.count_by_identity(identity.id)
        return self.uploader.process(identity, current_count, files)

    def update_settings(self, guild_id: int, member_id: int, patch: SettingsPatch) -> Settings:
        """
        Apply a settings patch.

        Raises:
            ValidationError: nothing to update, or an unknown mode
            NotFoundError: the active sound does not exist
            ForbiddenError: the active sound belongs to someone else
        """
        if patch.is_empty():
            raise ValidationError("No fields to update")
        if patch.has_mode and patch.mode not in ALLOWED_MODES:
            raise ValidationError(f"Invalid mode: {patch.mode} (allowed: {', '.join(ALLOWED_MODES)})")

        identity = self.resolve_identity(guild_id, member_id)

        if patch.has_active_sound:
            sound = self.sound_repo.get_by_id(patch.active_sound_id)
            if sound is None:
                raise NotFoundError("Sound not found")
            if sound.identity_id != identity.id:
                raise ForbiddenError("Sound does not belong to this user")

        return self.settings_repo.update(identity.id, patch)
