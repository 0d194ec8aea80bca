"""
Bulk upload orchestration.

Every file in a batch is attempted in order and succeeds or fails on its
own; one bad file never aborts the rest of the batch.
"""

import io
import logging
import os
import sqlite3
import uuid
from dataclasses import dataclass
from typing import BinaryIO, List, Optional, Sequence

from joinsound.config import MAX_FILES_PER_USER
from joinsound.errors import JoinSoundError, StorageError, ValidationError
from joinsound.models.identity import Identity
from joinsound.models.upload import BulkUploadReport, FileError, UploadResult
from joinsound.repositories.sound import SoundRepository
from joinsound.services.storage import SoundFileStore, generate_internal_filename
from joinsound.services.validation import UploadValidator

logger = logging.getLogger(__name__)


@dataclass
class CandidateFile:
    """A file submitted for upload, before validation."""

    filename: Optional[str]
    size: int
    stream: BinaryIO

    @classmethod
    def from_bytes(cls, filename: str, data: bytes) -> "CandidateFile":
        return cls(filename=filename, size=len(data), stream=io.BytesIO(data))

    @classmethod
    def from_storage(cls, storage) -> "CandidateFile":
        """Wrap a werkzeug FileStorage, measuring the size from the stream."""
        stream = storage.stream
        stream.seek(0, os.SEEK_END)
        size = stream.tell()
        stream.seek(0)
        return cls(filename=storage.filename, size=size, stream=stream)


class BulkUploader:
    """
    Drives validation and storage across a batch for one identity.

    The per-identity ceiling is checked before each file against a running
    count, without reserving slots in the database. Two concurrent batches
    for the same identity can therefore both pass the check.
    """

    def __init__(self, sound_repo: SoundRepository, store: SoundFileStore,
                 validator: Optional[UploadValidator] = None,
                 max_files_per_user: int = MAX_FILES_PER_USER):
        self.sound_repo = sound_repo
        self.store = store
        self.validator = validator or UploadValidator()
        self.max_files_per_user = max_files_per_user

    def process(self, identity: Identity, current_count: int,
                files: Sequence[CandidateFile]) -> BulkUploadReport:
        """
        Upload a batch and report per-file outcomes.

        Args:
            identity: Owner of the new sounds
            current_count: How many sounds the identity already has
            files: Candidate files in submission order

        Returns:
            BulkUploadReport listing successes and failures with their
            original batch index
        """
        count = current_count
        successes: List[UploadResult] = []
        failures: List[FileError] = []

        for index, candidate in enumerate(files):
            try:
                result = self._upload_one(identity, count, index, candidate)
            except JoinSoundError as e:
                logger.info("Rejected upload %r (#%d) for identity %s: %s",
                            candidate.filename, index, identity.id, e.message)
                failures.append(FileError(filename=candidate.filename or "", error=e.message, index=index))
            else:
                successes.append(result)
                count += 1

        report = BulkUploadReport.build(len(files), successes, failures)
        logger.info("Bulk upload for identity %s: %s", identity.id, report.message)
        return report

    def _upload_one(self, identity: Identity, count: int, index: int,
                    candidate: CandidateFile) -> UploadResult:
        if count >= self.max_files_per_user:
            raise ValidationError(f"maximum file limit of {self.max_files_per_user} reached per user")

        validated = self.validator.validate(candidate.filename, candidate.size, candidate.stream)

        sound_id = uuid.uuid4().hex
        internal_filename = generate_internal_filename(sound_id, validated.mime_type)

        try:
            self.store.write(internal_filename, candidate.stream)
        except OSError as e:
            logger.error("Failed to save %s: %s", internal_filename, e)
            raise StorageError(f"failed to save file: {e}") from e

        try:
            sound = self.sound_repo.create(
                identity_id=identity.id,
                original_name=validated.filename,
                internal_filename=internal_filename,
                mime_type=validated.mime_type,
                sound_id=sound_id,
            )
        except sqlite3.Error as e:
            logger.error("Failed to store record for %s: %s", internal_filename, e)
            try:
                self.store.delete(internal_filename)
            except OSError as remove_error:
                logger.error("Orphaned sound file %s: %s", internal_filename, remove_error)
                raise StorageError(f"failed to remove uploaded file: {remove_error}") from e
            raise StorageError(f"failed to store file record: {e}") from e

        return UploadResult(
            id=sound.id,
            original_name=sound.original_name,
            size=candidate.size,
            mime_type=sound.mime_type,
            index=index,
        )
