"""
Upload validation pipeline.

A submitted file goes through five gates in order, and the first one that
fails rejects it:

1. size      - declared size must be non-zero and within the per-file cap
2. name      - trimmed name must be non-empty and short enough; only the
               base name is kept from here on
3. sniff     - the content type comes from the file's magic bytes, never
               from the client
4. allow     - the sniffed type must be allowed and match the extension
5. duration  - the decoded audio must not run longer than the cap
"""

import logging
import posixpath
from dataclasses import dataclass
from typing import BinaryIO, Optional

import filetype
from mutagen import MutagenError
from mutagen.mp3 import MP3
from mutagen.wave import WAVE

from joinsound.config import (
    ALLOWED_TYPES,
    MAX_AUDIO_DURATION,
    MAX_FILENAME_LEN,
    MAX_UPLOAD_SIZE,
    MIME_ALIASES,
    SNIFF_BYTES,
)
from joinsound.errors import ValidationError
from joinsound.services.mpeg import mpeg_duration

logger = logging.getLogger(__name__)

# Format-specific readers used to check the audio decodes. WAV length comes
# from the data chunk's sample count; MP3 length from walking every frame.
DECODERS = {
    "audio/mpeg": MP3,
    "audio/wav": WAVE,
}


@dataclass(frozen=True)
class ValidatedUpload:
    """An accepted file: its safe base name and canonical content type."""

    filename: str
    mime_type: str
    duration: float


def sanitize_filename(filename: Optional[str]) -> str:
    """Strip whitespace and any directory components, of either separator."""
    cleaned = (filename or "").strip().replace("\\", "/")
    return posixpath.basename(cleaned).strip()


def file_extension(filename: str) -> str:
    return posixpath.splitext(filename)[1].lower()


class UploadValidator:
    """Runs the validation gates over one uploaded file."""

    def __init__(self, max_size: int = MAX_UPLOAD_SIZE, max_filename_len: int = MAX_FILENAME_LEN,
                 max_duration: float = MAX_AUDIO_DURATION, sniff_bytes: int = SNIFF_BYTES):
        self.max_size = max_size
        self.max_filename_len = max_filename_len
        self.max_duration = max_duration
        self.sniff_bytes = sniff_bytes

    def validate(self, filename: Optional[str], size: int, stream: BinaryIO) -> ValidatedUpload:
        """
        Accept or reject one file.

        Args:
            filename: Name as submitted by the client
            size: Declared size in bytes
            stream: Readable, seekable file content

        Returns:
            ValidatedUpload with the canonical content type

        Raises:
            ValidationError: with the reason of the first failing gate
        """
        self._check_size(filename, size)
        safe_name = self._check_name(filename)
        mime_type = self._sniff(stream)
        self._check_allowed(safe_name, mime_type)
        duration = self._check_duration(stream, mime_type)
        return ValidatedUpload(filename=safe_name, mime_type=mime_type, duration=duration)

    def _check_size(self, filename: Optional[str], size: int) -> None:
        if size > self.max_size:
            raise ValidationError(f"file too large: {filename} (max {self.max_size} bytes)")
        if size <= 0:
            raise ValidationError(f"empty file: {filename}")

    def _check_name(self, filename: Optional[str]) -> str:
        trimmed = (filename or "").strip()
        if not trimmed:
            raise ValidationError("filename cannot be empty")
        if len(trimmed) > self.max_filename_len:
            raise ValidationError(f"filename too long: {trimmed} (max {self.max_filename_len} characters)")

        safe_name = sanitize_filename(trimmed)
        if not safe_name or safe_name in (".", ".."):
            raise ValidationError("filename cannot be empty")
        return safe_name

    def _sniff(self, stream: BinaryIO) -> str:
        try:
            stream.seek(0)
            head = stream.read(self.sniff_bytes)
        except OSError as e:
            raise ValidationError(f"cannot read file content: {e}") from e

        kind = filetype.guess(head) if head else None
        if kind is None:
            raise ValidationError("unknown or unsupported file type")
        return MIME_ALIASES.get(kind.mime, kind.mime)

    def _check_allowed(self, filename: str, mime_type: str) -> None:
        ext = file_extension(filename)
        expected = ALLOWED_TYPES.get(mime_type)
        if expected is None:
            raise ValidationError(f"unsupported file type: {ext or filename} (detected: {mime_type})")
        if expected != ext:
            raise ValidationError(f"file type mismatch: {ext or '(none)'} (expected: {expected}, detected: {mime_type})")

    def _check_duration(self, stream: BinaryIO, mime_type: str) -> float:
        try:
            stream.seek(0)
        except OSError as e:
            raise ValidationError(f"cannot rewind file for duration check: {e}") from e

        decoder = DECODERS[mime_type]
        try:
            audio = decoder(stream)
            if mime_type == "audio/mpeg":
                duration = mpeg_duration(stream)
            else:
                duration = float(getattr(audio.info, "length", 0) or 0)
        except (MutagenError, OSError, EOFError, ValueError) as e:
            raise ValidationError(f"cannot decode audio file: {e}") from e

        if duration <= 0:
            raise ValidationError("cannot decode audio file: no audio frames")
        if duration > self.max_duration:
            raise ValidationError(f"audio too long: {duration:.2f}s (max {self.max_duration}s)")
        return duration
