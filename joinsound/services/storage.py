"""
Local directory store for uploaded sound files.
"""

import logging
import os
import shutil
from typing import BinaryIO

from joinsound.config import ALLOWED_TYPES

logger = logging.getLogger(__name__)


def generate_internal_filename(sound_id: str, mime_type: str) -> str:
    """Storage filename for a sound: its ID plus the extension of its type."""
    return f"{sound_id}{ALLOWED_TYPES[mime_type]}"


class SoundFileStore:
    """
    Byte store keyed by internal filename.

    Keys are generated by the upload flow, never taken from user input, but
    anything with a directory component is still refused.
    """

    def __init__(self, root: str):
        self.root = os.path.abspath(str(root))
        os.makedirs(self.root, exist_ok=True)

    def path(self, key: str) -> str:
        if not key or os.path.basename(key) != key or key in (".", ".."):
            raise ValueError(f"Invalid storage key: {key!r}")
        return os.path.join(self.root, key)

    def exists(self, key: str) -> bool:
        return os.path.isfile(self.path(key))

    def write(self, key: str, stream: BinaryIO) -> int:
        """
        Copy a stream into the store from its beginning.

        Returns:
            Number of bytes written
        """
        target = self.path(key)
        stream.seek(0)
        with open(target, "wb") as out:
            shutil.copyfileobj(stream, out)
            written = out.tell()
        logger.debug("Stored %s (%d bytes)", key, written)
        return written

    def delete(self, key: str) -> None:
        """Remove a stored file. Raises OSError if it cannot be removed."""
        os.remove(self.path(key))
        logger.debug("Removed %s", key)
