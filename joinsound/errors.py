"""
Error types raised by the join sound services.

Each error carries the HTTP status the web layer answers with, so callers
outside the web layer can still tell the categories apart.
"""


class JoinSoundError(Exception):
    """Base class for all expected failures."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(JoinSoundError):
    """Bad input: rejected file, bad settings patch, bad id."""

    status_code = 400


class NotFoundError(JoinSoundError):
    """Unknown sound or identity."""

    status_code = 404


class ForbiddenError(JoinSoundError):
    """The caller does not own the resource."""

    status_code = 403


class UnauthenticatedError(JoinSoundError):
    """No verified caller on the request."""

    status_code = 401


class StorageError(JoinSoundError):
    """Sound file store failure."""

    status_code = 500


class SoundFileRemovalError(StorageError):
    """
    The sound row was deleted but its file could not be removed.

    The metadata change is already committed, so the file is orphaned until
    someone cleans it up.
    """

    def __init__(self, message: str, deleted_sound=None, replacement=None):
        super().__init__(message)
        self.deleted_sound = deleted_sound
        self.replacement = replacement
