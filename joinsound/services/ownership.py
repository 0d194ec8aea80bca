"""
Ownership checks for the private write routes.

Existence is always checked before ownership: an unknown sound is a
NotFoundError for everyone, a known sound owned by someone else is a
ForbiddenError.
"""

import logging

from joinsound.errors import ForbiddenError, NotFoundError, StorageError
from joinsound.models.sound import Sound
from joinsound.repositories.identity import IdentityRepository
from joinsound.repositories.sound import SoundRepository

logger = logging.getLogger(__name__)


class OwnershipGuard:
    """Confirms that a verified member owns the resource they want to change."""

    def __init__(self, identity_repo: IdentityRepository, sound_repo: SoundRepository):
        self.identity_repo = identity_repo
        self.sound_repo = sound_repo

    def ensure_member(self, verified_member_id: int, member_id: int) -> None:
        """Routes addressed by (guild, member): the member must be the caller."""
        if int(verified_member_id) != int(member_id):
            logger.info("Member %s tried to modify member %s", verified_member_id, member_id)
            raise ForbiddenError("You can only access your own resources")

    def ensure_sound_owner(self, verified_member_id: int, sound_id: str) -> Sound:
        """Routes addressed by sound ID: the sound's owner must be the caller."""
        sound = self.sound_repo.get_by_id(sound_id)
        if sound is None:
            raise NotFoundError("Sound not found")

        owner = self.identity_repo.get_by_id(sound.identity_id)
        if owner is None:
            logger.error("Sound %s references missing identity %s", sound.id, sound.identity_id)
            raise StorageError("Failed to verify ownership")

        if owner.member_id != int(verified_member_id):
            logger.info("Member %s tried to modify sound %s owned by %s",
                        verified_member_id, sound.id, owner.member_id)
            raise ForbiddenError("You can only access your own resources")
        return sound
