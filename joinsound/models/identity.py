"""
Identity model: one Discord member inside one guild.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class Identity:
    """
    Internal record for a (guild, member) pair.

    Attributes:
        id: Opaque internal id, never reused
        guild_id: Discord guild snowflake
        member_id: Discord user snowflake
    """
    id: str
    guild_id: int
    member_id: int
