"""
Shared pytest fixtures for join sound tests.
"""

import io
import os
import sqlite3
import sys
import wave
from datetime import datetime, timedelta, timezone

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from joinsound.database import create_tables
from joinsound.repositories.base import BaseRepository


# ============================================================================
# Audio Builders
# ============================================================================

# MPEG-1 Layer III, 128 kbps, 44.1 kHz, no padding, joint stereo
MP3_FRAME_HEADER = bytes([0xFF, 0xFB, 0x90, 0x64])
MP3_FRAME_SIZE = 417  # 144 * 128000 // 44100
MP3_FRAMES_PER_SECOND = 44100 / 1152


def mpeg_frame(header: bytes, size: int, payload: bytes = b"") -> bytes:
    """One frame of `size` bytes: header, optional payload, zero padding."""
    body = header + payload
    return body + bytes(size - len(body))


def make_mp3(duration: float) -> bytes:
    """Build a silent constant-bitrate MP3 stream of roughly `duration` seconds."""
    frames = int(round(duration * MP3_FRAMES_PER_SECOND))
    return mpeg_frame(MP3_FRAME_HEADER, MP3_FRAME_SIZE) * frames


def make_wav(duration: float, framerate: int = 8000) -> bytes:
    """Build a silent mono 16-bit WAV stream of exactly `duration` seconds."""
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(framerate)
        wav.writeframes(bytes(2 * int(duration * framerate)))
    return buffer.getvalue()


@pytest.fixture
def mp3_bytes():
    return make_mp3(2.0)


@pytest.fixture
def wav_bytes():
    return make_wav(2.0)


# ============================================================================
# Database Fixtures
# ============================================================================

@pytest.fixture
def db_connection():
    """Create an in-memory SQLite database with the real schema."""
    conn = sqlite3.connect(":memory:")
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    create_tables(conn)
    yield conn
    conn.close()


@pytest.fixture
def shared_db(db_connection):
    """Point every repository at the in-memory connection."""
    BaseRepository.set_shared_connection(db_connection, ":memory:")
    yield db_connection
    BaseRepository.clear_shared_connection()


@pytest.fixture
def identity_repository(shared_db):
    from joinsound.repositories.identity import IdentityRepository
    return IdentityRepository(use_shared=True)


@pytest.fixture
def sound_repository(shared_db):
    from joinsound.repositories.sound import SoundRepository
    return SoundRepository(use_shared=True)


@pytest.fixture
def settings_repository(shared_db):
    from joinsound.repositories.settings import SettingsRepository
    return SettingsRepository(use_shared=True)


@pytest.fixture
def sound_store(tmp_path):
    from joinsound.services.storage import SoundFileStore
    return SoundFileStore(tmp_path / "sounds")


@pytest.fixture
def sound_service(identity_repository, sound_repository, settings_repository, sound_store):
    from joinsound.services.sound import SoundService
    return SoundService(
        identity_repo=identity_repository,
        sound_repo=sound_repository,
        settings_repo=settings_repository,
        store=sound_store,
        max_batch_size=5,
        max_files_per_user=5,
    )


# ============================================================================
# Sample Data Fixtures
# ============================================================================

GUILD_ID = 359077662742020107
MEMBER_ID = 223144012309512192
OTHER_MEMBER_ID = 137621384733769728


@pytest.fixture
def identity(identity_repository):
    return identity_repository.resolve(GUILD_ID, MEMBER_ID)


@pytest.fixture
def other_identity(identity_repository):
    return identity_repository.resolve(GUILD_ID, OTHER_MEMBER_ID)


def add_sounds(sound_repository, identity, count, start=None):
    """Insert `count` sounds one minute apart, oldest first."""
    start = start or datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc)
    sounds = []
    for i in range(count):
        sounds.append(sound_repository.create(
            identity_id=identity.id,
            original_name=f"sound{i}.mp3",
            internal_filename=f"{identity.id}-{i}.mp3",
            mime_type="audio/mpeg",
            sound_id=f"{identity.id}-{i}",
            created_at=start + timedelta(minutes=i),
        ))
    return sounds


@pytest.fixture
def sample_sounds(sound_repository, identity):
    """Four sounds for the main identity, oldest first."""
    return add_sounds(sound_repository, identity, 4)
