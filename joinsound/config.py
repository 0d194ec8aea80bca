"""
Centralized configuration for the join sound API.

Module-level constants hold the fixed limits and allow-lists; the Config
class holds the deployment settings read from the environment (.env).
"""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# ============================================================================
# Paths
# ============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.absolute()

DATA_DIR = PROJECT_ROOT / "data"

LOGS_DIR = PROJECT_ROOT / "logs"


# ============================================================================
# Upload Limits
# ============================================================================

# Maximum duration of a join sound (seconds)
MAX_AUDIO_DURATION = 5

# Whole request body cap for multipart uploads
MAX_PAYLOAD_SIZE = 50 * 1024 * 1024

# Per-file cap
MAX_UPLOAD_SIZE = 10 * 1024 * 1024

MAX_FILES_PER_USER = 5
MAX_BATCH_SIZE = 5

MAX_FILENAME_LEN = 255

# Bytes read from the head of a file for magic-byte detection
SNIFF_BYTES = 8192


# ============================================================================
# Content Types
# ============================================================================

# Canonical content type -> storage extension. Both the validator and the
# storage filename generator read this table.
ALLOWED_TYPES = {
    "audio/mpeg": ".mp3",
    "audio/wav": ".wav",
}

# Detector MIME values that mean the same thing as a canonical type
MIME_ALIASES = {
    "audio/x-wav": "audio/wav",
    "audio/wave": "audio/wav",
    "audio/vnd.wave": "audio/wav",
    "audio/mp3": "audio/mpeg",
}


# ============================================================================
# Playback Settings
# ============================================================================

MODE_SINGLE = "single"
MODE_RANDOM = "random"

ALLOWED_MODES = (MODE_SINGLE, MODE_RANDOM)

DEFAULT_MODE = MODE_SINGLE


class Config:
    """Deployment settings, read from the environment."""

    DB_PATH = os.getenv("DB_PATH", str(DATA_DIR / "main.db"))
    SOUNDS_PATH = os.getenv("SOUNDS_PATH", str(DATA_DIR / "sounds"))
    LOGS_DIR = os.getenv("LOGS_DIR", str(LOGS_DIR))

    WEB_HOST = os.getenv("WEB_HOST", "0.0.0.0")
    PORT = int(os.getenv("PORT", "8081"))

    MAX_FILES_PER_USER = int(os.getenv("MAX_FILES_PER_USER", str(MAX_FILES_PER_USER)))
    MAX_BATCH_SIZE = int(os.getenv("MAX_BATCH_SIZE", str(MAX_BATCH_SIZE)))

    # Auth0 tenant whose RS256 tokens the private routes accept
    AUTH0_DOMAIN = os.getenv("AUTH0_DOMAIN")
    AUTH0_AUDIENCE = os.getenv("AUTH0_AUDIENCE")

    @staticmethod
    def validate():
        """Return a list of warnings about missing optional settings."""
        warnings = []
        if not Config.AUTH0_DOMAIN:
            warnings.append("AUTH0_DOMAIN is not set; private routes will reject every request.")
        if not Config.AUTH0_AUDIENCE:
            warnings.append("AUTH0_AUDIENCE is not set; private routes will reject every request.")
        return warnings
