"""Configuration constants, render defaults, and .env loading.

WHY: Centralizes every tunable value (API endpoint, upload location,
segmentation batch size, fade lengths, composition geometry) so they are
easy to find and override without touching logic.

HOW: python-dotenv loads the .env file on import. Constants are
module-level values read from the environment with plain defaults. The
load_api_key() function gives a clear error when the key is missing.

RULES:
- API key is loaded from .env via python-dotenv, never hardcoded
- All defaults can be overridden via environment variables
- Composition defaults mirror the rendering project (30 fps, 1920x1080)
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

from video_captioner.errors import ConfigurationError

# Load .env from the project root (where the script is run from)
load_dotenv()

# ---------------------------------------------------------------------------
# Transcription service
# ---------------------------------------------------------------------------

ASSEMBLYAI_BASE_URL = os.getenv("ASSEMBLYAI_BASE_URL", "https://api.assemblyai.com/v2")

# ---------------------------------------------------------------------------
# Uploads
# ---------------------------------------------------------------------------

UPLOADS_DIR = os.getenv("UPLOADS_DIR", os.path.join("public", "uploads"))
UPLOADS_URL_PREFIX = "/uploads"

SUPPORTED_VIDEO_FORMATS: set[str] = {
    ".mp4", ".mov", ".m4v", ".webm", ".mkv", ".avi",
}
"""Video file extensions accepted by the CLI (lowercase, with dot)."""

# ---------------------------------------------------------------------------
# Segmentation and rendering
# ---------------------------------------------------------------------------

WORDS_PER_SEGMENT = int(os.getenv("WORDS_PER_SEGMENT", "8"))
FADE_IN_FRAMES = int(os.getenv("FADE_IN_FRAMES", "5"))
FADE_OUT_FRAMES = int(os.getenv("FADE_OUT_FRAMES", "5"))

VIDEO_FPS = int(os.getenv("VIDEO_FPS", "30"))
VIDEO_WIDTH = int(os.getenv("VIDEO_WIDTH", "1920"))
VIDEO_HEIGHT = int(os.getenv("VIDEO_HEIGHT", "1080"))
DEFAULT_DURATION_IN_FRAMES = 200
"""Composition length used when no captions are available yet."""

VIDEO_CAPTION_COMP_NAME = "VideoWithCaptions"
DEFAULT_CAPTION_STYLE = os.getenv("DEFAULT_CAPTION_STYLE", "bottom-centered")


def load_api_key() -> str:
    """Load the AssemblyAI API key from the environment.

    WHY: The key is required for every transcription call. Loading it
    from the environment (via .env) keeps it out of source code.

    RULES:
    - Raises ConfigurationError if the key is missing or empty
    - Never returns a default/placeholder value
    """
    key = os.getenv("ASSEMBLYAI_API_KEY", "").strip()
    if not key:
        raise ConfigurationError(
            "AssemblyAI API key not configured. "
            "Please set ASSEMBLYAI_API_KEY environment variable."
        )
    return key
