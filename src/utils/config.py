"""Configuration loading and validation for Storyreel."""

import os
from pathlib import Path

from dotenv import load_dotenv

# Get the project root directory (parent of src)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Load environment variables from .env file in project root
load_dotenv(PROJECT_ROOT / ".env")

STORY_MODES = ("generic", "character_focus")


def load_config() -> dict:
    """Load configuration from environment variables."""

    allowed_origins = [
        origin.strip()
        for origin in os.getenv("ALLOWED_ORIGINS", "").split(",")
        if origin.strip()
    ]

    config = {
        # Outline generation (Gemini)
        "gemini_api_key": os.getenv("GEMINI_API_KEY", ""),
        "gemini_model": os.getenv("GEMINI_MODEL", "gemini-2.0-flash"),
        # Storyboard generation (Imagen on Vertex AI)
        "imagen_api_key": os.getenv("IMAGEN_API_KEY", ""),
        "google_cloud_project_id": os.getenv("GOOGLE_CLOUD_PROJECT_ID", "your-project-id"),
        "google_cloud_location": os.getenv("GOOGLE_CLOUD_LOCATION", "us-central1"),
        # Narration (ElevenLabs) - optional, browser TTS is used without it
        "elevenlabs_api_key": os.getenv("ELEVENLABS_API_KEY", ""),
        "elevenlabs_voice_id": os.getenv("ELEVENLABS_VOICE_ID", ""),
        # Storytelling variant: generic or character-focused prompts
        "story_mode": os.getenv("STORY_MODE", "generic").strip().lower(),
        # Simulated composition
        "seconds_per_scene": int(os.getenv("SECONDS_PER_SCENE", "5")),
        "composition_latency_seconds": float(os.getenv("COMPOSITION_LATENCY_SECONDS", "5.0")),
        # Wizard pacing: delay before a fallback artifact is shown
        "fallback_delay_seconds": float(os.getenv("FALLBACK_DELAY_SECONDS", "0.0")),
        # Wizard sessions untouched this long are dropped when a new one is created
        "session_idle_seconds": float(os.getenv("SESSION_IDLE_SECONDS", "3600")),
        # API server
        "allowed_origins": allowed_origins or ["http://localhost:5173", "http://localhost:3000"],
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
        "log_json": os.getenv("LOG_JSON", "false").lower() == "true",
    }

    return config


def validate_config(config: dict) -> list[str]:
    """Validate configuration and return list of errors."""
    errors = []

    if not config.get("gemini_api_key"):
        errors.append("GEMINI_API_KEY is required for outline generation")

    if not config.get("imagen_api_key"):
        errors.append("IMAGEN_API_KEY is required for storyboard generation")

    if config.get("story_mode") not in STORY_MODES:
        errors.append(
            f"STORY_MODE must be one of {', '.join(STORY_MODES)}, got {config.get('story_mode')!r}"
        )

    if config.get("seconds_per_scene", 0) <= 0:
        errors.append("SECONDS_PER_SCENE must be positive")

    if config.get("composition_latency_seconds", 0) < 0:
        errors.append("COMPOSITION_LATENCY_SECONDS cannot be negative")

    if config.get("session_idle_seconds", 1) <= 0:
        errors.append("SESSION_IDLE_SECONDS must be positive")

    # ElevenLabs is optional: without it narration falls back to browser TTS

    return errors
