"""Service singletons and dependency injection for the Story Wizard API."""

import logging

from models.story import StoryMode
from services.composition_service import CompositionService
from services.image_generation_service import ImageGenerationService
from services.outline_service import OutlineService
from services.story_repository import InMemoryStoryRepository
from services.tts_service import TTSService
from story_wizard import StoryWizard
from utils.config import STORY_MODES, load_config
from utils.progress import ProgressEstimator

logger = logging.getLogger(__name__)

# Service singletons
_outline_service: OutlineService | None = None
_image_gen_service: ImageGenerationService | None = None
_tts_service: TTSService | None = None
_composition_service: CompositionService | None = None
_story_repository: InMemoryStoryRepository | None = None


def get_story_mode() -> StoryMode:
    """Storytelling variant configured for this deployment."""
    mode = load_config().get("story_mode", StoryMode.GENERIC.value)
    if mode not in STORY_MODES:
        logger.warning(f"Unknown STORY_MODE {mode!r}, using generic")
        return StoryMode.GENERIC
    return StoryMode(mode)


def get_outline_service() -> OutlineService:
    """Get or create the outline service instance."""
    global _outline_service
    if _outline_service is None:
        config = load_config()
        _outline_service = OutlineService(
            api_key=config.get("gemini_api_key", ""),
            model_name=config.get("gemini_model", "gemini-2.0-flash"),
            story_mode=get_story_mode(),
        )
    return _outline_service


def get_image_gen_service() -> ImageGenerationService:
    """Get or create the image generation service instance."""
    global _image_gen_service
    if _image_gen_service is None:
        config = load_config()
        _image_gen_service = ImageGenerationService(
            api_key=config.get("imagen_api_key", ""),
            project_id=config.get("google_cloud_project_id", ""),
            location=config.get("google_cloud_location", "us-central1"),
            story_mode=get_story_mode(),
        )
    return _image_gen_service


def get_tts_service() -> TTSService:
    """Get or create the TTS service instance."""
    global _tts_service
    if _tts_service is None:
        config = load_config()
        _tts_service = TTSService(
            api_key=config.get("elevenlabs_api_key", ""),
            default_voice_id=config.get("elevenlabs_voice_id", ""),
        )
    return _tts_service


def get_composition_service() -> CompositionService:
    """Get or create the composition service instance."""
    global _composition_service
    if _composition_service is None:
        config = load_config()
        _composition_service = CompositionService(
            seconds_per_scene=config.get("seconds_per_scene", 5),
            latency_seconds=config.get("composition_latency_seconds", 5.0),
        )
    return _composition_service


def get_story_repository() -> InMemoryStoryRepository:
    """Get or create the story repository instance."""
    global _story_repository
    if _story_repository is None:
        _story_repository = InMemoryStoryRepository()
    return _story_repository


def create_wizard(progress: ProgressEstimator | None = None) -> StoryWizard:
    """Build a new wizard wired to the shared services."""
    config = load_config()
    return StoryWizard(
        outline_service=get_outline_service(),
        image_service=get_image_gen_service(),
        tts_service=get_tts_service(),
        composition_service=get_composition_service(),
        repository=get_story_repository(),
        progress=progress,
        fallback_delay=config.get("fallback_delay_seconds", 0.0),
    )


async def close_services() -> None:
    """Close HTTP clients held by the service singletons."""
    global _image_gen_service, _tts_service
    if _image_gen_service is not None:
        await _image_gen_service.close()
        _image_gen_service = None
    if _tts_service is not None:
        await _tts_service.close()
        _tts_service = None
