"""Shared pytest fixtures for Storyreel tests."""

import json
import sys
from pathlib import Path
from typing import Callable, Dict, List
from unittest.mock import Mock

import httpx
import pytest

# Add src directory to path for imports
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from models.story import SceneStep  # noqa: E402
from services.composition_service import CompositionService  # noqa: E402
from services.image_generation_service import ImageGenerationService  # noqa: E402
from services.outline_service import OutlineService  # noqa: E402
from services.story_repository import InMemoryStoryRepository  # noqa: E402
from services.tts_service import TTSService  # noqa: E402
from story_wizard import StoryWizard  # noqa: E402
from utils.progress import ProgressEstimator  # noqa: E402

ROBOT_IDEA = "A robot who learns to paint in space"

# 1x1 transparent PNG
TINY_PNG_B64 = (
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)


@pytest.fixture
def sample_config() -> Dict:
    """Sample configuration for testing."""
    return {
        "gemini_api_key": "test_gemini_key",
        "gemini_model": "gemini-2.0-flash",
        "imagen_api_key": "test_imagen_key",
        "google_cloud_project_id": "test-project",
        "google_cloud_location": "us-central1",
        "elevenlabs_api_key": "",
        "elevenlabs_voice_id": "",
        "story_mode": "generic",
        "seconds_per_scene": 5,
        "composition_latency_seconds": 0.0,
        "fallback_delay_seconds": 0.0,
        "session_idle_seconds": 3600.0,
        "allowed_origins": ["http://localhost:5173"],
        "log_level": "INFO",
        "log_json": False,
    }


@pytest.fixture
def sample_steps() -> List[SceneStep]:
    """Five scene steps for the robot painter story."""
    titles = ["Launch", "First Brush", "Cosmic Palette", "The Gallery", "Homecoming"]
    return [
        SceneStep(
            sequence_number=i + 1,
            title=title,
            description=f"Scene {i + 1}: the robot paints among the stars.",
        )
        for i, title in enumerate(titles)
    ]


@pytest.fixture
def outline_reply() -> Callable[..., str]:
    """Build the JSON text Gemini returns for an outline."""

    def build(content_type: str = "story", step_count: int = 5) -> str:
        return json.dumps(
            {
                "contentType": content_type,
                "steps": [
                    {
                        "number": i + 1,
                        "title": f"Scene {i + 1} title",
                        "description": f"Scene {i + 1} description",
                    }
                    for i in range(step_count)
                ],
            }
        )

    return build


@pytest.fixture
def mock_gemini_client(outline_reply):
    """Mock google-genai client answering with a five-step story outline.

    Tests replace ``models.generate_content`` to change the answer.
    """
    client = Mock()
    client.models.generate_content = Mock(return_value=Mock(text=outline_reply()))
    return client


@pytest.fixture
def outline_service(mock_gemini_client) -> OutlineService:
    """Configured outline service backed by the mock Gemini client."""
    return OutlineService(api_key="test_gemini_key", client=mock_gemini_client)


def _mock_http_client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    """httpx client whose requests are answered by ``handler``."""
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def make_http_client() -> Callable[[Callable[[httpx.Request], httpx.Response]], httpx.AsyncClient]:
    """Factory for httpx clients backed by a request handler."""
    return _mock_http_client


def imagen_success(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200,
        json={"predictions": [{"bytesBase64Encoded": TINY_PNG_B64, "mimeType": "image/png"}]},
    )


def imagen_quota(request: httpx.Request) -> httpx.Response:
    return httpx.Response(429, json={"error": {"message": "Quota exceeded for aiplatform"}})


@pytest.fixture
async def image_service():
    """Configured Imagen service answering with a tiny PNG."""
    service = ImageGenerationService(api_key="test_imagen_key", project_id="test-project")
    await service.client.aclose()
    service.client = _mock_http_client(imagen_success)
    yield service
    await service.close()


@pytest.fixture
async def tts_service():
    """TTS service without an ElevenLabs key (browser TTS)."""
    service = TTSService(api_key="")
    yield service
    await service.close()


@pytest.fixture
def composition_service() -> CompositionService:
    """Composition service without simulated latency."""
    return CompositionService(seconds_per_scene=5, latency_seconds=0)


@pytest.fixture
def repository() -> InMemoryStoryRepository:
    return InMemoryStoryRepository()


@pytest.fixture
def wizard(outline_service, image_service, tts_service, composition_service, repository) -> StoryWizard:
    """Wizard wired to stubbed providers, with a fast progress ticker."""
    return StoryWizard(
        outline_service=outline_service,
        image_service=image_service,
        tts_service=tts_service,
        composition_service=composition_service,
        repository=repository,
        progress=ProgressEstimator(interval=0.01),
    )
