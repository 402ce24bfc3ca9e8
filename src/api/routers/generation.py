"""Stateless generation routes: outline, step, storyboard, narration, video."""

import logging

from api.dependencies import (
    get_composition_service,
    get_image_gen_service,
    get_outline_service,
    get_tts_service,
)
from api.schemas import (
    ComposeVideoRequest,
    NarrationRequest,
    OutlineRequest,
    RegenerateStepRequest,
    StoryboardRequest,
)
from fastapi import APIRouter, HTTPException
from models.results import FallbackReason, Success
from models.story import ContentClassification, SceneStep, StoryboardArtifact
from services.composition_service import CompositionRejectedError
from services.placeholders import STORYBOARD_FAILED_MESSAGE, storyboard_placeholder_url

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Generation"])


def _parse_steps(raw_steps: list[dict]) -> list[SceneStep]:
    return [SceneStep.from_dict(raw, default_number=i + 1) for i, raw in enumerate(raw_steps)]


@router.post(
    "/api/generate-outline",
    summary="Generate outline",
    description="Classify an idea as ad or story and expand it into at least five scenes.",
)
async def generate_outline(request: OutlineRequest) -> dict:
    """Generate an outline from a free-form idea."""
    if not request.prompt.strip():
        raise HTTPException(status_code=400, detail="Prompt is required")

    service = get_outline_service()
    result = await service.generate_outline(request.prompt.strip())

    if not isinstance(result, Success):
        raise HTTPException(
            status_code=500,
            detail=result.message or "Failed to generate outline",
        )

    return result.payload.to_dict()


@router.post(
    "/api/regenerate-step",
    summary="Regenerate one step",
    description="Rewrite a single outline step in the context of the whole outline.",
)
async def regenerate_step(request: RegenerateStepRequest) -> dict:
    """Regenerate exactly one step; the client keeps every other step."""
    if not request.prompt.strip():
        raise HTTPException(status_code=400, detail="Prompt is required")
    if request.step_number is None or request.step_number < 1:
        raise HTTPException(status_code=400, detail="A valid stepNumber is required")
    if request.current_steps and request.step_number > len(request.current_steps):
        raise HTTPException(
            status_code=400,
            detail=f"stepNumber {request.step_number} is outside the outline",
        )

    service = get_outline_service()
    result = await service.regenerate_step(
        request.prompt.strip(),
        request.step_number,
        _parse_steps(request.current_steps),
    )

    if not isinstance(result, Success):
        raise HTTPException(
            status_code=500,
            detail=result.message or "Failed to regenerate step",
        )

    return {"step": result.payload.to_dict()}


@router.post(
    "/api/generate-images",
    summary="Generate storyboard",
    description="Render every step as one panel of a single storyboard page. "
    "Provider failures return a placeholder image with status 200.",
)
async def generate_images(request: StoryboardRequest) -> dict:
    """Generate the storyboard page."""
    if request.story_steps is None:
        raise HTTPException(status_code=400, detail="Story steps are required")

    steps = _parse_steps(request.story_steps)
    classification = ContentClassification.parse(request.content_type)

    service = get_image_gen_service()
    result = await service.generate_storyboard(steps, classification)

    if isinstance(result, Success):
        return result.payload.to_dict()

    if result.reason == FallbackReason.NOT_CONFIGURED:
        raise HTTPException(
            status_code=500,
            detail=result.message or "Imagen API key not configured",
        )

    placeholder = result.placeholder or StoryboardArtifact(
        image=storyboard_placeholder_url(classification, len(steps)),
        is_placeholder=True,
        message=STORYBOARD_FAILED_MESSAGE,
    )
    return placeholder.to_dict()


@router.post(
    "/api/generate-audio",
    summary="Generate narration",
    description="Synthesize narration audio. Falls back to browser TTS without an error status.",
)
async def generate_audio(request: NarrationRequest) -> dict:
    """Generate narration or tell the client to synthesize locally."""
    if not request.text.strip():
        raise HTTPException(status_code=400, detail="Text is required")

    service = get_tts_service()
    result = await service.generate_narration(request.text, request.voice_id)

    # Both outcomes carry a NarrationArtifact
    artifact = result.payload if isinstance(result, Success) else result.placeholder
    return artifact.to_dict()


@router.post(
    "/api/compose-video",
    summary="Compose video",
    description="Combine the storyboard and narration into a (simulated) video.",
)
async def compose_video(request: ComposeVideoRequest) -> dict:
    """Compose the final video."""
    service = get_composition_service()
    try:
        video = await service.compose(
            storyboard_image=request.storyboard_image,
            audio_url=request.audio_url,
            steps=_parse_steps(request.story_steps),
            cinematic_mode=request.use_cinematic_mode,
        )
    except CompositionRejectedError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return video.to_dict()
