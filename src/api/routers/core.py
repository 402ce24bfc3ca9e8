"""Core routes for the Story Wizard API (root and health check)."""

from api.dependencies import get_image_gen_service, get_outline_service, get_tts_service
from api.schemas import HealthResponse, RootResponse
from fastapi import APIRouter

router = APIRouter(tags=["Core"])


@router.get(
    "/",
    response_model=RootResponse,
    summary="API root",
    description="Returns API name and version.",
)
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Story Wizard API", "version": "1.0.0"}


@router.get(
    "/api/health",
    response_model=HealthResponse,
    summary="Health check",
    description="Returns server health and which providers have credentials.",
)
async def health() -> dict:
    """Health check endpoint."""
    return {
        "status": "healthy",
        "providers": {
            "gemini": get_outline_service().is_configured(),
            "imagen": get_image_gen_service().is_configured(),
            "elevenlabs": get_tts_service().is_configured(),
        },
    }
