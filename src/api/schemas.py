"""Pydantic request/response models for the Story Wizard API.

Request bodies use the camelCase keys the web client sends; fields are
exposed under snake_case names and accept either spelling.
"""

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Response Models
# =============================================================================


class RootResponse(BaseModel):
    """Root endpoint response."""

    message: str
    version: str

    model_config = {"json_schema_extra": {"examples": [{"message": "Story Wizard API", "version": "1.0.0"}]}}


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    providers: dict[str, bool] = {}

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "status": "healthy",
                    "providers": {"gemini": True, "imagen": True, "elevenlabs": False},
                }
            ]
        }
    }


# =============================================================================
# Request Models - stateless generation endpoints
# =============================================================================


class CamelModel(BaseModel):
    """Base for request bodies keyed in camelCase."""

    model_config = ConfigDict(populate_by_name=True)


class OutlineRequest(CamelModel):
    """Request body for outline generation."""

    prompt: str = ""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={"examples": [{"prompt": "A robot who learns to paint in space"}]},
    )


class RegenerateStepRequest(CamelModel):
    """Request body for regenerating a single outline step."""

    prompt: str = ""
    step_number: int | None = Field(default=None, alias="stepNumber")
    current_steps: list[dict] = Field(default_factory=list, alias="currentSteps")


class StoryboardRequest(CamelModel):
    """Request body for storyboard generation."""

    story_steps: list[dict] | None = Field(default=None, alias="storySteps")
    content_type: str | None = Field(default=None, alias="contentType")


class NarrationRequest(CamelModel):
    """Request body for narration synthesis."""

    text: str = ""
    voice_id: str | None = Field(default=None, alias="voiceId")


class ComposeVideoRequest(CamelModel):
    """Request body for video composition."""

    storyboard_image: str | None = Field(default=None, alias="storyboardImage")
    audio_url: str | None = Field(default=None, alias="audioUrl")
    story_steps: list[dict] = Field(default_factory=list, alias="storySteps")
    use_cinematic_mode: bool = Field(default=False, alias="useCinematicMode")


# =============================================================================
# Request Models - wizard sessions
# =============================================================================


class WizardIdeaRequest(BaseModel):
    """Set the idea of a wizard session."""

    idea: str


class WizardStepRequest(BaseModel):
    """Operations addressing one outline step by zero-based index."""

    index: int


class WizardEditRequest(BaseModel):
    """Overwrite a step description, or the editing buffer when index is omitted."""

    text: str
    index: int | None = None
